"""jobs_history - Job execution history with capped backend pagination."""

__version__ = "0.1.0"

from .config import (
    JobsHistoryConfig,
    BackendConfig,
    HistoryConfig,
    PreferencesConfig,
)
from .exceptions import (
    JobsHistoryError,
    ConfigurationError,
    HistoryFetchError,
    PreferencesError,
)
from .persistence import (
    PAGE_SIZE,
    DateRange,
    HistoryPage,
    JobExecutionRecord,
    JobStatus,
    LocalStorage,
    ServiceFilter,
    TimePeriod,
)
from .service import HistoryFetcher, JobRunnerClient
from .ui import HistoryController, PaginationMode, ViewStatus

__all__ = [
    # Configuration
    "JobsHistoryConfig",
    "BackendConfig",
    "HistoryConfig",
    "PreferencesConfig",
    # Exceptions
    "JobsHistoryError",
    "ConfigurationError",
    "HistoryFetchError",
    "PreferencesError",
    # Data model
    "PAGE_SIZE",
    "DateRange",
    "HistoryPage",
    "JobExecutionRecord",
    "JobStatus",
    "LocalStorage",
    "ServiceFilter",
    "TimePeriod",
    # Backend access
    "HistoryFetcher",
    "JobRunnerClient",
    # View logic
    "HistoryController",
    "PaginationMode",
    "ViewStatus",
]
