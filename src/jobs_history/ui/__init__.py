"""View-side logic for the job history table (no rendering)."""

from .history_controller import HistoryController
from .history_state import HistoryViewState, ViewStatus
from .pagination_logic import PaginationMode, PaginationStats
from .scheduling import Debouncer, ScheduledValue

__all__ = [
    "HistoryController",
    "HistoryViewState",
    "ViewStatus",
    "PaginationMode",
    "PaginationStats",
    "Debouncer",
    "ScheduledValue",
]
