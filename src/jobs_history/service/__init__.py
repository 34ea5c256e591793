"""Backend access: HTTP client, page fetcher and full-set accumulator."""

from .accumulator import (
    AccumulationResult,
    StopReason,
    accumulate_service_history,
    iter_history_pages,
)
from .client import JobRunnerClient
from .history_client import HistoryFetcher

__all__ = [
    "AccumulationResult",
    "StopReason",
    "accumulate_service_history",
    "iter_history_pages",
    "JobRunnerClient",
    "HistoryFetcher",
]
