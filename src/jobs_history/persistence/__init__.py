"""Persistence layer: history data models and stored view preferences."""

from .models import (
    DEFAULT_TIME_PERIOD,
    MAX_ACCUMULATED_RECORDS,
    PAGE_SIZE,
    DateRange,
    HistoryPage,
    JobExecutionRecord,
    JobStatus,
    ServiceFilter,
    TimePeriod,
)
from .preferences import HistoryPreferences, LocalStorage, load_preferences

__all__ = [
    "DEFAULT_TIME_PERIOD",
    "MAX_ACCUMULATED_RECORDS",
    "PAGE_SIZE",
    "DateRange",
    "HistoryPage",
    "JobExecutionRecord",
    "JobStatus",
    "ServiceFilter",
    "TimePeriod",
    "HistoryPreferences",
    "LocalStorage",
    "load_preferences",
]
