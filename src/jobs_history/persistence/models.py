"""Data models for job execution history."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

# The backend caps every history request at this many rows.
PAGE_SIZE = 10
MAX_ACCUMULATED_RECORDS = 1000


class JobStatus(Enum):
    """Normalized execution status of a job run."""

    SUCCESS = "success"
    FAILURE = "failure"
    RUNNING = "running"
    QUEUED = "queued"
    PENDING = "pending"
    ABORTED = "aborted"
    OTHER = "other"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> "JobStatus":
        """Map a backend status string onto a JobStatus (case-insensitive)."""
        normalized = (value or "").strip().lower()
        if normalized == "failed":
            return cls.FAILURE
        for status in cls:
            if status.value == normalized:
                return status
        return cls.OTHER


class TimePeriod(Enum):
    """Predefined look-back windows for the history query."""

    LAST_24H = "last24h"
    LAST_48H = "last48h"
    THIS_WEEK = "thisWeek"
    THIS_MONTH = "thisMonth"


DEFAULT_TIME_PERIOD = TimePeriod.LAST_48H


@dataclass(frozen=True)
class JobExecutionRecord:
    """Single job execution as reported by the job runner."""

    id: str
    job_name: str
    build_number: int
    status: JobStatus
    last_polled_at: datetime

    raw_status: str = ""
    triggered_by: Optional[str] = None
    triggered_by_name: Optional[str] = None
    duration: Optional[float] = None  # seconds
    parameters: Mapping[str, Any] = field(default_factory=dict)

    jaas_name: str = ""
    base_job_url: str = ""
    build_url: str = ""

    def __post_init__(self):
        # Freeze the parameters mapping so records can be shared safely.
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        # Naive timestamps are local time; comparisons need aware values.
        if self.last_polled_at is not None and self.last_polled_at.tzinfo is None:
            object.__setattr__(self, "last_polled_at", self.last_polled_at.astimezone())

    @property
    def status_text(self) -> str:
        """Status string as displayed to the user."""
        return self.raw_status or self.status.value

    def to_dict(self) -> dict:
        """
        Serialize to dictionary for JSON export.

        Returns:
            Dictionary representation with all fields
        """
        return {
            "id": self.id,
            "jobName": self.job_name,
            "buildNumber": self.build_number,
            "status": self.status_text,
            "triggeredBy": self.triggered_by,
            "triggeredByName": self.triggered_by_name,
            "lastPolledAt": self.last_polled_at.isoformat() if self.last_polled_at else None,
            "duration": self.duration,
            "parameters": dict(self.parameters),
            "jaasName": self.jaas_name,
            "baseJobUrl": self.base_job_url,
            "buildUrl": self.build_url,
        }


@dataclass(frozen=True)
class HistoryPage:
    """One page of history plus the server-side total for the query."""

    records: Tuple[JobExecutionRecord, ...]
    total: int
    limit: int = PAGE_SIZE
    offset: int = 0

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class ServiceFilter:
    """Restricts the history view to one job."""

    job_name: str
    title: str = ""


@dataclass(frozen=True)
class DateRange:
    """Custom calendar date range; only active when ``from_date`` is set."""

    from_date: Optional[date] = None
    to_date: Optional[date] = None

    @property
    def is_active(self) -> bool:
        return self.from_date is not None

    @property
    def is_empty(self) -> bool:
        return self.from_date is None and self.to_date is None
