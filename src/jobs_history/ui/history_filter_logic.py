"""Pure logic helpers filtering history records for display.

Stages run in a fixed order (service, date range, text search) so that
each later stage only sees what the earlier ones let through.
"""

from typing import Iterable, Optional, Sequence

from ..persistence.models import DateRange, JobExecutionRecord, ServiceFilter
from .time_window_logic import end_of_day, start_of_day


def filter_by_service(
    records: Iterable[JobExecutionRecord],
    service: Optional[ServiceFilter],
) -> list[JobExecutionRecord]:
    """Keep records whose job name exactly matches the active service filter."""
    if service is None:
        return list(records)
    return [record for record in records if record.job_name == service.job_name]


def is_record_in_date_range(record: JobExecutionRecord, date_range: DateRange) -> bool:
    """Inclusive check of ``last_polled_at`` against the normalized range."""
    if not date_range.is_active:
        return True
    polled_at = record.last_polled_at
    if polled_at < start_of_day(date_range.from_date):
        return False
    if date_range.to_date is None:
        return True
    return polled_at <= end_of_day(date_range.to_date)


def filter_by_date_range(
    records: Iterable[JobExecutionRecord],
    date_range: Optional[DateRange],
) -> list[JobExecutionRecord]:
    if date_range is None or not date_range.is_active:
        return list(records)
    return [record for record in records if is_record_in_date_range(record, date_range)]


def record_matches_search(record: JobExecutionRecord, needle: str) -> bool:
    """Case-insensitive substring match over the searchable fields."""
    haystacks = (
        record.job_name,
        record.triggered_by_name or "",
        record.status_text,
        str(record.build_number),
    )
    return any(needle in (value or "").lower() for value in haystacks)


def filter_by_search(
    records: Iterable[JobExecutionRecord],
    term: str,
) -> list[JobExecutionRecord]:
    """Filter by text search; a blank term passes everything through."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(records)
    return [record for record in records if record_matches_search(record, needle)]


def apply_filter_pipeline(
    records: Sequence[JobExecutionRecord],
    service: Optional[ServiceFilter] = None,
    date_range: Optional[DateRange] = None,
    search_term: str = "",
) -> list[JobExecutionRecord]:
    """Run service, date-range and search filters over ``records`` in that order."""
    filtered = filter_by_service(records, service)
    filtered = filter_by_date_range(filtered, date_range)
    return filter_by_search(filtered, search_term)
