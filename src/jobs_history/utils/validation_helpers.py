"""Validation helper functions for persisted and decoded values."""

from datetime import date, datetime
from typing import Any, Optional

from ..persistence.models import TimePeriod


def sanitize_time_period(value: Any) -> Optional[TimePeriod]:
    """Return the TimePeriod named by ``value`` or None if it is not one.

    Args:
        value: Stored or configured period string (e.g. ``"last48h"``)

    Returns:
        Matching TimePeriod or None if invalid
    """
    if isinstance(value, TimePeriod):
        return value
    if not isinstance(value, str):
        return None

    value = value.strip()
    for period in TimePeriod:
        if period.value == value:
            return period

    return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into a timezone-aware datetime.

    A trailing ``Z`` is accepted. Naive timestamps are taken as local time.
    Returns None for anything that is not a valid timestamp.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def parse_calendar_date(value: Any) -> Optional[date]:
    """Parse a stored date (``YYYY-MM-DD`` or a full ISO timestamp) into a date.

    Full timestamps are converted to local time before the date is taken, so
    a value written as ``2024-01-01T00:00:00+01:00`` round-trips to the same
    calendar day on that machine.
    """
    if isinstance(value, datetime):
        return value.astimezone().date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None

    parsed = parse_timestamp(text)
    if parsed is None:
        return None
    return parsed.astimezone().date()
