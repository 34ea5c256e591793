"""Pure logic helpers resolving the history look-back window."""

import math
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, Union

from ..persistence.models import DEFAULT_TIME_PERIOD, DateRange, TimePeriod

_HOUR_SECONDS = 3600.0
_DEFAULT_HOURS = 48

END_OF_DAY = time(23, 59, 59, 999000)


def _now() -> datetime:
    return datetime.now().astimezone()


def start_of_day(day: date) -> datetime:
    """Local 00:00:00.000 on ``day`` (timezone-aware)."""
    return datetime.combine(day, time.min).astimezone()


def end_of_day(day: date) -> datetime:
    """Local 23:59:59.999 on ``day`` (timezone-aware)."""
    return datetime.combine(day, END_OF_DAY).astimezone()


def hours_between(start: datetime, end: datetime) -> int:
    """Whole hours from ``start`` to ``end``, rounded up."""
    return math.ceil((end - start).total_seconds() / _HOUR_SECONDS)


def hours_since_week_start(now: datetime | None = None) -> int:
    """Hours since the most recent Sunday 00:00 local time."""
    current = (now or _now()).astimezone()
    days_since_sunday = (current.weekday() + 1) % 7
    sunday = current.date() - timedelta(days=days_since_sunday)
    return hours_between(start_of_day(sunday), current)


def hours_since_month_start(now: datetime | None = None) -> int:
    """Hours since the 1st of the current month at 00:00 local time."""
    current = (now or _now()).astimezone()
    return hours_between(start_of_day(current.date().replace(day=1)), current)


TIME_PERIOD_HOURS: Dict[TimePeriod, Union[int, Callable[..., int]]] = {
    TimePeriod.LAST_24H: 24,
    TimePeriod.LAST_48H: 48,
    TimePeriod.THIS_WEEK: hours_since_week_start,
    TimePeriod.THIS_MONTH: hours_since_month_start,
}

TIME_PERIOD_LABELS: Dict[TimePeriod, str] = {
    TimePeriod.LAST_24H: "Last 24 hours",
    TimePeriod.LAST_48H: "Last 48 hours",
    TimePeriod.THIS_WEEK: "This week",
    TimePeriod.THIS_MONTH: "This month",
}


def hours_for_period(period: TimePeriod, now: datetime | None = None) -> int:
    """Look-back hours for a predefined period (48 for unknown values)."""
    hours = TIME_PERIOD_HOURS.get(period, _DEFAULT_HOURS)
    if callable(hours):
        hours = hours(now)
    return max(1, hours)


def period_label(period: TimePeriod) -> str:
    return TIME_PERIOD_LABELS.get(period, TIME_PERIOD_LABELS[DEFAULT_TIME_PERIOD])


def resolve_hours_back(
    period: TimePeriod,
    date_range: DateRange | None = None,
    now: datetime | None = None,
) -> int:
    """Return the hours-back value for the backend query.

    An active custom range takes priority over ``period``: the window runs
    from the start of ``from_date`` to the end of ``to_date`` (or now).
    """
    if date_range is not None and date_range.is_active:
        anchor = end_of_day(date_range.to_date) if date_range.to_date else (now or _now())
        return max(1, hours_between(start_of_day(date_range.from_date), anchor))
    return hours_for_period(period, now)
