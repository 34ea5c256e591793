"""Tests for validation helper functions."""

from datetime import date, datetime, timedelta, timezone

from jobs_history.persistence.models import TimePeriod
from jobs_history.utils.validation_helpers import (
    parse_calendar_date,
    parse_timestamp,
    sanitize_time_period,
)


class TestSanitizeTimePeriod:
    """Test sanitize_time_period function."""

    def test_valid_values(self):
        assert sanitize_time_period("last24h") is TimePeriod.LAST_24H
        assert sanitize_time_period(" thisMonth ") is TimePeriod.THIS_MONTH
        assert sanitize_time_period(TimePeriod.THIS_WEEK) is TimePeriod.THIS_WEEK

    def test_invalid_values_return_none(self):
        assert sanitize_time_period("LAST24H") is None
        assert sanitize_time_period("lastYear") is None
        assert sanitize_time_period("") is None
        assert sanitize_time_period(None) is None
        assert sanitize_time_period(48) is None


class TestParseTimestamp:
    """Test parse_timestamp function."""

    def test_utc_suffix(self):
        parsed = parse_timestamp("2024-01-02T10:05:00Z")
        assert parsed == datetime(2024, 1, 2, 10, 5, tzinfo=timezone.utc)

    def test_offset_is_kept(self):
        parsed = parse_timestamp("2024-01-02T10:05:00+02:00")
        assert parsed.utcoffset() == timedelta(hours=2)

    def test_naive_becomes_aware(self):
        assert parse_timestamp("2024-01-02T10:05:00").tzinfo is not None

    def test_invalid_returns_none(self):
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(1704189900) is None


class TestParseCalendarDate:
    """Test parse_calendar_date function."""

    def test_plain_date(self):
        assert parse_calendar_date("2024-01-03") == date(2024, 1, 3)

    def test_local_timestamp(self):
        local = datetime(2024, 1, 3, 12, 0).astimezone()
        assert parse_calendar_date(local.isoformat()) == date(2024, 1, 3)

    def test_invalid_returns_none(self):
        assert parse_calendar_date("2024-13-45") is None
        assert parse_calendar_date("soon") is None
        assert parse_calendar_date(None) is None
