"""Tests for history data models."""

from datetime import date, datetime

import pytest

from jobs_history.persistence.models import DateRange, JobStatus
from jobs_history.ui.history_filter_logic import filter_by_date_range


def test_job_status_from_raw():
    assert JobStatus.from_raw("SUCCESS") is JobStatus.SUCCESS
    assert JobStatus.from_raw("failed") is JobStatus.FAILURE
    assert JobStatus.from_raw(" Running ") is JobStatus.RUNNING
    assert JobStatus.from_raw("UNSTABLE") is JobStatus.OTHER
    assert JobStatus.from_raw(None) is JobStatus.OTHER


def test_date_range_needs_from_to_be_active():
    assert DateRange().is_active is False
    assert DateRange().is_empty is True
    assert DateRange(to_date=date(2024, 1, 3)).is_active is False
    assert DateRange(to_date=date(2024, 1, 3)).is_empty is False
    assert DateRange(from_date=date(2024, 1, 1)).is_active is True


def test_record_is_immutable(make_record):
    record = make_record()
    with pytest.raises(AttributeError):
        record.job_name = "other"
    with pytest.raises(TypeError):
        record.parameters["ENV"] = "prod"


def test_record_to_dict(make_record):
    record = make_record(job_name="build-api", build_number=7, status="aborted")
    data = record.to_dict()
    assert data["jobName"] == "build-api"
    assert data["buildNumber"] == 7
    assert data["status"] == "aborted"
    assert data["lastPolledAt"] is not None


def test_naive_timestamp_becomes_local_aware(make_record):
    record = make_record(last_polled_at=datetime(2024, 1, 2, 12, 0))
    assert record.last_polled_at.tzinfo is not None
    assert record.last_polled_at.replace(tzinfo=None) == datetime(2024, 1, 2, 12, 0)


def test_naive_record_can_be_range_filtered(make_record):
    record = make_record(last_polled_at=datetime(2024, 1, 2, 12, 0))
    date_range = DateRange(from_date=date(2024, 1, 1), to_date=date(2024, 1, 3))
    assert filter_by_date_range([record], date_range) == [record]
