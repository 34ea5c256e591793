"""Shared pytest fixtures for jobs_history tests."""

import asyncio
from datetime import datetime

import pytest

from jobs_history.exceptions import HistoryFetchError
from jobs_history.persistence.models import (
    PAGE_SIZE,
    HistoryPage,
    JobExecutionRecord,
    JobStatus,
)


class FakeFetcher:
    """In-memory stand-in for HistoryFetcher that behaves like the capped backend."""

    def __init__(self, records=(), total=None, fail_at_offset=None, delay=0.0):
        self.records = list(records)
        self.total = total
        self.fail_at_offset = fail_at_offset
        self.delay = delay
        self.calls = []

    async def fetch_page(self, limit, offset, only_mine, hours_back):
        self.calls.append((limit, offset, only_mine, hours_back))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_at_offset is not None and offset >= self.fail_at_offset:
            raise HistoryFetchError("backend unavailable", status_code=503)
        rows = self.records[offset:offset + PAGE_SIZE]
        total = len(self.records) if self.total is None else self.total
        return HistoryPage(records=tuple(rows), total=total, limit=PAGE_SIZE, offset=offset)

    @property
    def offsets(self):
        return [call[1] for call in self.calls]


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path):
    """Isolate tests from real config by using a temp HOME."""
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def make_record():
    """Factory for JobExecutionRecord instances."""
    counter = {"n": 0}

    def _make(
        job_name="deploy-service",
        build_number=None,
        status="success",
        triggered_by="alice@example.com",
        triggered_by_name="Alice Doe",
        last_polled_at=None,
        duration=None,
    ):
        counter["n"] += 1
        n = counter["n"]
        return JobExecutionRecord(
            id=f"job-{n}",
            job_name=job_name,
            build_number=n if build_number is None else build_number,
            status=JobStatus.from_raw(status),
            raw_status=status,
            last_polled_at=last_polled_at or datetime(2024, 1, 2, 12, 0).astimezone(),
            triggered_by=triggered_by,
            triggered_by_name=triggered_by_name,
            duration=duration,
            jaas_name="jaas-main",
            base_job_url=f"https://jenkins.example.com/job/{job_name}/",
            build_url=f"https://jenkins.example.com/job/{job_name}/{n}/",
        )

    return _make


@pytest.fixture
def fake_fetcher():
    """Factory for FakeFetcher instances."""
    return FakeFetcher


@pytest.fixture
def sample_payload():
    """Raw backend response body with one job."""
    return {
        "jobs": [
            {
                "id": "9b1f",
                "createdAt": "2024-01-02T10:00:00Z",
                "jaasName": "jaas-main",
                "jobName": "deploy-service",
                "baseJobUrl": "https://jenkins.example.com/job/deploy-service/",
                "status": "SUCCESS",
                "buildNumber": 42,
                "buildUrl": "https://jenkins.example.com/job/deploy-service/42/",
                "duration": 125000,
                "triggeredBy": "alice@example.com",
                "parameters": {"ENV": "staging", "DRY_RUN": False},
                "metadata": {"name": "Alice Doe"},
                "lastPolledAt": "2024-01-02T10:05:00Z",
            }
        ],
        "limit": 10,
        "offset": 0,
        "total": 1,
    }
