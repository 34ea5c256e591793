"""Tests for the history HTTP client and page decoding."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from jobs_history.config import BackendConfig
from jobs_history.exceptions import HistoryFetchError
from jobs_history.persistence.models import JobStatus
from jobs_history.service.client import JobRunnerClient
from jobs_history.service.history_client import HistoryFetcher


def _client_with(handler):
    config = BackendConfig(base_url="http://runner.test")
    http = httpx.AsyncClient(base_url=config.base_url, transport=httpx.MockTransport(handler))
    return JobRunnerClient(config, http_client=http)


class TestJobRunnerClient:

    @pytest.mark.asyncio
    async def test_sends_history_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"jobs": [], "total": 0})

        client = _client_with(handler)
        body = await client.get_job_history(limit=10, offset=20, only_mine=True, last_updated=48)

        assert body == {"jobs": [], "total": 0}
        request = seen[0]
        assert request.url.path == "/self-service/jenkins/jobs"
        assert request.url.params["limit"] == "10"
        assert request.url.params["offset"] == "20"
        assert request.url.params["only_mine"] == "true"
        assert request.url.params["last_updated"] == "48"

    @pytest.mark.asyncio
    async def test_only_mine_false(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={})

        await _client_with(handler).get_job_history(10, 0, False, 24)
        assert seen[0].url.params["only_mine"] == "false"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        client = _client_with(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(HistoryFetchError) as exc_info:
            await client.get_job_history(10, 0, True, 48)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(HistoryFetchError, match="Could not reach"):
            await _client_with(handler).get_job_history(10, 0, True, 48)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = _client_with(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(HistoryFetchError, match="Invalid history response"):
            await client.get_job_history(10, 0, True, 48)

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        http = MagicMock()
        http.aclose = AsyncMock()
        client = JobRunnerClient(BackendConfig(), http_client=http)

        async with client:
            pass

        http.aclose.assert_not_called()


class TestHistoryFetcher:

    def _fetcher(self, payload):
        client = MagicMock()
        client.get_job_history = AsyncMock(return_value=payload)
        return HistoryFetcher(client), client

    @pytest.mark.asyncio
    async def test_decodes_page(self, sample_payload):
        fetcher, _ = self._fetcher(sample_payload)

        page = await fetcher.fetch_page(10, 0, True, 48)

        assert page.total == 1
        assert len(page) == 1
        record = page.records[0]
        assert record.id == "9b1f"
        assert record.job_name == "deploy-service"
        assert record.build_number == 42
        assert record.status is JobStatus.SUCCESS
        assert record.status_text == "SUCCESS"
        assert record.triggered_by == "alice@example.com"
        assert record.triggered_by_name == "Alice Doe"
        assert record.duration == 125.0
        assert record.parameters["ENV"] == "staging"
        assert record.last_polled_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_always_requests_fixed_page_size(self, sample_payload):
        fetcher, client = self._fetcher(sample_payload)

        await fetcher.fetch_page(100, -5, False, 0)

        client.get_job_history.assert_awaited_once_with(
            limit=10, offset=0, only_mine=False, last_updated=1
        )

    @pytest.mark.asyncio
    async def test_tolerates_sparse_records(self):
        fetcher, _ = self._fetcher({"jobs": [{"jobName": "x", "lastPolledAt": "garbage"}, "junk"]})

        page = await fetcher.fetch_page(10, 0, True, 48)

        assert page.total == 1
        record = page.records[0]
        assert record.build_number == 0
        assert record.duration is None
        assert record.triggered_by_name is None
        assert record.status is JobStatus.OTHER
        assert record.last_polled_at is not None

    @pytest.mark.asyncio
    async def test_missing_jobs_is_empty_page(self):
        fetcher, _ = self._fetcher({"jobs": None, "total": 0})

        page = await fetcher.fetch_page(10, 0, True, 48)

        assert page.records == ()
        assert page.total == 0

    @pytest.mark.asyncio
    async def test_non_object_payload_is_error(self):
        fetcher, _ = self._fetcher(["not", "a", "page"])

        with pytest.raises(HistoryFetchError):
            await fetcher.fetch_page(10, 0, True, 48)
