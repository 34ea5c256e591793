"""Backend-backed history fetcher for view consumers."""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping

from ..exceptions import HistoryFetchError
from ..persistence.models import PAGE_SIZE, HistoryPage, JobExecutionRecord, JobStatus
from ..utils.validation_helpers import parse_timestamp

if TYPE_CHECKING:
    from .client import JobRunnerClient

logger = logging.getLogger(__name__)


def _coerce_int(value: Any, default: int = 0) -> int:
    """Convert value to int with fallback."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_float(value: Any) -> float | None:
    """Convert value to float, or None when absent/invalid."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class HistoryFetcher:
    """Paginated view over the job runner history endpoint.

    Every request asks for exactly ``PAGE_SIZE`` rows: the backend silently
    caps larger limits, so callers must never expect more per call.
    """

    def __init__(self, client: "JobRunnerClient"):
        self.client = client

    async def fetch_page(
        self,
        limit: int,
        offset: int,
        only_mine: bool,
        hours_back: int,
    ) -> HistoryPage:
        """Return one page of history for the server-side query."""
        if limit != PAGE_SIZE:
            logger.debug(f"Requested limit {limit} replaced by fixed page size {PAGE_SIZE}")
        safe_offset = max(0, int(offset))
        safe_hours = max(1, int(hours_back))

        payload = await self.client.get_job_history(
            limit=PAGE_SIZE,
            offset=safe_offset,
            only_mine=bool(only_mine),
            last_updated=safe_hours,
        )
        return self._decode_page(payload, safe_offset)

    def _decode_page(self, payload: Any, offset: int) -> HistoryPage:
        """Decode a history response body into a HistoryPage."""
        if not isinstance(payload, Mapping):
            raise HistoryFetchError(
                f"Unexpected history payload type: {type(payload).__name__}"
            )
        records = self._decode_records(payload.get("jobs"))
        total = max(0, _coerce_int(payload.get("total"), default=len(records)))
        return HistoryPage(
            records=tuple(records),
            total=total,
            limit=PAGE_SIZE,
            offset=_coerce_int(payload.get("offset"), default=offset),
        )

    def _decode_records(self, raw_jobs: Any) -> list[JobExecutionRecord]:
        if raw_jobs is None:
            return []
        if not isinstance(raw_jobs, list):
            logger.warning("Unexpected jobs payload type: %s", type(raw_jobs))
            return []
        decoded: list[JobExecutionRecord] = []
        for raw_job in raw_jobs:
            if not isinstance(raw_job, Mapping):
                continue
            decoded.append(self._decode_record(raw_job))
        return decoded

    def _decode_record(self, raw: Mapping[str, Any]) -> JobExecutionRecord:
        """Convert one backend job dict into a JobExecutionRecord."""
        last_polled_at = parse_timestamp(raw.get("lastPolledAt"))
        if last_polled_at is None:
            logger.debug("Invalid lastPolledAt from backend: %r", raw.get("lastPolledAt"))
            last_polled_at = datetime.now().astimezone()

        metadata = raw.get("metadata")
        display_name = metadata.get("name") if isinstance(metadata, Mapping) else None

        parameters = raw.get("parameters")
        if not isinstance(parameters, Mapping):
            parameters = {}

        duration_ms = _coerce_float(raw.get("duration"))
        raw_status = str(raw.get("status", "") or "")

        return JobExecutionRecord(
            id=str(raw.get("id", "") or ""),
            job_name=str(raw.get("jobName", "") or ""),
            build_number=_coerce_int(raw.get("buildNumber")),
            status=JobStatus.from_raw(raw_status),
            raw_status=raw_status,
            last_polled_at=last_polled_at,
            triggered_by=_optional_str(raw.get("triggeredBy")),
            triggered_by_name=_optional_str(display_name),
            duration=duration_ms / 1000.0 if duration_ms is not None else None,
            parameters={str(k): v for k, v in parameters.items()},
            jaas_name=str(raw.get("jaasName", "") or ""),
            base_job_url=str(raw.get("baseJobUrl", "") or ""),
            build_url=str(raw.get("buildUrl", "") or ""),
        )
