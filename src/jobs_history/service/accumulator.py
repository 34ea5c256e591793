"""Reconstruct a complete history set from the capped, paginated endpoint."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Optional, Tuple

from ..persistence.models import (
    MAX_ACCUMULATED_RECORDS,
    PAGE_SIZE,
    HistoryPage,
    JobExecutionRecord,
)

logger = logging.getLogger(__name__)

FetchPage = Callable[[int, int, bool, int], Awaitable[HistoryPage]]


class StopReason(Enum):
    """Why an accumulation run ended."""

    REACHED_TOTAL = "reached_total"
    SHORT_PAGE = "short_page"
    SAFETY_CEILING = "safety_ceiling"
    EXHAUSTED = "exhausted"
    ERROR = "error"


@dataclass(frozen=True)
class AccumulationResult:
    """Outcome of one accumulation run. ``records`` is empty when ``error`` is set."""

    records: Tuple[JobExecutionRecord, ...]
    pages_fetched: int
    stop_reason: StopReason
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


async def iter_history_pages(
    fetch_page: FetchPage,
    hours_back: int,
    page_size: int = PAGE_SIZE,
) -> AsyncIterator[HistoryPage]:
    """Yield successive history pages for all users, starting at offset 0.

    The sequence is unbounded; the consumer decides when to stop.
    """
    offset = 0
    while True:
        page = await fetch_page(page_size, offset, False, hours_back)
        yield page
        offset += page_size


def reached_reported_total(accumulated: int, total: int) -> bool:
    return accumulated >= total


def is_short_page(page: HistoryPage, page_size: int = PAGE_SIZE) -> bool:
    return len(page.records) < page_size


def reached_safety_ceiling(accumulated: int, max_records: int = MAX_ACCUMULATED_RECORDS) -> bool:
    return accumulated >= max_records


async def accumulate_service_history(
    pages: AsyncIterator[HistoryPage],
    page_size: int = PAGE_SIZE,
    max_records: int = MAX_ACCUMULATED_RECORDS,
) -> AccumulationResult:
    """
    Consume ``pages`` until one of the termination predicates holds.

    A fetch error anywhere discards everything gathered so far. Hitting the
    safety ceiling is a normal stop, not an error.

    Args:
        pages: Async page sequence (see iter_history_pages)
        page_size: Rows the backend returns per full page
        max_records: Hard upper bound on accumulated rows

    Returns:
        AccumulationResult instance
    """
    accumulated: list[JobExecutionRecord] = []
    pages_fetched = 0
    stop_reason = StopReason.EXHAUSTED

    try:
        async for page in pages:
            pages_fetched += 1
            room = max_records - len(accumulated)
            accumulated.extend(page.records[:room])
            logger.debug(
                f"Accumulated page at offset {page.offset}: "
                f"{len(page.records)} rows, {len(accumulated)}/{page.total}"
            )

            if reached_reported_total(len(accumulated), page.total):
                stop_reason = StopReason.REACHED_TOTAL
                break
            if is_short_page(page, page_size):
                stop_reason = StopReason.SHORT_PAGE
                break
            if reached_safety_ceiling(len(accumulated), max_records):
                stop_reason = StopReason.SAFETY_CEILING
                logger.info(f"Accumulation stopped at safety ceiling of {max_records} rows")
                break
    except Exception as e:
        logger.warning(f"Accumulation failed after {pages_fetched} page(s), discarding: {e}")
        return AccumulationResult(
            records=(),
            pages_fetched=pages_fetched,
            stop_reason=StopReason.ERROR,
            error=e,
        )
    finally:
        aclose = getattr(pages, "aclose", None)
        if aclose is not None:
            await aclose()

    logger.info(
        f"Accumulated {len(accumulated)} rows in {pages_fetched} page(s) "
        f"({stop_reason.value})"
    )
    return AccumulationResult(
        records=tuple(accumulated),
        pages_fetched=pages_fetched,
        stop_reason=stop_reason,
    )
