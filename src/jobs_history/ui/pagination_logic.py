"""Pure logic helpers deciding how the history table paginates."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ..persistence.models import PAGE_SIZE, DateRange, JobExecutionRecord, ServiceFilter


class PaginationMode(Enum):
    """Where page counts and page contents come from."""

    SERVER = "server"  # backend total, backend page as-is
    CLIENT = "client"  # local filtered set, sliced locally


@dataclass(frozen=True)
class PaginationStats:
    """Derived pagination counters for one render."""

    mode: PaginationMode
    total_items: int
    total_pages: int
    current_page: int
    page_size: int = PAGE_SIZE

    @property
    def has_multiple_pages(self) -> bool:
        return self.total_pages > 1


def resolve_pagination_mode(
    search_term: str,
    service: Optional[ServiceFilter],
    date_range: Optional[DateRange],
) -> PaginationMode:
    """Client mode whenever any client-only filter is in effect."""
    if (search_term or "").strip():
        return PaginationMode.CLIENT
    if service is not None:
        return PaginationMode.CLIENT
    if date_range is not None and date_range.is_active:
        return PaginationMode.CLIENT
    return PaginationMode.SERVER


def total_pages_for(total_items: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(max(0, total_items) / page_size)


def clamp_page(page: int, total_pages: int) -> int:
    """Keep ``page`` within ``1..total_pages`` (1 when there are no pages)."""
    return max(1, min(int(page), max(1, total_pages)))


def compute_pagination_stats(
    mode: PaginationMode,
    current_page: int,
    filtered_count: int,
    server_total: int,
    page_size: int = PAGE_SIZE,
) -> PaginationStats:
    """Derive total items/pages from the source that ``mode`` selects."""
    total_items = filtered_count if mode is PaginationMode.CLIENT else max(0, server_total)
    total_pages = total_pages_for(total_items, page_size)
    return PaginationStats(
        mode=mode,
        total_items=total_items,
        total_pages=total_pages,
        current_page=clamp_page(current_page, total_pages),
        page_size=page_size,
    )


def paginate_records(
    records: Sequence[JobExecutionRecord],
    mode: PaginationMode,
    current_page: int,
    page_size: int = PAGE_SIZE,
) -> list[JobExecutionRecord]:
    """Rows to display: a local slice in client mode, the server page otherwise."""
    if mode is PaginationMode.SERVER:
        return list(records)
    start = (max(1, current_page) - 1) * page_size
    return list(records[start:start + page_size])


def server_offset(mode: PaginationMode, current_page: int, page_size: int = PAGE_SIZE) -> int:
    """Backend offset for the server page request.

    In client mode the base set is always the first server page, so page
    changes never move the offset.
    """
    if mode is PaginationMode.CLIENT:
        return 0
    return (max(1, current_page) - 1) * page_size
