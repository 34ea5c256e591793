"""Explicit history view state and the pure transitions that update it.

The view state is an immutable ``HistoryViewState`` value made of four
parts: ``filters``, ``pagination``, ``accumulation`` and ``server``. Every
user action or fetch outcome maps to one function here that returns a new
state. Side effects (fetching, persisting, debouncing) live in
``history_controller``.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from ..persistence.models import (
    DEFAULT_TIME_PERIOD,
    PAGE_SIZE,
    DateRange,
    HistoryPage,
    JobExecutionRecord,
    ServiceFilter,
    TimePeriod,
)
from ..service.accumulator import AccumulationResult
from .history_filter_logic import apply_filter_pipeline
from .pagination_logic import (
    PaginationMode,
    PaginationStats,
    clamp_page,
    compute_pagination_stats,
    paginate_records,
    resolve_pagination_mode,
    server_offset,
)
from .time_window_logic import resolve_hours_back

ServerQuery = Tuple[bool, int, int]          # (only_mine, hours_back, offset)
AccumulationKey = Tuple[ServiceFilter, int]  # (service, hours_back)


class ViewStatus(Enum):
    """What the rendering layer should show."""

    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    NO_MATCH = "no_match"
    READY = "ready"


@dataclass(frozen=True)
class HistoryFilters:
    only_mine: bool = True
    time_period: TimePeriod = DEFAULT_TIME_PERIOD
    date_range: DateRange = field(default_factory=DateRange)
    search_term: str = ""  # debounced value
    service: Optional[ServiceFilter] = None
    hours_back: int = 48

    @property
    def effective_only_mine(self) -> bool:
        """A service view always covers every user's runs."""
        return False if self.service is not None else self.only_mine

    @property
    def has_custom_range(self) -> bool:
        return self.date_range.is_active


@dataclass(frozen=True)
class PaginationState:
    current_page: int = 1
    page_size: int = PAGE_SIZE
    mode: PaginationMode = PaginationMode.SERVER


@dataclass(frozen=True)
class AccumulationState:
    records: Tuple[JobExecutionRecord, ...] = ()
    key: Optional[AccumulationKey] = None
    generation: int = 0
    is_fetching: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class ServerState:
    page: Optional[HistoryPage] = None
    query: Optional[ServerQuery] = None
    generation: int = 0
    is_fetching: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class HistoryViewState:
    filters: HistoryFilters = field(default_factory=HistoryFilters)
    pagination: PaginationState = field(default_factory=PaginationState)
    accumulation: AccumulationState = field(default_factory=AccumulationState)
    server: ServerState = field(default_factory=ServerState)


# ─── Construction ────────────────────────────────────────────────────────


def _with_window(filters: HistoryFilters, now: Optional[datetime]) -> HistoryFilters:
    hours = resolve_hours_back(filters.time_period, filters.date_range, now)
    return replace(filters, hours_back=hours)


def initial_state(
    only_mine: bool = True,
    time_period: TimePeriod = DEFAULT_TIME_PERIOD,
    date_range: Optional[DateRange] = None,
    service: Optional[ServiceFilter] = None,
    now: Optional[datetime] = None,
) -> HistoryViewState:
    """Build the state a freshly opened history view starts from."""
    filters = _with_window(
        HistoryFilters(
            only_mine=only_mine,
            time_period=time_period,
            date_range=date_range or DateRange(),
            service=service,
        ),
        now,
    )
    mode = resolve_pagination_mode(filters.search_term, filters.service, filters.date_range)
    return HistoryViewState(filters=filters, pagination=PaginationState(mode=mode))


# ─── Filter transitions ──────────────────────────────────────────────────


def _apply_filters(state: HistoryViewState, filters: HistoryFilters) -> HistoryViewState:
    """Swap in new filters; any real change sends the view back to page 1."""
    if filters == state.filters:
        return state
    mode = resolve_pagination_mode(filters.search_term, filters.service, filters.date_range)
    pagination = replace(state.pagination, current_page=1, mode=mode)
    return replace(state, filters=filters, pagination=pagination)


def set_only_mine(state: HistoryViewState, only_mine: bool) -> HistoryViewState:
    return _apply_filters(state, replace(state.filters, only_mine=bool(only_mine)))


def set_time_period(
    state: HistoryViewState,
    period: TimePeriod,
    now: Optional[datetime] = None,
) -> HistoryViewState:
    """Select a predefined period; this clears any custom date range."""
    filters = replace(state.filters, time_period=period, date_range=DateRange())
    return _apply_filters(state, _with_window(filters, now))


def set_date_range(
    state: HistoryViewState,
    date_range: DateRange,
    now: Optional[datetime] = None,
) -> HistoryViewState:
    """Set a custom range. The stored period is kept but ignored while it is active."""
    filters = replace(state.filters, date_range=date_range)
    return _apply_filters(state, _with_window(filters, now))


def clear_date_range(state: HistoryViewState, now: Optional[datetime] = None) -> HistoryViewState:
    return set_date_range(state, DateRange(), now)


def set_search_term(state: HistoryViewState, term: str) -> HistoryViewState:
    """Apply a debounced search term."""
    return _apply_filters(state, replace(state.filters, search_term=term or ""))


def set_service_filter(
    state: HistoryViewState,
    service: Optional[ServiceFilter],
) -> HistoryViewState:
    """Select (or clear, with None) the single-service view.

    Any previously accumulated set belongs to the old filter and is dropped.
    """
    new_state = _apply_filters(state, replace(state.filters, service=service))
    if new_state is state:
        return state
    return discard_accumulation(new_state)


def clear_service_filter(state: HistoryViewState) -> HistoryViewState:
    return set_service_filter(state, None)


# ─── Pagination transitions ──────────────────────────────────────────────


def go_to_page(state: HistoryViewState, page: int) -> HistoryViewState:
    """Move to ``page``, clamped to the pages available in the current mode."""
    stats = pagination_stats(state)
    target = clamp_page(page, stats.total_pages)
    if target == state.pagination.current_page:
        return state
    return replace(state, pagination=replace(state.pagination, current_page=target))


# ─── Fetch lifecycle transitions ─────────────────────────────────────────


def discard_accumulation(state: HistoryViewState) -> HistoryViewState:
    """Drop the accumulated set and invalidate any in-flight run."""
    accumulation = AccumulationState(generation=state.accumulation.generation + 1)
    return replace(state, accumulation=accumulation)


def refresh(state: HistoryViewState, now: Optional[datetime] = None) -> HistoryViewState:
    """Forget all fetched data so the next sync refetches from offset 0."""
    filters = _with_window(state.filters, now)
    pagination = replace(state.pagination, current_page=1)
    state = discard_accumulation(replace(state, filters=filters, pagination=pagination))
    server = ServerState(generation=state.server.generation + 1)
    return replace(state, server=server)


def begin_server_fetch(state: HistoryViewState, query: ServerQuery) -> HistoryViewState:
    server = replace(
        state.server,
        query=query,
        generation=state.server.generation + 1,
        is_fetching=True,
        error=None,
    )
    return replace(state, server=server)


def finish_server_fetch(
    state: HistoryViewState,
    generation: int,
    page: HistoryPage,
) -> HistoryViewState:
    """Store a fetched page unless a newer request superseded it."""
    if generation != state.server.generation:
        return state
    server = replace(state.server, page=page, is_fetching=False, error=None)
    return replace(state, server=server)


def fail_server_fetch(
    state: HistoryViewState,
    generation: int,
    error: str,
) -> HistoryViewState:
    if generation != state.server.generation:
        return state
    server = replace(state.server, page=None, is_fetching=False, error=error)
    return replace(state, server=server)


def begin_accumulation(state: HistoryViewState, key: AccumulationKey) -> HistoryViewState:
    accumulation = AccumulationState(
        key=key,
        generation=state.accumulation.generation + 1,
        is_fetching=True,
    )
    return replace(state, accumulation=accumulation)


def finish_accumulation(
    state: HistoryViewState,
    generation: int,
    result: AccumulationResult,
) -> HistoryViewState:
    """Install an accumulation result; stale runs are ignored."""
    if generation != state.accumulation.generation:
        return state
    accumulation = replace(
        state.accumulation,
        records=() if result.failed else result.records,
        is_fetching=False,
        error=str(result.error) if result.failed else None,
    )
    return replace(state, accumulation=accumulation)


# ─── Derived values ──────────────────────────────────────────────────────


def server_query(state: HistoryViewState) -> ServerQuery:
    """The (only_mine, hours_back, offset) the server page should match."""
    offset = server_offset(
        state.pagination.mode,
        state.pagination.current_page,
        state.pagination.page_size,
    )
    return (state.filters.effective_only_mine, state.filters.hours_back, offset)


def accumulation_key(state: HistoryViewState) -> Optional[AccumulationKey]:
    if state.filters.service is None:
        return None
    return (state.filters.service, state.filters.hours_back)


def base_records(state: HistoryViewState) -> Tuple[JobExecutionRecord, ...]:
    """Accumulated set while a service filter is active, else the server page."""
    if state.filters.service is not None:
        return state.accumulation.records
    if state.server.page is None:
        return ()
    return state.server.page.records


def filtered_records(state: HistoryViewState) -> list[JobExecutionRecord]:
    filters = state.filters
    return apply_filter_pipeline(
        base_records(state),
        service=filters.service,
        date_range=filters.date_range,
        search_term=filters.search_term,
    )


def pagination_stats(state: HistoryViewState) -> PaginationStats:
    server_total = state.server.page.total if state.server.page is not None else 0
    return compute_pagination_stats(
        state.pagination.mode,
        state.pagination.current_page,
        filtered_count=len(filtered_records(state)),
        server_total=server_total,
        page_size=state.pagination.page_size,
    )


def visible_records(state: HistoryViewState) -> list[JobExecutionRecord]:
    stats = pagination_stats(state)
    return paginate_records(
        filtered_records(state),
        stats.mode,
        stats.current_page,
        stats.page_size,
    )


def is_loading(state: HistoryViewState) -> bool:
    if state.filters.service is not None:
        return state.accumulation.is_fetching
    return state.server.is_fetching


def current_error(state: HistoryViewState) -> Optional[str]:
    if state.filters.service is not None:
        return state.accumulation.error
    return state.server.error


def view_status(state: HistoryViewState) -> ViewStatus:
    if is_loading(state):
        return ViewStatus.LOADING
    if current_error(state):
        return ViewStatus.ERROR
    if not base_records(state):
        return ViewStatus.EMPTY
    if not filtered_records(state):
        return ViewStatus.NO_MATCH
    return ViewStatus.READY
