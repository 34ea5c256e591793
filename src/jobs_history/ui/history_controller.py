"""Orchestrates fetching, accumulation, debounced search and persistence for the history view."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from ..config import HistoryConfig
from ..exceptions import JobsHistoryError
from ..persistence.models import DateRange, JobExecutionRecord, ServiceFilter, TimePeriod
from ..persistence.preferences import (
    LocalStorage,
    load_preferences,
    save_date_range,
    save_only_mine,
    save_time_period,
)
from ..service.accumulator import accumulate_service_history, iter_history_pages
from ..service.history_client import HistoryFetcher
from ..utils.validation_helpers import sanitize_time_period
from . import history_state as hs
from .pagination_logic import PaginationStats
from .scheduling import Debouncer

logger = logging.getLogger(__name__)


class HistoryController:
    """
    Async driver behind the job history view.

    Holds one ``HistoryViewState`` and replaces it through the pure
    transitions in ``history_state``. After each transition ``sync()``
    issues whatever fetch the new state needs: a server page when no
    service filter is active, or an accumulation run when one is. Set
    ``auto_sync`` to False to apply several changes before one sync().

    Single event loop: methods must be called from the loop that runs the
    fetches. An accumulation run superseded by a newer one is cancelled and
    its result is never merged.
    """

    def __init__(
        self,
        fetcher: HistoryFetcher,
        storage: Optional[LocalStorage] = None,
        config: Optional[HistoryConfig] = None,
        *,
        controlled_time_period: Optional[TimePeriod] = None,
        on_time_period_change: Optional[Callable[[TimePeriod], None]] = None,
        on_change: Optional[Callable[[hs.HistoryViewState], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize HistoryController.

        Args:
            fetcher: Page fetcher for the backend endpoint
            storage: Preference store (None disables persistence)
            config: History view configuration
            controlled_time_period: Period owned by the caller; when given it
                is never persisted and changes go to on_time_period_change
            on_time_period_change: Callback for controlled period changes
            on_change: Called with the new state after every change
            clock: Returns "now" (timezone-aware); defaults to local time
        """
        self.fetcher = fetcher
        self.storage = storage
        self.config = config or HistoryConfig()
        self._controlled = controlled_time_period is not None
        self._on_time_period_change = on_time_period_change
        self._on_change = on_change
        self._clock = clock or (lambda: datetime.now().astimezone())

        self.auto_sync = True
        self._search_input = ""
        self._search_debouncer: Debouncer[str] = Debouncer(
            self._on_search_settled, self.config.search_debounce_ms
        )
        self._accumulation_task: Optional[asyncio.Task] = None
        self._background: set[asyncio.Task] = set()

        default_period = (
            sanitize_time_period(self.config.default_time_period) or TimePeriod.LAST_48H
        )
        prefs = load_preferences(storage, default_period) if storage is not None else None
        period = controlled_time_period or (prefs.time_period if prefs else default_period)
        self._state = hs.initial_state(
            only_mine=prefs.only_mine if prefs else True,
            time_period=period,
            date_range=prefs.date_range if prefs else None,
            now=self._clock(),
        )

    # ─── Read side ───────────────────────────────────────────────────────

    @property
    def state(self) -> hs.HistoryViewState:
        return self._state

    @property
    def search_input(self) -> str:
        """Raw (not yet debounced) search text."""
        return self._search_input

    @property
    def visible_records(self) -> list[JobExecutionRecord]:
        return hs.visible_records(self._state)

    @property
    def filtered_records(self) -> list[JobExecutionRecord]:
        return hs.filtered_records(self._state)

    @property
    def pagination(self) -> PaginationStats:
        return hs.pagination_stats(self._state)

    @property
    def is_loading(self) -> bool:
        return hs.is_loading(self._state)

    @property
    def error(self) -> Optional[str]:
        return hs.current_error(self._state)

    @property
    def view_status(self) -> hs.ViewStatus:
        return hs.view_status(self._state)

    @property
    def server_total(self) -> int:
        page = self._state.server.page
        return page.total if page is not None else 0

    # ─── User actions ────────────────────────────────────────────────────

    async def start(self) -> None:
        """Initial load when the view is opened."""
        await self.sync()

    async def set_only_mine(self, only_mine: bool) -> None:
        self._set_state(hs.set_only_mine(self._state, only_mine))
        self._persist(save_only_mine, self._state.filters.only_mine)
        await self._after_change()

    async def set_time_period(self, period: TimePeriod) -> None:
        """Select a predefined period (clears any custom date range)."""
        self._set_state(hs.set_time_period(self._state, period, self._clock()))
        self._persist(save_date_range, self._state.filters.date_range)
        if self._controlled:
            if self._on_time_period_change is not None:
                self._on_time_period_change(period)
        else:
            self._persist(save_time_period, period)
        await self._after_change()

    async def set_date_range(self, date_range: DateRange) -> None:
        self._set_state(hs.set_date_range(self._state, date_range, self._clock()))
        self._persist(save_date_range, self._state.filters.date_range)
        await self._after_change()

    async def clear_date_range(self) -> None:
        await self.set_date_range(DateRange())

    async def set_service_filter(self, service: Optional[ServiceFilter]) -> None:
        self._set_state(hs.set_service_filter(self._state, service))
        await self._after_change()

    async def clear_service_filter(self) -> None:
        await self.set_service_filter(None)

    async def go_to_page(self, page: int) -> None:
        self._set_state(hs.go_to_page(self._state, page))
        await self._after_change()

    async def refresh(self) -> None:
        """Discard cached pages and accumulation, then refetch from offset 0."""
        self._set_state(hs.refresh(self._state, self._clock()))
        await self.sync(force=True)

    def set_search_input(self, term: str) -> None:
        """Record a keystroke; the filter applies once input settles."""
        self._search_input = term or ""
        self._search_debouncer.schedule(self._search_input)

    async def clear_search(self) -> None:
        self._search_input = ""
        self._search_debouncer.cancel()
        await self.apply_search_term("")

    async def apply_search_term(self, term: str) -> None:
        """Apply a search term immediately, bypassing the debounce."""
        self._set_state(hs.set_search_term(self._state, term))
        await self._after_change()

    async def wait_for_pending(self) -> None:
        """Wait for fetches started by debounced input to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def close(self) -> None:
        """Cancel pending debounce and in-flight work."""
        self._search_debouncer.cancel()
        tasks = list(self._background)
        if self._accumulation_task is not None:
            tasks.append(self._accumulation_task)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._accumulation_task = None

    # ─── Fetch driving ───────────────────────────────────────────────────

    async def sync(self, force: bool = False) -> None:
        """Bring fetched data in line with the current filters."""
        key = hs.accumulation_key(self._state)
        if key is not None:
            if force or key != self._state.accumulation.key or self._accumulation_task is None:
                await self._run_accumulation(key)
            return

        self._cancel_accumulation()
        query = hs.server_query(self._state)
        if force or query != self._state.server.query:
            await self._fetch_server_page(query)

    async def _fetch_server_page(self, query: hs.ServerQuery) -> None:
        only_mine, hours_back, offset = query
        self._set_state(hs.begin_server_fetch(self._state, query))
        generation = self._state.server.generation
        try:
            page = await self.fetcher.fetch_page(
                self._state.pagination.page_size, offset, only_mine, hours_back
            )
        except JobsHistoryError as e:
            logger.error(f"Failed to fetch job history: {e}")
            self._set_state(hs.fail_server_fetch(self._state, generation, str(e)))
            return
        except Exception as e:
            logger.exception(f"Unexpected error fetching job history: {e}")
            self._set_state(hs.fail_server_fetch(self._state, generation, str(e)))
            return
        self._set_state(hs.finish_server_fetch(self._state, generation, page))

    async def _run_accumulation(self, key: hs.AccumulationKey) -> None:
        """Start a fresh accumulation run, superseding any in-flight one."""
        self._cancel_accumulation()

        self._set_state(hs.begin_accumulation(self._state, key))
        generation = self._state.accumulation.generation
        service, hours_back = key
        logger.info(f"Accumulating history for '{service.job_name}' ({hours_back}h)")

        task = asyncio.create_task(self._accumulate(generation, hours_back))
        self._accumulation_task = task
        await asyncio.wait({task})

    async def _accumulate(self, generation: int, hours_back: int) -> None:
        pages = iter_history_pages(
            self.fetcher.fetch_page,
            hours_back,
            self._state.pagination.page_size,
        )
        result = await accumulate_service_history(
            pages,
            page_size=self._state.pagination.page_size,
            max_records=self.config.max_accumulated_records,
        )
        if generation != self._state.accumulation.generation:
            logger.debug("Discarding result of superseded accumulation run")
            return
        self._set_state(hs.finish_accumulation(self._state, generation, result))

    # ─── Internals ───────────────────────────────────────────────────────

    async def _after_change(self) -> None:
        if self.auto_sync:
            await self.sync()

    def _cancel_accumulation(self) -> None:
        task = self._accumulation_task
        if task is not None and not task.done():
            task.cancel()

    def _on_search_settled(self, term: str) -> None:
        task = asyncio.get_running_loop().create_task(self.apply_search_term(term))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _set_state(self, state: hs.HistoryViewState) -> None:
        if state is self._state:
            return
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

    def _persist(self, save: Callable, value) -> None:
        if self.storage is None:
            return
        try:
            save(self.storage, value)
        except JobsHistoryError as e:
            logger.warning(f"Could not persist history preference: {e}")
