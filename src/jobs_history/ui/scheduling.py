"""Cancellable delayed delivery of input values (debouncing)."""

import asyncio
import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScheduledValue(Generic[T]):
    """Handle for one pending delivery returned by Debouncer.schedule()."""

    def __init__(self, value: T):
        self.value = value
        self._timer: Optional[asyncio.TimerHandle] = None
        self._cancelled = False
        self._fired = False

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    def cancel(self) -> None:
        if not self.pending:
            return
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()


class Debouncer(Generic[T]):
    """Delivers the latest scheduled value once input has been stable.

    Each schedule() call cancels the previous pending handle, so only the
    last value in a burst reaches ``callback``. Must be used from within a
    running asyncio event loop.
    """

    def __init__(self, callback: Callable[[T], None], delay_ms: int = 300):
        self._callback = callback
        self.delay_ms = delay_ms
        self._pending: Optional[ScheduledValue[T]] = None

    def schedule(self, value: T, delay_ms: Optional[int] = None) -> ScheduledValue[T]:
        """Schedule delivery of ``value`` after ``delay_ms`` milliseconds."""
        self.cancel()
        handle: ScheduledValue[T] = ScheduledValue(value)
        delay = self.delay_ms if delay_ms is None else delay_ms
        loop = asyncio.get_running_loop()
        handle._timer = loop.call_later(delay / 1000.0, self._fire, handle)
        self._pending = handle
        return handle

    def cancel(self) -> None:
        """Cancel the pending delivery, if any."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def flush(self) -> None:
        """Deliver the pending value immediately."""
        handle = self._pending
        if handle is not None and handle.pending:
            if handle._timer is not None:
                handle._timer.cancel()
            self._fire(handle)

    @property
    def pending(self) -> bool:
        return self._pending is not None and self._pending.pending

    def _fire(self, handle: ScheduledValue[T]) -> None:
        if not handle.pending:
            return
        handle._fired = True
        if self._pending is handle:
            self._pending = None
        logger.debug(f"Debounced value delivered: {handle.value!r}")
        self._callback(handle.value)
