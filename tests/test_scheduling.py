"""Tests for the debouncer used by search input."""

import asyncio

import pytest

from jobs_history.ui.scheduling import Debouncer


@pytest.mark.asyncio
async def test_only_last_value_in_burst_is_delivered():
    delivered = []
    debouncer = Debouncer(delivered.append, delay_ms=20)

    first = debouncer.schedule("d")
    debouncer.schedule("de")
    last = debouncer.schedule("dep")
    await asyncio.sleep(0.08)

    assert delivered == ["dep"]
    assert first.cancelled
    assert last.fired
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_cancel_prevents_delivery():
    delivered = []
    debouncer = Debouncer(delivered.append, delay_ms=20)

    handle = debouncer.schedule("x")
    debouncer.cancel()
    await asyncio.sleep(0.05)

    assert delivered == []
    assert handle.cancelled
    assert not handle.pending


@pytest.mark.asyncio
async def test_flush_delivers_immediately():
    delivered = []
    debouncer = Debouncer(delivered.append, delay_ms=10_000)

    handle = debouncer.schedule("now")
    debouncer.flush()

    assert delivered == ["now"]
    assert handle.fired
    await asyncio.sleep(0)
    assert delivered == ["now"]


@pytest.mark.asyncio
async def test_per_call_delay_override():
    delivered = []
    debouncer = Debouncer(delivered.append, delay_ms=10_000)

    debouncer.schedule("fast", delay_ms=0)
    await asyncio.sleep(0.02)

    assert delivered == ["fast"]


def test_schedule_requires_running_loop():
    debouncer = Debouncer(lambda value: None)
    with pytest.raises(RuntimeError):
        debouncer.schedule("x")
