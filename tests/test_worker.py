from __future__ import annotations

import asyncio
import time

import pytest

from queue_slo.worker import run_periodically


@pytest.mark.asyncio
async def test_runs_ticks_until_stopped() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    ticks: list[int] = []

    def tick() -> None:
        ticks.append(len(ticks))
        if len(ticks) == 3:
            loop.call_soon_threadsafe(stop_event.set)

    count = await run_periodically(tick, interval_seconds=0.01, stop_event=stop_event)

    assert count == 3
    assert ticks == [0, 1, 2]


@pytest.mark.asyncio
async def test_failing_tick_does_not_stop_the_loop() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    calls = 0

    def tick() -> None:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise ConnectionError("redis unavailable")
        loop.call_soon_threadsafe(stop_event.set)

    count = await run_periodically(tick, interval_seconds=0.01, stop_event=stop_event)

    assert count == 2


@pytest.mark.asyncio
async def test_ticks_do_not_overlap() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    running = 0
    overlaps = 0
    calls = 0

    def tick() -> None:
        nonlocal running, overlaps, calls
        running += 1
        overlaps += running > 1
        calls += 1
        time.sleep(0.02)
        running -= 1
        if calls == 3:
            loop.call_soon_threadsafe(stop_event.set)

    await run_periodically(tick, interval_seconds=0.001, stop_event=stop_event)

    assert overlaps == 0
