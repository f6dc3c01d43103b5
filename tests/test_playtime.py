"""
Tests for playtime tracking.
"""
import asyncio

import pytest

from cavelauncher.launch.playtime import PlaytimeTracker


def blocking_sleep_after(ticks):
    """Fake sleep returning immediately `ticks` times, then blocking until cancelled."""
    state = {'calls': 0}
    reached = asyncio.Event()

    async def fake_sleep(_):
        state['calls'] += 1
        if state['calls'] > ticks:
            reached.set()
            await asyncio.Event().wait()

    return fake_sleep, reached


@pytest.mark.asyncio
async def test_two_ticks_add_twenty_seconds(registry, cave):
    registry.save_entity("caves", cave.id, {"seconds_run": 120})
    tracker = PlaytimeTracker(registry, clock=lambda: 5000)

    await tracker.tick(cave.id)
    await tracker.tick(cave.id)

    stored = registry.get_entity("caves", cave.id)
    assert stored.seconds_run == 140
    assert stored.last_touched == 5000


@pytest.mark.asyncio
async def test_ticker_runs_until_stopped(registry, cave):
    registry.save_entity("caves", cave.id, {"seconds_run": 120})
    fake_sleep, reached = blocking_sleep_after(2)
    times = iter([1000, 2000, 3000])
    tracker = PlaytimeTracker(registry, clock=lambda: next(times), sleep=fake_sleep)

    handle = tracker.start(cave)
    await asyncio.wait_for(reached.wait(), timeout=5)
    assert handle.running

    await handle.stop()

    stored = registry.get_entity("caves", cave.id)
    assert stored.seconds_run == 140
    assert stored.last_touched == 3000  # final touch from stop()
    assert not handle.running


@pytest.mark.asyncio
async def test_tick_respects_concurrent_writes(registry, cave):
    registry.save_entity("caves", cave.id, {"seconds_run": 120})
    tracker = PlaytimeTracker(registry, clock=lambda: 1)

    await tracker.tick(cave.id)
    registry.save_entity("caves", cave.id, {"seconds_run": 500})  # another writer
    await tracker.tick(cave.id)

    assert registry.get_entity("caves", cave.id).seconds_run == 510


@pytest.mark.asyncio
async def test_stop_is_idempotent(registry, cave):
    fake_sleep, reached = blocking_sleep_after(0)
    tracker = PlaytimeTracker(registry, clock=lambda: 7, sleep=fake_sleep)

    handle = tracker.start(cave)
    await asyncio.wait_for(reached.wait(), timeout=5)
    await handle.stop()
    registry.save_entity("caves", cave.id, {"last_touched": 1})
    await handle.stop()

    assert registry.get_entity("caves", cave.id).last_touched == 1


@pytest.mark.asyncio
async def test_tick_for_missing_cave(registry):
    tracker = PlaytimeTracker(registry)
    assert await tracker.tick("nope") is None


@pytest.mark.asyncio
async def test_stop_propagates_caller_cancellation(registry, cave):
    reached = asyncio.Event()
    winding_down = asyncio.Event()

    async def slow_to_stop_sleep(_):
        reached.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            winding_down.set()
            await asyncio.Event().wait()

    tracker = PlaytimeTracker(registry, clock=lambda: 9, sleep=slow_to_stop_sleep)
    handle = tracker.start(cave)
    await asyncio.wait_for(reached.wait(), timeout=5)

    stopper = asyncio.create_task(handle.stop())
    await asyncio.wait_for(winding_down.wait(), timeout=5)
    stopper.cancel()

    with pytest.raises(asyncio.CancelledError):
        await stopper
    assert registry.get_entity("caves", cave.id).last_touched == 9
