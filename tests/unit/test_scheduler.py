import asyncio

import pytest

from mediadesk.core.scheduler import AsyncioScheduler


def test_call_later_and_cancel():
    async def scenario():
        scheduler = AsyncioScheduler()
        fired = []
        scheduler.call_later(0.01, lambda: fired.append("a"))
        handle = scheduler.call_later(0.01, lambda: fired.append("b"))
        handle.cancel()
        await asyncio.sleep(0.05)
        return fired

    assert asyncio.run(scenario()) == ["a"]


def test_call_every_repeats_until_cancelled():
    async def scenario():
        scheduler = AsyncioScheduler()
        ticks = []
        handle = scheduler.call_every(0.01, lambda: ticks.append(1))
        await asyncio.sleep(0.08)
        handle.cancel()
        count = len(ticks)
        await asyncio.sleep(0.05)
        return count, len(ticks)

    before, after = asyncio.run(scenario())
    assert before >= 2
    assert after == before


def test_callback_cancelling_its_own_timer():
    async def scenario():
        scheduler = AsyncioScheduler()
        ticks = []

        def tick():
            ticks.append(1)
            handle.cancel()

        handle = scheduler.call_every(0.01, tick)
        await asyncio.sleep(0.06)
        return len(ticks)

    assert asyncio.run(scenario()) == 1


def test_non_positive_interval_is_rejected():
    async def scenario():
        AsyncioScheduler().call_every(0, lambda: None)

    with pytest.raises(ValueError):
        asyncio.run(scenario())
