import asyncio
from datetime import timedelta

import pytest

from cadence.runtime import PeriodicTicker


def test_first_tick_is_immediate_then_periodic() -> None:
    async def run():
        loop = asyncio.get_running_loop()
        ticker = PeriodicTicker(0.02)
        stamps: list[tuple[int, float]] = []
        origin = loop.time()

        ticker.start(lambda index: stamps.append((index, loop.time() - origin)))
        await asyncio.sleep(0.11)
        ticker.stop()
        return stamps

    stamps = asyncio.run(run())

    indexes = [index for index, _ in stamps]
    assert indexes == list(range(len(stamps)))
    assert 4 <= len(stamps) <= 7
    assert stamps[0][1] < 0.01


def test_stop_prevents_further_ticks() -> None:
    async def run():
        ticker = PeriodicTicker(timedelta(milliseconds=10))
        ticks: list[int] = []
        ticker.start(ticks.append)
        await asyncio.sleep(0.035)
        ticker.stop()
        count = len(ticks)
        await asyncio.sleep(0.05)
        return count, len(ticks), ticker.running

    before, after, running = asyncio.run(run())

    assert before == after
    assert not running


def test_stop_from_inside_tick_handler() -> None:
    async def run():
        ticker = PeriodicTicker(0.005)
        ticks: list[int] = []

        def on_tick(index: int) -> None:
            ticks.append(index)
            if index == 2:
                ticker.stop()

        ticker.start(on_tick)
        await asyncio.sleep(0.05)
        return ticks

    assert asyncio.run(run()) == [0, 1, 2]


def test_rejects_non_positive_period() -> None:
    with pytest.raises(ValueError):
        PeriodicTicker(0)
    with pytest.raises(ValueError):
        PeriodicTicker(timedelta(seconds=-1))


def test_start_twice_is_an_error() -> None:
    async def run():
        ticker = PeriodicTicker(1)
        ticker.start(lambda index: None)
        try:
            with pytest.raises(RuntimeError):
                ticker.start(lambda index: None)
        finally:
            ticker.stop()

    asyncio.run(run())
