"""Default periodic signal source on the asyncio clock."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from cadence.kernel.ports import TickHandler

logger = logging.getLogger(__name__)


class PeriodicTicker:
    """Fires tick 0 as soon as the loop runs it, then tick n at origin + n * period.

    Deadlines are computed from the origin rather than from the previous
    wake-up, so sleep overshoot does not turn into drift. Ticks the loop
    fell behind on fire back to back; none are skipped.
    """

    def __init__(self, period: float | timedelta) -> None:
        if isinstance(period, timedelta):
            period = period.total_seconds()
        if period <= 0:
            raise ValueError("period must be positive")
        self.period = period
        self._task: asyncio.Task[None] | None = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._stopped

    def start(self, on_tick: TickHandler) -> None:
        if self._task is not None:
            raise RuntimeError("ticker already started")
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(on_tick, loop))

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _run(self, on_tick: TickHandler, loop: asyncio.AbstractEventLoop) -> None:
        origin = loop.time()
        index = 0
        while not self._stopped:
            logger.debug("tick %d", index)
            on_tick(index)
            index += 1
            delay = origin + index * self.period - loop.time()
            # Always yield, even when behind, so the loop can run completions.
            await asyncio.sleep(max(delay, 0))
