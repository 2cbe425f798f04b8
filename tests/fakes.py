from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from cadence.kernel import CancelScope
from cadence.kernel.ports import TickHandler


async def drain(rounds: int = 10) -> None:
    """Let callbacks, tasks and the coordinator run to quiescence."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@dataclass
class ManualTicker:
    period: float = 0.0
    on_tick: TickHandler | None = None
    index: int = 0
    stopped: bool = False

    def start(self, on_tick: TickHandler) -> None:
        self.on_tick = on_tick

    def stop(self) -> None:
        self.stopped = True

    def tick(self, count: int = 1) -> None:
        for _ in range(count):
            if self.stopped or self.on_tick is None:
                return
            self.on_tick(self.index)
            self.index += 1


@dataclass
class ManualTickers:
    """Ticker factory that keeps every ticker it built."""

    built: list[ManualTicker] = field(default_factory=list)

    def __call__(self, period: float) -> ManualTicker:
        ticker = ManualTicker(period)
        self.built.append(ticker)
        return ticker

    @property
    def ticker(self) -> ManualTicker:
        return self.built[-1]


class GatedOperation:
    """Operation whose n-th invocation settles only when the test says so.

    The operation is called synchronously on each tick, so ``calls`` grows
    in start order even before the invocation tasks get to run.
    """

    def __init__(self) -> None:
        self.gates: list[asyncio.Future[Any]] = []
        self.scopes: list[CancelScope] = []
        self.cancelled: list[int] = []

    @property
    def calls(self) -> int:
        return len(self.gates)

    def __call__(self, scope: CancelScope):
        index = len(self.gates)
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        self.scopes.append(scope)
        return self._run(index, gate)

    async def _run(self, index: int, gate: asyncio.Future[Any]) -> Any:
        try:
            return await gate
        except asyncio.CancelledError:
            self.cancelled.append(index)
            raise

    def resolve(self, index: int, value: Any = None) -> None:
        gate = self.gates[index]
        if not gate.done():
            gate.set_result(index if value is None else value)

    def reject(self, index: int, error: BaseException) -> None:
        gate = self.gates[index]
        if not gate.done():
            gate.set_exception(error)


@dataclass
class RecordingObserver:
    values: list[Any] = field(default_factory=list)
    errors: list[BaseException] = field(default_factory=list)

    def on_next(self, value: Any) -> None:
        self.values.append(value)

    def on_error(self, error: BaseException) -> None:
        self.errors.append(error)


class Boom(Exception):
    pass
