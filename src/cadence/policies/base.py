"""Shared tick/invocation glue for completion policies."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, TypeVar

from cadence.kernel.cancel import CancelScope
from cadence.kernel.invocation import Invocation, start_invocation
from cadence.kernel.ports import Operation, Ticker
from cadence.kernel.trace import Trace
from cadence.runtime.emitter import Emitter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CompletionPolicy(ABC, Generic[T]):
    """One subscription's worth of periodic invocations.

    The ticker path starts an invocation per tick. Settled invocations are
    funnelled through a completion queue drained by a single coordinator
    task; subclasses implement ``_settled`` and never see two completions
    at once, so their queue handling needs no further locking.

    Lifecycle: ``start()`` once, then either ``dispose()`` from the outside
    or ``_fail()`` from inside. Both trigger the master scope, which stops
    the ticker and cancels every invocation still running.
    """

    kind: ClassVar[str]

    def __init__(
        self,
        operation: Operation[T],
        emitter: Emitter[T],
        ticker: Ticker,
        trace: Trace | None = None,
        name: str = "periodic",
    ) -> None:
        self._operation = operation
        self._emitter = emitter
        self._ticker = ticker
        self.trace = trace if trace is not None else Trace(enabled=False)
        self.name = name

        self._master = CancelScope()
        self._sequence = 0
        self._inflight: set[asyncio.Future[Any]] = set()
        self._completions: asyncio.Queue[Invocation[T]] = asyncio.Queue()
        self._coordinator: asyncio.Task[None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._halted = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def started(self) -> int:
        """Number of invocations started so far."""
        return self._sequence

    def start(self) -> None:
        if self._loop is not None:
            raise RuntimeError(f"{self.name}: policy already started")
        self._loop = asyncio.get_running_loop()
        self._master.add_callback(self._halt)
        self._coordinator = self._loop.create_task(self._coordinate())
        self._ticker.start(self._on_tick)
        logger.debug("%s: started %s policy", self.name, self.kind)

    def dispose(self) -> None:
        """Unsubscribe: cancel everything, deliver nothing more. Idempotent."""
        if self._closed:
            return
        logger.debug("%s: disposing with %d invocation(s) in flight", self.name, len(self._inflight))
        self.trace.record("dispose", {"started": self._sequence, "inflight": len(self._inflight)})
        self._closed = True
        self._emitter.close()
        self._master.cancel()
        self._release()
        if self._coordinator is not None and self._coordinator is not asyncio.current_task():
            self._coordinator.cancel()

    async def wait_closed(self) -> None:
        """Wait for the coordinator and every cancelled invocation to finish."""
        pending: list[asyncio.Future[Any]] = list(self._inflight)
        if self._coordinator is not None and self._coordinator is not asyncio.current_task():
            pending.append(self._coordinator)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # Ticker path

    def _on_tick(self, index: int) -> None:
        if self._halted or self._closed:
            return
        assert self._loop is not None
        sequence = self._sequence
        self._sequence += 1

        tick_id = self.trace.record("tick", {"index": index})
        invocation = start_invocation(self._operation, sequence, self._master.child(), self._loop)
        invocation.trace_id = self.trace.record(
            "invocation_start", {"sequence": sequence}, parent_id=tick_id
        )
        logger.debug("%s: started invocation %d", self.name, sequence)

        self._started(invocation)
        self._inflight.add(invocation.future)
        invocation.future.add_done_callback(
            lambda future, invocation=invocation: self._on_done(invocation, future)
        )

    def _on_done(self, invocation: Invocation[T], future: asyncio.Future[Any]) -> None:
        self._inflight.discard(future)
        if not self._closed:
            self._completions.put_nowait(invocation)

    def _halt(self) -> None:
        """Stop taking ticks; running invocations are left alone."""
        if not self._halted:
            self._halted = True
            self._ticker.stop()

    # Coordinator

    async def _coordinate(self) -> None:
        while not self._closed:
            invocation = await self._completions.get()
            if self._closed:
                break
            outcome = invocation.settle()
            self.trace.record(
                "invocation_settle",
                {"sequence": invocation.sequence, "outcome": outcome.kind},
                parent_id=invocation.trace_id,
                duration_ms=invocation.elapsed_ms,
            )
            logger.debug("%s: invocation %d settled: %s", self.name, invocation.sequence, outcome.kind)
            try:
                await self._settled(invocation)
            except Exception as exc:
                logger.exception(
                    "%s: subscriber raised while receiving invocation %d",
                    self.name,
                    invocation.sequence,
                )
                await self._fail(exc)
            finally:
                invocation.scope.dispose()

    async def _deliver(self, invocation: Invocation[T]) -> None:
        if await self._emitter.emit(invocation.outcome.value):  # type: ignore[arg-type]
            self.trace.record("emit", {"sequence": invocation.sequence}, parent_id=invocation.trace_id)

    async def _fail(self, error: BaseException, invocation: Invocation[T] | None = None) -> None:
        """Terminal error: stop ticks, cancel everything, deliver the error once."""
        if self._closed:
            return
        sequence = invocation.sequence if invocation is not None else None
        logger.debug("%s: terminating on error from invocation %s: %r", self.name, sequence, error)
        self.trace.record("error", {"sequence": sequence, "error": repr(error)})
        self._closed = True
        self._master.cancel()
        await self._emitter.fail(error)
        self._release()

    # Policy hooks

    @abstractmethod
    def _started(self, invocation: Invocation[T]) -> None:
        """Called on the ticker path right after the operation was called."""

    @abstractmethod
    async def _settled(self, invocation: Invocation[T]) -> None:
        """Called by the coordinator, one settled invocation at a time."""

    def _release(self) -> None:
        """Drop policy state once the subscription has ended."""
