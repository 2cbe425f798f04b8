"""Invocation - one call to the user operation."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from cadence.kernel.cancel import CancelScope, OperationCancelledError
from cadence.kernel.outcome import Outcome
from cadence.kernel.ports import Operation

V = TypeVar("V")


@dataclass(eq=False)
class Invocation(Generic[V]):
    """A started call to the user operation.

    Attributes:
        sequence: Start order, strictly increasing and gap-free per policy
        scope: This invocation's own cancel scope (child of the master scope)
        future: Settles when the operation does
        trace_id: Trace event id of the invocation start, if tracing
        started_at: perf_counter() at start
    """

    sequence: int
    scope: CancelScope
    future: asyncio.Future[V]
    trace_id: int | None = None
    started_at: float = field(default_factory=time.perf_counter)
    _outcome: Outcome[V] | None = field(default=None, repr=False)

    @property
    def settled(self) -> bool:
        return self._outcome is not None

    @property
    def outcome(self) -> Outcome[V]:
        if self._outcome is None:
            raise RuntimeError(f"Invocation {self.sequence} has not settled.")
        return self._outcome

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started_at) * 1000

    def settle(self) -> Outcome[V]:
        """Read the finished future into the outcome. Set exactly once."""
        if self._outcome is not None:
            raise RuntimeError(f"Invocation {self.sequence} already settled.")
        if not self.future.done():
            raise RuntimeError(f"Invocation {self.sequence} is still running.")
        self._outcome = classify(self.future, self.scope)
        return self._outcome

    def cancel(self) -> None:
        """Cancel this invocation only."""
        self.scope.cancel()


def classify(future: asyncio.Future[Any], scope: CancelScope) -> Outcome[Any]:
    """Map a finished future to an outcome.

    Anything that finishes after its scope fired counts as cancelled: the
    library stopped waiting for it the moment cancellation was issued.
    """
    if future.cancelled() or scope.cancelled:
        return Outcome.Cancelled()
    error = future.exception()
    if error is None:
        return Outcome.Value(future.result())
    if isinstance(error, OperationCancelledError):
        return Outcome.Cancelled()
    return Outcome.Error(error)


def start_invocation(
    operation: Operation[V],
    sequence: int,
    scope: CancelScope,
    loop: asyncio.AbstractEventLoop,
) -> Invocation[V]:
    """Call the operation now and wrap whatever it returns.

    The call happens synchronously so start order is decided here, not when
    somebody first awaits the result. A synchronous raise becomes an error
    outcome.
    """
    future: asyncio.Future[V]
    try:
        awaitable = operation(scope)
        future = asyncio.ensure_future(awaitable, loop=loop)
    except Exception as exc:
        future = loop.create_future()
        future.set_exception(exc)
    scope.link(future)
    return Invocation(sequence=sequence, scope=scope, future=future)
