"""Port protocols for cadence - pure abstractions."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

from cadence.kernel.cancel import CancelScope

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


Operation = Callable[[CancelScope], Awaitable[T]]
"""The user operation: receives its cancel scope, settles to a result."""

TickHandler = Callable[[int], None]


class Ticker(Protocol):
    """Periodic signal source.

    Once started it calls ``on_tick`` at time zero and then at every period
    boundary until stopped. ``on_tick`` receives the tick index.
    """

    def start(self, on_tick: TickHandler) -> None:
        """Begin ticking."""
        ...

    def stop(self) -> None:
        """Stop ticking. No tick is delivered after this returns."""
        ...


class Observer(Protocol[T_contra]):
    """Downstream subscriber.

    Either method may be a coroutine function.
    """

    def on_next(self, value: T_contra) -> Any: ...
    def on_error(self, error: BaseException) -> Any: ...


class TickerFactory(Protocol):
    def __call__(self, period: float) -> Ticker: ...
