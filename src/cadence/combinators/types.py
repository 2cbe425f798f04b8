"""Stream types: configuration, streams and subscriptions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from datetime import timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator

from cadence.kernel.ports import Operation, TickerFactory
from cadence.kernel.trace import Trace
from cadence.policies import (
    CompletionPolicy,
    OrderedCompletion,
    RecentOnlyCompletion,
    UnorderedCompletion,
)
from cadence.runtime.emitter import Emitter
from cadence.runtime.ticker import PeriodicTicker

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Policy(str, Enum):
    """Completion policy names."""

    ORDERED = "ordered"
    UNORDERED = "unordered"
    RECENT_ONLY = "recent_only"

    @property
    def implementation(self) -> type[CompletionPolicy[Any]]:
        return _IMPLEMENTATIONS[self]


_IMPLEMENTATIONS: dict[Policy, type[CompletionPolicy[Any]]] = {
    Policy.ORDERED: OrderedCompletion,
    Policy.UNORDERED: UnorderedCompletion,
    Policy.RECENT_ONLY: RecentOnlyCompletion,
}


class StreamConfig(BaseModel):
    """Settings shared by every subscription of a stream.

    ``period`` accepts a timedelta or a number of seconds.
    """

    model_config = ConfigDict(frozen=True)

    period: timedelta
    name: str = "periodic"
    trace_enabled: bool = False

    @field_validator("period")
    @classmethod
    def _period_positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("period must be positive")
        return value

    @property
    def period_seconds(self) -> float:
        return self.period.total_seconds()


class Subscription(Generic[T]):
    """Handle returned by ``PeriodicStream.subscribe``.

    Disposing is the only way to stop a healthy stream; a terminal error
    closes the subscription on its own.
    """

    def __init__(self, policy: CompletionPolicy[T]) -> None:
        self._policy = policy

    @property
    def closed(self) -> bool:
        return self._policy.closed

    @property
    def policy(self) -> CompletionPolicy[T]:
        return self._policy

    @property
    def trace(self) -> Trace | None:
        trace = self._policy.trace
        return trace if trace.enabled else None

    def dispose(self) -> None:
        """Unsubscribe. Cancels the ticker and every pending invocation."""
        self._policy.dispose()

    async def wait_closed(self) -> None:
        await self._policy.wait_closed()

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.dispose()
        await self.wait_closed()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"Subscription({self._policy.name!r}, {self._policy.kind}, {state})"


class PeriodicStream(Generic[T]):
    """A cold periodic sequence of operation results.

    Nothing runs until ``subscribe`` (or ``async for``); every subscription
    gets its own ticker, master scope and policy state.
    """

    def __init__(
        self,
        operation: Operation[T],
        config: StreamConfig,
        policy: Policy = Policy.ORDERED,
        ticker_factory: TickerFactory | None = None,
    ) -> None:
        self.operation = operation
        self.config = config
        self.policy = Policy(policy)
        self._ticker_factory: TickerFactory = ticker_factory or PeriodicTicker

    def subscribe(
        self,
        on_next: Callable[[T], Any] | Any,
        on_error: Callable[[BaseException], Any] | None = None,
    ) -> Subscription[T]:
        """Start ticking and deliver results to ``on_next``.

        Args:
            on_next: Callable (or coroutine function) receiving each result,
                or an observer object with ``on_next``/``on_error`` methods
            on_error: Receives the terminal error, if any

        Returns:
            Subscription; results arrive asynchronously

        Raises:
            RuntimeError: If no event loop is running
        """
        asyncio.get_running_loop()

        if not callable(on_next) and hasattr(on_next, "on_next"):
            observer = on_next
            on_next = observer.on_next
            on_error = on_error or getattr(observer, "on_error", None)

        config = self.config
        emitter: Emitter[T] = Emitter(on_next, on_error, name=config.name)
        trace = Trace(enabled=config.trace_enabled)
        trace.record(
            "subscribe",
            {"policy": self.policy.value, "period_s": config.period_seconds},
        )
        policy: CompletionPolicy[T] = self.policy.implementation(
            self.operation,
            emitter,
            self._ticker_factory(config.period_seconds),
            trace=trace,
            name=config.name,
        )
        policy.start()
        logger.debug("%s: subscribed, period=%s", config.name, config.period)
        return Subscription(policy)

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        # Unbounded: no backpressure, every result is kept until consumed.
        queue: asyncio.Queue[tuple[bool, Any]] = asyncio.Queue()
        subscription = self.subscribe(
            lambda value: queue.put_nowait((True, value)),
            lambda error: queue.put_nowait((False, error)),
        )
        try:
            while True:
                ok, item = await queue.get()
                if not ok:
                    raise item
                yield item
        finally:
            subscription.dispose()

    def __repr__(self) -> str:
        return f"PeriodicStream({self.config.name!r}, {self.policy.value}, period={self.config.period})"
