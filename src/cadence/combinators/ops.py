"""Periodic completion combinators: ordered, unordered, recent-only."""

from __future__ import annotations

from datetime import timedelta
from typing import TypeVar

from cadence.kernel.ports import Operation, TickerFactory

from .types import PeriodicStream, Policy, StreamConfig

T = TypeVar("T")


def periodic(
    operation: Operation[T],
    period: float | timedelta,
    policy: Policy | str = Policy.ORDERED,
    *,
    name: str | None = None,
    trace: bool = False,
    ticker_factory: TickerFactory | None = None,
) -> PeriodicStream[T]:
    """Invoke ``operation`` every ``period`` under the named completion policy.

    Args:
        operation: Async callable taking a CancelScope and returning a result.
            May also return a future, e.g. from ``loop.run_in_executor``.
        period: Tick period as a timedelta or seconds; must be positive.
        policy: Policy member or its value ("ordered", "unordered", "recent_only").
        name: Label for logs and trace; defaults to the policy value.
        trace: Record runtime evidence on each subscription.
        ticker_factory: Builds the tick source from the period in seconds.

    Returns:
        PeriodicStream[T]: A cold stream; subscribe to start ticking.

    Raises:
        pydantic.ValidationError: If ``period`` is not positive.
        ValueError: If ``policy`` is not a known policy name.
    """
    policy = Policy(policy)
    config = StreamConfig(period=period, name=name or policy.value, trace_enabled=trace)
    return PeriodicStream(operation, config, policy, ticker_factory=ticker_factory)


def ordered_completion(
    operation: Operation[T],
    period: float | timedelta,
    **options,
) -> PeriodicStream[T]:
    """Periodically invoke ``operation`` and emit results in invocation order.

    Semantics:
        - A new invocation starts at every tick, overlapping earlier ones
        - A result that arrives early is held until every earlier one is out
        - The first error, in invocation order, terminates the stream

    Args:
        operation: Async callable taking a CancelScope.
        period: Tick period as a timedelta or seconds.
        **options: Passed through to ``periodic``.

    Returns:
        PeriodicStream[T]: Results in start order.
    """
    return periodic(operation, period, Policy.ORDERED, **options)


def unordered_completion(
    operation: Operation[T],
    period: float | timedelta,
    **options,
) -> PeriodicStream[T]:
    """Periodically invoke ``operation`` and emit results as they arrive.

    Semantics:
        - A new invocation starts at every tick, overlapping earlier ones
        - Each result is emitted as soon as its invocation settles
        - Any error terminates the stream and cancels the rest

    Args:
        operation: Async callable taking a CancelScope.
        period: Tick period as a timedelta or seconds.
        **options: Passed through to ``periodic``.

    Returns:
        PeriodicStream[T]: Results in completion order.
    """
    return periodic(operation, period, Policy.UNORDERED, **options)


def recent_only_completion(
    operation: Operation[T],
    period: float | timedelta,
    **options,
) -> PeriodicStream[T]:
    """Periodically invoke ``operation`` and emit only the most recent results.

    Semantics:
        - A new invocation starts at every tick, overlapping earlier ones
        - When an invocation completes, every older one still running is
          cancelled and its result discarded
        - Newer invocations are never cancelled by an older one finishing
        - Any error terminates the stream and cancels the rest

    Args:
        operation: Async callable taking a CancelScope.
        period: Tick period as a timedelta or seconds.
        **options: Passed through to ``periodic``.

    Returns:
        PeriodicStream[T]: Results that were never superseded.
    """
    return periodic(operation, period, Policy.RECENT_ONLY, **options)
