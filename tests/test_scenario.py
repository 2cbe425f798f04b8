"""End-to-end timing on the real ticker.

period = 50ms; the first three invocations take 0, 150 and 50ms, so they
settle at ~0, ~200 and ~150ms. The subscription is disposed at 250ms and
every later invocation (each would take 150ms) must see its cancellation.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from cadence import CancelScope, ordered_completion, recent_only_completion, unordered_completion

DELAYS = [0.0, 0.15, 0.05]


@dataclass
class CompletionResults:
    start_order: list[int] = field(default_factory=list)
    completion_order: list[int] = field(default_factory=list)
    return_order: list[int] = field(default_factory=list)
    remaining_cancelled: bool = False


async def run_scenario(create_stream) -> CompletionResults:
    results = CompletionResults()
    count = 0

    async def operation(scope: CancelScope) -> int:
        nonlocal count
        if count < len(DELAYS):
            index = count
            count += 1
            results.start_order.append(index)
            await asyncio.sleep(DELAYS[index])
            results.completion_order.append(index)
            return index

        try:
            await asyncio.sleep(0.15)
        except asyncio.CancelledError:
            results.remaining_cancelled = True
            raise
        return -1

    subscription = create_stream(operation, 0.05).subscribe(results.return_order.append)
    await asyncio.sleep(0.25)
    subscription.dispose()
    # Later invocations would otherwise finish by ~350ms.
    await asyncio.sleep(0.1)
    return results


@pytest.mark.asyncio
async def test_ordered_completion_scenario() -> None:
    results = await run_scenario(ordered_completion)

    assert results.start_order == [0, 1, 2]
    assert results.completion_order == [0, 2, 1]
    assert results.return_order == [0, 1, 2]
    assert results.remaining_cancelled


@pytest.mark.asyncio
async def test_unordered_completion_scenario() -> None:
    results = await run_scenario(unordered_completion)

    assert results.start_order == [0, 1, 2]
    assert results.completion_order == [0, 2, 1]
    assert results.return_order == [0, 2, 1]
    assert results.remaining_cancelled


@pytest.mark.asyncio
async def test_recent_only_completion_scenario() -> None:
    results = await run_scenario(recent_only_completion)

    assert results.start_order == [0, 1, 2]
    assert results.completion_order == [0, 2]
    assert results.return_order == [0, 2]
    assert results.remaining_cancelled
