"""Unordered completion - deliver as soon as settled."""

from __future__ import annotations

from typing import TypeVar

from cadence.kernel.invocation import Invocation
from cadence.policies.base import CompletionPolicy

T = TypeVar("T")


class UnorderedCompletion(CompletionPolicy[T]):
    """Every result goes downstream the moment its invocation settles.

    No ordering state; the coordinator's one-at-a-time processing is what
    keeps two simultaneous completions from interleaving downstream.
    """

    kind = "unordered"

    def _started(self, invocation: Invocation[T]) -> None:
        pass

    async def _settled(self, invocation: Invocation[T]) -> None:
        outcome = invocation.outcome
        if outcome.is_value:
            await self._deliver(invocation)
        elif outcome.is_error:
            await self._fail(outcome._require_error(), invocation)
