"""Ordered completion - deliver in start order."""

from __future__ import annotations

import logging
from collections import deque
from typing import TypeVar

from cadence.kernel.invocation import Invocation
from cadence.policies.base import CompletionPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OrderedCompletion(CompletionPolicy[T]):
    """Invocations overlap freely; results come out in start order.

    A result that settles ahead of an older invocation waits in the pending
    queue until everything before it has been delivered. Only the slowest
    invocation so far gates delivery.

    An error is delivered in the same order: results of older invocations go
    out first. The moment the failed invocation settles the ticker stops and
    every newer invocation is cancelled, since none of them can ever be
    delivered.
    """

    kind = "ordered"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._pending: deque[Invocation[T]] = deque()

    def _started(self, invocation: Invocation[T]) -> None:
        self._pending.append(invocation)

    async def _settled(self, invocation: Invocation[T]) -> None:
        if invocation.outcome.is_error and not self._halted:
            self._halt()
            for newer in self._pending:
                if newer.sequence > invocation.sequence:
                    newer.cancel()
            logger.debug(
                "%s: invocation %d failed, holding error behind %d older invocation(s)",
                self.name,
                invocation.sequence,
                sum(1 for p in self._pending if p.sequence < invocation.sequence),
            )

        # Drain every settled invocation at the head.
        while self._pending and self._pending[0].settled and not self._closed:
            head = self._pending.popleft()
            outcome = head.outcome
            if outcome.is_value:
                await self._deliver(head)
            elif outcome.is_error:
                await self._fail(outcome._require_error(), head)
                return
            # cancelled: nothing to deliver, move on to the next head

    def _release(self) -> None:
        self._pending.clear()
