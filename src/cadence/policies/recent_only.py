"""Recent-only completion - a completion retracts every older invocation."""

from __future__ import annotations

import logging
from collections import deque
from typing import TypeVar

from cadence.kernel.invocation import Invocation
from cadence.policies.base import CompletionPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecentOnlyCompletion(CompletionPolicy[T]):
    """Only the frontier of not-yet-superseded work survives.

    ``_pending`` holds, in start order, every invocation that has neither
    been drained by its own completion nor retracted by a newer one. When an
    invocation settles with a value or an error, entries are popped off the
    front and cancelled until its own entry comes off; newer entries stay
    queued and keep running. An invocation whose entry is already gone lost
    the race to a newer completion and is dropped.

    An older invocation finishing late never touches a newer one, because
    only entries in front of the completing one are retracted.
    """

    kind = "recent_only"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._pending: deque[Invocation[T]] = deque()

    def _started(self, invocation: Invocation[T]) -> None:
        self._pending.append(invocation)

    async def _settled(self, invocation: Invocation[T]) -> None:
        outcome = invocation.outcome
        if outcome.is_cancelled:
            # Cancelled on its own (not retracted): just drop its entry.
            if invocation in self._pending:
                self._pending.remove(invocation)
            return

        if invocation not in self._pending:
            logger.debug("%s: invocation %d was superseded, dropping", self.name, invocation.sequence)
            self.trace.record("superseded", {"sequence": invocation.sequence}, parent_id=invocation.trace_id)
            return

        while True:
            entry = self._pending.popleft()
            if entry is invocation:
                entry.scope.dispose()
                break
            self._retract(entry, invocation)

        if outcome.is_value:
            await self._deliver(invocation)
        else:
            await self._fail(outcome._require_error(), invocation)

    def _retract(self, entry: Invocation[T], by: Invocation[T]) -> None:
        logger.debug("%s: invocation %d retracted by %d", self.name, entry.sequence, by.sequence)
        self.trace.record(
            "retract",
            {"sequence": entry.sequence, "by": by.sequence},
            parent_id=entry.trace_id,
        )
        entry.cancel()
        entry.scope.dispose()

    def _release(self) -> None:
        self._pending.clear()
