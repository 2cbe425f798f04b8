"""Runtime trace infrastructure - separate from delivered results.

Trace captures what a subscription did (ticks, invocation starts and
settlements, retractions, emissions) for debugging and for tests.
Tree relationships are reconstructed only on demand via as_tree().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class Evidence:
    """One recorded runtime event.

    Attributes:
        action: What happened ("tick", "invocation_start", "retract", ...)
        id: Event id, unique within a trace
        parent_id: Id of the event this one belongs to (an invocation's tick)
        timestamp: Wall-clock time of recording
        info: Additional context (sequence, outcome kind, ...)
        duration_ms: Elapsed time, for settle events
    """

    action: str
    id: int = field(default=0)
    parent_id: int | None = field(default=None)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    info: dict[str, Any] = field(default_factory=dict)
    duration_ms: float | None = field(default=None)

    def __str__(self) -> str:
        duration = f" took {self.duration_ms:.1f}ms" if self.duration_ms is not None else ""
        return f"{self.action}{duration}"


class Trace:
    """Runtime trace context for a subscription.

    Only touched from the event loop thread, so no locking.

    Performance guarantees:
    - Trace disabled → single flag check overhead
    - Evidence append is O(1)
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._events: list[Evidence] = []
        self._next_id: int = 0

    def record(
        self,
        action: str,
        info: dict[str, Any] | None = None,
        parent_id: int | None = None,
        duration_ms: float | None = None,
    ) -> int | None:
        """Record an evidence event.

        Args:
            action: What happened
            info: Additional context
            parent_id: Explicit parent event ID for tree relationships
            duration_ms: Execution duration

        Returns:
            Event ID for linking child events, or None if tracing disabled
        """
        if not self.enabled:
            return None

        event_id = self._next_id
        self._next_id += 1

        self._events.append(
            Evidence(
                action=action,
                id=event_id,
                parent_id=parent_id,
                timestamp=datetime.now(UTC),
                info=info or {},
                duration_ms=duration_ms,
            )
        )

        return event_id

    def get_events(self) -> list[Evidence]:
        """Get all recorded events in recording order."""
        return list(self._events)

    def find(self, **criteria: Any) -> list[Evidence]:
        """Events whose attributes or info entries match every criterion.

        Example: ``trace.find(action="retract", sequence=1)``
        """
        return [
            ev
            for ev in self._events
            if all(
                getattr(ev, key, ev.info.get(key)) == expected
                for key, expected in criteria.items()
            )
        ]

    def as_tree(self) -> dict[int | None, list[int]]:
        """Reconstruct parent-child relationships.

        Returns:
            Dict mapping parent_id to list of child_ids
        """
        tree: dict[int | None, list[int]] = {}
        for ev in self._events:
            tree.setdefault(ev.parent_id, []).append(ev.id)
        return tree

    def __len__(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        """Clear all events (for reuse)."""
        self._events.clear()
        self._next_id = 0
