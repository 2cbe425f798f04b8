"""Emitter - serialized delivery to one subscriber."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _call(callback: Callable[[Any], Any], arg: Any) -> None:
    result = callback(arg)
    if inspect.isawaitable(result):
        await result


class Emitter(Generic[T]):
    """Downstream channel for one subscription.

    Serializes deliveries: an async ``on_next`` finishes before the next
    value goes out. At most one error is ever delivered and nothing is
    delivered after it, or after ``close()``.
    """

    def __init__(
        self,
        on_next: Callable[[T], Any],
        on_error: Callable[[BaseException], Any] | None = None,
        name: str = "periodic",
    ) -> None:
        self._on_next = on_next
        self._on_error = on_error
        self._name = name
        self._lock = asyncio.Lock()
        self._stopped = False
        self.delivered = 0

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def emit(self, value: T) -> bool:
        """Deliver ``value``. Returns False if the emitter had already stopped.

        An exception raised by ``on_next`` propagates to the caller.
        """
        async with self._lock:
            if self._stopped:
                return False
            await _call(self._on_next, value)
            self.delivered += 1
            return True

    async def fail(self, error: BaseException) -> bool:
        """Deliver the terminal error once, then stop."""
        async with self._lock:
            if self._stopped:
                return False
            self._stopped = True
            if self._on_error is None:
                logger.warning("%s: unhandled terminal error: %r", self._name, error)
                return True
            try:
                await _call(self._on_error, error)
            except Exception:
                logger.exception("%s: on_error handler raised", self._name)
            return True

    def close(self) -> None:
        """Stop delivering without signalling anything downstream."""
        self._stopped = True
