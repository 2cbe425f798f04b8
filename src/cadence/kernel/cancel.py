"""Two-level cooperative cancellation."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any


class OperationCancelledError(Exception):
    """Raised by an operation that observed its cancel scope firing.

    Operations running on worker threads cannot receive
    ``asyncio.CancelledError``; they call ``scope.raise_if_cancelled()``
    instead. Both classify as a cancelled outcome.
    """


class CancelScope:
    """A cancellation signal with parent/child structure.

    Cancelling a scope cancels every child; cancelling a child leaves the
    parent and its siblings alone. The ``cancelled`` flag is a plain
    attribute so operations on worker threads can poll it. Everything else
    is meant to be called from the event loop thread.
    """

    def __init__(self, parent: CancelScope | None = None) -> None:
        self._parent = parent
        self._cancelled = False
        self._children: set[CancelScope] = set()
        self._callbacks: list[Callable[[], Any]] = []
        self._event: asyncio.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def child(self) -> CancelScope:
        """Derive a child scope; born cancelled if this scope already is."""
        scope = CancelScope(parent=self)
        if self._cancelled:
            scope.cancel()
        else:
            self._children.add(scope)
        return scope

    def add_callback(self, callback: Callable[[], Any]) -> None:
        """Run ``callback`` once when the scope is cancelled.

        Runs immediately if the scope is already cancelled.
        """
        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)

    def link(self, future: asyncio.Future[Any]) -> None:
        """Cancel ``future`` when this scope is cancelled."""

        def _cancel_future() -> None:
            if not future.done():
                future.cancel()

        self.add_callback(_cancel_future)

    def cancel(self) -> None:
        """Trigger the scope. Idempotent."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._event is not None:
            self._event.set()

        children, self._children = self._children, set()
        for scope in children:
            scope.cancel()

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def dispose(self) -> None:
        """Detach from the parent without cancelling.

        Drops registered callbacks so a disposed scope holds no references
        to the work it used to guard.
        """
        if self._parent is not None:
            self._parent._children.discard(self)
            self._parent = None
        self._callbacks.clear()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelledError("operation cancelled")

    async def wait(self) -> None:
        """Suspend until the scope is cancelled."""
        if self._cancelled:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "active"
        return f"CancelScope({state}, children={len(self._children)})"
