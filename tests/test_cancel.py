import asyncio

import pytest

from cadence.kernel import CancelScope, OperationCancelledError


def test_cancelling_parent_cancels_children() -> None:
    master = CancelScope()
    a = master.child()
    b = master.child()

    master.cancel()

    assert a.cancelled
    assert b.cancelled


def test_cancelling_child_leaves_parent_and_siblings() -> None:
    master = CancelScope()
    a = master.child()
    b = master.child()

    a.cancel()

    assert a.cancelled
    assert not master.cancelled
    assert not b.cancelled


def test_child_of_cancelled_scope_is_born_cancelled() -> None:
    master = CancelScope()
    master.cancel()

    assert master.child().cancelled


def test_callbacks_run_once() -> None:
    scope = CancelScope()
    calls: list[str] = []
    scope.add_callback(lambda: calls.append("x"))

    scope.cancel()
    scope.cancel()

    assert calls == ["x"]


def test_callback_added_after_cancel_runs_immediately() -> None:
    scope = CancelScope()
    scope.cancel()
    calls: list[str] = []

    scope.add_callback(lambda: calls.append("late"))

    assert calls == ["late"]


def test_disposed_child_is_not_cancelled_by_parent() -> None:
    master = CancelScope()
    child = master.child()
    child.dispose()

    master.cancel()

    assert not child.cancelled


def test_raise_if_cancelled() -> None:
    scope = CancelScope()
    scope.raise_if_cancelled()

    scope.cancel()

    with pytest.raises(OperationCancelledError):
        scope.raise_if_cancelled()


def test_link_cancels_future() -> None:
    async def run():
        master = CancelScope()
        scope = master.child()
        task = asyncio.ensure_future(asyncio.sleep(10))
        scope.link(task)

        master.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())


def test_wait_returns_once_cancelled() -> None:
    async def run():
        scope = CancelScope()
        waiter = asyncio.ensure_future(scope.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        scope.cancel()
        await asyncio.wait_for(waiter, timeout=1)

    asyncio.run(run())
