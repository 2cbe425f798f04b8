import asyncio
import logging

import pytest

from cadence.runtime import Emitter

from fakes import Boom


@pytest.mark.asyncio
async def test_async_deliveries_do_not_interleave() -> None:
    log: list[str] = []

    async def on_next(value: int) -> None:
        log.append(f"begin {value}")
        await asyncio.sleep(0.01)
        log.append(f"end {value}")

    emitter = Emitter(on_next)
    await asyncio.gather(emitter.emit(1), emitter.emit(2))

    assert log == ["begin 1", "end 1", "begin 2", "end 2"]
    assert emitter.delivered == 2


@pytest.mark.asyncio
async def test_only_first_error_is_delivered() -> None:
    values: list[int] = []
    errors: list[BaseException] = []
    emitter = Emitter(values.append, errors.append)

    first, second = Boom("first"), Boom("second")
    assert await emitter.fail(first)
    assert not await emitter.fail(second)
    assert not await emitter.emit(1)

    assert errors == [first]
    assert values == []
    assert emitter.stopped


@pytest.mark.asyncio
async def test_close_is_silent() -> None:
    values: list[int] = []
    errors: list[BaseException] = []
    emitter = Emitter(values.append, errors.append)

    emitter.close()

    assert not await emitter.emit(1)
    assert not await emitter.fail(Boom())
    assert values == [] and errors == []


@pytest.mark.asyncio
async def test_on_next_errors_propagate_to_caller() -> None:
    def on_next(value: int) -> None:
        raise Boom("subscriber broke")

    emitter = Emitter(on_next)
    with pytest.raises(Boom):
        await emitter.emit(1)


@pytest.mark.asyncio
async def test_unhandled_error_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    emitter = Emitter(lambda value: None, name="poller")

    with caplog.at_level(logging.WARNING, logger="cadence.runtime.emitter"):
        await emitter.fail(Boom("nobody listening"))

    assert "poller: unhandled terminal error" in caplog.text
