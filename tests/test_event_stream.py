import asyncio

import pytest

from citeflow.response import DoneEvent, EventStream, TextEvent, TransportWriteError, encode_sse


@pytest.mark.asyncio
async def test_frames_follow_writes_in_order():
    stream = EventStream()

    async def producer():
        await stream.write(TextEvent("hello"))
        await stream.write(DoneEvent())

    frames = [frame async for frame in stream.iter_frames(producer())]

    assert frames == [encode_sse(TextEvent("hello")), encode_sse(DoneEvent())]


@pytest.mark.asyncio
async def test_writer_waits_for_slow_reader():
    stream = EventStream(max_pending=1)
    written = []

    async def producer():
        for index in range(3):
            await stream.write(TextEvent(str(index)))
            written.append(index)

    frames = stream.iter_frames(producer())
    await frames.__anext__()
    for _ in range(10):
        await asyncio.sleep(0)

    assert len(written) <= 2
    rest = [frame async for frame in frames]
    assert len(rest) == 2
    assert written == [0, 1, 2]


@pytest.mark.asyncio
async def test_closing_reader_cancels_producer_and_rejects_writes():
    stream = EventStream()
    cancelled = asyncio.Event()

    async def producer():
        try:
            while True:
                await stream.write(TextEvent("tick"))
        except asyncio.CancelledError:
            cancelled.set()
            raise

    frames = stream.iter_frames(producer())
    assert await frames.__anext__() == encode_sse(TextEvent("tick"))
    await frames.aclose()

    assert cancelled.is_set()
    assert not stream.open
    with pytest.raises(TransportWriteError):
        await stream.write(DoneEvent())


@pytest.mark.asyncio
async def test_producer_errors_surface_after_frames():
    stream = EventStream()

    async def producer():
        await stream.write(TextEvent("partial"))
        raise RuntimeError("boom")

    frames = []
    with pytest.raises(RuntimeError, match="boom"):
        async for frame in stream.iter_frames(producer()):
            frames.append(frame)

    assert frames == [encode_sse(TextEvent("partial"))]


def test_max_pending_must_be_positive():
    with pytest.raises(ValueError):
        EventStream(max_pending=0)
