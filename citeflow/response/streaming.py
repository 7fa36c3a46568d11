from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Protocol

from .events import Event, encode_sse

logger = logging.getLogger(__name__)


class TransportWriteError(RuntimeError):
    """Raised when an event can no longer be delivered to the client."""


class EventSink(Protocol):
    """Write side of a client transport."""

    async def write(self, event: Event) -> None:
        ...


class EventStream:
    """Bounded SSE transport bridging a pipeline run and a streaming response body.

    The pipeline writes events with :meth:`write`; :meth:`iter_frames` drives
    the pipeline and yields one encoded frame per event. At most
    ``max_pending`` frames wait for the client, so a slow reader throttles the
    writer. Once the reader goes away every further write fails with
    :class:`TransportWriteError`.
    """

    def __init__(self, *, max_pending: int = 1) -> None:
        if max_pending <= 0:
            raise ValueError("max_pending must be greater than zero")

        self._frames: asyncio.Queue[str | None] = asyncio.Queue(maxsize=max_pending)
        self._reader_gone = False

    @property
    def open(self) -> bool:
        return not self._reader_gone

    async def write(self, event: Event) -> None:
        if self._reader_gone:
            raise TransportWriteError(f"client stream closed before {event.event_type} event")
        await self._frames.put(encode_sse(event))

    async def _produce(self, producer: Awaitable[object]) -> None:
        try:
            await producer
        finally:
            if not self._reader_gone:
                await self._frames.put(None)

    async def iter_frames(self, producer: Awaitable[object]) -> AsyncIterator[str]:
        """Run ``producer`` and yield the frames it writes until it finishes."""

        task = asyncio.create_task(self._produce(producer))
        try:
            while True:
                frame = await self._frames.get()
                if frame is None:
                    break
                yield frame
            await task
        finally:
            self._reader_gone = True
            if not task.done():
                logger.info("Client stream closed early; cancelling pipeline")
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
