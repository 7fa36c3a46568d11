from __future__ import annotations

import asyncio
from collections import deque
from typing import AsyncIterator, Deque, Generic, TypeVar

T = TypeVar("T")


class ChannelClosed(Exception):
    """Raised when sending on a closed channel or receiving from a drained one."""


class Channel(Generic[T]):
    """Bounded single-producer/single-consumer handoff between pipeline stages.

    ``send`` suspends while ``capacity`` items are waiting, so a slow consumer
    throttles its producer. Closing is one-way: pending items can still be
    received, after which ``receive`` raises :class:`ChannelClosed`.
    """

    def __init__(self, capacity: int = 1) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be greater than zero")

        self.capacity = capacity
        self._items: Deque[T] = deque()
        self._closed = False
        self._changed = asyncio.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._items)

    async def send(self, item: T) -> None:
        async with self._changed:
            await self._changed.wait_for(lambda: self._closed or len(self._items) < self.capacity)
            if self._closed:
                raise ChannelClosed("cannot send on a closed channel")
            self._items.append(item)
            self._changed.notify_all()

    def offer(self, item: T) -> bool:
        """Enqueue ``item`` without waiting; False when full or closed.

        Receivers already waiting are only woken by the next ``send`` or
        ``close``, so callers close the channel afterwards.
        """

        if self._closed or len(self._items) >= self.capacity:
            return False
        self._items.append(item)
        return True

    async def receive(self) -> T:
        async with self._changed:
            await self._changed.wait_for(lambda: self._closed or bool(self._items))
            if not self._items:
                raise ChannelClosed("channel is closed and drained")
            item = self._items.popleft()
            self._changed.notify_all()
            return item

    async def close(self) -> None:
        """Mark the channel closed and wake every waiting sender and receiver."""

        async with self._changed:
            self._closed = True
            self._changed.notify_all()

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        while True:
            try:
                item = await self.receive()
            except ChannelClosed:
                return
            yield item
