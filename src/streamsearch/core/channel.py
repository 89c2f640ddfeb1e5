"""Bounded channel between engine producers and the search consumer."""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

T = TypeVar("T")


class ChannelClosedError(Exception):
    """Raised on send once the consumer has gone away."""

    pass


class ResultChannel(Generic[T]):
    """A bounded FIFO queue with an explicit close.

    ``send`` waits while the queue is full, which is what slows producers
    down to the consumer's pace. After ``close`` every send fails with
    ChannelClosedError so producers can stop working.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("channel capacity must be at least 1")
        self._queue: asyncio.Queue[T] = asyncio.Queue(maxsize=capacity)
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    async def send(self, item: T) -> None:
        """Put an item on the queue, waiting for room if it is full.

        Raises:
            ChannelClosedError: If the channel is closed before or while
                waiting for room.
        """
        if self._closed:
            raise ChannelClosedError("channel is closed")
        await self._queue.put(item)
        if self._closed:
            # Pass the wake-up on to the next sender still waiting
            self._drain()
            raise ChannelClosedError("channel closed while sending")

    async def receive(self) -> T:
        """Wait for and return the next item."""
        return await self._queue.get()

    def close(self) -> None:
        """Close the channel and release producers waiting for room."""
        self._closed = True
        self._drain()

    def _drain(self) -> None:
        # Each discarded item wakes one producer blocked in put()
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
