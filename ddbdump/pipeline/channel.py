# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Record Channel - Unbuffered hand-off between producer and consumer.

send() returns only after the consumer has received the record, so a slow
consumer directly throttles the producer. The producer closes the channel
exactly once; closing with an error marks the stream as aborted so the
consumer can tell a failed stream from a complete one.
"""

import asyncio
from typing import Optional

from ddbdump.codec.values import Record
from ddbdump.exceptions import ChannelAbortedError, ChannelClosedError

_CLOSED = object()


class RecordChannel:
    """Single-producer, single-consumer rendezvous channel of records."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._closed = False
        self._drained = False
        self._error: Optional[BaseException] = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, record: Record) -> None:
        """
        Hand a record to the consumer, waiting until it has been received.

        Raises:
            ChannelClosedError: If the channel was already closed
        """
        if self._closed:
            raise ChannelClosedError("send on closed channel")
        await self._queue.put(record)
        await self._queue.join()

    def close(self, error: Optional[BaseException] = None) -> None:
        """
        Signal end of stream. Must be called exactly once by the producer.

        Args:
            error: Producer failure; the consumer gets ChannelAbortedError
                after draining instead of a clean end of stream

        Raises:
            ChannelClosedError: If the channel was already closed
        """
        if self._closed:
            raise ChannelClosedError("close of closed channel")
        self._closed = True
        self._error = error
        self._queue.put_nowait(_CLOSED)

    async def receive(self) -> Optional[Record]:
        """
        Take the next record.

        Returns:
            The record, or None once the channel is closed and drained

        Raises:
            ChannelAbortedError: If the producer closed the channel with an error
        """
        if not self._drained:
            item = await self._queue.get()
            self._queue.task_done()
            if item is not _CLOSED:
                return item
            self._drained = True

        if self._error is not None:
            raise ChannelAbortedError(
                f"Producer aborted: {self._error}",
                details={"error_type": type(self._error).__name__},
            ) from self._error
        return None

    def __aiter__(self) -> "RecordChannel":
        return self

    async def __anext__(self) -> Record:
        record = await self.receive()
        if record is None:
            raise StopAsyncIteration
        return record
