# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Object Sink - Backup consumer.

Encodes each record as one JSON line into an in-memory buffer, flushing
the buffer to a new uniquely named object whenever the next line would
push it past the configured size. When the stream ends it flushes what is
left, writes the manifest, and finally the zero-byte _SUCCESS marker.

The marker is the last write of a run: if it exists, every object listed
in the manifest was uploaded and the manifest itself is complete.
"""

from dataclasses import dataclass, field

import structlog

from ddbdump.codec.wire import encode_record
from ddbdump.exceptions import BackupError, CodecError, StorageError
from ddbdump.pipeline.channel import RecordChannel
from ddbdump.storage.base import (
    COMPLETION_MARKER,
    MANIFEST_OBJECT,
    ObjectStore,
    join_key,
    new_object_name,
)
from ddbdump.storage.manifest import Manifest

logger = structlog.get_logger()

# Default maximum size of one data object
DEFAULT_BUFFER_SIZE = 10 * 1024 * 1024


@dataclass
class SinkResult:
    """Outcome of a completed backup sink."""

    records: int
    objects: int
    bytes_written: int
    manifest: Manifest = field(default_factory=Manifest)


class ObjectSink:
    """Consumes records and writes them as size-bounded objects plus a manifest."""

    def __init__(self, store: ObjectStore, prefix: str, buffer_size: int = DEFAULT_BUFFER_SIZE):
        """
        Args:
            store: Destination object store
            prefix: Folder inside the store for this backup
            buffer_size: Maximum bytes per data object (a single larger
                record still gets its own object)
        """
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be >= 1, got {buffer_size}")
        self.store = store
        self.prefix = prefix
        self.buffer_size = buffer_size
        self.manifest = Manifest()
        self._buffer = bytearray()
        self._records = 0
        self._bytes_written = 0

    async def flush(self) -> str:
        """
        Upload the buffer to a new object and record it in the manifest.

        Returns:
            URL of the written object
        """
        key = join_key(self.prefix, new_object_name())
        data = bytes(self._buffer)
        await self._put(key, data)

        url = self.store.url_for(key)
        self.manifest.append(url, mandatory=True)
        self._bytes_written += len(data)
        self._buffer.clear()

        logger.info(
            "object_flushed",
            url=url,
            size=len(data),
            objects=len(self.manifest.entries),
        )
        return url

    async def write(self, line: bytes) -> None:
        """Append one encoded record (without newline) to the buffer."""
        size = len(line) + 1
        if self._buffer and len(self._buffer) + size > self.buffer_size:
            await self.flush()
        self._buffer += line
        self._buffer += b"\n"
        self._records += 1

    async def finalize(self) -> None:
        """Flush the remainder, then write the manifest and the completion marker."""
        await self.flush()
        await self._put(join_key(self.prefix, MANIFEST_OBJECT), self.manifest.to_json())
        await self._put(join_key(self.prefix, COMPLETION_MARKER), b"")
        logger.info(
            "backup_finalized",
            prefix=self.prefix,
            records=self._records,
            objects=len(self.manifest.entries),
        )

    async def consume(self, channel: RecordChannel) -> SinkResult:
        """
        Drain the channel into the store until it is closed.

        Raises:
            ChannelAbortedError: If the producer failed; nothing is finalized
            BackupError: If a record cannot be encoded or an upload fails
        """
        async for record in channel:
            try:
                line = encode_record(record)
            except (CodecError, TypeError) as e:
                raise BackupError(
                    f"Unable to encode record: {e}",
                    details={"record_index": self._records},
                ) from e
            await self.write(line)

        await self.finalize()
        return SinkResult(
            records=self._records,
            objects=len(self.manifest.entries),
            bytes_written=self._bytes_written,
            manifest=self.manifest,
        )

    async def _put(self, key: str, data: bytes) -> None:
        try:
            await self.store.put(key, data)
        except StorageError as e:
            raise BackupError(
                f"Failed to write backup object: {e.message}",
                details={"key": key, **e.details},
            ) from e
