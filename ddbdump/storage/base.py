# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Storage Base - Object store interface shared by all backends.

Keys are '/'-separated paths relative to the store root (an S3 bucket or
a local directory). Manifest entries reference objects by URL so a
restore can locate them independently of the store's prefix.
"""

import uuid
from typing import AsyncIterator, Awaitable, Callable, Protocol

COMPLETION_MARKER = "_SUCCESS"
MANIFEST_OBJECT = "manifest"

# Bytes read per request when streaming an object line by line
READ_CHUNK_SIZE = 64 * 1024


class ObjectStore(Protocol):
    """Protocol implemented by each object store backend."""

    scheme: str

    def url_for(self, key: str) -> str:
        """Return the URL recorded in the manifest for a key."""
        ...

    async def put(self, key: str, data: bytes) -> None:
        """Write an object, replacing any existing one."""
        ...

    async def exists(self, key: str) -> bool:
        """Return True if an object exists at key."""
        ...

    async def get(self, key: str) -> bytes:
        """Read a whole object. Raises ObjectNotFoundError if missing."""
        ...

    def iter_lines(self, url: str) -> AsyncIterator[bytes]:
        """Stream the lines of the object at a manifest URL."""
        ...


def join_key(prefix: str, name: str) -> str:
    """Join a prefix and an object name without doubled or leading slashes."""
    prefix = prefix.strip("/")
    if not prefix:
        return name
    return f"{prefix}/{name}"


def new_object_name() -> str:
    """
    Generate a unique data object name.

    Uses a random UUID so no two flushes of a run can collide and
    silently overwrite each other.
    """
    return str(uuid.uuid4())


async def iter_chunked_lines(
    read: Callable[[int], Awaitable[bytes]],
    chunk_size: int = READ_CHUNK_SIZE,
) -> AsyncIterator[bytes]:
    """
    Split a chunked byte stream into lines (newline stripped).

    Args:
        read: Async read(n) of the underlying stream, returning b"" at EOF
        chunk_size: Bytes requested per read

    Yields:
        Each line without its trailing newline
    """
    pending = b""
    while True:
        chunk = await read(chunk_size)
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split(b"\n")
        for line in lines:
            yield line
    if pending:
        yield pending
