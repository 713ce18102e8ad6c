# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Local Store - Object store backend on the local filesystem.

Keys map to files below a root directory. Objects are written
atomically (write to temp, then rename) so a crash never leaves a
partial object under its final name.
"""

from pathlib import Path
from typing import AsyncIterator
from urllib.parse import unquote, urlparse

import aiofiles
import structlog

from ddbdump.exceptions import ObjectNotFoundError, StorageError

logger = structlog.get_logger()


def path_from_file_url(url: str) -> Path:
    """Convert a file:// URL back into a filesystem path."""
    parsed = urlparse(url)
    if parsed.scheme != "file":
        raise StorageError(f"Not a file URL: {url}", details={"url": url})
    return Path(unquote(parsed.path))


class LocalObjectStore:
    """Object store rooted at a local directory."""

    scheme = "file"

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve()

    def path_for(self, key: str) -> Path:
        return self.root / key

    def url_for(self, key: str) -> str:
        return self.path_for(key).as_uri()

    async def put(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        temp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(temp_path, "wb") as f:
                await f.write(data)
            temp_path.replace(path)
        except OSError as e:
            raise StorageError(
                f"Failed to write object: {e}",
                details={"path": str(path)},
            ) from e

        logger.info("object_written", path=str(path), size=len(data))

    async def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    async def get(self, key: str) -> bytes:
        return await self._read(self.path_for(key))

    async def iter_lines(self, url: str) -> AsyncIterator[bytes]:
        path = path_from_file_url(url)
        try:
            async with aiofiles.open(path, "rb") as f:
                async for line in f:
                    yield line.rstrip(b"\n")
        except FileNotFoundError as e:
            raise ObjectNotFoundError(
                f"Object not found: {path}",
                details={"path": str(path)},
            ) from e

    async def _read(self, path: Path) -> bytes:
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(
                f"Object not found: {path}",
                details={"path": str(path)},
            ) from e
        except OSError as e:
            raise StorageError(
                f"Failed to read object: {e}",
                details={"path": str(path)},
            ) from e
