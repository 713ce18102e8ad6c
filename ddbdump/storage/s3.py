# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump S3 Store - Object store backend on Amazon S3 (aiobotocore).

Objects are written to STANDARD_IA with AES256 server-side encryption.
"""

from typing import Any, AsyncIterator, Tuple
from urllib.parse import urlparse

import structlog
from botocore.exceptions import ClientError

from ddbdump.exceptions import ObjectNotFoundError, StorageError
from ddbdump.storage.base import READ_CHUNK_SIZE, iter_chunked_lines

logger = structlog.get_logger()

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

STORAGE_CLASS = "STANDARD_IA"
SERVER_SIDE_ENCRYPTION = "AES256"


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def parse_s3_url(url: str) -> Tuple[str, str]:
    """
    Split an s3://bucket/key URL.

    Returns:
        Tuple of (bucket, key)
    """
    parsed = urlparse(url)
    if parsed.scheme != "s3" or not parsed.netloc:
        raise StorageError(f"Not an S3 URL: {url}", details={"url": url})
    return parsed.netloc, parsed.path.lstrip("/")


class S3ObjectStore:
    """Object store bound to one S3 bucket."""

    scheme = "s3"

    def __init__(self, client: Any, bucket: str):
        """
        Args:
            client: aiobotocore S3 client (already entered)
            bucket: Bucket holding the backup
        """
        self._client = client
        self.bucket = bucket

    def url_for(self, key: str) -> str:
        return f"s3://{self.bucket}/{key}"

    async def put(self, key: str, data: bytes) -> None:
        logger.info("object_writing", url=self.url_for(key), size=len(data))
        try:
            await self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                StorageClass=STORAGE_CLASS,
                ServerSideEncryption=SERVER_SIDE_ENCRYPTION,
            )
        except ClientError as e:
            raise StorageError(
                f"Failed to upload object: {e}",
                details={"url": self.url_for(key)},
            ) from e

    async def exists(self, key: str) -> bool:
        try:
            await self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            raise StorageError(
                f"Failed to check object: {e}",
                details={"url": self.url_for(key)},
            ) from e
        return True

    async def get(self, key: str) -> bytes:
        return await self._read(self.bucket, key)

    async def iter_lines(self, url: str) -> AsyncIterator[bytes]:
        bucket, key = parse_s3_url(url)
        response = await self._get_object(bucket, key)
        async with response["Body"] as stream:
            async for line in iter_chunked_lines(stream.read, READ_CHUNK_SIZE):
                yield line

    async def _read(self, bucket: str, key: str) -> bytes:
        response = await self._get_object(bucket, key)
        async with response["Body"] as stream:
            return await stream.read()

    async def _get_object(self, bucket: str, key: str) -> Any:
        try:
            return await self._client.get_object(Bucket=bucket, Key=key)
        except ClientError as e:
            url = f"s3://{bucket}/{key}"
            if _error_code(e) in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(f"Object not found: {url}", details={"url": url}) from e
            raise StorageError(f"Failed to download object: {e}", details={"url": url}) from e
