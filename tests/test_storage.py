# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Storage Tests - local and S3 object stores, and the manifest format.
"""

import json
from pathlib import Path

import pytest

from conftest import FakeS3Client, client_error
from ddbdump.exceptions import ManifestError, ObjectNotFoundError, StorageError
from ddbdump.storage import (
    MANIFEST_NAME,
    MANIFEST_VERSION,
    LocalObjectStore,
    Manifest,
    S3ObjectStore,
    join_key,
)
from ddbdump.storage.base import iter_chunked_lines
from ddbdump.storage.s3 import parse_s3_url


# ============================================================================
# Helpers
# ============================================================================

def test_join_key():
    assert join_key("", "manifest") == "manifest"
    assert join_key("backups/orders/", "manifest") == "backups/orders/manifest"
    assert join_key("/backups", "_SUCCESS") == "backups/_SUCCESS"


def test_parse_s3_url():
    assert parse_s3_url("s3://bucket/a/b/c") == ("bucket", "a/b/c")

    with pytest.raises(StorageError):
        parse_s3_url("file:///tmp/x")


@pytest.mark.asyncio
async def test_iter_chunked_lines_splits_across_chunk_boundaries():
    data = b'{"a":1}\n{"b":2}\n{"c":3}'
    offset = 0

    async def read(n: int) -> bytes:
        nonlocal offset
        chunk = data[offset:offset + n]
        offset += len(chunk)
        return chunk

    lines = [line async for line in iter_chunked_lines(read, chunk_size=5)]

    assert lines == [b'{"a":1}', b'{"b":2}', b'{"c":3}']


# ============================================================================
# Local store
# ============================================================================

@pytest.mark.asyncio
async def test_local_store_put_get_exists(local_store: LocalObjectStore):
    assert not await local_store.exists("backup/manifest")

    await local_store.put("backup/manifest", b"{}")

    assert await local_store.exists("backup/manifest")
    assert await local_store.get("backup/manifest") == b"{}"
    assert not local_store.path_for("backup/manifest.tmp").exists()


@pytest.mark.asyncio
async def test_local_store_url_round_trip(local_store: LocalObjectStore):
    await local_store.put("backup/obj", b"line-1\nline-2\n")
    url = local_store.url_for("backup/obj")

    assert url.startswith("file://")
    assert [line async for line in local_store.iter_lines(url)] == [b"line-1", b"line-2"]


@pytest.mark.asyncio
async def test_local_store_missing_object(local_store: LocalObjectStore):
    with pytest.raises(ObjectNotFoundError):
        await local_store.get("nope")

    with pytest.raises(ObjectNotFoundError):
        async for _ in local_store.iter_lines(local_store.url_for("nope")):
            pass


@pytest.mark.asyncio
async def test_local_store_zero_byte_object(temp_dir: Path):
    store = LocalObjectStore(temp_dir)
    await store.put("_SUCCESS", b"")

    assert (temp_dir / "_SUCCESS").stat().st_size == 0


# ============================================================================
# S3 store
# ============================================================================

@pytest.mark.asyncio
async def test_s3_store_put_uses_infrequent_access_and_encryption(s3_client: FakeS3Client):
    store = S3ObjectStore(s3_client, "backups")

    await store.put("orders/manifest", b"{}")

    call = s3_client.put_calls[0]
    assert call["Bucket"] == "backups"
    assert call["StorageClass"] == "STANDARD_IA"
    assert call["ServerSideEncryption"] == "AES256"
    assert s3_client.objects[("backups", "orders/manifest")] == b"{}"


@pytest.mark.asyncio
async def test_s3_store_exists_and_get(s3_client: FakeS3Client):
    store = S3ObjectStore(s3_client, "backups")

    assert not await store.exists("orders/_SUCCESS")
    await store.put("orders/_SUCCESS", b"")
    assert await store.exists("orders/_SUCCESS")

    with pytest.raises(ObjectNotFoundError):
        await store.get("orders/manifest")


@pytest.mark.asyncio
async def test_s3_store_iter_lines(s3_client: FakeS3Client):
    store = S3ObjectStore(s3_client, "backups")
    await store.put("orders/data", b"a\nb\nc\n")

    lines = [line async for line in store.iter_lines(store.url_for("orders/data"))]

    assert store.url_for("orders/data") == "s3://backups/orders/data"
    assert lines == [b"a", b"b", b"c"]


@pytest.mark.asyncio
async def test_s3_store_upload_failure(s3_client: FakeS3Client):
    s3_client.put_errors = [client_error("AccessDenied", "PutObject")]
    store = S3ObjectStore(s3_client, "backups")

    with pytest.raises(StorageError) as exc_info:
        await store.put("orders/data", b"x")

    assert exc_info.value.details["url"] == "s3://backups/orders/data"


# ============================================================================
# Manifest
# ============================================================================

def test_manifest_serialization():
    manifest = Manifest()
    manifest.append("s3://backups/orders/one")
    manifest.append("s3://backups/orders/two")

    doc = json.loads(manifest.to_json())

    assert doc == {
        "name": "DynamoDB-export",
        "version": 3,
        "entries": [
            {"url": "s3://backups/orders/one", "mandatory": True},
            {"url": "s3://backups/orders/two", "mandatory": True},
        ],
    }


def test_manifest_parse_keeps_entry_order():
    manifest = Manifest.from_json(
        b'{"name":"DynamoDB-export","version":3,'
        b'"entries":[{"url":"s3://b/2","mandatory":true},{"url":"s3://b/1","mandatory":true}]}'
    )

    assert manifest.name == MANIFEST_NAME
    assert manifest.version == MANIFEST_VERSION
    assert [entry.url for entry in manifest.entries] == ["s3://b/2", "s3://b/1"]


def test_manifest_null_entries_is_empty():
    assert Manifest.from_json('{"name":"DynamoDB-export","version":3,"entries":null}').entries == []


@pytest.mark.parametrize(
    "data",
    [
        b"{not json",
        b"[]",
        b"{}",
        b'{"name": "DynamoDB-export", "version": 3}',
        b'{"entries": 0}',
        b'{"entries": false}',
        b'{"entries": "nope"}',
        b'{"entries": [{"mandatory": true}]}',
    ],
)
def test_manifest_rejects_corrupt_documents(data: bytes):
    with pytest.raises(ManifestError):
        Manifest.from_json(data)
