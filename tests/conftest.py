# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for ddbdump tests.

Provides in-memory fakes of the aiobotocore DynamoDB and S3 clients, a
fake session handing them out, and test configuration helpers.
"""

import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Generator, List

import pytest
from botocore.exceptions import ClientError


def client_error(code: str, operation: str = "Operation") -> ClientError:
    """Build a botocore ClientError carrying the given AWS error code."""
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def make_item(index: int, **extra: Dict[str, Any]) -> Dict[str, Any]:
    """A DynamoDB item in the botocore low-level shape."""
    item: Dict[str, Any] = {
        "pk": {"S": f"item-{index:04d}"},
        "n": {"N": str(index)},
    }
    item.update(extra)
    return item


class FakeDynamoClient:
    """
    In-memory stand-in for an aiobotocore DynamoDB client.

    Scripted failures:
        scan_errors: exceptions raised by the next scan() calls, in order
        batch_responses: per batch_write_item() call, an exception to raise
            or an int N meaning "report the last N items as unprocessed"
    """

    def __init__(
        self,
        items: List[Dict[str, Any]] | None = None,
        table_name: str = "orders",
        status: str | None = "ACTIVE",
        item_count: int = 0,
    ):
        self.items = list(items or [])
        self.table_name = table_name
        self.status = status
        self.item_count = item_count
        self.scan_errors: List[Exception] = []
        self.batch_responses: List[Any] = []
        self.scan_calls: List[Dict[str, Any]] = []
        self.batch_calls: List[List[Dict[str, Any]]] = []
        self.written: List[Dict[str, Any]] = []

    async def scan(self, **params: Any) -> Dict[str, Any]:
        self.scan_calls.append(params)
        if self.scan_errors:
            raise self.scan_errors.pop(0)

        start = 0
        if "ExclusiveStartKey" in params:
            start = int(params["ExclusiveStartKey"]["offset"]["N"])
        limit = params.get("Limit", len(self.items) or 1)
        page = self.items[start:start + limit]

        response: Dict[str, Any] = {
            "Items": page,
            "Count": len(page),
            "ConsumedCapacity": {"TableName": params["TableName"], "CapacityUnits": 0.5},
        }
        if start + limit < len(self.items):
            response["LastEvaluatedKey"] = {"offset": {"N": str(start + limit)}}
        return response

    async def describe_table(self, TableName: str) -> Dict[str, Any]:
        if self.status is None:
            raise client_error("ResourceNotFoundException", "DescribeTable")
        return {
            "Table": {
                "TableName": TableName,
                "TableStatus": self.status,
                "ItemCount": self.item_count,
            }
        }

    async def batch_write_item(self, RequestItems: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        ((table_name, requests),) = RequestItems.items()
        self.batch_calls.append(list(requests))

        outcome = self.batch_responses.pop(0) if self.batch_responses else 0
        if isinstance(outcome, Exception):
            raise outcome

        processed = requests[: len(requests) - outcome]
        unprocessed = requests[len(requests) - outcome:]
        self.written.extend(request["PutRequest"]["Item"] for request in processed)

        response: Dict[str, Any] = {
            "UnprocessedItems": {table_name: unprocessed} if unprocessed else {},
            "ConsumedCapacity": [{"TableName": table_name, "CapacityUnits": float(len(processed))}],
        }
        return response


class FakeBody:
    """Streaming body returned by FakeS3Client.get_object()."""

    def __init__(self, data: bytes):
        self._data = data
        self._offset = 0

    async def read(self, amt: int = -1) -> bytes:
        if amt is None or amt < 0:
            amt = len(self._data) - self._offset
        chunk = self._data[self._offset:self._offset + amt]
        self._offset += len(chunk)
        return chunk

    async def __aenter__(self) -> "FakeBody":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None


class FakeS3Client:
    """In-memory stand-in for an aiobotocore S3 client."""

    def __init__(self):
        self.objects: Dict[tuple, bytes] = {}
        self.put_calls: List[Dict[str, Any]] = []
        self.put_errors: List[Exception] = []

    async def put_object(self, Bucket: str, Key: str, Body: bytes, **kwargs: Any) -> Dict[str, Any]:
        self.put_calls.append({"Bucket": Bucket, "Key": Key, **kwargs})
        if self.put_errors:
            raise self.put_errors.pop(0)
        self.objects[(Bucket, Key)] = bytes(Body)
        return {}

    async def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        if (Bucket, Key) not in self.objects:
            raise client_error("404", "HeadObject")
        return {"ContentLength": len(self.objects[(Bucket, Key)])}

    async def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        if (Bucket, Key) not in self.objects:
            raise client_error("NoSuchKey", "GetObject")
        return {"Body": FakeBody(self.objects[(Bucket, Key)])}


class FakeSession:
    """Hands out the fake clients the way aiobotocore's session does."""

    def __init__(self, dynamo: FakeDynamoClient, s3: FakeS3Client | None = None):
        self.clients = {"dynamodb": dynamo, "s3": s3 or FakeS3Client()}
        self.created: List[tuple] = []

    @asynccontextmanager
    async def _client(self, service: str):
        yield self.clients[service]

    def create_client(self, service: str, **kwargs: Any):
        self.created.append((service, kwargs))
        return self._client(service)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dynamo_client() -> FakeDynamoClient:
    """Fake DynamoDB client holding three items."""
    return FakeDynamoClient(items=[make_item(i) for i in range(3)])


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def local_store(temp_dir: Path):
    """Local object store rooted in the temporary directory."""
    from ddbdump.storage.local import LocalObjectStore

    return LocalObjectStore(temp_dir / "store")


def make_config(destination: str, **overrides: Any):
    """Create a fast test configuration (no pauses between pages)."""
    from ddbdump.config import DumpConfig

    values: Dict[str, Any] = {
        "table": "orders",
        "destination": destination,
        "batch_size": 100,
        "wait_ms": 0,
    }
    values.update(overrides)
    return DumpConfig(**values)
