# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
DynamoDB Tests - table scanner, batch table writer and pre-flight checks.

These tests verify:
1. Scans paginate through the whole table and close the channel
2. Throttling is retried; every other backend error aborts
3. Batches never exceed 25 items and unprocessed items are resubmitted
4. A restore never writes into a missing, busy or non-empty table
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import FakeDynamoClient, client_error, make_item
from ddbdump.codec import record_from_dynamo
from ddbdump.dynamo import (
    MAX_BATCH_WRITE_ITEMS,
    TableState,
    TableStatus,
    describe_table_state,
    ensure_table_restorable,
    is_throttling_error,
    scan_table_to_channel,
    write_channel_to_table,
)
from ddbdump.dynamo.writer import WriteStats, submit_batch
from ddbdump.exceptions import (
    BackupError,
    ChannelAbortedError,
    PreconditionError,
    RestoreError,
    TableNotEmptyError,
    TableNotFoundError,
    TableNotWritableError,
)
from ddbdump.pipeline import RecordChannel


async def collect(channel: RecordChannel):
    return [r async for r in channel]


async def feed(channel: RecordChannel, items):
    for item in items:
        await channel.send(record_from_dynamo(item))
    channel.close()


def put_keys(requests):
    return [request["PutRequest"]["Item"]["pk"]["S"] for request in requests]


# ============================================================================
# Error classification
# ============================================================================

@pytest.mark.parametrize(
    "code",
    ["ProvisionedThroughputExceededException", "ThrottlingException", "RequestLimitExceeded"],
)
def test_throttling_codes_are_recognized(code: str):
    assert is_throttling_error(client_error(code))


def test_other_errors_are_not_throttling():
    assert not is_throttling_error(client_error("AccessDeniedException"))
    assert not is_throttling_error(RuntimeError("boom"))


# ============================================================================
# Table Scanner
# ============================================================================

@pytest.mark.asyncio
async def test_scan_paginates_whole_table():
    client = FakeDynamoClient(items=[make_item(i) for i in range(7)])
    channel = RecordChannel()

    sent, records = await asyncio.gather(
        scan_table_to_channel(client, "orders", channel, page_size=3, wait_seconds=0),
        collect(channel),
    )

    assert sent == 7
    assert [r["n"].number for r in records] == [str(i) for i in range(7)]
    assert len(client.scan_calls) == 3
    assert "ExclusiveStartKey" not in client.scan_calls[0]
    assert client.scan_calls[1]["ExclusiveStartKey"] == {"offset": {"N": "3"}}
    assert all(call["Limit"] == 3 for call in client.scan_calls)
    assert all(call["ReturnConsumedCapacity"] == "TOTAL" for call in client.scan_calls)
    assert channel.closed


@pytest.mark.asyncio
async def test_scan_empty_table_closes_channel():
    client = FakeDynamoClient(items=[])
    channel = RecordChannel()

    sent, records = await asyncio.gather(
        scan_table_to_channel(client, "orders", channel, page_size=10, wait_seconds=0),
        collect(channel),
    )

    assert sent == 0
    assert records == []


@pytest.mark.asyncio
async def test_scan_retries_throttled_page_without_duplicates():
    """A throttled page is retried with the same start key and delivers each record once."""
    client = FakeDynamoClient(items=[make_item(i) for i in range(4)])
    client.scan_errors = [client_error("ProvisionedThroughputExceededException", "Scan")]
    channel = RecordChannel()

    sent, records = await asyncio.gather(
        scan_table_to_channel(client, "orders", channel, page_size=2, wait_seconds=0),
        collect(channel),
    )

    assert sent == 4
    assert [r["pk"].string for r in records] == [f"item-{i:04d}" for i in range(4)]
    assert client.scan_calls[0] == client.scan_calls[1]


@pytest.mark.asyncio
async def test_scan_fatal_error_aborts_channel():
    client = FakeDynamoClient(items=[make_item(i) for i in range(4)])
    client.scan_errors = [client_error("AccessDeniedException", "Scan")]
    channel = RecordChannel()

    with pytest.raises(BackupError) as exc_info:
        await scan_table_to_channel(client, "orders", channel, page_size=2, wait_seconds=0)

    assert exc_info.value.details["code"] == "AccessDeniedException"
    assert channel.closed
    with pytest.raises(ChannelAbortedError):
        await channel.receive()


# ============================================================================
# Batch Table Writer
# ============================================================================

@pytest.mark.asyncio
async def test_writer_caps_batches_at_25_items():
    client = FakeDynamoClient()
    channel = RecordChannel()
    items = [make_item(i) for i in range(60)]

    _, stats = await asyncio.gather(
        feed(channel, items),
        write_channel_to_table(client, "orders", channel, batch_size=1000, wait_seconds=0),
    )

    assert [len(batch) for batch in client.batch_calls] == [25, 25, 10]
    assert max(len(batch) for batch in client.batch_calls) <= MAX_BATCH_WRITE_ITEMS
    assert stats.records == 60
    assert stats.batches == 3
    assert client.written == items


@pytest.mark.asyncio
async def test_writer_batch_stops_at_target_batch_size():
    """With batch_size 10, a batch never crosses a pause boundary."""
    client = FakeDynamoClient()
    channel = RecordChannel()

    _, stats = await asyncio.gather(
        feed(channel, [make_item(i) for i in range(25)]),
        write_channel_to_table(client, "orders", channel, batch_size=10, wait_seconds=0),
    )

    assert [len(batch) for batch in client.batch_calls] == [10, 10, 5]
    assert stats.records == 25


@pytest.mark.asyncio
async def test_submit_batch_resubmits_only_unprocessed_items():
    """Of 10 items, the last 3 come back unprocessed and are sent again alone."""
    client = FakeDynamoClient()
    client.batch_responses = [3]
    requests = [{"PutRequest": {"Item": make_item(i)}} for i in range(10)]
    stats = WriteStats()

    await submit_batch(client, "orders", requests, retry_seconds=0, stats=stats)

    assert len(client.batch_calls) == 2
    assert put_keys(client.batch_calls[1]) == ["item-0007", "item-0008", "item-0009"]
    assert len(client.written) == 10
    assert stats.retries == 1


@pytest.mark.asyncio
async def test_submit_batch_retries_throttled_batch():
    client = FakeDynamoClient()
    client.batch_responses = [client_error("ThrottlingException", "BatchWriteItem"), 0]
    requests = [{"PutRequest": {"Item": make_item(i)}} for i in range(5)]

    await submit_batch(client, "orders", requests, retry_seconds=0)

    assert len(client.batch_calls) == 2
    assert client.batch_calls[0] == client.batch_calls[1]
    assert len(client.written) == 5


@pytest.mark.asyncio
async def test_submit_batch_fatal_error_raises():
    client = FakeDynamoClient()
    client.batch_responses = [client_error("ValidationException", "BatchWriteItem")]
    requests = [{"PutRequest": {"Item": make_item(0)}}]

    with pytest.raises(RestoreError) as exc_info:
        await submit_batch(client, "orders", requests, retry_seconds=0)

    assert exc_info.value.details["code"] == "ValidationException"
    assert len(client.batch_calls) == 1


@pytest.mark.asyncio
async def test_submit_batch_rejects_oversized_batch():
    client = FakeDynamoClient()
    requests = [{"PutRequest": {"Item": make_item(i)}} for i in range(26)]

    with pytest.raises(RestoreError):
        await submit_batch(client, "orders", requests, retry_seconds=0)

    assert client.batch_calls == []


@pytest.mark.asyncio
async def test_writer_propagates_producer_abort():
    client = FakeDynamoClient()
    channel = RecordChannel()

    async def failing_feed():
        await channel.send(record_from_dynamo(make_item(0)))
        channel.close(error=RuntimeError("object unreadable"))

    with pytest.raises(ChannelAbortedError):
        await asyncio.gather(
            failing_feed(),
            write_channel_to_table(client, "orders", channel, batch_size=10, wait_seconds=0),
        )

    assert client.written == []


# ============================================================================
# Pre-flight table check
# ============================================================================

@pytest.mark.asyncio
async def test_describe_missing_table_is_absent():
    client = FakeDynamoClient(status=None)

    state = await describe_table_state(client, "orders")

    assert state.status == TableStatus.ABSENT


@pytest.mark.asyncio
async def test_describe_active_table():
    client = FakeDynamoClient(status="ACTIVE", item_count=5)

    state = await describe_table_state(client, "orders")

    assert state == TableState("orders", TableStatus.ACTIVE, 5)


@pytest.mark.asyncio
async def test_describe_unknown_status_fails():
    client = FakeDynamoClient(status="MELTING")

    with pytest.raises(PreconditionError):
        await describe_table_state(client, "orders")


@pytest.mark.asyncio
async def test_describe_access_denied_fails():
    client = MagicMock()
    client.describe_table = AsyncMock(side_effect=client_error("AccessDeniedException", "DescribeTable"))

    with pytest.raises(PreconditionError) as exc_info:
        await describe_table_state(client, "orders")

    client.describe_table.assert_awaited_once_with(TableName="orders")
    assert exc_info.value.details == {"table": "orders"}

def test_restore_guard_absent_table():
    with pytest.raises(TableNotFoundError):
        ensure_table_restorable(TableState("orders", TableStatus.ABSENT))


@pytest.mark.parametrize("status", [TableStatus.CREATING, TableStatus.UPDATING, TableStatus.DELETING])
def test_restore_guard_transitional_table(status: TableStatus):
    with pytest.raises(TableNotWritableError) as exc_info:
        ensure_table_restorable(TableState("orders", status))

    assert status.value in exc_info.value.message


def test_restore_guard_non_empty_table():
    with pytest.raises(TableNotEmptyError) as exc_info:
        ensure_table_restorable(TableState("orders", TableStatus.ACTIVE, item_count=5))

    assert exc_info.value.details["item_count"] == 5


def test_restore_guard_allows_append_or_empty_table():
    ensure_table_restorable(TableState("orders", TableStatus.ACTIVE, item_count=0))
    ensure_table_restorable(
        TableState("orders", TableStatus.ACTIVE, item_count=5),
        allow_append=True,
    )
