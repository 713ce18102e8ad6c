# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Batch Table Writer - Restore consumer.

Drains the record channel into BatchWriteItem requests of at most 25
items, and pauses after every batch_size records to stay within the
table's provisioned write capacity.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List

import structlog
from botocore.exceptions import ClientError

from ddbdump.codec.values import record_to_dynamo
from ddbdump.dynamo.errors import error_code, is_throttling_error
from ddbdump.exceptions import RestoreError
from ddbdump.pipeline.channel import RecordChannel

logger = structlog.get_logger()

# Hard limit of the BatchWriteItem API
MAX_BATCH_WRITE_ITEMS = 25


@dataclass
class WriteStats:
    """Counters of a restore write pass."""

    records: int = 0
    batches: int = 0
    retries: int = 0


async def pull_batch(
    channel: RecordChannel,
    batch_size: int,
    written_since_pause: int,
) -> List[Dict[str, Any]]:
    """
    Pull records from the channel and wrap them as PutRequests.

    Stops at MAX_BATCH_WRITE_ITEMS records, or once written_since_pause plus
    the batch reaches batch_size, or when the channel is drained.

    Returns:
        List of write requests; empty when the channel is closed and drained
    """
    requests: List[Dict[str, Any]] = []
    while True:
        record = await channel.receive()
        if record is None:
            break
        requests.append({"PutRequest": {"Item": record_to_dynamo(record)}})
        if (
            len(requests) >= MAX_BATCH_WRITE_ITEMS
            or written_since_pause + len(requests) >= batch_size
        ):
            break
    return requests


async def submit_batch(
    client: Any,
    table_name: str,
    requests: List[Dict[str, Any]],
    retry_seconds: float,
    stats: WriteStats | None = None,
) -> None:
    """
    Write one batch, resubmitting unprocessed items until none are left.

    A throttled request is treated as if every pending item came back
    unprocessed.

    Args:
        client: aiobotocore DynamoDB client
        table_name: Target table
        requests: Write requests, at most MAX_BATCH_WRITE_ITEMS
        retry_seconds: Pause before each resubmission
        stats: Optional counters to update with retries

    Raises:
        RestoreError: On any backend error other than throttling
    """
    if len(requests) > MAX_BATCH_WRITE_ITEMS:
        raise RestoreError(
            f"Batch of {len(requests)} items exceeds the limit of {MAX_BATCH_WRITE_ITEMS}",
            details={"table": table_name},
        )

    pending = requests
    while pending:
        try:
            response = await client.batch_write_item(
                RequestItems={table_name: pending},
                ReturnConsumedCapacity="TOTAL",
            )
        except ClientError as e:
            if not is_throttling_error(e):
                raise RestoreError(
                    f"Unrecoverable error during batch write: {e}",
                    details={"table": table_name, "code": error_code(e), "items": len(pending)},
                ) from e
            logger.warning(
                "batch_write_throttled",
                table=table_name,
                items=len(pending),
                retry_in=retry_seconds,
            )
            if stats is not None:
                stats.retries += 1
            await asyncio.sleep(retry_seconds)
            continue

        unprocessed = response.get("UnprocessedItems", {}).get(table_name, [])
        consumed = response.get("ConsumedCapacity") or [{}]
        logger.info(
            "batch_written",
            table=table_name,
            items=len(pending),
            unprocessed=len(unprocessed),
            capacity=consumed[0].get("CapacityUnits"),
        )

        if unprocessed:
            if stats is not None:
                stats.retries += 1
            await asyncio.sleep(retry_seconds)
        pending = unprocessed


async def write_channel_to_table(
    client: Any,
    table_name: str,
    channel: RecordChannel,
    batch_size: int,
    wait_seconds: float,
) -> WriteStats:
    """
    Drain the channel into the table.

    Args:
        client: aiobotocore DynamoDB client
        table_name: Target table
        channel: Channel to consume until closed
        batch_size: Records to write before each pause
        wait_seconds: Pause after batch_size records; retries wait twice as long

    Returns:
        WriteStats for the whole restore
    """
    stats = WriteStats()
    written_since_pause = 0

    while True:
        requests = await pull_batch(channel, batch_size, written_since_pause)
        if not requests:
            break

        await submit_batch(client, table_name, requests, wait_seconds * 2, stats)
        stats.records += len(requests)
        stats.batches += 1
        written_since_pause += len(requests)

        if written_since_pause >= batch_size:
            await asyncio.sleep(wait_seconds)
            written_since_pause = 0

    logger.info(
        "table_write_complete",
        table=table_name,
        records=stats.records,
        batches=stats.batches,
        retries=stats.retries,
    )
    return stats
