# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Table Scanner - Backup producer.

Paginates a full table scan and sends every item into the record channel.
Records of a page are only sent once the page request has succeeded, so
retrying a throttled request with the same ExclusiveStartKey never
re-delivers records.
"""

import asyncio
from typing import Any, Dict

import structlog
from botocore.exceptions import ClientError

from ddbdump.codec.values import record_from_dynamo
from ddbdump.dynamo.errors import error_code, is_throttling_error
from ddbdump.exceptions import BackupError
from ddbdump.pipeline.channel import RecordChannel

logger = structlog.get_logger()


async def scan_table_to_channel(
    client: Any,
    table_name: str,
    channel: RecordChannel,
    page_size: int,
    wait_seconds: float,
) -> int:
    """
    Scan an entire table into the channel, then close it.

    Args:
        client: aiobotocore DynamoDB client
        table_name: Table to scan
        channel: Channel to feed; closed when this returns or raises
        page_size: Limit passed to each scan request (ignored if < 1)
        wait_seconds: Pause after each page; throttled requests wait twice as long

    Returns:
        Number of records sent

    Raises:
        BackupError: On any backend error other than throttling
    """
    sent = 0
    pages = 0
    try:
        last_evaluated_key: Dict[str, Any] | None = None
        while True:
            params: Dict[str, Any] = {
                "TableName": table_name,
                "ReturnConsumedCapacity": "TOTAL",
            }
            if page_size > 0:
                params["Limit"] = page_size
            if last_evaluated_key:
                params["ExclusiveStartKey"] = last_evaluated_key

            try:
                page = await client.scan(**params)
            except ClientError as e:
                if not is_throttling_error(e):
                    raise BackupError(
                        f"Unable to scan table: {e}",
                        details={"table": table_name, "code": error_code(e), "pages": pages},
                    ) from e
                logger.warning(
                    "scan_throttled",
                    table=table_name,
                    retry_in=wait_seconds * 2,
                    error=str(e),
                )
                await asyncio.sleep(wait_seconds * 2)
                continue

            items = page.get("Items", [])
            pages += 1
            logger.info(
                "scan_page_received",
                table=table_name,
                page=pages,
                items=len(items),
                capacity=page.get("ConsumedCapacity", {}).get("CapacityUnits"),
            )

            for item in items:
                await channel.send(record_from_dynamo(item))
                sent += 1

            await asyncio.sleep(wait_seconds)

            last_evaluated_key = page.get("LastEvaluatedKey")
            if not last_evaluated_key:
                break

    except Exception as e:
        channel.close(error=e)
        logger.error("scan_failed", table=table_name, sent=sent, error=str(e))
        raise

    channel.close()
    logger.info("scan_complete", table=table_name, pages=pages, records=sent)
    return sent
