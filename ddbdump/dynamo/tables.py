# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Table Checks - Pre-flight state check before a restore.

A restore only writes into a table that exists, is ACTIVE, and is empty
(or the operator explicitly allowed appending).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog
from botocore.exceptions import ClientError

from ddbdump.dynamo.errors import error_code
from ddbdump.errors import (
    explain_table_not_empty,
    explain_table_not_found,
    explain_table_not_writable,
)
from ddbdump.exceptions import (
    PreconditionError,
    TableNotEmptyError,
    TableNotFoundError,
    TableNotWritableError,
)

logger = structlog.get_logger()


class TableStatus(str, Enum):
    """Status of a DynamoDB table as seen by describe_table."""

    ABSENT = "ABSENT"  # describe_table reported ResourceNotFoundException
    ACTIVE = "ACTIVE"
    CREATING = "CREATING"
    UPDATING = "UPDATING"
    DELETING = "DELETING"
    ARCHIVING = "ARCHIVING"
    ARCHIVED = "ARCHIVED"
    INACCESSIBLE_ENCRYPTION_CREDENTIALS = "INACCESSIBLE_ENCRYPTION_CREDENTIALS"


@dataclass(frozen=True)
class TableState:
    """Result of the pre-flight table check."""

    table_name: str
    status: TableStatus
    item_count: int = 0


async def describe_table_state(client: Any, table_name: str) -> TableState:
    """
    Describe the target table.

    Args:
        client: aiobotocore DynamoDB client
        table_name: Table to inspect

    Returns:
        TableState; status is ABSENT when the table does not exist

    Raises:
        PreconditionError: If the table cannot be described or its status
            is not recognized
    """
    try:
        response = await client.describe_table(TableName=table_name)
    except ClientError as e:
        if error_code(e) == "ResourceNotFoundException":
            return TableState(table_name=table_name, status=TableStatus.ABSENT)
        raise PreconditionError(
            f"Unable to retrieve the target table information: {e}",
            details={"table": table_name},
        ) from e

    table = response["Table"]
    raw_status = table.get("TableStatus")
    try:
        status = TableStatus(raw_status)
    except ValueError as e:
        raise PreconditionError(
            "Unable to determine the target table status",
            details={"table": table_name, "status": raw_status},
        ) from e

    state = TableState(
        table_name=table_name,
        status=status,
        item_count=int(table.get("ItemCount", 0)),
    )
    logger.debug(
        "table_described",
        table=table_name,
        status=state.status.value,
        item_count=state.item_count,
    )
    return state


def ensure_table_restorable(state: TableState, allow_append: bool = False) -> None:
    """
    Refuse to restore into a table that is missing, busy, or already holds data.

    Args:
        state: Result of describe_table_state()
        allow_append: Accept a non-empty table

    Raises:
        TableNotFoundError: Table does not exist
        TableNotWritableError: Table is not ACTIVE
        TableNotEmptyError: Table has items and appending is not allowed
    """
    details = {
        "table": state.table_name,
        "status": state.status.value,
        "item_count": state.item_count,
    }

    if state.status == TableStatus.ABSENT:
        raise TableNotFoundError(explain_table_not_found(state.table_name), details=details)

    if state.status != TableStatus.ACTIVE:
        raise TableNotWritableError(
            explain_table_not_writable(state.table_name, state.status.value),
            details=details,
        )

    if state.item_count > 0 and not allow_append:
        raise TableNotEmptyError(
            explain_table_not_empty(state.table_name, state.item_count),
            details=details,
        )

    logger.info("table_ready_for_restore", **details, append=allow_append)
