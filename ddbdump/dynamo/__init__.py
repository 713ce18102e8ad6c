# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
DynamoDB side of the pipeline - scanning, batch writing and table checks.
"""

from ddbdump.dynamo.errors import is_throttling_error

from ddbdump.dynamo.scanner import scan_table_to_channel

from ddbdump.dynamo.tables import (
    TableState,
    TableStatus,
    describe_table_state,
    ensure_table_restorable,
)

from ddbdump.dynamo.writer import (
    MAX_BATCH_WRITE_ITEMS,
    WriteStats,
    write_channel_to_table,
)

__all__ = [
    # Errors
    "is_throttling_error",
    # Backup producer
    "scan_table_to_channel",
    # Pre-flight
    "TableState",
    "TableStatus",
    "describe_table_state",
    "ensure_table_restorable",
    # Restore consumer
    "MAX_BATCH_WRITE_ITEMS",
    "WriteStats",
    "write_channel_to_table",
]
