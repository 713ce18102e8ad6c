# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Core - Top-level orchestrator for backup and restore runs.

Each run opens its own clients, channel and sink/source from the
per-process DumpState; nothing is shared through module globals.
"""

from contextlib import AsyncExitStack
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any, Dict, TypedDict

import structlog

from ddbdump.config import Action, Destination, DumpConfig, StorageScheme

logger = structlog.get_logger()


@dataclass
class BackupResult:
    """Result of a backup run."""

    run_id: str  # ULID
    table: str
    destination: str
    records: int
    objects: int
    bytes_written: int
    duration_seconds: float


@dataclass
class RestoreResult:
    """Result of a restore run."""

    run_id: str  # ULID
    table: str
    destination: str
    records: int
    objects: int
    skipped_lines: int
    batches: int
    retries: int
    duration_seconds: float


@dataclass
class DumpMetrics:
    """Counters accumulated over the runs of one DumpState."""

    total_runs: int
    last_run_at: datetime | None
    total_backed_up: int
    total_restored: int
    last_error: str | None


class DumpState(TypedDict):
    """Runtime state shared by the runs of one process."""

    session: Any  # aiobotocore session
    last_run_at: datetime | None
    total_runs: int
    total_backed_up: int
    total_restored: int
    last_error: str | None


def initialize_dump_state(config: DumpConfig | None = None, session: Any = None) -> DumpState:
    """
    Initialize runtime state.

    Args:
        config: Configuration (unused for now, kept for symmetry with run())
        session: aiobotocore session; a new one is created when omitted

    Returns:
        Initialized DumpState dictionary
    """
    if session is None:
        from aiobotocore.session import get_session

        session = get_session()

    return DumpState(
        session=session,
        last_run_at=None,
        total_runs=0,
        total_backed_up=0,
        total_restored=0,
        last_error=None,
    )


def _client_kwargs(config: DumpConfig, endpoint_url: str | None) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"region_name": config.region}
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return kwargs


async def _open_dynamo_client(stack: AsyncExitStack, config: DumpConfig, state: DumpState) -> Any:
    return await stack.enter_async_context(
        state["session"].create_client(
            "dynamodb", **_client_kwargs(config, config.dynamodb_endpoint_url)
        )
    )


async def _open_object_store(
    stack: AsyncExitStack,
    config: DumpConfig,
    state: DumpState,
    destination: Destination,
) -> Any:
    """Open the object store backend matching the destination scheme."""
    if destination.scheme == StorageScheme.S3:
        from ddbdump.storage.s3 import S3ObjectStore

        s3_client = await stack.enter_async_context(
            state["session"].create_client(
                "s3", **_client_kwargs(config, config.s3_endpoint_url)
            )
        )
        return S3ObjectStore(s3_client, destination.location)

    from ddbdump.storage.local import LocalObjectStore

    return LocalObjectStore(destination.location)


async def run_backup(config: DumpConfig, state: DumpState) -> BackupResult:
    """
    Back up a whole table to the configured destination.

    Runs the table scanner and the object sink as two concurrent tasks
    joined by a record channel. The _SUCCESS marker is only written when
    both finish without error.

    Args:
        config: Run configuration
        state: Runtime state

    Returns:
        BackupResult with run details
    """
    from ulid import ULID

    from ddbdump.backup.sink import ObjectSink
    from ddbdump.dynamo.scanner import scan_table_to_channel
    from ddbdump.pipeline import RecordChannel, run_pipeline

    run_id = str(ULID())
    start_time = datetime.now(UTC)
    destination = config.resolve_destination(start_time)
    log = logger.bind(run_id=run_id, table=config.table, destination=str(destination))
    log.info("backup_started", buffer_size=config.buffer_size, batch_size=config.batch_size)

    try:
        async with AsyncExitStack() as stack:
            dynamo_client = await _open_dynamo_client(stack, config, state)
            store = await _open_object_store(stack, config, state, destination)

            channel = RecordChannel()
            sink = ObjectSink(store, destination.prefix, config.buffer_size)
            scanned, sink_result = await run_pipeline(
                scan_table_to_channel(
                    dynamo_client,
                    config.table,
                    channel,
                    config.batch_size,
                    config.wait_seconds,
                ),
                sink.consume(channel),
                name="backup",
            )

    except Exception as e:
        state["last_error"] = str(e)
        log.error("backup_failed", error=str(e))
        raise

    duration = (datetime.now(UTC) - start_time).total_seconds()

    state["last_run_at"] = datetime.now(UTC)
    state["total_runs"] += 1
    state["total_backed_up"] += sink_result.records

    result = BackupResult(
        run_id=run_id,
        table=config.table,
        destination=str(destination),
        records=sink_result.records,
        objects=sink_result.objects,
        bytes_written=sink_result.bytes_written,
        duration_seconds=duration,
    )

    log.info(
        "backup_completed",
        records=result.records,
        scanned=scanned,
        objects=result.objects,
        bytes_written=result.bytes_written,
        duration=duration,
    )
    return result


async def run_restore(config: DumpConfig, state: DumpState) -> RestoreResult:
    """
    Restore a table from a completed backup.

    Guards, in order, before any data moves:
    1. The target table exists, is ACTIVE, and is empty (unless appending)
    2. The backup carries its _SUCCESS marker
    3. The manifest can be loaded

    Then the object source and the batch table writer run as two
    concurrent tasks joined by a record channel.

    Args:
        config: Run configuration
        state: Runtime state

    Returns:
        RestoreResult with run details
    """
    from ulid import ULID

    from ddbdump.backup.source import (
        load_manifest,
        require_completion_marker,
        stream_manifest_to_channel,
    )
    from ddbdump.dynamo.tables import describe_table_state, ensure_table_restorable
    from ddbdump.dynamo.writer import write_channel_to_table
    from ddbdump.pipeline import RecordChannel, run_pipeline

    run_id = str(ULID())
    start_time = datetime.now(UTC)
    destination = config.resolve_destination(start_time)
    log = logger.bind(run_id=run_id, table=config.table, destination=str(destination))
    log.info("restore_started", append=config.restore_append, batch_size=config.batch_size)

    try:
        async with AsyncExitStack() as stack:
            dynamo_client = await _open_dynamo_client(stack, config, state)

            table_state = await describe_table_state(dynamo_client, config.table)
            ensure_table_restorable(table_state, allow_append=config.restore_append)

            store = await _open_object_store(stack, config, state, destination)
            await require_completion_marker(store, destination.prefix)
            manifest = await load_manifest(store, destination.prefix)

            channel = RecordChannel()
            source_result, write_stats = await run_pipeline(
                stream_manifest_to_channel(store, manifest, channel),
                write_channel_to_table(
                    dynamo_client,
                    config.table,
                    channel,
                    config.batch_size,
                    config.wait_seconds,
                ),
                name="restore",
            )

    except Exception as e:
        state["last_error"] = str(e)
        log.error("restore_failed", error=str(e))
        raise

    duration = (datetime.now(UTC) - start_time).total_seconds()

    state["last_run_at"] = datetime.now(UTC)
    state["total_runs"] += 1
    state["total_restored"] += write_stats.records

    result = RestoreResult(
        run_id=run_id,
        table=config.table,
        destination=str(destination),
        records=write_stats.records,
        objects=source_result.objects,
        skipped_lines=source_result.skipped_lines,
        batches=write_stats.batches,
        retries=write_stats.retries,
        duration_seconds=duration,
    )

    log.info(
        "restore_completed",
        records=result.records,
        objects=result.objects,
        skipped_lines=result.skipped_lines,
        batches=result.batches,
        retries=result.retries,
        duration=duration,
    )
    return result


async def run(config: DumpConfig, state: DumpState) -> BackupResult | RestoreResult:
    """Run the action selected by config.action."""
    if config.action == Action.RESTORE:
        return await run_restore(config, state)
    return await run_backup(config, state)


def get_metrics(state: DumpState) -> DumpMetrics:
    """Get counters accumulated by the runs of this state."""
    return DumpMetrics(
        total_runs=state["total_runs"],
        last_run_at=state["last_run_at"],
        total_backed_up=state["total_backed_up"],
        total_restored=state["total_restored"],
        last_error=state["last_error"],
    )
