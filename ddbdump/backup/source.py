# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Object Source - Restore producer.

Checks that a backup is complete (_SUCCESS marker), loads its manifest and
streams every referenced object line by line into the record channel.
A malformed line is logged and skipped; it never aborts the restore.
"""

from dataclasses import dataclass
from urllib.parse import urlparse

import structlog

from ddbdump.codec.wire import decode_record
from ddbdump.errors import explain_missing_completion_marker, explain_missing_manifest
from ddbdump.exceptions import (
    CodecError,
    IncompleteBackupError,
    ManifestError,
    ObjectNotFoundError,
    RestoreError,
    StorageError,
)
from ddbdump.pipeline.channel import RecordChannel
from ddbdump.storage.base import COMPLETION_MARKER, MANIFEST_OBJECT, ObjectStore, join_key
from ddbdump.storage.manifest import Manifest

logger = structlog.get_logger()


@dataclass
class SourceResult:
    """Counters of a restore read pass."""

    objects: int = 0
    records: int = 0
    skipped_lines: int = 0
    skipped_entries: int = 0


async def require_completion_marker(store: ObjectStore, prefix: str) -> None:
    """
    Ensure the backup under prefix carries its _SUCCESS marker.

    Raises:
        IncompleteBackupError: If the marker is missing
    """
    key = join_key(prefix, COMPLETION_MARKER)
    try:
        exists = await store.exists(key)
    except StorageError as e:
        raise IncompleteBackupError(
            f"Unable to retrieve the _SUCCESS flag information: {e.message}",
            details={"url": store.url_for(key)},
        ) from e

    if not exists:
        raise IncompleteBackupError(
            explain_missing_completion_marker(store.url_for(prefix)),
            details={"url": store.url_for(key)},
        )


async def load_manifest(store: ObjectStore, prefix: str) -> Manifest:
    """
    Download and parse the manifest of the backup under prefix.

    Raises:
        ManifestError: If the manifest is missing or corrupt
    """
    key = join_key(prefix, MANIFEST_OBJECT)
    try:
        data = await store.get(key)
    except ObjectNotFoundError as e:
        raise ManifestError(
            explain_missing_manifest(store.url_for(prefix)),
            details={"url": store.url_for(key)},
        ) from e
    except StorageError as e:
        raise ManifestError(
            f"Unable to retrieve the manifest: {e.message}",
            details={"url": store.url_for(key)},
        ) from e

    manifest = Manifest.from_json(data)
    logger.info(
        "manifest_loaded",
        url=store.url_for(key),
        name=manifest.name,
        version=manifest.version,
        entries=len(manifest.entries),
    )
    return manifest


async def stream_manifest_to_channel(
    store: ObjectStore,
    manifest: Manifest,
    channel: RecordChannel,
) -> SourceResult:
    """
    Send the records of every manifest entry into the channel, then close it.

    Entries whose URL scheme does not belong to the store are skipped.

    Raises:
        RestoreError: If a referenced object cannot be read
    """
    result = SourceResult()
    try:
        for entry in manifest.entries:
            if urlparse(entry.url).scheme != store.scheme:
                logger.warning("manifest_entry_skipped", url=entry.url, scheme=store.scheme)
                result.skipped_entries += 1
                continue

            try:
                line_number = 0
                async for line in store.iter_lines(entry.url):
                    line_number += 1
                    if not line.strip():
                        continue
                    try:
                        record = decode_record(line)
                    except CodecError as e:
                        logger.error(
                            "record_decode_failed",
                            url=entry.url,
                            line_number=line_number,
                            line=line.decode("utf-8", errors="replace"),
                            error=str(e),
                        )
                        result.skipped_lines += 1
                        continue
                    await channel.send(record)
                    result.records += 1
            except StorageError as e:
                raise RestoreError(
                    f"Unable to read backup object: {e.message}",
                    details={"url": entry.url},
                ) from e

            result.objects += 1
            logger.info("object_streamed", url=entry.url, records=result.records)

    except Exception as e:
        channel.close(error=e)
        logger.error("restore_read_failed", records=result.records, error=str(e))
        raise

    channel.close()
    logger.info(
        "restore_read_complete",
        objects=result.objects,
        records=result.records,
        skipped_lines=result.skipped_lines,
    )
    return result
