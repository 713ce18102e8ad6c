# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Configuration - Immutable configuration data structures.

All configuration is frozen (immutable) after creation to prevent
accidental modification during a run.
"""

from dataclasses import dataclass, replace
from datetime import datetime, UTC
from enum import Enum
from pathlib import Path
from typing import List
from urllib.parse import unquote, urlparse
import re

from ddbdump.backup.sink import DEFAULT_BUFFER_SIZE
from ddbdump.storage.base import join_key

# UTC sub-folder format used when date_folder is enabled
DATE_FOLDER_FORMAT = "%Y-%m-%d-%H-%M-%S"


class Action(str, Enum):
    """What a run does."""

    BACKUP = "backup"  # Table -> object store
    RESTORE = "restore"  # Object store -> table


class StorageScheme(str, Enum):
    """Supported object store backends."""

    S3 = "s3"
    FILE = "file"


@dataclass(frozen=True)
class Destination:
    """
    Parsed backup location.

    For S3, location is the bucket and prefix the folder inside it.
    For the local filesystem, location is the root directory.
    """

    scheme: StorageScheme
    location: str
    prefix: str = ""

    @classmethod
    def parse(cls, url: str) -> "Destination":
        """
        Parse s3://bucket/folder, file:///path or a plain path.

        Raises:
            ValueError: If the URL is not usable
        """
        if not url:
            raise ValueError("destination must not be empty")

        parsed = urlparse(url)
        if parsed.scheme == "s3":
            if not parsed.netloc:
                raise ValueError(f"S3 destination has no bucket: {url}")
            return cls(StorageScheme.S3, parsed.netloc, parsed.path.strip("/"))

        if parsed.scheme == "file":
            if parsed.netloc not in ("", "localhost"):
                raise ValueError(
                    f"file destination must be an absolute path (file:///dir), got host {parsed.netloc!r}"
                )
            return cls(StorageScheme.FILE, unquote(parsed.path) or "/")

        if parsed.scheme == "":
            return cls(StorageScheme.FILE, str(Path(url)))

        raise ValueError(f"Unsupported destination scheme: {parsed.scheme!r}")

    def with_subfolder(self, name: str) -> "Destination":
        return replace(self, prefix=join_key(self.prefix, name))

    def __str__(self) -> str:
        if self.scheme == StorageScheme.S3:
            return f"s3://{join_key(self.location, self.prefix)}"
        return str(Path(self.location, self.prefix))


def _validate_table_name(table: str) -> bool:
    """DynamoDB table names: 3-255 chars of [a-zA-Z0-9_.-]."""
    return bool(table) and re.match(r"^[a-zA-Z0-9_.-]{3,255}$", table) is not None


@dataclass(frozen=True)
class DumpConfig:
    """
    Immutable configuration for one backup or restore run.
    """

    # Required: table to back up from or restore into
    table: str

    # Required: backup location (s3://bucket/folder, file:///path or a path)
    destination: str

    # Backup or restore
    action: Action = Action.BACKUP

    # Add a UTC YYYY-mm-dd-HH-MM-SS sub-folder to the destination (backup only)
    date_folder: bool = False

    # Scan page size (backup) / records written between pauses (restore)
    batch_size: int = 1000

    # Milliseconds to wait between pages or batches; throttling waits twice as long
    wait_ms: int = 100

    # Restore into a non-empty table instead of aborting
    restore_append: bool = False

    # Maximum size in bytes of one backup data object
    buffer_size: int = DEFAULT_BUFFER_SIZE

    # AWS region
    region: str = "us-east-1"

    # Endpoint overrides (e.g. DynamoDB Local, MinIO)
    dynamodb_endpoint_url: str | None = None
    s3_endpoint_url: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        if not _validate_table_name(self.table):
            errors.append(f"Invalid table name: {self.table!r}")

        try:
            Destination.parse(self.destination)
        except ValueError as e:
            errors.append(f"Invalid destination: {e}")

        if not isinstance(self.action, Action):
            errors.append(f"Invalid action: {self.action!r}")

        if self.batch_size < 1:
            errors.append(f"batch_size must be >= 1, got {self.batch_size}")

        if self.wait_ms < 0:
            errors.append(f"wait_ms must be >= 0, got {self.wait_ms}")

        if self.buffer_size < 1:
            errors.append(f"buffer_size must be >= 1, got {self.buffer_size}")

        if errors:
            from ddbdump.exceptions import ConfigurationError

            raise ConfigurationError(
                "Configuration validation failed",
                details={"errors": errors},
            )

    @property
    def wait_seconds(self) -> float:
        return self.wait_ms / 1000

    def resolve_destination(self, now: datetime | None = None) -> Destination:
        """
        Destination for this run.

        Backups with date_folder enabled get a timestamped sub-folder; a
        restore always reads the destination exactly as configured.
        """
        destination = Destination.parse(self.destination)
        if self.action == Action.BACKUP and self.date_folder:
            stamp = (now or datetime.now(UTC)).strftime(DATE_FOLDER_FORMAT)
            destination = destination.with_subfolder(stamp)
        return destination

    def with_updates(self, **kwargs) -> "DumpConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        return replace(self, **kwargs)
