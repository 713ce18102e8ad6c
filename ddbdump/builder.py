# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Builder - Functional builder pattern for configuration.

This module provides pure functions for building DumpConfig objects.
Each function takes a config dict and returns a new dict with the
modification applied (immutable updates).
"""

from typing import Any, Callable, Dict

from ddbdump.backup.sink import DEFAULT_BUFFER_SIZE
from ddbdump.config import Action, DumpConfig
from ddbdump.storage.base import join_key


# Type alias for builder functions
ConfigDict = Dict[str, Any]
BuilderFunc = Callable[[ConfigDict], ConfigDict]


def create_empty_config() -> ConfigDict:
    """
    Create an initial empty configuration dictionary.

    Returns:
        Dict with default values for all configuration fields
    """
    return {
        "table": "",
        "destination": "",
        "action": Action.BACKUP,
        "date_folder": False,
        "batch_size": 1000,
        "wait_ms": 100,
        "restore_append": False,
        "buffer_size": DEFAULT_BUFFER_SIZE,
        "region": "us-east-1",
        "dynamodb_endpoint_url": None,
        "s3_endpoint_url": None,
    }


def with_table(config: ConfigDict, table: str) -> ConfigDict:
    """
    Set the DynamoDB table to back up from or restore into.

    Args:
        config: Current configuration dictionary
        table: Table name

    Returns:
        New configuration dictionary with table set
    """
    return {**config, "table": table}


def with_destination(config: ConfigDict, destination: str) -> ConfigDict:
    """
    Set the backup location as a URL (s3://bucket/folder, file:///path) or path.

    Args:
        config: Current configuration dictionary
        destination: Backup location

    Returns:
        New configuration dictionary with destination set
    """
    return {**config, "destination": destination}


def with_s3_destination(config: ConfigDict, bucket: str, folder: str = "") -> ConfigDict:
    """
    Set an S3 backup location from a bucket and a folder inside it.

    Args:
        config: Current configuration dictionary
        bucket: S3 bucket name
        folder: Path inside the bucket (may be empty)

    Returns:
        New configuration dictionary with destination set
    """
    return with_destination(config, f"s3://{join_key(bucket, folder)}")


def with_region(config: ConfigDict, region: str) -> ConfigDict:
    """
    Set the AWS region.

    Args:
        config: Current configuration dictionary
        region: AWS region (e.g., 'us-east-1', 'eu-west-1')

    Returns:
        New configuration dictionary with region set
    """
    return {**config, "region": region}


def backup_mode(config: ConfigDict) -> ConfigDict:
    """
    Set the action to backup (table -> object store). This is the default.
    """
    return {**config, "action": Action.BACKUP}


def restore_mode(config: ConfigDict) -> ConfigDict:
    """
    Set the action to restore (object store -> table).
    """
    return {**config, "action": Action.RESTORE}


def add_date_folder(config: ConfigDict) -> ConfigDict:
    """
    Write backups into a UTC-timestamped sub-folder of the destination.
    """
    return {**config, "date_folder": True}


def allow_append(config: ConfigDict) -> ConfigDict:
    """
    Allow restoring into a table that already holds items.

    WARNING: Restored items overwrite existing items with the same key.
    """
    import sys

    print(
        "\u26a0\ufe0f  WARNING: Restore will append to a non-empty table.",
        file=sys.stderr,
    )
    return {**config, "restore_append": True}


def with_batch_size(config: ConfigDict, batch_size: int) -> ConfigDict:
    """
    Set the scan page size (backup) or records per pause (restore).

    Args:
        config: Current configuration dictionary
        batch_size: Number of records

    Returns:
        New configuration dictionary with batch size set
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return {**config, "batch_size": batch_size}


def with_wait_ms(config: ConfigDict, wait_ms: int) -> ConfigDict:
    """
    Set the pause between pages or batches, in milliseconds.

    Throttled requests wait twice this amount before retrying.
    """
    if wait_ms < 0:
        raise ValueError(f"wait_ms must be >= 0, got {wait_ms}")
    return {**config, "wait_ms": wait_ms}


def with_buffer_size(config: ConfigDict, buffer_size: int) -> ConfigDict:
    """
    Set the maximum size in bytes of one backup data object.
    """
    if buffer_size < 1:
        raise ValueError(f"buffer_size must be >= 1, got {buffer_size}")
    return {**config, "buffer_size": buffer_size}


def with_endpoints(
    config: ConfigDict,
    dynamodb_url: str | None = None,
    s3_url: str | None = None,
) -> ConfigDict:
    """
    Override service endpoints (e.g. DynamoDB Local or MinIO).
    """
    return {
        **config,
        "dynamodb_endpoint_url": dynamodb_url,
        "s3_endpoint_url": s3_url,
    }


def build_config(config_dict: ConfigDict) -> DumpConfig:
    """
    Validate and build an immutable DumpConfig from a configuration dictionary.

    Args:
        config_dict: Configuration dictionary built using builder functions

    Returns:
        Validated, immutable DumpConfig instance

    Raises:
        ConfigurationError: If validation fails
    """
    from ddbdump.exceptions import ConfigurationError

    if not config_dict.get("table"):
        raise ConfigurationError("table is required")
    if not config_dict.get("destination"):
        raise ConfigurationError("destination is required")

    return DumpConfig(**config_dict)


def pipe(*funcs: BuilderFunc) -> BuilderFunc:
    """
    Compose multiple builder functions into a single function.

    This allows a more readable pipeline style:

        config = pipe(
            lambda c: with_table(c, "orders"),
            lambda c: with_s3_destination(c, "my-backups", "orders"),
            add_date_folder,
        )(create_empty_config())

    Args:
        *funcs: Builder functions to compose

    Returns:
        A single function that applies all functions in sequence
    """

    def composed(config: ConfigDict) -> ConfigDict:
        result = config
        for func in funcs:
            result = func(result)
        return result

    return composed


def create_config(
    table: str,
    destination: str,
    *,
    action: str | Action = "backup",
    date_folder: bool = False,
    batch_size: int = 1000,
    wait_ms: int = 100,
    restore_append: bool = False,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    region: str = "us-east-1",
    **kwargs: Any,
) -> DumpConfig:
    """
    Create a DumpConfig from simple parameters.

    This is the recommended user-facing API for creating configurations.

    Args:
        table: DynamoDB table name (required)
        destination: Backup location, e.g. "s3://my-backups/orders" (required)
        action: "backup" or "restore" (default: "backup")
        date_folder: Add a UTC timestamp sub-folder on backup
        batch_size: Scan page size / records between restore pauses
        wait_ms: Pause between pages or batches in milliseconds
        restore_append: Allow restoring into a non-empty table
        buffer_size: Maximum bytes per backup data object
        region: AWS region
        **kwargs: Additional configuration options

    Returns:
        Validated, immutable DumpConfig instance

    Example:
        config = create_config(
            "orders",
            "s3://my-backups/orders",
            date_folder=True,
        )
    """
    config_dict = create_empty_config()
    config_dict = with_table(config_dict, table)
    config_dict = with_destination(config_dict, destination)
    config_dict = with_region(config_dict, region)
    config_dict = with_batch_size(config_dict, batch_size)
    config_dict = with_wait_ms(config_dict, wait_ms)
    config_dict = with_buffer_size(config_dict, buffer_size)

    if date_folder:
        config_dict = add_date_folder(config_dict)

    if restore_append:
        config_dict = allow_append(config_dict)

    # Handle action
    if isinstance(action, str):
        try:
            action = Action(action.lower())
        except ValueError as exc:
            from ddbdump.errors import explain_invalid_action_env
            from ddbdump.exceptions import ConfigurationError

            raise ConfigurationError(explain_invalid_action_env(action)) from exc
    config_dict = restore_mode(config_dict) if action == Action.RESTORE else backup_mode(config_dict)

    # Apply any additional kwargs
    for key, value in kwargs.items():
        if key in config_dict:
            config_dict[key] = value

    return build_config(config_dict)
