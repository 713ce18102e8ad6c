# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration.

Builds a DumpConfig from environment variables so the tool can run as a
container job without any arguments.
"""

from __future__ import annotations

import os
from typing import Mapping

from ddbdump.backup.sink import DEFAULT_BUFFER_SIZE
from ddbdump.builder import create_config
from ddbdump.config import Action, DumpConfig
from ddbdump.errors import (
    explain_invalid_action_env,
    explain_invalid_bool_env,
    explain_invalid_int_env,
    explain_missing_destination_env,
    explain_missing_table_env,
)
from ddbdump.exceptions import ConfigurationError
from ddbdump.storage.base import join_key

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_action(value: str | None) -> Action:
    if not value:
        return Action.BACKUP
    try:
        return Action(value.lower())
    except ValueError as exc:
        raise ConfigurationError(explain_invalid_action_env(value)) from exc


def _parse_int(name: str, value: str | None, default: int, minimum: int = 1) -> int:
    if not value:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_int_env(name, value)) from exc
    if number < minimum:
        raise ConfigurationError(explain_invalid_int_env(name, value))
    return number


def _parse_bool(name: str, value: str | None) -> bool:
    if value is None:
        return False
    lower = value.strip().lower()
    if lower in _TRUE_VALUES:
        return True
    if lower in _FALSE_VALUES:
        return False
    raise ConfigurationError(explain_invalid_bool_env(name, value))


def _parse_destination(env: Mapping[str, str]) -> str:
    destination = env.get("DESTINATION")
    if destination:
        return destination

    bucket = env.get("S3_BUCKET")
    if not bucket:
        raise ConfigurationError(explain_missing_destination_env())
    return f"s3://{join_key(bucket, env.get('S3_FOLDER', ''))}"


def create_config_from_env(env: Mapping[str, str] | None = None) -> DumpConfig:
    """
    Create a DumpConfig from environment variables.

    Required:
        - DYNAMO_TABLE: Table to back up from or restore into
        - DESTINATION: Backup location URL, or
          S3_BUCKET (+ optional S3_FOLDER)

    Optional environment variables:
        - ACTION: 'backup' | 'restore' (default: backup)
        - S3_DATE_FOLDER: Add a UTC YYYY-mm-dd-HH-MM-SS sub-folder on backup
        - BATCH_SIZE: Records per scan page / between restore pauses (default: 1000)
        - WAIT_MS: Pause between pages or batches in ms (default: 100)
        - RESTORE_APPEND: Restore into a non-empty table (default: false)
        - BUFFER_SIZE: Maximum bytes per backup data object (default: 10 MiB)
        - AWS_REGION: AWS region (default: us-east-1)
        - DYNAMODB_ENDPOINT_URL / S3_ENDPOINT_URL: Endpoint overrides

    Args:
        env: Mapping to read instead of os.environ (for tests)
    """
    env = os.environ if env is None else env

    table = env.get("DYNAMO_TABLE")
    if not table:
        raise ConfigurationError(explain_missing_table_env())

    return create_config(
        table,
        _parse_destination(env),
        action=_parse_action(env.get("ACTION")),
        date_folder=_parse_bool("S3_DATE_FOLDER", env.get("S3_DATE_FOLDER")),
        batch_size=_parse_int("BATCH_SIZE", env.get("BATCH_SIZE"), 1000),
        wait_ms=_parse_int("WAIT_MS", env.get("WAIT_MS"), 100, minimum=0),
        restore_append=_parse_bool("RESTORE_APPEND", env.get("RESTORE_APPEND")),
        buffer_size=_parse_int("BUFFER_SIZE", env.get("BUFFER_SIZE"), DEFAULT_BUFFER_SIZE),
        region=env.get("AWS_REGION", "us-east-1"),
        dynamodb_endpoint_url=env.get("DYNAMODB_ENDPOINT_URL") or None,
        s3_endpoint_url=env.get("S3_ENDPOINT_URL") or None,
    )
