# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for ddbdump.

These helpers centralize wording for configuration and pre-flight errors
so that all modules present consistent, actionable messages.
"""


def explain_missing_table_env() -> str:
    """
    Explain that the table environment variable is missing.
    """

    return (
        "DynamoDB table is not configured. "
        "Set the DYNAMO_TABLE environment variable or pass table=... to create_config()."
    )


def explain_missing_destination_env() -> str:
    """
    Explain that no backup location was given.
    """

    return (
        "Backup location is not configured. "
        "Set DESTINATION (s3://bucket/folder or file:///path) or S3_BUCKET "
        "(with optional S3_FOLDER)."
    )


def explain_invalid_action_env(value: str | None) -> str:
    """
    Explain that ACTION is invalid.
    """

    return (
        f"Invalid ACTION value: {value!r}. "
        "Expected 'backup' or 'restore'."
    )


def explain_invalid_int_env(name: str, value: str | None) -> str:
    """
    Explain that an integer environment variable is invalid.
    """

    return f"Invalid {name} value: {value!r}. It must be a positive integer."


def explain_invalid_bool_env(name: str, value: str | None) -> str:
    """
    Explain that a boolean environment variable is invalid.
    """

    return f"Invalid {name} value: {value!r}. Expected true/false, 1/0 or yes/no."


def explain_table_not_found(table: str) -> str:
    return f"The target table {table!r} does not exist. Aborting."


def explain_table_not_writable(table: str, status: str) -> str:
    return (
        f"The target table {table!r} is in state {status}, not ACTIVE, "
        "so it is not writable. Aborting."
    )


def explain_table_not_empty(table: str, item_count: int) -> str:
    return (
        f"The target table {table!r} is not empty ({item_count} items). "
        "Set RESTORE_APPEND=true to append to it. Aborting."
    )


def explain_missing_completion_marker(location: str) -> str:
    """
    Explain that a backup has no _SUCCESS marker.
    """

    return (
        f"Unable to find a _SUCCESS flag in {location}. "
        "Are you sure the backup was successful? Aborting."
    )


def explain_missing_manifest(location: str) -> str:
    """
    Explain that a backup has no manifest.
    """

    return (
        f"Unable to find a manifest in {location}. "
        "Are you sure the backup was successful? Aborting."
    )
