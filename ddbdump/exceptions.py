# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Exceptions - Custom exceptions for the ddbdump package.
"""


class DumpError(Exception):
    """Base exception for all ddbdump errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(DumpError):
    """Raised when configuration is invalid."""

    pass


class CodecError(DumpError):
    """Raised when a value cannot be encoded or decoded."""

    pass


class ChannelClosedError(DumpError):
    """Raised on send after close or on a second close (programming error)."""

    pass


class ChannelAbortedError(DumpError):
    """Raised to the consumer when the producer closed the channel on failure."""

    pass


class StorageError(DumpError):
    """Raised when object store operations fail."""

    pass


class ObjectNotFoundError(StorageError):
    """Raised when a requested object does not exist."""

    pass


class BackupError(DumpError):
    """Raised when backup operations fail."""

    pass


class RestoreError(DumpError):
    """Raised when restore operations fail."""

    pass


class PreconditionError(DumpError):
    """Raised when a run cannot start because a safety check failed."""

    pass


class TableNotFoundError(PreconditionError):
    """Raised when the target table does not exist."""

    pass


class TableNotWritableError(PreconditionError):
    """Raised when the target table is not in the ACTIVE state."""

    pass


class TableNotEmptyError(PreconditionError):
    """Raised when the target table holds items and appending is not allowed."""

    pass


class IncompleteBackupError(PreconditionError):
    """Raised when the completion marker of a backup is missing."""

    pass


class ManifestError(PreconditionError):
    """Raised when the backup manifest is missing or unreadable."""

    pass
