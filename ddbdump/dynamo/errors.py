# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Classification of DynamoDB backend errors.

Throttling is the only recoverable class: it is handled by sleeping and
retrying where it happens. Everything else aborts the run.
"""

from botocore.exceptions import ClientError

THROTTLING_ERROR_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
    }
)


def error_code(error: BaseException) -> str | None:
    """Return the AWS error code of a ClientError, or None."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def is_throttling_error(error: BaseException) -> bool:
    """True if the backend reported that provisioned capacity was exceeded."""
    return error_code(error) in THROTTLING_ERROR_CODES
