# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump - DynamoDB table backup and restore through an object store.

A backup streams every item of a table into newline-delimited JSON
objects, then writes a manifest listing them and a _SUCCESS marker. A
restore refuses to start unless that marker exists, then replays the
manifest's objects into an existing, empty table with batched writes.
"""

__version__ = "0.1.0"

# Configuration creation (user-facing API)
from ddbdump.builder import create_config

# Core functions
from ddbdump.core import (
    initialize_dump_state,
    run,
    run_backup,
    run_restore,
    get_metrics,
)

# Environment-based configuration
from ddbdump.env import create_config_from_env

__all__ = [
    # Version
    "__version__",
    # Configuration creation (primary user-facing APIs)
    "create_config",
    "create_config_from_env",
    # Core orchestration functions
    "initialize_dump_state",
    "run",
    "run_backup",
    "run_restore",
    "get_metrics",
]
