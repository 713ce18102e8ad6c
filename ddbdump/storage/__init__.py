# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Storage - Object store backends and the backup manifest.
"""

from ddbdump.storage.base import (
    COMPLETION_MARKER,
    MANIFEST_OBJECT,
    ObjectStore,
    join_key,
    new_object_name,
)

from ddbdump.storage.manifest import (
    MANIFEST_NAME,
    MANIFEST_VERSION,
    Manifest,
    ManifestEntry,
)

from ddbdump.storage.s3 import S3ObjectStore
from ddbdump.storage.local import LocalObjectStore

__all__ = [
    # Layout
    "COMPLETION_MARKER",
    "MANIFEST_OBJECT",
    "ObjectStore",
    "join_key",
    "new_object_name",
    # Manifest
    "MANIFEST_NAME",
    "MANIFEST_VERSION",
    "Manifest",
    "ManifestEntry",
    # Backends
    "S3ObjectStore",
    "LocalObjectStore",
]
