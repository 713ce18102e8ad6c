# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup Engine - Object sink (backup) and object source (restore).
"""

from ddbdump.backup.sink import (
    DEFAULT_BUFFER_SIZE,
    ObjectSink,
    SinkResult,
)

from ddbdump.backup.source import (
    SourceResult,
    load_manifest,
    require_completion_marker,
    stream_manifest_to_channel,
)

__all__ = [
    # Sink
    "DEFAULT_BUFFER_SIZE",
    "ObjectSink",
    "SinkResult",
    # Source
    "SourceResult",
    "load_manifest",
    "require_completion_marker",
    "stream_manifest_to_channel",
]
