# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Pipeline - Record channel and producer/consumer coordination.
"""

from ddbdump.pipeline.channel import RecordChannel
from ddbdump.pipeline.coordinator import run_pipeline

__all__ = [
    "RecordChannel",
    "run_pipeline",
]
