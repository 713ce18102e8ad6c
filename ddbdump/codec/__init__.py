# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Value Codec - Record model and lossless line encoding.
"""

from ddbdump.codec.values import (
    AttributeValue,
    Record,
    record_from_dynamo,
    record_to_dynamo,
)

from ddbdump.codec.wire import (
    encode_value,
    decode_value,
    encode_record,
    decode_record,
)

__all__ = [
    # Model
    "AttributeValue",
    "Record",
    "record_from_dynamo",
    "record_to_dynamo",
    # Wire format
    "encode_value",
    "decode_value",
    "encode_record",
    "decode_record",
]
