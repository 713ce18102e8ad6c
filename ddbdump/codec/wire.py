# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Wire Codec - Compact JSON encoding of records.

Each record is one JSON object mapping attribute names to value objects.
A value object only carries the key of its populated variant:

    b     base64 binary          ns    list of decimal strings
    bool  boolean                null  true
    bs    list of base64         s     string
    n     decimal string         ss    list of strings
    l     list of value objects  m     mapping of value objects

Unpopulated variants are never emitted. Populated but empty lists and
maps are emitted as [] and {} so that they survive a round trip.
"""

import base64
import binascii
import json
from typing import Any, Dict, List

from ddbdump.codec.values import AttributeValue, Record
from ddbdump.exceptions import CodecError

WIRE_KEYS = ("b", "bool", "bs", "n", "ns", "null", "s", "ss", "l", "m")


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _b64decode(text: Any) -> bytes:
    if not isinstance(text, str):
        raise CodecError(f"Expected base64 string, got {type(text).__name__}")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CodecError(f"Invalid base64 data: {e}") from e


def _expect(value: Any, expected: type, key: str) -> Any:
    if not isinstance(value, expected):
        raise CodecError(
            f"Wire field {key!r} must be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _expect_str_list(value: Any, key: str) -> List[str]:
    _expect(value, list, key)
    for item in value:
        _expect(item, str, key)
    return value


def encode_value(value: AttributeValue) -> Dict[str, Any]:
    """
    Encode an AttributeValue into its wire object.

    Args:
        value: Value to encode

    Returns:
        Dict holding only the populated variant's wire key
    """
    wire: Dict[str, Any] = {}
    if value.binary is not None:
        wire["b"] = _b64encode(value.binary)
    if value.boolean is not None:
        wire["bool"] = value.boolean
    if value.binary_set is not None:
        wire["bs"] = [_b64encode(item) for item in sorted(value.binary_set)]
    if value.number is not None:
        wire["n"] = value.number
    if value.number_set is not None:
        wire["ns"] = sorted(value.number_set)
    if value.null is not None:
        wire["null"] = value.null
    if value.string is not None:
        wire["s"] = value.string
    if value.string_set is not None:
        wire["ss"] = sorted(value.string_set)
    if value.elements is not None:
        wire["l"] = [encode_value(child) for child in value.elements]
    if value.attributes is not None:
        wire["m"] = {key: encode_value(child) for key, child in value.attributes.items()}
    return wire


def decode_value(wire: Any) -> AttributeValue:
    """
    Decode a wire object into an AttributeValue.

    Only the variants present in the wire object are populated.

    Raises:
        CodecError: On unknown keys, wrong types or several variants
    """
    if not isinstance(wire, dict):
        raise CodecError(f"Value must be a JSON object, got {type(wire).__name__}")

    unknown = [key for key in wire if key not in WIRE_KEYS]
    if unknown:
        raise CodecError("Unknown wire fields in value", details={"fields": unknown})

    kwargs: Dict[str, Any] = {}
    if "b" in wire:
        kwargs["binary"] = _b64decode(wire["b"])
    if "bool" in wire:
        kwargs["boolean"] = _expect(wire["bool"], bool, "bool")
    if "bs" in wire:
        kwargs["binary_set"] = frozenset(_b64decode(item) for item in _expect(wire["bs"], list, "bs"))
    if "n" in wire:
        kwargs["number"] = _expect(wire["n"], str, "n")
    if "ns" in wire:
        kwargs["number_set"] = frozenset(_expect_str_list(wire["ns"], "ns"))
    if "null" in wire:
        kwargs["null"] = _expect(wire["null"], bool, "null")
    if "s" in wire:
        kwargs["string"] = _expect(wire["s"], str, "s")
    if "ss" in wire:
        kwargs["string_set"] = frozenset(_expect_str_list(wire["ss"], "ss"))
    if "l" in wire:
        kwargs["elements"] = [decode_value(child) for child in _expect(wire["l"], list, "l")]
    if "m" in wire:
        kwargs["attributes"] = {
            key: decode_value(child) for key, child in _expect(wire["m"], dict, "m").items()
        }
    return AttributeValue(**kwargs)


def encode_record(record: Record) -> bytes:
    """
    Encode a record as a single compact JSON line (without newline).

    Args:
        record: Mapping of attribute name to value

    Returns:
        UTF-8 encoded JSON bytes
    """
    wire = {name: encode_value(value) for name, value in record.items()}
    return json.dumps(wire, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def decode_record(line: bytes | str) -> Record:
    """
    Decode one JSON line into a record.

    Raises:
        CodecError: If the line is not valid JSON or not a record
    """
    try:
        wire = json.loads(line)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CodecError(f"Invalid JSON record: {e}") from e

    if not isinstance(wire, dict):
        raise CodecError(f"Record must be a JSON object, got {type(wire).__name__}")

    return {name: decode_value(value) for name, value in wire.items()}
