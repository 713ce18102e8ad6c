# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Values - In-memory model of DynamoDB attribute values.

An AttributeValue is a tagged union: each field is one variant and None
means "not populated". At most one variant may be populated. The
conversion helpers translate to and from the botocore low-level shape
({"S": "..."}, {"L": [...]}, ...), which is what the DynamoDB client
returns from scan() and expects in batch_write_item().
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, FrozenSet, List, Optional

from ddbdump.exceptions import CodecError


@dataclass
class AttributeValue:
    """One table cell: exactly one populated variant, or none."""

    binary: Optional[bytes] = None
    boolean: Optional[bool] = None
    binary_set: Optional[FrozenSet[bytes]] = None
    number: Optional[str] = None
    number_set: Optional[FrozenSet[str]] = None
    null: Optional[bool] = None
    string: Optional[str] = None
    string_set: Optional[FrozenSet[str]] = None
    elements: Optional[List["AttributeValue"]] = None
    attributes: Optional[Dict[str, "AttributeValue"]] = None

    def __post_init__(self) -> None:
        populated = self.populated_variants()
        if len(populated) > 1:
            raise CodecError(
                "AttributeValue must have at most one populated variant",
                details={"populated": populated},
            )
        # DynamoDB only accepts NULL: true
        if self.null is False:
            raise CodecError("AttributeValue null variant must be True when populated")

    def populated_variants(self) -> List[str]:
        """Names of the variants that are not None."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    @property
    def variant(self) -> str | None:
        populated = self.populated_variants()
        return populated[0] if populated else None

    @classmethod
    def from_dynamo(cls, native: Dict[str, Any]) -> "AttributeValue":
        """
        Build an AttributeValue from the botocore low-level shape.

        Args:
            native: Mapping such as {"S": "abc"} or {"M": {...}}

        Returns:
            The equivalent AttributeValue
        """
        if not isinstance(native, dict):
            raise CodecError(
                f"Expected a DynamoDB attribute value mapping, got {type(native).__name__}"
            )

        kwargs: Dict[str, Any] = {}
        for dynamo_key, value in native.items():
            if dynamo_key == "B":
                kwargs["binary"] = bytes(value)
            elif dynamo_key == "BOOL":
                kwargs["boolean"] = bool(value)
            elif dynamo_key == "BS":
                kwargs["binary_set"] = frozenset(bytes(v) for v in value)
            elif dynamo_key == "N":
                kwargs["number"] = str(value)
            elif dynamo_key == "NS":
                kwargs["number_set"] = frozenset(str(v) for v in value)
            elif dynamo_key == "NULL":
                kwargs["null"] = bool(value)
            elif dynamo_key == "S":
                kwargs["string"] = value
            elif dynamo_key == "SS":
                kwargs["string_set"] = frozenset(value)
            elif dynamo_key == "L":
                kwargs["elements"] = [cls.from_dynamo(child) for child in value]
            elif dynamo_key == "M":
                kwargs["attributes"] = {
                    key: cls.from_dynamo(child) for key, child in value.items()
                }
            else:
                raise CodecError(
                    f"Unknown DynamoDB attribute type: {dynamo_key}",
                    details={"value": native},
                )
        return cls(**kwargs)

    def to_dynamo(self) -> Dict[str, Any]:
        """Translate back to the botocore low-level shape."""
        native: Dict[str, Any] = {}
        if self.binary is not None:
            native["B"] = self.binary
        if self.boolean is not None:
            native["BOOL"] = self.boolean
        if self.binary_set is not None:
            native["BS"] = sorted(self.binary_set)
        if self.number is not None:
            native["N"] = self.number
        if self.number_set is not None:
            native["NS"] = sorted(self.number_set)
        if self.null is not None:
            native["NULL"] = self.null
        if self.string is not None:
            native["S"] = self.string
        if self.string_set is not None:
            native["SS"] = sorted(self.string_set)
        if self.elements is not None:
            native["L"] = [child.to_dynamo() for child in self.elements]
        if self.attributes is not None:
            native["M"] = {key: child.to_dynamo() for key, child in self.attributes.items()}
        return native


# One row of a table
Record = Dict[str, AttributeValue]


def record_from_dynamo(item: Dict[str, Any]) -> Record:
    """Convert a scanned DynamoDB item into a Record."""
    return {name: AttributeValue.from_dynamo(value) for name, value in item.items()}


def record_to_dynamo(record: Record) -> Dict[str, Any]:
    """Convert a Record into a DynamoDB item suitable for a PutRequest."""
    return {name: value.to_dynamo() for name, value in record.items()}
