# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
ddbdump Manifest - List of data objects written by one backup run.

Wire format:

    {"name": "DynamoDB-export", "version": 3,
     "entries": [{"url": "s3://bucket/folder/<uuid>", "mandatory": true}]}
"""

import json
from dataclasses import dataclass, field
from typing import List

from ddbdump.exceptions import ManifestError

MANIFEST_NAME = "DynamoDB-export"
MANIFEST_VERSION = 3


@dataclass(frozen=True)
class ManifestEntry:
    """Reference to one flushed data object."""

    url: str
    mandatory: bool = True


@dataclass
class Manifest:
    """Backup manifest; entries are kept in flush order."""

    name: str = MANIFEST_NAME
    version: int = MANIFEST_VERSION
    entries: List[ManifestEntry] = field(default_factory=list)

    def append(self, url: str, mandatory: bool = True) -> ManifestEntry:
        entry = ManifestEntry(url=url, mandatory=mandatory)
        self.entries.append(entry)
        return entry

    def to_json(self) -> bytes:
        return json.dumps(
            {
                "name": self.name,
                "version": self.version,
                "entries": [
                    {"url": entry.url, "mandatory": entry.mandatory}
                    for entry in self.entries
                ],
            },
            separators=(",", ":"),
        ).encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes | str) -> "Manifest":
        """
        Parse a manifest document.

        Raises:
            ManifestError: If the document is not valid JSON or has the wrong shape
        """
        try:
            doc = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ManifestError(f"Manifest is not valid JSON: {e}") from e

        # entries may be null for a backup without objects
        if (
            not isinstance(doc, dict)
            or "entries" not in doc
            or not isinstance(doc["entries"], (list, type(None)))
        ):
            raise ManifestError("Manifest must be an object with an 'entries' list")

        entries: List[ManifestEntry] = []
        for raw in doc["entries"] or []:
            if not isinstance(raw, dict) or not isinstance(raw.get("url"), str):
                raise ManifestError(
                    "Manifest entry must be an object with a 'url' string",
                    details={"entry": raw},
                )
            entries.append(
                ManifestEntry(url=raw["url"], mandatory=bool(raw.get("mandatory", False)))
            )

        return cls(
            name=doc.get("name", MANIFEST_NAME),
            version=doc.get("version", MANIFEST_VERSION),
            entries=entries,
        )
