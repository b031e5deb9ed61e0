# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JSON document strategy keyed by logical package name."""

from __future__ import annotations

import json
from typing import Any, Final

from ..errors import IntegrityMattersError
from ..models import Reference, ReferenceKind, ReferenceUpdate
from .base import SerializeOptions

_KINDS: Final[tuple[ReferenceKind, ...]] = (ReferenceKind.SCRIPT, ReferenceKind.STYLESHEET)


class RecordStrategy:
    """Read and rewrite ``{"script": {...}, "link": {...}}`` record documents.

    Each record may carry ``remote``, ``local``, ``integrity``, ``crossorigin``,
    ``fallback``, ``cdn``, ``algorithms`` and ``global``. Both location forms
    are kept side by side, so local output mode only refreshes ``local``.
    """

    def __init__(self) -> None:
        self._document: dict[str, Any] = {}
        self._records: list[dict[str, Any]] = []

    def extract_references(self, content: str) -> list[Reference]:
        try:
            document = json.loads(content)
        except json.JSONDecodeError as exc:
            raise IntegrityMattersError(f"Unable to parse JSON document: {exc}") from exc
        if not isinstance(document, dict):
            raise IntegrityMattersError("JSON documents must contain an object at the top level")
        self._document = document
        self._records = []

        references: list[Reference] = []
        for kind in _KINDS:
            section = document.get(kind.value)
            if not isinstance(section, dict):
                continue
            for record in section.values():
                if not isinstance(record, dict):
                    continue
                location = record.get("remote") or record.get("local")
                if not isinstance(location, str) or not location:
                    continue
                references.append(_reference_from_record(len(self._records), kind, location, record))
                self._records.append(record)
        return references

    def apply_update(self, reference: Reference, update: ReferenceUpdate) -> None:
        try:
            record = self._records[reference.index]
        except IndexError:
            raise IntegrityMattersError(f"No JSON record at reference index {reference.index}") from None

        record["local"] = update.local_path
        if update.new_location and not update.local:
            record["remote"] = update.new_location
        if update.add_crossorigin and "integrity" in record:
            record["crossorigin"] = update.add_crossorigin
        if update.new_integrity:
            record["integrity"] = update.new_integrity
        else:
            record.pop("integrity", None)
        if update.fallback:
            record["fallback"] = True
        if update.global_check:
            record["global"] = update.global_check

    def serialize(self, options: SerializeOptions) -> str:
        return json.dumps(self._document, indent=options.json_space, ensure_ascii=False) + "\n"


def _reference_from_record(index: int, kind: ReferenceKind, location: str, record: dict[str, Any]) -> Reference:
    algorithms = record.get("algorithms")
    if isinstance(algorithms, str):
        algorithms = algorithms.split()
    crossorigin = record.get("crossorigin")
    return Reference(
        index=index,
        kind=kind,
        location=location,
        integrity=record.get("integrity") or None,
        algorithms=tuple(str(entry) for entry in algorithms or ()),
        cdn=record.get("cdn") or None,
        fallback=bool(record.get("fallback")),
        global_check=record.get("global") or None,
        crossorigin=crossorigin if isinstance(crossorigin, str) else None,
    )


__all__ = ["RecordStrategy"]
