# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Document strategy interface shared by markup and record documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..models import Reference, ReferenceUpdate


@dataclass(frozen=True, slots=True)
class SerializeOptions:
    """Output options; each strategy reads only the fields it understands."""

    json_space: int | str = 2
    disclaimer: str | None = None
    drop_modules: bool = False


@runtime_checkable
class DocumentStrategy(Protocol):
    """Parse a document, expose its references and apply updates by index."""

    def extract_references(self, content: str) -> list[Reference]:
        """Parse ``content`` and return its references in document order."""
        ...

    def apply_update(self, reference: Reference, update: ReferenceUpdate) -> None:
        """Mutate the node owning ``reference`` as described by ``update``."""
        ...

    def serialize(self, options: SerializeOptions) -> str:
        """Render the (possibly updated) document."""
        ...


__all__ = ["DocumentStrategy", "SerializeOptions"]
