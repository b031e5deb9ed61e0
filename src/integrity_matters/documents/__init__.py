# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Document strategies for markup and JSON record files."""

from __future__ import annotations

from pathlib import Path

from .base import DocumentStrategy, SerializeOptions
from .markup import MarkupStrategy
from .records import RecordStrategy


def strategy_for_path(path: Path) -> DocumentStrategy:
    """Return a fresh strategy for ``path``: records for ``.json``, markup otherwise."""

    if path.suffix.lower() == ".json":
        return RecordStrategy()
    return MarkupStrategy()


__all__ = [
    "DocumentStrategy",
    "MarkupStrategy",
    "RecordStrategy",
    "SerializeOptions",
    "strategy_for_path",
]
