# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Expand ``--file`` arguments into concrete document paths."""

from __future__ import annotations

import glob
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Final

_NEGATION: Final[str] = "!"


def discover_files(patterns: Sequence[str], root: Path, *, expand_globs: bool = True) -> list[Path]:
    """Return the files named by ``patterns`` relative to ``root``.

    Args:
        patterns: File paths or glob patterns; with globbing enabled a leading
            ``!`` excludes matches of that pattern.
        root: Directory relative patterns are resolved against.
        expand_globs: When ``False`` every entry is taken literally.

    Returns:
        list[Path]: Existing files in first-seen order without duplicates.
    """

    if not expand_globs:
        return [_anchor(Path(pattern), root) for pattern in patterns]

    excluded = {path for pattern in patterns if pattern.startswith(_NEGATION) for path in _expand(pattern[1:], root)}
    found: dict[Path, None] = {}
    for pattern in patterns:
        if pattern.startswith(_NEGATION):
            continue
        for path in _expand(pattern, root):
            if path not in excluded:
                found.setdefault(path, None)
    return list(found)


def _expand(pattern: str, root: Path) -> Iterator[Path]:
    for match in sorted(glob.glob(pattern, root_dir=root, recursive=True)):
        path = _anchor(Path(match), root)
        if path.is_file():
            yield path


def _anchor(path: Path, root: Path) -> Path:
    return path if path.is_absolute() else root / path


__all__ = ["discover_files"]
