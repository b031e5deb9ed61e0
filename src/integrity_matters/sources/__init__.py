# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Read-only accessors for declared, pinned and installed dependency versions."""

from __future__ import annotations

from .installed import InstalledReader, read_installed_version
from .lockfiles import LockReader, NpmLockReader, YarnLockReader, load_lock_reader
from .manifest import ManifestReader
from .snapshot import DependencySnapshot

__all__ = [
    "DependencySnapshot",
    "InstalledReader",
    "LockReader",
    "ManifestReader",
    "NpmLockReader",
    "YarnLockReader",
    "load_lock_reader",
    "read_installed_version",
]
