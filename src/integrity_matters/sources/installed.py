# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Installed-version lookup over ``node_modules/<name>/package.json``."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

from ..constants import MANIFEST_FILE, NODE_MODULES_DIR
from ..diagnostics import DiagnosticLog


def read_installed_version(root: Path, name: str) -> str | None:
    """Return the version recorded by the local copy of ``name``.

    Args:
        root: Project directory containing ``node_modules``.
        name: Package name, optionally scoped.

    Returns:
        str | None: Installed version, or ``None`` when the package is not
        materialised or its manifest is unreadable.
    """

    manifest = root / NODE_MODULES_DIR / name / MANIFEST_FILE
    try:
        payload = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(payload, Mapping):
        return None
    version = payload.get("version")
    return version if isinstance(version, str) else None


class InstalledReader:
    """Immutable snapshot of installed versions for the declared packages."""

    def __init__(self, versions: Mapping[str, str]) -> None:
        self._versions = MappingProxyType(dict(versions))

    @classmethod
    def scan(cls, root: Path, names: Iterable[str], log: DiagnosticLog) -> InstalledReader:
        """Read the installed version of every package in ``names`` once."""

        versions: dict[str, str] = {}
        for name in names:
            version = read_installed_version(root, name)
            if version is None:
                log.info(f'INFO: No valid `{MANIFEST_FILE}` found in `{NODE_MODULES_DIR}` for "{name}".')
                continue
            versions[name] = version
        return cls(versions)

    def installed_version(self, name: str) -> str | None:
        return self._versions.get(name)


__all__ = ["InstalledReader", "read_installed_version"]
