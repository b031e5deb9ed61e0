# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Declared-range lookup over the project ``package.json``."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from ..errors import ConfigurationInconsistency
from ..models import DeclaredRange, DependencyClass


class ManifestReader:
    """Read-only view of ``dependencies`` and ``devDependencies``."""

    def __init__(
        self,
        dependencies: Mapping[str, str] | None = None,
        dev_dependencies: Mapping[str, str] | None = None,
    ) -> None:
        self._dependencies = MappingProxyType(dict(dependencies or {}))
        self._dev_dependencies = MappingProxyType(dict(dev_dependencies or {}))

    @classmethod
    def load(cls, path: Path) -> ManifestReader:
        """Parse the manifest stored at ``path``.

        Raises:
            ConfigurationInconsistency: If the file is missing or not a JSON object.
        """

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationInconsistency(f"Unable to retrieve `package.json` ({path})") from exc
        if not isinstance(payload, Mapping):
            raise ConfigurationInconsistency(f"`package.json` at {path} must contain a JSON object")
        return cls(
            _string_mapping(payload.get("dependencies")),
            _string_mapping(payload.get("devDependencies")),
        )

    def declared_range(self, name: str) -> DeclaredRange | None:
        """Return the declared range for ``name``; primary dependencies take precedence."""

        if name in self._dependencies:
            return DeclaredRange(self._dependencies[name], DependencyClass.PRIMARY)
        if name in self._dev_dependencies:
            return DeclaredRange(self._dev_dependencies[name], DependencyClass.SECONDARY)
        return None

    def package_names(self) -> Iterator[str]:
        """Yield every declared package name once."""

        yield from self._dependencies
        yield from (name for name in self._dev_dependencies if name not in self._dependencies)


def _string_mapping(raw: object) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    return {str(key): str(value) for key, value in raw.items()}


__all__ = ["ManifestReader"]
