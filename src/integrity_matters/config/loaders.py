# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Concrete configuration sources (defaults, TOML, JSON, ``package.json``)."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import ValidationError

from ..constants import CONFIG_SECTION_KEY, MANIFEST_FILE
from ..errors import ConfigError
from .models import Config

TOML_SUFFIX: Final[str] = ".toml"


class ConfigSource(Protocol):
    """Provide configuration data loaded from disk or other mediums."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return configuration values keyed by field name or option alias."""
        ...

    def describe(self) -> str:
        """Return a human-readable description of the source."""
        ...


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return Config().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a TOML document."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self.name = str(path)

    def load(self) -> Mapping[str, Any]:
        try:
            with self._path.open("rb") as handle:
                data = tomllib.load(handle)
        except OSError as exc:
            raise ConfigError(f"Unable to read configuration at {self._path}: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {self._path}: {exc}") from exc
        return data

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class JsonConfigSource:
    """Load configuration data from a JSON object, optionally one key of it."""

    def __init__(self, path: Path, *, section: str | None = None) -> None:
        self._path = path
        self._section = section
        self.name = str(path)

    def load(self) -> Mapping[str, Any]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(f"Unable to read configuration at {self._path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {self._path}: {exc}") from exc
        if not isinstance(data, Mapping):
            raise ConfigError(f"Configuration at {self._path} must be an object")
        if self._section is None:
            return data
        section = data.get(self._section)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise ConfigError(f"`{self._section}` in {self._path} must be an object")
        return section

    def describe(self) -> str:
        if self._section is None:
            return f"JSON configuration at {self.name}"
        return f"`{self._section}` section of {self.name}"


class PackageJsonConfigSource(JsonConfigSource):
    """Read the ``integrityMatters`` key of ``package.json`` when the file exists."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, section=CONFIG_SECTION_KEY)

    def load(self) -> Mapping[str, Any]:
        if not self._path.is_file():
            return {}
        return super().load()


class MappingConfigSource:
    """Wrap an in-memory mapping such as CLI overrides."""

    def __init__(self, data: Mapping[str, Any], *, name: str = "overrides") -> None:
        self._data = dict(data)
        self.name = name

    def load(self) -> Mapping[str, Any]:
        return self._data

    def describe(self) -> str:
        return f"Options from {self.name}"


def file_source_for(
    *,
    config_path: Path | None,
    package_json: Path | None,
    no_config: bool,
    cwd: Path,
) -> ConfigSource | None:
    """Select the single file-backed source for a run.

    ``--config`` wins; otherwise the ``integrityMatters`` key of
    ``package.json`` is read unless ``no_config`` is set.
    """

    if no_config:
        return None
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else cwd / config_path
        if resolved.suffix.lower() == TOML_SUFFIX:
            return TomlConfigSource(resolved)
        return JsonConfigSource(resolved)
    manifest = package_json or Path(MANIFEST_FILE)
    return PackageJsonConfigSource(manifest if manifest.is_absolute() else cwd / manifest)


def load_config(sources: Sequence[ConfigSource]) -> Config:
    """Merge ``sources`` in order (later wins) and validate the result.

    Raises:
        ConfigError: If a key is unknown or a value fails validation.
    """

    merged: dict[str, Any] = {}
    for source in sources:
        merged = _deep_merge(merged, normalise_keys(source.load(), source.describe()))
    try:
        return Config.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def normalise_keys(fragment: Mapping[str, Any], origin: str) -> dict[str, Any]:
    """Return ``fragment`` keyed by :class:`Config` field names.

    Raises:
        ConfigError: If a key matches neither a field name nor an option alias.
    """

    lookup = _field_lookup()
    normalised: dict[str, Any] = {}
    for key, value in fragment.items():
        field_name = lookup.get(key)
        if field_name is None:
            raise ConfigError(f"Unknown option {key!r} in {origin}")
        normalised[field_name] = value
    return normalised


def _field_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for name, field in Config.model_fields.items():
        lookup[name] = name
        if field.alias:
            lookup[field.alias] = name
    return lookup


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


__all__ = [
    "ConfigSource",
    "DefaultConfigSource",
    "JsonConfigSource",
    "MappingConfigSource",
    "PackageJsonConfigSource",
    "TomlConfigSource",
    "file_source_for",
    "load_config",
    "normalise_keys",
]
