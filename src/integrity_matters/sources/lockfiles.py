# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pinned-version lookup over ``package-lock.json`` or ``yarn.lock``."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Final, Protocol

from ..constants import NPM_LOCKFILE, YARN_LOCKFILE
from ..diagnostics import DiagnosticLog
from ..models import PinnedRecord

_YARN_VERSION: Final[re.Pattern[str]] = re.compile(r'^\s+version:?\s+"?(?P<version>[^"\s]+)"?\s*$')
_YARN_INTEGRITY: Final[re.Pattern[str]] = re.compile(r'^\s+(?:integrity|checksum):?\s+"?(?P<integrity>[^"\s]+)"?\s*$')
_NPM_PACKAGE_PREFIX: Final[str] = "node_modules/"


class LockReader(Protocol):
    """Lock file accessor exposing exact pinned versions."""

    @property
    def display_name(self) -> str:
        """Return the lock file name used in diagnostics."""
        ...

    def pinned_version(self, name: str) -> PinnedRecord | None:
        """Return the pinned record for ``name`` when the lock file has one."""
        ...


class _MappingLockReader:
    """Lock reader backed by an immutable name-to-record mapping."""

    def __init__(self, display_name: str, records: Mapping[str, PinnedRecord]) -> None:
        self._display_name = display_name
        self._records = MappingProxyType(dict(records))

    @property
    def display_name(self) -> str:
        return self._display_name

    def pinned_version(self, name: str) -> PinnedRecord | None:
        return self._records.get(name)

    def __len__(self) -> int:
        return len(self._records)


class NpmLockReader(_MappingLockReader):
    """Read ``package-lock.json`` in lockfile versions 1 through 3."""

    @classmethod
    def parse(cls, payload: Mapping[str, object]) -> NpmLockReader:
        """Build a reader from decoded lock file JSON.

        Version 2 and 3 lock files describe top-level installs under
        ``packages["node_modules/<name>"]``; version 1 files use ``dependencies``.
        """

        records: dict[str, PinnedRecord] = {}
        packages = payload.get("packages")
        if isinstance(packages, Mapping):
            for key, entry in packages.items():
                if not key.startswith(_NPM_PACKAGE_PREFIX) or not isinstance(entry, Mapping):
                    continue
                name = key[len(_NPM_PACKAGE_PREFIX) :]
                # Nested installs are not top-level dependencies.
                if f"/{_NPM_PACKAGE_PREFIX}" in f"/{name}":
                    continue
                record = _npm_record(entry)
                if record is not None:
                    records[name] = record
        else:
            dependencies = payload.get("dependencies")
            if isinstance(dependencies, Mapping):
                for name, entry in dependencies.items():
                    if isinstance(entry, Mapping) and (record := _npm_record(entry)) is not None:
                        records[str(name)] = record
        return cls(f"`{NPM_LOCKFILE}`", records)


class YarnLockReader(_MappingLockReader):
    """Read classic (v1) and berry ``yarn.lock`` files."""

    @classmethod
    def parse(cls, text: str) -> YarnLockReader:
        """Build a reader from lock file text.

        Yarn records carry no dependency classification, so ``dev`` stays ``None``.
        When several ranges of one package resolve to different versions the
        last entry wins.
        """

        records: dict[str, PinnedRecord] = {}
        names: list[str] = []
        version: str | None = None
        integrity: str | None = None

        for line in text.splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            if not line[0].isspace():
                _store_yarn_entry(records, names, version, integrity)
                names = _yarn_header_names(line)
                version = None
                integrity = None
                continue
            if (found := _YARN_VERSION.match(line)) is not None:
                version = found.group("version")
            elif (found := _YARN_INTEGRITY.match(line)) is not None:
                integrity = found.group("integrity")
        _store_yarn_entry(records, names, version, integrity)
        return cls(f"`{YARN_LOCKFILE}`", records)


def load_lock_reader(root: Path, log: DiagnosticLog) -> LockReader | None:
    """Return the single lock reader consulted for this run.

    ``package-lock.json`` takes precedence; ``yarn.lock`` is ignored with a
    warning whenever a valid npm lock file is present.

    Args:
        root: Project directory holding the lock files.
        log: Diagnostics for the run preamble.

    Returns:
        LockReader | None: Reader for the selected lock file, if any.
    """

    npm_reader: NpmLockReader | None = None
    try:
        payload = json.loads((root / NPM_LOCKFILE).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        log.info(f"INFO: No valid `{NPM_LOCKFILE}` found.")
    else:
        if isinstance(payload, Mapping):
            npm_reader = NpmLockReader.parse(payload)
            log.info(f"INFO: Found `{NPM_LOCKFILE}`")
        else:
            log.info(f"INFO: No valid `{NPM_LOCKFILE}` found.")

    yarn_path = root / YARN_LOCKFILE
    if not yarn_path.is_file():
        if npm_reader is None:
            log.info(f"INFO: No valid `{YARN_LOCKFILE}` found.")
        return npm_reader
    if npm_reader is not None:
        log.warn(f"WARNING: Found `{YARN_LOCKFILE}`; ignoring due to detected `{NPM_LOCKFILE}`")
        return npm_reader
    try:
        text = yarn_path.read_text(encoding="utf-8")
    except OSError:
        log.info(f"INFO: No valid `{YARN_LOCKFILE}` found.")
        return None
    log.info(f"INFO: Found `{YARN_LOCKFILE}`.")
    return YarnLockReader.parse(text)


def _npm_record(entry: Mapping[str, object]) -> PinnedRecord | None:
    version = entry.get("version")
    if not isinstance(version, str):
        return None
    integrity = entry.get("integrity")
    return PinnedRecord(
        version=version,
        integrity=integrity if isinstance(integrity, str) else None,
        dev=bool(entry.get("dev", False)),
    )


def _store_yarn_entry(
    records: dict[str, PinnedRecord],
    names: list[str],
    version: str | None,
    integrity: str | None,
) -> None:
    if version is None:
        return
    for name in names:
        records[name] = PinnedRecord(version=version, integrity=integrity)


def _yarn_header_names(line: str) -> list[str]:
    header = line.rstrip().rstrip(":")
    names: list[str] = []
    for specifier in header.split(","):
        cleaned = specifier.strip().strip('"')
        name, separator, _range = cleaned.rpartition("@")
        if separator and name and name not in names:
            names.append(name)
    return names


__all__ = ["LockReader", "NpmLockReader", "YarnLockReader", "load_lock_reader"]
