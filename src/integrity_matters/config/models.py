# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration record consumed by the reconciliation run."""

from __future__ import annotations

import math
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import (
    DEFAULT_CDN_BASE_PATH_REPLACEMENTS,
    DEFAULT_CDN_BASE_PATHS,
    DEFAULT_CDN_NAMES,
    DEFAULT_NODE_MODULES_REPLACEMENTS,
    DEFAULT_PACKAGES_TO_CDNS,
)

Algorithm = Literal["sha256", "sha384", "sha512"]
GlobalChecks = dict[str, dict[str, str]]

_GLOBAL_CHECK_KINDS: tuple[str, ...] = ("script", "link")


def default_parallel_jobs() -> int:
    """Return roughly three quarters of the available CPU cores, at least one."""

    cores = os.cpu_count() or 1
    return max(1, math.floor(cores * 0.75))


def parse_global_checks(raw: object) -> GlobalChecks:
    """Normalise ``globalCheck`` input into ``{package: {kind: expression}}``.

    Args:
        raw: Mapping in normalised form, or a sequence of
            ``package=kind=expression`` strings.

    Returns:
        GlobalChecks: Guard expressions keyed by package then reference kind.

    Raises:
        ValueError: If an entry is malformed or names an unknown kind.
    """

    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        checks: GlobalChecks = {}
        for package, kinds in raw.items():
            if not isinstance(kinds, Mapping):
                raise ValueError(f"globalCheck entry for {package!r} must map script/link to an expression")
            checks[str(package)] = {str(kind): str(expression) for kind, expression in kinds.items()}
        _validate_kinds(checks)
        return checks
    if isinstance(raw, str) or not isinstance(raw, Sequence):
        raise ValueError("globalCheck must be a mapping or a list of `package=kind=expression` strings")
    checks = {}
    for entry in raw:
        parts = str(entry).split("=", 2)
        if len(parts) != 3 or not all(parts[:2]):
            raise ValueError(f"globalCheck entry {entry!r} must look like `package=kind=expression`")
        package, kind, expression = parts
        checks.setdefault(package, {})[kind] = expression
    _validate_kinds(checks)
    return checks


def _validate_kinds(checks: GlobalChecks) -> None:
    for package, kinds in checks.items():
        for kind in kinds:
            if kind not in _GLOBAL_CHECK_KINDS:
                raise ValueError(f"globalCheck kind {kind!r} for {package!r} must be one of script, link")


class Config(BaseModel):
    """Options controlling matching, rewriting, hashing and output.

    Field names follow Python conventions; the camelCase option names used in
    ``package.json`` and JSON config files are accepted as aliases.
    """

    model_config = ConfigDict(validate_assignment=True, populate_by_name=True, extra="forbid")

    file: list[str] = Field(default_factory=list)
    output_path: list[str] = Field(default_factory=list, alias="outputPath")
    cwd: Path | None = None

    cdn_base_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_CDN_BASE_PATHS), alias="cdnBasePath")
    cdn_base_path_replacements: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CDN_BASE_PATH_REPLACEMENTS),
        alias="cdnBasePathReplacements",
    )
    node_modules_replacements: list[str] = Field(
        default_factory=lambda: list(DEFAULT_NODE_MODULES_REPLACEMENTS),
        alias="nodeModulesReplacements",
    )
    cdn_names: list[str] = Field(default_factory=lambda: list(DEFAULT_CDN_NAMES), alias="cdnName")
    packages_to_cdns: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PACKAGES_TO_CDNS),
        alias="packagesToCdns",
    )

    algorithms: list[Algorithm] = Field(default_factory=list, alias="algorithm")
    global_check: GlobalChecks = Field(default_factory=dict, alias="globalCheck")

    local: bool = False
    fallback: bool = False
    no_globs: bool = Field(default=False, alias="noGlobs")
    force_integrity_checks: bool = Field(default=False, alias="forceIntegrityChecks")
    add_crossorigin: str | None = Field(default=None, alias="addCrossorigin")
    no_local_integrity: bool = Field(default=False, alias="noLocalIntegrity")
    ignore_url_fetches: bool = Field(default=False, alias="ignoreURLFetches")
    url_integrity_check: bool = Field(default=False, alias="urlIntegrityCheck")
    dry_run: bool = Field(default=False, alias="dryRun")

    json_space: int | str = Field(default=2, alias="jsonSpace")
    drop_modules: bool = Field(default=False, alias="dropModules")
    disclaimer: str | None = None

    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    fetch_timeout: float | None = Field(default=30.0, alias="fetchTimeout")
    verbose: bool = False

    @field_validator("global_check", mode="before")
    @classmethod
    def _coerce_global_check(cls, value: object) -> GlobalChecks:
        return parse_global_checks(value)

    @field_validator(
        "file",
        "output_path",
        "algorithms",
        "cdn_names",
        "cdn_base_paths",
        "cdn_base_path_replacements",
        "node_modules_replacements",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value

    @property
    def root(self) -> Path:
        """Return the directory file globs and dependency sources resolve against."""

        return (self.cwd or Path.cwd()).resolve()

    def global_check_for(self, package: str, kind: str) -> str | None:
        """Return the configured guard expression for ``package`` and ``kind``."""

        return self.global_check.get(package, {}).get(kind)

    def to_dict(self) -> dict[str, object]:
        """Return a plain mapping suitable for layering under other sources."""

        payload: dict[str, object] = dict(self.model_dump(mode="python", exclude={"cwd"}))
        if self.cwd is not None:
            payload["cwd"] = str(self.cwd)
        return payload


__all__ = ["Algorithm", "Config", "GlobalChecks", "default_parallel_jobs", "parse_global_checks"]
