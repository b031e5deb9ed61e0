# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Ordered catalog of location patterns and their rewrite templates.

Each catalog entry pairs a regular expression capturing ``name``, ``version``,
``dist`` and ``path`` with two templates: one rebuilding the CDN form of the
location and one producing the path of the local ``node_modules`` copy.
Entries are tried in declaration order and the first structural match wins,
so vendor-specific patterns must precede generic ones.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .constants import (
    DEFAULT_CDN_BASE_PATH_REPLACEMENTS,
    DEFAULT_CDN_BASE_PATHS,
    DEFAULT_CDN_NAMES,
    DEFAULT_NODE_MODULES_REPLACEMENTS,
    DEFAULT_PACKAGES_TO_CDNS,
)
from .errors import ConfigError, ConfigurationInconsistency
from .models import MatchResult

if TYPE_CHECKING:
    from .config.models import Config

_JS_NAMED_GROUP: Final[re.Pattern[str]] = re.compile(r"\(\?<(?![=!])")
_JS_GROUP_REFERENCE: Final[re.Pattern[str]] = re.compile(r"\$<(\w+)>")
_REQUIRED_GROUP: Final[str] = "name"


def normalize_pattern(source: str) -> str:
    """Return ``source`` with JavaScript named groups rewritten for :mod:`re`.

    Args:
        source: Pattern text using either ``(?<name>...)`` or ``(?P<name>...)``.

    Returns:
        str: Pattern text accepted by Python's regular expression engine.
    """

    return _JS_NAMED_GROUP.sub("(?P<", source)


def normalize_template(template: str) -> str:
    """Return ``template`` with ``$<name>`` references rewritten as ``\\g<name>``."""

    return _JS_GROUP_REFERENCE.sub(r"\\g<\1>", template)


def compile_pattern(source: str) -> re.Pattern[str]:
    """Compile a catalog pattern, validating that it captures a package name.

    Args:
        source: Pattern text in JavaScript or Python named-group syntax.

    Returns:
        re.Pattern[str]: Compiled multi-line pattern.

    Raises:
        ConfigError: If the pattern does not compile or lacks a ``name`` group.
    """

    try:
        compiled = re.compile(normalize_pattern(source), re.MULTILINE)
    except re.error as exc:
        raise ConfigError(f"Invalid location pattern {source!r}: {exc}") from exc
    if _REQUIRED_GROUP not in compiled.groupindex:
        raise ConfigError(f"Location pattern {source!r} must capture a `name` group")
    return compiled


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """One location pattern with the templates sharing its index."""

    index: int
    pattern: re.Pattern[str]
    cdn_name: str | None
    cdn_template: str
    local_template: str


class PatternCatalog:
    """Match reference locations against an ordered list of patterns."""

    def __init__(
        self,
        patterns: Sequence[str],
        *,
        cdn_names: Sequence[str] = DEFAULT_CDN_NAMES,
        cdn_templates: Sequence[str] = DEFAULT_CDN_BASE_PATH_REPLACEMENTS,
        local_templates: Sequence[str] = DEFAULT_NODE_MODULES_REPLACEMENTS,
        packages_to_cdns: Mapping[str, str] | None = None,
    ) -> None:
        if not patterns:
            raise ConfigError("At least one location pattern is required")
        if not cdn_templates or not local_templates:
            raise ConfigError("CDN and local templates must not be empty")
        self._cdn_names = tuple(cdn_names)
        self._cdn_templates = tuple(normalize_template(entry) for entry in cdn_templates)
        self._local_templates = tuple(normalize_template(entry) for entry in local_templates)
        self._packages_to_cdns = dict(DEFAULT_PACKAGES_TO_CDNS if packages_to_cdns is None else packages_to_cdns)
        self._entries = tuple(
            CatalogEntry(
                index=index,
                pattern=compile_pattern(source),
                cdn_name=self._cdn_names[index] if index < len(self._cdn_names) else None,
                cdn_template=self._template_at(self._cdn_templates, index),
                local_template=self._template_at(self._local_templates, index),
            )
            for index, source in enumerate(patterns)
        )

    @classmethod
    def default(cls) -> PatternCatalog:
        """Return the catalog of built-in CDN and ``node_modules`` patterns."""

        return cls(DEFAULT_CDN_BASE_PATHS)

    @classmethod
    def from_config(cls, config: Config) -> PatternCatalog:
        """Build the catalog described by ``config``."""

        return cls(
            config.cdn_base_paths,
            cdn_names=config.cdn_names,
            cdn_templates=config.cdn_base_path_replacements,
            local_templates=config.node_modules_replacements,
            packages_to_cdns=config.packages_to_cdns,
        )

    @property
    def entries(self) -> tuple[CatalogEntry, ...]:
        return self._entries

    def entry(self, index: int) -> CatalogEntry:
        return self._entries[index]

    def match(self, location: str) -> MatchResult | None:
        """Return the first structural match for ``location``.

        Args:
            location: URL or local path as written in the document.

        Returns:
            MatchResult | None: Captured fields of the first matching pattern,
            or ``None`` when no pattern applies.
        """

        for entry in self._entries:
            found = entry.pattern.search(location)
            if found is None:
                continue
            groups = found.groupdict()
            return MatchResult(
                pattern_index=entry.index,
                package_name=groups.get("name") or "",
                declared_version=groups.get("version"),
                path_remainder=groups.get("path") or "",
                dist_marker=groups.get("dist"),
            )
        return None

    def cdn_template(self, match: MatchResult, *, cdn_hint: str | None = None) -> str:
        """Select the CDN rewrite template for ``match``.

        The explicit per-reference hint wins, then the package-to-CDN mapping,
        then the CDN associated with the matched pattern itself.

        Raises:
            ConfigurationInconsistency: If a hint or mapping names an unknown CDN.
        """

        cdn_name = cdn_hint or self._packages_to_cdns.get(match.package_name)
        if cdn_name is None:
            return self._entries[match.pattern_index].cdn_template
        try:
            cdn_index = self._cdn_names.index(cdn_name)
        except ValueError:
            raise ConfigurationInconsistency(
                f'CDN "{cdn_name}" requested for package "{match.package_name}" is not one of the '
                f"configured CDN names ({', '.join(self._cdn_names)})."
            ) from None
        return self._template_at(self._cdn_templates, cdn_index)

    @staticmethod
    def _template_at(templates: Sequence[str], index: int) -> str:
        return templates[index] if index < len(templates) else templates[0]


__all__ = [
    "CatalogEntry",
    "PatternCatalog",
    "compile_pattern",
    "normalize_pattern",
    "normalize_template",
]
