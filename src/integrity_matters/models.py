# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Value types shared by the reconciliation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeAlias

HashSet: TypeAlias = dict[str, str]
"""Mapping of SRI algorithm to base64 digest in first-seen order."""


class ReferenceKind(str, Enum):
    """Kinds of embed points a document may contain."""

    SCRIPT = "script"
    # Serialised as ``link`` to match both the element name and the record key.
    STYLESHEET = "link"


class DependencyClass(str, Enum):
    """Manifest classification of a dependency."""

    PRIMARY = "dependency"
    SECONDARY = "devDependency"


class VerdictAction(str, Enum):
    """Outcome of version reconciliation for one reference."""

    UNCHANGED = "unchanged"
    REWRITE = "rewrite"


@dataclass(frozen=True, slots=True)
class Reference:
    """One script or stylesheet embed point discovered in a document.

    Attributes:
        index: Position of the reference within its owning document strategy.
        kind: Script or stylesheet.
        location: URL or local path exactly as written.
        integrity: Raw integrity attribute value, if any.
        algorithms: Per-reference algorithm request list.
        cdn: Explicit CDN identity override.
        fallback: Whether a local fallback loader was requested.
        global_check: Guard expression used when emitting the fallback loader.
        crossorigin: ``crossorigin`` value declared on the reference.
    """

    index: int
    kind: ReferenceKind
    location: str
    integrity: str | None = None
    algorithms: tuple[str, ...] = ()
    cdn: str | None = None
    fallback: bool = False
    global_check: str | None = None
    crossorigin: str | None = None


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Fields captured when a location matches a catalog pattern."""

    pattern_index: int
    package_name: str
    declared_version: str | None
    path_remainder: str
    dist_marker: str | None


@dataclass(frozen=True, slots=True)
class DeclaredRange:
    """Semantic version range recorded for a package in the manifest."""

    range: str
    classification: DependencyClass


@dataclass(frozen=True, slots=True)
class PinnedRecord:
    """Exact version recorded for a package in a lock file."""

    version: str
    integrity: str | None = None
    dev: bool | None = None


@dataclass(frozen=True, slots=True)
class VersionSources:
    """Three-way comparison input for one package."""

    declared: DeclaredRange | None
    pinned: PinnedRecord | None
    installed: str | None
    lock_name: str | None = None


@dataclass(frozen=True, slots=True)
class ReconciliationVerdict:
    """Immutable decision produced by the version reconciliation engine."""

    action: VerdictAction
    target_version: str | None = None
    used_pinned_record: bool = False
    degraded: bool = False

    @property
    def rewrites(self) -> bool:
        """Return ``True`` when the location must be rewritten to ``target_version``."""

        return self.action is VerdictAction.REWRITE


@dataclass(frozen=True, slots=True)
class RewriteResult:
    """Locations produced by the locator/rewriter."""

    new_location: str
    local_path: str
    local_file: Path


@dataclass(frozen=True, slots=True)
class ReferenceUpdate:
    """Desired mutation handed back to the owning document strategy.

    ``add_crossorigin`` is a string to set, ``False`` to remove the attribute,
    or ``None`` to leave it as written.
    """

    new_location: str
    local_path: str
    new_integrity: str | None
    add_crossorigin: str | bool | None = None
    local: bool = False
    omit_local_integrity: bool = False
    fallback: bool = False
    global_check: str | None = None


__all__ = [
    "DeclaredRange",
    "DependencyClass",
    "HashSet",
    "MatchResult",
    "PinnedRecord",
    "ReconciliationVerdict",
    "Reference",
    "ReferenceKind",
    "ReferenceUpdate",
    "RewriteResult",
    "VerdictAction",
    "VersionSources",
]
