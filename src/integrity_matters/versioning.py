# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reconcile a referenced version against declared, pinned and installed versions.

The decision table is evaluated once per authoritative source in the order
URL, pinned lock record, installed copy. Any inconsistency that can be fixed by
pointing the reference at the installed copy marks the reference for
escalation; every other inconsistency raises.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

import nodesemver

from .diagnostics import DiagnosticLog
from .errors import ConfigurationInconsistency, VersionInconsistency
from .models import (
    DeclaredRange,
    DependencyClass,
    PinnedRecord,
    ReconciliationVerdict,
    VerdictAction,
    VersionSources,
)

URL_SOURCE: Final[str] = "URL"
INSTALLED_SOURCE: Final[str] = "`node_modules` `package.json`"
_GENERIC_LOCK_SOURCE: Final[str] = "lock file"


class RangePosition(str, Enum):
    """Position of a concrete version relative to a declared range."""

    SATISFIED = "satisfied"
    BELOW = "below"
    ABOVE = "above"


def range_position(version: str, declared_range: str) -> RangePosition:
    """Classify ``version`` against ``declared_range`` using npm semantics.

    Args:
        version: Exact version under test.
        declared_range: Range text from the manifest.

    Returns:
        RangePosition: Whether the version satisfies, undershoots or exceeds the range.

    Raises:
        VersionInconsistency: If the version or range cannot be interpreted.
    """

    if nodesemver.valid(version, False) is None:
        raise VersionInconsistency(f'Version "{version}" is not a valid semantic version.')
    try:
        if nodesemver.satisfies(version, declared_range, False):
            return RangePosition.SATISFIED
        if nodesemver.ltr(version, declared_range, False):
            return RangePosition.BELOW
        if nodesemver.gtr(version, declared_range, False):
            return RangePosition.ABOVE
    except ValueError as exc:
        raise VersionInconsistency(f'Unable to compare version {version} with range "{declared_range}": {exc}') from exc
    raise VersionInconsistency(
        f'Unexpected error: version {version} is neither within, below nor above the range "{declared_range}".'
    )


class VersionReconciler:
    """Produce a :class:`ReconciliationVerdict` for one matched reference."""

    def __init__(self, *, force: bool = False) -> None:
        self._force = force

    def reconcile(
        self,
        name: str,
        url_version: str | None,
        sources: VersionSources,
        log: DiagnosticLog,
    ) -> ReconciliationVerdict:
        """Decide whether the reference to ``name`` must be rewritten.

        Args:
            name: Package name captured from the location.
            url_version: Version captured from the location, ``None`` for local form.
            sources: Declared, pinned and installed versions for ``name``.
            log: Diagnostics owned by the reference being processed.

        Returns:
            ReconciliationVerdict: ``Unchanged`` or a rewrite to the installed version.

        Raises:
            ConfigurationInconsistency: If the package is undeclared or classified inconsistently.
            VersionInconsistency: If the versions cannot be reconciled.
        """

        declared = sources.declared
        if declared is None:
            raise ConfigurationInconsistency(f'Package "{name}" is not found in `package.json`.')

        installed = sources.installed
        if url_version is None:
            # Local form: the installed copy is the only version on record.
            if installed is not None:
                self._check_range(name, installed, declared, INSTALLED_SOURCE, log, tolerate_below=True)
                return ReconciliationVerdict(VerdictAction.REWRITE, target_version=installed)
            log.info(f'INFO: No installed copy of "{name}" found; leaving the local reference as written.')
            return ReconciliationVerdict(VerdictAction.UNCHANGED)

        escalate = self._check_range(name, url_version, declared, URL_SOURCE, log, tolerate_below=True)

        used_pinned = False
        pinned = sources.pinned
        if pinned is not None:
            used_pinned = True
            lock_source = sources.lock_name or _GENERIC_LOCK_SOURCE
            self._check_classification(name, declared, pinned, lock_source)
            escalate = self._compare_pinned(name, url_version, pinned.version, log) or escalate
            self._check_range(name, pinned.version, declared, lock_source, log, tolerate_below=False)

        if installed is not None:
            log.info(f'INFO: Found valid `package.json` for "{name}".')
            self._check_range(name, installed, declared, INSTALLED_SOURCE, log, tolerate_below=True)

        if not escalate:
            return ReconciliationVerdict(VerdictAction.UNCHANGED, used_pinned_record=used_pinned)

        if installed is None:
            if self._force:
                log.warn(
                    f'WARNING: No installed copy of "{name}" is available to update the URL; '
                    "leaving the version as written and checking integrity only."
                )
                return ReconciliationVerdict(VerdictAction.UNCHANGED, used_pinned_record=used_pinned, degraded=True)
            raise VersionInconsistency(
                f'No valid `package.json` found in `node_modules` for "{name}"; the URL version ({url_version}) '
                "needs updating but there is no local copy to update it to. Please install the package "
                "(e.g., as with `npm install`)."
            )

        log.info(f'INFO: Updating the URL for "{name}" from version {url_version} to installed version {installed}.')
        return ReconciliationVerdict(
            VerdictAction.REWRITE,
            target_version=installed,
            used_pinned_record=used_pinned,
        )

    @staticmethod
    def _check_range(
        name: str,
        version: str,
        declared: DeclaredRange,
        source: str,
        log: DiagnosticLog,
        *,
        tolerate_below: bool,
    ) -> bool:
        """Return ``True`` when ``version`` falls below the range and escalation is tolerated."""

        kind = declared.classification.value
        position = range_position(version, declared.range)
        if position is RangePosition.SATISFIED:
            log.info(
                f"INFO: The {source}'s version ({version}) is satisfied by the {kind} "
                f'"{name}"\'s current `package.json` range, "{declared.range}". Continuing...'
            )
            return False
        if position is RangePosition.BELOW:
            detail = (
                f"The {source}'s version ({version}) is less than the {kind} "
                f'"{name}"\'s current `package.json` range, "{declared.range}".'
            )
            if not tolerate_below:
                raise VersionInconsistency(f"{detail} Please update your {source} (e.g., as with `npm install`).")
            log.warn(f"WARNING: {detail} Checking `node_modules` for a valid installed version to update the URL...")
            return source == URL_SOURCE
        raise VersionInconsistency(
            f"The {source}'s version ({version}) is greater than the {kind} "
            f'"{name}"\'s current `package.json` range, "{declared.range}". '
            f"Please either update your `package.json` range to support the higher {source} version "
            f"(or downgrade your version in the {source})."
        )

    @staticmethod
    def _check_classification(name: str, declared: DeclaredRange, pinned: PinnedRecord, source: str) -> None:
        if pinned.dev is None:
            return
        locked = DependencyClass.SECONDARY if pinned.dev else DependencyClass.PRIMARY
        if locked is declared.classification:
            return
        raise ConfigurationInconsistency(
            f'Package "{name}" is a {declared.classification.value} in `package.json` but the {source} '
            f"records it as a {locked.value}. Please reinstall to update your {source}."
        )

    @staticmethod
    def _compare_pinned(name: str, url_version: str, lock_version: str, log: DiagnosticLog) -> bool:
        """Return ``True`` when the pinned version is ahead of the URL version."""

        try:
            ahead = nodesemver.gt(lock_version, url_version, False)
            behind = nodesemver.lt(lock_version, url_version, False)
        except ValueError as exc:
            raise VersionInconsistency(
                f'Unable to compare lock file version {lock_version} with URL version {url_version} for "{name}": {exc}'
            ) from exc
        if ahead:
            log.warn(
                f'WARNING: The lock file version {lock_version} is greater for package "{name}" than the URL '
                f"version {url_version}. Checking `node_modules` for a valid installed version to update the URL..."
            )
            return True
        if behind:
            raise VersionInconsistency(
                f'The lock file version {lock_version} is less for package "{name}" than the URL version '
                f"{url_version}. Please update your lock file (or downgrade the version in your URL)..."
            )
        log.info(f"INFO: Dependency {name} in your lock file already matches URL version ({url_version}).")
        return False


def reconcile(
    name: str,
    url_version: str | None,
    sources: VersionSources,
    log: DiagnosticLog,
    *,
    force: bool = False,
) -> ReconciliationVerdict:
    """Reconcile one reference using a throwaway :class:`VersionReconciler`."""

    return VersionReconciler(force=force).reconcile(name, url_version, sources, log)


__all__ = [
    "INSTALLED_SOURCE",
    "URL_SOURCE",
    "RangePosition",
    "VersionReconciler",
    "range_position",
    "reconcile",
]
