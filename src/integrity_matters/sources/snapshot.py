# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run-wide snapshot of the three dependency version sources."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..constants import MANIFEST_FILE
from ..diagnostics import Diagnostic, DiagnosticLog
from ..models import DeclaredRange, PinnedRecord, VersionSources
from .installed import InstalledReader
from .lockfiles import LockReader, load_lock_reader
from .manifest import ManifestReader


@dataclass(frozen=True, slots=True)
class DependencySnapshot:
    """Declared, pinned and installed versions loaded before reconciliation starts.

    The snapshot is never mutated after :meth:`load` returns, so concurrent
    reference pipelines may share it freely.
    """

    manifest: ManifestReader
    lock: LockReader | None
    installed: InstalledReader
    diagnostics: tuple[Diagnostic, ...] = ()

    @classmethod
    def load(cls, root: Path, *, manifest_path: Path | None = None) -> DependencySnapshot:
        """Read the manifest, the selected lock file and installed copies under ``root``.

        Args:
            root: Project directory.
            manifest_path: Optional manifest location overriding ``root/package.json``.

        Returns:
            DependencySnapshot: Immutable snapshot plus preamble diagnostics.

        Raises:
            ConfigurationInconsistency: If the manifest cannot be read.
        """

        log = DiagnosticLog()
        manifest = ManifestReader.load(manifest_path or root / MANIFEST_FILE)
        log.info(f"INFO: Found `{MANIFEST_FILE}`")
        lock = load_lock_reader(root, log)
        installed = InstalledReader.scan(root, manifest.package_names(), log)
        return cls(manifest=manifest, lock=lock, installed=installed, diagnostics=tuple(log))

    def declared_range(self, name: str) -> DeclaredRange | None:
        return self.manifest.declared_range(name)

    def pinned_version(self, name: str) -> PinnedRecord | None:
        return self.lock.pinned_version(name) if self.lock is not None else None

    def installed_version(self, name: str) -> str | None:
        return self.installed.installed_version(name)

    def sources_for(self, name: str) -> VersionSources:
        """Return the three-way comparison input for ``name``."""

        return VersionSources(
            declared=self.declared_range(name),
            pinned=self.pinned_version(name),
            installed=self.installed_version(name),
            lock_name=self.lock.display_name if self.lock is not None else None,
        )


__all__ = ["DependencySnapshot"]
