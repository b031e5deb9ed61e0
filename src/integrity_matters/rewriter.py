# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Apply reconciliation verdicts to reference locations."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from .catalog import PatternCatalog
from .constants import VERSION_PLACEHOLDER
from .errors import ConfigurationInconsistency, LocalResourceMissing
from .models import MatchResult, ReconciliationVerdict, RewriteResult

_LEADING_RELATIVE: Final[re.Pattern[str]] = re.compile(r"^[./]*")


class ReferenceRewriter:
    """Build CDN and local locations from catalog templates.

    Args:
        catalog: Catalog that produced the matches handed to :meth:`rewrite`.
        cwd: Directory local paths are resolved against.
        local: When ``True`` the rewritten location is the local path itself.
    """

    def __init__(self, catalog: PatternCatalog, *, cwd: Path, local: bool = False) -> None:
        self._catalog = catalog
        self._cwd = cwd
        self._local = local

    def local_path(self, location: str, match: MatchResult, *, require: bool = True) -> tuple[str, Path]:
        """Return the relative local path for ``location`` and the file it names.

        Raises:
            LocalResourceMissing: If ``require`` is set and the computed file does not exist.
        """

        entry = self._catalog.entry(match.pattern_index)
        relative = _substitute(entry.pattern, entry.local_template, location)
        local_file = self._cwd / _LEADING_RELATIVE.sub("", relative, count=1)
        if require and not local_file.is_file():
            raise LocalResourceMissing(f"The local path {local_file} could not be found.")
        return relative, local_file

    def rewrite(
        self,
        location: str,
        match: MatchResult,
        verdict: ReconciliationVerdict,
        *,
        cdn_hint: str | None = None,
        require_local: bool = True,
    ) -> RewriteResult:
        """Return the new location and local path for one reference.

        Args:
            location: Location exactly as written in the document.
            match: Catalog match for ``location``.
            verdict: Version reconciliation outcome.
            cdn_hint: Explicit CDN identity requested by the reference.
            require_local: Fail when the local copy is missing.

        Returns:
            RewriteResult: Rewritten location plus the verified local path.

        Raises:
            LocalResourceMissing: If the local copy does not exist.
            ConfigurationInconsistency: If a template cannot be applied.
        """

        relative, local_file = self.local_path(location, match, require=require_local)
        if self._local:
            return RewriteResult(new_location=relative, local_path=relative, local_file=local_file)
        if not verdict.rewrites or verdict.target_version is None:
            return RewriteResult(new_location=location, local_path=relative, local_file=local_file)

        template = self._catalog.cdn_template(match, cdn_hint=cdn_hint)
        template = template.replace(VERSION_PLACEHOLDER, verdict.target_version.replace("\\", r"\\"))
        entry = self._catalog.entry(match.pattern_index)
        new_location = _substitute(entry.pattern, template, location)
        return RewriteResult(new_location=new_location, local_path=relative, local_file=local_file)


def _substitute(pattern: re.Pattern[str], template: str, location: str) -> str:
    try:
        return pattern.sub(template, location, count=1)
    except (re.error, IndexError) as exc:
        raise ConfigurationInconsistency(
            f"Unable to apply template {template!r} to {location!r} with pattern {pattern.pattern!r}: {exc}"
        ) from exc


__all__ = ["ReferenceRewriter"]
