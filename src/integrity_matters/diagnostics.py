# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity levels and per-reference diagnostic collection."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    """Severity levels attached to reconciliation diagnostics."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Single message emitted while processing a reference."""

    severity: Severity
    message: str


@dataclass(slots=True)
class DiagnosticLog:
    """Ordered diagnostics owned by exactly one reference or run phase.

    Logs are never shared between concurrently processed references; callers
    merge them once the owning pipeline has finished.
    """

    entries: list[Diagnostic] = field(default_factory=list)

    def info(self, message: str) -> None:
        """Record an informational message.

        Args:
            message: Text describing the observation.
        """

        self.entries.append(Diagnostic(Severity.INFO, message))

    def warn(self, message: str) -> None:
        """Record a non-fatal warning.

        Args:
            message: Text describing the warning condition.
        """

        self.entries.append(Diagnostic(Severity.WARNING, message))

    def error(self, message: str) -> None:
        """Record an error message.

        Args:
            message: Text describing the failure.
        """

        self.entries.append(Diagnostic(Severity.ERROR, message))

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Append ``diagnostics`` preserving their order."""

        self.entries.extend(diagnostics)

    def messages(self, severity: Severity | None = None) -> list[str]:
        """Return message texts, optionally filtered by ``severity``.

        Args:
            severity: Severity to keep; ``None`` keeps every entry.

        Returns:
            list[str]: Messages in emission order.
        """

        return [entry.message for entry in self.entries if severity is None or entry.severity is severity]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


__all__ = ["Diagnostic", "DiagnosticLog", "Severity"]
