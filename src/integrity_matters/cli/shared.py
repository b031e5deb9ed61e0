# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared CLI utilities (logging adapter and errors)."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..diagnostics import Diagnostic, Severity
from ..logging import fail as core_fail
from ..logging import info as core_info
from ..logging import ok as core_ok
from ..logging import warn as core_warn


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI preferences."""

    use_emoji: bool
    verbose: bool = False

    def fail(self, message: str) -> None:
        """Log a failure message honouring emoji preferences.

        Args:
            message: Text describing the failure state.
        """

        core_fail(message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences.

        Args:
            message: Text describing the warning condition.
        """

        core_warn(message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        """Log a success message honouring emoji preferences.

        Args:
            message: Text describing the successful state.
        """

        core_ok(message, use_emoji=self.use_emoji)

    def info(self, message: str) -> None:
        """Log an informational message when verbose output is enabled."""

        if self.verbose:
            core_info(message, use_emoji=self.use_emoji)

    def emit(self, diagnostics: Iterable[Diagnostic]) -> None:
        """Render ``diagnostics`` in order, routing each by severity."""

        for diagnostic in diagnostics:
            if diagnostic.severity is Severity.ERROR:
                self.fail(diagnostic.message)
            elif diagnostic.severity is Severity.WARNING:
                self.warn(diagnostic.message)
            else:
                self.info(diagnostic.message)


def build_cli_logger(*, emoji: bool, verbose: bool = False) -> CLILogger:
    """Return a ``CLILogger`` configured for the provided preferences.

    Args:
        emoji: Whether log output may include emoji glyphs.
        verbose: Whether informational diagnostics should be rendered.
    """

    return CLILogger(use_emoji=emoji, verbose=verbose)


__all__ = ["CLIError", "CLILogger", "build_cli_logger"]
