# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions raised while reconciling dependency references."""

from __future__ import annotations

from .diagnostics import Diagnostic


class IntegrityMattersError(RuntimeError):
    """Base class for fatal reconciliation failures.

    ``diagnostics`` holds whatever the failing reference had logged, ending
    with the error itself, so callers can replay the trail before exiting.
    """

    diagnostics: tuple[Diagnostic, ...] = ()


class ConfigurationInconsistency(IntegrityMattersError):
    """Raised when the manifest, lock file or options disagree about a package."""


class VersionInconsistency(IntegrityMattersError):
    """Raised when a referenced version cannot be reconciled with its sources."""


class IntegrityInconsistency(IntegrityMattersError):
    """Raised when an integrity value is malformed or names an unknown algorithm."""


class LocalResourceMissing(IntegrityMattersError):
    """Raised when the local copy backing a reference does not exist."""


class NetworkResourceUnreachable(IntegrityMattersError):
    """Raised when a rewritten remote location fails its reachability check."""


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


__all__ = [
    "ConfigError",
    "ConfigurationInconsistency",
    "IntegrityInconsistency",
    "IntegrityMattersError",
    "LocalResourceMissing",
    "NetworkResourceUnreachable",
    "VersionInconsistency",
]
