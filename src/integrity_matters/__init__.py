# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Keep script and stylesheet references aligned with installed packages and their SRI hashes."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("integrity-matters")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = ["__version__"]
