# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and layered loading."""

from __future__ import annotations

from .loaders import (
    ConfigSource,
    DefaultConfigSource,
    JsonConfigSource,
    MappingConfigSource,
    PackageJsonConfigSource,
    TomlConfigSource,
    file_source_for,
    load_config,
    normalise_keys,
)
from .models import Config, GlobalChecks, default_parallel_jobs, parse_global_checks

__all__ = [
    "Config",
    "ConfigSource",
    "DefaultConfigSource",
    "GlobalChecks",
    "JsonConfigSource",
    "MappingConfigSource",
    "PackageJsonConfigSource",
    "TomlConfigSource",
    "default_parallel_jobs",
    "file_source_for",
    "load_config",
    "normalise_keys",
    "parse_global_checks",
]
