# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Built-in defaults for the pattern catalog and integrity handling."""

from __future__ import annotations

from typing import Final

# https://developer.mozilla.org/en-US/docs/Web/Security/Subresource_Integrity
PERMITTED_ALGORITHMS: Final[tuple[str, ...]] = ("sha256", "sha384", "sha512")

MANIFEST_FILE: Final[str] = "package.json"
NPM_LOCKFILE: Final[str] = "package-lock.json"
YARN_LOCKFILE: Final[str] = "yarn.lock"
NODE_MODULES_DIR: Final[str] = "node_modules"
CONFIG_SECTION_KEY: Final[str] = "integrityMatters"

_SEMVER_GROUP: Final[str] = r"(?P<version>\d+\.\d+\.\d+)"
_PATH_GROUPS: Final[str] = r"(?P<dist>/dist)?(?P<path>[^ '\"]*)"

DEFAULT_CDN_NAMES: Final[tuple[str, ...]] = (
    "unpkg",
    "node_modules",
    "jquery",
    "jsdelivr",
    "bootstrap",
)

DEFAULT_PACKAGES_TO_CDNS: Final[dict[str, str]] = {
    "jquery": "jquery",
    "bootstrap": "bootstrap",
}

# Order matters: the first matching pattern wins.
DEFAULT_CDN_BASE_PATHS: Final[tuple[str, ...]] = (
    r"https://unpkg\.com/(?P<name>(?:@[^/]*/)?[^@]*)@" + _SEMVER_GROUP + _PATH_GROUPS,
    r"(?P<prefix>[./]*)node_modules/(?P<name>(?:@[^/]*/)?[^/]*)" + _PATH_GROUPS,
    r"https://code\.jquery\.com/(?P<name>[^-]*?)-" + _SEMVER_GROUP + _PATH_GROUPS,
    r"https://cdn\.jsdelivr\.net/npm/(?P<name>(?:@[^/]*/)?[^@]*?)@" + _SEMVER_GROUP + _PATH_GROUPS,
    r"https://stackpath\.bootstrapcdn\.com/(?P<name>[^/]*)/" + _SEMVER_GROUP + _PATH_GROUPS,
)

DEFAULT_NODE_MODULES_REPLACEMENTS: Final[tuple[str, ...]] = (
    r"node_modules/\g<name>\g<dist>\g<path>",
    r"\g<prefix>node_modules/\g<name>\g<dist>\g<path>",
    r"node_modules/\g<name>/dist/jquery\g<dist>\g<path>",
    r"node_modules/\g<name>\g<dist>\g<path>",
    r"node_modules/\g<name>/dist\g<path>",
)

DEFAULT_CDN_BASE_PATH_REPLACEMENTS: Final[tuple[str, ...]] = (
    r"https://unpkg.com/\g<name>@\g<version>\g<dist>\g<path>",
    r"https://unpkg.com/\g<name>@\g<version>\g<dist>\g<path>",
    r"https://code.jquery.com/\g<name>-\g<version>\g<dist>\g<path>",
    r"https://cdn.jsdelivr.net/npm/\g<name>@\g<version>\g<dist>\g<path>",
    r"https://stackpath.bootstrapcdn.com/\g<name>/\g<version>\g<path>",
)

VERSION_PLACEHOLDER: Final[str] = r"\g<version>"

__all__ = [
    "CONFIG_SECTION_KEY",
    "DEFAULT_CDN_BASE_PATHS",
    "DEFAULT_CDN_BASE_PATH_REPLACEMENTS",
    "DEFAULT_CDN_NAMES",
    "DEFAULT_NODE_MODULES_REPLACEMENTS",
    "DEFAULT_PACKAGES_TO_CDNS",
    "MANIFEST_FILE",
    "NODE_MODULES_DIR",
    "NPM_LOCKFILE",
    "PERMITTED_ALGORITHMS",
    "VERSION_PLACEHOLDER",
    "YARN_LOCKFILE",
]
