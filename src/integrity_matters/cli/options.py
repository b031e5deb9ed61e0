# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option declarations and override building for the CLI."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Final

import typer

from ..config.models import parse_global_checks


class LoggingLevel(str, Enum):
    """Logging levels accepted by ``--logging``."""

    VERBOSE = "verbose"
    OFF = "off"


FILES_ARGUMENT = Annotated[
    list[str] | None,
    typer.Argument(help="Files or file globs to update.", show_default=False),
]
FILE_OPTION = Annotated[
    list[str] | None,
    typer.Option("--file", help="File or file glob to update (repeatable).", show_default=False),
]
OUTPUT_PATH_OPTION = Annotated[
    list[str] | None,
    typer.Option(
        "--output-path",
        "-o",
        help="Path to save each file to if different from the input; disables globbing.",
        show_default=False,
    ),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", help="TOML or JSON configuration file.", show_default=False),
]
NO_CONFIG_OPTION = Annotated[
    bool,
    typer.Option("--no-config", help="Ignore configuration files, including `package.json`."),
]
PACKAGE_JSON_OPTION = Annotated[
    Path | None,
    typer.Option("--package-json", help="`package.json` holding an `integrityMatters` section.", show_default=False),
]
CWD_OPTION = Annotated[
    Path | None,
    typer.Option("--cwd", help="Project directory for globs and dependency files.", show_default=False),
]
LOCAL_OPTION = Annotated[bool, typer.Option("--local", help="Rewrite references to the local `node_modules` copy.")]
FALLBACK_OPTION = Annotated[bool, typer.Option("--fallback", help="Emit a local fallback loader after each tag.")]
GLOBAL_CHECK_OPTION = Annotated[
    list[str] | None,
    typer.Option(
        "--global-check",
        help="Fallback guard as `package=script|link=expression` (repeatable).",
        show_default=False,
    ),
]
NO_GLOBS_OPTION = Annotated[bool, typer.Option("--no-globs", help="Treat file arguments literally.")]
FORCE_INTEGRITY_OPTION = Annotated[
    bool,
    typer.Option("--force-integrity-checks", help="Check integrity even when the version is unchanged."),
]
ADD_CROSSORIGIN_OPTION = Annotated[
    str | None,
    typer.Option("--add-crossorigin", help="`crossorigin` value to set on tags with integrity.", show_default=False),
]
NO_LOCAL_INTEGRITY_OPTION = Annotated[
    bool,
    typer.Option("--no-local-integrity", help="Drop integrity from tags rewritten to local paths."),
]
IGNORE_URL_FETCHES_OPTION = Annotated[
    bool,
    typer.Option("--ignore-url-fetches", help="Skip checking that rewritten URLs resolve."),
]
URL_INTEGRITY_CHECK_OPTION = Annotated[
    bool,
    typer.Option("--url-integrity-check", help="Download rewritten URLs and compare their hashes."),
]
ALGORITHM_OPTION = Annotated[
    list[str] | None,
    typer.Option("--algorithm", help="Integrity algorithm whitelist entry (repeatable).", show_default=False),
]
CDN_NAME_OPTION = Annotated[
    list[str] | None,
    typer.Option("--cdn-name", help="CDN name aligned with the pattern catalog (repeatable).", show_default=False),
]
DRY_RUN_OPTION = Annotated[bool, typer.Option("--dry-run", help="Process files without writing them.")]
JSON_SPACE_OPTION = Annotated[
    str | None,
    typer.Option("--json-space", help="Indentation for JSON output (number or string).", show_default=False),
]
DROP_MODULES_OPTION = Annotated[
    bool,
    typer.Option("--drop-modules", help="Replace `type=module` with `defer` and remove `nomodule` scripts."),
]
DISCLAIMER_OPTION = Annotated[
    str | None,
    typer.Option("--disclaimer", help="Comment prepended to HTML output.", show_default=False),
]
JOBS_OPTION = Annotated[
    int | None,
    typer.Option("--jobs", "-j", min=1, help="Worker threads for reference processing.", show_default=False),
]
LOGGING_OPTION = Annotated[
    LoggingLevel,
    typer.Option("--logging", help="Logging level.", case_sensitive=False),
]
VERBOSE_OPTION = Annotated[bool, typer.Option("--verbose", "-v", help="Show informational messages.")]
EMOJI_OPTION = Annotated[bool, typer.Option("--emoji/--no-emoji", help="Toggle emoji output.")]


_FLAG_FIELDS: Final[tuple[str, ...]] = (
    "local",
    "fallback",
    "no_globs",
    "force_integrity_checks",
    "no_local_integrity",
    "ignore_url_fetches",
    "url_integrity_check",
    "dry_run",
    "drop_modules",
    "verbose",
)


def normalize_cli_values(values: Sequence[str] | None) -> tuple[str, ...]:
    """Return sanitized CLI values preserving order."""

    if not values:
        return ()
    cleaned_values: list[str] = []
    for entry in values:
        if not entry:
            continue
        stripped = entry.strip()
        if stripped:
            cleaned_values.append(stripped)
    return tuple(cleaned_values)


def parse_json_space(raw: str | None) -> int | str | None:
    """Return ``raw`` as an indentation count when numeric, else verbatim."""

    if raw is None:
        return None
    return int(raw) if raw.isdigit() else raw


@dataclass(slots=True)
class IntegrityCLIOptions:
    """Capture CLI input supplied to the integrity-matters command."""

    files: tuple[str, ...] = ()
    output_paths: tuple[str, ...] = ()
    config_path: Path | None = None
    no_config: bool = False
    package_json: Path | None = None
    cwd: Path | None = None
    local: bool = False
    fallback: bool = False
    global_checks: tuple[str, ...] = ()
    no_globs: bool = False
    force_integrity_checks: bool = False
    add_crossorigin: str | None = None
    no_local_integrity: bool = False
    ignore_url_fetches: bool = False
    url_integrity_check: bool = False
    algorithms: tuple[str, ...] = ()
    cdn_names: tuple[str, ...] = ()
    dry_run: bool = False
    json_space: int | str | None = None
    drop_modules: bool = False
    disclaimer: str | None = None
    jobs: int | None = None
    verbose: bool = False
    emoji: bool = True

    @property
    def root(self) -> Path:
        """Return the directory configuration files resolve against."""

        return (self.cwd or Path.cwd()).resolve()

    def overrides(self) -> dict[str, Any]:
        """Return only the values the user actually supplied, keyed by config field.

        Raises:
            ValueError: If a ``--global-check`` entry is malformed.
        """

        payload: dict[str, Any] = {}
        if self.files:
            payload["file"] = list(self.files)
        if self.output_paths:
            payload["output_path"] = list(self.output_paths)
        if self.cwd is not None:
            payload["cwd"] = self.cwd
        if self.global_checks:
            payload["global_check"] = parse_global_checks(self.global_checks)
        if self.algorithms:
            payload["algorithms"] = list(self.algorithms)
        if self.cdn_names:
            payload["cdn_names"] = list(self.cdn_names)
        for name in ("add_crossorigin", "json_space", "disclaimer", "jobs"):
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        for name in _FLAG_FIELDS:
            if getattr(self, name):
                payload[name] = True
        return payload


__all__ = [
    "IntegrityCLIOptions",
    "LoggingLevel",
    "normalize_cli_values",
    "parse_json_space",
]
