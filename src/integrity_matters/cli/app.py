# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

from typing import Annotated

import typer

from .. import __version__
from ..config import Config, DefaultConfigSource, MappingConfigSource, file_source_for, load_config
from ..config.loaders import ConfigSource
from ..engine import IntegrityRun, RunReport
from ..errors import ConfigError, IntegrityMattersError
from .options import (
    ADD_CROSSORIGIN_OPTION,
    ALGORITHM_OPTION,
    CDN_NAME_OPTION,
    CONFIG_OPTION,
    CWD_OPTION,
    DISCLAIMER_OPTION,
    DROP_MODULES_OPTION,
    DRY_RUN_OPTION,
    EMOJI_OPTION,
    FALLBACK_OPTION,
    FILE_OPTION,
    FILES_ARGUMENT,
    FORCE_INTEGRITY_OPTION,
    GLOBAL_CHECK_OPTION,
    IGNORE_URL_FETCHES_OPTION,
    JOBS_OPTION,
    JSON_SPACE_OPTION,
    LOCAL_OPTION,
    LOGGING_OPTION,
    NO_CONFIG_OPTION,
    NO_GLOBS_OPTION,
    NO_LOCAL_INTEGRITY_OPTION,
    OUTPUT_PATH_OPTION,
    PACKAGE_JSON_OPTION,
    URL_INTEGRITY_CHECK_OPTION,
    VERBOSE_OPTION,
    IntegrityCLIOptions,
    LoggingLevel,
    normalize_cli_values,
    parse_json_space,
)
from .shared import CLIError, CLILogger, build_cli_logger

app = typer.Typer(
    name="integrity-matters",
    help="Keep CDN and local script/stylesheet references in step with installed packages and their SRI hashes.",
    add_completion=False,
    no_args_is_help=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.command()
def main(
    files: FILES_ARGUMENT = None,
    file: FILE_OPTION = None,
    output_path: OUTPUT_PATH_OPTION = None,
    config: CONFIG_OPTION = None,
    no_config: NO_CONFIG_OPTION = False,
    package_json: PACKAGE_JSON_OPTION = None,
    cwd: CWD_OPTION = None,
    local: LOCAL_OPTION = False,
    fallback: FALLBACK_OPTION = False,
    global_check: GLOBAL_CHECK_OPTION = None,
    no_globs: NO_GLOBS_OPTION = False,
    force_integrity_checks: FORCE_INTEGRITY_OPTION = False,
    add_crossorigin: ADD_CROSSORIGIN_OPTION = None,
    no_local_integrity: NO_LOCAL_INTEGRITY_OPTION = False,
    ignore_url_fetches: IGNORE_URL_FETCHES_OPTION = False,
    url_integrity_check: URL_INTEGRITY_CHECK_OPTION = False,
    algorithm: ALGORITHM_OPTION = None,
    cdn_name: CDN_NAME_OPTION = None,
    dry_run: DRY_RUN_OPTION = False,
    json_space: JSON_SPACE_OPTION = None,
    drop_modules: DROP_MODULES_OPTION = False,
    disclaimer: DISCLAIMER_OPTION = None,
    jobs: JOBS_OPTION = None,
    log_level: LOGGING_OPTION = LoggingLevel.OFF,
    verbose: VERBOSE_OPTION = False,
    emoji: EMOJI_OPTION = True,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Update script and stylesheet references and their integrity attributes."""

    options = IntegrityCLIOptions(
        files=normalize_cli_values([*(files or ()), *(file or ())]),
        output_paths=normalize_cli_values(output_path),
        config_path=config,
        no_config=no_config,
        package_json=package_json,
        cwd=cwd,
        local=local,
        fallback=fallback,
        global_checks=normalize_cli_values(global_check),
        no_globs=no_globs,
        force_integrity_checks=force_integrity_checks,
        add_crossorigin=add_crossorigin,
        no_local_integrity=no_local_integrity,
        ignore_url_fetches=ignore_url_fetches,
        url_integrity_check=url_integrity_check,
        algorithms=normalize_cli_values(algorithm),
        cdn_names=normalize_cli_values(cdn_name),
        dry_run=dry_run,
        json_space=parse_json_space(json_space),
        drop_modules=drop_modules,
        disclaimer=disclaimer,
        jobs=jobs,
        verbose=verbose or log_level is LoggingLevel.VERBOSE,
        emoji=emoji,
    )
    logger = build_cli_logger(emoji=options.emoji, verbose=options.verbose)
    try:
        resolved = load_cli_config(options)
        logger.verbose = resolved.verbose
        report = IntegrityRun(resolved).execute()
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except ConfigError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc
    except IntegrityMattersError as exc:
        if exc.diagnostics:
            logger.emit(exc.diagnostics)
        else:
            logger.fail(str(exc))
        raise typer.Exit(code=1) from exc

    _summarise(report, resolved, logger)


def load_cli_config(options: IntegrityCLIOptions) -> Config:
    """Layer defaults, the selected file source and CLI overrides.

    Raises:
        CLIError: If a ``--global-check`` value is malformed.
        ConfigError: If configuration input is invalid.
    """

    try:
        overrides = options.overrides()
    except ValueError as exc:
        raise CLIError(str(exc)) from exc
    sources: list[ConfigSource] = [DefaultConfigSource()]
    file_source = file_source_for(
        config_path=options.config_path,
        package_json=options.package_json,
        no_config=options.no_config,
        cwd=options.root,
    )
    if file_source is not None:
        sources.append(file_source)
    sources.append(MappingConfigSource(overrides, name="the command line"))
    return load_config(sources)


def _summarise(report: RunReport, config: Config, logger: CLILogger) -> None:
    logger.emit(report.diagnostics())
    updated = sum(1 for document in report.documents for outcome in document.outcomes if outcome.update is not None)
    total = sum(len(document.outcomes) for document in report.documents)
    files = len(report.documents)
    if config.dry_run:
        logger.ok(f"Dry run: {updated} of {total} reference(s) would be updated across {files} file(s).")
    else:
        logger.ok(f"Updated {updated} of {total} reference(s) across {files} file(s).")


__all__ = ["app", "load_cli_config", "main"]
