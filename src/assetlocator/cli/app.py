# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application exposing lookups and extraction."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ..cache.extraction import ExtractionCache
from ..config import ExtractionSettings
from ..errors import EnumerationError, ExtractionError, MultipleMatchesError, NotFoundError
from ..extractor import Extractor, prune_stale
from ..filesystem import display_relative_path
from ._options import (
    EMOJI_OPTION,
    MODULE_OPTION,
    NAMESPACE_ROOT_OPTION,
    NO_COLOR_OPTION,
    SOURCE_OPTION,
    LocatorCLIOptions,
    build_locator_options,
    normalize_cli_values,
)
from .shared import EXIT_MULTIPLE_MATCHES, EXIT_NOT_FOUND, CLIError, CLILogger, build_cli_logger

app = typer.Typer(
    name="assetlocator",
    help="Locate and extract files bundled in versioned asset modules.",
    no_args_is_help=True,
    add_completion=False,
)


def _exit_with(error: CLIError, logger: CLILogger) -> typer.Exit:
    logger.fail(str(error))
    return typer.Exit(code=error.exit_code)


@app.command("locate")
def locate(
    partial: Annotated[str, typer.Argument(help="Partial path such as 'jquery.js' or '3.7.1/jquery.js'.")],
    module: Annotated[str | None, typer.Option("--module", "-m", help="Restrict the lookup to one module.")] = None,
    source: SOURCE_OPTION = None,
    namespace_root: NAMESPACE_ROOT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    no_color: NO_COLOR_OPTION = False,
) -> None:
    """Print the full path a partial path resolves to."""

    options = build_locator_options(source, namespace_root, emoji, no_color)
    logger = build_cli_logger(emoji=options.emoji, no_color=options.no_color)
    try:
        locator = options.locator()
    except CLIError as exc:
        raise _exit_with(exc, logger) from exc

    try:
        if module is None:
            resolved = locator.resolve_full_path(partial)
        else:
            resolved = locator.resolve_module_path(module, partial)
    except NotFoundError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_NOT_FOUND) from exc
    except MultipleMatchesError as exc:
        logger.fail(str(exc))
        for candidate in sorted(exc.matches):
            logger.echo(f"  {candidate}")
        raise typer.Exit(code=EXIT_MULTIPLE_MATCHES) from exc
    logger.echo(resolved)


@app.command("exact")
def exact(
    module: Annotated[str, typer.Argument(help="Module name.")],
    path: Annotated[str, typer.Argument(help="Path relative to the module.")],
    source: SOURCE_OPTION = None,
    namespace_root: NAMESPACE_ROOT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    no_color: NO_COLOR_OPTION = False,
) -> None:
    """Print the full path of a module-relative path."""

    options = build_locator_options(source, namespace_root, emoji, no_color)
    logger = build_cli_logger(emoji=options.emoji, no_color=options.no_color)
    try:
        locator = options.locator()
    except CLIError as exc:
        raise _exit_with(exc, logger) from exc

    resolved = locator.resolve_exact_path(module, path)
    if resolved is None:
        logger.fail(str(NotFoundError(path, module=module)))
        raise typer.Exit(code=EXIT_NOT_FOUND)
    logger.echo(resolved)


@app.command("modules")
def modules(
    source: SOURCE_OPTION = None,
    namespace_root: NAMESPACE_ROOT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    no_color: NO_COLOR_OPTION = False,
) -> None:
    """Print every module with its version and group."""

    options = build_locator_options(source, namespace_root, emoji, no_color)
    logger = build_cli_logger(emoji=options.emoji, no_color=options.no_color)
    try:
        locator = options.locator()
    except CLIError as exc:
        raise _exit_with(exc, logger) from exc

    if not locator.modules:
        logger.warn("No modules found.")
        return
    for name, info in locator.modules.items():
        logger.echo(f"{name} {info.version or '-'} {info.group or '-'}")


@app.command("list")
def list_paths(
    prefix: Annotated[str, typer.Argument(help="Full or root-relative path prefix.")] = "",
    source: SOURCE_OPTION = None,
    namespace_root: NAMESPACE_ROOT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    no_color: NO_COLOR_OPTION = False,
) -> None:
    """Print every path under a prefix."""

    options = build_locator_options(source, namespace_root, emoji, no_color)
    logger = build_cli_logger(emoji=options.emoji, no_color=options.no_color)
    try:
        locator = options.locator()
    except CLIError as exc:
        raise _exit_with(exc, logger) from exc

    for path in locator.list_under_prefix(prefix):
        logger.echo(path)


@app.command("extract")
def extract(
    output: Annotated[Path, typer.Argument(help="Directory to extract into.")],
    module: MODULE_OPTION = None,
    manifest: Annotated[
        str | None,
        typer.Option("--manifest", help="Name modules after the 'name' field of this module-relative manifest."),
    ] = None,
    cache_file: Annotated[
        Path | None,
        typer.Option("--cache", help="Cache file tracking extracted files. Defaults to one inside OUTPUT."),
    ] = None,
    prune: Annotated[bool, typer.Option("--prune", help="Delete previously extracted files that are stale.")] = False,
    strict: Annotated[bool, typer.Option("--strict", help="Abort on the first file that cannot be copied.")] = False,
    source: SOURCE_OPTION = None,
    namespace_root: NAMESPACE_ROOT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    no_color: NO_COLOR_OPTION = False,
) -> None:
    """Extract module resources into OUTPUT."""

    options = build_locator_options(source, namespace_root, emoji, no_color)
    logger = build_cli_logger(emoji=options.emoji, no_color=options.no_color)
    try:
        extractor = _build_extractor(options, cache_file=cache_file, strict=strict)
    except CLIError as exc:
        raise _exit_with(exc, logger) from exc

    selected = normalize_cli_values(module) or None
    try:
        result = extractor.extract(output, modules=selected, manifest_file=manifest)
    except NotFoundError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_NOT_FOUND) from exc
    except (ExtractionError, EnumerationError) as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=1) from exc

    logger.section(f"Extracted into {display_relative_path(output, Path.cwd())}")
    logger.ok(f"Copied {len(result.copied)} file(s), {len(result.current)} already current.")
    for name in result.skipped_modules:
        logger.info(f"Skipped {name}: no module id in {manifest}.")
    for failure in result.failures:
        logger.fail(f"Could not extract {failure.source} to {failure.destination}: {failure.message}")
    if prune:
        removed = prune_stale(result.stale)
        for path in removed:
            logger.echo(f"removed {display_relative_path(path, output)}")
        if removed:
            logger.info(f"Removed {len(removed)} stale file(s).")
    elif result.stale:
        logger.warn(f"{len(result.stale)} stale file(s) left in place; rerun with --prune to delete them.")
    if result.failures:
        raise typer.Exit(code=1)


def _build_extractor(options: LocatorCLIOptions, *, cache_file: Path | None, strict: bool) -> Extractor:
    settings = options.settings()
    enumerator = options.enumerator()
    cache = ExtractionCache(cache_file.expanduser()) if cache_file is not None else None
    return Extractor(enumerator, settings, cache=cache, extraction=ExtractionSettings(strict=strict))


def main() -> None:
    """Run the command line application."""

    app()


__all__ = ["app", "main"]
