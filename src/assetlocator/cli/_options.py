# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option declarations and option models shared by the CLI commands."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from ..config import ConfigError, LocatorSettings, resolve_locator_settings
from ..errors import EnumerationError
from ..locator import AssetLocator
from ..sources import ResourceEnumerator, enumerator_for_paths
from .shared import CLIError

SOURCE_OPTION = Annotated[
    list[Path] | None,
    typer.Option(
        "--source",
        "-s",
        help="Directory or archive to search (repeatable). Defaults to the working directory.",
    ),
]
NAMESPACE_ROOT_OPTION = Annotated[
    str | None,
    typer.Option("--namespace-root", help="Path prefix under which modules live."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
NO_COLOR_OPTION = Annotated[
    bool,
    typer.Option("--no-color", help="Disable coloured output."),
]
MODULE_OPTION = Annotated[
    list[str] | None,
    typer.Option("--module", "-m", help="Module to extract (repeatable). Defaults to every module."),
]


def normalize_cli_values(values: Sequence[str] | None) -> tuple[str, ...]:
    """Return sanitized CLI values preserving order."""

    if not values:
        return ()
    return tuple(entry.strip() for entry in values if entry and entry.strip())


@dataclass(slots=True)
class LocatorCLIOptions:
    """Capture the options shared by every command."""

    sources: tuple[Path, ...]
    namespace_root: str | None
    emoji: bool
    no_color: bool = False

    def settings(self) -> LocatorSettings:
        """Return locator settings honouring ``--namespace-root``.

        Raises:
            CLIError: If the settings are invalid.
        """

        try:
            base = resolve_locator_settings()
            if self.namespace_root is None:
                return base
            return LocatorSettings.model_validate({**base.model_dump(), "namespace_root": self.namespace_root})
        except (ConfigError, ValueError) as exc:
            raise CLIError(str(exc)) from exc

    def enumerator(self) -> ResourceEnumerator:
        """Return an enumerator over the configured sources.

        Raises:
            CLIError: If a source is neither a directory nor an archive.
        """

        try:
            return enumerator_for_paths(self.sources)
        except EnumerationError as exc:
            raise CLIError(str(exc)) from exc

    def locator(self) -> AssetLocator:
        """Return a locator over the configured sources.

        Raises:
            CLIError: If the sources cannot be enumerated.
        """

        settings = self.settings()
        enumerator = self.enumerator()
        try:
            return AssetLocator.scan(enumerator, settings)
        except EnumerationError as exc:
            raise CLIError(str(exc)) from exc


def build_locator_options(
    source: Sequence[Path] | None,
    namespace_root: str | None,
    emoji: bool,
    no_color: bool = False,
) -> LocatorCLIOptions:
    """Construct ``LocatorCLIOptions`` from Typer command parameters."""

    sources = tuple(path.expanduser() for path in source) if source else (Path.cwd(),)
    root = namespace_root.strip() if namespace_root is not None else None
    return LocatorCLIOptions(sources=sources, namespace_root=root or None, emoji=emoji, no_color=no_color)


__all__ = [
    "EMOJI_OPTION",
    "LocatorCLIOptions",
    "MODULE_OPTION",
    "NAMESPACE_ROOT_OPTION",
    "NO_COLOR_OPTION",
    "SOURCE_OPTION",
    "build_locator_options",
    "normalize_cli_values",
]
