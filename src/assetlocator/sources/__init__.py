# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resource origins and the enumerator composing them."""

from __future__ import annotations

import zipfile
from collections.abc import Iterable
from pathlib import Path
from typing import Final

from ..errors import EnumerationError
from .archive import (
    ARCHIVE_SCHEME,
    ARCHIVE_SCHEME_ALIASES,
    ENTRY_DELIMITER,
    ArchiveSource,
    web_archive_sources,
)
from .base import PathPredicate, Resource, ResourceEnumerator, ResourceSource, chain_sources
from .directory import FILE_SCHEME, DirectorySource
from .memory import MEMORY_SCHEME, MemorySource

WEB_ARCHIVE_SUFFIX: Final[str] = ".war"


def open_source(origin: str) -> ResourceSource:
    """Return the resource source described by an ``origin`` token.

    Args:
        origin: Token previously produced by a source's ``origin`` property.

    Returns:
        ResourceSource: Source variant selected by the token's scheme.

    Raises:
        EnumerationError: If the scheme is unsupported or the token cannot be
            reconstructed into a source.
    """

    if origin.startswith(FILE_SCHEME):
        return DirectorySource(Path(origin[len(FILE_SCHEME) :]))

    scheme = next((alias for alias in ARCHIVE_SCHEME_ALIASES if origin.startswith(alias)), None)
    if scheme is not None:
        remainder = origin[len(scheme) :]
        if not remainder.startswith(FILE_SCHEME):
            raise EnumerationError(f"Archive origin must reference a file: {origin!r}")
        parts = remainder[len(FILE_SCHEME) :].split(ENTRY_DELIMITER)
        archive, members = Path(parts[0]), parts[1:]
        base = members.pop() if members else ""
        return ArchiveSource(archive, nested=tuple(members), base=base)

    if origin.startswith(MEMORY_SCHEME):
        raise EnumerationError(f"In-memory origins cannot be reopened: {origin!r}")
    raise EnumerationError(f"Unsupported resource origin: {origin!r}")


def source_for_path(path: Path) -> list[ResourceSource]:
    """Return the sources serving a directory or archive on disk.

    Args:
        path: Directory, web-application archive, or zip-format archive.

    Returns:
        list[ResourceSource]: Sources in enumeration order.

    Raises:
        EnumerationError: If ``path`` is neither a directory nor an archive.
    """

    candidate = Path(path).expanduser()
    if candidate.is_dir():
        return [DirectorySource(candidate)]
    if candidate.is_file() and zipfile.is_zipfile(candidate):
        if candidate.suffix.lower() == WEB_ARCHIVE_SUFFIX:
            return list(web_archive_sources(candidate))
        return [ArchiveSource(candidate)]
    raise EnumerationError(f"{candidate} is neither a directory nor a zip-format archive")


def enumerator_for_paths(paths: Iterable[Path]) -> ResourceEnumerator:
    """Return an enumerator over every directory or archive in ``paths``.

    Args:
        paths: Locations consulted in order; earlier locations win on
            duplicate resource paths.

    Returns:
        ResourceEnumerator: Enumerator composing the selected sources.
    """

    return ResourceEnumerator(chain_sources(source_for_path(path) for path in paths))


__all__ = [
    "ARCHIVE_SCHEME",
    "ArchiveSource",
    "DirectorySource",
    "FILE_SCHEME",
    "MEMORY_SCHEME",
    "MemorySource",
    "PathPredicate",
    "Resource",
    "ResourceEnumerator",
    "ResourceSource",
    "enumerator_for_paths",
    "open_source",
    "source_for_path",
    "web_archive_sources",
]
