# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reasoning about destination paths on the local filesystem."""

from __future__ import annotations

import os
from os import PathLike
from pathlib import Path, PureWindowsPath

from ..constants import PATH_SEPARATOR
from ..errors import UnsafePathError

_Pathish = str | PathLike[str] | Path
_NATIVE_SEPARATORS = tuple(sep for sep in {os.sep, os.altsep, "\\"} if sep and sep != PATH_SEPARATOR)


def _best_effort_resolve(path: Path) -> Path:
    """Return ``path`` resolved where possible without raising.

    Args:
        path: Candidate path to resolve.

    Returns:
        Path: Absolute variant when resolution succeeds; otherwise the closest
        achievable approximation.
    """

    try:
        return path.resolve(strict=False)
    except (OSError, RuntimeError):
        return path.absolute() if not path.is_absolute() else path


def canonical_path(path: _Pathish) -> Path:
    """Return a canonical form of ``path`` suitable for set comparisons.

    The path is resolved and case-normalised so that two spellings of the same
    file on a case-insensitive filesystem compare equal.

    Args:
        path: Filesystem path to canonicalise.

    Returns:
        Path: Resolved, case-normalised path.
    """

    resolved = _best_effort_resolve(Path(path).expanduser())
    return Path(os.path.normcase(resolved))


def key_segments(key: str) -> list[str]:
    """Return the non-empty segments of the ``/``-separated ``key``.

    Args:
        key: Relative destination key.

    Returns:
        list[str]: Path segments in order.

    Raises:
        UnsafePathError: If a segment walks upwards, carries a native path
            separator, or names a drive.
    """

    segments = [part for part in key.split(PATH_SEPARATOR) if part and part != "."]
    for part in segments:
        if part == ".." or any(sep in part for sep in _NATIVE_SEPARATORS) or PureWindowsPath(part).drive:
            raise UnsafePathError(key)
    return segments


def is_safe_key(key: str) -> bool:
    """Return whether ``key`` names a non-empty path that stays below its base."""

    try:
        return bool(key_segments(key))
    except UnsafePathError:
        return False


def destination_for(base_dir: _Pathish, key: str) -> Path:
    """Return the filesystem path of the ``/``-separated ``key`` under ``base_dir``.

    Args:
        base_dir: Directory that relative keys are resolved against.
        key: Relative, ``/``-separated destination key.

    Returns:
        Path: Destination path for ``key``.

    Raises:
        UnsafePathError: If ``key`` would leave ``base_dir``.
    """

    return Path(base_dir).joinpath(*key_segments(key))


def display_relative_path(path: _Pathish, root: _Pathish) -> str:
    """Return a display-friendly representation of ``path`` relative to ``root``.

    Args:
        path: Path to present to the user.
        root: Base directory used for relativisation.

    Returns:
        str: Relative POSIX path when ``path`` lives under ``root``, otherwise
        the resolved absolute representation.
    """

    resolved = _best_effort_resolve(Path(path))
    base = _best_effort_resolve(Path(root))
    try:
        return resolved.relative_to(base).as_posix()
    except ValueError:
        return resolved.as_posix()


__all__ = (
    "canonical_path",
    "destination_for",
    "display_relative_path",
    "is_safe_key",
    "key_segments",
)
