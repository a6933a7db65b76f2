# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Directory-backed resource origin."""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO, Final

from ..constants import MAX_DIRECTORY_DEPTH, PATH_SEPARATOR
from ..errors import EnumerationError
from .base import Resource, ResourceSource

FILE_SCHEME: Final[str] = "file:"


class DirectorySource(ResourceSource):
    """Report files stored beneath a directory on the local filesystem."""

    def __init__(self, root: Path, *, follow_symlinks: bool = False) -> None:
        """Create a source rooted at ``root``.

        Args:
            root: Directory whose descendants are reported relative to it.
            follow_symlinks: When ``True`` walk directories pointed to by
                symlinks instead of skipping them.
        """

        self._root = Path(root).expanduser().resolve()
        self._follow_symlinks = follow_symlinks

    @property
    def origin(self) -> str:
        """Return the ``file:`` origin token of the directory."""

        return f"{FILE_SCHEME}{self._root.as_posix()}"

    @property
    def root(self) -> Path:
        """Return the resolved directory backing the source."""

        return self._root

    def iter_resources(self, prefix: str) -> Iterator[Resource]:
        """Yield files whose root-relative path starts with ``prefix``.

        Args:
            prefix: Path prefix restricting the walk.

        Yields:
            Resource: Files found beneath the matching directory.

        Raises:
            EnumerationError: If the tree is nested deeper than the supported
                directory depth.
        """

        directory_part = prefix.rpartition(PATH_SEPARATOR)[0]
        base = self._root.joinpath(*[part for part in directory_part.split(PATH_SEPARATOR) if part])
        if not base.is_dir():
            return
        for dirpath, dirnames, filenames in os.walk(base, followlinks=self._follow_symlinks):
            current = Path(dirpath)
            depth = len(current.relative_to(base).parts)
            if depth > MAX_DIRECTORY_DEPTH:
                raise EnumerationError(f"Got deeper than {MAX_DIRECTORY_DEPTH} levels while searching {base}")
            dirnames.sort()
            for filename in sorted(filenames):
                candidate = current / filename
                relative = candidate.relative_to(self._root).as_posix()
                if not relative.startswith(prefix):
                    continue
                yield self._describe(candidate, relative)

    def find(self, path: str) -> Resource | None:
        """Return the file stored at exactly ``path`` beneath the root, if any."""

        segments = path.split(PATH_SEPARATOR)
        if any(part in ("", ".", "..") for part in segments):
            return None
        candidate = self._root.joinpath(*segments)
        if not candidate.is_file():
            return None
        return self._describe(candidate, path)

    def open(self, path: str) -> BinaryIO:
        """Open the file stored at ``path`` beneath the root.

        Args:
            path: Root-relative path reported by :meth:`iter_resources`.

        Returns:
            BinaryIO: Readable binary stream.
        """

        return self._root.joinpath(*path.split(PATH_SEPARATOR)).open("rb")

    def _describe(self, candidate: Path, relative: str) -> Resource:
        """Return the resource describing ``candidate``.

        Args:
            candidate: Absolute filesystem path of the file.
            relative: Root-relative POSIX path of the file.

        Returns:
            Resource: Resource carrying the file's mtime and permission bits.
        """

        try:
            info = candidate.stat()
        except OSError:
            return Resource(path=relative, origin=self.origin, identity=candidate.as_posix())
        return Resource(
            path=relative,
            origin=self.origin,
            identity=candidate.as_posix(),
            last_modified=info.st_mtime_ns // 1_000_000,
            permissions=stat.S_IMODE(info.st_mode),
        )


__all__ = ["DirectorySource", "FILE_SCHEME"]
