# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Zip-format archive resource origins, including archives nested in archives."""

from __future__ import annotations

import io
import stat
import zipfile
from collections.abc import Iterator
from contextlib import ExitStack
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import BinaryIO, Final

from ..constants import PATH_SEPARATOR
from ..errors import EnumerationError
from .base import Resource, ResourceSource
from .directory import FILE_SCHEME

ARCHIVE_SCHEME: Final[str] = "zip:"
ARCHIVE_SCHEME_ALIASES: Final[tuple[str, ...]] = ("zip:", "jar:")
ENTRY_DELIMITER: Final[str] = "!/"
WEB_CLASSES_DIR: Final[str] = "WEB-INF/classes/"
WEB_LIB_DIR: Final[str] = "WEB-INF/lib/"
_UNIX_CREATE_SYSTEM: Final[int] = 3


def _entry_timestamp(info: zipfile.ZipInfo) -> int | None:
    """Return the entry's modification time in epoch milliseconds.

    Args:
        info: Archive entry metadata.

    Returns:
        int | None: Timestamp, or ``None`` when the entry's date is invalid.
    """

    try:
        return int(datetime(*info.date_time).timestamp() * 1000)
    except (ValueError, OverflowError, OSError):
        return None


def _entry_permissions(info: zipfile.ZipInfo) -> int | None:
    """Return the POSIX permission bits recorded for the entry.

    Args:
        info: Archive entry metadata.

    Returns:
        int | None: Permission bits when the archive was written on a Unix
        host and recorded a mode, otherwise ``None``.
    """

    if info.create_system != _UNIX_CREATE_SYSTEM:
        return None
    mode = info.external_attr >> 16
    if mode == 0:
        return None
    return stat.S_IMODE(mode)


class ArchiveSource(ResourceSource):
    """Report the entries of a zip-format archive.

    ``nested`` names archive members that are themselves archives; each is
    opened inside the previous one, so ``nested=("lib/inner.jar",)`` reports
    the entries of ``inner.jar`` stored inside ``archive``. ``base`` restricts
    the source to entries under a directory and strips it from reported paths.
    """

    def __init__(self, archive: Path, *, nested: tuple[str, ...] = (), base: str = "") -> None:
        self._archive = Path(archive).expanduser().resolve()
        self._nested = tuple(nested)
        self._base = base
        self._lock = Lock()
        self._names: list[str] | None = None
        self._resources: dict[str, Resource] | None = None
        self._payload: bytes | None = None

    @property
    def origin(self) -> str:
        """Return the ``zip:`` origin token describing the archive chain."""

        chain = "".join(f"{member}{ENTRY_DELIMITER}" for member in self._nested)
        return f"{ARCHIVE_SCHEME}{FILE_SCHEME}{self._archive.as_posix()}{ENTRY_DELIMITER}{chain}{self._base}"

    def iter_resources(self, prefix: str) -> Iterator[Resource]:
        """Yield archive entries whose path starts with ``prefix``.

        The archive chain is read once; later calls reuse the entry list.

        Args:
            prefix: Path prefix restricting the enumeration.

        Yields:
            Resource: File entries of the innermost archive.
        """

        for path, resource in self._catalogue().items():
            if path.startswith(prefix):
                yield resource

    def find(self, path: str) -> Resource | None:
        """Return the entry stored at exactly ``path``, if any."""

        return self._catalogue().get(path)

    def open(self, path: str) -> BinaryIO:
        """Return a stream over the entry stored at ``path``.

        Args:
            path: Path reported by :meth:`iter_resources`.

        Returns:
            BinaryIO: In-memory stream over the entry's bytes.

        Raises:
            EnumerationError: If the entry is missing from the archive.
        """

        if path not in self._catalogue():
            raise EnumerationError(f"{path} is not stored in {self.origin}")
        with ExitStack() as stack:
            archive = self._open_innermost(stack)
            try:
                payload = archive.read(f"{self._base}{path}")
            except (OSError, KeyError, zipfile.BadZipFile) as exc:
                raise EnumerationError(f"Could not read {path} from {self.origin}: {exc}") from exc
        return io.BytesIO(payload)

    def member_names(self) -> list[str]:
        """Return every entry name of the innermost archive.

        Returns:
            list[str]: Entry names, directories included.
        """

        self._catalogue()
        return list(self._names or ())

    def _catalogue(self) -> dict[str, Resource]:
        """Return the file entries under ``base`` keyed by reported path, in archive order."""

        with self._lock:
            if self._resources is None:
                origin = self.origin
                with ExitStack() as stack:
                    archive = self._open_innermost(stack)
                    infos = archive.infolist()
                resources: dict[str, Resource] = {}
                for info in infos:
                    if info.is_dir() or not info.filename.startswith(self._base):
                        continue
                    path = info.filename[len(self._base) :]
                    if not path or path in resources:
                        continue
                    resources[path] = Resource(
                        path=path,
                        origin=origin,
                        identity=f"{origin}{path}",
                        last_modified=_entry_timestamp(info),
                        permissions=_entry_permissions(info),
                    )
                self._names = [info.filename for info in infos]
                self._resources = resources
            return self._resources

    def _open_innermost(self, stack: ExitStack) -> zipfile.ZipFile:
        """Open the innermost archive, registering every handle on ``stack``.

        Nested members are decompressed on first use only; the innermost
        archive's bytes are kept for the lifetime of the source.

        Args:
            stack: Exit stack that closes the opened archives.

        Returns:
            zipfile.ZipFile: The innermost archive.

        Raises:
            EnumerationError: If any archive in the chain cannot be read.
        """

        try:
            if not self._nested:
                return stack.enter_context(zipfile.ZipFile(self._archive))
            if self._payload is None:
                with ExitStack() as chain:
                    archive = chain.enter_context(zipfile.ZipFile(self._archive))
                    for member in self._nested[:-1]:
                        archive = chain.enter_context(zipfile.ZipFile(io.BytesIO(archive.read(member))))
                    self._payload = archive.read(self._nested[-1])
            return stack.enter_context(zipfile.ZipFile(io.BytesIO(self._payload)))
        except (OSError, KeyError, zipfile.BadZipFile) as exc:
            raise EnumerationError(f"Could not open {self.origin}: {exc}") from exc


def web_archive_sources(archive: Path) -> list[ArchiveSource]:
    """Expand a web-application archive into its class directory and libraries.

    Args:
        archive: Path of the web-application archive.

    Returns:
        list[ArchiveSource]: One source for ``WEB-INF/classes/`` followed by
        one nested source per library archive under ``WEB-INF/lib/``.
    """

    outer = ArchiveSource(archive)
    sources = [ArchiveSource(archive, base=WEB_CLASSES_DIR)]
    for name in sorted(outer.member_names()):
        if not name.startswith(WEB_LIB_DIR) or name.endswith(PATH_SEPARATOR):
            continue
        if PATH_SEPARATOR in name[len(WEB_LIB_DIR) :]:
            continue
        if name.endswith((".jar", ".zip")):
            sources.append(ArchiveSource(archive, nested=(name,)))
    return sources


__all__ = [
    "ARCHIVE_SCHEME",
    "ARCHIVE_SCHEME_ALIASES",
    "ArchiveSource",
    "ENTRY_DELIMITER",
    "web_archive_sources",
]
