# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Change-detection cache for incremental extraction.

The cache holds two generations. ``on_disk`` is the snapshot loaded from the
cache file (or left behind by the previous :meth:`ExtractionCache.persist`),
``touched`` collects the entries confirmed or written during the current pass.
Persisting writes only the touched generation, so entries not seen during a
pass drop out of the cache and their destination files become stale.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from threading import RLock
from typing import Final

from ..filesystem import canonical_path, destination_for, is_safe_key

LOGGER = logging.getLogger(__name__)

FIELD_SEPARATOR: Final[str] = ":"
_FIELD_COUNT: Final[int] = 3


class CacheState(str, Enum):
    """Lifecycle state of an :class:`ExtractionCache`."""

    LOADED = "loaded"
    ACCUMULATING = "accumulating"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Source identity and modification time of one extracted file."""

    source: str
    last_modified: int


def parse_cache_lines(lines: Iterable[str]) -> dict[str, CacheEntry]:
    """Parse ``key:lastModified:source`` records, skipping malformed lines.

    Args:
        lines: Raw lines of a cache file.

    Returns:
        dict[str, CacheEntry]: Parsed entries; later records win per key.
    """

    entries: dict[str, CacheEntry] = {}
    for number, raw_line in enumerate(lines, start=1):
        line = raw_line.rstrip("\r\n")
        if not line:
            continue
        fields = line.split(FIELD_SEPARATOR, _FIELD_COUNT - 1)
        if len(fields) != _FIELD_COUNT:
            LOGGER.debug("skipping cache line %d: expected %d fields", number, _FIELD_COUNT)
            continue
        key, last_modified, source = fields
        try:
            timestamp = int(last_modified)
        except ValueError:
            LOGGER.debug("skipping cache line %d: invalid timestamp %r", number, last_modified)
            continue
        entries[key] = CacheEntry(source=source, last_modified=timestamp)
    return entries


def format_cache_lines(entries: dict[str, CacheEntry]) -> str:
    """Render ``entries`` in the persisted cache format."""

    return "".join(
        f"{key}{FIELD_SEPARATOR}{entry.last_modified}{FIELD_SEPARATOR}{entry.source}\n"
        for key, entry in entries.items()
    )


class ExtractionCache:
    """Track which extracted files are still current between passes."""

    def __init__(self, cache_file: Path | None = None) -> None:
        """Create the cache, loading ``cache_file`` when it exists.

        Args:
            cache_file: File persisting the cache between runs. ``None`` keeps
                the cache in memory for the lifetime of the instance.
        """

        self._cache_file = cache_file
        self._lock = RLock()
        self._on_disk: dict[str, CacheEntry] = {}
        self._touched: dict[str, CacheEntry] = {}
        self._previous: dict[str, CacheEntry] | None = None
        self._dirty = False
        self._state = CacheState.LOADED
        self.reset()

    @property
    def cache_file(self) -> Path | None:
        """Return the file backing the cache, if any."""

        return self._cache_file

    @property
    def state(self) -> CacheState:
        """Return the current lifecycle state."""

        with self._lock:
            return self._state

    def reset(self) -> None:
        """Reload the persisted generation and discard the current pass."""

        with self._lock:
            if self._cache_file is not None:
                self._on_disk = self._load(self._cache_file)
            self._touched = {}
            self._previous = None
            self._dirty = False
            self._state = CacheState.LOADED

    def begin_pass(self) -> None:
        """Start accumulating a new pass without reloading the cache file."""

        with self._lock:
            self._state = CacheState.ACCUMULATING

    def is_current(self, key: str, entry: CacheEntry) -> bool:
        """Return whether the file extracted at ``key`` came from ``entry``.

        A persisted entry seen for the first time in a pass is carried into
        the touched generation regardless of the answer.

        Args:
            key: Relative destination key.
            entry: Freshly computed source identity and modification time.

        Returns:
            bool: ``True`` when the recorded entry equals ``entry``.
        """

        with self._lock:
            self._state = CacheState.ACCUMULATING
            touched = self._touched.get(key)
            if touched is not None:
                return touched == entry
            stored = self._on_disk.get(key)
            if stored is None:
                return False
            self._touched[key] = stored
            return stored == entry

    def record(self, key: str, entry: CacheEntry) -> None:
        """Record that ``key`` was freshly extracted from ``entry``."""

        with self._lock:
            self._state = CacheState.ACCUMULATING
            self._touched[key] = entry
            self._dirty = True

    def persist(self, *, write: bool = True) -> None:
        """Make the touched generation the persisted one.

        The file is only rewritten when ``write`` is set and an entry was
        recorded during the pass or the generations differ in size. A write
        failure is logged; the in-memory generations advance regardless.

        Args:
            write: When ``False`` only rotate the in-memory generations.
        """

        with self._lock:
            changed = self._dirty or len(self._on_disk) != len(self._touched)
            if write and changed and self._cache_file is not None:
                self._write(self._cache_file, self._touched)
            self._previous = self._on_disk
            self._on_disk = self._touched
            self._touched = {}
            self._dirty = False
            self._state = CacheState.LOADED

    def stale_destinations(self, base_dir: Path) -> set[Path]:
        """Return extracted files under ``base_dir`` that the last pass did not touch.

        While a pass is accumulating, these are the persisted keys not yet
        touched. After :meth:`persist`, they are the keys of the replaced
        generation missing from the newly persisted one.

        Args:
            base_dir: Directory the keys were extracted beneath.

        Returns:
            set[Path]: Canonical paths of stale files that still exist.
        """

        with self._lock:
            if self._state is CacheState.ACCUMULATING or self._previous is None:
                candidates, kept = set(self._on_disk), set(self._touched)
            else:
                candidates, kept = set(self._previous), set(self._on_disk)

        kept_paths = {canonical_path(destination_for(base_dir, key)) for key in kept if is_safe_key(key)}
        stale: set[Path] = set()
        for key in candidates:
            if not is_safe_key(key):
                LOGGER.debug("ignoring cache key outside %s: %r", base_dir, key)
                continue
            path = canonical_path(destination_for(base_dir, key))
            if path in kept_paths or not path.is_file():
                continue
            stale.add(path)
        return stale

    def entries(self) -> dict[str, CacheEntry]:
        """Return a copy of the persisted generation."""

        with self._lock:
            return dict(self._on_disk)

    def touched(self) -> dict[str, CacheEntry]:
        """Return a copy of the generation accumulated during the current pass."""

        with self._lock:
            return dict(self._touched)

    @staticmethod
    def _load(cache_file: Path) -> dict[str, CacheEntry]:
        if not cache_file.exists():
            return {}
        try:
            text = cache_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("ignoring unreadable extraction cache %s: %s", cache_file, exc)
            return {}
        return parse_cache_lines(text.split("\n"))

    @staticmethod
    def _write(cache_file: Path, entries: dict[str, CacheEntry]) -> None:
        try:
            cache_file.parent.mkdir(parents=True, exist_ok=True)
            cache_file.write_text(format_cache_lines(entries), encoding="utf-8", newline="\n")
        except OSError as exc:
            LOGGER.warning("could not write extraction cache %s: %s", cache_file, exc)


__all__ = [
    "CacheEntry",
    "CacheState",
    "ExtractionCache",
    "FIELD_SEPARATOR",
    "format_cache_lines",
    "parse_cache_lines",
]
