# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Sorted suffix index answering partial-path lookups over resource paths.

Paths are ordered by their segments in reverse, which turns "does this path
end with these segments" into "does this key start with these segments". All
paths ending with a given partial path are therefore stored next to each other
and a single bisection locates the first of them.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator

from .constants import PATH_SEPARATOR
from .errors import MultipleMatchesError, NotFoundError

_SegmentKey = tuple[str, ...]


def _segment_key(path: str) -> _SegmentKey:
    return tuple(reversed(path.split(PATH_SEPARATOR)))


def _strip_leading_separator(partial: str) -> str:
    if partial.startswith(PATH_SEPARATOR):
        return partial[len(PATH_SEPARATOR) :]
    return partial


def reverse_key(path: str) -> str:
    """Return ``path`` with its segments reversed, e.g. ``a/b/c`` -> ``c/b/a``.

    Args:
        path: ``/``-separated resource path.

    Returns:
        str: Reverse key of ``path``.
    """

    return PATH_SEPARATOR.join(_segment_key(path))


class PathIndex:
    """Immutable index over a set of resource paths.

    The index is built once and never mutated, so lookups are safe from any
    number of threads without locking.
    """

    __slots__ = ("_keys", "_by_key", "_paths")

    def __init__(self, paths: Iterable[str]) -> None:
        """Index the distinct values of ``paths``.

        Args:
            paths: Full resource paths; duplicates are collapsed.
        """

        unique = set(paths)
        ordered = sorted(((_segment_key(path), path) for path in unique))
        self._keys: tuple[_SegmentKey, ...] = tuple(key for key, _ in ordered)
        self._by_key: tuple[str, ...] = tuple(path for _, path in ordered)
        self._paths: tuple[str, ...] = tuple(sorted(unique))

    def matches(self, partial: str, *, scope: str | None = None) -> list[str]:
        """Return every indexed path ending with the segments of ``partial``.

        Args:
            partial: Suffix of a full path; one leading ``/`` is ignored.
            scope: Optional prefix that matching paths must also start with.

        Returns:
            list[str]: Matching paths in reverse-key order.
        """

        query = _segment_key(_strip_leading_separator(partial))
        width = len(query)
        found: list[str] = []
        position = bisect_left(self._keys, query)
        while position < len(self._keys) and self._keys[position][:width] == query:
            candidate = self._by_key[position]
            if scope is None or candidate.startswith(scope):
                found.append(candidate)
            position += 1
        return found

    def resolve(self, partial: str, *, scope: str | None = None) -> str:
        """Return the single indexed path ending with ``partial``.

        Args:
            partial: Suffix of a full path; one leading ``/`` is ignored.
            scope: Optional prefix that the resolved path must start with.

        Returns:
            str: The unique matching full path.

        Raises:
            NotFoundError: If no indexed path matches.
            MultipleMatchesError: If more than one indexed path matches.
        """

        found = self.matches(partial, scope=scope)
        if not found:
            raise NotFoundError(partial)
        if len(found) > 1:
            raise MultipleMatchesError(partial, found)
        return found[0]

    def with_prefix(self, prefix: str) -> list[str]:
        """Return indexed paths starting with ``prefix`` in ascending order.

        Args:
            prefix: Case-sensitive string prefix.

        Returns:
            list[str]: Matching paths.
        """

        position = bisect_left(self._paths, prefix)
        found: list[str] = []
        while position < len(self._paths) and self._paths[position].startswith(prefix):
            found.append(self._paths[position])
            position += 1
        return found

    def has_prefix(self, prefix: str) -> bool:
        """Return whether any indexed path starts with ``prefix``."""

        position = bisect_left(self._paths, prefix)
        return position < len(self._paths) and self._paths[position].startswith(prefix)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        position = bisect_left(self._paths, path)
        return position < len(self._paths) and self._paths[position] == path

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathIndex):
            return NotImplemented
        return self._paths == other._paths

    def __hash__(self) -> int:
        return hash(self._paths)

    def __repr__(self) -> str:
        return f"PathIndex({len(self._paths)} paths)"


__all__ = ["PathIndex", "reverse_key"]
