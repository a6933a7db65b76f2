# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Memoization stores for resolved module versions."""

from __future__ import annotations

from collections.abc import Callable
from threading import Lock
from typing import Protocol, runtime_checkable

VersionLoader = Callable[[str], str | None]


@runtime_checkable
class VersionCache(Protocol):
    """Protocol describing an atomic compute-if-absent version store."""

    def compute_if_absent(self, key: str, loader: VersionLoader) -> str | None:
        """Return the stored value for ``key``, computing it when absent.

        Args:
            key: Module name.
            loader: Callable producing the value for ``key`` on a miss.

        Returns:
            str | None: The single value visible for ``key``.
        """

        raise NotImplementedError

    def put_if_absent(self, key: str, value: str | None) -> bool:
        """Store ``value`` for ``key`` unless a value is already present.

        Args:
            key: Module name.
            value: Value to store.

        Returns:
            bool: ``True`` when ``value`` was stored.
        """

        raise NotImplementedError


class InMemoryVersionCache(VersionCache):
    """Dictionary-backed version store guarded by a lock.

    Two threads missing the same key may both run the loader, but the first
    stored result is the one every caller observes.
    """

    def __init__(self) -> None:
        self._store: dict[str, str | None] = {}
        self._lock = Lock()
        self._hits = 0

    def compute_if_absent(self, key: str, loader: VersionLoader) -> str | None:
        """Return the value for ``key``, running ``loader`` on a miss."""

        with self._lock:
            if key in self._store:
                self._hits += 1
                return self._store[key]
        result = loader(key)
        with self._lock:
            return self._store.setdefault(key, result)

    def put_if_absent(self, key: str, value: str | None) -> bool:
        """Store ``value`` for ``key`` unless the key is already cached."""

        with self._lock:
            if key in self._store:
                return False
            self._store[key] = value
            return True

    def get(self, key: str) -> str | None:
        """Return the cached value for ``key`` without computing it."""

        with self._lock:
            return self._store.get(key)

    @property
    def hits(self) -> int:
        """Return the number of lookups answered from the store."""

        with self._lock:
            return self._hits

    def clear(self) -> None:
        """Remove every cached value."""

        with self._lock:
            self._store.clear()
            self._hits = 0

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


__all__ = ["InMemoryVersionCache", "VersionCache", "VersionLoader"]
