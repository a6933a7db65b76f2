# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-memory resource origin used for manual indexes and tests."""

from __future__ import annotations

import io
from collections.abc import Iterator, Mapping
from typing import BinaryIO, Final

from ..errors import EnumerationError
from .base import Resource, ResourceSource

MEMORY_SCHEME: Final[str] = "memory:"


class MemorySource(ResourceSource):
    """Serve resources from a mapping of path to bytes."""

    def __init__(
        self,
        files: Mapping[str, bytes],
        *,
        name: str = "default",
        last_modified: int | None = None,
        permissions: Mapping[str, int] | None = None,
    ) -> None:
        self._files = dict(files)
        self._name = name
        self._last_modified = last_modified
        self._permissions = dict(permissions or {})

    @property
    def origin(self) -> str:
        """Return the ``memory:`` origin token of the source."""

        return f"{MEMORY_SCHEME}{self._name}"

    def iter_resources(self, prefix: str) -> Iterator[Resource]:
        """Yield stored files whose path starts with ``prefix``."""

        for path in sorted(self._files):
            if path.startswith(prefix):
                yield self._describe(path)

    def find(self, path: str) -> Resource | None:
        """Return the stored file at exactly ``path``, if any."""

        return self._describe(path) if path in self._files else None

    def _describe(self, path: str) -> Resource:
        return Resource(
            path=path,
            origin=self.origin,
            identity=f"{self.origin}/{path}",
            last_modified=self._last_modified,
            permissions=self._permissions.get(path),
        )

    def open(self, path: str) -> BinaryIO:
        """Return a stream over the bytes stored for ``path``."""

        try:
            return io.BytesIO(self._files[path])
        except KeyError as exc:
            raise EnumerationError(f"{path} is not stored in {self.origin}") from exc


__all__ = ["MEMORY_SCHEME", "MemorySource"]
