# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Abstractions for enumerating resources provided by one or more origins."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import BinaryIO, Protocol, runtime_checkable

from ..errors import EnumerationError

LOGGER = logging.getLogger(__name__)

PathPredicate = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class Resource:
    """Describe one file reported by a resource origin.

    Attributes:
        path: ``/``-separated path relative to the origin's root.
        origin: Stable token identifying the directory or archive providing
            the file.
        identity: Stable identity of the individual file, used to detect
            whether a previously extracted copy came from the same source.
        last_modified: Modification time in epoch milliseconds, when known.
        permissions: POSIX permission bits, when the origin records them.
    """

    path: str
    origin: str
    identity: str
    last_modified: int | None = None
    permissions: int | None = None


@runtime_checkable
class ResourceSource(Protocol):
    """Protocol implemented by every resource origin variant.

    Implementations report files lazily and never mutate global state.
    """

    @property
    def origin(self) -> str:
        """Return the stable origin token of the source."""

        raise NotImplementedError

    def iter_resources(self, prefix: str) -> Iterator[Resource]:
        """Yield every file whose path starts with ``prefix``.

        Args:
            prefix: Path prefix restricting the walk.

        Returns:
            Iterator[Resource]: Files reported by the origin.
        """

        raise NotImplementedError

    def find(self, path: str) -> Resource | None:
        """Return the file stored at exactly ``path`` without walking the origin.

        Args:
            path: Full resource path.

        Returns:
            Resource | None: Matching resource, or ``None`` when absent.
        """

        raise NotImplementedError

    def open(self, path: str) -> BinaryIO:
        """Open the file stored at ``path`` for binary reading.

        Args:
            path: Path previously reported by :meth:`iter_resources`.

        Returns:
            BinaryIO: Readable binary stream; callers close it.
        """

        raise NotImplementedError


class ResourceEnumerator:
    """Compose resource sources into a single ordered enumeration."""

    def __init__(self, sources: Sequence[ResourceSource]):
        """Create an enumerator that consults ``sources`` in order.

        Args:
            sources: Ordered resource origins. When several origins provide the
                same path, the first one wins.
        """

        self._sources = tuple(sources)
        self._by_origin = {source.origin: source for source in self._sources}

    def enumerate(self, prefix: str, predicate: PathPredicate | None = None) -> list[Resource]:
        """Return resources under ``prefix`` accepted by ``predicate``.

        Args:
            prefix: Path prefix restricting the enumeration.
            predicate: Optional filter applied to each candidate path.

        Returns:
            list[Resource]: Unique resources, in source order.
        """

        results: list[Resource] = []
        seen: dict[str, str] = {}
        for source in self._sources:
            for resource in source.iter_resources(prefix):
                if predicate is not None and not predicate(resource.path):
                    continue
                first_origin = seen.get(resource.path)
                if first_origin is not None:
                    LOGGER.debug(
                        "%s from %s is shadowed by %s",
                        resource.path,
                        resource.origin,
                        first_origin,
                    )
                    continue
                seen[resource.path] = resource.origin
                results.append(resource)
        return results

    def paths(self, prefix: str, predicate: PathPredicate | None = None) -> set[str]:
        """Return the set of paths under ``prefix`` accepted by ``predicate``.

        Args:
            prefix: Path prefix restricting the enumeration.
            predicate: Optional filter applied to each candidate path.

        Returns:
            set[str]: Matching resource paths.
        """

        return {resource.path for resource in self.enumerate(prefix, predicate)}

    def open(self, resource: Resource) -> BinaryIO:
        """Open ``resource`` through the source that reported it.

        Args:
            resource: Resource previously returned by :meth:`enumerate`.

        Returns:
            BinaryIO: Readable binary stream; callers close it.

        Raises:
            EnumerationError: If the resource's origin is not part of this
                enumerator.
        """

        source = self._by_origin.get(resource.origin)
        if source is None:
            raise EnumerationError(f"Unknown resource origin {resource.origin!r} for {resource.path}")
        return source.open(resource.path)

    def read_bytes(self, resource: Resource) -> bytes:
        """Return the full contents of ``resource``.

        Args:
            resource: Resource previously returned by :meth:`enumerate`.

        Returns:
            bytes: File contents.
        """

        with self.open(resource) as stream:
            return stream.read()

    def find(self, path: str) -> Resource | None:
        """Return the first resource stored at exactly ``path``.

        Args:
            path: Full resource path.

        Returns:
            Resource | None: Matching resource, or ``None`` when absent.
        """

        for source in self._sources:
            resource = source.find(path)
            if resource is not None:
                return resource
        return None

    def read_text(self, path: str, *, encoding: str = "utf-8") -> str | None:
        """Return the decoded contents of the resource stored at ``path``.

        Args:
            path: Full resource path.
            encoding: Text encoding of the resource.

        Returns:
            str | None: Decoded contents, or ``None`` when the resource is
            absent or unreadable.
        """

        resource = self.find(path)
        if resource is None:
            return None
        try:
            return self.read_bytes(resource).decode(encoding)
        except (OSError, UnicodeDecodeError, EnumerationError) as exc:
            LOGGER.debug("could not read %s from %s: %s", path, resource.origin, exc)
            return None

    def __iter__(self) -> Iterator[ResourceSource]:
        """Iterate over the composed sources.

        Returns:
            Iterator[ResourceSource]: Iterator yielding the configured sources.
        """

        return iter(self._sources)

    def __len__(self) -> int:
        """Return the number of composed sources.

        Returns:
            int: Count of sources participating in enumeration.
        """

        return len(self._sources)


def chain_sources(groups: Iterable[Sequence[ResourceSource]]) -> list[ResourceSource]:
    """Flatten ``groups`` of sources, dropping repeated origins.

    Args:
        groups: Source sequences, typically one per user-supplied location.

    Returns:
        list[ResourceSource]: Sources in order with unique origins.
    """

    flattened: list[ResourceSource] = []
    seen: set[str] = set()
    for group in groups:
        for source in group:
            if source.origin in seen:
                continue
            seen.add(source.origin)
            flattened.append(source)
    return flattened


__all__ = [
    "PathPredicate",
    "Resource",
    "ResourceEnumerator",
    "ResourceSource",
    "chain_sources",
]
