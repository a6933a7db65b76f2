# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve module versions from declared-version records.

Module archives usually ship a small properties record declaring the version
they were published under. That string does not always match the directory
the resources live in (``1.2.0-beta`` published as ``1.2.0``), so the resolver
tries a short list of normalised candidates before giving up.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .cache.versions import InMemoryVersionCache, VersionCache
from .config import LocatorSettings
from .constants import DEFAULT_VERSION_SEPARATORS, PATH_SEPARATOR
from .index import PathIndex
from .registry import compose_module_path, module_prefix
from .sources import ResourceEnumerator

LOGGER = logging.getLogger(__name__)

_VERSION_PROPERTY = "version"
_GROUP_PROPERTY = "groupId"
_COMMENT_MARKERS = ("#", "!")
_WHITESPACE = " \t\f"
_KEY_TERMINATORS = "=:"
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


@dataclass(frozen=True, slots=True)
class DeclaredVersion:
    """Version a module declares for itself.

    Attributes:
        module: Module name.
        version: Declared version string.
        group: Group the record was published under, when known.
    """

    module: str
    version: str
    group: str | None = None


@runtime_checkable
class MetadataSource(Protocol):
    """Provide declared-version records for modules."""

    def declared_version(self, module: str) -> DeclaredVersion | None:
        """Return the record declared for ``module`` or ``None``."""

        raise NotImplementedError


def _logical_lines(text: str) -> Iterator[str]:
    """Yield logical lines, joining natural lines that end in an odd number of backslashes."""

    pending: str | None = None
    for raw_line in text.splitlines():
        line = raw_line.lstrip(_WHITESPACE)
        if pending is None and (not line or line.startswith(_COMMENT_MARKERS)):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2:
            pending = (pending or "") + line[:-1]
            continue
        yield (pending or "") + line
        pending = None
    if pending is not None:
        yield pending


def _unescape(value: str) -> str:
    if "\\" not in value:
        return value
    chars: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        index += 1
        if char != "\\":
            chars.append(char)
            continue
        if index >= len(value):
            break
        char = value[index]
        index += 1
        digits = value[index : index + 4]
        if char == "u" and len(digits) == 4 and all(digit in _HEX_DIGITS for digit in digits):
            chars.append(chr(int(digits, 16)))
            index += 4
            continue
        chars.append(_ESCAPES.get(char, char))
    return "".join(chars)


def _split_entry(line: str) -> tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _KEY_TERMINATORS or char in _WHITESPACE:
            break
        index += 1
    rest = line[index:].lstrip(_WHITESPACE)
    if rest and rest[0] in _KEY_TERMINATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return _unescape(line[:index]), _unescape(rest)


def parse_properties(text: str) -> dict[str, str]:
    """Parse a Java-style properties record into a dictionary.

    Keys end at the first unescaped ``=``, ``:`` or whitespace. Blank lines
    and lines starting with ``#`` or ``!`` are ignored, a trailing backslash
    continues the entry on the next line, and ``\\uXXXX`` and the usual
    single-character escapes are decoded. Later keys replace earlier ones.

    Args:
        text: Contents of a properties record.

    Returns:
        dict[str, str]: Parsed properties.
    """

    properties: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        properties[key] = value
    return properties


class PropertiesMetadataSource(MetadataSource):
    """Read declared versions from properties records beside the resources."""

    def __init__(self, enumerator: ResourceEnumerator, settings: LocatorSettings | None = None) -> None:
        self._enumerator = enumerator
        self._settings = settings or LocatorSettings()

    def record_path(self, group: str, module: str) -> str:
        """Return the path of the properties record for ``module`` in ``group``."""

        settings = self._settings
        return PATH_SEPARATOR.join((settings.metadata_root, group, module, settings.metadata_file))

    def declared_version(self, module: str) -> DeclaredVersion | None:
        """Return the first declared version found across the configured groups.

        Args:
            module: Module name.

        Returns:
            DeclaredVersion | None: Declared record, or ``None`` when no group
            holds a readable record with a version.
        """

        for group in self._settings.metadata_groups:
            text = self._enumerator.read_text(self.record_path(group, module))
            if text is None:
                continue
            properties = parse_properties(text)
            version = properties.get(_VERSION_PROPERTY, "").strip()
            if not version:
                LOGGER.debug("record for %s in group %s declares no version", module, group)
                continue
            declared_group = properties.get(_GROUP_PROPERTY, "").strip() or group
            return DeclaredVersion(module=module, version=version, group=declared_group)
        return None


class MappingMetadataSource(MetadataSource):
    """Serve declared versions from an in-memory mapping."""

    def __init__(self, records: Mapping[str, str | DeclaredVersion], *, group: str | None = None) -> None:
        self._records: dict[str, DeclaredVersion] = {}
        for module, record in records.items():
            if isinstance(record, DeclaredVersion):
                self._records[module] = record
            else:
                self._records[module] = DeclaredVersion(module=module, version=record, group=group)

    def declared_version(self, module: str) -> DeclaredVersion | None:
        """Return the record stored for ``module``."""

        return self._records.get(module)


def version_candidates(version: str, separators: str = DEFAULT_VERSION_SEPARATORS) -> list[str]:
    """Return normalised alternatives for a declared ``version``.

    For each separator the text before the first occurrence, after the first,
    before the last, and after the last occurrence are tried, in that order.

    Args:
        version: Declared version string.
        separators: Characters marking qualifier boundaries.

    Returns:
        list[str]: Distinct non-empty candidates excluding ``version`` itself.
    """

    candidates: list[str] = []
    for separator in separators:
        first = version.find(separator)
        if first < 0:
            continue
        last = version.rfind(separator)
        for candidate in (
            version[:first],
            version[first + 1 :],
            version[:last],
            version[last + 1 :],
        ):
            if candidate and candidate != version and candidate not in candidates:
                candidates.append(candidate)
    return candidates


def _coerce_override(record: DeclaredVersion | tuple[str, str]) -> DeclaredVersion:
    if isinstance(record, DeclaredVersion):
        return record
    module, version = record
    return DeclaredVersion(module=module, version=version)


class VersionResolver:
    """Memoized lookup of the resource directory version of each module.

    The cache is owned by the caller; a fresh :class:`InMemoryVersionCache` is
    created when none is supplied, so independent resolvers never share
    results.
    """

    def __init__(
        self,
        index: PathIndex,
        root: str,
        metadata: MetadataSource | None = None,
        cache: VersionCache | None = None,
        overrides: Iterable[DeclaredVersion | tuple[str, str]] = (),
        separators: str = DEFAULT_VERSION_SEPARATORS,
    ) -> None:
        """Create a resolver and pre-load accepted ``overrides``.

        Args:
            index: Index over every discovered resource path.
            root: Namespace root without surrounding separators.
            metadata: Source of declared-version records.
            cache: Memoization store; defaults to a private in-memory store.
            overrides: Records pre-loaded into the cache when their version
                exists verbatim as a resource directory. The first record for
                a module wins.
            separators: Characters splitting qualifiers off declared versions.
        """

        self._index = index
        self._root = root
        self._metadata = metadata
        self._cache = cache if cache is not None else InMemoryVersionCache()
        self._separators = separators
        for raw in overrides:
            record = _coerce_override(raw)
            if not self._has_version_directory(record.module, record.version):
                LOGGER.debug(
                    "discarding override %s=%s: no matching resource directory",
                    record.module,
                    record.version,
                )
                continue
            if not self._cache.put_if_absent(record.module, record.version):
                LOGGER.debug("override for %s already registered", record.module)

    @property
    def cache(self) -> VersionCache:
        """Return the memoization store backing the resolver."""

        return self._cache

    def version(self, module: str) -> str | None:
        """Return the resource directory version of ``module``.

        Args:
            module: Module name.

        Returns:
            str | None: Version whose directory exists, or ``None``.
        """

        if not module or not module.strip():
            return None
        return self._cache.compute_if_absent(module, self._compute_version)

    def full_path(self, module: str, exact_path: str) -> str | None:
        """Return the full path of ``exact_path`` inside ``module`` when present.

        Args:
            module: Module name.
            exact_path: Path relative to the module, with or without its version.

        Returns:
            str | None: Existing full path, or ``None``.
        """

        if not module or not module.strip() or not exact_path or not exact_path.strip():
            return None
        candidate = compose_module_path(self._root, module, self.version(module), exact_path)
        return candidate if candidate in self._index else None

    def relative_path(self, module: str, exact_path: str) -> str | None:
        """Return :meth:`full_path` relative to the namespace root."""

        full = self.full_path(module, exact_path)
        if full is None:
            return None
        return full[len(self._root) + len(PATH_SEPARATOR) :]

    def _compute_version(self, module: str) -> str | None:
        declared = self._metadata.declared_version(module) if self._metadata is not None else None
        if declared is None:
            return None
        if self._has_version_directory(module, declared.version):
            return declared.version
        for candidate in version_candidates(declared.version, self._separators):
            if self._has_version_directory(module, candidate):
                LOGGER.debug("%s declares %s; using directory %s", module, declared.version, candidate)
                return candidate
        return None

    def _has_version_directory(self, module: str, version: str) -> bool:
        return self._index.has_prefix(f"{module_prefix(self._root, module)}{version}{PATH_SEPARATOR}")


__all__ = [
    "DeclaredVersion",
    "MappingMetadataSource",
    "MetadataSource",
    "PropertiesMetadataSource",
    "VersionResolver",
    "parse_properties",
    "version_candidates",
]
