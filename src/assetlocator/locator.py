# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Facade answering lookups over the modules found under the namespace root."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .cache.versions import VersionCache
from .config import LocatorSettings, resolve_locator_settings
from .constants import PATH_SEPARATOR
from .errors import NotFoundError
from .index import PathIndex
from .registry import ModuleInfo, ModuleRegistry, compose_module_path, module_prefix
from .sources import ResourceEnumerator
from .versions import DeclaredVersion, MetadataSource, PropertiesMetadataSource, VersionResolver

LOGGER = logging.getLogger(__name__)


class AssetLocator:
    """Locate module resources by partial path, module, or prefix.

    Instances are immutable snapshots of the resources seen at construction;
    build a new locator to observe new resources.
    """

    def __init__(
        self,
        index: PathIndex,
        settings: LocatorSettings | None = None,
        *,
        modules: ModuleRegistry | None = None,
        resolver: VersionResolver | None = None,
    ) -> None:
        """Create a locator over an already built ``index``.

        Args:
            index: Index over every known resource path.
            settings: Locator settings; resolved from the environment when
                omitted.
            modules: Module registry; built from ``index`` when omitted.
            resolver: Version resolver; built without a metadata source when
                omitted.
        """

        self._settings = resolve_locator_settings(settings)
        root = self._settings.namespace_root
        self._index = index
        self._modules = modules if modules is not None else ModuleRegistry.build(index, root)
        self._resolver = (
            resolver
            if resolver is not None
            else VersionResolver(index, root, separators=self._settings.version_separators)
        )

    @classmethod
    def scan(
        cls,
        enumerator: ResourceEnumerator,
        settings: LocatorSettings | None = None,
        *,
        metadata: MetadataSource | None = None,
        version_cache: VersionCache | None = None,
        overrides: Iterable[DeclaredVersion | tuple[str, str]] = (),
    ) -> AssetLocator:
        """Build a locator from every resource the enumerator reports.

        Args:
            enumerator: Source of resources.
            settings: Locator settings; resolved from the environment when
                omitted.
            metadata: Source of declared-version records; defaults to the
                properties records reachable through ``enumerator``.
            version_cache: Memoization store handed to the version resolver.
            overrides: Declared versions pre-loaded into the version resolver.

        Returns:
            AssetLocator: Locator over the enumerated resources.
        """

        resolved = resolve_locator_settings(settings)
        root = resolved.namespace_root
        resources = enumerator.enumerate(resolved.root_prefix)
        index = PathIndex(resource.path for resource in resources)
        origins = {resource.path: resource.origin for resource in resources}
        if metadata is None:
            metadata = PropertiesMetadataSource(enumerator, resolved)
        modules = ModuleRegistry.build(index, root, origins=origins, metadata=metadata)
        resolver = VersionResolver(
            index,
            root,
            metadata=metadata,
            cache=version_cache,
            overrides=overrides,
            separators=resolved.version_separators,
        )
        LOGGER.debug("indexed %d resources in %d modules", len(index), len(modules))
        return cls(index, resolved, modules=modules, resolver=resolver)

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[str],
        settings: LocatorSettings | None = None,
        *,
        metadata: MetadataSource | None = None,
        version_cache: VersionCache | None = None,
    ) -> AssetLocator:
        """Build a locator over an explicit set of paths.

        Every path is indexed, but only paths beneath the namespace root form
        modules.

        Args:
            paths: Full resource paths.
            settings: Locator settings; resolved from the environment when
                omitted.
            metadata: Optional source of declared-version records.
            version_cache: Memoization store handed to the version resolver.

        Returns:
            AssetLocator: Locator over ``paths``.
        """

        resolved = resolve_locator_settings(settings)
        root = resolved.namespace_root
        index = PathIndex(paths)
        modules = ModuleRegistry.build(index, root, metadata=metadata)
        resolver = VersionResolver(
            index,
            root,
            metadata=metadata,
            cache=version_cache,
            separators=resolved.version_separators,
        )
        return cls(index, resolved, modules=modules, resolver=resolver)

    @property
    def index(self) -> PathIndex:
        """Return the index backing the locator."""

        return self._index

    @property
    def modules(self) -> ModuleRegistry:
        """Return the module registry backing the locator."""

        return self._modules

    @property
    def settings(self) -> LocatorSettings:
        """Return the settings the locator was built with."""

        return self._settings

    @property
    def resolver(self) -> VersionResolver:
        """Return the declared-version resolver."""

        return self._resolver

    def resolve_full_path(self, partial: str) -> str:
        """Return the single full path ending with ``partial``.

        Raises:
            NotFoundError: If no indexed path matches.
            MultipleMatchesError: If several indexed paths match.
        """

        return self._index.resolve(partial)

    def resolve_module_path(self, module: str, partial: str) -> str:
        """Return the single path of ``module`` ending with ``partial``.

        Matches in other modules are ignored, so a partial path that is only
        ambiguous across modules resolves within one.

        Args:
            module: Module name.
            partial: Suffix of a full path.

        Returns:
            str: Matching full path.

        Raises:
            NotFoundError: If the module is unknown or holds no match.
            MultipleMatchesError: If the module holds several matches.
        """

        if module not in self._modules:
            raise NotFoundError.for_module(module, partial)
        return self._index.resolve(partial, scope=module_prefix(self._settings.namespace_root, module))

    def resolve_exact_path(self, module: str, relative: str) -> str | None:
        """Return the full path of ``relative`` inside ``module`` when present.

        No suffix matching is performed; the module's inferred version is
        inserted unless ``relative`` already starts with it.

        Args:
            module: Module name.
            relative: Path relative to the module.

        Returns:
            str | None: Full path, or ``None`` when absent.
        """

        info = self._modules.get(module)
        if info is None or not relative:
            return None
        candidate = compose_module_path(self._settings.namespace_root, module, info.version, relative)
        return candidate if candidate in info.contents else None

    def list_under_prefix(self, prefix: str = "") -> list[str]:
        """Return every path starting with ``prefix`` or ``<root>/<prefix>``.

        Args:
            prefix: Full or root-relative path prefix; case-sensitive.

        Returns:
            list[str]: Matching paths in ascending order.
        """

        rooted = f"{self._settings.namespace_root}{PATH_SEPARATOR}{prefix.removeprefix(PATH_SEPARATOR)}"
        found = set(self._index.with_prefix(prefix))
        found.update(self._index.with_prefix(rooted))
        return sorted(found)

    def module_versions(self) -> dict[str, str | None]:
        """Return the inferred version of every module."""

        return self._modules.versions()

    def module_for_path(self, full_path: str) -> ModuleInfo | None:
        """Return the module owning ``full_path``, if any."""

        return self._modules.owner_of(full_path)

    def group_for_path(self, full_path: str) -> str | None:
        """Return the group tag of the module owning ``full_path``."""

        info = self._modules.owner_of(full_path)
        return info.group if info is not None else None

    def declared_version(self, module: str) -> str | None:
        """Return the version directory matching the module's declared version."""

        return self._resolver.version(module)


__all__ = ["AssetLocator"]
