# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Copy module resources onto the filesystem incrementally.

Every module is written to ``<output>/<folder>/<path>`` where ``folder`` is the
module name, or the name declared by one of its manifests when a manifest
remap is requested, and ``path`` is the resource path with the module and
version prefix removed.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .cache.extraction import CacheEntry, ExtractionCache
from .config import ExtractionSettings, LocatorSettings, resolve_locator_settings
from .constants import BOWER_JSON, PACKAGE_JSON, PATH_SEPARATOR
from .errors import EnumerationError, ExtractionError, NotFoundError, UnsafePathError
from .filesystem import canonical_path, destination_for, is_safe_key
from .locator import AssetLocator
from .manifest import read_manifest_id
from .registry import ModuleInfo, module_prefix
from .sources import Resource, ResourceEnumerator

LOGGER = logging.getLogger(__name__)

_NANOSECONDS_PER_MILLISECOND = 1_000_000
_PARTIAL_SUFFIX = ".part"


@dataclass(frozen=True, slots=True)
class ExtractionFailure:
    """Describe one resource that could not be copied."""

    source: str
    destination: Path
    message: str


@dataclass(slots=True)
class ExtractionResult:
    """Summarise one extraction pass.

    Attributes:
        output: Directory the modules were extracted into.
        folders: Output folder chosen for every extracted module.
        copied: Destination files written during the pass.
        current: Destination files left untouched because they were current.
        skipped_modules: Modules skipped because no manifest id was found.
        failures: Resources that could not be copied.
        stale: Previously extracted files the pass did not touch.
    """

    output: Path
    folders: dict[str, str] = field(default_factory=dict)
    copied: list[Path] = field(default_factory=list)
    current: list[Path] = field(default_factory=list)
    skipped_modules: list[str] = field(default_factory=list)
    failures: list[ExtractionFailure] = field(default_factory=list)
    stale: set[Path] = field(default_factory=set)

    @property
    def ok(self) -> bool:
        """Return whether every resource was extracted."""

        return not self.failures


class Extractor:
    """Extract the resources of selected modules into an output directory."""

    def __init__(
        self,
        enumerator: ResourceEnumerator,
        settings: LocatorSettings | None = None,
        *,
        cache: ExtractionCache | None = None,
        extraction: ExtractionSettings | None = None,
    ) -> None:
        """Create an extractor reading from ``enumerator``.

        Args:
            enumerator: Source of module resources.
            settings: Locator settings; resolved from the environment when
                omitted.
            cache: Change-detection cache shared by every pass. When omitted a
                cache file named by ``extraction.cache_file_name`` is kept in
                each output directory.
            extraction: Extraction behaviour settings.
        """

        self._enumerator = enumerator
        self._settings = resolve_locator_settings(settings)
        self._extraction = extraction or ExtractionSettings()
        self._cache = cache
        self._output_caches: dict[Path, ExtractionCache] = {}

    def cache_for(self, to: Path) -> ExtractionCache:
        """Return the change-detection cache used for output directory ``to``."""

        if self._cache is not None:
            return self._cache
        key = canonical_path(to)
        cache = self._output_caches.get(key)
        if cache is None:
            cache = ExtractionCache(Path(to) / self._extraction.cache_file_name)
            self._output_caches[key] = cache
        return cache

    def extract(
        self,
        to: Path,
        modules: Iterable[str] | None = None,
        manifest_file: str | None = None,
    ) -> ExtractionResult:
        """Extract ``modules`` (all modules when ``None``) into ``to``.

        Args:
            to: Output directory; created when missing.
            modules: Names of the modules to extract.
            manifest_file: Module-relative manifest whose ``name`` replaces the
                module name as output folder. Modules without such a name are
                skipped.

        Returns:
            ExtractionResult: Summary of the pass.

        Raises:
            NotFoundError: If a selected module does not exist.
            ExtractionError: If a copy fails while strict mode is enabled.
        """

        output = Path(to)
        locator = AssetLocator.scan(self._enumerator, self._settings)
        selected = self._select(locator, modules)
        cache = self.cache_for(output)
        result = ExtractionResult(output=output)

        cache.begin_pass()
        for info in selected:
            folder = self._output_folder(locator, info, manifest_file)
            if folder is None:
                LOGGER.info("skipping %s: no module id declared in %s", info.name, manifest_file)
                result.skipped_modules.append(info.name)
                continue
            result.folders[info.name] = folder
            self._extract_module(info, folder, output, cache, result)

        result.stale = cache.stale_destinations(output)
        cache.persist(write=self._extraction.persist_cache)
        return result

    def extract_all_to(self, to: Path) -> ExtractionResult:
        """Extract every module into ``to``."""

        return self.extract(to)

    def extract_module_to(self, name: str, to: Path) -> ExtractionResult:
        """Extract the module ``name`` into ``to``."""

        return self.extract(to, modules=[name])

    def extract_node_modules_to(self, to: Path) -> ExtractionResult:
        """Extract every module declaring a ``package.json`` name, under that name."""

        return self.extract(to, manifest_file=PACKAGE_JSON)

    def extract_bower_components_to(self, to: Path) -> ExtractionResult:
        """Extract every module declaring a ``bower.json`` name, under that name."""

        return self.extract(to, manifest_file=BOWER_JSON)

    @staticmethod
    def _select(locator: AssetLocator, modules: Iterable[str] | None) -> list[ModuleInfo]:
        registry = locator.modules
        if modules is None:
            return [registry[name] for name in registry]
        selected: list[ModuleInfo] = []
        for name in modules:
            info = registry.get(name)
            if info is None:
                raise NotFoundError.for_module(name)
            selected.append(info)
        return selected

    def _output_folder(self, locator: AssetLocator, info: ModuleInfo, manifest_file: str | None) -> str | None:
        if manifest_file is None:
            return info.name
        manifest_path = locator.resolve_exact_path(info.name, manifest_file)
        if manifest_path is None:
            return None
        resource = self._enumerator.find(manifest_path)
        if resource is None:
            return None
        try:
            payload = self._enumerator.read_bytes(resource)
        except (OSError, EnumerationError) as exc:
            LOGGER.debug("could not read %s: %s", manifest_path, exc)
            return None
        module_id = read_manifest_id(payload)
        if module_id is not None and not is_safe_key(module_id):
            LOGGER.warning("ignoring module id %r declared in %s: not a relative folder", module_id, manifest_path)
            return None
        return module_id

    def _extract_module(
        self,
        info: ModuleInfo,
        folder: str,
        output: Path,
        cache: ExtractionCache,
        result: ExtractionResult,
    ) -> None:
        prefix = module_prefix(self._settings.namespace_root, info.name)
        if info.version is not None:
            prefix = f"{prefix}{info.version}{PATH_SEPARATOR}"
        for resource in self._enumerator.enumerate(prefix):
            relative = resource.path[len(prefix) :]
            key = f"{folder}{PATH_SEPARATOR}{relative}"
            try:
                destination = destination_for(output, key)
            except UnsafePathError as exc:
                self._fail(result, resource, output / key, exc)
                continue
            entry = CacheEntry(source=resource.identity, last_modified=resource.last_modified or 0)
            if destination.is_file() and cache.is_current(key, entry):
                result.current.append(destination)
                continue
            try:
                self._copy(resource, destination)
            except (OSError, EnumerationError) as exc:
                self._fail(result, resource, destination, exc)
                continue
            cache.record(key, entry)
            result.copied.append(destination)

    def _fail(self, result: ExtractionResult, resource: Resource, destination: Path, exc: Exception) -> None:
        if self._extraction.strict:
            raise ExtractionError(resource.identity, destination, str(exc)) from exc
        LOGGER.error("could not extract %s to %s: %s", resource.identity, destination, exc)
        result.failures.append(ExtractionFailure(resource.identity, destination, str(exc)))

    def _copy(self, resource: Resource, destination: Path) -> None:
        """Write ``resource`` to a sibling file, then move it over ``destination``.

        An existing destination is replaced, never rewritten in place, so its
        permission bits do not matter and a failed copy leaves it untouched.
        """

        destination.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=destination.parent,
            prefix=f".{destination.name}.",
            suffix=_PARTIAL_SUFFIX,
            delete=False,
        ) as handle:
            partial = Path(handle.name)
        try:
            with self._enumerator.open(resource) as source, partial.open("wb") as target:
                shutil.copyfileobj(source, target)
            if resource.permissions is not None:
                os.chmod(partial, resource.permissions)
            if resource.last_modified:
                stamp = resource.last_modified * _NANOSECONDS_PER_MILLISECOND
                os.utime(partial, ns=(stamp, stamp))
            os.replace(partial, destination)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise


def prune_stale(paths: Iterable[Path]) -> list[Path]:
    """Delete ``paths`` and return the ones that were removed.

    Args:
        paths: Stale files reported by an extraction pass.

    Returns:
        list[Path]: Removed files in sorted order.
    """

    removed: list[Path] = []
    for path in sorted(paths):
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            LOGGER.warning("could not remove stale file %s: %s", path, exc)
            continue
        removed.append(path)
    return removed


__all__ = [
    "ExtractionFailure",
    "ExtractionResult",
    "Extractor",
    "prune_stale",
]
