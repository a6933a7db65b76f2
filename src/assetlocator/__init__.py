# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate and extract files bundled in versioned asset modules."""

from __future__ import annotations

from .cache import CacheEntry, CacheState, ExtractionCache, InMemoryVersionCache, VersionCache
from .config import ConfigError, ExtractionSettings, LocatorSettings, resolve_locator_settings
from .constants import BOWER_JSON, PACKAGE_JSON
from .errors import (
    AssetLocatorError,
    EnumerationError,
    ExtractionError,
    MultipleMatchesError,
    NotFoundError,
    UnsafePathError,
)
from .extractor import ExtractionFailure, ExtractionResult, Extractor, prune_stale
from .index import PathIndex, reverse_key
from .locator import AssetLocator
from .manifest import PackageManifest, read_manifest_id
from .registry import ModuleInfo, ModuleRegistry, infer_version, split_module_path
from .sources import (
    ArchiveSource,
    DirectorySource,
    MemorySource,
    Resource,
    ResourceEnumerator,
    ResourceSource,
    enumerator_for_paths,
    open_source,
    source_for_path,
    web_archive_sources,
)
from .versions import (
    DeclaredVersion,
    MappingMetadataSource,
    MetadataSource,
    PropertiesMetadataSource,
    VersionResolver,
)

__version__ = "0.1.0"

__all__ = [
    "ArchiveSource",
    "AssetLocator",
    "AssetLocatorError",
    "BOWER_JSON",
    "CacheEntry",
    "CacheState",
    "ConfigError",
    "DeclaredVersion",
    "DirectorySource",
    "EnumerationError",
    "ExtractionCache",
    "ExtractionError",
    "ExtractionFailure",
    "ExtractionResult",
    "ExtractionSettings",
    "Extractor",
    "InMemoryVersionCache",
    "LocatorSettings",
    "MappingMetadataSource",
    "MemorySource",
    "MetadataSource",
    "ModuleInfo",
    "ModuleRegistry",
    "MultipleMatchesError",
    "NotFoundError",
    "UnsafePathError",
    "PACKAGE_JSON",
    "PackageManifest",
    "PathIndex",
    "PropertiesMetadataSource",
    "Resource",
    "ResourceEnumerator",
    "ResourceSource",
    "VersionCache",
    "VersionResolver",
    "enumerator_for_paths",
    "infer_version",
    "open_source",
    "prune_stale",
    "read_manifest_id",
    "resolve_locator_settings",
    "reverse_key",
    "source_for_path",
    "split_module_path",
    "web_archive_sources",
]
