# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core constants shared by the locator, resolver, and extractor."""

from __future__ import annotations

from typing import Final

PATH_SEPARATOR: Final[str] = "/"

DEFAULT_NAMESPACE_ROOT: Final[str] = "META-INF/resources/webjars"
DEFAULT_METADATA_ROOT: Final[str] = "META-INF/maven"
DEFAULT_METADATA_GROUPS: Final[tuple[str, ...]] = ("org.webjars.npm", "org.webjars")
DEFAULT_METADATA_FILE: Final[str] = "pom.properties"
DEFAULT_VERSION_SEPARATORS: Final[str] = "-"

DEFAULT_CACHE_FILE_NAME: Final[str] = ".assetlocator-cache"

PACKAGE_JSON: Final[str] = "package.json"
BOWER_JSON: Final[str] = "bower.json"

MAX_DIRECTORY_DEPTH: Final[int] = 32

__all__ = [
    "BOWER_JSON",
    "DEFAULT_CACHE_FILE_NAME",
    "DEFAULT_METADATA_FILE",
    "DEFAULT_METADATA_GROUPS",
    "DEFAULT_METADATA_ROOT",
    "DEFAULT_NAMESPACE_ROOT",
    "DEFAULT_VERSION_SEPARATORS",
    "MAX_DIRECTORY_DEPTH",
    "PACKAGE_JSON",
    "PATH_SEPARATOR",
]
