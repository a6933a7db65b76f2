# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Caches for resolved versions and extracted files."""

from __future__ import annotations

from .extraction import CacheEntry, CacheState, ExtractionCache
from .versions import InMemoryVersionCache, VersionCache

__all__ = [
    "CacheEntry",
    "CacheState",
    "ExtractionCache",
    "InMemoryVersionCache",
    "VersionCache",
]
