# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem utilities for path handling."""

from __future__ import annotations

from .paths import canonical_path, destination_for, display_relative_path, is_safe_key, key_segments

__all__ = [
    "canonical_path",
    "destination_for",
    "display_relative_path",
    "is_safe_key",
    "key_segments",
]
