# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for locating and extracting module resources."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_CACHE_FILE_NAME,
    DEFAULT_METADATA_FILE,
    DEFAULT_METADATA_GROUPS,
    DEFAULT_METADATA_ROOT,
    DEFAULT_NAMESPACE_ROOT,
    DEFAULT_VERSION_SEPARATORS,
    PATH_SEPARATOR,
)

NAMESPACE_ROOT_ENV_VAR: Final[str] = "ASSETLOCATOR_NAMESPACE_ROOT"
METADATA_GROUPS_ENV_VAR: Final[str] = "ASSETLOCATOR_METADATA_GROUPS"


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


def _normalize_root(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError("roots must be strings")
    trimmed = value.strip().strip(PATH_SEPARATOR)
    if not trimmed:
        raise ValueError("roots must not be empty")
    return trimmed


class LocatorSettings(BaseModel):
    """Describe where module resources and their declared versions live.

    Attributes:
        namespace_root: Path prefix under which every module directory lives.
        metadata_root: Path prefix of the declared-version records.
        metadata_groups: Group directories searched, in order, for a module's
            declared-version record.
        metadata_file: File name of the declared-version record.
        version_separators: Characters that split pre-release qualifiers off a
            declared version string.
    """

    model_config = ConfigDict(frozen=True)

    namespace_root: str = DEFAULT_NAMESPACE_ROOT
    metadata_root: str = DEFAULT_METADATA_ROOT
    metadata_groups: tuple[str, ...] = Field(default=DEFAULT_METADATA_GROUPS)
    metadata_file: str = DEFAULT_METADATA_FILE
    version_separators: str = DEFAULT_VERSION_SEPARATORS

    @field_validator("namespace_root", "metadata_root", mode="before")
    @classmethod
    def _coerce_root(cls, value: object) -> str:
        return _normalize_root(value)

    @field_validator("metadata_groups", mode="before")
    @classmethod
    def _coerce_groups(cls, value: object) -> tuple[str, ...]:
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, Sequence):
            raise TypeError("metadata_groups must be a sequence of strings")
        groups = tuple(str(entry).strip() for entry in value)
        return tuple(group for group in groups if group)

    @property
    def root_prefix(self) -> str:
        """Return the namespace root followed by a path separator.

        Returns:
            str: Prefix shared by every module resource path.
        """

        return f"{self.namespace_root}{PATH_SEPARATOR}"


class ExtractionSettings(BaseModel):
    """Configure how module resources are copied onto the filesystem."""

    model_config = ConfigDict(validate_assignment=True)

    cache_file_name: str = DEFAULT_CACHE_FILE_NAME
    strict: bool = False
    persist_cache: bool = True


def _settings_from_environment(env: Mapping[str, str]) -> LocatorSettings | None:
    """Parse locator settings from ``env`` when overrides are configured.

    Args:
        env: Environment mapping consulted for overrides.

    Returns:
        LocatorSettings | None: Settings parsed from the environment when any
        override is present; otherwise ``None`` to indicate defaults apply.

    Raises:
        ConfigError: If an override does not produce valid settings.
    """

    overrides: dict[str, str] = {}
    root = env.get(NAMESPACE_ROOT_ENV_VAR)
    if root is not None:
        overrides["namespace_root"] = root
    groups = env.get(METADATA_GROUPS_ENV_VAR)
    if groups is not None:
        overrides["metadata_groups"] = groups
    if not overrides:
        return None
    try:
        return LocatorSettings.model_validate(overrides)
    except ValidationError as exc:
        raise ConfigError(f"Invalid locator settings in environment: {exc}") from exc


def resolve_locator_settings(
    settings: LocatorSettings | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> LocatorSettings:
    """Return locator settings honouring overrides and defaults.

    Args:
        settings: Explicit settings that take precedence when provided.
        env: Optional environment mapping used instead of :mod:`os.environ`.

    Returns:
        LocatorSettings: Effective settings after applying overrides or falling
        back to defaults.
    """

    if settings is not None:
        return settings

    environment = os.environ if env is None else env
    env_settings = _settings_from_environment(environment)
    if env_settings is not None:
        return env_settings

    return LocatorSettings()


__all__ = [
    "ConfigError",
    "ExtractionSettings",
    "LocatorSettings",
    "METADATA_GROUPS_ENV_VAR",
    "NAMESPACE_ROOT_ENV_VAR",
    "resolve_locator_settings",
]
