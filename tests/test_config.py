# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests covering locator and extraction settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from assetlocator.config import (
    METADATA_GROUPS_ENV_VAR,
    NAMESPACE_ROOT_ENV_VAR,
    ConfigError,
    ExtractionSettings,
    LocatorSettings,
    resolve_locator_settings,
)


def test_defaults() -> None:
    settings = LocatorSettings()

    assert settings.namespace_root == "META-INF/resources/webjars"
    assert settings.root_prefix == "META-INF/resources/webjars/"
    assert settings.metadata_groups == ("org.webjars.npm", "org.webjars")
    assert settings.metadata_file == "pom.properties"


def test_roots_are_normalized() -> None:
    settings = LocatorSettings(namespace_root=" /static/modules/ ", metadata_root="meta/")
    assert settings.namespace_root == "static/modules"
    assert settings.metadata_root == "meta"


def test_empty_root_is_rejected() -> None:
    with pytest.raises(ValidationError):
        LocatorSettings(namespace_root="//")


def test_settings_are_frozen() -> None:
    settings = LocatorSettings()
    with pytest.raises(ValidationError):
        settings.namespace_root = "other"  # type: ignore[misc]


def test_groups_accept_comma_separated_text() -> None:
    settings = LocatorSettings.model_validate({"metadata_groups": "com.example, org.webjars,,"})
    assert settings.metadata_groups == ("com.example", "org.webjars")


def test_explicit_settings_win_over_environment() -> None:
    explicit = LocatorSettings(namespace_root="explicit")
    resolved = resolve_locator_settings(explicit, env={NAMESPACE_ROOT_ENV_VAR: "ignored"})
    assert resolved is explicit


def test_environment_overrides() -> None:
    resolved = resolve_locator_settings(
        env={NAMESPACE_ROOT_ENV_VAR: "static/lib", METADATA_GROUPS_ENV_VAR: "com.example"},
    )
    assert resolved.namespace_root == "static/lib"
    assert resolved.metadata_groups == ("com.example",)


def test_empty_environment_uses_defaults() -> None:
    assert resolve_locator_settings(env={}) == LocatorSettings()


def test_invalid_environment_raises_config_error() -> None:
    with pytest.raises(ConfigError):
        resolve_locator_settings(env={NAMESPACE_ROOT_ENV_VAR: "  "})


def test_extraction_settings_validate_assignment() -> None:
    settings = ExtractionSettings()
    assert settings.cache_file_name == ".assetlocator-cache"
    assert not settings.strict
    assert settings.persist_cache

    settings.strict = True
    assert settings.strict
    with pytest.raises(ValidationError):
        settings.persist_cache = "maybe"  # type: ignore[assignment]
