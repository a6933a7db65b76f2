# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the asset locator facade."""

from __future__ import annotations

import pytest

from assetlocator.cache.versions import InMemoryVersionCache
from assetlocator.config import LocatorSettings
from assetlocator.errors import MultipleMatchesError, NotFoundError
from assetlocator.locator import AssetLocator
from assetlocator.sources import MemorySource, ResourceEnumerator

ROOT = "META-INF/resources/webjars"


@pytest.fixture
def locator(enumerator: ResourceEnumerator) -> AssetLocator:
    return AssetLocator.scan(enumerator)


def test_scan_discovers_modules_versions_and_groups(locator: AssetLocator) -> None:
    assert locator.module_versions() == {"bootstrap": "5.3.2", "jquery": "3.7.1"}
    assert locator.modules["jquery"].group == "org.webjars.npm"
    assert locator.modules["bootstrap"].group == "org.webjars"
    assert locator.modules["jquery"].origin is not None
    assert locator.modules["jquery"].origin.startswith("file:")


def test_metadata_records_are_not_indexed(locator: AssetLocator) -> None:
    assert all(path.startswith(ROOT) for path in locator.index)


def test_resolve_full_path(locator: AssetLocator) -> None:
    assert locator.resolve_full_path("jquery.js") == f"{ROOT}/jquery/3.7.1/jquery.js"
    assert locator.resolve_full_path("css/bootstrap.css") == f"{ROOT}/bootstrap/5.3.2/css/bootstrap.css"


def test_resolve_full_path_reports_missing_paths(locator: AssetLocator) -> None:
    with pytest.raises(NotFoundError, match="unknown.js could not be found"):
        locator.resolve_full_path("unknown.js")


def test_cross_module_ambiguity_resolves_within_a_module() -> None:
    locator = AssetLocator.from_paths(
        [
            f"{ROOT}/angularjs/1.8.3/angular.js",
            f"{ROOT}/angular-foo/1.0.0/angular.js",
        ]
    )

    with pytest.raises(MultipleMatchesError) as excinfo:
        locator.resolve_full_path("angular.js")
    assert len(excinfo.value.matches) == 2
    assert locator.resolve_module_path("angularjs", "angular.js") == f"{ROOT}/angularjs/1.8.3/angular.js"


def test_module_scoped_ambiguity_is_reported() -> None:
    locator = AssetLocator.from_paths([f"{ROOT}/m/1.0/a/x.js", f"{ROOT}/m/1.0/b/x.js"])
    with pytest.raises(MultipleMatchesError):
        locator.resolve_module_path("m", "x.js")


def test_unknown_module_is_named_in_the_error(locator: AssetLocator) -> None:
    with pytest.raises(NotFoundError, match="Module missing could not be found") as excinfo:
        locator.resolve_module_path("missing", "jquery.js")
    assert excinfo.value.module == "missing"


def test_resolve_exact_path(locator: AssetLocator) -> None:
    assert locator.resolve_exact_path("jquery", "jquery.js") == f"{ROOT}/jquery/3.7.1/jquery.js"
    assert locator.resolve_exact_path("jquery", "3.7.1/jquery.js") == f"{ROOT}/jquery/3.7.1/jquery.js"
    assert locator.resolve_exact_path("bootstrap", "js/bootstrap.js") == f"{ROOT}/bootstrap/5.3.2/js/bootstrap.js"
    assert locator.resolve_exact_path("jquery", "bootstrap.js") is None
    assert locator.resolve_exact_path("missing", "jquery.js") is None


def test_exact_path_does_not_match_suffixes(locator: AssetLocator) -> None:
    assert locator.resolve_exact_path("bootstrap", "bootstrap.js") is None


def test_resolve_exact_path_in_a_flat_module() -> None:
    locator = AssetLocator.from_paths([f"{ROOT}/flat/a.js", f"{ROOT}/flat/lib/b.js"])
    assert locator.module_versions() == {"flat": None}
    assert locator.resolve_exact_path("flat", "lib/b.js") == f"{ROOT}/flat/lib/b.js"


def test_list_under_prefix_accepts_full_and_bare_prefixes(locator: AssetLocator) -> None:
    expected = [
        f"{ROOT}/bootstrap/5.3.2/bower.json",
        f"{ROOT}/bootstrap/5.3.2/css/bootstrap.css",
        f"{ROOT}/bootstrap/5.3.2/js/bootstrap.js",
    ]
    assert locator.list_under_prefix(f"{ROOT}/bootstrap") == expected
    assert locator.list_under_prefix("bootstrap") == expected
    assert locator.list_under_prefix("/bootstrap") == expected
    assert locator.list_under_prefix("Bootstrap") == []


def test_list_under_prefix_defaults_to_everything(locator: AssetLocator) -> None:
    assert locator.list_under_prefix() == sorted(locator.index)


def test_module_and_group_for_path(locator: AssetLocator) -> None:
    path = f"{ROOT}/jquery/3.7.1/jquery.min.js"
    info = locator.module_for_path(path)
    assert info is not None
    assert info.name == "jquery"
    assert locator.group_for_path(path) == "org.webjars.npm"
    assert locator.group_for_path("somewhere/else.js") is None


def test_declared_version_uses_the_metadata_record(locator: AssetLocator) -> None:
    assert locator.declared_version("jquery") == "3.7.1"
    assert locator.declared_version("bootstrap") == "5.3.2"
    assert locator.declared_version("missing") is None


def test_injected_version_cache_is_used(enumerator: ResourceEnumerator) -> None:
    cache = InMemoryVersionCache()
    locator = AssetLocator.scan(enumerator, version_cache=cache)

    locator.declared_version("jquery")
    assert cache.get("jquery") == "3.7.1"


def test_manual_index_keeps_non_namespace_paths() -> None:
    locator = AssetLocator.from_paths([f"{ROOT}/m/1.0/a.js", "public/app.js"])

    assert sorted(locator.modules) == ["m"]
    assert locator.resolve_full_path("app.js") == "public/app.js"
    assert locator.list_under_prefix("public/") == ["public/app.js"]


def test_custom_namespace_root() -> None:
    settings = LocatorSettings(namespace_root="/static/modules/")
    enumerator = ResourceEnumerator(
        [MemorySource({"static/modules/m/1.0/a.js": b"a", f"{ROOT}/n/1.0/b.js": b"b"})]
    )

    locator = AssetLocator.scan(enumerator, settings)

    assert locator.module_versions() == {"m": "1.0"}
    assert locator.resolve_full_path("a.js") == "static/modules/m/1.0/a.js"


def test_independent_builds_answer_identically(enumerator: ResourceEnumerator) -> None:
    first = AssetLocator.scan(enumerator)
    second = AssetLocator.scan(enumerator)

    assert first.index == second.index
    assert first.module_versions() == second.module_versions()
