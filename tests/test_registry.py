# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for module partitioning and version inference."""

from __future__ import annotations

from assetlocator.index import PathIndex
from assetlocator.registry import (
    ModuleRegistry,
    compose_module_path,
    infer_version,
    module_name_of,
    split_module_path,
)
from assetlocator.versions import DeclaredVersion, MappingMetadataSource

ROOT = "root"


def test_shared_second_segment_is_the_version() -> None:
    paths = [f"{ROOT}/m/3.1.1/a.js", f"{ROOT}/m/3.1.1/b/c.js"]
    assert infer_version("m", paths, ROOT) == "3.1.1"


def test_flat_module_has_no_version() -> None:
    assert infer_version("m", [f"{ROOT}/m/a.js"], ROOT) is None


def test_mixed_second_segments_have_no_version() -> None:
    paths = [f"{ROOT}/m/1.0.0/a.js", f"{ROOT}/m/dist/b.js"]
    assert infer_version("m", paths, ROOT) is None


def test_empty_partition_has_no_version() -> None:
    assert infer_version("m", [], ROOT) is None


def test_split_module_path() -> None:
    assert split_module_path(f"{ROOT}/jquery/3.7.1/jquery.js", ROOT) == ("jquery", "3.7.1")
    assert split_module_path(f"{ROOT}/jquery/jquery.js", ROOT) is None
    assert split_module_path("elsewhere/jquery/3.7.1/jquery.js", ROOT) is None


def test_module_name_of_ignores_files_directly_under_root() -> None:
    assert module_name_of(f"{ROOT}/readme.txt", ROOT) is None
    assert module_name_of(f"{ROOT}/m/a.js", ROOT) == "m"


def test_compose_module_path_avoids_doubling_the_version() -> None:
    assert compose_module_path(ROOT, "m", "1.0", "a.js") == f"{ROOT}/m/1.0/a.js"
    assert compose_module_path(ROOT, "m", "1.0", "1.0/a.js") == f"{ROOT}/m/1.0/a.js"
    assert compose_module_path(ROOT, "m", None, "a.js") == f"{ROOT}/m/a.js"


def test_registry_groups_paths_by_module() -> None:
    paths = [
        f"{ROOT}/m/3.1.1/a.js",
        f"{ROOT}/m/3.1.1/b/c.js",
        f"{ROOT}/flat/a.js",
        f"{ROOT}/loose.txt",
        "other/file.txt",
    ]
    origins = {path: "memory:test" for path in paths}
    metadata = MappingMetadataSource({"m": DeclaredVersion("m", "3.1.1", "org.webjars")})

    registry = ModuleRegistry.build(PathIndex(paths), ROOT, origins=origins, metadata=metadata)

    assert sorted(registry) == ["flat", "m"]
    assert registry["m"].version == "3.1.1"
    assert registry["m"].contents == frozenset(paths[:2])
    assert registry["m"].origin == "memory:test"
    assert registry["m"].group == "org.webjars"
    assert registry["flat"].version is None
    assert registry["flat"].group is None
    assert registry.versions() == {"flat": None, "m": "3.1.1"}


def test_owner_of_returns_the_containing_module() -> None:
    paths = [f"{ROOT}/m/1.0/a.js", f"{ROOT}/n/2.0/b.js"]
    registry = ModuleRegistry.build(PathIndex(paths), ROOT)

    owner = registry.owner_of(f"{ROOT}/n/2.0/b.js")
    assert owner is not None
    assert owner.name == "n"
    assert registry.owner_of(f"{ROOT}/n/2.0/missing.js") is None
    assert registry.owner_of("other/file.txt") is None
