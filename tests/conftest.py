# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import zipfile
from collections.abc import Mapping
from pathlib import Path

import pytest

from assetlocator.sources import DirectorySource, ResourceEnumerator

ROOT = "META-INF/resources/webjars"

MODULE_FILES: dict[str, str] = {
    f"{ROOT}/jquery/3.7.1/jquery.js": "/* jquery */",
    f"{ROOT}/jquery/3.7.1/jquery.min.js": "/* jquery min */",
    f"{ROOT}/jquery/3.7.1/package.json": '{"name": "jquery", "version": "3.7.1"}',
    f"{ROOT}/bootstrap/5.3.2/css/bootstrap.css": "body {}",
    f"{ROOT}/bootstrap/5.3.2/js/bootstrap.js": "/* bootstrap */",
    f"{ROOT}/bootstrap/5.3.2/bower.json": '{"name": "bootstrap-bower"}',
    "META-INF/maven/org.webjars.npm/jquery/pom.properties": (
        "#Generated by Maven\ngroupId=org.webjars.npm\nartifactId=jquery\nversion=3.7.1\n"
    ),
    "META-INF/maven/org.webjars/bootstrap/pom.properties": (
        "groupId=org.webjars\nartifactId=bootstrap\nversion=5.3.2-1\n"
    ),
}


def write_tree(root: Path, files: Mapping[str, str | bytes]) -> Path:
    """Write ``files`` beneath ``root`` and return ``root``."""

    for relative, content in files.items():
        target = root.joinpath(*relative.split("/"))
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


def write_archive(path: Path, files: Mapping[str, str | bytes]) -> Path:
    """Write a zip archive holding ``files`` and return its path."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return path


@pytest.fixture
def module_tree(tmp_path: Path) -> Path:
    """Return a directory holding two versioned modules and their metadata."""

    return write_tree(tmp_path / "classes", MODULE_FILES)


@pytest.fixture
def enumerator(module_tree: Path) -> ResourceEnumerator:
    """Return an enumerator over :func:`module_tree`."""

    return ResourceEnumerator([DirectorySource(module_tree)])


@pytest.fixture
def tree_writer():
    """Return :func:`write_tree` for tests building their own layouts."""

    return write_tree


@pytest.fixture
def archive_writer():
    """Return :func:`write_archive` for tests building their own archives."""

    return write_archive
