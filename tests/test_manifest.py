# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for manifest id parsing."""

from __future__ import annotations

import pytest

from assetlocator.manifest import PackageManifest, read_manifest_id


def test_reads_the_top_level_name() -> None:
    payload = b'{"name": " left-pad ", "dependencies": {"name": "nested"}}'
    assert read_manifest_id(payload) == "left-pad"


def test_accepts_text_payloads() -> None:
    assert read_manifest_id('{"name": "pkg"}') == "pkg"


@pytest.mark.parametrize(
    "payload",
    [b"", b"not json", b"[]", b'"name"', b'{"name": null}', b'{"name": 1}', b'{"name": ""}', b"\xff"],
)
def test_invalid_manifests_have_no_id(payload: bytes) -> None:
    assert read_manifest_id(payload) is None


def test_model_ignores_extra_keys() -> None:
    manifest = PackageManifest.model_validate({"name": "pkg", "version": "1.0"})
    assert manifest.name == "pkg"
