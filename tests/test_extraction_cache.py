# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the two-generation extraction cache."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from assetlocator.cache.extraction import (
    CacheEntry,
    CacheState,
    ExtractionCache,
    format_cache_lines,
    parse_cache_lines,
)
from assetlocator.filesystem import canonical_path

ENTRY = CacheEntry(source="zip:file:/libs/a.jar!/META-INF/a.js", last_modified=1700000000000)


def test_entries_compare_structurally() -> None:
    assert CacheEntry("a", 1) == CacheEntry("a", 1)
    assert CacheEntry("a", 1) != CacheEntry("a", 2)
    assert CacheEntry("a", 1) != CacheEntry("b", 1)


def test_round_trip_through_the_cache_file(tmp_path: Path) -> None:
    cache_file = tmp_path / "cache"
    cache = ExtractionCache(cache_file)
    cache.record("m/a.js", ENTRY)
    cache.persist()

    reloaded = ExtractionCache(cache_file)

    assert reloaded.is_current("m/a.js", ENTRY)
    assert not reloaded.is_current("m/a.js", CacheEntry(ENTRY.source, ENTRY.last_modified + 1))


def test_persisted_format_keeps_separators_in_the_source(tmp_path: Path) -> None:
    cache_file = tmp_path / "cache"
    cache = ExtractionCache(cache_file)
    cache.record("m/a.js", ENTRY)
    cache.persist()

    assert cache_file.read_text(encoding="utf-8") == f"m/a.js:{ENTRY.last_modified}:{ENTRY.source}\n"


def test_malformed_lines_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    lines = ["good:10:src", "missing-fields", "bad:abc:src", "", "other:20:zip:file:/x!/y"]

    with caplog.at_level(logging.DEBUG, logger="assetlocator.cache.extraction"):
        entries = parse_cache_lines(lines)

    assert entries == {
        "good": CacheEntry("src", 10),
        "other": CacheEntry("zip:file:/x!/y", 20),
    }
    assert "skipping cache line 2" in caplog.text
    assert "skipping cache line 3" in caplog.text


def test_format_cache_lines_is_lf_terminated() -> None:
    assert format_cache_lines({"k": CacheEntry("s", 1)}) == "k:1:s\n"


def test_unreadable_cache_file_degrades_to_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    cache_file = tmp_path / "cache"
    cache_file.write_bytes(b"\xff\xfe\xfa invalid utf-8")

    with caplog.at_level(logging.WARNING, logger="assetlocator.cache.extraction"):
        cache = ExtractionCache(cache_file)

    assert cache.entries() == {}
    assert "ignoring unreadable extraction cache" in caplog.text


def test_cache_miss_does_not_touch() -> None:
    cache = ExtractionCache()
    assert not cache.is_current("m/a.js", ENTRY)
    assert cache.touched() == {}


def test_on_disk_entry_is_carried_into_touched(tmp_path: Path) -> None:
    cache_file = tmp_path / "cache"
    cache_file.write_text("m/a.js:1:old\n", encoding="utf-8")
    cache = ExtractionCache(cache_file)

    assert not cache.is_current("m/a.js", ENTRY)
    assert cache.touched() == {"m/a.js": CacheEntry("old", 1)}
    assert cache.state is CacheState.ACCUMULATING


def test_record_replaces_touched_entry() -> None:
    cache = ExtractionCache()
    cache.record("m/a.js", CacheEntry("old", 1))
    cache.record("m/a.js", ENTRY)
    assert cache.is_current("m/a.js", ENTRY)


def test_persist_swaps_generations() -> None:
    cache = ExtractionCache()
    cache.record("m/a.js", ENTRY)
    cache.persist()

    assert cache.entries() == {"m/a.js": ENTRY}
    assert cache.touched() == {}
    assert cache.state is CacheState.LOADED


def test_unchanged_pass_does_not_rewrite_the_file(tmp_path: Path) -> None:
    cache_file = tmp_path / "cache"
    cache = ExtractionCache(cache_file)
    cache.record("m/a.js", ENTRY)
    cache.persist()
    cache_file.write_text(f"m/a.js:{ENTRY.last_modified}:{ENTRY.source}\n# sentinel\n", encoding="utf-8")

    assert cache.is_current("m/a.js", ENTRY)
    cache.persist()

    assert "# sentinel" in cache_file.read_text(encoding="utf-8")


def test_dropped_entries_trigger_a_rewrite(tmp_path: Path) -> None:
    cache_file = tmp_path / "cache"
    cache = ExtractionCache(cache_file)
    cache.record("m/a.js", ENTRY)
    cache.record("m/b.js", ENTRY)
    cache.persist()

    assert cache.is_current("m/a.js", ENTRY)
    cache.persist()

    assert cache_file.read_text(encoding="utf-8") == f"m/a.js:{ENTRY.last_modified}:{ENTRY.source}\n"


def test_reset_discards_the_current_pass(tmp_path: Path) -> None:
    cache = ExtractionCache(tmp_path / "cache")
    cache.record("m/a.js", ENTRY)
    cache.reset()

    assert cache.touched() == {}
    assert not cache.is_current("m/a.js", ENTRY)


def _touch(base: Path, key: str) -> Path:
    path = base.joinpath(*key.split("/"))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(key, encoding="utf-8")
    return path


def test_stale_destinations_while_accumulating(tmp_path: Path) -> None:
    out = tmp_path / "out"
    cache = ExtractionCache()
    for key in ("a/1.js", "b/2.js", "b/gone.js"):
        cache.record(key, ENTRY)
    cache.persist()
    _touch(out, "a/1.js")
    stale = _touch(out, "b/2.js")

    cache.begin_pass()
    assert cache.is_current("a/1.js", ENTRY)

    assert cache.stale_destinations(out) == {canonical_path(stale)}


def test_stale_destinations_after_persist(tmp_path: Path) -> None:
    out = tmp_path / "out"
    cache = ExtractionCache()
    for key in ("a/1.js", "b/2.js"):
        cache.record(key, ENTRY)
    cache.persist()
    _touch(out, "a/1.js")
    stale = _touch(out, "b/2.js")

    assert cache.is_current("a/1.js", ENTRY)
    cache.persist()

    assert cache.stale_destinations(out) == {canonical_path(stale)}


def test_empty_pass_marks_everything_stale(tmp_path: Path) -> None:
    out = tmp_path / "out"
    cache = ExtractionCache()
    cache.record("a/1.js", ENTRY)
    cache.persist()
    kept = _touch(out, "a/1.js")

    cache.begin_pass()

    assert cache.stale_destinations(out) == {canonical_path(kept)}


def test_stale_destinations_compare_canonical_paths(tmp_path: Path) -> None:
    out = tmp_path / "out"
    cache = ExtractionCache()
    cache.record("a//1.js", ENTRY)
    cache.record("b/2.js", ENTRY)
    cache.persist()
    _touch(out, "a/1.js")
    stale = _touch(out, "b/2.js")

    cache.begin_pass()
    cache.record("a/./1.js", ENTRY)

    spelled_differently = tmp_path / "elsewhere" / ".." / "out"
    assert cache.stale_destinations(spelled_differently) == {canonical_path(stale)}
    assert cache.stale_destinations(out) == cache.stale_destinations(spelled_differently)


@pytest.mark.skipif(os.path.normcase("A") == "A", reason="paths are case-sensitive on this platform")
def test_stale_destinations_ignore_case_where_paths_do(tmp_path: Path) -> None:
    out = tmp_path / "out"
    cache = ExtractionCache()
    cache.record("Module/App.js", ENTRY)
    cache.persist()
    _touch(out, "module/app.js")

    cache.begin_pass()
    cache.record("module/app.js", ENTRY)

    assert cache.stale_destinations(out) == set()


def test_stale_destinations_skip_keys_leaving_the_base(tmp_path: Path) -> None:
    cache_file = tmp_path / "cache"
    cache_file.write_text("../outside.txt:1:src\nin/kept.txt:1:src\n", encoding="utf-8")
    (tmp_path / "outside.txt").write_text("keep me", encoding="utf-8")
    out = tmp_path / "out"
    inside = _touch(out, "in/kept.txt")
    cache = ExtractionCache(cache_file)

    cache.begin_pass()

    assert cache.stale_destinations(out) == {canonical_path(inside)}


def test_persist_without_writing_still_rotates_generations(tmp_path: Path) -> None:
    cache_file = tmp_path / "cache"
    cache = ExtractionCache(cache_file)
    cache.record("a/1.js", ENTRY)

    cache.persist(write=False)

    assert cache.entries() == {"a/1.js": ENTRY}
    assert cache.touched() == {}
    assert cache.state is CacheState.LOADED
    assert not cache_file.exists()
