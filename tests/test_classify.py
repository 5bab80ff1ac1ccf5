from __future__ import annotations

import json
from pathlib import Path

import pytest

from assetbuilder.classify import KIND_ANIMATION
from assetbuilder.classify import KIND_AUDIO
from assetbuilder.classify import KIND_IMAGE
from assetbuilder.classify import KIND_TILE_MAP
from assetbuilder.classify import KIND_TILE_WORLD
from assetbuilder.classify import classify_file
from assetbuilder.classify import collect_manifest
from assetbuilder.classify import match_frame
from assetbuilder.classify import sniff_json_asset
from assetbuilder.classify import sniff_tiled_document
from assetbuilder.classify import strip_extension


def write_json(root: Path, relative_path: str, payload: object) -> None:
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.mark.parametrize(
    ("relative_path", "prefix", "index", "matcher"),
    [
        ("foo_3.png", "foo", 3, "underscore"),
        ("chars/hero_12.gif", "chars/hero", 12, "underscore"),
        ("bar (1).gif", "bar", 1, "parenthesized"),
        ("fx/spark (07).png", "fx/spark", 7, "parenthesized"),
        ("walk_left_2.png", "walk_left", 2, "underscore"),
    ],
)
def test_match_frame(relative_path: str, prefix: str, index: int, matcher: str) -> None:
    found = match_frame(relative_path)
    assert found is not None
    assert found.prefix == prefix
    assert found.index == index
    assert found.matcher == matcher


@pytest.mark.parametrize("relative_path", ["foo.png", "foo_.png", "foo_1.jpg", "foo(1).png", "foo_1.png.bak"])
def test_match_frame_rejects(relative_path: str) -> None:
    assert match_frame(relative_path) is None


def test_underscore_matcher_takes_priority() -> None:
    found = match_frame("bar (1)_4.png")
    assert found is not None
    assert found.matcher == "underscore"
    assert found.prefix == "bar (1)"
    assert found.index == 4


def test_sniff_tiled_document() -> None:
    assert sniff_tiled_document({"type": "map", "version": 1, "tilewidth": 16}) == KIND_TILE_MAP
    assert sniff_tiled_document({"type": "world", "maps": []}) == KIND_TILE_WORLD
    assert sniff_tiled_document({"foo": 1}) is None
    assert sniff_tiled_document({"type": "map", "version": 1}) is None
    assert sniff_tiled_document({"type": "world"}) is None
    assert sniff_tiled_document([1, 2, 3]) is None


def test_sniff_json_asset_reports_reason(tmp_path: Path) -> None:
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    write_json(tmp_path, "other.json", {"foo": 1})
    write_json(tmp_path, "level.json", {"type": "map", "version": 1, "tilewidth": 16})

    broken = sniff_json_asset(tmp_path / "broken.json")
    assert not broken.matched
    assert broken.reason.startswith("invalid JSON")

    other = sniff_json_asset(tmp_path / "other.json")
    assert not other.matched
    assert other.reason

    level = sniff_json_asset(tmp_path / "level.json")
    assert level.matched
    assert level.kind == KIND_TILE_MAP


def test_classify_file(tmp_path: Path) -> None:
    write_json(tmp_path, "maps/level.json", {"type": "map", "version": 1, "tilewidth": 16})
    write_json(tmp_path, "maps/overworld.json", {"type": "world", "maps": []})
    write_json(tmp_path, "data/items.json", {"foo": 1})

    assert classify_file(tmp_path, "hero.png").kind == KIND_IMAGE
    assert classify_file(tmp_path, "music/theme.mp3").kind == KIND_AUDIO
    assert classify_file(tmp_path, "maps/level.json").kind == KIND_TILE_MAP
    assert classify_file(tmp_path, "maps/overworld.json").kind == KIND_TILE_WORLD
    assert classify_file(tmp_path, "data/items.json").ignored
    assert classify_file(tmp_path, "notes.txt").ignored

    frame = classify_file(tmp_path, "hero_1.png")
    assert frame.kind == KIND_ANIMATION
    assert frame.frame is not None
    assert frame.frame.prefix == "hero"


def test_strip_extension() -> None:
    assert strip_extension("a/b/hero.png") == "a/b/hero"
    assert strip_extension("a.b/hero") == "a.b/hero"
    assert strip_extension("sound.effect.mp3") == "sound.effect"


def test_collect_manifest_orders_frames_and_skips_gaps(tmp_path: Path) -> None:
    plan = collect_manifest(tmp_path, ["foo_3.png", "foo_1.png", "foo_0.png"])
    assert plan.entries == []
    assert [bundle.name for bundle in plan.bundles] == ["foo"]
    assert plan.bundles[0].ordered_paths() == ["foo_0.png", "foo_1.png", "foo_3.png"]


def test_collect_manifest_parenthesized_bundle(tmp_path: Path) -> None:
    plan = collect_manifest(tmp_path, ["bar (2).gif", "bar (1).gif"])
    assert plan.bundles[0].name == "bar"
    assert plan.bundles[0].ordered_paths() == ["bar (1).gif", "bar (2).gif"]


def test_collect_manifest_duplicate_frame_later_wins(tmp_path: Path) -> None:
    plan = collect_manifest(tmp_path, ["foo_01.png", "foo_1.gif"])
    assert plan.bundles[0].ordered_paths() == ["foo_1.gif"]
    assert plan.skipped == ["foo_01.png"]
    assert len(plan.warnings) == 1
    assert "replaces foo_01.png" in plan.warnings[0]


def test_collect_manifest_name_collisions_keep_first(tmp_path: Path) -> None:
    plan = collect_manifest(tmp_path, ["hero.gif", "hero.png", "hero_0.png", "tree.png"])
    assert [entry.path for entry in plan.entries] == ["hero.gif", "tree.png"]
    assert plan.bundles == []
    assert "hero.png" in plan.skipped
    assert "hero_0.png" in plan.skipped
    assert len(plan.warnings) == 2


def test_collect_manifest_excludes_unmatched_json(tmp_path: Path) -> None:
    write_json(tmp_path, "items.json", {"foo": 1})
    write_json(tmp_path, "level.json", {"type": "map", "version": 1, "tilewidth": 16})

    plan = collect_manifest(tmp_path, ["items.json", "level.json", "readme.md"])

    assert [(entry.name, entry.kind) for entry in plan.entries] == [("level", KIND_TILE_MAP)]
    assert plan.skipped == ["items.json", "readme.md"]
    assert plan.warnings == []


@pytest.mark.parametrize(
    "text",
    [
        '{"type": "map", "version": ' + "9" * 5000 + ', "tilewidth": 16}',
        "[" * 100000,
    ],
)
def test_sniff_json_asset_unparseable_documents(tmp_path: Path, text: str) -> None:
    (tmp_path / "data.json").write_text(text, encoding="utf-8")
    result = sniff_json_asset(tmp_path / "data.json")
    assert not result.matched
    assert result.reason


def test_match_frame_ascii_digits_only(tmp_path: Path) -> None:
    assert match_frame("foo_٣.png") is None
    assert match_frame("foo (٣).png") is None
    assert classify_file(tmp_path, "foo_٣.png").kind == KIND_IMAGE


def test_collect_manifest_skips_undecodable_names(tmp_path: Path) -> None:
    plan = collect_manifest(tmp_path, ["hero.png", "\udcff.png", "walk_\udcff_1.png"])
    assert [entry.path for entry in plan.entries] == ["hero.png"]
    assert plan.bundles == []
    assert plan.skipped == ["\udcff.png", "walk_\udcff_1.png"]
    assert len(plan.warnings) == 2
