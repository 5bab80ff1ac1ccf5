from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

KIND_IMAGE = "Image"
KIND_TILE_MAP = "TileMap"
KIND_TILE_WORLD = "TileWorld"
KIND_AUDIO = "Audio"
KIND_SPRITESHEET = "Spritesheet"
KIND_ANIMATION = "Animation"

# Order of the generated AssetType union.
ASSET_KINDS = (
    KIND_IMAGE,
    KIND_TILE_MAP,
    KIND_TILE_WORLD,
    KIND_AUDIO,
    KIND_SPRITESHEET,
    KIND_ANIMATION,
)

IMAGE_EXTENSIONS = (".png", ".gif")
AUDIO_EXTENSIONS = (".mp3",)
JSON_EXTENSIONS = (".json",)


@dataclass(frozen=True)
class FrameMatch:
    prefix: str
    index: int
    matcher: str


@dataclass(frozen=True)
class FrameMatcher:
    name: str
    pattern: re.Pattern[str]

    def match(self, relative_path: str) -> FrameMatch | None:
        found = self.pattern.search(relative_path)
        if found is None:
            return None
        return FrameMatch(
            prefix=found.group("prefix"),
            index=int(found.group("index")),
            matcher=self.name,
        )


# Evaluated in order; the first matcher that claims a path wins.
FRAME_MATCHERS = (
    FrameMatcher("underscore", re.compile(r"^(?P<prefix>.+)_(?P<index>[0-9]+)\.(?:png|gif)$")),
    FrameMatcher("parenthesized", re.compile(r"^(?P<prefix>.+) \((?P<index>[0-9]+)\)\.(?:png|gif)$")),
)


def match_frame(relative_path: str) -> FrameMatch | None:
    for matcher in FRAME_MATCHERS:
        found = matcher.match(relative_path)
        if found is not None:
            return found
    return None


@dataclass(frozen=True)
class SniffResult:
    kind: str | None
    reason: str = ""

    @property
    def matched(self) -> bool:
        return self.kind is not None


def load_json_document(path: Path) -> tuple[Any, str]:
    """Parse a JSON file, returning ``(document, "")`` or ``(None, reason)``."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return None, f"unreadable: {exc}"

    try:
        return json.loads(text), ""
    except json.JSONDecodeError as exc:
        return None, f"invalid JSON at line {exc.lineno}: {exc.msg}"
    except (ValueError, RecursionError) as exc:
        # oversized integer literals or nesting deeper than the parser allows
        return None, f"unparseable JSON: {exc}"


def _has_value(document: dict[str, Any], key: str) -> bool:
    return document.get(key) is not None


def sniff_tiled_document(document: Any) -> str | None:
    if not isinstance(document, dict):
        return None
    if _has_value(document, "version") and _has_value(document, "tilewidth") and document.get("type") == "map":
        return KIND_TILE_MAP
    if _has_value(document, "maps") and document.get("type") == "world":
        return KIND_TILE_WORLD
    return None


def sniff_json_asset(path: Path) -> SniffResult:
    document, reason = load_json_document(path)
    if reason:
        return SniffResult(kind=None, reason=reason)

    kind = sniff_tiled_document(document)
    if kind is None:
        return SniffResult(kind=None, reason="not a tile map or tile world")
    return SniffResult(kind=kind)


@dataclass(frozen=True)
class Classification:
    relative_path: str
    kind: str | None
    frame: FrameMatch | None = None
    reason: str = ""

    @property
    def ignored(self) -> bool:
        return self.kind is None


def classify_file(assets_root: Path, relative_path: str) -> Classification:
    if relative_path.endswith(IMAGE_EXTENSIONS):
        frame = match_frame(relative_path)
        if frame is not None:
            return Classification(relative_path, KIND_ANIMATION, frame=frame)
        return Classification(relative_path, KIND_IMAGE)

    if relative_path.endswith(AUDIO_EXTENSIONS):
        return Classification(relative_path, KIND_AUDIO)

    if relative_path.endswith(JSON_EXTENSIONS):
        sniffed = sniff_json_asset(assets_root / relative_path)
        return Classification(relative_path, sniffed.kind, reason=sniffed.reason)

    return Classification(relative_path, None, reason="unsupported extension")


def is_utf8_path(relative_path: str) -> bool:
    # Undecodable bytes from the filesystem arrive as lone surrogates.
    try:
        relative_path.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def strip_extension(relative_path: str) -> str:
    dot = relative_path.rfind(".")
    if dot <= relative_path.rfind("/"):
        return relative_path
    return relative_path[:dot]


@dataclass(frozen=True)
class AssetEntry:
    name: str
    kind: str
    path: str


@dataclass
class AnimationBundle:
    name: str
    frames: dict[int, str] = field(default_factory=dict)

    def ordered_paths(self) -> list[str]:
        return [self.frames[index] for index in sorted(self.frames)]


@dataclass
class ManifestPlan:
    entries: list[AssetEntry] = field(default_factory=list)
    bundles: list[AnimationBundle] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.entries and not self.bundles

    def names(self) -> list[str]:
        return [entry.name for entry in self.entries] + [bundle.name for bundle in self.bundles]

    def paths(self) -> list[str]:
        paths = [entry.path for entry in self.entries]
        for bundle in self.bundles:
            paths.extend(bundle.ordered_paths())
        return paths

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)


def collect_manifest(assets_root: Path, files: list[str]) -> ManifestPlan:
    plan = ManifestPlan()
    bundles: dict[str, AnimationBundle] = {}
    claimed: dict[str, str] = {}

    for relative_path in files:
        if not is_utf8_path(relative_path):
            plan.warn(f"skipping {relative_path!r}: file name is not valid UTF-8")
            plan.skipped.append(relative_path)
            continue

        classified = classify_file(assets_root, relative_path)
        if classified.ignored:
            if relative_path.endswith(JSON_EXTENSIONS):
                logger.debug("skipping %s: %s", relative_path, classified.reason)
            plan.skipped.append(relative_path)
            continue

        frame = classified.frame
        if frame is not None:
            bundle = bundles.setdefault(frame.prefix, AnimationBundle(frame.prefix))
            previous = bundle.frames.get(frame.index)
            if previous is not None:
                plan.warn(
                    f"animation '{frame.prefix}' frame {frame.index}: {relative_path} replaces {previous}"
                )
                plan.skipped.append(previous)
            bundle.frames[frame.index] = relative_path
            continue

        name = strip_extension(relative_path)
        if name in claimed:
            plan.warn(f"asset name '{name}' already used by {claimed[name]}; skipping {relative_path}")
            plan.skipped.append(relative_path)
            continue
        claimed[name] = relative_path
        plan.entries.append(AssetEntry(name=name, kind=classified.kind, path=relative_path))

    for name, bundle in bundles.items():
        if name in claimed:
            plan.warn(f"animation name '{name}' already used by {claimed[name]}; skipping animation")
            plan.skipped.extend(bundle.ordered_paths())
            continue
        claimed[name] = name
        plan.bundles.append(bundle)

    return plan
