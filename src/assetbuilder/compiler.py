from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from assetbuilder.classify import ManifestPlan
from assetbuilder.classify import collect_manifest
from assetbuilder.config import BuilderConfig
from assetbuilder.emitter import render_manifest
from assetbuilder.frames import check_bundle_frames
from assetbuilder.scanner import list_nested_files


logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    plan: ManifestPlan
    text: str
    frame_warnings: list[str] = field(default_factory=list)

    def kind_counts(self) -> Counter[str]:
        return Counter(entry.kind for entry in self.plan.entries)

    @property
    def frame_count(self) -> int:
        return sum(len(bundle.frames) for bundle in self.plan.bundles)


def temporary_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".tmp")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = temporary_path(path)
    tmp_path.write_text(text, encoding="utf-8")
    tmp_path.replace(path)


def compile_assets(config: BuilderConfig) -> BuildResult:
    files = list_nested_files(config.assets_dir)
    plan = collect_manifest(config.assets_dir, files)
    text = render_manifest(plan, config_name=config.config_name)

    frame_warnings = check_bundle_frames(config.assets_dir, plan.bundles)
    for message in frame_warnings:
        logger.warning(message)

    return BuildResult(plan=plan, text=text, frame_warnings=frame_warnings)


def write_manifest(config: BuilderConfig) -> BuildResult:
    logger.info("Recompiling...")
    result = compile_assets(config)
    write_text(config.output_path, result.text)
    return result
