#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from assetbuilder.classify import ASSET_KINDS
from assetbuilder.compiler import BuildResult
from assetbuilder.compiler import temporary_path
from assetbuilder.compiler import write_manifest
from assetbuilder.config import BuilderConfig
from assetbuilder.config import load_config
from assetbuilder.watcher import watch_assets


LOG_FORMAT = "[%(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compile an assets directory into a typed TypeScript manifest and rebuild it on change"
    )
    parser.add_argument("config", type=Path, help="JSON config with an 'assets' section")
    return parser.parse_args(argv)


def configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def print_summary(config: BuilderConfig, result: BuildResult) -> None:
    counts = result.kind_counts()
    print(f"wrote {config.output_path}")
    print(f"asset count     : {len(result.plan.entries) + len(result.plan.bundles)}")
    for kind in ASSET_KINDS:
        if counts[kind]:
            print(f"{kind.lower():<16}: {counts[kind]}")
    print(f"animations      : {len(result.plan.bundles)} ({result.frame_count} frames)")
    print(f"skipped files   : {len(result.plan.skipped)}")
    print(f"warnings        : {len(result.plan.warnings) + len(result.frame_warnings)}")


def rebuild(config: BuilderConfig) -> BuildResult:
    result = write_manifest(config)
    print_summary(config, result)
    return result


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging()

    config = load_config(args.config)
    if not config.assets_dir.is_dir():
        raise SystemExit(f"error: missing directory: {config.assets_dir}")

    try:
        watch_assets(
            config.assets_dir,
            lambda: rebuild(config),
            ignored_paths=(config.output_path, temporary_path(config.output_path)),
        )
    except KeyboardInterrupt:
        print("stopped watching")


if __name__ == "__main__":
    main()
