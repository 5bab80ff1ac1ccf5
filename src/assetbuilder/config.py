from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path


REQUIRED_KEYS = ("assetsPath", "compiledAssetsFile")


@dataclass(frozen=True)
class BuilderConfig:
    config_path: Path
    assets_dir: Path
    output_path: Path

    @property
    def config_name(self) -> str:
        return self.config_path.name


def load_config(config_path: Path) -> BuilderConfig:
    """Read the ``assets`` section of a JSON config.

    Paths in the config are relative to the directory holding the config file.
    """
    if not config_path.is_file():
        raise SystemExit(f"error: missing config file: {config_path}")

    data = json.loads(config_path.read_text(encoding="utf-8"))
    section = data.get("assets") if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise ValueError(f"Config missing 'assets' section: {config_path}")

    missing = [key for key in REQUIRED_KEYS if not isinstance(section.get(key), str)]
    if missing:
        raise ValueError(f"Config 'assets' section missing required keys: {missing}")

    base_dir = config_path.parent
    return BuilderConfig(
        config_path=config_path,
        assets_dir=base_dir / section["assetsPath"],
        output_path=base_dir / section["compiledAssetsFile"],
    )
