from __future__ import annotations

from collections import defaultdict
from pathlib import Path

from PIL import Image

from assetbuilder.classify import AnimationBundle


def probe_frame_size(path: Path) -> tuple[int, int] | None:
    # UnidentifiedImageError is an OSError.
    try:
        with Image.open(path) as image:
            return image.width, image.height
    except OSError:
        return None


def check_bundle_frames(assets_root: Path, bundles: list[AnimationBundle]) -> list[str]:
    """Report animations whose frames are unreadable or differ in pixel size."""
    warnings: list[str] = []
    for bundle in bundles:
        by_size: dict[tuple[int, int], list[str]] = defaultdict(list)
        for frame in bundle.ordered_paths():
            size = probe_frame_size(assets_root / frame)
            if size is None:
                warnings.append(f"animation '{bundle.name}': cannot read frame image {frame}")
                continue
            by_size[size].append(frame)

        if len(by_size) > 1:
            sizes = ", ".join(
                f"{width}x{height} ({len(frames)} frames)"
                for (width, height), frames in sorted(by_size.items())
            )
            warnings.append(f"animation '{bundle.name}': frames differ in size: {sizes}")
    return warnings
