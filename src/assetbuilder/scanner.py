from __future__ import annotations

import os
from pathlib import Path


def _raise_walk_error(error: OSError) -> None:
    raise error


def list_nested_files(root: Path) -> list[str]:
    if not root.is_dir():
        raise FileNotFoundError(f"missing assets directory: {root}")

    # os.walk reports unreadable directories through onerror; rglob skips them.
    relative_files: list[str] = []
    for dir_path, _dir_names, file_names in os.walk(root, onerror=_raise_walk_error):
        base = Path(dir_path)
        for file_name in file_names:
            path = base / file_name
            if path.is_file():
                relative_files.append(path.relative_to(root).as_posix())
    relative_files.sort()
    return relative_files
