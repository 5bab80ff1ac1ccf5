from __future__ import annotations

import json

from assetbuilder.classify import ASSET_KINDS
from assetbuilder.classify import KIND_ANIMATION
from assetbuilder.classify import KIND_TILE_WORLD
from assetbuilder.classify import ManifestPlan


LOADER_IMPORT_PATH = "../library/typesafe_loader"
EMPTY_PLACEHOLDER = "// No files found!"


def ts_string(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def string_union(name: str, values: list[str]) -> list[str]:
    lines = [f"export type {name} ="]
    if not values:
        lines.append("  | void;")
        return lines
    for value in values[:-1]:
        lines.append(f"  | {ts_string(value)}")
    lines.append(f"  | {ts_string(values[-1])};")
    return lines


def render_manifest(plan: ManifestPlan, config_name: str = "config.json") -> str:
    """Render the generated TypeScript module for ``plan``.

    Output depends only on the plan, so an unchanged assets tree always
    produces byte-identical text.
    """
    lines = [
        f"// THIS FILE IS AUTOGENERATED from the parameters in {config_name}. Do not edit it.",
        "// If you want to change something about how it's generated, look at assetbuilder/emitter.py.",
        "",
        f"import {{ TypesafeLoader }} from {ts_string(LOADER_IMPORT_PATH)};",
        "",
    ]
    lines.extend(string_union("AssetType", list(ASSET_KINDS)))
    lines.append("")
    lines.extend(string_union("AssetName", plan.names()))
    lines.append("")
    lines.extend(string_union("AssetPath", plan.paths()))
    lines.append("")
    lines.append("export const AssetsToLoad = {")

    if plan.is_empty:
        lines.append(f"  {EMPTY_PLACEHOLDER}")

    if plan.entries:
        name_width = max(len(ts_string(entry.name)) for entry in plan.entries)
        path_width = max(len(ts_string(entry.path)) for entry in plan.entries)
        kind_width = len(ts_string(KIND_TILE_WORLD))
        for entry in plan.entries:
            name = ts_string(entry.name).ljust(name_width)
            kind = ts_string(entry.kind).ljust(kind_width)
            path = ts_string(entry.path).ljust(path_width)
            lines.append(f"  {name}: {{ type: {kind} as const, path: {path} }},")

    if plan.bundles:
        if plan.entries:
            lines.append("")
        lines.append("  /* Animations */")
        lines.append("")
        for bundle in plan.bundles:
            lines.append(f"  {ts_string(bundle.name)}: {{")
            lines.append(f"    type: {ts_string(KIND_ANIMATION)} as const,")
            lines.append("    paths: [")
            for frame in bundle.ordered_paths():
                lines.append(f"      {ts_string(frame)},")
            lines.append("    ],")
            lines.append("  },")

    lines.append("};")
    lines.append("")
    lines.append("export const Assets = new TypesafeLoader(AssetsToLoad);")
    return "\n".join(lines) + "\n"
