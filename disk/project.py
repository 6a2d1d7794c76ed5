"""Project files: lossless JSON encoding of a Scene.

Older project files written by the browser editor used different keys
(`points`/`curve`/`cx`/`cy`, `color`/`opacity`/`field`, `bg.href`,
`canvas.w/h`); they are migrated on read.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from models.errors import MalformedEncoding
from models.geo import Scene
from models.params import Params
from models.version import get_app_version

log = logging.getLogger(__name__)

PROJECT_VERSION = 1


def to_project_encoding(scene: Scene) -> str:
    payload = {"version": PROJECT_VERSION, "appVersion": get_app_version(), **scene.wire_dict()}
    return json.dumps(payload, indent=2)


def parse_project_encoding(text: str | bytes, *, defaults: Params | None = None) -> Scene:
    """Decode project text into a Scene.

    Missing optional style fields take the caller's defaults. Anything that
    cannot be decoded raises MalformedEncoding; nothing is partially applied.
    """
    defaults = defaults or Params()
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as xcp:
        raise MalformedEncoding(f"Project is not valid JSON: {xcp}") from xcp
    if not isinstance(raw, dict):
        raise MalformedEncoding("Project root must be an object")

    try:
        v = int(raw.get("version", 0))
    except (TypeError, ValueError) as xcp:
        raise MalformedEncoding(f"Bad project version: {raw.get('version')!r}") from xcp
    try:
        if v != PROJECT_VERSION:
            raw = _migrate(raw, v)
        return Scene.model_validate(_with_defaults(raw, defaults))
    except (ValidationError, TypeError) as xcp:
        raise MalformedEncoding(f"Invalid project: {xcp}") from xcp


def save_project(scene: Scene, path: Path) -> Path:
    path.write_text(to_project_encoding(scene), encoding="utf-8")
    log.info("Saved project %s (%d regions)", path, len(scene.regions))
    return path


def load_project(path: Path, *, defaults: Params | None = None) -> Scene:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as xcp:
        raise MalformedEncoding(f"{path} is not UTF-8 text") from xcp
    scene = parse_project_encoding(text, defaults=defaults)
    log.info("Loaded project %s (%d regions)", path, len(scene.regions))
    return scene


# -----------------------------------------------------------------------------
# Defaults / migration
# -----------------------------------------------------------------------------


def _with_defaults(raw: dict[str, Any], defaults: Params) -> dict[str, Any]:
    dic = dict(raw)
    regions = dic.get("regions") or []
    if isinstance(regions, list):
        dic["regions"] = [_region_defaults(r, defaults) if isinstance(r, dict) else r for r in regions]
    if dic.get("canvasSize") is None:
        bg = dic.get("background")
        if isinstance(bg, dict) and bg.get("width") and bg.get("height"):
            dic["canvasSize"] = {"width": bg["width"], "height": bg["height"]}
        else:
            dic["canvasSize"] = {"width": defaults.width, "height": defaults.height}
    return dic


def _region_defaults(region: dict[str, Any], defaults: Params) -> dict[str, Any]:
    reg = dict(region)
    if reg.get("fillColor") is None:
        reg["fillColor"] = defaults.fill_colour
    if reg.get("fillOpacity") is None:
        reg["fillOpacity"] = defaults.fill_opacity
    return reg


def _migrate(data: dict[str, Any], from_version: int) -> dict[str, Any]:
    if from_version > PROJECT_VERSION:
        raise MalformedEncoding(f"Project version {from_version} is newer than supported ({PROJECT_VERSION})")
    log.info("Migrating project from version %d", from_version)
    dic = dict(data)
    dic["version"] = PROJECT_VERSION

    regions = dic.get("regions")
    if isinstance(regions, list):
        dic["regions"] = [_migrate_region(r) if isinstance(r, dict) else r for r in regions]

    bg = dic.pop("bg", None)
    if isinstance(bg, dict) and "background" not in dic:
        dic["background"] = {"imageData": bg.get("href"), "width": bg.get("width"), "height": bg.get("height")}

    canvas = dic.pop("canvas", None)
    if isinstance(canvas, dict) and canvas.get("w") and canvas.get("h") and "canvasSize" not in dic:
        dic["canvasSize"] = {"width": _whole(canvas["w"]), "height": _whole(canvas["h"])}
    return dic


def _whole(v: Any) -> Any:
    # non-finite values pass through for validation to reject
    return round(v) if isinstance(v, float) and math.isfinite(v) else v


def _migrate_region(region: dict[str, Any]) -> dict[str, Any]:
    reg = dict(region)
    if "vertices" not in reg and isinstance(reg.get("points"), list):
        reg["vertices"] = [_migrate_vertex(p) if isinstance(p, dict) else p for p in reg.pop("points")]
    for old, new in (("color", "fillColor"), ("opacity", "fillOpacity"), ("field", "label")):
        if old in reg and new not in reg:
            reg[new] = reg.pop(old)
    return reg


def _migrate_vertex(p: dict[str, Any]) -> dict[str, Any]:
    # a curve flag without both control coordinates was drawn as a straight segment
    curve = bool(p.get("curve")) and p.get("cx") is not None and p.get("cy") is not None
    out: dict[str, Any] = {"x": p.get("x"), "y": p.get("y"), "isCurve": curve}
    if curve:
        out["controlX"], out["controlY"] = p["cx"], p["cy"]
    return out
