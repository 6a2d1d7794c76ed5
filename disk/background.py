"""Turn an image file into a Background the scene can hold and export inline."""

from __future__ import annotations

import base64
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from models.geo import Background

NUM = re.compile(r"^\s*([0-9]*\.?[0-9]+)")

_MIME_BY_EXT = {
    "png": "image/png",
    "webp": "image/webp",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "bmp": "image/bmp",
    "gif": "image/gif",
    "svg": "image/svg+xml",
}


def data_uri(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def probe_wh(path: Path) -> tuple[int, int]:
    """Native pixel size of a raster image, or an SVG's width/height (viewBox fallback)."""
    if path.suffix[1:].lower() == "svg":
        root = ET.fromstring(path.read_text(encoding="utf-8"))

        def _num(s: str | None) -> float | None:
            m = NUM.match(s) if s else None
            return float(m.group(1)) if m else None

        wf, hf = _num(root.get("width")), _num(root.get("height"))
        if wf and hf:
            return round(wf), round(hf)
        vb = root.get("viewBox")
        if vb:
            _, _, vbw, vbh = (float(x) for x in vb.replace(",", " ").split())
            return max(1, round(vbw)), max(1, round(vbh))
        raise ValueError(f"{path} has no width/height or viewBox")
    try:
        with Image.open(path) as im:
            return im.size
    except UnidentifiedImageError as xcp:
        raise ValueError(f"Not a readable image: {path}") from xcp


def load_background(path: Path) -> Background:
    w, h = probe_wh(path)
    mime = _MIME_BY_EXT.get(path.suffix[1:].lower(), "application/octet-stream")
    return Background(image_data=data_uri(path.read_bytes(), mime), width=w, height=h)
