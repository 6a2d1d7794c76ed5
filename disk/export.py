from __future__ import annotations

import io
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

import cairosvg
from PIL import Image

from disk.formats import Formats
from models.geo import Background, Region, Scene, Vertex
from models.styling import STROKE, STROKE_WIDTH

log = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
BG_ID = "bgImage"

# -----------------------------------------------------------------------------
# Shared helpers
# -----------------------------------------------------------------------------

_XML_ESCAPES = (("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"), ('"', "&quot;"), ("'", "&apos;"))


def _escape(value: object) -> str:
    text = str(value)
    for raw, ent in _XML_ESCAPES:
        text = text.replace(raw, ent)
    return text


def _num(v: float) -> str:
    """Integral values without a decimal point, others trimmed to 3 places."""
    if float(v).is_integer():
        return str(int(v))
    return f"{v:.3f}".rstrip("0").rstrip(".")


def _points_attr(vertices: Sequence[Vertex]) -> str:
    return " ".join(f"{v.x},{v.y}" for v in vertices)


def _path_d(vertices: Sequence[Vertex]) -> str:
    """M at vertex 0, one L/Q token per later vertex, then Z.

    A curve vertex uses its own control point to bend the segment that
    arrives at it from the previous vertex.
    """
    first, *rest = vertices
    parts = [f"M {first.x} {first.y}"]
    for v in rest:
        if v.is_curve:
            parts.append(f"Q {v.control_x} {v.control_y} {v.x} {v.y}")
        else:
            parts.append(f"L {v.x} {v.y}")
    parts.append("Z")
    return " ".join(parts)


def _svg_region(region: Region, stroke: str, stroke_width: float) -> str | None:
    if not region.is_closed:
        return None
    if region.is_curved:
        tag, geom = "path", f'd="{_escape(_path_d(region.vertices))}"'
    else:
        tag, geom = "polygon", f'points="{_escape(_points_attr(region.vertices))}"'
    label = f' data-label="{_escape(region.label)}"' if region.label else ""
    return (
        f'<{tag} id="{_escape(region.id)}" {geom} '
        f'fill="{_escape(region.fill_color)}" fill-opacity="{_num(region.fill_opacity)}" '
        f'stroke="{_escape(stroke)}" stroke-width="{_num(stroke_width)}"{label}/>'
    )


def _svg_background(bg: Background) -> str:
    # preserveAspectRatio="none": image pixels and region coordinates coincide 1:1
    return (
        f'<image id="{BG_ID}" x="0" y="0" width="{bg.width}" height="{bg.height}" '
        f'preserveAspectRatio="none" xlink:href="{_escape(bg.image_data)}"/>'
    )


def to_export_markup(
    scene: Scene,
    canonical_width: int,
    canonical_height: int,
    background: Background | None = None,
    *,
    stroke: str = STROKE,
    stroke_width: float = STROKE_WIDTH,
) -> str:
    """Render the scene as the one canonical SVG dialect dashboard hosts accept.

    With a background the document takes the image's native size, so that
    region coordinates land on image pixels without any transform. No
    transforms, stylesheets or scripts are ever emitted.
    """
    if background is not None:
        W, H = background.width, background.height
    else:
        W, H = canonical_width, canonical_height
    parts: list[str] = [
        f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}" '
        f'width="{_num(W)}" height="{_num(H)}" viewBox="0 0 {_num(W)} {_num(H)}">'
    ]
    if background is not None:
        parts.append(_svg_background(background))
    for region in scene.regions:
        el = _svg_region(region, stroke, stroke_width)
        if el is None:
            log.warning("Skipping %s: fewer than 3 vertices", region.id)
            continue
        parts.append(el)
    parts.append("</svg>")
    return "\n".join(parts)


# -----------------------------------------------------------------------------
# Exporter
# -----------------------------------------------------------------------------


class Exporter:
    """
    Public API:
        - Exporter.output(scene, path, ...) → Path
            Dispatches based on path suffix (.svg, .png, .webp)
    """

    supported: dict[Formats, Callable[..., Path]] = {}

    @classmethod
    def output(
        cls,
        scene: Scene,
        path: Path,
        *,
        include_background: bool = True,
        stroke: str = STROKE,
        stroke_width: float = STROKE_WIDTH,
    ) -> Path:
        fmt = Formats.check(path)
        func = cls.supported.get(fmt) if fmt else None
        if not fmt or not func:
            raise ValueError(f"Unsupported output type: {path.suffix}")
        svg_text = to_export_markup(
            scene,
            scene.canvas_size.width,
            scene.canvas_size.height,
            scene.background if include_background else None,
            stroke=stroke,
            stroke_width=stroke_width,
        )
        out = func(svg_text, path)
        log.info("Exported %d regions to %s", len(scene.regions), out)
        return out

    @classmethod
    def match_supported(cls) -> dict[Formats, Callable[..., Path]]:
        """Build the dispatch table from Formats → handler methods."""
        sups: dict[Formats, Callable[..., Path]] = {}
        for fmt in Formats:
            handler = getattr(cls, fmt.name, None)
            if not callable(handler):
                raise NotImplementedError(f"Exporter missing handler for '{fmt.name}'")
            sups[fmt] = handler
        cls.supported = sups
        return sups

    # ---------------- Public handlers ----------------
    @staticmethod
    def svg(svg_text: str, path: Path) -> Path:
        path.write_text(svg_text, encoding="utf-8")
        return path

    @staticmethod
    def png(svg_text: str, path: Path) -> Path:
        path.write_bytes(rasterise(svg_text, Formats.png))
        return path

    @staticmethod
    def webp(svg_text: str, path: Path) -> Path:
        path.write_bytes(rasterise(svg_text, Formats.webp))
        return path


# -----------------------------------------------------------------------------
# SVG → raster
# -----------------------------------------------------------------------------


def rasterise(svg_text: str, fmt: Formats) -> bytes:
    """Preview raster of the export markup at its own width/height."""
    png = cairosvg.svg2png(bytestring=svg_text.encode("utf-8"))
    if not isinstance(png, bytes):
        raise RuntimeError("cairosvg returned no PNG data")
    if fmt is Formats.png:
        return png
    if fmt is Formats.webp:
        img = Image.open(io.BytesIO(png)).convert("RGBA")
        buf = io.BytesIO()
        img.save(buf, format=fmt.upper(), lossless=True, method=6)
        return buf.getvalue()
    raise ValueError(f"Not a raster format: {fmt}")


# Build the dispatch table immediately on import
Exporter.match_supported()
