"""Tests for the SVG export dialect and the Exporter dispatch (disk/export.py)."""

import xml.etree.ElementTree as ET

import pytest
from PIL import Image

from disk.export import SVG_NS, XLINK_NS, Exporter, to_export_markup
from disk.formats import Formats
from models.geo import Canvas_Size, Region, Scene, Vertex


def _markup(scene, background=None):
    return to_export_markup(scene, scene.canvas_size.width, scene.canvas_size.height, background)


class TestMarkup:
    def test_square_polygon(self, scene):
        svg = _markup(scene)
        assert (
            '<polygon id="Area_1" points="10,10 50,10 50,50 10,50" fill="#ff0000" '
            'fill-opacity="0.5" stroke="black" stroke-width="1.5"/>'
        ) in svg

    def test_curved_path(self, scene):
        root = ET.fromstring(_markup(scene))
        path = root.find(f"{{{SVG_NS}}}path")
        assert path.get("id") == "Area_2"
        d = path.get("d").split(" ")
        assert d[0] == "M"
        assert path.get("d") == "M 100 20 Q 130 0 160 20 L 160 80 Z"
        # one command per later vertex plus the closing Z
        assert sum(tok in ("L", "Q") for tok in d) == 2
        assert d[-1] == "Z"

    def test_label_is_escaped(self, scene):
        svg = _markup(scene)
        assert 'data-label="Hall &amp; &lt;Lobby&gt;"' in svg
        root = ET.fromstring(svg)
        assert root.find(f"{{{SVG_NS}}}path").get("data-label") == "Hall & <Lobby>"

    def test_id_is_escaped(self, square_region):
        scene = Scene(regions=[square_region.replace(id='A"1')], canvas_size=Canvas_Size(width=10, height=10))
        svg = _markup(scene)
        assert 'id="A&quot;1"' in svg
        ET.fromstring(svg)

    def test_root_without_background(self, scene):
        root = ET.fromstring(_markup(scene))
        assert root.tag == f"{{{SVG_NS}}}svg"
        assert (root.get("width"), root.get("height"), root.get("viewBox")) == ("200", "100", "0 0 200 100")
        assert root.find(f"{{{SVG_NS}}}image") is None

    def test_background_sets_size(self, scene, background):
        svg = _markup(scene, background)
        root = ET.fromstring(svg)
        assert (root.get("width"), root.get("height"), root.get("viewBox")) == ("640", "480", "0 0 640 480")
        children = list(root)
        image = children[0]
        assert image.tag == f"{{{SVG_NS}}}image"
        assert image.get("id") == "bgImage"
        assert image.get(f"{{{XLINK_NS}}}href") == background.image_data
        assert (image.get("width"), image.get("height")) == ("640", "480")

    def test_region_order_kept(self, scene):
        root = ET.fromstring(_markup(scene))
        assert [el.get("id") for el in root] == ["Area_1", "Area_2"]

    def test_no_transforms_or_styles(self, scene, background):
        svg = _markup(scene, background)
        for word in ("transform", "<style", "<script", "class="):
            assert word not in svg

    def test_empty_scene(self):
        svg = _markup(Scene(canvas_size=Canvas_Size(width=5, height=5)))
        assert svg.endswith("</svg>")
        assert len(ET.fromstring(svg)) == 0

    def test_custom_stroke(self, scene):
        svg = to_export_markup(scene, 200, 100, stroke="#333333", stroke_width=2)
        assert 'stroke="#333333" stroke-width="2"' in svg

    def test_fractional_opacity_trimmed(self, square_region):
        region = Region(id="x", vertices=square_region.vertices, fill_opacity=0.125)
        svg = _markup(Scene(regions=[region], canvas_size=Canvas_Size(width=10, height=10)))
        assert 'fill-opacity="0.125"' in svg


class TestExporter:
    def test_dispatch_table(self):
        assert set(Exporter.supported) == set(Formats)

    def test_svg_file(self, scene, tmp_path):
        out = Exporter.output(scene, tmp_path / "plan.svg")
        assert out.read_text(encoding="utf-8") == _markup(scene)

    def test_svg_without_background(self, scene, background, tmp_path):
        with_bg = scene.replace(background=background)
        out = Exporter.output(with_bg, tmp_path / "plan.svg", include_background=False)
        text = out.read_text(encoding="utf-8")
        assert "bgImage" not in text
        assert 'width="200"' in text

    @pytest.mark.parametrize("suffix", [".png", ".webp"])
    def test_raster_has_document_size(self, scene, tmp_path, suffix):
        out = Exporter.output(scene, tmp_path / f"plan{suffix}")
        with Image.open(out) as im:
            assert im.size == (200, 100)

    def test_unsupported_suffix(self, scene, tmp_path):
        with pytest.raises(ValueError):
            Exporter.output(scene, tmp_path / "plan.gif")


class TestFormats:
    def test_check(self, tmp_path):
        assert Formats.check(tmp_path / "a.SVG") is Formats.svg
        assert Formats.check(tmp_path / "a.txt") is None
        assert Formats.webp.is_raster
        assert not Formats.svg.is_raster


def test_vertex_count_matches_points(square_region):
    region = Region(
        id="tri", vertices=[Vertex(x=0, y=0), Vertex(x=9, y=0), Vertex(x=0, y=9)], fill_color="#123456"
    )
    svg = _markup(Scene(regions=[square_region, region], canvas_size=Canvas_Size(width=10, height=10)))
    root = ET.fromstring(svg)
    counts = [len(el.get("points").split(" ")) for el in root]
    assert counts == [4, 3]
