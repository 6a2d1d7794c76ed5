"""Tests for the pan/zoom view transform (canvas/view.py)."""

import pytest

from canvas.view import View
from models.geometry import Point


@pytest.fixture
def view():
    v = View.fit(1000, 700)
    v.resize_screen(500, 350)
    return v


class TestView:
    def test_fit(self):
        v = View.fit(1000, 700)
        assert v.viewbox == "0 0 1000 700"
        assert v.scale == (1, 1)

    def test_screen_to_model(self, view):
        assert view.to_model(Point(250, 100)) == Point(500, 200)
        assert view.to_screen(Point(500, 200)) == Point(250, 100)

    def test_pan(self, view):
        view.pan_by(10, -5)
        assert (view.x, view.y) == (-20, 10)
        assert view.to_model(Point(10, -5)) == Point(0, 0)

    def test_zoom_in_keeps_anchor(self, view):
        anchor = Point(300, 300)
        screen = view.to_screen(anchor)
        view.zoom_at(anchor, 1 / 1.1)
        m = view.to_model(screen)
        assert m.x == pytest.approx(300)
        assert m.y == pytest.approx(300)
        assert view.w == pytest.approx(1000 / 1.1)

    def test_reset(self, view):
        view.pan_by(40, 40)
        view.zoom_at(Point(0, 0), 2)
        view.reset(640, 480)
        assert view.viewbox == "0 0 640 480"

    def test_bad_values(self, view):
        with pytest.raises(ValueError):
            view.zoom_at(Point(0, 0), 0)
        with pytest.raises(ValueError):
            view.resize_screen(0, 10)
