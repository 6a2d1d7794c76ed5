"""Unit tests for the pure geometry helpers in models/geometry.py."""

import math

import pytest

from models.geo import Region, Vertex
from models.geometry import (
    Point,
    closest_edge,
    contains,
    nearest_vertex,
    outline,
    project_point_to_segment,
    round_half_up,
)


class TestRoundHalfUp:
    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_negative_halves_round_toward_positive(self):
        assert round_half_up(-2.5) == -2

    def test_plain_values(self):
        assert round_half_up(2.4) == 2
        assert round_half_up(-2.6) == -3


class TestProjectPointToSegment:
    def test_foot_inside_segment(self):
        proj = project_point_to_segment(Point(5, 7), Point(0, 0), Point(10, 0))
        assert proj.point == Point(5, 0)
        assert proj.distance == 7

    def test_clamps_before_start(self):
        proj = project_point_to_segment(Point(-3, 4), Point(0, 0), Point(10, 0))
        assert proj.point == Point(0, 0)
        assert proj.distance == 5

    def test_clamps_after_end(self):
        proj = project_point_to_segment(Point(13, 4), Point(0, 0), Point(10, 0))
        assert proj.point == Point(10, 0)
        assert proj.distance == 5

    def test_degenerate_segment(self):
        proj = project_point_to_segment(Point(3, 4), Point(0, 0), Point(0, 0))
        assert proj.point == Point(0, 0)
        assert proj.distance == 5

    def test_diagonal(self):
        proj = project_point_to_segment(Point(0, 10), Point(0, 0), Point(10, 10))
        assert proj.point.x == pytest.approx(5)
        assert proj.point.y == pytest.approx(5)
        assert proj.distance == pytest.approx(math.sqrt(50))


class TestClosestEdge:
    @pytest.fixture
    def square(self):
        return [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]

    def test_insert_index_follows_edge(self, square):
        hit = closest_edge(square, Point(5, -1))
        assert hit.insert_index == 1
        assert hit.point == Point(5, 0)
        assert hit.distance == 1

    def test_closing_edge_inserts_at_end(self, square):
        hit = closest_edge(square, Point(-2, 5))
        assert hit.insert_index == 4
        assert hit.point == Point(0, 5)

    def test_tie_keeps_first_edge(self, square):
        # the corner (10, 0) is equidistant from edges 0 and 1
        hit = closest_edge(square, Point(12, -2))
        assert hit.insert_index == 1

    def test_accepts_region(self, square_region):
        hit = closest_edge(square_region, Point(30, 10))
        assert hit.insert_index == 1
        assert hit.distance == 0
        assert hit.point == Point(30, 10)

    def test_too_few_vertices(self):
        assert closest_edge([Point(1, 1)], Point(0, 0)) is None
        assert closest_edge([], Point(0, 0)) is None


class TestOutlineAndContains:
    def test_straight_outline_is_vertices(self, square_region):
        assert outline(square_region) == [Point(10, 10), Point(50, 10), Point(50, 50), Point(10, 50)]

    def test_curve_is_sampled(self, curved_region):
        pts = outline(curved_region, steps=4)
        # 1 start + 3 samples + curve end + last vertex
        assert len(pts) == 6
        assert pts[2] == Point(130, 10)

    def test_contains(self, square_region):
        assert contains(square_region, Point(30, 30))
        assert not contains(square_region, Point(60, 30))

    def test_contains_follows_curve(self):
        region = Region(
            id="Area_9",
            vertices=[
                Vertex(x=0, y=0),
                Vertex(x=100, y=0, is_curve=True, control_x=50, control_y=-100),
                Vertex(x=100, y=50),
                Vertex(x=0, y=50),
            ],
        )
        # above the chord but below the bulge
        assert contains(region, Point(50, -20))

    def test_degenerate_never_contains(self):
        assert not contains([Point(0, 0), Point(10, 10)], Point(5, 5))


class TestNearestVertex:
    def test_within_radius(self, square_region):
        assert nearest_vertex(square_region, Point(52, 48), 6) == 2

    def test_outside_radius(self, square_region):
        assert nearest_vertex(square_region, Point(30, 30), 6) is None
