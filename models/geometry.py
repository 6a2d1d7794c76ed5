"""Pure 2D helpers for edge proximity and handle hit-testing. No state."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import NamedTuple, Protocol


class XY(Protocol):
    @property
    def x(self) -> float: ...
    @property
    def y(self) -> float: ...


class Point(NamedTuple):
    x: float
    y: float


class Projection(NamedTuple):
    point: Point
    distance: float


class Edge_Hit(NamedTuple):
    insert_index: int
    point: Point
    distance: float


def round_half_up(v: float) -> int:
    """Round to the nearest int, halves toward +inf (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(v + 0.5)


def distance(a: XY, b: XY) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def project_point_to_segment(point: XY, a: XY, b: XY) -> Projection:
    """Closest point on segment [a, b] to `point`.

    Uses the parametric form a + t(b - a) with t clamped to [0, 1]. A
    degenerate segment (a == b) projects everything onto a.
    """
    dx, dy = b.x - a.x, b.y - a.y
    if dx == 0 and dy == 0:
        foot = Point(a.x, a.y)
        return Projection(foot, distance(point, foot))
    t = ((point.x - a.x) * dx + (point.y - a.y) * dy) / (dx * dx + dy * dy)
    t = max(0.0, min(1.0, t))
    foot = Point(a.x + t * dx, a.y + t * dy)
    return Projection(foot, distance(point, foot))


def _vertices_of(shape) -> Sequence[XY]:
    return shape.vertices if hasattr(shape, "vertices") else shape


def closest_edge(shape, point: XY) -> Edge_Hit | None:
    """Nearest edge of a closed contour to `point`.

    `shape` is a Region or any sequence of x/y points. Edge i joins vertex i
    and vertex (i + 1) mod n; the returned insert_index (i + 1) is where a new
    vertex goes to split that edge. Ties keep the lowest edge index. Returns
    None when there are fewer than two vertices.
    """
    pts = _vertices_of(shape)
    n = len(pts)
    if n < 2:
        return None
    best: Edge_Hit | None = None
    for i in range(n):
        proj = project_point_to_segment(point, pts[i], pts[(i + 1) % n])
        if best is None or proj.distance < best.distance:
            best = Edge_Hit(i + 1, proj.point, proj.distance)
    return best


def quad_point(p0: XY, c: XY, p1: XY, t: float) -> Point:
    u = 1.0 - t
    return Point(
        u * u * p0.x + 2 * u * t * c.x + t * t * p1.x,
        u * u * p0.y + 2 * u * t * c.y + t * t * p1.y,
    )


def outline(shape, steps: int = 8) -> list[Point]:
    """Closed contour as a polyline, sampling each curve segment `steps` times.

    A curve vertex bends the segment arriving from the previous vertex; the
    closing segment back to vertex 0 is always straight.
    """
    pts = _vertices_of(shape)
    out: list[Point] = []
    for idx, v in enumerate(pts):
        if idx > 0 and getattr(v, "is_curve", False):
            prev, ctrl = pts[idx - 1], Point(v.control_x, v.control_y)
            out.extend(quad_point(prev, ctrl, v, k / steps) for k in range(1, steps))
        out.append(Point(v.x, v.y))
    return out


def contains(shape, point: XY) -> bool:
    """Even-odd point-in-contour test against the flattened outline."""
    poly = outline(shape)
    n = len(poly)
    if n < 3:
        return False
    inside = False
    j = n - 1
    for i in range(n):
        a, b = poly[i], poly[j]
        if (a.y > point.y) != (b.y > point.y):
            cross_x = a.x + (point.y - a.y) * (b.x - a.x) / (b.y - a.y)
            if point.x < cross_x:
                inside = not inside
        j = i
    return inside


def nearest_vertex(shape, point: XY, radius: float) -> int | None:
    """Index of the closest vertex within `radius` of `point`, else None."""
    best_idx: int | None = None
    best_d = math.inf
    for idx, v in enumerate(_vertices_of(shape)):
        d = distance(point, v)
        if d <= radius and d < best_d:
            best_idx, best_d = idx, d
    return best_idx
