"""View transform (pan/zoom) between screen pixels and model coordinates.

Only the on-screen viewBox moves. Stored and exported coordinates are always
model coordinates, so nothing here ever touches region data.
"""

from __future__ import annotations

from dataclasses import dataclass

from models.geometry import XY, Point


@dataclass(slots=True)
class View:
    """Visible model rectangle (x, y, w, h) mapped onto a screen of screen_w x screen_h."""

    w: float
    h: float
    screen_w: float
    screen_h: float
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def fit(cls, width: float, height: float) -> "View":
        return cls(w=width, h=height, screen_w=width, screen_h=height)

    @property
    def viewbox(self) -> str:
        return f"{self.x:g} {self.y:g} {self.w:g} {self.h:g}"

    @property
    def scale(self) -> tuple[float, float]:
        """Model units per screen pixel on each axis."""
        return self.w / self.screen_w, self.h / self.screen_h

    def reset(self, width: float, height: float) -> None:
        self.x, self.y, self.w, self.h = 0.0, 0.0, width, height

    def resize_screen(self, screen_w: float, screen_h: float) -> None:
        if screen_w <= 0 or screen_h <= 0:
            raise ValueError(f"Screen size must be positive, got {screen_w}x{screen_h}")
        self.screen_w, self.screen_h = screen_w, screen_h

    def to_model(self, screen: XY) -> Point:
        sx, sy = self.scale
        return Point(self.x + screen.x * sx, self.y + screen.y * sy)

    def to_screen(self, model: XY) -> Point:
        sx, sy = self.scale
        return Point((model.x - self.x) / sx, (model.y - self.y) / sy)

    def pan_by(self, dx_screen: float, dy_screen: float) -> None:
        """Drag the content by a screen-pixel delta."""
        sx, sy = self.scale
        self.x -= dx_screen * sx
        self.y -= dy_screen * sy

    def zoom_at(self, model: XY, factor: float) -> None:
        """Scale the visible rectangle by `factor` keeping `model` fixed on screen.

        factor > 1 zooms out, < 1 zooms in.
        """
        if factor <= 0:
            raise ValueError(f"Zoom factor must be positive, got {factor}")
        self.x = model.x - (model.x - self.x) * factor
        self.y = model.y - (model.y - self.y) * factor
        self.w *= factor
        self.h *= factor
