from __future__ import annotations

import math
from typing import Annotated, Self

from pydantic import ConfigDict, Field, PositiveInt, field_validator, model_validator

from models.colour import normalise_colour
from models.geometry import XY, Point, round_half_up
from models.styling import DEFAULT_FILL, DEFAULT_OPACITY, Wire_Model

MIN_VERTICES = 3

Opacity = Annotated[float, Field(ge=0.0, le=1.0)]


class Vertex(Wire_Model):
    """Contour point; a curve vertex bends the segment arriving at it through (control_x, control_y)."""

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    is_curve: bool = False
    control_x: int | None = None
    control_y: int | None = None

    @field_validator("x", "y", "control_x", "control_y", mode="before")
    @classmethod
    def _round(cls, v):
        if isinstance(v, float):
            if not math.isfinite(v):
                raise ValueError(f"coordinate must be finite, got {v}")
            return round_half_up(v)
        return v

    @model_validator(mode="after")
    def _check(self):
        has_x, has_y = self.control_x is not None, self.control_y is not None
        if has_x != has_y:
            raise ValueError("control_x and control_y must be given together")
        if has_x != self.is_curve:
            raise ValueError("control point required for, and only for, curve vertices")
        return self

    @classmethod
    def straight(cls, p: XY) -> "Vertex":
        return cls(x=p.x, y=p.y)

    @classmethod
    def curve(cls, p: XY, control: XY) -> "Vertex":
        return cls(x=p.x, y=p.y, is_curve=True, control_x=control.x, control_y=control.y)

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    @property
    def control(self) -> Point | None:
        if self.control_x is None or self.control_y is None:
            return None
        return Point(self.control_x, self.control_y)

    def with_xy(self, p: XY) -> Self:
        # control point stays where it was
        return type(self)(
            x=p.x, y=p.y, is_curve=self.is_curve, control_x=self.control_x, control_y=self.control_y
        )


class Region(Wire_Model):
    id: str = Field(min_length=1)
    vertices: list[Vertex] = Field(default_factory=list)
    fill_color: str = DEFAULT_FILL
    fill_opacity: Opacity = DEFAULT_OPACITY
    label: str | None = None

    @field_validator("fill_color", mode="before")
    @classmethod
    def _colour(cls, v):
        return normalise_colour(v) if isinstance(v, str) else v

    @field_validator("label")
    @classmethod
    def _blank_label(cls, v: str | None) -> str | None:
        return v or None

    @property
    def is_curved(self) -> bool:
        return any(v.is_curve for v in self.vertices)

    @property
    def is_closed(self) -> bool:
        return len(self.vertices) >= MIN_VERTICES


class Background(Wire_Model):
    """Reference image already materialised as an inline href (usually a data: URI)."""

    model_config = ConfigDict(frozen=True)

    image_data: str = Field(min_length=1)
    width: PositiveInt
    height: PositiveInt


class Canvas_Size(Wire_Model):
    model_config = ConfigDict(frozen=True)

    width: PositiveInt
    height: PositiveInt


class Scene(Wire_Model):
    """Self-contained copy of everything undo/redo and project files need."""

    regions: list[Region] = Field(default_factory=list)
    background: Background | None = None
    canvas_size: Canvas_Size

    @model_validator(mode="after")
    def _check(self):
        seen: set[str] = set()
        for r in self.regions:
            if r.id in seen:
                raise ValueError(f"duplicate region id {r.id!r}")
            seen.add(r.id)
            if not r.is_closed:
                raise ValueError(f"region {r.id!r} has {len(r.vertices)} vertices (< {MIN_VERTICES})")
        return self

    def region(self, region_id: str) -> Region | None:
        return next((r for r in self.regions if r.id == region_id), None)

    @property
    def size(self) -> tuple[int, int]:
        """Native coordinate space: the background's pixels when present."""
        if self.background is not None:
            return self.background.width, self.background.height
        return self.canvas_size.width, self.canvas_size.height
