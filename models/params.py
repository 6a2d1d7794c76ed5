from pathlib import Path

from pydantic import Field, field_validator

from models.colour import normalise_colour
from models.geo import Opacity
from models.styling import DEFAULT_FILL, DEFAULT_OPACITY, STROKE, STROKE_WIDTH, Model

SCHEMA_VERSION = 1

# Distance (model units) under which a click splits the nearest edge
PROXIMITY_THRESHOLD = 28
HANDLE_RADIUS = 6


class Params(Model):
    """Editor defaults; persisted by disk.storage, never part of a scene."""

    width: int = Field(default=1000, gt=0)
    height: int = Field(default=700, gt=0)
    fill_colour: str = DEFAULT_FILL
    fill_opacity: Opacity = DEFAULT_OPACITY
    stroke_colour: str = STROKE
    stroke_width: float = Field(default=STROKE_WIDTH, gt=0)
    proximity_threshold: float = Field(default=PROXIMITY_THRESHOLD, gt=0)
    handle_radius: float = Field(default=HANDLE_RADIUS, gt=0)
    history_limit: int = Field(default=0, ge=0)
    zoom_step: float = Field(default=1.1, gt=1)
    include_background: bool = True
    output_file: Path = Path("regions.svg")
    version: int = Field(default=SCHEMA_VERSION)

    @field_validator("fill_colour", mode="before")
    @classmethod
    def _colour(cls, v):
        return normalise_colour(v) if isinstance(v, str) else v

    def profile_dump_json(self, *, indent: int = 4) -> str:
        return self.model_dump_json(indent=indent, exclude_none=True)
