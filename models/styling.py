from __future__ import annotations

from typing import Final, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DEFAULT_FILL: Final = "#3388ff"
DEFAULT_OPACITY: Final = 0.4

# Outline is fixed in the export dialect
STROKE: Final = "black"
STROKE_WIDTH: Final = 1.5


class Model(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    def replace(self, **updates) -> Self:
        return self.model_copy(update=updates)


class Wire_Model(Model):
    """Model whose JSON form uses camelCase keys (isCurve, fillColor, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def wire_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
