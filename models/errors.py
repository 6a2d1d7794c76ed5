"""Error taxonomy for region editing and project decoding.

All of these are local, recoverable conditions. Operations raise them before
mutating anything, so a caught error always leaves the scene as it was.
"""

from __future__ import annotations


class Region_Error(ValueError):
    """Base class for every editing/decoding failure."""


class InvalidState(Region_Error):
    """Operation requested against a region not in the expected lifecycle phase."""


class IndexOutOfRange(Region_Error, IndexError):
    """Vertex index outside [0, count)."""

    def __init__(self, region_id: str, index: int, count: int) -> None:
        super().__init__(f"{region_id}: vertex index {index} outside [0, {count})")
        self.region_id = region_id
        self.index = index
        self.count = count


class WouldInvalidateRegion(Region_Error):
    """Removing the vertex would leave fewer than three."""

    def __init__(self, region_id: str, count: int) -> None:
        super().__init__(f"{region_id}: removing a vertex would leave {count - 1} (< 3)")
        self.region_id = region_id
        self.count = count


class DuplicateId(Region_Error):
    """Region id already taken by another region."""

    def __init__(self, region_id: str) -> None:
        super().__init__(f"Region id already exists: {region_id}")
        self.region_id = region_id


class MalformedEncoding(Region_Error):
    """Project text could not be decoded into a scene."""
