"""Region Model: sole owner of region and vertex data.

The model knows nothing about history. Callers capture a snapshot after each
operation that succeeds; every failing operation raises before mutating.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from enum import StrEnum

from pydantic import ValidationError

from models.errors import DuplicateId, IndexOutOfRange, InvalidState, WouldInvalidateRegion
from models.geo import MIN_VERTICES, Background, Canvas_Size, Region, Scene, Vertex
from models.geometry import XY, closest_edge
from models.params import PROXIMITY_THRESHOLD
from models.styling import DEFAULT_FILL, DEFAULT_OPACITY

log = logging.getLogger(__name__)

ID_PREFIX = "Area_"


class Finalize_Result(StrEnum):
    success = "success"
    cancelled = "cancelled"


class Region_Model:
    def __init__(self) -> None:
        self._regions: dict[str, Region] = {}
        self._open: Region | None = None
        self._counter = 1
        self._delete_listeners: list[Callable[[str], None]] = []

    # ---- queries ----
    @property
    def regions(self) -> tuple[Region, ...]:
        """Committed regions in contour-list order."""
        return tuple(self._regions.values())

    @property
    def open_region(self) -> Region | None:
        return self._open

    def ids(self) -> set[str]:
        ids = set(self._regions)
        if self._open is not None:
            ids.add(self._open.id)
        return ids

    def get(self, region_id: str) -> Region | None:
        if self._open is not None and self._open.id == region_id:
            return self._open
        return self._regions.get(region_id)

    def __contains__(self, region_id: object) -> bool:
        return region_id in self._regions

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions.values())

    def __len__(self) -> int:
        return len(self._regions)

    def add_delete_listener(self, fn: Callable[[str], None]) -> None:
        self._delete_listeners.append(fn)

    # ---- id allocation ----
    def _next_id(self) -> str:
        used = self.ids()
        while f"{ID_PREFIX}{self._counter}" in used:
            self._counter += 1
        rid = f"{ID_PREFIX}{self._counter}"
        self._counter += 1
        return rid

    def reset_ids(self) -> None:
        self._counter = 1

    # ---- construction ----
    def create_region(
        self,
        initial_point: XY,
        *,
        fill_color: str = DEFAULT_FILL,
        fill_opacity: float = DEFAULT_OPACITY,
    ) -> str:
        """Start a new region with one vertex and return its id.

        Only one region can be under construction at a time.
        """
        if self._open is not None:
            raise InvalidState(f"{self._open.id} is still under construction")
        rid = self._next_id()
        self._open = Region(
            id=rid,
            vertices=[Vertex.straight(initial_point)],
            fill_color=fill_color,
            fill_opacity=fill_opacity,
        )
        log.debug("Started %s at (%s, %s)", rid, initial_point.x, initial_point.y)
        return rid

    def _require_open(self, region_id: str) -> Region:
        if self._open is None or self._open.id != region_id:
            raise InvalidState(f"{region_id} is not under construction")
        return self._open

    def append_vertex(self, region_id: str, point: XY, is_curve: bool = False, control: XY | None = None) -> None:
        region = self._require_open(region_id)
        if is_curve:
            if control is None:
                raise InvalidState("curve vertex needs a control point")
            region.vertices.append(Vertex.curve(point, control))
        else:
            region.vertices.append(Vertex.straight(point))

    def pop_vertex(self, region_id: str) -> int:
        """Drop the last vertex of the open region; returns how many remain."""
        region = self._require_open(region_id)
        if region.vertices:
            region.vertices.pop()
        return len(region.vertices)

    def finalize_region(self, region_id: str) -> Finalize_Result:
        region = self._require_open(region_id)
        if len(region.vertices) < MIN_VERTICES:
            self.cancel_region(region_id)
            return Finalize_Result.cancelled
        self._regions[region.id] = region
        self._open = None
        log.info("Committed %s with %d vertices", region.id, len(region.vertices))
        return Finalize_Result.success

    def cancel_region(self, region_id: str) -> None:
        region = self._require_open(region_id)
        self._open = None
        log.debug("Discarded %s (%d vertices)", region.id, len(region.vertices))

    # ---- editing committed regions ----
    def _committed(self, region_id: str) -> Region:
        region = self._regions.get(region_id)
        if region is None:
            raise InvalidState(f"No committed region {region_id!r}")
        return region

    @staticmethod
    def _check_index(region: Region, index: int) -> None:
        if not 0 <= index < len(region.vertices):
            raise IndexOutOfRange(region.id, index, len(region.vertices))

    def move_vertex(self, region_id: str, index: int, new_point: XY) -> Vertex:
        region = self._committed(region_id)
        self._check_index(region, index)
        moved = region.vertices[index].with_xy(new_point)
        region.vertices[index] = moved
        return moved

    def set_vertex(self, region_id: str, index: int, vertex: Vertex) -> None:
        """Put back an exact vertex (used to undo an in-progress drag)."""
        region = self._committed(region_id)
        self._check_index(region, index)
        region.vertices[index] = vertex

    def remove_vertex(self, region_id: str, index: int) -> Vertex:
        region = self._committed(region_id)
        self._check_index(region, index)
        if len(region.vertices) - 1 < MIN_VERTICES:
            raise WouldInvalidateRegion(region_id, len(region.vertices))
        return region.vertices.pop(index)

    def insert_vertex_near(
        self, region_id: str, point: XY, proximity_threshold: float = PROXIMITY_THRESHOLD
    ) -> int | None:
        """Split the nearest edge at the projection of `point`.

        Returns the index of the new vertex, or None when no edge lies closer
        than `proximity_threshold`.
        """
        region = self._committed(region_id)
        hit = closest_edge(region, point)
        if hit is None or not hit.distance < proximity_threshold:
            return None
        region.vertices.insert(hit.insert_index, Vertex.straight(hit.point))
        return hit.insert_index

    def rename_region(self, old_id: str, new_id: str) -> None:
        region = self._committed(old_id)
        new_id = new_id.strip()
        if not new_id:
            raise InvalidState("Region id cannot be blank")
        if new_id == old_id:
            return
        if new_id in self.ids():
            raise DuplicateId(new_id)
        region.id = new_id
        # rebuild to keep the region in its original slot
        self._regions = {(new_id if k == old_id else k): v for k, v in self._regions.items()}
        log.info("Renamed %s -> %s", old_id, new_id)

    def delete_region(self, region_id: str) -> bool:
        if self._regions.pop(region_id, None) is None:
            return False
        log.info("Deleted %s", region_id)
        for fn in self._delete_listeners:
            fn(region_id)
        return True

    def set_style(
        self,
        region_id: str,
        *,
        fill_color: str | None = None,
        fill_opacity: float | None = None,
        label: str | None = None,
    ) -> None:
        """Partial style update; None leaves a field unchanged, '' clears the label."""
        region = self._committed(region_id)
        update = region.model_dump()
        if fill_color is not None:
            update["fill_color"] = fill_color
        if fill_opacity is not None:
            update["fill_opacity"] = max(0.0, min(1.0, float(fill_opacity)))
        if label is not None:
            update["label"] = label
        try:
            styled = Region.model_validate(update)
        except ValidationError as xcp:
            raise InvalidState(f"{region_id}: invalid style: {xcp.errors()[0]['msg']}") from xcp
        region.fill_color = styled.fill_color
        region.fill_opacity = styled.fill_opacity
        region.label = styled.label

    # ---- snapshots ----
    def snapshot(self, canvas_size: Canvas_Size, background: Background | None = None) -> Scene:
        """Deep copy of the committed regions; the open region is never included."""
        return Scene(
            regions=[r.model_copy(deep=True) for r in self._regions.values()],
            background=background,
            canvas_size=canvas_size,
        )

    def restore(self, scene: Scene, *, reset_ids: bool = False) -> None:
        """Replace all regions with copies of the scene's regions."""
        regions = {r.id: r.model_copy(deep=True) for r in scene.regions}
        self._regions = regions
        self._open = None
        if reset_ids:
            self.reset_ids()
        log.debug("Restored %d regions", len(regions))
