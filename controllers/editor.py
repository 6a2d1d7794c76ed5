"""EditorContext: one explicit value holding model, session, history and view.

Every user intent arrives here (already converted to model coordinates by the
host, see `to_model`). Each committed edit captures exactly one history entry;
transient work (a shape being drawn, a vertex drag, a pan) is never captured
until it settles.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from canvas.view import View
from controllers.history import History
from controllers.session import (
    DraggingVertex,
    Drawing,
    Edit_Session,
    Idle,
    Intent,
    Mode,
    Panning,
    Selecting,
)
from disk.export import Exporter, to_export_markup
from disk.project import load_project, parse_project_encoding, save_project, to_project_encoding
from models.errors import InvalidState, WouldInvalidateRegion
from models.geo import Background, Canvas_Size, Scene
from models.geometry import XY, Edge_Hit, Point, closest_edge, contains, nearest_vertex
from models.params import Params
from models.regions import Finalize_Result, Region_Model

log = logging.getLogger(__name__)


class EditorContext:
    def __init__(
        self,
        params: Params | None = None,
        *,
        mode: Mode = Mode.creating_straight,
        on_history_change: Callable[[int, int], None] | None = None,
    ) -> None:
        self.params = params or Params()
        self.model = Region_Model()
        self.session = Edit_Session(mode)
        self.history = History(limit=self.params.history_limit, on_change=on_history_change)
        self.canvas_size = Canvas_Size(width=self.params.width, height=self.params.height)
        self.background: Background | None = None
        self.view = View.fit(self.params.width, self.params.height)
        self.dirty = False
        self._pan_last: Point | None = None

        self.model.add_delete_listener(self.session.on_region_deleted)
        # baseline so the first edit can be undone
        self.history.capture(self.snapshot())

    # ---- snapshots ----
    @property
    def size(self) -> tuple[int, int]:
        if self.background is not None:
            return self.background.width, self.background.height
        return self.canvas_size.width, self.canvas_size.height

    def snapshot(self) -> Scene:
        return self.model.snapshot(self.canvas_size, self.background)

    def capture(self) -> None:
        self.history.capture(self.snapshot())
        self.dirty = True

    def _settle(self) -> None:
        """Abandon any transient interaction without capturing."""
        state = self.session.state
        if isinstance(state, Panning):
            self.end_pan()
            state = self.session.state
        if isinstance(state, Drawing):
            self.cancel()
        elif isinstance(state, DraggingVertex):
            self.abort_drag()

    def restore(self, scene: Scene, *, reset_ids: bool = False) -> None:
        """Rebuild the live model from a snapshot; never captures."""
        self._settle()
        old_size = self.size
        self.model.restore(scene, reset_ids=reset_ids)
        self.background = scene.background
        self.canvas_size = scene.canvas_size
        if self.size != old_size:
            self.view.reset(*self.size)
        if self.session.selected_id is not None and self.session.selected_id not in self.model:
            self.session.clear_selection()

    # ---- modes ----
    def set_mode(self, mode: Mode) -> None:
        self._settle()
        self.session.mode = mode
        self.session.clear_selection()
        if mode is Mode.selecting:
            self.session.transition(Intent.select_tool, Selecting())
        else:
            self.session.transition(Intent.draw_tool, Idle())

    # ---- drawing ----
    def begin_shape(self, point: XY) -> str:
        if not self.session.mode.drawing:
            raise InvalidState(f"Cannot draw in {self.session.mode} mode")
        if not self.session.can(Intent.begin_shape):
            raise InvalidState(f"Cannot {Intent.begin_shape} while {self.session.kind}")
        rid = self.model.create_region(
            point, fill_color=self.params.fill_colour, fill_opacity=self.params.fill_opacity
        )
        self.session.clear_selection()
        self.session.transition(Intent.begin_shape, Drawing(rid))
        return rid

    def _drawing_id(self) -> str:
        rid = self.session.drawing_id
        if rid is None:
            raise InvalidState(f"Not drawing (state: {self.session.kind})")
        return rid

    def add_point(self, point: XY, control: XY | None = None) -> None:
        """Append a vertex; in curved mode a control point makes it a curve vertex."""
        rid = self._drawing_id()
        curve = self.session.mode is Mode.creating_curved and control is not None
        self.model.append_vertex(rid, point, is_curve=curve, control=control if curve else None)
        self.session.transition(Intent.add_point, Drawing(rid))

    def click(self, point: XY, control: XY | None = None) -> str:
        """Pointer press while drawing: starts a shape or extends the current one."""
        if self.session.drawing_id is None:
            return self.begin_shape(point)
        self.add_point(point, control)
        return self._drawing_id()

    def finalize(self) -> Finalize_Result:
        rid = self._drawing_id()
        result = self.model.finalize_region(rid)
        self.session.transition(Intent.finalize, Idle())
        if result is Finalize_Result.success:
            self.capture()
        else:
            log.info("Discarded %s: fewer than 3 vertices", rid)
        return result

    def cancel(self) -> None:
        rid = self._drawing_id()
        self.model.cancel_region(rid)
        self.session.transition(Intent.cancel, Idle())

    def back(self) -> int:
        """Escape/back while drawing: drop the last vertex, cancelling when none remain."""
        rid = self._drawing_id()
        remaining = self.model.pop_vertex(rid)
        if remaining == 0:
            self.model.cancel_region(rid)
            self.session.transition(Intent.cancel, Idle())
        else:
            self.session.transition(Intent.back, Drawing(rid))
        return remaining

    def escape(self) -> None:
        state = self.session.state
        if isinstance(state, Drawing):
            self.back()
        elif isinstance(state, DraggingVertex):
            self.abort_drag()
        elif not isinstance(state, Panning):
            self.session.clear_selection()

    # ---- selection ----
    def _require_settled(self) -> None:
        if self.session.kind not in (Idle.kind, Selecting.kind):
            raise InvalidState(f"Cannot edit while {self.session.kind}")

    def _require_editable(self) -> str:
        self._require_settled()
        rid = self.session.selected_id
        if rid is None:
            raise InvalidState("No region selected")
        return rid

    def _target(self, region_id: str | None) -> str:
        """Explicit id or the selection; either way only outside a drag, draw or pan."""
        if region_id is None:
            return self._require_editable()
        self._require_settled()
        return region_id

    def select(self, region_id: str | None) -> None:
        self._require_settled()
        if region_id is not None and region_id not in self.model:
            raise InvalidState(f"No committed region {region_id!r}")
        self.session.select(region_id)

    def select_at(self, point: XY) -> str | None:
        """Select the topmost region under `point`; clears the selection on a miss."""
        hit = next((r.id for r in reversed(self.model.regions) if contains(r, point)), None)
        self.select(hit)
        return hit

    def hover(self, point: XY) -> Edge_Hit | None:
        """Edge-insertion preview for the selected region, within the proximity threshold."""
        rid = self.session.selected_id
        region = self.model.get(rid) if rid else None
        hit = closest_edge(region, point) if region is not None and self.session.drawing_id is None else None
        self.session.hover = hit if hit is not None and hit.distance < self.params.proximity_threshold else None
        return self.session.hover

    # ---- vertex drag ----
    def grab_vertex(self, index: int) -> None:
        rid = self._require_editable()
        region = self.model.get(rid)
        if region is None or not 0 <= index < len(region.vertices):
            raise InvalidState(f"No vertex {index} on {rid}")
        self.session.transition(Intent.grab_vertex, DraggingVertex(rid, index, region.vertices[index]))

    def grab_vertex_at(self, point: XY) -> int | None:
        rid = self.session.selected_id
        region = self.model.get(rid) if rid else None
        if region is None:
            return None
        idx = nearest_vertex(region, point, self.params.handle_radius)
        if idx is not None:
            self.grab_vertex(idx)
        return idx

    def _dragging(self) -> DraggingVertex:
        state = self.session.state
        if not isinstance(state, DraggingVertex):
            raise InvalidState(f"Not dragging (state: {self.session.kind})")
        return state

    def drag_to(self, point: XY) -> None:
        drag = self._dragging()
        self.model.move_vertex(drag.region_id, drag.index, point)
        self.session.transition(Intent.move_vertex, drag)

    def release(self) -> bool:
        """Finish the drag; captures once if the vertex actually moved."""
        drag = self._dragging()
        region = self.model.get(drag.region_id)
        moved = region is not None and region.vertices[drag.index] != drag.origin
        self.session.transition(Intent.release, Selecting())
        if moved:
            self.capture()
        return moved

    def abort_drag(self) -> None:
        drag = self._dragging()
        self.model.set_vertex(drag.region_id, drag.index, drag.origin)
        self.session.transition(Intent.abort_drag, Selecting())

    # ---- edits on the selected region ----
    def insert_vertex(self, point: XY) -> int | None:
        rid = self._require_editable()
        idx = self.model.insert_vertex_near(rid, point, self.params.proximity_threshold)
        if idx is not None:
            self.capture()
        return idx

    def remove_vertex(self, index: int, *, delete_region_if_invalid: bool = False) -> bool:
        """Remove a vertex; returns False when the whole region was deleted instead.

        Without `delete_region_if_invalid` a sub-triangle removal raises
        WouldInvalidateRegion and nothing changes.
        """
        rid = self._require_editable()
        try:
            self.model.remove_vertex(rid, index)
        except WouldInvalidateRegion:
            if not delete_region_if_invalid:
                raise
            self.delete_region(rid)
            return False
        self.capture()
        return True

    def delete_region(self, region_id: str | None = None) -> bool:
        rid = self._target(region_id)
        if not self.model.delete_region(rid):
            return False
        self.capture()
        return True

    def rename_region(self, new_id: str, region_id: str | None = None) -> None:
        rid = self._target(region_id)
        self.model.rename_region(rid, new_id)
        new_id = new_id.strip()
        if new_id == rid:
            return
        if self.session.selected_id == rid:
            self.session.select(new_id)
        self.capture()

    def set_style(
        self,
        region_id: str | None = None,
        *,
        fill_color: str | None = None,
        fill_opacity: float | None = None,
        label: str | None = None,
    ) -> None:
        rid = self._target(region_id)
        self.model.set_style(rid, fill_color=fill_color, fill_opacity=fill_opacity, label=label)
        self.capture()

    # ---- view ----
    def to_model(self, screen: XY) -> Point:
        return self.view.to_model(screen)

    def begin_pan(self, screen: XY) -> None:
        self.session.transition(Intent.pan, Panning(self.session.state))
        self._pan_last = Point(screen.x, screen.y)

    def pan_to(self, screen: XY) -> None:
        if not isinstance(self.session.state, Panning) or self._pan_last is None:
            raise InvalidState(f"Not panning (state: {self.session.kind})")
        self.view.pan_by(screen.x - self._pan_last.x, screen.y - self._pan_last.y)
        self._pan_last = Point(screen.x, screen.y)

    def end_pan(self) -> None:
        self.session.end_pan()
        self._pan_last = None

    def zoom_at(self, screen: XY, steps: int = 1) -> None:
        """Positive steps zoom out, negative zoom in, around the pointer."""
        self.view.zoom_at(self.view.to_model(screen), self.params.zoom_step**steps)

    # ---- history ----
    def undo(self) -> bool:
        self._settle()
        scene = self.history.undo()
        if scene is None:
            return False
        self.restore(scene)
        self.dirty = True
        return True

    def redo(self) -> bool:
        self._settle()
        scene = self.history.redo()
        if scene is None:
            return False
        self.restore(scene)
        self.dirty = True
        return True

    # ---- scene-level ----
    def set_background(self, background: Background | None) -> None:
        self._settle()
        self.background = background
        self.view.reset(*self.size)
        self.capture()

    def set_canvas_size(self, width: int, height: int) -> None:
        self._settle()
        self.canvas_size = Canvas_Size(width=width, height=height)
        self.view.reset(*self.size)
        self.capture()

    # ---- export / persistence ----
    def export_markup(self, *, include_background: bool | None = None) -> str:
        if include_background is None:
            include_background = self.params.include_background
        return to_export_markup(
            self.snapshot(),
            self.canvas_size.width,
            self.canvas_size.height,
            self.background if include_background else None,
            stroke=self.params.stroke_colour,
            stroke_width=self.params.stroke_width,
        )

    def export(self, path: Path | None = None, *, include_background: bool | None = None) -> Path:
        if include_background is None:
            include_background = self.params.include_background
        return Exporter.output(
            self.snapshot(),
            path or self.params.output_file,
            include_background=include_background,
            stroke=self.params.stroke_colour,
            stroke_width=self.params.stroke_width,
        )

    def project_encoding(self) -> str:
        return to_project_encoding(self.snapshot())

    def _open_scene(self, scene: Scene) -> None:
        self.restore(scene, reset_ids=True)
        self.history.clear()
        self.history.capture(self.snapshot())
        self.dirty = False

    def load_project_text(self, text: str) -> None:
        """All-or-nothing: a malformed project leaves the current scene untouched."""
        self._open_scene(parse_project_encoding(text, defaults=self.params))

    def load_project(self, path: Path) -> None:
        self._open_scene(load_project(path, defaults=self.params))

    def save_project(self, path: Path) -> Path:
        out = save_project(self.snapshot(), path)
        self.dirty = False
        return out
