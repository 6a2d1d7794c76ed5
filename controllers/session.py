"""Edit session: current tool mode, tagged interaction state and selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from models.errors import InvalidState
from models.geo import Vertex
from models.geometry import Edge_Hit

log = logging.getLogger(__name__)


class Mode(StrEnum):
    creating_straight = "creating-straight"
    creating_curved = "creating-curved"
    selecting = "selecting"
    panning = "panning"

    @property
    def drawing(self) -> bool:
        return self in (Mode.creating_straight, Mode.creating_curved)


class State_Kind(StrEnum):
    idle = "idle"
    drawing = "drawing"
    selecting = "selecting"
    dragging = "dragging-vertex"
    panning = "panning"


class Intent(StrEnum):
    begin_shape = "begin-shape"
    add_point = "add-point"
    back = "back"
    finalize = "finalize"
    cancel = "cancel"
    grab_vertex = "grab-vertex"
    move_vertex = "move-vertex"
    release = "release"
    abort_drag = "abort-drag"
    select_tool = "select-tool"
    draw_tool = "draw-tool"
    pan = "pan"
    end_pan = "end-pan"


# ---- states ----
@dataclass(frozen=True, slots=True)
class Idle:
    kind: ClassVar[State_Kind] = State_Kind.idle


@dataclass(frozen=True, slots=True)
class Drawing:
    region_id: str
    kind: ClassVar[State_Kind] = State_Kind.drawing


@dataclass(frozen=True, slots=True)
class Selecting:
    kind: ClassVar[State_Kind] = State_Kind.selecting


@dataclass(frozen=True, slots=True)
class DraggingVertex:
    region_id: str
    index: int
    origin: Vertex
    kind: ClassVar[State_Kind] = State_Kind.dragging


@dataclass(frozen=True, slots=True)
class Panning:
    previous: "State"
    kind: ClassVar[State_Kind] = State_Kind.panning


State = Idle | Drawing | Selecting | DraggingVertex | Panning

K = State_Kind
TRANSITIONS: dict[tuple[State_Kind, Intent], State_Kind] = {
    (K.idle, Intent.begin_shape): K.drawing,
    (K.selecting, Intent.begin_shape): K.drawing,
    (K.drawing, Intent.add_point): K.drawing,
    (K.drawing, Intent.back): K.drawing,
    (K.drawing, Intent.finalize): K.idle,
    (K.drawing, Intent.cancel): K.idle,
    (K.selecting, Intent.grab_vertex): K.dragging,
    (K.dragging, Intent.move_vertex): K.dragging,
    (K.dragging, Intent.release): K.selecting,
    (K.dragging, Intent.abort_drag): K.selecting,
    (K.idle, Intent.select_tool): K.selecting,
    (K.selecting, Intent.select_tool): K.selecting,
    (K.idle, Intent.draw_tool): K.idle,
    (K.selecting, Intent.draw_tool): K.idle,
}
# any non-panning state may start a pan; ending one returns to what was interrupted
for _kind in State_Kind:
    if _kind is not K.panning:
        TRANSITIONS[(_kind, Intent.pan)] = K.panning


class Edit_Session:
    """Never owns region data: only ids, indexes and an immutable drag origin."""

    def __init__(self, mode: Mode = Mode.creating_straight) -> None:
        self.mode = mode
        self.state: State = Selecting() if mode is Mode.selecting else Idle()
        self.selected_id: str | None = None
        self.hover: Edge_Hit | None = None

    @property
    def kind(self) -> State_Kind:
        return self.state.kind

    @property
    def drawing_id(self) -> str | None:
        return self.state.region_id if isinstance(self.state, Drawing) else None

    def can(self, intent: Intent) -> bool:
        if isinstance(self.state, Panning):
            return intent is Intent.end_pan
        return (self.state.kind, intent) in TRANSITIONS

    def transition(self, intent: Intent, new_state: State) -> None:
        """Move to `new_state`, rejecting anything the transition table does not allow."""
        if isinstance(self.state, Panning):
            allowed = new_state == self.state.previous if intent is Intent.end_pan else False
        else:
            allowed = TRANSITIONS.get((self.state.kind, intent)) is new_state.kind
        if not allowed:
            raise InvalidState(f"Cannot {intent} while {self.state.kind}")
        log.debug("%s --%s--> %s", self.state.kind, intent, new_state.kind)
        self.state = new_state

    def end_pan(self) -> None:
        if not isinstance(self.state, Panning):
            raise InvalidState(f"Cannot {Intent.end_pan} while {self.state.kind}")
        self.transition(Intent.end_pan, self.state.previous)

    # ---- selection ----
    def select(self, region_id: str | None) -> None:
        self.selected_id = region_id
        self.hover = None

    def clear_selection(self) -> None:
        self.select(None)

    def on_region_deleted(self, region_id: str) -> None:
        if self.selected_id == region_id:
            self.clear_selection()
