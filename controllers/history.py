"""Linear snapshot history for undo/redo."""

from __future__ import annotations

import logging
from collections.abc import Callable

from models.geo import Scene

log = logging.getLogger(__name__)


class History:
    """Undo/redo over encoded scene snapshots.

    Each capture stores an immutable JSON string, so replaying a state can
    never alias live model objects. Capturing after an undo discards the
    undone states; there is only ever one branch.
    """

    def __init__(self, limit: int = 0, on_change: Callable[[int, int], None] | None = None) -> None:
        self._states: list[str] = []
        self._index = -1
        self.limit = limit
        self.on_change = on_change

    def __len__(self) -> int:
        return len(self._states)

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._states) - 1

    def capture(self, scene: Scene) -> None:
        """Store a snapshot as the newest state.

        Args;
            scene: The fully settled scene to record.
        """
        del self._states[self._index + 1 :]
        self._states.append(scene.model_dump_json(by_alias=True, exclude_none=True))
        if self.limit and len(self._states) > self.limit:
            del self._states[: len(self._states) - self.limit]
        self._index = len(self._states) - 1
        log.debug("History capture %d/%d", self._index + 1, len(self._states))
        self._emit()

    def undo(self) -> Scene | None:
        """Step back one state; None when there is nothing to undo."""
        if not self.can_undo:
            return None
        self._index -= 1
        self._emit()
        return self._decode(self._index)

    def redo(self) -> Scene | None:
        """Step forward one state; None when there is nothing to redo."""
        if not self.can_redo:
            return None
        self._index += 1
        self._emit()
        return self._decode(self._index)

    def current(self) -> Scene | None:
        if self._index < 0:
            return None
        return self._decode(self._index)

    def clear(self) -> None:
        self._states.clear()
        self._index = -1
        self._emit()

    def _decode(self, idx: int) -> Scene:
        return Scene.model_validate_json(self._states[idx])

    def _emit(self) -> None:
        if self.on_change:
            self.on_change(self._index, len(self._states))
