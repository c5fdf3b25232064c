"""
Semantic gesture handling.

Raw pointer and touch input is translated elsewhere; this module consumes
the resulting hover, drag, pan and tap gestures and turns them into entity
moves and selections on a `GraphView`.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional

from .graph import Entity

if TYPE_CHECKING:
    from .view import GraphView


class GestureController:
    """
    Hover, drag, pan and tap state for one view.

    Attributes:
        hovered: Entity under the pointer, if any
        dragged: Entity held by an ongoing drag, if any
        drag_distance: Path length of the current drag
    """

    def __init__(self, view: "GraphView"):
        self.view = view
        self.hovered: Optional[Entity] = None
        self.dragged: Optional[Entity] = None
        self.drag_distance = 0.0
        self._last: Optional[tuple] = None

    def entity_at(self, x: float, y: float) -> Optional[Entity]:
        """Topmost sufficiently visible entity whose radius contains (x, y)."""
        threshold = self.view.config.hit_visibility
        for entity in reversed(list(self.view.graph)):
            if entity.fade <= threshold:
                continue
            if math.hypot(entity.x - x, entity.y - y) < entity.radius:
                return entity
        return None

    def pointer_move(self, x: float, y: float) -> None:
        self.hovered = self.entity_at(x, y)
        if self.dragged is not None and self._last is not None:
            self.drag_move(x - self._last[0], y - self._last[1])
        self._last = (x, y)

    def pointer_down(self) -> bool:
        """Start dragging the hovered entity; returns whether a drag began."""
        if self.hovered is None:
            return False
        self.dragged = self.hovered
        self.drag_distance = 0.0
        return True

    def drag_move(self, dx: float, dy: float) -> None:
        """Move the dragged entity by (dx, dy) and cancel its momentum."""
        entity = self.dragged
        if entity is None:
            return
        entity.x += dx
        entity.y += dy
        entity.vx = 0.0
        entity.vy = 0.0
        self.drag_distance += math.hypot(dx, dy)

    def pointer_up(self) -> None:
        """
        End a drag. A drag shorter than `click_distance` counts as a click
        and selects the entity. The entity stays held for `drag_release_ms`
        so the release itself imparts no motion.
        """
        entity = self.dragged
        if entity is None:
            return
        if self.drag_distance < self.view.config.click_distance:
            self.view.select_focus(entity)
        self.view.scheduler.call_later(
            self.view.config.drag_release_ms, lambda: self._release(entity), bound=False
        )

    def _release(self, entity: Entity) -> None:
        if self.dragged is entity:
            self.dragged = None

    def pan(self, dx: float, dy: float) -> None:
        """Translate every entity, as when dragging empty space."""
        for entity in self.view.graph:
            entity.x += dx
            entity.y += dy

    def tap_select(self, entity: Optional[Entity]) -> None:
        if entity is not None:
            self.view.select_focus(entity)
