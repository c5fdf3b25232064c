"""
Concentric re-centering layout.

On every focus change the positioner gives each entity a one-shot velocity
toward a target on its band: the focus toward the centre, hop-1 entities on
the first ring, hop-2 entities on the second ring and everything else on the
outer ring. Physics then carries them the rest of the way, so nothing jumps.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Tuple

from .config import SimulationConfig
from .graph import Entity, Graph
from .viewport import Viewport


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def _steer(entity: Entity, target: Tuple[float, float], coefficient: float) -> None:
    entity.vx = (target[0] - entity.x) * coefficient
    entity.vy = (target[1] - entity.y) * coefficient


def ring_targets(count: int, center: Tuple[float, float], radius: float) -> List[Tuple[float, float]]:
    """Evenly spaced points on a circle, starting at angle 0."""
    cx, cy = center
    return [
        (
            cx + radius * math.cos(2 * math.pi * i / count),
            cy + radius * math.sin(2 * math.pi * i / count),
        )
        for i in range(count)
    ]


class LayoutPositioner:
    """Assigns band-targeting velocities for a newly chosen focus."""

    def __init__(self, graph: Graph, viewport: Viewport, config: SimulationConfig | None = None):
        self.graph = graph
        self.viewport = viewport
        self.config = config or SimulationConfig()

    def position(
        self,
        focus: Entity,
        distances: Dict[str, int],
        pinned: Optional[Entity] = None,
    ) -> None:
        """
        Steer every entity toward its band for `focus`.

        Args:
            focus: Entity to bring to the centre
            distances: Hop distances from `focus`
            pinned: Deep-linked entity kept near the centre when it is
                outside the neighbourhood
        """
        cfg = self.config
        center = self.viewport.center

        self._steer_focus(focus, center)
        self._place_ring([e for e in self.graph if distances.get(e.id) == 1],
                         center, cfg.first_level_radius, cfg.first_level_velocity)
        self._place_ring([e for e in self.graph if distances.get(e.id) == 2],
                         center, cfg.second_level_radius, cfg.second_level_velocity)

        if pinned is not None and pinned is not focus and pinned.id not in distances:
            target = (center[0] + cfg.pinned_offset[0], center[1] + cfg.pinned_offset[1])
            _steer(pinned, target, cfg.center_node_velocity)

        if self.graph.is_anchor(focus):
            self._place_outer_for_anchor(focus, distances, center)
        else:
            self._place_outer_for_other(focus, distances, pinned, center)

    def _steer_focus(self, focus: Entity, center: Tuple[float, float]) -> None:
        dx = center[0] - focus.x
        dy = center[1] - focus.y
        distance = math.hypot(dx, dy)
        coefficient = self.config.center_node_velocity
        # Long trips start gentler so the focus does not snap across the surface
        if distance > 100:
            coefficient *= ease_out_cubic(min(1.0, 100 / distance))
        focus.vx = dx * coefficient
        focus.vy = dy * coefficient

    def _place_ring(self, entities: List[Entity], center, radius: float, coefficient: float) -> None:
        if not entities:
            return
        for entity, target in zip(entities, ring_targets(len(entities), center, radius)):
            _steer(entity, target, coefficient)

    def _place_outer_for_anchor(self, focus: Entity, distances: Dict[str, int], center) -> None:
        outer = [e for e in self.graph if e.id not in distances and e is not focus]
        self._place_ring(outer, center, self.config.outer_level_radius, self.config.outer_node_velocity)

    def _place_outer_for_other(
        self,
        focus: Entity,
        distances: Dict[str, int],
        pinned: Optional[Entity],
        center,
    ) -> None:
        cfg = self.config
        anchor = self.graph.anchor
        outer = [
            e
            for e in self.graph
            if e.id not in distances and e is not focus and e is not anchor and e is not pinned
        ]
        self._place_ring(outer, center, cfg.outer_level_radius, cfg.outer_node_velocity)

        if anchor is not None and anchor is not focus and anchor.id not in distances:
            off_x, off_y = self.viewport.anchor_offset
            _steer(anchor, (center[0] - off_x, center[1] - off_y), cfg.center_node_velocity)
