"""
Force-directed layout integration.

Each frame the simulation runs five phases over every entity whose fade level
is above the visibility epsilon:
1. Reset: zero the force accumulators
2. Repulsion: inverse-square push between every close pair
3. Springs: Hooke pull along each link toward the rest length
4. Centering: weak pull of everything toward the logical centre, plus a
   stronger pull on the selected entity
5. Integration: damped velocity update, position step and bounds clamp
"""

from __future__ import annotations

import math
from typing import List, Optional

import numpy as np

from .config import SimulationConfig
from .graph import Entity, Graph
from .viewport import Viewport


class ForceSimulation:
    """
    Physics stepper for the entity table of a `Graph`.

    Attributes:
        graph: Entities and links being simulated
        viewport: Supplies the centre and the clamp bounds
        config: Strengths, damping and thresholds
    """

    def __init__(self, graph: Graph, viewport: Viewport, config: SimulationConfig | None = None):
        self.graph = graph
        self.viewport = viewport
        self.config = config or SimulationConfig()

    def _active(self) -> List[Entity]:
        eps = self.config.visibility_epsilon
        return [e for e in self.graph if e.fade > eps]

    def reset_forces(self) -> None:
        for entity in self.graph:
            entity.fx = 0.0
            entity.fy = 0.0

    def apply_repulsion(self) -> None:
        """
        Push every pair of visible entities apart with `strength / d**2`.

        Distances are floored at 1 and pairs further apart than the cutoff
        are skipped.
        """
        active = self._active()
        if len(active) < 2:
            return
        cfg = self.config

        pos = np.array([(e.x, e.y) for e in active], dtype=float)
        # diff[i, j] points from entity i to entity j
        diff = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
        dist = np.maximum(np.sqrt((diff ** 2).sum(axis=-1)), 1.0)
        within = dist <= cfg.repulsion_cutoff
        np.fill_diagonal(within, False)

        magnitude = np.where(within, cfg.repulsion_strength / dist ** 2, 0.0)
        forces = -((diff / dist[..., np.newaxis]) * magnitude[..., np.newaxis]).sum(axis=1)

        for entity, (fx, fy) in zip(active, forces):
            entity.fx += float(fx)
            entity.fy += float(fy)

    def apply_springs(self) -> None:
        """Pull linked visible entities toward `spring_length` apart."""
        cfg = self.config
        eps = cfg.visibility_epsilon
        for link in self.graph.links:
            source, target = self.graph.endpoints(link)
            if source.fade <= eps or target.fade <= eps:
                continue
            dx = target.x - source.x
            dy = target.y - source.y
            distance = math.hypot(dx, dy) or 1.0
            force = cfg.spring_strength * (distance - cfg.spring_length)
            nx_, ny_ = dx / distance, dy / distance
            source.fx += nx_ * force
            source.fy += ny_ * force
            target.fx -= nx_ * force
            target.fy -= ny_ * force

    def apply_centering(self) -> None:
        cx, cy = self.viewport.center
        strength = self.config.centering_strength
        for entity in self._active():
            entity.fx += (cx - entity.x) * strength
            entity.fy += (cy - entity.y) * strength

    def apply_selected_bias(self, selected: Optional[Entity]) -> None:
        if selected is None:
            return
        cx, cy = self.viewport.center
        strength = self.config.selected_strength
        selected.fx += (cx - selected.x) * strength
        selected.fy += (cy - selected.y) * strength

    def float_offset(self, entity: Entity, now_ms: float) -> tuple:
        """Small periodic drift so a settled layout never looks frozen."""
        cfg = self.config
        phase = self.graph.handle(entity.id) * cfg.float_phase_step
        t = now_ms / cfg.float_period_ms + phase
        return math.sin(t) * cfg.float_amplitude, math.cos(t) * cfg.float_amplitude

    def integrate(self, dt: float, now_ms: float = 0.0, dragged: Optional[Entity] = None) -> None:
        """
        Advance velocity and position of every visible, non-dragged entity.

        Args:
            dt: Frame delta as a multiple of the nominal frame length
            now_ms: Logical clock, drives the floating motion
            dragged: Entity currently held by a drag gesture, if any
        """
        cfg = self.config
        vp = self.viewport
        slow = cfg.settlement_threshold * 2
        for entity in self.graph:
            if entity is dragged or entity.fade <= cfg.visibility_epsilon:
                continue

            drift_x, drift_y = self.float_offset(entity, now_ms)
            entity.fx += drift_x
            entity.fy += drift_y

            entity.vx = entity.vx * cfg.damping_factor + entity.fx * dt / entity.mass
            entity.vy = entity.vy * cfg.damping_factor + entity.fy * dt / entity.mass

            if entity.speed < slow:
                entity.vx *= cfg.slow_damping
                entity.vy *= cfg.slow_damping

            entity.x += entity.vx
            entity.y += entity.vy

            margin = entity.radius + cfg.bounds_margin
            entity.x = vp.clamp(entity.x, vp.width, margin)
            entity.y = vp.clamp(entity.y, vp.height, margin)

    def step(
        self,
        dt: float,
        now_ms: float = 0.0,
        selected: Optional[Entity] = None,
        dragged: Optional[Entity] = None,
    ) -> None:
        """Run one full physics frame in place."""
        self.reset_forces()
        self.apply_repulsion()
        self.apply_springs()
        self.apply_centering()
        self.apply_selected_bias(selected)
        self.integrate(dt, now_ms, dragged)
