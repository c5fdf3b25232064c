"""
Per-entity fade and settlement tracking.

VisibilityController eases each entity's fade level toward its fade target
once per frame. SettlementDetector decides when an entity has come to rest,
using a short rolling window of speed samples with hysteresis.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable

from .config import SimulationConfig
from .graph import Entity


def ease_in_out_cubic(p: float) -> float:
    """Cubic ease-in-out on [0, 1]."""
    if p < 0.5:
        return 4 * p * p * p
    return 1 - (-2 * p + 2) ** 3 / 2


class VisibilityController:
    """Moves fade levels toward fade targets with an eased, non-overshooting step."""

    def __init__(self, config: SimulationConfig | None = None):
        self.config = config or SimulationConfig()

    def step_entity(self, entity: Entity) -> None:
        current = entity.fade
        target = entity.target
        if current == target:
            return

        speed = self.config.fade_speed
        difference = target - current
        if abs(difference) < speed:
            entity.fade = target
            return

        progress = 1 - abs(difference)
        step = speed * (1 + ease_in_out_cubic(progress) * 0.5)
        if difference > 0:
            entity.fade = min(current + step, target)
        else:
            entity.fade = max(current - step, target)

    def step(self, entities: Iterable[Entity]) -> None:
        for entity in entities:
            self.step_entity(entity)


class SettlementDetector:
    """
    Rolling-average rest detector.

    Every observation pushes the entity's speed into a fixed-size window.
    While the window average stays below `settlement_threshold` a counter
    grows; any average at or above it resets the counter. The entity counts
    as settled once the counter reaches `settlement_frames_required`.
    """

    def __init__(self, config: SimulationConfig | None = None):
        self.config = config or SimulationConfig()

    def _window(self, entity: Entity) -> deque:
        size = self.config.settlement_window
        if entity.speed_history.maxlen != size:
            entity.speed_history = deque(entity.speed_history, maxlen=size)
        return entity.speed_history

    def observe(self, entity: Entity, speed: float) -> bool:
        """Record one speed sample and return whether the entity is settled."""
        window = self._window(entity)
        window.append(speed)
        average = sum(window) / len(window)
        if average < self.config.settlement_threshold:
            entity.settle_count += 1
        else:
            entity.settle_count = 0
        return entity.settle_count >= self.config.settlement_frames_required

    def is_settled(self, entity: Entity) -> bool:
        """Sample the entity's current speed; see `observe`."""
        return self.observe(entity, entity.speed)

    def reset(self, entity: Entity) -> None:
        entity.speed_history.clear()
        entity.settle_count = 0
