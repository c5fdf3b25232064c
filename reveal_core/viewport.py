from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .config import SimulationConfig


@dataclass
class Viewport:
    """Size of the drawing surface and the logical centre derived from it.

    Narrow viewports (width at or below `compact_breakpoint`) are compact:
    the centre is not shifted left and entities are drawn smaller.
    """

    width: float = 1280.0
    height: float = 800.0
    config: SimulationConfig = field(default_factory=SimulationConfig)

    @property
    def compact(self) -> bool:
        return self.width <= self.config.compact_breakpoint

    @property
    def center_offset_x(self) -> float:
        return 0.0 if self.compact else self.config.desktop_center_offset_x

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2 + self.center_offset_x, self.height / 2

    @property
    def size_multiplier(self) -> float:
        return self.config.compact_size_multiplier if self.compact else 1.0

    @property
    def anchor_offset(self) -> Tuple[float, float]:
        cfg = self.config
        return cfg.compact_anchor_offset if self.compact else cfg.anchor_offset

    def clamp(self, value: float, extent: float, margin: float) -> float:
        """Clamp `value` to [margin, extent - margin]."""
        return max(margin, min(extent - margin, value))
