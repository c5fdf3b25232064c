"""
Drawing of the current frame onto an abstract 2-D surface.

The renderer only issues primitive calls (line, circle, polygon, rectangle,
text); the surface implementation decides what they become. The core owns no
surface lifecycle: the caller sizes the surface and hands it in per frame.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import SimulationConfig
from .enums import LinkStyle, Shape
from .graph import Entity, Graph, Link
from .viewport import Viewport

Point = Tuple[float, float]


@dataclass(frozen=True)
class Palette:
    """Theme colours; choosing light or dark is up to the caller."""

    text: str = "#000000"
    stroke: str = "#000000"
    card_background: str = "#ffffff"
    grid: str = "#000000"

    @classmethod
    def light(cls) -> "Palette":
        return cls()

    @classmethod
    def dark(cls) -> "Palette":
        return cls(text="#ffffff", stroke="#ffffff", card_background="#333333", grid="#ffffff")


class Surface(ABC):
    """Primitive drawing operations, in surface units with a top-left origin."""

    @abstractmethod
    def begin_frame(self, width: float, height: float) -> None:
        ...

    @abstractmethod
    def line(self, x1: float, y1: float, x2: float, y2: float, color: str,
             width: float = 1.0, alpha: float = 1.0, dash: Optional[Sequence[float]] = None) -> None:
        ...

    @abstractmethod
    def circle(self, x: float, y: float, radius: float, fill: str, stroke: str,
               line_width: float = 2.0, alpha: float = 1.0, halo: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def polygon(self, points: Sequence[Point], fill: str, stroke: str,
                line_width: float = 2.0, alpha: float = 1.0, halo: Optional[str] = None) -> None:
        ...

    @abstractmethod
    def rect(self, x: float, y: float, width: float, height: float, fill: str, alpha: float = 1.0) -> None:
        ...

    @abstractmethod
    def text(self, x: float, y: float, text: str, color: str, size: float = 12.0,
             align: str = "center", baseline: str = "top", alpha: float = 1.0) -> None:
        ...

    def measure_text(self, text: str, size: float = 12.0) -> float:
        """Approximate advance width; surfaces with real metrics override this."""
        return len(text) * size * 0.6


class RecordingSurface(Surface):
    """Surface that records every primitive call as `(operation, arguments)`."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.size: Tuple[float, float] = (0.0, 0.0)

    def ops(self, name: str) -> List[Dict[str, Any]]:
        return [args for op, args in self.calls if op == name]

    def begin_frame(self, width, height):
        self.calls = []
        self.size = (width, height)

    def line(self, x1, y1, x2, y2, color, width=1.0, alpha=1.0, dash=None):
        self.calls.append(("line", dict(x1=x1, y1=y1, x2=x2, y2=y2, color=color,
                                        width=width, alpha=alpha, dash=dash)))

    def circle(self, x, y, radius, fill, stroke, line_width=2.0, alpha=1.0, halo=None):
        self.calls.append(("circle", dict(x=x, y=y, radius=radius, fill=fill, stroke=stroke,
                                          line_width=line_width, alpha=alpha, halo=halo)))

    def polygon(self, points, fill, stroke, line_width=2.0, alpha=1.0, halo=None):
        self.calls.append(("polygon", dict(points=list(points), fill=fill, stroke=stroke,
                                           line_width=line_width, alpha=alpha, halo=halo)))

    def rect(self, x, y, width, height, fill, alpha=1.0):
        self.calls.append(("rect", dict(x=x, y=y, width=width, height=height, fill=fill, alpha=alpha)))

    def text(self, x, y, text, color, size=12.0, align="center", baseline="top", alpha=1.0):
        self.calls.append(("text", dict(x=x, y=y, text=text, color=color, size=size,
                                        align=align, baseline=baseline, alpha=alpha)))


def link_thickness(link: Link) -> float:
    return math.sqrt(link.weight or 1) * 2


def _regular(x: float, y: float, size: float, sides: int, start: float) -> List[Point]:
    return [
        (x + size * math.cos(start + 2 * math.pi * i / sides),
         y + size * math.sin(start + 2 * math.pi * i / sides))
        for i in range(sides)
    ]


def shape_vertices(shape: Shape, x: float, y: float, size: float) -> Optional[List[Point]]:
    """Outline of `shape` at (x, y); None means draw a circle."""
    if shape is Shape.SQUARE:
        side = size * 1.7
        return [(x - size, y - size), (x - size + side, y - size),
                (x - size + side, y - size + side), (x - size, y - size + side)]
    if shape is Shape.TRIANGLE:
        return [(x, y - size), (x + size, y + size), (x - size, y + size)]
    if shape is Shape.DIAMOND:
        return [(x, y - size), (x + size, y), (x, y + size), (x - size, y)]
    if shape is Shape.PENTAGON:
        return _regular(x, y, size, 5, -math.pi / 2)
    if shape is Shape.HEXAGON:
        # Pointy-top hexagon
        return [(x + size * math.sin(math.pi / 3 * i), y - size * math.cos(math.pi / 3 * i))
                for i in range(6)]
    if shape is Shape.OCTAGON:
        return _regular(x, y, size, 8, 0.0)
    return None


class Renderer:
    """Draws grid, links and entities of a graph for one frame."""

    def __init__(self, graph: Graph, viewport: Viewport, config: SimulationConfig | None = None,
                 palette: Palette | None = None):
        self.graph = graph
        self.viewport = viewport
        self.config = config or SimulationConfig()
        self.palette = palette or Palette.light()

    def draw(self, surface: Surface, selected: Optional[Entity] = None,
             hovered: Optional[Entity] = None) -> None:
        surface.begin_frame(self.viewport.width, self.viewport.height)
        self.draw_grid(surface)
        for link in self.graph.links:
            self.draw_link(surface, link)
        for entity in self.graph:
            self.draw_entity(surface, entity, selected, hovered)

    def draw_grid(self, surface: Surface) -> None:
        cfg = self.config
        width, height = self.viewport.width, self.viewport.height
        cx, cy = self.viewport.center
        x = cx % cfg.grid_size
        while x < width:
            surface.line(x, 0, x, height, self.palette.grid, cfg.grid_line_width, cfg.grid_opacity)
            x += cfg.grid_size
        y = cy % cfg.grid_size
        while y < height:
            surface.line(0, y, width, y, self.palette.grid, cfg.grid_line_width, cfg.grid_opacity)
            y += cfg.grid_size

    def draw_link(self, surface: Surface, link: Link) -> None:
        source, target = self.graph.endpoints(link)
        alpha = min(source.fade, target.fade)
        if alpha <= self.config.visibility_epsilon:
            return

        dash = (5, 5) if link.style in (LinkStyle.DOTTED, LinkStyle.DASHED) else None
        surface.line(source.x, source.y, target.x, target.y, self.palette.text,
                     width=link_thickness(link), alpha=alpha * 0.4, dash=dash)

        if alpha > self.config.label_visibility and link.label:
            mid_x = (source.x + target.x) / 2
            mid_y = (source.y + target.y) / 2
            text_width = surface.measure_text(link.label, 10)
            surface.rect(mid_x - text_width / 2 - 3, mid_y - 7, text_width + 6, 14,
                         self.palette.card_background, alpha)
            surface.text(mid_x, mid_y, link.label, self.palette.text, 10,
                         baseline="middle", alpha=alpha)

    def draw_entity(self, surface: Surface, entity: Entity, selected: Optional[Entity] = None,
                    hovered: Optional[Entity] = None) -> None:
        alpha = entity.fade
        if alpha <= self.config.visibility_epsilon:
            return

        halo = self.palette.text if entity is selected or entity is hovered else None
        vertices = shape_vertices(entity.shape, entity.x, entity.y, entity.radius)
        if vertices is None:
            surface.circle(entity.x, entity.y, entity.radius, entity.color, self.palette.stroke,
                           alpha=alpha, halo=halo)
        else:
            surface.polygon(vertices, entity.color, self.palette.stroke, alpha=alpha, halo=halo)

        surface.text(entity.x, entity.y + entity.radius + 10, entity.name, self.palette.text,
                     12, alpha=alpha)
        if entity is hovered and entity.subtitle:
            surface.text(entity.x, entity.y + entity.radius + 25, entity.subtitle,
                         self.palette.text, 10, alpha=alpha * 0.8)
