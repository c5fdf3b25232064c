"""
Lightweight visualization utilities decoupled from Streamlit to enable testing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from reveal_core.graph import Graph
from reveal_core.render import link_thickness


def build_cytoscape_elements(
    graph: Graph,
    selected_id: Optional[str] = None,
    min_fade: float = 0.0,
) -> List[Dict[str, Any]]:
    """Convert a Graph into Cytoscape-compatible elements.

    Entities whose fade level is at or below `min_fade` are left out, along
    with any link touching them. Positions are the current simulated ones.
    """
    elements: List[Dict[str, Any]] = []
    shown = set()

    # Nodes
    for entity in graph:
        if min_fade > 0 and entity.fade <= min_fade:
            continue
        shown.add(entity.id)
        elements.append({
            "data": {
                "id": entity.id,
                "label": entity.name or entity.id,
                "color": entity.color,
                "size": int(round(entity.radius * 2)),
                "shape": entity.shape.value,
                "group": "anchor" if graph.is_anchor(entity) else entity.category,
                "fade": float(entity.fade),
                "selected": entity.id == selected_id,
            },
            "position": {"x": float(entity.x), "y": float(entity.y)},
        })

    # Edges
    for index, link in enumerate(graph.links):
        if link.source not in shown or link.target not in shown:
            continue
        elements.append({
            "data": {
                "id": f"{link.source}->{link.target}:{index}",
                "source": link.source,
                "target": link.target,
                "weight": link.weight,
                "width": link_thickness(link),
                "style": link.style.value,
                "label": link.label,
            }
        })

    return elements


def fade_color(hex_color: str, fade: float, background: str = "#ffffff") -> str:
    """Blend `hex_color` toward `background` by `1 - fade`, for renderers without alpha."""
    fade = max(0.0, min(1.0, fade))
    fg = _rgb(hex_color)
    bg = _rgb(background)
    mixed = tuple(int(round(b + (f - b) * fade)) for f, b in zip(fg, bg))
    return "#%02x%02x%02x" % mixed


def _rgb(hex_color: str):
    value = hex_color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))
