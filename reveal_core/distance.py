"""
Bounded hop-distance queries over the link set.

`distances_from` is a pure function of the current topology and is recomputed
on every focus change; nothing is maintained incrementally.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List

from .graph import Graph


def distances_from(graph: Graph, focus_id: str, max_distance: int = 2) -> Dict[str, int]:
    """
    Breadth-first hop distances from `focus_id`, links treated as undirected.

    Entities further than `max_distance` hops are absent from the result
    rather than mapped to a large value.

    Args:
        graph: Graph whose links define adjacency
        focus_id: Root of the search; maps to 0
        max_distance: Largest distance reported

    Returns:
        Dict of entity id to distance, empty when `focus_id` is unknown
    """
    if focus_id not in graph:
        return {}

    adjacency = graph.adjacency()
    dist = {focus_id: 0}
    frontier = deque([focus_id])
    while frontier:
        current = frontier.popleft()
        d = dist[current]
        if d >= max_distance:
            continue
        for neighbor in adjacency.get(current, ()):
            if neighbor in dist:
                continue
            dist[neighbor] = d + 1
            frontier.append(neighbor)
    return dist


def adjacent_unrevealed(graph: Graph, visible_ids: Iterable[str]) -> List[str]:
    """
    Ids linked to a visible entity that are not visible themselves.

    Derived by scanning links against actual visibility rather than topology
    from the focus. Order follows link order; each id appears once.
    """
    visible = set(visible_ids)
    found: List[str] = []
    seen = set()
    for link in graph.links:
        for here, there in ((link.source, link.target), (link.target, link.source)):
            if here in visible and there not in visible and there not in seen:
                seen.add(there)
                found.append(there)
    return found
