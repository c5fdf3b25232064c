"""
Graph data structures for the staged-reveal view.

This module defines the records the simulation mutates every frame:
- Entity: a drawable node with physics and visibility state
- Link: an undirected, labelled connection between two entity ids
- Graph: the entity table plus its links, with lookup helpers
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterator, List, Optional, Tuple

import networkx as nx

from .enums import LinkStyle, Shape


@dataclass(eq=False)
class Entity:
    """
    A node of the diagram.

    Entities are created once at load time and live for the whole session.
    Physics (position, velocity, force), visibility (fade target and level)
    and settlement bookkeeping are owned by the record itself.

    Attributes:
        id: Unique, stable identifier
        name: Display name drawn under the shape
        category: Raw category tag from the data source (also picks the shape)
        subtitle: Optional secondary line shown on hover
        x, y: Position in surface units
        vx, vy: Velocity in surface units per frame
        fx, fy: Force accumulated during the current frame
        target: Fade target, 0.0 or 1.0
        fade: Current fade level in [0, 1]
    """

    id: str
    name: str = ""
    category: str = "circle"
    subtitle: str = ""
    description: str = ""
    url: Optional[str] = None

    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: float = 0.0
    fy: float = 0.0

    radius: float = 8.0
    color: str = "#ed8936"
    mass: float = 1.0

    target: float = 0.0
    """Desired visibility (0 hidden, 1 shown)."""

    fade: float = 0.0
    """Current visibility, eased toward `target` each frame."""

    settle_count: int = 0
    """Consecutive settlement samples whose window average was below threshold."""

    speed_history: Deque[float] = field(default_factory=lambda: deque(maxlen=10))
    """Most recent speed samples, oldest evicted first."""

    @property
    def shape(self) -> Shape:
        return Shape.parse(self.category)

    @property
    def speed(self) -> float:
        return (self.vx * self.vx + self.vy * self.vy) ** 0.5


@dataclass
class Link:
    """
    A connection between two entities, referenced by id.

    Endpoints are handles into `Graph.entities`, resolved when forces are
    computed or the link is drawn, so every mutation of an entity is seen
    through all of its links.
    """

    source: str
    target: str
    weight: int = 1
    """Integer weight, at least 1; drawn thickness grows with its square root."""

    style: LinkStyle = LinkStyle.SOLID
    label: str = ""


class Graph:
    """
    Container for the entity table and its links.

    Entity insertion order is the stable iteration (and draw) order; the
    position of an entity in that order is its integer handle.

    Attributes:
        entities: Mapping of entity id to Entity, in insertion order
        links: All links, in insertion order
        anchor_id: Id of the always-visible home entity
    """

    def __init__(self, anchor_id: Optional[str] = None):
        self.entities: Dict[str, Entity] = {}
        self.links: List[Link] = []
        self.anchor_id = anchor_id
        self._handles: Dict[str, int] = {}
        self._adjacency: Dict[str, List[str]] = {}

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities.values())

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self.entities

    def add_entity(self, entity: Entity) -> Entity:
        """Add an entity; re-adding an id replaces the record but keeps its handle."""
        if entity.id not in self._handles:
            self._handles[entity.id] = len(self._handles)
        self.entities[entity.id] = entity
        self._adjacency.setdefault(entity.id, [])
        return entity

    def add_link(self, link: Link) -> Link:
        """
        Add a link between two existing entities.

        Raises:
            KeyError: If either endpoint is not in the entity table
        """
        for endpoint in (link.source, link.target):
            if endpoint not in self.entities:
                raise KeyError(f"unknown entity {endpoint!r}")
        self.links.append(link)
        self._adjacency[link.source].append(link.target)
        self._adjacency[link.target].append(link.source)
        return link

    def get(self, entity_id: Optional[str]) -> Optional[Entity]:
        if entity_id is None:
            return None
        return self.entities.get(entity_id)

    @property
    def anchor(self) -> Optional[Entity]:
        return self.get(self.anchor_id)

    def is_anchor(self, entity: Optional[Entity]) -> bool:
        return entity is not None and entity.id == self.anchor_id

    def handle(self, entity_id: str) -> int:
        """Stable integer handle of an entity (its load order)."""
        return self._handles[entity_id]

    def endpoints(self, link: Link) -> Tuple[Entity, Entity]:
        return self.entities[link.source], self.entities[link.target]

    def neighbors(self, entity_id: str) -> List[str]:
        """Ids adjacent to `entity_id` in either link direction (may repeat)."""
        return self._adjacency.get(entity_id, [])

    def adjacency(self) -> Dict[str, List[str]]:
        return self._adjacency

    def visible(self, threshold: float = 0.5) -> List[Entity]:
        """Entities whose fade level is strictly above `threshold`."""
        return [e for e in self.entities.values() if e.fade > threshold]

    def to_networkx(self) -> "nx.Graph":
        """
        Convert the entity table and links to an undirected NetworkX graph.

        Returns:
            NetworkX Graph carrying names, categories, positions and weights
        """
        G = nx.Graph()
        for entity in self.entities.values():
            G.add_node(
                entity.id,
                name=entity.name,
                category=entity.category,
                x=float(entity.x),
                y=float(entity.y),
                fade=float(entity.fade),
                anchor=entity.id == self.anchor_id,
            )
        for link in self.links:
            G.add_edge(
                link.source,
                link.target,
                weight=link.weight,
                style=link.style.value,
                label=link.label,
            )
        return G

    def export_graphml(self, filepath: str) -> None:
        """Export the graph to GraphML for external tools."""
        nx.write_graphml(self.to_networkx(), filepath)
