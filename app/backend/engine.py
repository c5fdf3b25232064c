from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set

from reveal_core import (
    DataSourceError,
    DisclosureState,
    Graph,
    GraphView,
    Router,
    StatusIndicator,
    Viewport,
    build_from_dict,
    load_from_file,
)
from reveal_core.collaborators import DetailPanel
from reveal_core.render import link_thickness

logger = logging.getLogger(__name__)


@dataclass
class RevealNode:
    id: str
    name: str
    category: str
    shape: str
    subtitle: str
    url: Optional[str]
    color: str
    radius: float
    anchor: bool = False


@dataclass
class RevealEdge:
    id: str
    source: str
    target: str
    weight: int
    width: float
    style: str
    label: str


@dataclass
class RevealGraph:
    anchor: Optional[str]
    nodes: List[RevealNode]
    edges: List[RevealEdge]


@dataclass
class EntityState:
    x: float
    y: float
    fade: float
    target: float


@dataclass
class RevealState:
    step: int = 0
    t: float = 0.0
    stage: Optional[str] = None
    selected: Optional[str] = None
    showAll: bool = False
    url: str = "/"
    status: Optional[str] = None
    sections: List[str] = field(default_factory=list)
    entities: Dict[str, EntityState] = field(default_factory=dict)


class _SessionRouter(Router):
    def __init__(self) -> None:
        self.url = "/"

    def on_select(self, entity_id: str, url: str) -> None:
        self.url = url


class _SessionStatus(StatusIndicator):
    def __init__(self) -> None:
        self.message: Optional[str] = None
        self.failed = False

    def update(self, message: str) -> None:
        self.message = message

    def dismiss(self) -> None:
        self.message = None

    def error(self, message: str) -> None:
        self.message = message
        self.failed = True


def default_graph_data() -> Dict[str, Any]:
    """Small built-in graph served when no data file is configured."""
    return {
        "center": {"id": "me", "name": "Jane Doe", "subtitle": "Engineer"},
        "nodes": [
            {"id": "acme", "name": "Acme Corp", "shape": "square", "subtitle": "Employer"},
            {"id": "uni", "name": "State University", "shape": "triangle"},
            {"id": "python", "name": "Python", "shape": "hexagon"},
            {"id": "graphs", "name": "Graph Drawing", "shape": "diamond"},
            {"id": "talk", "name": "Conference Talk", "shape": "pentagon"},
        ],
        "connections": [
            {"source": "me", "target": "acme", "value": 3, "label": "works at"},
            {"source": "me", "target": "uni", "value": 2, "label": "studied at"},
            {"source": "acme", "target": "python", "value": 2},
            {"source": "uni", "target": "graphs", "type": "dotted"},
            {"source": "graphs", "target": "talk", "label": "led to"},
            {"source": "python", "target": "talk", "type": "dashed"},
        ],
    }


class RevealSession:
    """
    Async wrapper around one `GraphView`.

    - step(): advances a batch of frames and broadcasts the new state
    - run(): background loop that steps until the reveal episode completes
    - pause(): halts the loop
    - reset(): rebuilds the view from the data and starts a new episode
    - select() / toggle(): focus changes, as a click or the show-all switch
    - subscribe(): returns an asyncio.Queue receiving state updates

    A data source that fails to load leaves the session without a view; the
    failure is kept as the status message and every command is refused.
    """

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        path: Optional[str] = None,
        seed: int = 0,
        width: float = 1280,
        height: float = 800,
        frames_per_step: int = 30,
    ) -> None:
        self._data = data if data is not None else default_graph_data()
        self._path = path
        self.view: Optional[GraphView] = None
        self._seed = seed
        self._size = (width, height)
        self.frames_per_step = frames_per_step
        self._lock = asyncio.Lock()
        self._running = False
        self._runner_task: Optional[asyncio.Task] = None
        self._subscribers: Set[asyncio.Queue] = set()
        self._build()

    def _load_graph(self, viewport: Viewport) -> Graph:
        rng = random.Random(self._seed)
        if self._path:
            return load_from_file(self._path, viewport=viewport, rng=rng)
        return build_from_dict(self._data, viewport=viewport, rng=rng)

    def _build(self) -> None:
        viewport = Viewport(*self._size)
        self.router = _SessionRouter()
        self.status = _SessionStatus()
        try:
            graph = self._load_graph(viewport)
        except DataSourceError as exc:
            logger.error("Error loading graph data: %s", exc)
            self.status.error(f"Error loading graph data: {exc}")
            self.view = None
            return
        self.view = GraphView(
            graph,
            viewport=viewport,
            panel=DetailPanel(),
            router=self.router,
            status=self.status,
            seed=self._seed,
        )
        self.view.start()

    @property
    def loaded(self) -> bool:
        return self.view is not None

    # --- graph -------------------------------------------------------------
    def graph(self) -> RevealGraph:
        if self.view is None:
            return RevealGraph(anchor=None, nodes=[], edges=[])
        g = self.view.graph
        nodes = [
            RevealNode(
                id=e.id,
                name=e.name,
                category=e.category,
                shape=e.shape.value,
                subtitle=e.subtitle,
                url=e.url,
                color=e.color,
                radius=e.radius,
                anchor=g.is_anchor(e),
            )
            for e in g
        ]
        edges = [
            RevealEdge(
                id=f"e{i}",
                source=link.source,
                target=link.target,
                weight=link.weight,
                width=link_thickness(link),
                style=link.style.value,
                label=link.label,
            )
            for i, link in enumerate(g.links)
        ]
        return RevealGraph(anchor=g.anchor_id, nodes=nodes, edges=edges)

    def state(self) -> RevealState:
        view = self.view
        if view is None:
            return RevealState(status=self.status.message)
        return RevealState(
            step=view.frame,
            t=view.scheduler.now,
            stage=view.stage.value if view.stage else None,
            selected=view.selected.id if view.selected else None,
            showAll=view.show_all,
            url=self.router.url,
            status=self.status.message,
            sections=sorted(view.sections),
            entities={
                e.id: EntityState(x=e.x, y=e.y, fade=e.fade, target=e.target) for e in view.graph
            },
        )

    # --- pubsub ------------------------------------------------------------
    def subscribe(self) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue()
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        self._subscribers.discard(q)

    async def _broadcast(self) -> None:
        state = self.state()
        for q in list(self._subscribers):
            try:
                q.put_nowait(state)
            except asyncio.QueueFull:
                logger.debug("subscriber queue full; state update dropped")

    # --- lifecycle ---------------------------------------------------------
    async def reset(self) -> None:
        await self.pause()
        async with self._lock:
            self._build()
        await self._broadcast()

    async def pause(self) -> None:
        self._running = False
        if self._runner_task and not self._runner_task.done():
            # Let the loop observe _running = False
            await asyncio.sleep(0)

    async def run(self, interval_ms: int = 100) -> None:
        if self._running or not self.loaded:
            return
        self._running = True

        async def _loop() -> None:
            try:
                while self._running:
                    done = await self.step()
                    if done:
                        break
                    await asyncio.sleep(interval_ms / 1000)
            finally:
                self._running = False

        self._runner_task = asyncio.create_task(_loop())

    async def step(self, frames: Optional[int] = None) -> bool:
        """Advance a batch of frames.

        Returns True once the reveal episode has completed.
        """
        if not self.loaded:
            return False
        async with self._lock:
            self.view.step(frames or self.frames_per_step)
        await self._broadcast()
        return self.is_done()

    async def select(self, entity_id: str) -> bool:
        """Select a focus entity; False when the id is unknown."""
        if not self.loaded:
            return False
        async with self._lock:
            selected = self.view.select_focus(entity_id)
        await self._broadcast()
        return selected is not None

    async def toggle(self) -> bool:
        if not self.loaded:
            return False
        async with self._lock:
            show_all = self.view.toggle_show_all()
        await self._broadcast()
        return show_all

    # --- helpers -----------------------------------------------------------
    def is_done(self) -> bool:
        return self.loaded and self.view.stage is DisclosureState.COMPLETE
