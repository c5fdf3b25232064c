"""
Staged-reveal graph view.

`GraphView` owns one graph and drives everything that happens to it from a
single cooperative loop:

1. Timers: the scheduler runs every stage delay, reveal and settle poll that
   has come due
2. Physics: one force-simulation frame, paced by the elapsed time (clamped
   so a long pause does not produce a large impulse)
3. Fades: fade levels ease toward their targets; entities crossing the
   reveal threshold get a detail section

Focus changes (taps, clicks, navigation, the end of a reveal episode) go
through `select_focus`, which cancels the running episode before installing
new visibility targets so no stale reveal can fire afterwards.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional, Set, Union

from .collaborators import DetailPanel, Router, StatusIndicator, entity_url
from .config import SimulationConfig
from .disclosure import DisclosureController, RevealQueue
from .distance import distances_from
from .enums import DisclosureState
from .exceptions import DataSourceError
from .graph import Entity, Graph
from .interaction import GestureController
from .layout import LayoutPositioner
from .loader import load_from_file
from .physics import ForceSimulation
from .render import Palette, Renderer, Surface
from .scheduler import Scheduler
from .viewport import Viewport
from .visibility import SettlementDetector, VisibilityController

logger = logging.getLogger(__name__)

EntityRef = Union[Entity, str, None]


class GraphView:
    """
    Interactive, physics-positioned view of one graph.

    Attributes:
        graph: Entity table and links
        selected: Entity currently selected (and focused), if any
        pinned: Entity forced visible regardless of distance (deep link or
            most recent selection)
        show_all: When True every entity is shown, not just the neighbourhood
        sections: Ids the detail panel has been asked to hold a section for
    """

    def __init__(
        self,
        graph: Graph,
        viewport: Viewport | None = None,
        config: SimulationConfig | None = None,
        panel: DetailPanel | None = None,
        router: Router | None = None,
        status: StatusIndicator | None = None,
        palette: Palette | None = None,
        seed: Optional[int] = None,
        deep_link: Optional[str] = None,
    ):
        self.config = config or SimulationConfig()
        self.viewport = viewport or Viewport(config=self.config)
        self.graph = graph
        self.panel = panel or DetailPanel()
        self.router = router or Router()
        self.status = status or StatusIndicator()
        self.rng = random.Random(seed)

        self.scheduler = Scheduler()
        self.simulation = ForceSimulation(graph, self.viewport, self.config)
        self.visibility = VisibilityController(self.config)
        self.settlement = SettlementDetector(self.config)
        self.positioner = LayoutPositioner(graph, self.viewport, self.config)
        self.queue = RevealQueue(graph, self.scheduler, self.config, self.rng, on_reveal=self._on_reveal)
        self.disclosure = DisclosureController(
            graph,
            self.scheduler,
            self.queue,
            self.settlement,
            self.config,
            status=self.status,
            on_complete=self._on_disclosure_complete,
        )
        self.gestures = GestureController(self)
        self.renderer = Renderer(graph, self.viewport, self.config, palette)

        self.selected: Optional[Entity] = None
        self.pinned: Optional[Entity] = None
        self.show_all = False
        self.sections: Set[str] = set()
        self.frame = 0
        self._deep_link = deep_link

    @classmethod
    def from_source(
        cls,
        path: str,
        viewport: Viewport | None = None,
        config: SimulationConfig | None = None,
        status: StatusIndicator | None = None,
        seed: Optional[int] = None,
        **kwargs: Any,
    ) -> "GraphView":
        """
        Load a data-source file and build a view around it.

        Load failures are reported through `status.error` and re-raised;
        no view is built from a partial graph.
        """
        config = config or SimulationConfig()
        viewport = viewport or Viewport(config=config)
        status = status or StatusIndicator()
        try:
            graph = load_from_file(path, viewport=viewport, config=config, rng=random.Random(seed))
        except DataSourceError as exc:
            logger.error("Error loading graph data: %s", exc)
            status.error(f"Error loading graph data: {exc}")
            raise
        return cls(graph, viewport=viewport, config=config, status=status, seed=seed, **kwargs)

    # ----- lookups -----
    def resolve(self, ref: EntityRef) -> Optional[Entity]:
        """Entity for an id or record; unknown references log and give None."""
        if ref is None:
            return None
        entity_id = ref.id if isinstance(ref, Entity) else str(ref)
        entity = self.graph.get(entity_id)
        if entity is None:
            logger.warning("no entity with id %r; request ignored", entity_id)
        return entity

    @property
    def stage(self):
        return self.disclosure.state

    @property
    def hovered(self) -> Optional[Entity]:
        return self.gestures.hovered

    @property
    def dragged(self) -> Optional[Entity]:
        return self.gestures.dragged

    # ----- lifecycle -----
    def start(self) -> None:
        """Hide everything, apply a pending deep link and begin the first reveal episode."""
        for entity in self.graph:
            entity.fade = 0.0
            entity.target = 0.0
            self.settlement.reset(entity)

        if self._deep_link is not None:
            self._apply_deep_link(self._deep_link)
            self._deep_link = None

        center = self.pinned or self.graph.anchor
        if center is None:
            raise DataSourceError("graph has no anchor entity")
        self.disclosure.begin(center)

    def restart(self, center: EntityRef = None) -> None:
        """Replay the staged reveal from `center` (default: pinned entity or anchor)."""
        entity = self.resolve(center) if center is not None else (self.pinned or self.graph.anchor)
        if entity is None:
            return
        self.disclosure.begin(entity)

    def _apply_deep_link(self, entity_id: str) -> None:
        entity = self.resolve(entity_id)
        if entity is None:
            return
        logger.info("deep link to %s", entity.id)
        self.pinned = entity
        self._center_node(entity)
        self._ensure_section(entity, expand=True)

    def tick(self, elapsed_ms: Optional[float] = None) -> None:
        """
        Run one frame.

        Args:
            elapsed_ms: Wall-clock time since the previous frame; defaults to
                one nominal frame
        """
        cfg = self.config
        if elapsed_ms is None:
            elapsed_ms = cfg.frame_ms
        self.scheduler.advance(elapsed_ms)
        dt = min(cfg.max_frame_ms, max(0.0, elapsed_ms)) / cfg.frame_ms
        self.simulation.step(dt, self.scheduler.now, self.selected, self.gestures.dragged)
        self._advance_fades()
        self.frame += 1

    def _advance_fades(self) -> None:
        threshold = self.config.reveal_visibility
        for entity in self.graph:
            before = entity.fade
            self.visibility.step_entity(entity)
            if before < threshold <= entity.fade:
                self._ensure_section(entity)

    def step(self, n: int = 1, elapsed_ms: Optional[float] = None) -> Dict[str, Any]:
        """Run `n` frames and return a snapshot."""
        for _ in range(n):
            self.tick(elapsed_ms)
        return self.snapshot()

    def run_until_complete(self, max_frames: int = 5000, elapsed_ms: Optional[float] = None) -> bool:
        """Tick until the reveal episode completes; returns False if it never does."""
        for _ in range(max_frames):
            if self.disclosure.state is DisclosureState.COMPLETE:
                return True
            self.tick(elapsed_ms)
        return self.disclosure.state is DisclosureState.COMPLETE

    def render(self, surface: Surface) -> None:
        self.renderer.draw(surface, self.selected, self.gestures.hovered)

    # ----- selection -----
    def select_focus(self, ref: EntityRef, notify_router: bool = True) -> Optional[Entity]:
        """
        Make an entity the selected focus and re-center on it.

        Cancels the running reveal episode, steers the layout toward the new
        focus, installs new fade targets and updates the detail panel.

        Returns:
            The selected entity, or None when `ref` is unknown
        """
        entity = self.resolve(ref)
        if entity is None:
            return None

        self.pinned = entity
        self._center_node(entity)
        self.center_on(entity)

        if notify_router:
            self.router.on_select(entity.id, entity_url(entity, self.graph.anchor_id))
        self._ensure_section(entity)
        self.panel.expand_section(entity.id)
        return entity

    def _center_node(self, entity: Entity) -> None:
        self.disclosure.interrupt()
        self.selected = entity
        distances = distances_from(self.graph, entity.id, self.config.max_distance)
        self.positioner.position(entity, distances, self.pinned)

        entity.target = 1.0
        for always in (self.graph.anchor, self.pinned):
            if always is not None:
                always.target = 1.0

    def center_on(self, entity: Entity) -> None:
        """
        Install fade targets for a focus and steer the layout toward it.

        Three modes:
        - anchor focus (focused view): hop 1..max and the pinned entity shown
        - show-all: everything shown
        - any other focus: the neighbourhood shown, plus the anchor and the
          pinned entity even when they are outside it
        """
        cfg = self.config
        distances = distances_from(self.graph, entity.id, cfg.max_distance)
        anchor = self.graph.anchor
        pinned_id = self.pinned.id if self.pinned is not None else None
        reveal = cfg.reveal_visibility

        visible_ids = {entity.id}
        to_ensure = []

        def show(e: Entity) -> None:
            e.target = 1.0
            visible_ids.add(e.id)
            if e.fade >= reveal and e is not entity:
                to_ensure.append(e)

        if self.graph.is_anchor(entity) and not self.show_all:
            for e in self.graph:
                d = distances.get(e.id)
                if e is entity or (d is not None and 1 <= d <= cfg.max_distance) or e.id == pinned_id:
                    show(e)
                else:
                    e.target = 0.0
        elif self.show_all:
            for e in self.graph:
                show(e)
        else:
            for e in self.graph:
                if e.id in distances:
                    show(e)
                else:
                    e.target = 0.0
            if anchor is not None and anchor.id not in distances:
                anchor.target = 1.0
                visible_ids.add(anchor.id)
            if self.pinned is not None and pinned_id not in distances and self.pinned is not entity:
                self.pinned.target = 1.0
                visible_ids.add(pinned_id)

        self._remove_hidden_sections(visible_ids)
        for e in to_ensure:
            self._ensure_section(e)
        self.positioner.position(entity, distances, self.pinned)

    def toggle_show_all(self) -> bool:
        """Switch between focused and show-all mode; returns the new mode."""
        self.show_all = not self.show_all
        focus = self.selected or self.graph.anchor
        if focus is not None:
            self.center_on(focus)
        return self.show_all

    def restore_focus(self, entity_id: Optional[str]) -> Optional[Entity]:
        """
        Navigation restore (back/forward). No id means home: the anchor.
        The router is not notified since it initiated the change.
        """
        if entity_id is None:
            anchor = self.graph.anchor
            if anchor is None:
                return None
            return self.select_focus(anchor, notify_router=False)
        return self.select_focus(entity_id, notify_router=False)

    def resize(self, width: float, height: float) -> None:
        """React to a new surface size; a compact/desktop flip shifts the layout."""
        was_compact = self.viewport.compact
        old_cx, old_cy = self.viewport.center
        self.viewport.width = width
        self.viewport.height = height
        if self.viewport.compact == was_compact:
            return

        new_cx, new_cy = self.viewport.center
        for entity in self.graph:
            entity.x += new_cx - old_cx
            entity.y += new_cy - old_cy
        if self.selected is not None:
            self.center_on(self.selected)

    # ----- detail panel -----
    def _ensure_section(self, entity: Entity, expand: bool = False) -> None:
        if entity.id in self.sections:
            if expand:
                self.panel.expand_section(entity.id)
            return
        self.sections.add(entity.id)
        self.panel.ensure_section(entity.id, expand)

    def _remove_hidden_sections(self, visible_ids: Set[str]) -> None:
        for entity_id in sorted(self.sections - visible_ids):
            if entity_id == self.graph.anchor_id:
                continue
            self.sections.discard(entity_id)
            self.panel.remove_section(entity_id)

    # ----- disclosure callbacks -----
    def _on_reveal(self, entity: Entity) -> None:
        self._ensure_section(entity)

    def _on_disclosure_complete(self) -> None:
        target = self.pinned or self.graph.anchor
        if target is None:
            return
        deep_linked = not self.graph.is_anchor(target)
        logger.info("reveal complete; selecting %s", target.id)
        self.select_focus(target, notify_router=not deep_linked)

    # ----- introspection -----
    def snapshot(self) -> Dict[str, Any]:
        """JSON-able summary of the current frame."""
        return {
            "t": self.scheduler.now,
            "frame": self.frame,
            "stage": self.disclosure.state.value if self.disclosure.state else None,
            "selected": self.selected.id if self.selected else None,
            "show_all": self.show_all,
            "queue": len(self.queue),
            "entities": {
                e.id: {
                    "x": e.x,
                    "y": e.y,
                    "vx": e.vx,
                    "vy": e.vy,
                    "fade": e.fade,
                    "target": e.target,
                }
                for e in self.graph
            },
        }
