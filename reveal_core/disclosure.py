"""
Staged disclosure: the reveal queue and the four-stage sequencer.

A reveal episode starts with only the focus (and the anchor) visible, then
reveals the focus's direct neighbours one at a time, waits for the layout to
settle, reveals everything adjacent to the visible set, waits again and
finally hands control back to the view by selecting the episode's target.

All waiting is done with episode-bound scheduler events, so starting a new
episode or re-centering drops every outstanding reveal in one step.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional

from .collaborators import StatusIndicator
from .config import SimulationConfig
from .distance import adjacent_unrevealed, distances_from
from .enums import DisclosureState, next_stage
from .graph import Entity, Graph
from .scheduler import ScheduledEvent, Scheduler
from .visibility import SettlementDetector

logger = logging.getLogger(__name__)


class RevealQueue:
    """
    Backlog of entity ids waiting to have their fade target flipped to 1.

    Ids enter the backlog in shuffled order, staggered by `reveal_stagger_ms`
    each. A single in-flight timer pops one id every
    `node_processing_interval_ms`; when the backlog is empty the timer is not
    re-armed and `on_drained` is called.
    """

    def __init__(
        self,
        graph: Graph,
        scheduler: Scheduler,
        config: SimulationConfig | None = None,
        rng: random.Random | None = None,
        on_reveal: Optional[Callable[[Entity], None]] = None,
        on_drained: Optional[Callable[[], None]] = None,
    ):
        self.graph = graph
        self.scheduler = scheduler
        self.config = config or SimulationConfig()
        self.rng = rng or random.Random()
        self.on_reveal = on_reveal
        self.on_drained = on_drained
        self.backlog: Deque[str] = deque()
        self.last_reveal_ms: Optional[float] = None
        self._timer: Optional[ScheduledEvent] = None
        self._staged: List[ScheduledEvent] = []

    def __len__(self) -> int:
        return len(self.backlog)

    @property
    def in_flight(self) -> bool:
        return self._timer is not None and not self._timer.cancelled

    def is_drained(self) -> bool:
        """True when nothing is in the backlog and nothing is still being staggered in."""
        self._staged = [e for e in self._staged if not e.cancelled]
        return not self.backlog and not self._staged

    def enqueue(self, entity_ids: Iterable[str]) -> List[str]:
        """
        Replace the backlog with the not-yet-visible subset of `entity_ids`.

        Returns:
            The ids that were queued, in reveal order
        """
        self.clear()
        threshold = self.config.reveal_visibility
        pending = [
            eid
            for eid in dict.fromkeys(entity_ids)
            if eid in self.graph and self.graph.entities[eid].fade < threshold
        ]
        self.rng.shuffle(pending)

        for index, eid in enumerate(pending):
            event = self.scheduler.call_later(index * self.config.reveal_stagger_ms, None)
            event.callback = lambda eid=eid, event=event: self._arrive(eid, event)
            self._staged.append(event)

        if not pending:
            self._drained()
        else:
            logger.debug("queued %d entities for reveal", len(pending))
        return pending

    def _arrive(self, entity_id: str, event: ScheduledEvent) -> None:
        self._staged = [e for e in self._staged if e is not event and not e.cancelled]
        self.backlog.append(entity_id)
        if not self.in_flight:
            self.process_next()

    def process_next(self) -> None:
        """Reveal the head of the backlog and arm the timer for the next one."""
        if not self.backlog:
            self._timer = None
            self._drained()
            return

        entity = self.graph.get(self.backlog.popleft())
        if entity is None:
            self._timer = None
            self._drained()
            return

        entity.target = 1.0
        self.last_reveal_ms = self.scheduler.now
        logger.debug("revealing %s", entity.id)
        if self.on_reveal is not None:
            self.on_reveal(entity)
        self._timer = self.scheduler.call_later(
            self.config.node_processing_interval_ms, self.process_next
        )

    def _drained(self) -> None:
        if self.on_drained is not None:
            self.on_drained()

    def clear(self) -> None:
        """Forget the backlog and cancel the in-flight and staggered timers."""
        self.backlog.clear()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for event in self._staged:
            event.cancel()
        self._staged = []


class DisclosureController:
    """
    Sequencer for one reveal episode.

    Stage changes go through `next_stage`; this class only decides when to
    take them and what to queue on entering each stage.

    Attributes:
        state: Current stage, None before the first episode
        center: Entity whose neighbourhood the episode reveals
    """

    def __init__(
        self,
        graph: Graph,
        scheduler: Scheduler,
        queue: RevealQueue,
        settlement: SettlementDetector,
        config: SimulationConfig | None = None,
        status: StatusIndicator | None = None,
        on_complete: Optional[Callable[[], None]] = None,
    ):
        self.graph = graph
        self.scheduler = scheduler
        self.queue = queue
        self.settlement = settlement
        self.config = config or SimulationConfig()
        self.status = status or StatusIndicator()
        self.on_complete = on_complete
        self.state: Optional[DisclosureState] = None
        self.center: Optional[Entity] = None
        self.stage_started_ms = 0.0
        self._poll: Optional[ScheduledEvent] = None
        self.queue.on_drained = self.start_polling

    @property
    def active(self) -> bool:
        return self.state is not None and self.state is not DisclosureState.COMPLETE

    def begin(self, center: Entity) -> None:
        """
        Start a fresh episode centred on `center`.

        Any previous episode's timers are invalidated first.
        """
        self.cancel()
        self.state = DisclosureState.CENTER_NODE
        self.center = center
        self.stage_started_ms = self.scheduler.now
        self.queue.last_reveal_ms = None

        anchor = self.graph.anchor
        for entity in self.graph:
            entity.target = 0.0
        center.target = 1.0
        if anchor is not None:
            anchor.target = 1.0

        logger.debug("episode %d: centre %s", self.scheduler.episode, center.id)
        self.status.update("Loading graph...")
        self.scheduler.call_later(self.config.initial_node_delay_ms, self.advance)

    def cancel(self) -> None:
        """Drop every pending reveal and stage timer of the current episode."""
        self.scheduler.new_episode()
        self.queue.clear()
        self.stop_polling()

    def interrupt(self) -> None:
        """
        Abandon the running episode for a user focus change.

        Pending work is dropped and the episode is marked complete without
        calling `on_complete`.
        """
        self.cancel()
        if self.active:
            logger.debug("episode %d interrupted in %s", self.scheduler.episode, self.state.value)
            self.state = DisclosureState.COMPLETE
            self.stage_started_ms = self.scheduler.now
            self.status.dismiss()

    def advance(self) -> None:
        """Take the next stage transition if the current stage allows it."""
        if self.state is None or self.state is DisclosureState.COMPLETE:
            return
        upcoming = next_stage(self.state)
        if upcoming is DisclosureState.FIRST_LEVEL:
            self._enter_first_level()
        elif upcoming is DisclosureState.SECOND_LEVEL:
            self._enter_second_level()
        elif upcoming is DisclosureState.COMPLETE and self.queue.is_drained():
            self._complete()

    def _enter_stage(self, state: DisclosureState) -> None:
        self.state = state
        self.stage_started_ms = self.scheduler.now
        logger.debug("stage -> %s at %.0fms", state.value, self.scheduler.now)

    def _enter_first_level(self) -> None:
        self._enter_stage(DisclosureState.FIRST_LEVEL)
        self.status.update("Loading connections...")
        distances = distances_from(self.graph, self.center.id, self.config.max_distance)
        first_level = [eid for eid, d in distances.items() if d == 1]
        self.queue.enqueue(first_level)

    def _enter_second_level(self) -> None:
        self._enter_stage(DisclosureState.SECOND_LEVEL)
        self.status.update("Completing graph...")
        visible_ids = [e.id for e in self.graph.visible(self.config.reveal_visibility)]
        second_level = adjacent_unrevealed(self.graph, visible_ids)
        anchor_id = self.graph.anchor_id
        if anchor_id is not None and anchor_id not in visible_ids and anchor_id not in second_level:
            second_level.append(anchor_id)
        self.queue.enqueue(second_level)

    def _complete(self) -> None:
        self._enter_stage(DisclosureState.COMPLETE)
        self.stop_polling()
        self.status.dismiss()
        if self.on_complete is not None:
            self.on_complete()

    # ----- settle gate -----
    def start_polling(self) -> None:
        if not self.active:
            return
        self.stop_polling()
        self._poll = self.scheduler.call_every(self.config.settlement_poll_ms, self._check_settled)

    def stop_polling(self) -> None:
        if self._poll is not None:
            self._poll.cancel()
            self._poll = None

    def can_advance(self) -> bool:
        """
        Settle gate: the queue is drained, every visible entity is settled and
        the dwell time has passed since the stage started and since the last
        reveal. Samples every visible entity's speed.
        """
        visible = self.graph.visible(self.config.reveal_visibility)
        unsettled = [e for e in visible if not self.settlement.is_settled(e)]
        if not self.queue.is_drained():
            return False
        now = self.scheduler.now
        dwell = self.config.transition_delay_ms
        last = self.queue.last_reveal_ms
        return (
            not unsettled
            and (last is None or now - last > dwell)
            and now - self.stage_started_ms > dwell
        )

    def _check_settled(self) -> None:
        if self.can_advance():
            self.stop_polling()
            self.advance()
