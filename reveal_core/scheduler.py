"""
Tick-driven timer queue.

All delayed work (stage delays, reveal stagger, reveal interval, settlement
polling, drag release) is expressed as events on one heap ordered by due
time. The heap is drained by `advance`, which the view calls from its frame
loop, so everything runs on a single logical thread.

Episode-bound events remember the episode that was current when they were
scheduled. `new_episode` invalidates all of them at once: when one of them
comes due it is dropped instead of run.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledEvent:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    episode: Optional[int] = field(default=None, compare=False)
    interval: Optional[float] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """
    Millisecond clock plus a heap of pending callbacks.

    Attributes:
        now: Logical time in milliseconds
        episode: Current episode token
    """

    def __init__(self, now: float = 0.0):
        self.now = now
        self.episode = 0
        self._heap: List[ScheduledEvent] = []
        self._seq = itertools.count()

    def _push(self, delay: float, callback, bound: bool, interval: Optional[float]) -> ScheduledEvent:
        event = ScheduledEvent(
            due=self.now + max(0.0, delay),
            seq=next(self._seq),
            callback=callback,
            episode=self.episode if bound else None,
            interval=interval,
        )
        heapq.heappush(self._heap, event)
        return event

    def call_later(self, delay: float, callback: Callable[[], None], bound: bool = True) -> ScheduledEvent:
        """Run `callback` once, `delay` ms from now."""
        return self._push(delay, callback, bound, None)

    def call_every(self, interval: float, callback: Callable[[], None], bound: bool = True) -> ScheduledEvent:
        """Run `callback` every `interval` ms until cancelled or invalidated."""
        return self._push(interval, callback, bound, interval)

    def new_episode(self) -> int:
        """Invalidate every pending episode-bound event."""
        self.episode += 1
        return self.episode

    def _is_stale(self, event: ScheduledEvent) -> bool:
        return event.episode is not None and event.episode != self.episode

    def pending(self) -> int:
        """Number of events that would still run."""
        return sum(1 for e in self._heap if not e.cancelled and not self._is_stale(e))

    def advance(self, elapsed: float) -> int:
        """
        Move the clock forward and run every event that comes due.

        Events scheduled by callbacks during the advance run in the same
        call if they fall due before the new time.

        Returns:
            Number of callbacks run
        """
        target = self.now + max(0.0, elapsed)
        ran = 0
        while self._heap and self._heap[0].due <= target:
            event = heapq.heappop(self._heap)
            if event.cancelled:
                continue
            if self._is_stale(event):
                logger.debug("dropping stale event from episode %s", event.episode)
                continue
            self.now = event.due
            if event.interval is not None:
                event.due = self.now + max(event.interval, 1e-6)
                event.seq = next(self._seq)
                heapq.heappush(self._heap, event)
            event.callback()
            ran += 1
        self.now = target
        return ran

    def clear(self) -> None:
        self._heap.clear()
