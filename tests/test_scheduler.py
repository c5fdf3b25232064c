"""
Tests for the tick-driven scheduler: ordering, repetition, cancellation and
episode invalidation.
"""

from reveal_core.scheduler import Scheduler


def test_call_later_fires_when_due():
    s = Scheduler()
    fired = []
    s.call_later(100, lambda: fired.append(s.now))
    assert s.advance(99) == 0
    assert fired == []
    assert s.advance(1) == 1
    assert fired == [100]
    assert s.now == 100


def test_events_run_in_due_order_then_fifo():
    s = Scheduler()
    order = []
    s.call_later(50, lambda: order.append("late"))
    s.call_later(10, lambda: order.append("first"))
    s.call_later(10, lambda: order.append("second"))
    s.advance(100)
    assert order == ["first", "second", "late"]


def test_clock_reads_event_time_inside_callback():
    """Callbacks see the time they were due, not the end of the advance."""
    s = Scheduler()
    seen = []
    s.call_later(30, lambda: seen.append(s.now))
    s.advance(500)
    assert seen == [30]
    assert s.now == 500


def test_events_scheduled_during_advance_run_if_due():
    s = Scheduler()
    fired = []

    def chain():
        fired.append(s.now)
        if len(fired) < 3:
            s.call_later(10, chain)

    s.call_later(10, chain)
    s.advance(100)
    assert fired == [10, 20, 30]


def test_call_every_repeats():
    s = Scheduler()
    ticks = []
    s.call_every(50, lambda: ticks.append(s.now))
    s.advance(200)
    assert ticks == [50, 100, 150, 200]


def test_cancel_recurring():
    s = Scheduler()
    ticks = []
    event = s.call_every(50, lambda: ticks.append(s.now))
    s.advance(120)
    event.cancel()
    s.advance(500)
    assert ticks == [50, 100]


def test_cancel_from_inside_callback():
    s = Scheduler()
    ticks = []
    holder = {}

    def cb():
        ticks.append(s.now)
        if len(ticks) == 2:
            holder["event"].cancel()

    holder["event"] = s.call_every(10, cb)
    s.advance(100)
    assert ticks == [10, 20]


class TestEpisodes:
    def test_new_episode_drops_bound_events(self):
        """After `new_episode`, events from the old episode never run."""
        s = Scheduler()
        fired = []
        s.call_later(100, lambda: fired.append("old"))
        s.call_every(20, lambda: fired.append("poll"))
        s.new_episode()
        s.call_later(100, lambda: fired.append("new"))
        s.advance(1000)
        assert fired == ["new"]

    def test_unbound_events_survive(self):
        s = Scheduler()
        fired = []
        s.call_later(100, lambda: fired.append("release"), bound=False)
        s.new_episode()
        s.advance(200)
        assert fired == ["release"]

    def test_pending_ignores_stale_and_cancelled(self):
        s = Scheduler()
        s.call_later(10, lambda: None)
        cancelled = s.call_later(10, lambda: None)
        cancelled.cancel()
        assert s.pending() == 1
        s.new_episode()
        assert s.pending() == 0
        s.call_later(10, lambda: None, bound=False)
        assert s.pending() == 1

    def test_clear(self):
        s = Scheduler()
        fired = []
        s.call_later(10, lambda: fired.append(1))
        s.clear()
        s.advance(100)
        assert fired == []


def test_negative_elapsed_does_not_rewind():
    s = Scheduler(now=50)
    s.advance(-10)
    assert s.now == 50
