"""
Tests for the concentric re-centering layout.
"""

import math

import pytest

from reveal_core.config import SimulationConfig
from reveal_core.distance import distances_from
from reveal_core.graph import Entity, Graph, Link
from reveal_core.layout import LayoutPositioner, ease_out_cubic, ring_targets
from reveal_core.viewport import Viewport


def _setup():
    g = Graph(anchor_id="F")
    for eid in ("F", "A", "B", "C", "X"):
        g.add_entity(Entity(eid, x=300.0, y=400.0))
    g.add_link(Link("F", "A"))
    g.add_link(Link("F", "B"))
    g.add_link(Link("B", "C"))
    cfg = SimulationConfig()
    vp = Viewport(config=cfg)
    return g, vp, LayoutPositioner(g, vp, cfg)


def test_ring_targets():
    pts = ring_targets(4, (0.0, 0.0), 10.0)
    assert pts[0] == pytest.approx((10.0, 0.0))
    assert pts[1] == pytest.approx((0.0, 10.0))
    assert all(math.hypot(x, y) == pytest.approx(10.0) for x, y in pts)


def test_ease_out_cubic():
    assert ease_out_cubic(0.0) == 0.0
    assert ease_out_cubic(1.0) == 1.0
    assert ease_out_cubic(0.5) == pytest.approx(0.875)


def test_near_focus_moves_at_full_coefficient():
    g, vp, pos = _setup()
    cx, cy = vp.center
    focus = g.get("F")
    focus.x, focus.y = cx - 50, cy
    pos.position(focus, distances_from(g, "F"))
    assert focus.vx == pytest.approx(50 * 0.015)
    assert focus.vy == pytest.approx(0.0)


def test_far_focus_is_eased():
    """Trips longer than 100 units start with a reduced coefficient."""
    g, vp, pos = _setup()
    cx, cy = vp.center
    focus = g.get("F")
    focus.x, focus.y = cx - 400, cy
    pos.position(focus, distances_from(g, "F"))
    expected = 400 * 0.015 * ease_out_cubic(100 / 400)
    assert focus.vx == pytest.approx(expected)
    assert focus.vx < 400 * 0.015


def test_bands_for_anchor_focus():
    """Hop-1 entities head for the first ring, hop-2 for the second, the rest for the outer one."""
    g, vp, pos = _setup()
    cx, cy = vp.center
    pos.position(g.get("F"), distances_from(g, "F"))

    a_target = ring_targets(2, (cx, cy), 120)[0]
    a = g.get("A")
    assert a.vx == pytest.approx((a_target[0] - a.x) * 0.015)

    c_target = ring_targets(1, (cx, cy), 170)[0]
    c = g.get("C")
    assert c.vx == pytest.approx((c_target[0] - c.x) * 0.04)

    x_target = ring_targets(1, (cx, cy), 300)[0]
    x = g.get("X")
    assert x.vx == pytest.approx((x_target[0] - x.x) * 0.025)


def test_anchor_outside_neighbourhood_sits_offset():
    g, vp, pos = _setup()
    cx, cy = vp.center
    pos.position(g.get("C"), distances_from(g, "C", max_distance=1))
    anchor = g.get("F")
    off_x, off_y = vp.anchor_offset
    assert anchor.vx == pytest.approx((cx - off_x - anchor.x) * 0.015)
    assert anchor.vy == pytest.approx((cy - off_y - anchor.y) * 0.015)


def test_pinned_outside_neighbourhood_stays_near_centre():
    g, vp, pos = _setup()
    cx, cy = vp.center
    pinned = g.get("X")
    pos.position(g.get("C"), distances_from(g, "C"), pinned=pinned)
    assert pinned.vx == pytest.approx((cx + 60 - pinned.x) * 0.015)
    assert pinned.vy == pytest.approx((cy - 40 - pinned.y) * 0.015)


def test_compact_anchor_offset():
    vp = Viewport(width=800, height=600)
    assert vp.compact
    assert vp.anchor_offset == (40.0, 25.0)
    assert vp.center == (400.0, 300.0)
    assert vp.size_multiplier == 0.75


def test_pinned_offset_comes_from_config():
    g, _, _ = _setup()
    cfg = SimulationConfig.from_dict({"pinned_offset": [10, 25]})
    vp = Viewport(config=cfg)
    pos = LayoutPositioner(g, vp, cfg)
    cx, cy = vp.center
    pinned = g.get("X")
    pos.position(g.get("C"), distances_from(g, "C"), pinned=pinned)
    assert pinned.vx == pytest.approx((cx + 10 - pinned.x) * 0.015)
    assert pinned.vy == pytest.approx((cy + 25 - pinned.y) * 0.015)
