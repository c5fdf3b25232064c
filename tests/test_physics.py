"""
Tests for the force simulation: repulsion, springs, centering, integration
and bounds clamping.
"""

import math

import pytest

from reveal_core.config import SimulationConfig
from reveal_core.graph import Entity, Graph, Link
from reveal_core.physics import ForceSimulation
from reveal_core.viewport import Viewport


def _sim(positions, links=(), fade=1.0, config=None):
    cfg = config or SimulationConfig()
    g = Graph(anchor_id="e0")
    for i, (x, y) in enumerate(positions):
        g.add_entity(Entity(f"e{i}", x=x, y=y, fade=fade, target=fade))
    for a, b in links:
        g.add_link(Link(a, b))
    return ForceSimulation(g, Viewport(config=cfg), cfg), g


class TestRepulsion:
    def test_inverse_square_magnitude(self):
        """Two entities 10 units apart each get 13000 / 10**2 = 130, pointing apart."""
        sim, g = _sim([(100, 100), (110, 100)])
        sim.reset_forces()
        sim.apply_repulsion()
        a, b = g.get("e0"), g.get("e1")
        assert a.fx == pytest.approx(-130.0)
        assert b.fx == pytest.approx(130.0)
        assert a.fy == pytest.approx(0.0)
        assert b.fy == pytest.approx(0.0)

    def test_beyond_cutoff(self):
        sim, g = _sim([(0, 0), (400, 0)])
        sim.reset_forces()
        sim.apply_repulsion()
        assert g.get("e0").fx == 0.0
        assert g.get("e1").fx == 0.0

    def test_coincident_entities_stay_finite(self):
        """Distance is floored at 1 so coincident entities never divide by zero."""
        sim, g = _sim([(50, 50), (50, 50)])
        sim.reset_forces()
        sim.apply_repulsion()
        for e in g:
            assert math.isfinite(e.fx) and math.isfinite(e.fy)

    def test_close_pair_uses_floor(self):
        sim, g = _sim([(0, 0), (0.5, 0)])
        sim.reset_forces()
        sim.apply_repulsion()
        assert g.get("e0").fx == pytest.approx(-13000.0 * 0.5 / 1.0)

    def test_hidden_entities_do_not_participate(self):
        sim, g = _sim([(100, 100), (110, 100)])
        g.get("e1").fade = 0.0
        sim.reset_forces()
        sim.apply_repulsion()
        assert g.get("e0").fx == 0.0

    def test_three_body_superposition(self):
        """The middle entity of a symmetric line feels no net push."""
        sim, g = _sim([(100, 100), (120, 100), (140, 100)])
        sim.reset_forces()
        sim.apply_repulsion()
        assert g.get("e1").fx == pytest.approx(0.0, abs=1e-9)
        assert g.get("e0").fx < 0 < g.get("e2").fx


class TestSprings:
    def test_rest_length_has_no_force(self):
        sim, g = _sim([(0, 0), (110, 0)], links=[("e0", "e1")])
        sim.reset_forces()
        sim.apply_springs()
        assert g.get("e0").fx == pytest.approx(0.0)

    def test_stretched_spring_pulls_together(self):
        """At 210 apart the pull is 0.03 * (210 - 110) = 3 on each end."""
        sim, g = _sim([(0, 0), (210, 0)], links=[("e0", "e1")])
        sim.reset_forces()
        sim.apply_springs()
        assert g.get("e0").fx == pytest.approx(3.0)
        assert g.get("e1").fx == pytest.approx(-3.0)

    def test_compressed_spring_pushes_apart(self):
        sim, g = _sim([(0, 0), (60, 0)], links=[("e0", "e1")])
        sim.reset_forces()
        sim.apply_springs()
        assert g.get("e0").fx < 0 < g.get("e1").fx

    def test_hidden_endpoint_skips_spring(self):
        sim, g = _sim([(0, 0), (210, 0)], links=[("e0", "e1")])
        g.get("e1").fade = 0.0
        sim.reset_forces()
        sim.apply_springs()
        assert g.get("e0").fx == 0.0


class TestCentering:
    def test_pull_toward_logical_centre(self):
        sim, g = _sim([(0, 0)])
        cx, cy = sim.viewport.center
        sim.reset_forces()
        sim.apply_centering()
        e = g.get("e0")
        assert e.fx == pytest.approx(cx * 0.003)
        assert e.fy == pytest.approx(cy * 0.003)

    def test_selected_bias(self):
        sim, g = _sim([(0, 0), (10, 10)])
        cx, cy = sim.viewport.center
        sim.reset_forces()
        sim.apply_selected_bias(g.get("e1"))
        assert g.get("e1").fx == pytest.approx((cx - 10) * 0.05)
        assert g.get("e0").fx == 0.0

    def test_no_selection(self):
        sim, g = _sim([(0, 0)])
        sim.reset_forces()
        sim.apply_selected_bias(None)
        assert g.get("e0").fx == 0.0


class TestIntegration:
    def test_damped_velocity_update(self):
        """v' = v * damping + f * dt / mass, before the slow-speed damping kicks in."""
        sim, g = _sim([(300, 300)])
        e = g.get("e0")
        e.vx = 10.0
        e.fx = 5.0
        sim.float_offset = lambda entity, now_ms: (0.0, 0.0)
        sim.integrate(dt=1.0)
        assert e.vx == pytest.approx(10.0 * 0.1 + 5.0)
        assert e.x == pytest.approx(300 + 6.0)

    def test_mass_scales_acceleration(self):
        sim, g = _sim([(300, 300)])
        e = g.get("e0")
        e.mass = 3.0
        e.fx = 9.0
        sim.float_offset = lambda entity, now_ms: (0.0, 0.0)
        sim.integrate(dt=1.0)
        assert e.vx == pytest.approx(3.0)

    def test_slow_entities_get_extra_damping(self):
        sim, g = _sim([(300, 300)])
        e = g.get("e0")
        e.fx = 0.1
        sim.float_offset = lambda entity, now_ms: (0.0, 0.0)
        sim.integrate(dt=1.0)
        assert e.vx == pytest.approx(0.1 * 0.9)

    def test_clamped_to_bounds(self):
        """Positions stay within the surface, inset by radius + margin."""
        sim, g = _sim([(-100, 5000)])
        e = g.get("e0")
        sim.integrate(dt=1.0)
        margin = e.radius + 20
        assert e.x == pytest.approx(margin)
        assert e.y == pytest.approx(sim.viewport.height - margin)

    def test_hidden_and_dragged_entities_do_not_move(self):
        sim, g = _sim([(300, 300), (400, 300)])
        hidden, dragged = g.get("e0"), g.get("e1")
        hidden.fade = 0.0
        for e in (hidden, dragged):
            e.vx = 5.0
            e.fx = 5.0
        sim.integrate(dt=1.0, dragged=dragged)
        assert (hidden.x, dragged.x) == (300, 400)

    def test_float_motion_is_small_and_phase_shifted(self):
        sim, g = _sim([(300, 300), (300, 400)])
        a = sim.float_offset(g.get("e0"), 1000.0)
        b = sim.float_offset(g.get("e1"), 1000.0)
        assert all(abs(v) <= 0.05 for v in a + b)
        assert a != b

    def test_full_step_separates_a_close_pair(self):
        sim, g = _sim([(300, 300), (305, 300)])
        sim.step(dt=1.0, now_ms=0.0)
        assert g.get("e1").x - g.get("e0").x > 5
