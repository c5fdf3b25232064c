"""
Tests for gesture handling: hit testing, click-versus-drag and panning.
"""

from tests.graphs import make_view, show_everything


def _view():
    view = make_view()
    view.start()
    show_everything(view)
    a = view.graph.get("A")
    a.x, a.y = 500.0, 500.0
    return view, a


def test_hit_test_respects_radius_and_visibility():
    view, a = _view()
    g = view.gestures
    assert g.entity_at(502, 501) is a
    assert g.entity_at(500 + a.radius + 1, 500) is None
    a.fade = 0.1
    assert g.entity_at(500, 500) is None


def test_topmost_entity_wins():
    """Overlapping entities resolve to the one drawn last."""
    view, a = _view()
    c = view.graph.get("C")
    c.x, c.y = 501.0, 500.0
    assert view.gestures.entity_at(500.5, 500) is c


def test_short_drag_is_a_click():
    """Moving less than the click distance selects the entity."""
    view, a = _view()
    g = view.gestures
    g.pointer_move(500, 500)
    assert g.hovered is a
    assert g.pointer_down()
    g.pointer_move(502, 501)
    g.pointer_up()
    assert view.selected is a
    assert view.router.selections[-1] == ("A", "/nodes/A")


def test_long_drag_is_not_a_click():
    view, a = _view()
    g = view.gestures
    g.pointer_move(500, 500)
    g.pointer_down()
    g.pointer_move(503, 500)
    g.pointer_move(506, 500)
    g.pointer_up()
    assert view.selected is None
    assert a.x == 506


def test_drag_cancels_momentum():
    view, a = _view()
    a.vx, a.vy = 4.0, -3.0
    g = view.gestures
    g.pointer_move(500, 500)
    g.pointer_down()
    g.drag_move(10, 0)
    assert (a.vx, a.vy) == (0.0, 0.0)
    assert g.drag_distance == 10


def test_release_after_delay():
    """The entity is held briefly after pointer-up and then released."""
    view, a = _view()
    g = view.gestures
    g.pointer_move(500, 500)
    g.pointer_down()
    g.pointer_move(520, 500)
    g.pointer_up()
    assert g.dragged is a
    view.tick(50)
    assert g.dragged is a
    view.tick(60)
    assert g.dragged is None


def test_release_survives_reselection():
    """The drag release is not tied to a reveal episode."""
    view, a = _view()
    g = view.gestures
    g.pointer_move(500, 500)
    g.pointer_down()
    g.pointer_up()
    view.select_focus("B")
    view.tick(150)
    assert g.dragged is None


def test_pointer_down_on_empty_space():
    view, a = _view()
    g = view.gestures
    g.pointer_move(5, 5)
    assert g.hovered is None
    assert not g.pointer_down()
    g.pointer_up()
    assert view.selected is None


def test_pan_moves_everything():
    view, a = _view()
    before = {e.id: (e.x, e.y) for e in view.graph}
    view.gestures.pan(10, -5)
    for e in view.graph:
        x, y = before[e.id]
        assert (e.x, e.y) == (x + 10, y - 5)


def test_tap_select():
    view, a = _view()
    view.gestures.tap_select(a)
    assert view.selected is a
    view.gestures.tap_select(None)
    assert view.selected is a
