"""
Tests for the graph data structures: entities, links, lookups and export.
"""

import networkx as nx
import pytest

from reveal_core.enums import LinkStyle, Shape
from reveal_core.graph import Entity, Graph, Link


def _graph():
    g = Graph(anchor_id="me")
    for eid in ("me", "a", "b", "c"):
        g.add_entity(Entity(eid, name=eid.upper()))
    g.add_link(Link("me", "a", weight=3, label="knows"))
    g.add_link(Link("b", "me", style=LinkStyle.DOTTED))
    g.add_link(Link("b", "c"))
    return g


class TestEntity:
    def test_defaults(self):
        """A fresh entity is hidden, at rest and has an empty speed window."""
        e = Entity("x")
        assert e.fade == 0.0 and e.target == 0.0
        assert e.vx == 0.0 and e.vy == 0.0
        assert e.settle_count == 0
        assert len(e.speed_history) == 0
        assert e.speed_history.maxlen == 10

    def test_shape_from_category(self):
        """The category tag picks the shape; unknown tags draw as circles."""
        assert Entity("x", category="square").shape is Shape.SQUARE
        assert Entity("x", category="HEXAGON").shape is Shape.HEXAGON
        assert Entity("x", category="blob").shape is Shape.CIRCLE

    def test_speed(self):
        e = Entity("x", vx=3.0, vy=4.0)
        assert e.speed == pytest.approx(5.0)

    def test_entities_compare_by_identity(self):
        """Two records with the same field values are still distinct entities."""
        assert Entity("x") != Entity("x")


class TestGraph:
    def test_membership_and_order(self):
        g = _graph()
        assert len(g) == 4
        assert "a" in g and "zzz" not in g
        assert [e.id for e in g] == ["me", "a", "b", "c"]

    def test_anchor(self):
        g = _graph()
        assert g.anchor.id == "me"
        assert g.is_anchor(g.get("me"))
        assert not g.is_anchor(g.get("a"))
        assert not g.is_anchor(None)

    def test_neighbors_ignore_direction(self):
        """Adjacency is symmetric regardless of which endpoint is the source."""
        g = _graph()
        assert set(g.neighbors("me")) == {"a", "b"}
        assert set(g.neighbors("b")) == {"me", "c"}
        assert g.neighbors("c") == ["b"]
        assert g.neighbors("missing") == []

    def test_add_link_unknown_endpoint(self):
        g = _graph()
        with pytest.raises(KeyError):
            g.add_link(Link("a", "nowhere"))
        assert len(g.links) == 3

    def test_handles_are_stable(self):
        """Handles follow load order and survive re-adding an id."""
        g = _graph()
        assert g.handle("me") == 0
        assert g.handle("c") == 3
        g.add_entity(Entity("a", name="replacement"))
        assert g.handle("a") == 1
        assert g.get("a").name == "replacement"
        assert len(g) == 4

    def test_endpoints_resolve_through_table(self):
        """Mutating an entity is visible through every link referencing it."""
        g = _graph()
        link = g.links[0]
        g.get("a").x = 42.0
        source, target = g.endpoints(link)
        assert source is g.get("me")
        assert target.x == 42.0

    def test_visible_is_strict(self):
        g = _graph()
        g.get("a").fade = 0.5
        g.get("b").fade = 0.51
        assert [e.id for e in g.visible(0.5)] == ["b"]
        assert {e.id for e in g.visible(0.0)} == {"a", "b"}

    def test_get_none(self):
        g = _graph()
        assert g.get(None) is None
        assert Graph().anchor is None


class TestExport:
    def test_to_networkx(self):
        g = _graph()
        g.get("a").x = 10.0
        G = g.to_networkx()
        assert isinstance(G, nx.Graph)
        assert G.number_of_nodes() == 4
        assert G.number_of_edges() == 3
        assert G.nodes["me"]["anchor"] is True
        assert G.nodes["a"]["x"] == 10.0
        assert G.edges["me", "a"]["weight"] == 3
        assert G.edges["me", "a"]["label"] == "knows"
        assert G.edges["b", "me"]["style"] == "dotted"

    def test_export_graphml(self, tmp_path):
        g = _graph()
        path = tmp_path / "graph.graphml"
        g.export_graphml(str(path))
        assert path.exists()
        loaded = nx.read_graphml(str(path))
        assert set(loaded.nodes()) == {"me", "a", "b", "c"}
        assert loaded.number_of_edges() == 3
