"""
Tests for the road graph.

Tests ingestion semantics, adjacency invariants, pruning and freezing.
"""

import logging

import pytest

from waypath.core.errors import GraphFrozenError, VertexNotFoundError
from waypath.core.routing.geodesy import haversine_distance, planar_distance
from waypath.core.routing.graph import Edge, RoadGraph, Vertex


@pytest.fixture
def road_graph():
    """Small Berkeley road graph: a triangle plus one isolated vertex."""
    graph = RoadGraph()
    graph.add_vertex(1, 37.8700, -122.2700, name="Shattuck Ave")
    graph.add_vertex(2, 37.8710, -122.2680)
    graph.add_vertex(3, 37.8690, -122.2660)
    graph.add_vertex(4, 37.8500, -122.2500)
    graph.add_edge(1, 2)
    graph.add_edge(2, 3)
    graph.add_edge(3, 1)
    return graph


class TestVertex:
    """Tests for Vertex dataclass."""

    def test_vertex_equality_by_id(self):
        """Test vertices compare by ID."""
        assert Vertex(id=1, lat=0.0, lon=0.0) == Vertex(id=1, lat=5.0, lon=5.0)
        assert Vertex(id=1, lat=0.0, lon=0.0) != Vertex(id=2, lat=0.0, lon=0.0)
        assert Vertex(id=1, lat=0.0, lon=0.0) != "vertex"

    def test_vertex_hashable(self):
        """Test vertices can be used in sets."""
        vertices = {Vertex(id=1, lat=0.0, lon=0.0), Vertex(id=1, lat=1.0, lon=1.0)}
        assert len(vertices) == 1


class TestRoadGraphIngestion:
    """Tests for RoadGraph ingestion API."""

    def test_add_vertex(self, road_graph):
        """Test adding vertices."""
        assert 1 in road_graph
        assert len(road_graph) == 4
        assert road_graph.lat(1) == 37.8700
        assert road_graph.lon(1) == -122.2700
        assert road_graph.name(1) == "Shattuck Ave"
        assert road_graph.name(2) is None

    def test_add_vertex_last_write_wins(self, road_graph):
        """Test re-adding an ID overwrites its coordinates."""
        road_graph.add_vertex(2, 37.8800, -122.2800)

        assert len(road_graph) == 4
        assert road_graph.lat(2) == 37.8800
        assert road_graph.lon(2) == -122.2800

    def test_overwrite_keeps_name_unless_given(self, road_graph):
        """Test overwrite preserves name when none is supplied."""
        road_graph.add_vertex(1, 37.8701, -122.2701)
        assert road_graph.name(1) == "Shattuck Ave"

        road_graph.add_vertex(1, 37.8701, -122.2701, name="Center St")
        assert road_graph.name(1) == "Center St"

    def test_overwrite_recomputes_edge_weights(self, road_graph):
        """Test incident weights follow moved coordinates."""
        road_graph.add_vertex(2, 37.8800, -122.2800)

        expected = haversine_distance(-122.2700, 37.8700, -122.2800, 37.8800)
        assert road_graph.edge_weight(1, 2) == pytest.approx(expected)
        assert road_graph.edge_weight(2, 1) == pytest.approx(expected)

    def test_set_name(self, road_graph):
        """Test naming a vertex."""
        road_graph.set_name(3, "University Ave")
        assert road_graph.name(3) == "University Ave"

    def test_add_edge(self, road_graph):
        """Test adding an edge."""
        assert road_graph.add_edge(1, 4) is True
        assert 4 in set(road_graph.adjacent(1))
        assert 1 in set(road_graph.adjacent(4))

    def test_add_edge_weight_is_distance(self, road_graph):
        """Test edge weight equals great-circle distance."""
        assert road_graph.edge_weight(1, 2) == pytest.approx(road_graph.distance(1, 2))

    def test_add_edge_symmetric(self, road_graph):
        """Test adjacency is symmetric with equal weights."""
        for edge in road_graph.edges():
            assert road_graph.edge_weight(edge.source, edge.dest) == road_graph.edge_weight(
                edge.dest, edge.source
            )
            assert edge.source in set(road_graph.adjacent(edge.dest))

    def test_add_edge_self_loop_rejected(self, road_graph):
        """Test self-loops are a silent no-op."""
        assert road_graph.add_edge(1, 1) is False
        assert 1 not in set(road_graph.adjacent(1))
        assert road_graph.rejected_edges == 1

    def test_add_edge_missing_endpoint_rejected(self, road_graph):
        """Test edges to unknown vertices are a silent no-op."""
        assert road_graph.add_edge(1, 999) is False
        assert road_graph.add_edge(999, 1) is False
        assert 999 not in road_graph
        assert road_graph.number_of_edges() == 3
        assert road_graph.rejected_edges == 2

    def test_duplicate_edge_is_idempotent(self, road_graph):
        """Test adding an existing edge again keeps one segment."""
        road_graph.add_edge(1, 2)
        road_graph.add_edge(2, 1)
        assert road_graph.number_of_edges() == 3

    def test_prune_disconnected_vertices(self, road_graph):
        """Test isolated vertices are removed."""
        removed = road_graph.prune_disconnected_vertices()

        assert removed == 1
        assert 4 not in road_graph
        assert sorted(road_graph.vertices()) == [1, 2, 3]

    def test_prune_is_idempotent(self, road_graph):
        """Test pruning twice removes nothing more."""
        road_graph.prune_disconnected_vertices()
        assert road_graph.prune_disconnected_vertices() == 0

    def test_number_of_isolated_vertices(self, road_graph):
        """Test isolated vertices are counted before pruning."""
        assert road_graph.number_of_isolated_vertices() == 1
        assert road_graph.get_graph_stats()["num_isolated"] == 1

        road_graph.prune_disconnected_vertices()
        assert road_graph.number_of_isolated_vertices() == 0

    def test_prune_is_timed(self, road_graph, caplog):
        """Test pruning logs its duration at debug level."""
        with caplog.at_level(logging.DEBUG, logger="waypath.utils.logging"):
            road_graph.prune_disconnected_vertices()

        assert any(
            "prune_disconnected_vertices executed in" in message for message in caplog.messages
        )


class TestRoadGraphFreeze:
    """Tests for the frozen query phase."""

    def test_freeze_blocks_mutation(self, road_graph):
        """Test mutations after freeze raise GraphFrozenError."""
        road_graph.freeze()
        assert road_graph.is_frozen

        with pytest.raises(GraphFrozenError):
            road_graph.add_vertex(5, 0.0, 0.0)
        with pytest.raises(GraphFrozenError):
            road_graph.add_edge(1, 4)
        with pytest.raises(GraphFrozenError):
            road_graph.prune_disconnected_vertices()
        with pytest.raises(GraphFrozenError):
            road_graph.set_name(1, "x")

    def test_frozen_graph_still_readable(self, road_graph):
        """Test queries work after freeze."""
        road_graph.freeze()
        assert road_graph.distance(1, 2) > 0
        assert len(list(road_graph.adjacent(1))) == 2


class TestRoadGraphQueries:
    """Tests for read accessors."""

    def test_distance_to_self_is_zero(self, road_graph):
        """Test distance(v, v) == 0 for every vertex."""
        for vertex_id in road_graph.vertices():
            assert road_graph.distance(vertex_id, vertex_id) == 0.0

    def test_distance_in_miles(self):
        """Test default weights use the configured radius in miles."""
        graph = RoadGraph()
        graph.add_vertex(1, 0.0, 0.0)
        graph.add_vertex(2, 1.0, 0.0)
        assert graph.distance(1, 2) == pytest.approx(69.167, abs=0.01)

    def test_custom_earth_radius(self):
        """Test explicit radius."""
        graph = RoadGraph(earth_radius=1.0)
        graph.add_vertex(1, 0.0, 0.0)
        graph.add_vertex(2, 0.0, 90.0)
        assert graph.distance(1, 2) == pytest.approx(1.5707963, rel=1e-6)

    def test_custom_metric(self):
        """Test a planar metric for synthetic geometry."""
        graph = RoadGraph(metric=planar_distance)
        graph.add_vertex(1, 0.0, 0.0)
        graph.add_vertex(2, 4.0, 3.0)
        graph.add_edge(1, 2)
        assert graph.edge_weight(1, 2) == 5.0

    def test_bearing(self, road_graph):
        """Test bearing from a vertex to one due north."""
        road_graph.add_vertex(10, 37.9, -122.27)
        assert road_graph.bearing(1, 10) == pytest.approx(0.0, abs=1e-9)

    def test_unknown_vertex_raises(self, road_graph):
        """Test accessors on unknown IDs."""
        with pytest.raises(VertexNotFoundError):
            road_graph.lat(999)
        with pytest.raises(KeyError):
            road_graph.distance(1, 999)
        with pytest.raises(VertexNotFoundError, match="999"):
            road_graph.bearing(999, 1)

    def test_adjacent_unknown_vertex_is_empty(self, road_graph):
        """Test unknown vertices have no neighbors."""
        assert list(road_graph.adjacent(999)) == []
        assert road_graph.degree(999) == 0

    def test_vertex_snapshot(self, road_graph):
        """Test vertex() returns coordinates and adjacency."""
        vertex = road_graph.vertex(1)

        assert vertex.id == 1
        assert vertex.name == "Shattuck Ave"
        assert set(vertex.adjacency) == {2, 3}
        assert vertex.adjacency[2] == pytest.approx(road_graph.distance(1, 2))

    def test_edge_weight_missing_edge(self, road_graph):
        """Test weight lookup for a non-existent edge."""
        with pytest.raises(ValueError, match="No edge between"):
            road_graph.edge_weight(1, 4)

    def test_edges_listed_once(self, road_graph):
        """Test edges() yields each undirected segment once."""
        edges = list(road_graph.edges())
        assert len(edges) == 3
        assert all(isinstance(edge, Edge) for edge in edges)
        assert all(edge.weight > 0 for edge in edges)

    def test_graph_stats(self, road_graph):
        """Test graph statistics."""
        stats = road_graph.get_graph_stats()

        assert stats["num_vertices"] == 4
        assert stats["num_edges"] == 3
        assert stats["num_components"] == 2
        assert stats["is_connected"] is False
        assert stats["avg_degree"] == pytest.approx(1.5)

    def test_graph_stats_empty(self):
        """Test statistics of an empty graph."""
        stats = RoadGraph().get_graph_stats()
        assert stats["num_vertices"] == 0
        assert stats["is_connected"] is False

    def test_export_to_geojson(self, road_graph):
        """Test GeoJSON export."""
        geojson = road_graph.export_to_geojson()

        assert geojson["type"] == "FeatureCollection"
        points = [f for f in geojson["features"] if f["geometry"]["type"] == "Point"]
        lines = [f for f in geojson["features"] if f["geometry"]["type"] == "LineString"]
        assert len(points) == 4
        assert len(lines) == 3
        assert points[0]["geometry"]["coordinates"] == [-122.2700, 37.8700]
