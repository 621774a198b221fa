"""
Road network graph for routing.

Vertices are road intersections and way points from map data; edges are the
road segments between them, weighted by great-circle distance. The graph is
populated during a single-threaded ingestion phase, pruned of isolated
vertices, then frozen and shared read-only by queries.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from waypath.core.config import settings
from waypath.core.errors import GraphFrozenError, VertexNotFoundError
from waypath.core.routing.geodesy import DistanceMetric, great_circle_metric, initial_bearing
from waypath.utils.logging import log_performance

try:
    import networkx as nx
except ImportError:
    raise ImportError(
        "NetworkX is required for road graph construction. "
        "Install it with: pip install networkx"
    )

logger = logging.getLogger(__name__)


@dataclass
class Vertex:
    """
    Snapshot of a road graph vertex.

    Attributes:
        id: Unique 64-bit vertex identifier (OSM node id for map data)
        lat: Latitude in degrees
        lon: Longitude in degrees
        name: Optional display name
        adjacency: Mapping of neighbor id to edge weight
    """

    id: int
    lat: float
    lon: float
    name: Optional[str] = None
    adjacency: Dict[int, float] = field(default_factory=dict)

    def __hash__(self) -> int:
        """Make vertex hashable for use in sets and dicts."""
        return hash(self.id)

    def __eq__(self, other: Any) -> bool:
        """Compare vertices by ID."""
        if not isinstance(other, Vertex):
            return False
        return self.id == other.id


@dataclass(frozen=True)
class Edge:
    """Derived view of a road segment."""

    source: int
    dest: int
    weight: float


class RoadGraph:
    """
    Undirected, weighted road network backed by a NetworkX graph.

    Adjacency is symmetric by construction and every edge weight equals the
    graph metric between its endpoints.
    """

    def __init__(
        self,
        earth_radius: Optional[float] = None,
        metric: Optional[DistanceMetric] = None,
    ):
        """
        Initialize an empty road graph.

        Args:
            earth_radius: Sphere radius for great-circle weights (default: settings)
            metric: Custom (lon1, lat1, lon2, lat2) distance; overrides earth_radius
        """
        if metric is None:
            radius = earth_radius if earth_radius is not None else settings.earth_radius_miles
            metric = great_circle_metric(radius)

        self.metric = metric
        self.graph: nx.Graph = nx.Graph()
        self.rejected_edges = 0
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        """Whether ingestion has finished."""
        return self._frozen

    def freeze(self) -> None:
        """End the ingestion phase; later mutations raise GraphFrozenError."""
        self._frozen = True
        logger.info(
            f"Road graph frozen with {self.graph.number_of_nodes()} vertices "
            f"and {self.graph.number_of_edges()} edges"
        )

    def _check_mutable(self, operation: str) -> None:
        if self._frozen:
            raise GraphFrozenError(operation)

    def add_vertex(
        self, vertex_id: int, lat: float, lon: float, name: Optional[str] = None
    ) -> None:
        """
        Add a vertex, or overwrite the coordinates of an existing one.

        On id collision the last write wins. Weights of edges already touching
        the vertex are recomputed from the new coordinates.

        Args:
            vertex_id: Vertex ID
            lat: Latitude in degrees
            lon: Longitude in degrees
            name: Optional display name (kept when omitted on overwrite)
        """
        self._check_mutable("add vertex")

        if vertex_id in self.graph:
            attrs = self.graph.nodes[vertex_id]
            attrs["lat"] = float(lat)
            attrs["lon"] = float(lon)
            if name is not None:
                attrs["name"] = name
            for neighbor_id in self.graph.neighbors(vertex_id):
                self.graph[vertex_id][neighbor_id]["weight"] = self.distance(
                    vertex_id, neighbor_id
                )
            return

        self.graph.add_node(vertex_id, lat=float(lat), lon=float(lon), name=name)

    def set_name(self, vertex_id: int, name: str) -> None:
        """Attach a display name to an existing vertex."""
        self._check_mutable("set vertex name")
        self._attrs(vertex_id)["name"] = name

    def add_edge(self, source: int, dest: int) -> bool:
        """
        Connect two vertices with a road segment.

        Invalid segments are skipped rather than raised so a bad way in the
        source data does not abort ingestion.

        Args:
            source: First vertex ID
            dest: Second vertex ID

        Returns:
            True if the edge was added, False if it was rejected
        """
        self._check_mutable("add edge")

        if source == dest:
            logger.debug(f"Rejected self-loop edge at vertex {source}")
            self.rejected_edges += 1
            return False

        if source not in self.graph or dest not in self.graph:
            logger.debug(f"Rejected edge {source}-{dest}: endpoint not in graph")
            self.rejected_edges += 1
            return False

        self.graph.add_edge(source, dest, weight=self.distance(source, dest))
        return True

    @log_performance(log_level=logging.DEBUG)
    def prune_disconnected_vertices(self) -> int:
        """
        Remove every vertex with no adjacent road segment.

        Returns:
            Number of vertices removed
        """
        self._check_mutable("prune vertices")

        isolated = list(nx.isolates(self.graph))
        self.graph.remove_nodes_from(isolated)

        logger.info(
            f"Pruned {len(isolated)} disconnected vertices, "
            f"{self.graph.number_of_nodes()} remain"
        )
        return len(isolated)

    def number_of_isolated_vertices(self) -> int:
        """Count vertices with no adjacent road segment."""
        return nx.number_of_isolates(self.graph)

    def _attrs(self, vertex_id: int) -> Dict[str, Any]:
        try:
            return self.graph.nodes[vertex_id]
        except KeyError:
            raise VertexNotFoundError(vertex_id) from None

    def lon(self, vertex_id: int) -> float:
        """Longitude of a vertex."""
        return self._attrs(vertex_id)["lon"]

    def lat(self, vertex_id: int) -> float:
        """Latitude of a vertex."""
        return self._attrs(vertex_id)["lat"]

    def name(self, vertex_id: int) -> Optional[str]:
        """Display name of a vertex, if any."""
        return self._attrs(vertex_id)["name"]

    def vertex(self, vertex_id: int) -> Vertex:
        """
        Get a snapshot of a vertex and its adjacency.

        Raises:
            VertexNotFoundError: If the vertex is not in the graph
        """
        attrs = self._attrs(vertex_id)
        adjacency = {
            neighbor_id: data["weight"] for neighbor_id, data in self.graph[vertex_id].items()
        }
        return Vertex(
            id=vertex_id,
            lat=attrs["lat"],
            lon=attrs["lon"],
            name=attrs["name"],
            adjacency=adjacency,
        )

    def vertices(self) -> Iterator[int]:
        """Iterate over vertex IDs in insertion order."""
        return iter(self.graph.nodes)

    def adjacent(self, vertex_id: int) -> Iterator[int]:
        """
        Iterate over the neighbors of a vertex.

        Unknown vertices have no neighbors.
        """
        if vertex_id not in self.graph:
            return iter(())
        return iter(self.graph[vertex_id])

    def degree(self, vertex_id: int) -> int:
        """Number of road segments touching a vertex (0 if unknown)."""
        if vertex_id not in self.graph:
            return 0
        return self.graph.degree(vertex_id)

    def edge_weight(self, source: int, dest: int) -> float:
        """
        Get edge weight between two vertices.

        Raises:
            ValueError: If edge doesn't exist
        """
        if not self.graph.has_edge(source, dest):
            raise ValueError(f"No edge between {source} and {dest}")

        return self.graph[source][dest]["weight"]

    def edges(self) -> Iterator[Edge]:
        """Iterate over each road segment once."""
        for source, dest, weight in self.graph.edges(data="weight"):
            yield Edge(source=source, dest=dest, weight=weight)

    def number_of_edges(self) -> int:
        """Number of undirected road segments."""
        return self.graph.number_of_edges()

    def distance(self, source: int, dest: int) -> float:
        """
        Great-circle distance between two vertices.

        Uses the graph metric, miles on the configured Earth radius by default.

        Raises:
            VertexNotFoundError: If either vertex is not in the graph
        """
        a = self._attrs(source)
        b = self._attrs(dest)
        return self.metric(a["lon"], a["lat"], b["lon"], b["lat"])

    def bearing(self, source: int, dest: int) -> float:
        """
        Initial bearing in degrees from one vertex towards another.

        Raises:
            VertexNotFoundError: If either vertex is not in the graph
        """
        a = self._attrs(source)
        b = self._attrs(dest)
        return initial_bearing(a["lon"], a["lat"], b["lon"], b["lat"])

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def __contains__(self, vertex_id: object) -> bool:
        return vertex_id in self.graph

    def get_graph_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the road graph.

        Returns:
            Dictionary with graph statistics
        """
        if len(self.graph.nodes) == 0:
            return {
                "num_vertices": 0,
                "num_edges": 0,
                "is_connected": False,
                "num_components": 0,
                "avg_degree": 0.0,
                "num_isolated": 0,
                "rejected_edges": self.rejected_edges,
                "frozen": self._frozen,
            }

        num_vertices = self.graph.number_of_nodes()
        return {
            "num_vertices": num_vertices,
            "num_edges": self.graph.number_of_edges(),
            "is_connected": nx.is_connected(self.graph),
            "num_components": nx.number_connected_components(self.graph),
            "avg_degree": sum(dict(self.graph.degree()).values()) / num_vertices,
            "num_isolated": nx.number_of_isolates(self.graph),
            "rejected_edges": self.rejected_edges,
            "frozen": self._frozen,
        }

    def export_to_geojson(self) -> Dict[str, Any]:
        """
        Export graph to GeoJSON format.

        Returns:
            GeoJSON FeatureCollection with Point vertices and LineString edges
        """
        features: List[Dict[str, Any]] = []

        for vertex_id, attrs in self.graph.nodes(data=True):
            features.append(
                {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [attrs["lon"], attrs["lat"]]},
                    "properties": {
                        "id": vertex_id,
                        "name": attrs["name"],
                        "degree": self.graph.degree(vertex_id),
                        "type": "vertex",
                    },
                }
            )

        for edge in self.edges():
            source = self.graph.nodes[edge.source]
            dest = self.graph.nodes[edge.dest]
            features.append(
                {
                    "type": "Feature",
                    "geometry": {
                        "type": "LineString",
                        "coordinates": [
                            [source["lon"], source["lat"]],
                            [dest["lon"], dest["lat"]],
                        ],
                    },
                    "properties": {
                        "from": edge.source,
                        "to": edge.dest,
                        "weight": edge.weight,
                        "type": "edge",
                    },
                }
            )

        return {"type": "FeatureCollection", "features": features}
