"""
Query facade tying the road graph, spatial index and pathfinder together.

A RouteService is built once at startup and then only read: it snaps raw
coordinates to vertices and routes between them.
"""

import logging
import math
from pathlib import Path
from typing import Optional, Union

from waypath.core.config import Settings, settings
from waypath.core.errors import ConfigurationError, GraphFrozenError, ValidationError
from waypath.core.parsers.osm_parser import load_osm_file
from waypath.core.routing.graph import RoadGraph
from waypath.core.routing.pathfinding import AStarPathfinder, PathfinderConfig, SearchResult
from waypath.core.routing.projection import TransverseMercatorProjection
from waypath.core.routing.spatial_index import SpatialIndex
from waypath.utils.logging import PerformanceTimer

logger = logging.getLogger(__name__)


class RouteService:
    """
    Nearest-vertex snapping and shortest-path queries over a frozen graph.
    """

    def __init__(
        self,
        graph: RoadGraph,
        index: SpatialIndex,
        config: Optional[PathfinderConfig] = None,
    ):
        """
        Initialize the service from prebuilt components.

        Prefer RouteService.build, which prunes, freezes and indexes the graph.

        Args:
            graph: Frozen road graph
            index: Spatial index over the graph's vertices
            config: Pathfinder configuration (default: settings)
        """
        self.graph = graph
        self.index = index
        self.pathfinder = AStarPathfinder(graph, config or PathfinderConfig.from_settings())

    @classmethod
    def build(
        cls,
        graph: RoadGraph,
        projection: Optional[TransverseMercatorProjection] = None,
        config: Optional[PathfinderConfig] = None,
    ) -> "RouteService":
        """
        Finish ingestion and build the query structures.

        Prunes isolated vertices, freezes the graph and indexes every
        surviving vertex. A graph frozen by the caller must already be pruned.

        Args:
            graph: Road graph populated through the ingestion API
            projection: Index projection (default: settings region centroid)
            config: Pathfinder configuration

        Returns:
            Ready-to-query RouteService

        Raises:
            GraphFrozenError: If a frozen graph still holds isolated vertices
        """
        if not graph.is_frozen:
            graph.prune_disconnected_vertices()
            graph.freeze()
        elif graph.number_of_isolated_vertices():
            raise GraphFrozenError("prune disconnected vertices")

        with PerformanceTimer("spatial_index_build"):
            index = SpatialIndex.from_graph(graph, projection)

        return cls(graph, index, config)

    @classmethod
    def from_osm(
        cls,
        osm_path: Union[str, Path],
        config: Optional[Settings] = None,
    ) -> "RouteService":
        """
        Load an OSM XML extract and build a service over it.

        Args:
            osm_path: Path to the .osm / .osm.xml file
            config: Settings for radius, region and search (default: settings)

        Returns:
            Ready-to-query RouteService

        Raises:
            ConfigurationError: If the region bounds give an unusable projection
        """
        config = config or settings
        try:
            projection = TransverseMercatorProjection.from_settings(config)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid projection settings: {e}",
                config_key="root_ullat/root_lrlat",
            ) from e

        graph = RoadGraph(earth_radius=config.earth_radius_miles)

        with PerformanceTimer("osm_load"):
            result = load_osm_file(osm_path, graph, allowed_highway_types=config.allowed_highway_types)
        logger.info(
            f"Loaded {result.vertices_added} vertices and {result.edges_added} edges "
            f"from {osm_path}"
        )

        return cls.build(
            graph,
            projection=projection,
            config=PathfinderConfig(
                heuristic_weight=config.heuristic_weight,
                max_expansions=config.max_search_expansions,
            ),
        )

    def resolve_nearest(self, lon: float, lat: float) -> int:
        """
        Snap a coordinate to the closest road vertex.

        Args:
            lon: Longitude in degrees
            lat: Latitude in degrees

        Returns:
            Vertex ID

        Raises:
            ValidationError: If the coordinate is not a finite lon/lat or lies
                90 degrees from the projection meridian
            EmptyIndexError: If no vertices are indexed
        """
        _validate_coordinate(lon, lat)
        try:
            return self.index.nearest_lonlat(lon, lat)
        except ValueError as e:
            raise ValidationError(str(e), field="lon") from e

    def shortest_path(
        self,
        start_lon: float,
        start_lat: float,
        dest_lon: float,
        dest_lat: float,
    ) -> SearchResult:
        """
        Route between the vertices nearest two coordinates.

        Args:
            start_lon: Start longitude
            start_lat: Start latitude
            dest_lon: Destination longitude
            dest_lat: Destination latitude

        Returns:
            Route, or NoPathFound when the vertices are not connected

        Raises:
            ValidationError: If a coordinate is invalid
            EmptyIndexError: If no vertices are indexed
        """
        start_id = self.resolve_nearest(start_lon, start_lat)
        goal_id = self.resolve_nearest(dest_lon, dest_lat)
        return self.route_between(start_id, goal_id)

    def route_between(self, start_id: int, goal_id: int) -> SearchResult:
        """Route between two known vertex IDs."""
        with PerformanceTimer(f"route {start_id}->{goal_id}", log_level=logging.DEBUG):
            result = self.pathfinder.find_path(start_id, goal_id)
        return result

    def distance(self, source: int, dest: int) -> float:
        """Great-circle distance between two vertices in miles."""
        return self.graph.distance(source, dest)

    def bearing(self, source: int, dest: int) -> float:
        """Initial bearing between two vertices in degrees."""
        return self.graph.bearing(source, dest)


def _validate_coordinate(lon: float, lat: float) -> None:
    if not (math.isfinite(lon) and -180 <= lon <= 180):
        raise ValidationError(f"Longitude must be between -180 and 180, got {lon}", field="lon")
    if not (math.isfinite(lat) and -90 <= lat <= 90):
        raise ValidationError(f"Latitude must be between -90 and 90, got {lat}", field="lat")
