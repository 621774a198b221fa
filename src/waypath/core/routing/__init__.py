"""
Road network routing.

This module provides the routing core:
- Great-circle distance and bearing
- Transverse Mercator projection for the spatial index
- Road graph with symmetric, distance-weighted adjacency
- k-d tree nearest-vertex lookup
- A* shortest-path search
"""

from waypath.core.routing.geodesy import haversine_distance, initial_bearing
from waypath.core.routing.graph import Edge, RoadGraph, Vertex
from waypath.core.routing.pathfinding import (
    AStarPathfinder,
    FrontierEntry,
    NoPathFound,
    NoPathReason,
    PathfinderConfig,
    Route,
)
from waypath.core.routing.projection import TransverseMercatorProjection
from waypath.core.routing.service import RouteService
from waypath.core.routing.spatial_index import NearestResult, SpatialIndex

__all__ = [
    "haversine_distance",
    "initial_bearing",
    "Edge",
    "RoadGraph",
    "Vertex",
    "AStarPathfinder",
    "FrontierEntry",
    "NoPathFound",
    "NoPathReason",
    "PathfinderConfig",
    "Route",
    "TransverseMercatorProjection",
    "RouteService",
    "NearestResult",
    "SpatialIndex",
]
