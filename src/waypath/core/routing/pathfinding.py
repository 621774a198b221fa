"""
A* shortest-path search over the road graph.

The heuristic is the great-circle distance to the goal. Because every edge
weight is itself a great-circle distance, no route between two vertices can
be shorter than their direct distance, so the heuristic is consistent and a
vertex never needs to be expanded twice.
"""

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from shapely.geometry import LineString

from waypath.core.config import settings
from waypath.core.routing.graph import RoadGraph

logger = logging.getLogger(__name__)


@dataclass
class PathfinderConfig:
    """
    Configuration for A* search.

    Attributes:
        heuristic_weight: Weight for heuristic (1.0 = A*, 0.0 = Dijkstra,
            higher = greedier and no longer guaranteed optimal)
        max_expansions: Optional cap on vertices expanded per search
    """

    heuristic_weight: float = 1.0
    max_expansions: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.heuristic_weight < 0:
            raise ValueError("heuristic_weight must be non-negative")
        if self.max_expansions is not None and self.max_expansions <= 0:
            raise ValueError("max_expansions must be positive")

    @classmethod
    def from_settings(cls) -> "PathfinderConfig":
        """Create a config from the process settings."""
        return cls(
            heuristic_weight=settings.heuristic_weight,
            max_expansions=settings.max_search_expansions,
        )


@dataclass(order=True)
class FrontierEntry:
    """
    Priority queue entry, ordered by f = g + h then by push sequence.

    Attributes:
        priority: Estimated total cost through this vertex
        sequence: Push counter that makes equal priorities pop in FIFO order
        vertex_id: Vertex reached
        cost: Cost from the start along the discovering path
        parent: Predecessor on that path
    """

    priority: float
    sequence: int
    vertex_id: int = field(compare=False)
    cost: float = field(compare=False)
    parent: Optional[int] = field(compare=False, default=None)


@dataclass
class Route:
    """
    A path through the road graph.

    Attributes:
        vertex_ids: Ordered vertex IDs from start to goal
        total_cost: Sum of edge weights along the path
        coordinates: (lon, lat) of each vertex
        expanded: Number of vertices expanded by the search
        metadata: Additional route metadata
    """

    vertex_ids: List[int]
    total_cost: float = 0.0
    coordinates: List[Tuple[float, float]] = field(default_factory=list)
    expanded: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    found = True

    @property
    def start_id(self) -> int:
        return self.vertex_ids[0]

    @property
    def goal_id(self) -> int:
        return self.vertex_ids[-1]

    def __len__(self) -> int:
        return len(self.vertex_ids)

    def get_geometry(self) -> LineString:
        """
        Get route as Shapely LineString in (lon, lat).

        Single-vertex routes have no length and yield an empty LineString.
        """
        if len(self.coordinates) < 2:
            return LineString()
        return LineString(self.coordinates)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert route to dictionary.

        Returns:
            Dictionary representation
        """
        return {
            "found": True,
            "num_vertices": len(self.vertex_ids),
            "vertex_ids": list(self.vertex_ids),
            "total_cost": float(self.total_cost),
            "coordinates": [list(coord) for coord in self.coordinates],
            "expanded": self.expanded,
            "metadata": self.metadata,
        }


class NoPathReason(str, Enum):
    """Why a search ended without a route."""

    UNREACHABLE = "unreachable"
    ISOLATED_VERTEX = "isolated_vertex"
    UNKNOWN_VERTEX = "unknown_vertex"
    BUDGET_EXHAUSTED = "budget_exhausted"


@dataclass
class NoPathFound:
    """
    Search outcome when the goal cannot be reached.

    This is a normal result, not an error.

    Attributes:
        start_id: Requested start vertex
        goal_id: Requested goal vertex
        reason: Why no route was produced
        expanded: Number of vertices expanded before giving up
    """

    start_id: int
    goal_id: int
    reason: NoPathReason = NoPathReason.UNREACHABLE
    expanded: int = 0

    found = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert outcome to dictionary."""
        return {
            "found": False,
            "start_id": self.start_id,
            "goal_id": self.goal_id,
            "reason": self.reason.value,
            "expanded": self.expanded,
        }


SearchResult = Union[Route, NoPathFound]


class AStarPathfinder:
    """
    A* search with a great-circle heuristic.

    The pathfinder holds no per-search state, so one instance can serve
    concurrent searches over a frozen graph.
    """

    def __init__(self, graph: RoadGraph, config: Optional[PathfinderConfig] = None):
        """
        Initialize the pathfinder.

        Args:
            graph: Road graph to search
            config: Pathfinder configuration (uses defaults if not provided)
        """
        self.graph = graph
        self.config = config or PathfinderConfig()

    def find_path(self, start_id: int, goal_id: int) -> SearchResult:
        """
        Find the least-cost path between two vertices.

        Args:
            start_id: Starting vertex ID
            goal_id: Goal vertex ID

        Returns:
            Route if the goal is reachable, otherwise NoPathFound
        """
        if start_id not in self.graph or goal_id not in self.graph:
            return NoPathFound(start_id, goal_id, NoPathReason.UNKNOWN_VERTEX)

        if start_id == goal_id:
            return self._build_route([start_id], 0.0, expanded=0)

        if self.graph.degree(start_id) == 0 or self.graph.degree(goal_id) == 0:
            return NoPathFound(start_id, goal_id, NoPathReason.ISOLATED_VERTEX)

        weight = self.config.heuristic_weight
        budget = self.config.max_expansions
        sequence = itertools.count()

        frontier: List[FrontierEntry] = [
            FrontierEntry(
                priority=weight * self._heuristic(start_id, goal_id),
                sequence=next(sequence),
                vertex_id=start_id,
                cost=0.0,
            )
        ]
        g_score: Dict[int, float] = {start_id: 0.0}
        came_from: Dict[int, Optional[int]] = {start_id: None}
        closed_set: Set[int] = set()

        while frontier:
            entry = heapq.heappop(frontier)
            current_id = entry.vertex_id

            # Stale entry superseded by a cheaper one
            if current_id in closed_set:
                continue

            if current_id == goal_id:
                closed_set.add(current_id)
                return self._reconstruct_path(came_from, goal_id, entry.cost, len(closed_set))

            # Budget counts vertices whose neighbors were actually visited
            if budget is not None and len(closed_set) >= budget:
                logger.warning(
                    f"Search {start_id}->{goal_id} stopped after {len(closed_set)} expansions"
                )
                return NoPathFound(
                    start_id, goal_id, NoPathReason.BUDGET_EXHAUSTED, expanded=len(closed_set)
                )

            closed_set.add(current_id)

            for neighbor_id in self.graph.adjacent(current_id):
                if neighbor_id in closed_set:
                    continue

                tentative_g = entry.cost + self.graph.edge_weight(current_id, neighbor_id)

                if neighbor_id not in g_score or tentative_g < g_score[neighbor_id]:
                    g_score[neighbor_id] = tentative_g
                    came_from[neighbor_id] = current_id
                    heapq.heappush(
                        frontier,
                        FrontierEntry(
                            priority=tentative_g + weight * self._heuristic(neighbor_id, goal_id),
                            sequence=next(sequence),
                            vertex_id=neighbor_id,
                            cost=tentative_g,
                            parent=current_id,
                        ),
                    )

        logger.debug(f"No path from {start_id} to {goal_id} after {len(closed_set)} expansions")
        return NoPathFound(start_id, goal_id, NoPathReason.UNREACHABLE, expanded=len(closed_set))

    def _heuristic(self, vertex_id: int, goal_id: int) -> float:
        """Great-circle distance from a vertex to the goal."""
        return self.graph.distance(vertex_id, goal_id)

    def _reconstruct_path(
        self,
        came_from: Dict[int, Optional[int]],
        goal_id: int,
        total_cost: float,
        expanded: int,
    ) -> Route:
        """
        Follow parent links from the goal back to the start.

        Args:
            came_from: Mapping of vertex ID to predecessor (None for the start)
            goal_id: Goal vertex ID
            total_cost: Cost of the path
            expanded: Number of vertices expanded

        Returns:
            Route object
        """
        path_ids = [goal_id]
        parent = came_from[goal_id]
        while parent is not None:
            path_ids.append(parent)
            parent = came_from[parent]

        path_ids.reverse()
        return self._build_route(path_ids, total_cost, expanded)

    def _build_route(self, path_ids: List[int], total_cost: float, expanded: int) -> Route:
        coordinates = [(self.graph.lon(vid), self.graph.lat(vid)) for vid in path_ids]
        return Route(
            vertex_ids=path_ids,
            total_cost=total_cost,
            coordinates=coordinates,
            expanded=expanded,
        )
