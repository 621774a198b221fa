"""
Two-dimensional k-d tree for snapping coordinates to road vertices.

Nodes live in parallel arrays (an arena) addressed by integer slot; child
links are optional slot numbers. The split axis alternates with depth: x at
even depths, y at odd depths. The tree is never rebalanced, so its shape
follows insertion order. Nearest-neighbor queries are expected logarithmic on
well-spread data and degrade to a linear scan on degenerate input such as
collinear points inserted in sorted order.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from waypath.core.errors import EmptyIndexError
from waypath.core.routing.graph import RoadGraph
from waypath.core.routing.projection import TransverseMercatorProjection

logger = logging.getLogger(__name__)

X_AXIS = 0
Y_AXIS = 1


@dataclass(frozen=True)
class NearestResult:
    """
    Outcome of a nearest-neighbor query.

    Attributes:
        vertex_id: ID of the closest indexed vertex
        distance: Planar distance from the query point in projected units
    """

    vertex_id: int
    distance: float


class SpatialIndex:
    """
    Unbalanced k-d tree over projected vertex positions.
    """

    def __init__(self, projection: Optional[TransverseMercatorProjection] = None):
        """
        Initialize an empty index.

        Args:
            projection: Projection used by the lon/lat query helpers
        """
        self.projection = projection or TransverseMercatorProjection.from_settings()

        self._ids: List[int] = []
        self._xs: List[float] = []
        self._ys: List[float] = []
        self._axes: List[int] = []
        self._left: List[Optional[int]] = []
        self._right: List[Optional[int]] = []
        self._slots: Dict[int, int] = {}

    @classmethod
    def from_graph(
        cls,
        graph: RoadGraph,
        projection: Optional[TransverseMercatorProjection] = None,
    ) -> "SpatialIndex":
        """
        Build an index holding every vertex of a graph.

        Vertices are inserted in the graph's iteration order.

        Args:
            graph: Road graph, normally already pruned and frozen
            projection: Projection for vertex positions (default: settings)

        Returns:
            Populated SpatialIndex
        """
        index = cls(projection)
        vertex_ids = list(graph.vertices())
        if not vertex_ids:
            logger.warning("Building spatial index from an empty road graph")
            return index

        lons = [graph.lon(vertex_id) for vertex_id in vertex_ids]
        lats = [graph.lat(vertex_id) for vertex_id in vertex_ids]
        xs, ys = index.projection.project_many(lons, lats)

        for vertex_id, x, y in zip(vertex_ids, xs.tolist(), ys.tolist()):
            index.insert(vertex_id, x, y)

        logger.info(f"Spatial index built with {len(index)} vertices, height {index.height()}")
        return index

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, vertex_id: object) -> bool:
        return vertex_id in self._slots

    @property
    def is_empty(self) -> bool:
        """Whether the index holds no points."""
        return not self._ids

    def position(self, vertex_id: int) -> Tuple[float, float]:
        """Cached planar (x, y) of an indexed vertex."""
        slot = self._slots[vertex_id]
        return self._xs[slot], self._ys[slot]

    def insert(self, vertex_id: int, x: float, y: float) -> bool:
        """
        Insert a projected point as a new leaf.

        At each node the new point goes left when its coordinate on the
        node's axis is strictly less than the node's, otherwise right.

        Args:
            vertex_id: Vertex ID
            x: Projected x coordinate
            y: Projected y coordinate

        Returns:
            True if inserted, False if the ID was already indexed
        """
        if vertex_id in self._slots:
            return False

        new_slot = len(self._ids)

        if new_slot == 0:
            self._append(vertex_id, x, y, X_AXIS)
            return True

        slot = 0
        while True:
            if self._axes[slot] == X_AXIS:
                go_left = x < self._xs[slot]
            else:
                go_left = y < self._ys[slot]

            child = self._left[slot] if go_left else self._right[slot]
            if child is None:
                self._append(vertex_id, x, y, 1 - self._axes[slot])
                if go_left:
                    self._left[slot] = new_slot
                else:
                    self._right[slot] = new_slot
                return True
            slot = child

    def insert_lonlat(self, vertex_id: int, lon: float, lat: float) -> bool:
        """Project a geographic point and insert it."""
        x, y = self.projection.project(lon, lat)
        return self.insert(vertex_id, x, y)

    def _append(self, vertex_id: int, x: float, y: float, axis: int) -> None:
        self._slots[vertex_id] = len(self._ids)
        self._ids.append(vertex_id)
        self._xs.append(x)
        self._ys.append(y)
        self._axes.append(axis)
        self._left.append(None)
        self._right.append(None)

    def nearest_with_distance(self, x: float, y: float) -> NearestResult:
        """
        Find the indexed point closest to (x, y) by planar distance.

        Depth-first search that visits the subtree on the query's side of each
        split first, and the far subtree only when the perpendicular distance
        to the splitting line is below the best distance found so far.

        Args:
            x: Query x coordinate
            y: Query y coordinate

        Returns:
            NearestResult with the closest vertex and its distance

        Raises:
            EmptyIndexError: If the index holds no points
        """
        if not self._ids:
            raise EmptyIndexError()

        best_slot = 0
        best_sq = math.inf

        # (slot, squared distance from query to the parent's splitting line)
        stack: List[Tuple[int, float]] = [(0, 0.0)]
        while stack:
            slot, plane_sq = stack.pop()
            if plane_sq >= best_sq:
                continue

            dx = self._xs[slot] - x
            dy = self._ys[slot] - y
            dist_sq = dx * dx + dy * dy
            if dist_sq < best_sq:
                best_sq = dist_sq
                best_slot = slot

            offset = dx if self._axes[slot] == X_AXIS else dy
            # Query strictly less than the split coordinate lies on the left
            if offset > 0:
                near, far = self._left[slot], self._right[slot]
            else:
                near, far = self._right[slot], self._left[slot]

            # Far side first so the near side is popped and finished before it
            if far is not None:
                stack.append((far, offset * offset))
            if near is not None:
                stack.append((near, 0.0))

        return NearestResult(vertex_id=self._ids[best_slot], distance=math.sqrt(best_sq))

    def nearest(self, x: float, y: float) -> int:
        """
        ID of the indexed point closest to (x, y).

        Raises:
            EmptyIndexError: If the index holds no points
        """
        return self.nearest_with_distance(x, y).vertex_id

    def nearest_lonlat(self, lon: float, lat: float) -> int:
        """
        ID of the indexed vertex closest to a geographic point.

        Raises:
            EmptyIndexError: If the index holds no points
        """
        if not self._ids:
            raise EmptyIndexError()
        x, y = self.projection.project(lon, lat)
        return self.nearest(x, y)

    def height(self) -> int:
        """Number of nodes on the longest root-to-leaf path."""
        if not self._ids:
            return 0

        tallest = 0
        stack: List[Tuple[int, int]] = [(0, 1)]
        while stack:
            slot, depth = stack.pop()
            tallest = max(tallest, depth)
            for child in (self._left[slot], self._right[slot]):
                if child is not None:
                    stack.append((child, depth + 1))
        return tallest
