"""
Demo script for snapping and routing over a small street grid.

This example demonstrates the query pipeline:
1. Ingest a synthetic street grid covering part of Berkeley
2. Prune, freeze and index it through RouteService
3. Snap two raw coordinates and route between them
"""

import json

from waypath.core.logging_config import setup_logging
from waypath.core.routing import RoadGraph, RouteService

ROWS = 8
COLS = 10
BASE_LON = -122.29
BASE_LAT = 37.83
STEP = 0.006


def build_grid() -> RoadGraph:
    """Create a ROWS x COLS grid with one street missing to force a detour."""
    graph = RoadGraph()

    for row in range(ROWS):
        for col in range(COLS):
            vertex_id = row * COLS + col
            graph.add_vertex(
                vertex_id,
                lat=BASE_LAT + row * STEP,
                lon=BASE_LON + col * STEP,
                name=f"Street {row} & Avenue {col}",
            )

    for row in range(ROWS):
        for col in range(COLS):
            vertex_id = row * COLS + col
            if col + 1 < COLS:
                graph.add_edge(vertex_id, vertex_id + 1)
            if row + 1 < ROWS and col != 4:
                graph.add_edge(vertex_id, vertex_id + COLS)

    # A lone point that pruning removes
    graph.add_vertex(999, lat=BASE_LAT + 0.5 * STEP, lon=BASE_LON + 0.5 * STEP)

    return graph


def main():
    """Run routing demo."""
    setup_logging(log_level="INFO")

    print("=" * 60)
    print("Road Routing Demo")
    print("=" * 60)

    # 1. Build the graph
    print("\n1. Ingesting street grid...")
    graph = build_grid()
    print(f"   - Vertices before pruning: {len(graph)}")

    # 2. Build the service
    print("\n2. Building route service...")
    service = RouteService.build(graph)
    stats = graph.get_graph_stats()
    print(f"   - Vertices: {stats['num_vertices']}")
    print(f"   - Edges: {stats['num_edges']}")
    print(f"   - Connected: {stats['is_connected']}")
    print(f"   - Index height: {service.index.height()}")

    # 3. Snap and route
    print("\n3. Routing...")
    start = (BASE_LON + 0.0004, BASE_LAT - 0.0003)
    dest = (BASE_LON + (COLS - 1) * STEP - 0.0002, BASE_LAT + (ROWS - 1) * STEP + 0.0001)

    start_id = service.resolve_nearest(*start)
    dest_id = service.resolve_nearest(*dest)
    print(f"   - Start snapped to {start_id} ({graph.name(start_id)})")
    print(f"   - Destination snapped to {dest_id} ({graph.name(dest_id)})")

    result = service.shortest_path(start[0], start[1], dest[0], dest[1])
    if not result.found:
        print(f"   No route: {result.reason.value}")
        return

    print(f"   - Vertices on route: {len(result)}")
    print(f"   - Length: {result.total_cost:.3f} miles")
    print(f"   - Expanded: {result.expanded}")
    print(f"   - Straight-line: {service.distance(start_id, dest_id):.3f} miles")
    print(f"   - Initial bearing: {service.bearing(start_id, dest_id):.1f} degrees")

    # 4. Export
    print("\n4. Route as JSON (truncated):")
    print(json.dumps(result.to_dict(), indent=2)[:400])

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
