"""
waypath - nearest-vertex snapping and shortest-path routing over road networks.

This package provides the routing core of a map backend: a road graph built
from map data, a k-d tree for snapping coordinates to vertices, and A*
search with great-circle distances.
"""

__version__ = "0.1.0"
