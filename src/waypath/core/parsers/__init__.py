"""
Map data ingestion for waypath.
"""

from .osm_parser import OSMGraphLoader, OSMLoadResult, load_osm_file

__all__ = [
    "OSMGraphLoader",
    "OSMLoadResult",
    "load_osm_file",
]
