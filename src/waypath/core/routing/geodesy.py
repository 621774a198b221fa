"""
Great-circle geometry on a spherical Earth.

All functions take longitude/latitude in decimal degrees, longitude first.
The Earth radius is an explicit argument so callers can route over synthetic
spheres; it defaults to the configured radius in miles.
"""

import math
from typing import Callable

# Mean spherical Earth radius in miles
EARTH_RADIUS_MILES = 3963.0

# (lon1, lat1, lon2, lat2) -> distance
DistanceMetric = Callable[[float, float, float, float], float]


def haversine_distance(
    lon1: float,
    lat1: float,
    lon2: float,
    lat2: float,
    radius: float = EARTH_RADIUS_MILES,
) -> float:
    """
    Great-circle distance between two points using the haversine formula.

    Args:
        lon1: Longitude of the first point
        lat1: Latitude of the first point
        lon2: Longitude of the second point
        lat2: Latitude of the second point
        radius: Sphere radius; the result is in the same unit

    Returns:
        Distance along the sphere's surface
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2.0) ** 2
    a += math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) ** 2
    # Rounding can push a marginally outside [0, 1] for antipodal points
    a = min(max(a, 0.0), 1.0)
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return radius * c


def initial_bearing(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """
    Initial compass bearing from the first point towards the second.

    Following the great-circle arc from the first point with this heading
    leads to the second point. The result is in degrees in (-180, 180],
    0 being north and 90 east.

    Args:
        lon1: Longitude of the start point
        lat1: Latitude of the start point
        lon2: Longitude of the end point
        lat2: Latitude of the end point

    Returns:
        Bearing in degrees
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlambda = math.radians(lon2 - lon1)

    y = math.sin(dlambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)
    return math.degrees(math.atan2(y, x))


def planar_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance, for synthetic flat test geometries."""
    return math.hypot(x2 - x1, y2 - y1)


def great_circle_metric(radius: float = EARTH_RADIUS_MILES) -> DistanceMetric:
    """
    Build a haversine metric bound to a fixed radius.

    Args:
        radius: Sphere radius

    Returns:
        Callable taking (lon1, lat1, lon2, lat2)
    """
    if radius <= 0:
        raise ValueError(f"radius must be positive, got {radius}")

    def metric(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
        return haversine_distance(lon1, lat1, lon2, lat2, radius)

    return metric
