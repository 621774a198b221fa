"""
Spherical transverse Mercator projection for the spatial index.

Vertices are flattened around a fixed origin so the k-d tree can compare
plain planar coordinates. The projected values are only used to decide which
vertex is "nearest"; route costs always use great-circle distance.
"""

import math
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike, NDArray

from waypath.core.config import Settings, settings


@dataclass(frozen=True)
class TransverseMercatorProjection:
    """
    Transverse Mercator projection on the unit sphere.

    Attributes:
        origin_lon: Longitude of the natural origin in degrees
        origin_lat: Latitude of the natural origin in degrees
        scale_factor: Scale factor k0 at the origin (1.0 rather than UTM's 0.9996)
    """

    origin_lon: float
    origin_lat: float
    scale_factor: float = 1.0

    def __post_init__(self) -> None:
        """Validate projection parameters."""
        if not -180 <= self.origin_lon <= 180:
            raise ValueError(f"origin_lon must be between -180 and 180, got {self.origin_lon}")
        if not -90 < self.origin_lat < 90:
            raise ValueError(f"origin_lat must be between -90 and 90, got {self.origin_lat}")
        if self.scale_factor <= 0:
            raise ValueError("scale_factor must be positive")

    @classmethod
    def from_bounds(
        cls,
        ul_lon: float,
        ul_lat: float,
        lr_lon: float,
        lr_lat: float,
        scale_factor: float = 1.0,
    ) -> "TransverseMercatorProjection":
        """
        Create a projection centered on a bounding box.

        Args:
            ul_lon: Upper-left longitude
            ul_lat: Upper-left latitude
            lr_lon: Lower-right longitude
            lr_lat: Lower-right latitude
            scale_factor: Scale factor at the origin

        Returns:
            Projection whose origin is the box centroid
        """
        return cls(
            origin_lon=(ul_lon + lr_lon) / 2,
            origin_lat=(ul_lat + lr_lat) / 2,
            scale_factor=scale_factor,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "TransverseMercatorProjection":
        """Create the projection for the configured region."""
        config = config or settings
        return cls(
            origin_lon=config.origin_lon,
            origin_lat=config.origin_lat,
            scale_factor=config.projection_scale,
        )

    def project(self, lon: float, lat: float) -> Tuple[float, float]:
        """
        Project a geographic point to planar coordinates.

        Args:
            lon: Longitude in degrees
            lat: Latitude in degrees

        Returns:
            (x, y) in units of the sphere radius

        Raises:
            ValueError: If the point lies on the projection's singular line
        """
        dlon = math.radians(lon - self.origin_lon)
        phi = math.radians(lat)

        b = math.sin(dlon) * math.cos(phi)
        if abs(b) >= 1.0:
            raise ValueError(f"Point ({lon}, {lat}) is 90 degrees from the projection meridian")

        x = (self.scale_factor / 2) * math.log((1 + b) / (1 - b))
        y = self.scale_factor * (
            math.atan(math.tan(phi) / math.cos(dlon)) - math.radians(self.origin_lat)
        )
        return x, y

    def project_many(
        self, lons: ArrayLike, lats: ArrayLike
    ) -> Tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
        """
        Vectorized form of project for bulk index construction.

        Args:
            lons: Longitudes in degrees
            lats: Latitudes in degrees

        Returns:
            Tuple of (xs, ys) arrays
        """
        dlon = np.radians(np.asarray(lons, dtype=np.float64) - self.origin_lon)
        phi = np.radians(np.asarray(lats, dtype=np.float64))

        b = np.sin(dlon) * np.cos(phi)
        if np.any(np.abs(b) >= 1.0):
            raise ValueError("Points 90 degrees from the projection meridian cannot be projected")

        xs = (self.scale_factor / 2) * np.log((1 + b) / (1 - b))
        ys = self.scale_factor * (
            np.arctan(np.tan(phi) / np.cos(dlon)) - math.radians(self.origin_lat)
        )
        return xs, ys
