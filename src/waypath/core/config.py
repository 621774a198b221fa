"""
Configuration settings for the waypath routing core.
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Routing settings with environment variable support.

    Attributes:
        earth_radius_miles: Spherical Earth radius used for great-circle distance
        root_ullon: Upper-left longitude of the covered region
        root_ullat: Upper-left latitude of the covered region
        root_lrlon: Lower-right longitude of the covered region
        root_lrlat: Lower-right latitude of the covered region
        projection_scale: Scale factor (k0) at the projection origin
        allowed_highway_types: OSM highway values that become routable edges
        heuristic_weight: Weight applied to the A* heuristic
        max_search_expansions: Optional cap on vertices expanded per search
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="WAYPATH_",
    )

    # Geodesy
    earth_radius_miles: float = Field(default=3963.0, gt=0)

    # Covered region (Berkeley extract)
    root_ullon: float = -122.2998046875
    root_ullat: float = 37.892195547244356
    root_lrlon: float = -122.2119140625
    root_lrlat: float = 37.82280243352756

    # Projection
    projection_scale: float = Field(default=1.0, gt=0)

    # Ingestion
    allowed_highway_types: tuple[str, ...] = (
        "motorway",
        "trunk",
        "primary",
        "secondary",
        "tertiary",
        "unclassified",
        "residential",
        "living_street",
        "motorway_link",
        "trunk_link",
        "primary_link",
        "secondary_link",
        "tertiary_link",
    )

    # Search
    heuristic_weight: float = Field(default=1.0, ge=0)
    max_search_expansions: Optional[int] = Field(default=None, gt=0)

    # Logging
    log_level: Optional[str] = None

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def origin_lon(self) -> float:
        """Longitude of the region centroid."""
        return (self.root_ullon + self.root_lrlon) / 2

    @property
    def origin_lat(self) -> float:
        """Latitude of the region centroid."""
        return (self.root_ullat + self.root_lrlat) / 2


# Global settings instance
settings = Settings()
