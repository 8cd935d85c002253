"""Geodesic calculations on Earth's surface.

Provides geographic helper functions for route planning:
- Distance calculation (Haversine formula), scalar and vectorized
- Kilometer <-> degree conversions for bounding boxes and grid steps

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
"""

from math import atan2, cos, radians, sin, sqrt
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from alpine_route_planner.model.coordinate import Coordinate

# Earth's radius in kilometers (WGS84 spherical approximation)
EARTH_RADIUS_KM = 6371.0

# Length of one degree of latitude (km), used for small-offset conversions
KM_PER_DEGREE_LAT = 111.0


class GeoCalculator:
    """Static methods for geodesic calculations on Earth's surface.

    All methods use WGS84 spherical Earth model (R = 6,371 km).
    Coordinates are in decimal degrees (WGS84).
    Distances are in kilometers.
    """

    EARTH_RADIUS_KM = EARTH_RADIUS_KM

    @staticmethod
    def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lon1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lon2: Longitude of second point (decimal degrees)

        Returns:
            Distance in kilometers.
        """
        dlat = radians(lat2 - lat1)
        dlon = radians(lon2 - lon1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
        # Guard against rounding pushing a slightly above 1 for antipodal points
        a = min(1.0, a)
        return EARTH_RADIUS_KM * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def distance_km(a: "Coordinate", b: "Coordinate") -> float:
        """Great-circle distance between two coordinates (elevation ignored)."""
        return GeoCalculator.haversine_distance_km(a.lat, a.lng, b.lat, b.lng)

    @staticmethod
    def distances_km(origin: "Coordinate", lats: np.ndarray, lngs: np.ndarray) -> np.ndarray:
        """Vectorized Haversine distance from one coordinate to many points.

        Args:
            origin: Reference coordinate
            lats: Array of latitudes (decimal degrees)
            lngs: Array of longitudes (decimal degrees)

        Returns:
            Array of distances in kilometers, same shape as lats.
        """
        lat1 = np.radians(origin.lat)
        lat2 = np.radians(np.asarray(lats, dtype=float))
        dlat = lat2 - lat1
        dlon = np.radians(np.asarray(lngs, dtype=float) - origin.lng)
        a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
        a = np.clip(a, 0.0, 1.0)
        return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    @staticmethod
    def km_to_lat_degrees(km: float) -> float:
        """Convert a north-south distance to degrees of latitude."""
        return km / KM_PER_DEGREE_LAT

    @staticmethod
    def km_to_lng_degrees(km: float, at_lat: float) -> float:
        """Convert an east-west distance to degrees of longitude at a latitude.

        Near the poles the cosine is floored so the result stays finite.
        """
        return km / (KM_PER_DEGREE_LAT * max(cos(radians(at_lat)), 0.01))
