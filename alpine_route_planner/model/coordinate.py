"""Coordinate and RoutePoint - the geometry atoms for route planning.

A Coordinate is a WGS84 position with an optional elevation. It is used for
search inputs, neighbor candidates, trail vertices, and elevation samples.
A RoutePoint is a point of a finished route and always carries an elevation.
"""

from dataclasses import dataclass
from math import isfinite
from typing import Optional

from alpine_route_planner.constants import PathfindingConfig
from alpine_route_planner.core.geo_calculator import GeoCalculator
from alpine_route_planner.model.errors import InvalidCoordinateError


@dataclass(frozen=True)
class Coordinate:
    """Geographic position with optional elevation.

    Attributes:
        lat: Latitude in decimal degrees (WGS84)
        lng: Longitude in decimal degrees (WGS84)
        elevation: Elevation in meters, None when unknown

    Example:
        start = Coordinate(lat=46.985, lng=10.295, elevation=2400.0)
    """

    lat: float
    lng: float
    elevation: Optional[float] = None

    @property
    def elevation_or_zero(self) -> float:
        """Elevation for cost calculations - unknown is treated as 0."""
        return self.elevation if self.elevation is not None else 0.0

    def matches(self, other: "Coordinate", tolerance: float = PathfindingConfig.COORDINATE_TOLERANCE_DEG) -> bool:
        """Tolerance equality on lat/lng only, elevation is ignored.

        Args:
            other: Coordinate to compare with
            tolerance: Maximum per-axis difference in degrees

        Returns:
            True if both lat and lng differ by less than tolerance.
        """
        return abs(self.lat - other.lat) < tolerance and abs(self.lng - other.lng) < tolerance

    def validate(self) -> None:
        """Raise InvalidCoordinateError if lat/lng are out of range or not finite."""
        if not (isfinite(self.lat) and isfinite(self.lng)):
            raise InvalidCoordinateError(f"Coordinate must be finite, got ({self.lat}, {self.lng})")
        if not -90 <= self.lat <= 90:
            raise InvalidCoordinateError(f"Latitude {self.lat} outside [-90, 90]")
        if not -180 <= self.lng <= 180:
            raise InvalidCoordinateError(f"Longitude {self.lng} outside [-180, 180]")

    def distance_to(self, other: "Coordinate") -> float:
        """Haversine distance to another coordinate in kilometers."""
        return GeoCalculator.haversine_distance_km(lat1=self.lat, lon1=self.lng, lat2=other.lat, lon2=other.lng)

    def with_elevation(self, elevation: Optional[float]) -> "Coordinate":
        """Return a copy at the same position with a different elevation."""
        return Coordinate(lat=self.lat, lng=self.lng, elevation=elevation)

    def interpolate_to(self, other: "Coordinate", fraction: float) -> "Coordinate":
        """Linear interpolation towards another coordinate.

        Elevation is interpolated only when both endpoints have one,
        otherwise the result has unknown elevation.

        Args:
            other: End coordinate (fraction = 1)
            fraction: Position along the segment (0-1)

        Returns:
            Interpolated coordinate.
        """
        elevation = None
        if self.elevation is not None and other.elevation is not None:
            elevation = self.elevation + (other.elevation - self.elevation) * fraction
        return Coordinate(
            lat=self.lat + (other.lat - self.lat) * fraction,
            lng=self.lng + (other.lng - self.lng) * fraction,
            elevation=elevation,
        )

    def __repr__(self) -> str:
        elev = f"{self.elevation:.1f}m" if self.elevation is not None else "?"
        return f"Coordinate(lat={self.lat:.5f}, lng={self.lng:.5f}, elev={elev})"


@dataclass(frozen=True)
class RoutePoint:
    """A point on a planned route. Elevation is always present.

    Attributes:
        lat: Latitude in decimal degrees (WGS84)
        lng: Longitude in decimal degrees (WGS84)
        elevation: Elevation in meters (0 when it could not be resolved)
    """

    lat: float
    lng: float
    elevation: float = 0.0

    @classmethod
    def from_coordinate(cls, coordinate: Coordinate) -> "RoutePoint":
        return cls(lat=coordinate.lat, lng=coordinate.lng, elevation=coordinate.elevation_or_zero)

    def to_coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng, elevation=self.elevation)

    def distance_to(self, other: "RoutePoint") -> float:
        """Haversine distance to another point in kilometers."""
        return GeoCalculator.haversine_distance_km(lat1=self.lat, lon1=self.lng, lat2=other.lat, lon2=other.lng)

    def __repr__(self) -> str:
        return f"RoutePoint(lat={self.lat:.5f}, lng={self.lng:.5f}, elev={self.elevation:.1f}m)"
