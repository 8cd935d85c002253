"""Trail data model - segments, bounding box, network snapshot, spatial index.

A TrailNetwork is an immutable snapshot of the trails, roads and water
features around a planning request. It is shared read-only by the cost
model and the trail snapper, so it can be cached and reused across searches.

Geometry conventions:
- Coordinates are stored in (lat, lng) order on the Coordinate objects
- Shapely geometries are built in (lng, lat) order (x = longitude)
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Optional

import numpy as np
from shapely.geometry import LineString, Point, box
from shapely.strtree import STRtree

from alpine_route_planner.core.geo_calculator import GeoCalculator
from alpine_route_planner.model.coordinate import Coordinate


class TrailDifficulty(Enum):
    """Hiking difficulty of a trail, derived from OSM sac_scale / trail_visibility."""

    EASY = "easy"
    MODERATE = "moderate"
    DIFFICULT = "difficult"
    EXPERT = "expert"


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lng box.

    Attributes:
        min_lat: Southern edge (decimal degrees)
        max_lat: Northern edge (decimal degrees)
        min_lng: Western edge (decimal degrees)
        max_lng: Eastern edge (decimal degrees)
    """

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    @classmethod
    def around(cls, start: Coordinate, end: Coordinate, padding_km: float) -> "BoundingBox":
        """Box spanning start and end, padded by padding_km on every side.

        Longitude padding is widened by 1/cos(mean latitude) so the padding
        is roughly the same ground distance in both directions.
        """
        mean_lat = (start.lat + end.lat) / 2
        lat_pad = GeoCalculator.km_to_lat_degrees(padding_km)
        lng_pad = GeoCalculator.km_to_lng_degrees(padding_km, at_lat=mean_lat)
        return cls(
            min_lat=min(start.lat, end.lat) - lat_pad,
            max_lat=max(start.lat, end.lat) + lat_pad,
            min_lng=min(start.lng, end.lng) - lng_pad,
            max_lng=max(start.lng, end.lng) + lng_pad,
        )

    def contains(self, coordinate: Coordinate) -> bool:
        return self.min_lat <= coordinate.lat <= self.max_lat and self.min_lng <= coordinate.lng <= self.max_lng

    def rounded_key(self, decimals: int) -> tuple[float, float, float, float]:
        """Hashable key with edges rounded, used for caching."""
        return (
            round(self.min_lat, decimals),
            round(self.max_lat, decimals),
            round(self.min_lng, decimals),
            round(self.max_lng, decimals),
        )

    def to_overpass(self) -> str:
        """Overpass QL bbox filter order: south,west,north,east."""
        return f"{self.min_lat},{self.min_lng},{self.max_lat},{self.max_lng}"


@dataclass(frozen=True)
class TrailSegment:
    """A trail, road, or water feature polyline.

    Attributes:
        id: Unique identifier (e.g. "way/123456")
        coordinates: Polyline vertices (at least one)
        is_water: Water feature - never snapped to, never earns a trail bonus
        is_road: Road suitable for walking - preferred over trails when snapping
        name: OSM name tag
        highway: OSM highway tag
        surface: OSM surface tag
        sac_scale: OSM sac_scale tag
        trail_visibility: OSM trail_visibility tag
        difficulty: Parsed hiking difficulty, if known
    """

    id: str
    coordinates: tuple[Coordinate, ...]
    is_water: bool = False
    is_road: bool = False
    name: Optional[str] = None
    highway: Optional[str] = None
    surface: Optional[str] = None
    sac_scale: Optional[str] = None
    trail_visibility: Optional[str] = None
    difficulty: Optional[TrailDifficulty] = None

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if len(self.coordinates) == 0:
            raise ValueError(f"TrailSegment {self.id} must have at least one coordinate")
        if self.is_water and self.is_road:
            raise ValueError(f"TrailSegment {self.id} cannot be both water and road")

    @property
    def is_walkable_trail(self) -> bool:
        """Non-water, non-road trail."""
        return not self.is_water and not self.is_road

    @cached_property
    def vertex_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """(lats, lngs) arrays of the vertices for vectorized distance checks."""
        lats = np.array([c.lat for c in self.coordinates], dtype=float)
        lngs = np.array([c.lng for c in self.coordinates], dtype=float)
        return lats, lngs

    def geometry(self) -> LineString | Point:
        """Shapely geometry in (lng, lat) order."""
        if len(self.coordinates) == 1:
            only = self.coordinates[0]
            return Point(only.lng, only.lat)
        return LineString([(c.lng, c.lat) for c in self.coordinates])

    def __repr__(self) -> str:
        kind = "water" if self.is_water else "road" if self.is_road else "trail"
        return f"TrailSegment({self.id}, {kind}, {len(self.coordinates)} pts)"


class TrailSpatialIndex:
    """R-tree over trail geometries for fast proximity lookup.

    Queries return trails whose bounding boxes intersect a square window
    around a coordinate, in the order the trails were indexed.
    """

    def __init__(self, trails: tuple[TrailSegment, ...]) -> None:
        self._trails = trails
        self._tree = STRtree([trail.geometry() for trail in trails]) if trails else None

    def __len__(self) -> int:
        return len(self._trails)

    def query(self, coordinate: Coordinate, radius_km: float) -> list[TrailSegment]:
        """Trails with any part inside the window of radius_km around coordinate."""
        if self._tree is None:
            return []
        d_lat = GeoCalculator.km_to_lat_degrees(radius_km)
        d_lng = GeoCalculator.km_to_lng_degrees(radius_km, at_lat=coordinate.lat)
        window = box(coordinate.lng - d_lng, coordinate.lat - d_lat, coordinate.lng + d_lng, coordinate.lat + d_lat)
        indices = sorted(int(i) for i in self._tree.query(window))
        return [self._trails[i] for i in indices]


@dataclass(frozen=True)
class TrailNetwork:
    """Read-only snapshot of trails around a planning request.

    Attributes:
        trails: All segments (trails, roads, and water)
        bounding_box: Area the snapshot covers
        cache_time: Unix timestamp when the snapshot was fetched
    """

    trails: tuple[TrailSegment, ...]
    bounding_box: BoundingBox
    cache_time: float = field(default=0.0, compare=False)

    @cached_property
    def spatial_index(self) -> TrailSpatialIndex:
        """Lazily built R-tree over all trail geometries."""
        return TrailSpatialIndex(self.trails)

    @property
    def is_empty(self) -> bool:
        return len(self.trails) == 0

    @property
    def roads(self) -> list[TrailSegment]:
        return [t for t in self.trails if t.is_road]

    @property
    def walkable_trails(self) -> list[TrailSegment]:
        return [t for t in self.trails if t.is_walkable_trail]

    def __repr__(self) -> str:
        return (
            f"TrailNetwork({len(self.trails)} segments: {len(self.roads)} roads, "
            f"{len(self.walkable_trails)} trails)"
        )
