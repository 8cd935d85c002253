"""Shared pytest fixtures for alpine_route_planner tests.

Provides mock elevation and trail providers plus reusable test data.
All fixtures use explicit values with documented rationale.

COORDINATE SYSTEM:
    Tests use coordinates near the equator (lat~0) and prime meridian (lng~0)
    where the math is simple: 1 degree ≈ 111.195 km in both directions
    (Haversine with R = 6371 km). This avoids needing GeoCalculator in the
    mocks (which would test with tested code).
"""

import random
from typing import Optional

import pytest

from alpine_route_planner.core.terrain_analyzer import TerrainAnalyzer
from alpine_route_planner.model.coordinate import Coordinate
from alpine_route_planner.model.errors import DataUnavailableError
from alpine_route_planner.model.options import PathfindingOptions
from alpine_route_planner.model.trail import BoundingBox, TrailNetwork, TrailSegment

# Kilometers per degree at the equator (Haversine, R = 6371 km)
KM_PER_DEGREE = 111.195


def degrees(km: float) -> float:
    """Degrees of latitude (or longitude at the equator) spanning km."""
    return km / KM_PER_DEGREE


# =============================================================================
# MOCK ELEVATION SERVICE
# =============================================================================


class MockElevationService:
    """Mock elevation provider with a synthetic linear terrain.

    Elevation formula:
        elevation = base_elevation + (lat * KM_PER_DEGREE * 1000 * slope_ns_pct / 100)
                                   + (lng * KM_PER_DEGREE * 1000 * slope_ew_pct / 100)

    Example with base=1000m, slope_ew=10%:
        - lng=0.000: 1000m
        - lng=0.009 (1 km east): 1100m

    Records every call so tests can assert on batching and enrichment.
    """

    def __init__(
        self,
        base_elevation: float = 0.0,
        slope_ns_pct: float = 0.0,
        slope_ew_pct: float = 0.0,
        fail: bool = False,
    ) -> None:
        """Initialize mock provider.

        Args:
            base_elevation: Elevation at origin (lat=0, lng=0)
            slope_ns_pct: Positive = rises going north
            slope_ew_pct: Positive = rises going east
            fail: Raise DataUnavailableError on every call
        """
        self.base_elevation = base_elevation
        self.slope_ns_pct = slope_ns_pct
        self.slope_ew_pct = slope_ew_pct
        self.fail = fail
        self.calls: list[list[Coordinate]] = []

    def elevation_at(self, lat: float, lng: float) -> float:
        meters_per_degree = KM_PER_DEGREE * 1000
        return (
            self.base_elevation
            + lat * meters_per_degree * self.slope_ns_pct / 100
            + lng * meters_per_degree * self.slope_ew_pct / 100
        )

    def get_elevation(self, coordinates: list[Coordinate]) -> list[float]:
        self.calls.append(list(coordinates))
        if self.fail:
            raise DataUnavailableError("mock elevation failure", source="mock")
        return [self.elevation_at(c.lat, c.lng) for c in coordinates]

    def get_elevation_for_route(
        self, start: Coordinate, end: Coordinate, resolution_deg: float = 0.005
    ) -> list[Coordinate]:
        """Samples every resolution_deg along the straight line, both ends included."""
        if self.fail:
            raise DataUnavailableError("mock elevation failure", source="mock")
        span = max(abs(end.lat - start.lat), abs(end.lng - start.lng))
        steps = max(1, int(span / resolution_deg) + 1)
        points = []
        for i in range(steps + 1):
            lat = start.lat + (end.lat - start.lat) * i / steps
            lng = start.lng + (end.lng - start.lng) * i / steps
            points.append(Coordinate(lat=lat, lng=lng, elevation=self.elevation_at(lat, lng)))
        return points


# =============================================================================
# MOCK TRAIL SERVICE
# =============================================================================


class MockTrailService:
    """Mock trail provider returning a fixed network or raising DataUnavailableError.

    When network is None and no error is configured, an empty network around
    the requested start/end is returned (no trails nearby, no failure).
    """

    def __init__(self, network: Optional[TrailNetwork] = None, error: Optional[Exception] = None) -> None:
        self.network = network
        self.error = error
        self.call_count = 0

    def fetch_trail_network(self, start: Coordinate, end: Coordinate) -> TrailNetwork:
        self.call_count += 1
        if self.error is not None:
            raise self.error
        if self.network is not None:
            return self.network
        return TrailNetwork(trails=(), bounding_box=BoundingBox.around(start, end, padding_km=5.0))


# =============================================================================
# TRAIL DATA
# =============================================================================


def straight_segment(
    segment_id: str,
    lat: float,
    lng_from: float,
    lng_to: float,
    spacing_deg: float = 0.0005,
    **kwargs,
) -> TrailSegment:
    """East-west segment at a fixed latitude with vertices every spacing_deg.

    Vertex longitudes are rounded to 7 decimals so tests can compare them exactly.
    """
    count = int(round((lng_to - lng_from) / spacing_deg))
    coordinates = tuple(Coordinate(lat=lat, lng=round(lng_from + i * spacing_deg, 7)) for i in range(count + 1))
    return TrailSegment(id=segment_id, coordinates=coordinates, **kwargs)


def network_of(*trails: TrailSegment) -> TrailNetwork:
    """Network with a bounding box generously covering the test area."""
    return TrailNetwork(
        trails=tuple(trails),
        bounding_box=BoundingBox(min_lat=-0.1, max_lat=0.1, min_lng=-0.1, max_lng=0.1),
    )


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def origin() -> Coordinate:
    """Equator / prime meridian intersection at sea level."""
    return Coordinate(lat=0.0, lng=0.0, elevation=0.0)


@pytest.fixture
def one_km_east() -> Coordinate:
    """Exactly 1 km east of the origin."""
    return Coordinate(lat=0.0, lng=degrees(1.0), elevation=0.0)


@pytest.fixture
def seeded_analyzer() -> TerrainAnalyzer:
    """Analyzer with a fixed seed so variability jitter is reproducible."""
    return TerrainAnalyzer(rng=random.Random(42))


@pytest.fixture
def default_options() -> PathfindingOptions:
    return PathfindingOptions.default().validated()


@pytest.fixture
def flat_elevation() -> MockElevationService:
    """Flat terrain at sea level - complexity 0, variability 0."""
    return MockElevationService(base_elevation=0.0)


@pytest.fixture
def failing_elevation() -> MockElevationService:
    return MockElevationService(fail=True)


@pytest.fixture
def no_trails() -> MockTrailService:
    """Trail provider that answers with an empty network."""
    return MockTrailService()


@pytest.fixture
def failing_trails() -> MockTrailService:
    return MockTrailService(error=DataUnavailableError("mock overpass outage", source="overpass"))


@pytest.fixture
def equator_road() -> TrailSegment:
    """Road along the equator from lng -0.002 to 0.011, vertex every ~55 m."""
    return straight_segment("road/equator", lat=0.0, lng_from=-0.002, lng_to=0.011, is_road=True, highway="service")


@pytest.fixture
def north_trail() -> TrailSegment:
    """Walkable trail 1.1 km north of the equator, parallel to equator_road."""
    return straight_segment("trail/north", lat=0.01, lng_from=-0.002, lng_to=0.011, highway="path")
