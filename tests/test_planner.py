"""Integration tests for RoutePlanner.

Tests: plan_route and plan_direct_route end to end with mock providers
Focus: Flat equator terrain, degraded-mode warnings, error kinds
"""

import asyncio
import math
from dataclasses import replace
from typing import TYPE_CHECKING

import pytest

from alpine_route_planner.model.coordinate import Coordinate
from alpine_route_planner.model.errors import InvalidCoordinateError, NoRouteFoundError
from alpine_route_planner.model.options import PathfindingOptions
from alpine_route_planner.model.route import RouteDifficulty
from alpine_route_planner.model.trail import TrailSegment
from alpine_route_planner.model.warning import (
    ElevationUnavailableWarning,
    TrailDataUnavailableWarning,
    TrailSnappingSkippedWarning,
)
from alpine_route_planner.planner import RoutePlanner
from conftest import MockElevationService, MockTrailService, degrees, network_of, straight_segment

if TYPE_CHECKING:
    from alpine_route_planner.model.route import PlannedRoute


def planner_with(elevation: MockElevationService, trails: MockTrailService) -> RoutePlanner:
    return RoutePlanner(elevation, trails, seed=42)


def warning_types(route: "PlannedRoute") -> set[type]:
    return {type(w) for w in route.warnings}


class EndpointSamplesOnly(MockElevationService):
    """Only the two line endpoints are sampled, so terrain variability falls back to the jittered heuristic."""

    def get_elevation_for_route(
        self, start: Coordinate, end: Coordinate, resolution_deg: float = 0.005
    ) -> list[Coordinate]:
        samples = super().get_elevation_for_route(start, end, resolution_deg)
        return [samples[0], samples[-1]]


# =============================================================================
# SEARCHED ROUTES
# =============================================================================


class TestPlanRoute:
    """RoutePlanner.plan_route - full pipeline."""

    def test_flat_one_km(
        self, origin: Coordinate, one_km_east: Coordinate, flat_elevation: MockElevationService, no_trails: MockTrailService
    ) -> None:
        """Flat terrain, no trails: a straight 1km route with no climbing."""
        route = asyncio.run(planner_with(flat_elevation, no_trails).plan_route(origin, one_km_east))

        assert route.distance_km == pytest.approx(1.0, abs=0.01)
        assert route.elevation_gain_m == 0.0
        assert route.elevation_loss_m == 0.0
        assert route.difficulty == RouteDifficulty.EASY
        assert not route.is_fallback
        assert route.iterations > 0
        assert route.warnings == ()
        assert len(route.points) <= PathfindingOptions.default().max_waypoints
        assert route.start.lng == 0.0
        assert route.end.lng == pytest.approx(one_km_east.lng)

    def test_flat_hop_at_altitude(self, no_trails: MockTrailService) -> None:
        """1km east at 47°N on a flat 1000m plateau: about 1km, no gain."""
        start = Coordinate(lat=47.0, lng=8.0, elevation=1000.0)
        goal = Coordinate(lat=47.0, lng=8.0 + degrees(1.0) / math.cos(math.radians(47.0)), elevation=1000.0)
        elevation = MockElevationService(base_elevation=1000.0)

        route = asyncio.run(planner_with(elevation, no_trails).plan_route(start, goal))

        assert route.distance_km == pytest.approx(1.0, abs=0.02)
        assert route.elevation_gain_m == 0.0
        assert all(p.elevation == 1000.0 for p in route.points)

    def test_endpoint_elevation_from_samples(self, no_trails: MockTrailService) -> None:
        """Endpoints without elevation take the first and last sample values."""
        elevation = MockElevationService(base_elevation=1000.0, slope_ew_pct=5.0)
        route = asyncio.run(
            planner_with(elevation, no_trails).plan_route(Coordinate(0.0, 0.0), Coordinate(0.0, degrees(1.0)))
        )
        assert route.start.elevation == pytest.approx(1000.0)
        assert route.end.elevation == pytest.approx(1050.0, abs=1.0)
        assert route.elevation_gain_m - route.elevation_loss_m == pytest.approx(50.0, abs=1.0)

    def test_iteration_budget_exhausted(
        self, origin: Coordinate, one_km_east: Coordinate, flat_elevation: MockElevationService, no_trails: MockTrailService
    ) -> None:
        options = replace(PathfindingOptions.default(), max_iterations=1)

        with pytest.raises(NoRouteFoundError) as exc_info:
            asyncio.run(planner_with(flat_elevation, no_trails).plan_route(origin, one_km_east, options))

        assert exc_info.value.kind == "NO_ROUTE_FOUND"
        assert exc_info.value.iterations == 1

    def test_invalid_coordinate(
        self, origin: Coordinate, flat_elevation: MockElevationService, no_trails: MockTrailService
    ) -> None:
        with pytest.raises(InvalidCoordinateError):
            asyncio.run(planner_with(flat_elevation, no_trails).plan_route(origin, Coordinate(95.0, 0.0)))
        assert no_trails.call_count == 0

    def test_elevation_outage_degrades(
        self, one_km_east: Coordinate, failing_elevation: MockElevationService, no_trails: MockTrailService
    ) -> None:
        """Route still found, every elevation is 0, both stages report the outage."""
        route = asyncio.run(
            planner_with(failing_elevation, no_trails).plan_route(Coordinate(0.0, 0.0), one_km_east.with_elevation(None))
        )

        assert all(p.elevation == 0.0 for p in route.points)
        stages = {w.stage for w in route.warnings if isinstance(w, ElevationUnavailableWarning)}
        assert stages == {"search", "snapping"}

    def test_trail_outage_degrades(
        self,
        origin: Coordinate,
        one_km_east: Coordinate,
        flat_elevation: MockElevationService,
        failing_trails: MockTrailService,
    ) -> None:
        route = asyncio.run(planner_with(flat_elevation, failing_trails).plan_route(origin, one_km_east))

        assert route.distance_km == pytest.approx(1.0, abs=0.01)
        assert warning_types(route) == {TrailDataUnavailableWarning, TrailSnappingSkippedWarning}
        trail_warning = next(w for w in route.warnings if isinstance(w, TrailDataUnavailableWarning))
        assert trail_warning.source == "overpass"

    def test_snaps_onto_road(
        self,
        origin: Coordinate,
        one_km_east: Coordinate,
        flat_elevation: MockElevationService,
        equator_road: TrailSegment,
    ) -> None:
        """Every route point ends up on a road vertex."""
        trails = MockTrailService(network=network_of(equator_road))
        route = asyncio.run(planner_with(flat_elevation, trails).plan_route(origin, one_km_east))

        vertices = {(c.lat, c.lng) for c in equator_road.coordinates}
        assert all((p.lat, p.lng) in vertices for p in route.points)
        assert route.warnings == ()

    def test_concurrent_requests(self, flat_elevation: MockElevationService, no_trails: MockTrailService) -> None:
        """One planner serves independent requests at the same time."""
        planner = planner_with(flat_elevation, no_trails)

        async def plan_both():
            return await asyncio.gather(
                planner.plan_route(Coordinate(0.0, 0.0, 0.0), Coordinate(0.0, degrees(1.0), 0.0)),
                planner.plan_route(Coordinate(0.0, 0.0, 0.0), Coordinate(degrees(1.0), 0.0, 0.0)),
            )

        east, north = asyncio.run(plan_both())
        assert east.end.lng == pytest.approx(degrees(1.0))
        assert north.end.lat == pytest.approx(degrees(1.0))

    def test_seeded_planner_repeats_itself(self, no_trails: MockTrailService) -> None:
        """Identical requests on one seeded planner give identical routes."""
        planner = planner_with(EndpointSamplesOnly(base_elevation=500.0, slope_ew_pct=5.0), no_trails)

        def plan() -> "PlannedRoute":
            return asyncio.run(planner.plan_route(Coordinate(0.0, 0.0), Coordinate(0.0, degrees(1.5))))

        first = plan()
        for _ in range(3):
            again = plan()
            assert again.iterations == first.iterations
            assert again.points == first.points


# =============================================================================
# DIRECT ROUTES
# =============================================================================


class TestPlanDirectRoute:
    """RoutePlanner.plan_direct_route - straight-line fallback."""

    def test_direct_route(
        self, origin: Coordinate, one_km_east: Coordinate, flat_elevation: MockElevationService, no_trails: MockTrailService
    ) -> None:
        route = asyncio.run(planner_with(flat_elevation, no_trails).plan_direct_route(origin, one_km_east))

        assert route.is_fallback
        assert route.iterations == 0
        assert route.distance_km == pytest.approx(1.0, abs=0.01)
        assert route.start.lng == 0.0
        assert route.end.lng == pytest.approx(one_km_east.lng)

    def test_direct_route_without_elevation(
        self, origin: Coordinate, one_km_east: Coordinate, failing_elevation: MockElevationService, no_trails: MockTrailService
    ) -> None:
        route = asyncio.run(planner_with(failing_elevation, no_trails).plan_direct_route(origin, one_km_east))

        assert route.is_fallback
        assert route.elevation_gain_m == 0.0
        assert ElevationUnavailableWarning in warning_types(route)

    def test_direct_route_follows_nearby_trail(
        self, origin: Coordinate, one_km_east: Coordinate, flat_elevation: MockElevationService
    ) -> None:
        trail = straight_segment("trail/parallel", lat=0.0009, lng_from=-0.002, lng_to=0.011)
        planner = planner_with(flat_elevation, MockTrailService(network=network_of(trail)))

        route = asyncio.run(planner.plan_direct_route(origin, one_km_east))

        assert route.is_fallback
        assert all((p.lat, p.lng) in {(c.lat, c.lng) for c in trail.coordinates} for p in route.points)
        assert route.warnings == ()
