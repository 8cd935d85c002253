"""Tests for post-search trail snapping and elevation enrichment.

Tests: TrailSnapper.snap_point, TrailSnapper.optimize, trail_guided_waypoints
Focus: Road-over-trail preference, water exclusion, degraded elevation handling
"""

import asyncio
from typing import TYPE_CHECKING

from alpine_route_planner.model.coordinate import Coordinate
from alpine_route_planner.model.options import PathfindingOptions
from alpine_route_planner.model.trail import TrailSegment
from alpine_route_planner.model.warning import ElevationUnavailableWarning, TrailSnappingSkippedWarning
from alpine_route_planner.pathfinding.trail_snapping import TrailSnapper, trail_guided_waypoints
from conftest import degrees, network_of, straight_segment

if TYPE_CHECKING:
    from conftest import MockElevationService


def road_and_trail_100m_apart() -> tuple[TrailSegment, TrailSegment]:
    """Road vertex 100m north and trail vertex 100m south of the origin."""
    road = TrailSegment(
        id="road",
        coordinates=(Coordinate(0.0009, -0.001), Coordinate(0.0009, 0.0)),
        is_road=True,
    )
    trail = TrailSegment(
        id="trail",
        coordinates=(Coordinate(-0.0009, 0.0), Coordinate(-0.0009, 0.001)),
    )
    return road, trail


# =============================================================================
# SINGLE POINT
# =============================================================================


class TestSnapPoint:
    """TrailSnapper.snap_point - which vertex a point moves to."""

    def test_road_wins_over_equidistant_trail(self) -> None:
        road, trail = road_and_trail_100m_apart()
        result = TrailSnapper().snap_point(Coordinate(0.0, 0.0), [trail, road])
        assert result.snapped_to_road
        assert result.coordinate == Coordinate(0.0009, 0.0)
        assert 0.09 < result.distance_km < 0.11

    def test_road_wins_even_when_trail_is_closer(self) -> None:
        road = TrailSegment(id="road", coordinates=(Coordinate(0.0015, 0.0),), is_road=True)
        trail = TrailSegment(id="trail", coordinates=(Coordinate(0.0002, 0.0),))
        result = TrailSnapper().snap_point(Coordinate(0.0, 0.0), [trail, road])
        assert result.trail is road

    def test_trail_when_no_road_in_range(self) -> None:
        _, trail = road_and_trail_100m_apart()
        result = TrailSnapper().snap_point(Coordinate(0.0, 0.0), [trail])
        assert result.snapped
        assert not result.snapped_to_road
        assert result.coordinate == Coordinate(-0.0009, 0.0)

    def test_water_is_never_snapped(self) -> None:
        lake = TrailSegment(id="lake", coordinates=(Coordinate(0.0001, 0.0),), is_water=True)
        point = Coordinate(0.0, 0.0, 50.0)
        result = TrailSnapper().snap_point(point, [lake])
        assert not result.snapped
        assert result.coordinate is point

    def test_roads_only_ignores_trails(self) -> None:
        _, trail = road_and_trail_100m_apart()
        result = TrailSnapper().snap_point(Coordinate(0.0, 0.0), [trail], roads_only=True)
        assert not result.snapped

    def test_beyond_snap_distance(self) -> None:
        """Trail 0.3km away is outside the default 0.25km snap distance."""
        far = TrailSegment(id="far", coordinates=(Coordinate(0.0027, 0.0),))
        assert not TrailSnapper().snap_point(Coordinate(0.0, 0.0), [far]).snapped
        assert TrailSnapper(max_snap_distance_km=0.5).snap_point(Coordinate(0.0, 0.0), [far]).snapped


# =============================================================================
# WHOLE ROUTE
# =============================================================================


class TestOptimize:
    """TrailSnapper.optimize - snapping plus elevation resolution."""

    def test_no_network_skips_snapping(self, default_options: PathfindingOptions) -> None:
        points = [Coordinate(0.0, 0.0, 10.0), Coordinate(0.0, 0.001, 20.0)]
        outcome = asyncio.run(TrailSnapper().optimize(points, None, default_options))
        assert [p.elevation for p in outcome.points] == [10.0, 20.0]
        assert outcome.snapped_count == 0
        assert any(isinstance(w, TrailSnappingSkippedWarning) for w in outcome.warnings)

    def test_snapped_point_keeps_original_elevation(
        self, default_options: PathfindingOptions, equator_road: TrailSegment
    ) -> None:
        """Road vertices carry no elevation, the original point's is reused."""
        points = [Coordinate(0.0001, 0.0012, 1500.0)]
        outcome = asyncio.run(TrailSnapper().optimize(points, network_of(equator_road), default_options))
        assert outcome.snapped_count == 1
        assert outcome.road_count == 1
        assert (outcome.points[0].lat, outcome.points[0].lng) == (0.0, 0.001)
        assert outcome.points[0].elevation == 1500.0
        assert outcome.warnings == ()

    def test_missing_elevation_fetched_in_one_call(
        self,
        default_options: PathfindingOptions,
        equator_road: TrailSegment,
        flat_elevation: "MockElevationService",
    ) -> None:
        flat_elevation.base_elevation = 800.0
        points = [Coordinate(0.0, 0.001), Coordinate(0.0, 0.002, 10.0), Coordinate(0.05, 0.05)]
        outcome = asyncio.run(
            TrailSnapper().optimize(points, network_of(equator_road), default_options, flat_elevation)
        )
        assert len(flat_elevation.calls) == 1
        assert len(flat_elevation.calls[0]) == 2
        assert [p.elevation for p in outcome.points] == [800.0, 10.0, 800.0]

    def test_provider_failure_defaults_to_zero(
        self, default_options: PathfindingOptions, failing_elevation: "MockElevationService"
    ) -> None:
        points = [Coordinate(0.0, 0.0), Coordinate(0.0, 0.001)]
        outcome = asyncio.run(
            TrailSnapper().optimize(points, network_of(), default_options, failing_elevation)
        )
        assert [p.elevation for p in outcome.points] == [0.0, 0.0]
        warnings = [w for w in outcome.warnings if isinstance(w, ElevationUnavailableWarning)]
        assert len(warnings) == 1
        assert warnings[0].stage == "snapping"
        assert warnings[0].affected_points == 2

    def test_roads_only_snaps_only_to_roads(self, equator_road: TrailSegment, north_trail: TrailSegment) -> None:
        options = PathfindingOptions.preset("ROADS_ONLY")
        points = [Coordinate(0.0101, 0.002, 5.0), Coordinate(0.0001, 0.002, 5.0)]
        outcome = asyncio.run(TrailSnapper().optimize(points, network_of(equator_road, north_trail), options))
        assert outcome.snapped_count == 1
        assert outcome.road_count == 1
        assert outcome.points[0].lat == 0.0101


# =============================================================================
# GUIDED FALLBACK LINE
# =============================================================================


class TestTrailGuidedWaypoints:
    """trail_guided_waypoints - straight line pulled onto nearby paths."""

    start = Coordinate(0.0, 0.0, 0.0)
    end = Coordinate(0.0, degrees(1.0), 0.0)

    def test_interior_points_follow_nearby_trail(self) -> None:
        """Trail 100m north: all 14 interior points move onto it, ends stay."""
        trail = straight_segment("trail", lat=0.0009, lng_from=0.0, lng_to=0.009)
        path = trail_guided_waypoints(self.start, self.end, [trail])

        assert len(path) == 16
        assert path[0] is self.start
        assert path[-1] is self.end
        assert all(p.lat == 0.0009 for p in path[1:-1])
        assert all(p in trail.coordinates for p in path[1:-1])

    def test_trail_preferred_over_equally_close_road(self) -> None:
        trail = straight_segment("trail", lat=0.0009, lng_from=0.0, lng_to=0.009)
        road = straight_segment("road", lat=-0.0009, lng_from=0.0, lng_to=0.009, is_road=True)
        path = trail_guided_waypoints(self.start, self.end, [road, trail])
        assert all(p.lat == 0.0009 for p in path[1:-1])

    def test_roads_only_follows_road(self) -> None:
        trail = straight_segment("trail", lat=0.0009, lng_from=0.0, lng_to=0.009)
        road = straight_segment("road", lat=-0.0009, lng_from=0.0, lng_to=0.009, is_road=True)
        path = trail_guided_waypoints(self.start, self.end, [road, trail], roads_only=True)
        assert all(p.lat == -0.0009 for p in path[1:-1])

    def test_far_trail_leaves_line_straight(self) -> None:
        """Trail ~220m away is beyond the 150m guide distance."""
        trail = straight_segment("trail", lat=0.002, lng_from=0.0, lng_to=0.009)
        path = trail_guided_waypoints(self.start, self.end, [trail])
        assert len(path) == 16
        assert all(p.lat == 0.0 for p in path)

    def test_water_only_gives_direct_line(self) -> None:
        lake = straight_segment("lake", lat=0.0001, lng_from=0.0, lng_to=0.009, is_water=True)
        assert trail_guided_waypoints(self.start, self.end, [lake]) == [self.start, self.end]

    def test_roads_only_without_roads_gives_direct_line(self) -> None:
        trail = straight_segment("trail", lat=0.0009, lng_from=0.0, lng_to=0.009)
        assert trail_guided_waypoints(self.start, self.end, [trail], roads_only=True) == [self.start, self.end]
