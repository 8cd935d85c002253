"""Movement and heuristic costs for the A* search.

Edge cost is walking time scaled into cost units and adjusted by terrain,
trail preference, and slope danger:

    cost = (distance / tobler_speed) * 10
           * terrain_multiplier
           * trail_factor          (road_bonus | trail_bonus | off_trail_penalty)
           * danger_factor         (exp((pct - 100) / 50) above 100%, x1.5 above 58%)

The heuristic is the straight-line distance plus a small penalty for the
current elevation, steering the search towards lower ground.
"""

import logging
from math import exp
from typing import Iterable, Optional

from alpine_route_planner.constants import PathfindingConfig, TerrainConfig, TrailConfig
from alpine_route_planner.core.elevation_samples import ElevationSampleSet
from alpine_route_planner.core.terrain_analyzer import (
    TerrainAnalyzer,
    calculate_hiking_speed,
    calculate_slope,
    calculate_slope_percentage,
    detect_terrain_type,
    is_dangerous_slope,
    is_very_steep_slope,
    terrain_multiplier,
)
from alpine_route_planner.model.coordinate import Coordinate
from alpine_route_planner.model.options import PathfindingOptions
from alpine_route_planner.model.trail import TrailNetwork, TrailSegment
from alpine_route_planner.services.trail_service import get_trails_near_coordinate, is_on_trail

logger = logging.getLogger(__name__)


def calculate_heuristic(current: Coordinate, goal: Coordinate) -> float:
    """Straight-line distance (km) plus 0.001 per meter of current elevation."""
    return current.distance_to(goal) + current.elevation_or_zero * PathfindingConfig.ELEVATION_PENALTY_FACTOR


def danger_factor(slope_pct: float) -> float:
    """Multiplier for dangerous and very steep slopes (1.0 for walkable slopes)."""
    factor = 1.0
    if is_dangerous_slope(slope_pct):
        factor *= exp((slope_pct - TerrainConfig.DANGEROUS_PCT) / PathfindingConfig.DANGER_SLOPE_DIVISOR)
    if is_very_steep_slope(slope_pct):
        factor *= PathfindingConfig.STEEP_TERRAIN_PENALTY
    return factor


class MovementCostModel:
    """Edge and heuristic costs for one search.

    Holds the per-search context (options, trail network, elevation samples)
    so the hot loop only passes coordinates.

    Example:
        model = MovementCostModel(TerrainAnalyzer(), PathfindingOptions.default(), network, samples)
        cost = model.movement_cost(a, b)
    """

    def __init__(
        self,
        analyzer: TerrainAnalyzer,
        options: PathfindingOptions,
        trail_network: Optional[TrailNetwork] = None,
        elevation_samples: "ElevationSampleSet | Iterable[Coordinate] | None" = None,
    ) -> None:
        self.analyzer = analyzer
        self.options = options
        self.trail_network = trail_network if trail_network is not None and not trail_network.is_empty else None
        self.elevation_samples = ElevationSampleSet.of(elevation_samples)

    def heuristic(self, current: Coordinate, goal: Coordinate) -> float:
        return calculate_heuristic(current, goal)

    def movement_cost(self, from_coord: Coordinate, to_coord: Coordinate) -> float:
        """Cost of moving from from_coord to to_coord (always >= 0).

        Returns:
            0 for zero distance, otherwise the product of time cost and all factors.
        """
        distance_km = from_coord.distance_to(to_coord)
        if distance_km == 0:
            return 0.0

        slope = calculate_slope(
            elevation_diff_m=to_coord.elevation_or_zero - from_coord.elevation_or_zero,
            distance_km=distance_km,
        )
        slope_pct = calculate_slope_percentage(slope)
        time_cost = distance_km / calculate_hiking_speed(slope) * PathfindingConfig.TIME_COST_SCALE_FACTOR

        variability = self.analyzer.slope_variability(slope, self.elevation_samples, from_coord)
        terrain = terrain_multiplier(detect_terrain_type(slope, variability))

        return time_cost * terrain * self.trail_factor(from_coord, to_coord) * danger_factor(slope_pct)

    def nearby_trails(self, coordinate: Coordinate) -> list[TrailSegment]:
        """Non-water trail candidates near coordinate, capped for performance."""
        if self.trail_network is None:
            return []
        candidates = get_trails_near_coordinate(
            coordinate,
            self.trail_network.spatial_index,
            self.trail_network.bounding_box,
            TrailConfig.INDEX_QUERY_RADIUS_KM,
        )
        usable = [t for t in candidates if not t.is_water and (t.is_road or not self.options.roads_only)]
        return usable[: TrailConfig.MAX_TRAILS_WITH_INDEX]

    def trail_factor(self, from_coord: Coordinate, to_coord: Coordinate) -> float:
        """road_bonus, trail_bonus, or off_trail_penalty for the segment.

        The segment counts as on-path when both endpoints are within the
        trail detection radius of a candidate. Roads win over trails when
        from_coord is within the road detection radius of a road.
        """
        if self.trail_network is None:
            return self.options.off_trail_penalty

        nearby = self.nearby_trails(from_coord)
        if not nearby:
            return self.options.off_trail_penalty

        on_path = is_on_trail(from_coord, nearby, TrailConfig.TRAIL_DETECTION_RADIUS_KM) and is_on_trail(
            to_coord, nearby, TrailConfig.TRAIL_DETECTION_RADIUS_KM
        )
        if not on_path:
            return self.options.off_trail_penalty

        roads = [t for t in nearby if t.is_road]
        if roads and is_on_trail(from_coord, roads, TrailConfig.ROAD_DETECTION_RADIUS_KM):
            return self.options.road_bonus
        if self.options.roads_only:
            return self.options.off_trail_penalty
        return self.options.trail_bonus


def calculate_movement_cost(
    from_coord: Coordinate,
    to_coord: Coordinate,
    trail_network: Optional[TrailNetwork] = None,
    options: Optional[PathfindingOptions] = None,
    analyzer: Optional[TerrainAnalyzer] = None,
) -> float:
    """One-off movement cost without building a MovementCostModel by hand."""
    model = MovementCostModel(
        analyzer=analyzer or TerrainAnalyzer(),
        options=(options or PathfindingOptions.default()).validated(),
        trail_network=trail_network,
    )
    return model.movement_cost(from_coord, to_coord)
