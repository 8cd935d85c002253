"""PlannedRoute - the result of a planning request with summary statistics.

Summary metrics are computed once from the final point list:
- distance_km: Sum of Haversine segment lengths
- elevation_gain_m / elevation_loss_m: Sum of positive / negative steps
- estimated_time_h: Tobler walking time over all segments
- difficulty: Classified from max segment slope and gain per km
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from alpine_route_planner.constants import DifficultyConfig, TerrainConfig
from alpine_route_planner.core.terrain_analyzer import (
    calculate_segment_time,
    calculate_slope,
    calculate_slope_percentage,
)
from alpine_route_planner.model.coordinate import RoutePoint
from alpine_route_planner.model.warning import PlanningWarning

logger = logging.getLogger(__name__)


class RouteDifficulty(Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    EXTREME = "extreme"


def classify_difficulty(max_slope_pct: float, gain_per_km_m: float) -> RouteDifficulty:
    """Hardest level whose slope or gain threshold is exceeded."""
    for level in (RouteDifficulty.EXTREME, RouteDifficulty.HARD, RouteDifficulty.MODERATE):
        thresholds = DifficultyConfig.THRESHOLDS[level.value]
        if max_slope_pct > thresholds["max_slope_pct"] or gain_per_km_m > thresholds["gain_per_km_m"]:
            return level
    return RouteDifficulty.EASY


@dataclass(frozen=True)
class PlannedRoute:
    """A planned walking route.

    Attributes:
        points: Route points from start to end
        distance_km: Total horizontal distance
        elevation_gain_m: Total ascent
        elevation_loss_m: Total descent (positive number)
        estimated_time_h: Walking time from Tobler's hiking function
        max_slope_pct: Steepest segment slope
        difficulty: Overall difficulty classification
        iterations: Search iterations used (0 for direct routes)
        is_fallback: True if this is a direct line rather than a searched route
        warnings: Degraded-mode notices
    """

    points: tuple[RoutePoint, ...]
    distance_km: float
    elevation_gain_m: float
    elevation_loss_m: float
    estimated_time_h: float
    max_slope_pct: float
    difficulty: RouteDifficulty
    iterations: int = 0
    is_fallback: bool = False
    warnings: tuple[PlanningWarning, ...] = field(default_factory=tuple)

    @classmethod
    def from_points(
        cls,
        points: list[RoutePoint],
        iterations: int = 0,
        is_fallback: bool = False,
        warnings: tuple[PlanningWarning, ...] = (),
    ) -> "PlannedRoute":
        """Build a route and compute its summary statistics.

        Args:
            points: Final route points (at least one)
            iterations: Search iterations used
            is_fallback: Whether the route is a direct-line fallback
            warnings: Warnings collected while planning

        Returns:
            PlannedRoute with all metrics filled in.
        """
        if not points:
            raise ValueError("A route needs at least one point")

        distance_km = 0.0
        gain_m = 0.0
        loss_m = 0.0
        time_h = 0.0
        max_slope_pct = 0.0
        for a, b in zip(points[:-1], points[1:]):
            segment_km = a.distance_to(b)
            diff_m = b.elevation - a.elevation
            slope = calculate_slope(elevation_diff_m=diff_m, distance_km=segment_km)
            distance_km += segment_km
            if diff_m > 0:
                gain_m += diff_m
            else:
                loss_m -= diff_m
            time_h += calculate_segment_time(distance_km=segment_km, slope=slope)
            max_slope_pct = max(max_slope_pct, calculate_slope_percentage(slope))

        gain_per_km = gain_m / distance_km if distance_km > TerrainConfig.MIN_DISTANCE_KM else 0.0
        difficulty = classify_difficulty(max_slope_pct=max_slope_pct, gain_per_km_m=gain_per_km)
        logger.debug(
            f"Route summary: {len(points)} pts, {distance_km:.2f}km, +{gain_m:.0f}m/-{loss_m:.0f}m, "
            f"{time_h:.2f}h, max {max_slope_pct:.0f}%, {difficulty.value}"
        )
        return cls(
            points=tuple(points),
            distance_km=distance_km,
            elevation_gain_m=gain_m,
            elevation_loss_m=loss_m,
            estimated_time_h=time_h,
            max_slope_pct=max_slope_pct,
            difficulty=difficulty,
            iterations=iterations,
            is_fallback=is_fallback,
            warnings=tuple(warnings),
        )

    @property
    def start(self) -> RoutePoint:
        return self.points[0]

    @property
    def end(self) -> RoutePoint:
        return self.points[-1]

    def __repr__(self) -> str:
        return (
            f"PlannedRoute({len(self.points)} pts, {self.distance_km:.2f}km, "
            f"+{self.elevation_gain_m:.0f}m, {self.difficulty.value})"
        )
