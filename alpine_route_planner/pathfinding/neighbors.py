"""Adaptive 8-connected neighbor generation.

Each expansion steps the same distance (in degrees) in all 8 directions.
The step shrinks in complex terrain and at high elevation, so rugged areas
are explored on a finer grid than flat valleys.
"""

from typing import Iterable

from alpine_route_planner.constants import StepSizeConfig, TerrainConfig
from alpine_route_planner.core.elevation_samples import ElevationSampleSet
from alpine_route_planner.core.terrain_analyzer import calculate_terrain_complexity
from alpine_route_planner.model.coordinate import Coordinate


def calculate_adaptive_step_size(elevation_m: float, complexity: float) -> float:
    """Step size in degrees for the given elevation and terrain complexity.

    step = BASE * (1 - 0.5 * complexity) * max(0.7, 1 - elevation / 8000),
    clamped to [MIN_STEP_DEG, MAX_STEP_DEG].

    Args:
        elevation_m: Current elevation in meters
        complexity: Terrain complexity (0-1)

    Returns:
        Step size in decimal degrees.
    """
    complexity_factor = 1 - complexity * StepSizeConfig.COMPLEXITY_REDUCTION
    elevation_factor = max(StepSizeConfig.MIN_ELEVATION_FACTOR, 1 - elevation_m / StepSizeConfig.MAX_ELEVATION_M)
    step = StepSizeConfig.BASE_STEP_DEG * complexity_factor * elevation_factor
    return max(StepSizeConfig.MIN_STEP_DEG, min(StepSizeConfig.MAX_STEP_DEG, step))


def step_size_at(
    current: Coordinate,
    elevation_samples: "ElevationSampleSet | Iterable[Coordinate] | None" = None,
) -> float:
    complexity = calculate_terrain_complexity(current, elevation_samples, TerrainConfig.ANALYSIS_RADIUS_KM)
    return calculate_adaptive_step_size(current.elevation_or_zero, complexity)


def generate_neighbors(
    current: Coordinate,
    elevation_samples: "ElevationSampleSet | Iterable[Coordinate] | None" = None,
) -> list[Coordinate]:
    """The 8 neighbors of current (4 cardinal, then 4 diagonal).

    All neighbors use the same step and inherit current's elevation; the
    search refines elevation from samples afterwards.
    """
    step = step_size_at(current, elevation_samples)
    return [
        Coordinate(lat=current.lat + d_lat * step, lng=current.lng + d_lng * step, elevation=current.elevation)
        for d_lat, d_lng in StepSizeConfig.NEIGHBORS_8
    ]
