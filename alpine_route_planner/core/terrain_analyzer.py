"""Terrain analysis for walking route planning.

Provides slope, speed, and terrain classification between two points:
- Rise/run slope and slope percentage
- Tobler's hiking function for walking speed
- Slope variability from nearby elevation samples (or a seeded heuristic)
- Terrain type detection and movement cost multipliers
- Terrain complexity used to adapt the search step size

Tobler (1993): speed = 6 * exp(-3.5 * |slope + 0.05|) km/h.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from math import exp, sqrt
from typing import Iterable, Optional

import numpy as np

from alpine_route_planner.constants import TerrainConfig, ToblerConfig
from alpine_route_planner.core.elevation_samples import ElevationSampleSet
from alpine_route_planner.model.coordinate import Coordinate

logger = logging.getLogger(__name__)


class TerrainType(Enum):
    """Terrain category inferred from slope and variability."""

    TRAIL = "trail"
    VEGETATION = "vegetation"
    ROCK = "rock"
    SCREE = "scree"
    UNKNOWN = "unknown"


def terrain_multiplier(terrain_type: TerrainType) -> float:
    """Movement cost multiplier for a terrain type."""
    return TerrainConfig.MULTIPLIERS[terrain_type.value]


def calculate_slope(elevation_diff_m: float, distance_km: float) -> float:
    """Rise over run.

    Args:
        elevation_diff_m: Elevation change in meters (positive uphill)
        distance_km: Horizontal distance in kilometers

    Returns:
        Slope as a ratio (0.1 = 10%), or 0 for distances below 0.1 m.
    """
    if distance_km < TerrainConfig.MIN_DISTANCE_KM:
        return 0.0
    return elevation_diff_m / (distance_km * 1000)


def calculate_slope_percentage(slope: float) -> float:
    return abs(slope) * 100


def calculate_hiking_speed(slope: float) -> float:
    """Walking speed from Tobler's hiking function.

    Fastest on a slight downhill (-5%), slower in both directions from there.

    Args:
        slope: Slope as a ratio (positive uphill)

    Returns:
        Speed in km/h, never below ToblerConfig.MIN_SPEED_KMH.
    """
    speed = ToblerConfig.BASE_SPEED_KMH * exp(ToblerConfig.SLOPE_COEFFICIENT * abs(slope + ToblerConfig.SLOPE_OFFSET))
    return max(ToblerConfig.MIN_SPEED_KMH, speed)


def calculate_segment_time(distance_km: float, slope: float) -> float:
    """Walking time in hours for a segment."""
    return distance_km / calculate_hiking_speed(slope)


def detect_terrain_type(slope: float, variability: float) -> TerrainType:
    """Classify terrain from slope and variability (first matching rule wins).

    Args:
        slope: Slope as a ratio
        variability: Slope variability (0-1)

    Returns:
        SCREE for very steep and irregular, ROCK for steep and regular,
        TRAIL for gentle and very regular, VEGETATION below moderate slope,
        UNKNOWN otherwise.
    """
    pct = calculate_slope_percentage(slope)
    if pct > TerrainConfig.VERY_STEEP_PCT and variability > TerrainConfig.HIGH_VARIABILITY:
        return TerrainType.SCREE
    if pct > TerrainConfig.STEEP_PCT and variability < TerrainConfig.LOW_VARIABILITY:
        return TerrainType.ROCK
    if pct < TerrainConfig.GENTLE_PCT and variability < TerrainConfig.VERY_LOW_VARIABILITY:
        return TerrainType.TRAIL
    if pct < TerrainConfig.MODERATE_PCT:
        return TerrainType.VEGETATION
    return TerrainType.UNKNOWN


def calculate_terrain_complexity(
    coordinate: Coordinate,
    elevation_samples: "ElevationSampleSet | Iterable[Coordinate] | None",
    analysis_radius_km: float = TerrainConfig.ANALYSIS_RADIUS_KM,
) -> float:
    """Relative elevation range around a coordinate (0 = flat, 1 = rugged).

    complexity = (max - min) / max(100, mean * 0.1), capped at 1.

    Returns:
        Complexity in [0, 1]; TerrainConfig.DEFAULT_COMPLEXITY with fewer than 2 nearby samples.
    """
    nearby = ElevationSampleSet.of(elevation_samples).within_radius(coordinate, analysis_radius_km)
    if len(nearby) < TerrainConfig.MIN_SAMPLES_FOR_COMPLEXITY:
        return TerrainConfig.DEFAULT_COMPLEXITY
    elevation_range = float(nearby.max() - nearby.min())
    normalizer = max(TerrainConfig.COMPLEXITY_MIN_RANGE_M, float(nearby.mean()) * TerrainConfig.COMPLEXITY_ELEVATION_FACTOR)
    return min(1.0, elevation_range / normalizer)


def is_dangerous_slope(slope_pct: float) -> bool:
    return slope_pct > TerrainConfig.DANGEROUS_PCT


def is_very_steep_slope(slope_pct: float) -> bool:
    return slope_pct > TerrainConfig.VERY_STEEP_GRADE_PCT


def _pairwise_difference_std(elevations: np.ndarray) -> float:
    """Standard deviation of |e_i - e_j| over all pairs i < j."""
    i, j = np.triu_indices(len(elevations), k=1)
    diffs = np.abs(elevations[i] - elevations[j])
    mean = diffs.mean()
    return sqrt(float(((diffs - mean) ** 2).mean()))


@dataclass(frozen=True)
class TerrainAnalysis:
    """Terrain assessment between two points.

    Attributes:
        terrain_type: Detected terrain category
        slope: Slope as a ratio (positive uphill)
        slope_pct: Absolute slope percentage
        variability: Slope variability (0-1)
        hiking_speed_kmh: Tobler walking speed
        multiplier: Movement cost multiplier for the terrain type
        is_dangerous: Slope exceeds TerrainConfig.DANGEROUS_PCT
    """

    terrain_type: TerrainType
    slope: float
    slope_pct: float
    variability: float
    hiking_speed_kmh: float
    multiplier: float
    is_dangerous: bool

    def summary(self) -> str:
        danger = " DANGEROUS" if self.is_dangerous else ""
        return (
            f"{self.terrain_type.value} {self.slope_pct:.0f}% var={self.variability:.2f} "
            f"{self.hiking_speed_kmh:.1f}km/h x{self.multiplier:.1f}{danger}"
        )


class TerrainAnalyzer:
    """Terrain analysis with an injectable random source.

    The random source only affects the simplified variability heuristic used
    when too few elevation samples are nearby. Seed it for reproducible runs.

    Example:
        analyzer = TerrainAnalyzer(rng=random.Random(42))
        analysis = analyzer.analyze_between(start, end, samples)
        print(analysis.summary())
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """Initialize with an optional random source.

        Args:
            rng: Random generator for variability jitter (new unseeded one if not provided)
        """
        self._rng = rng or random.Random()

    @property
    def rng(self) -> random.Random:
        return self._rng

    def slope_variability(
        self,
        slope: float,
        elevation_samples: "ElevationSampleSet | Iterable[Coordinate] | None" = None,
        coordinate: Optional[Coordinate] = None,
    ) -> float:
        """Slope variability around a coordinate (0 = regular, 1 = highly irregular).

        Uses the spread of pairwise elevation differences among samples within
        the analysis radius when at least 3 are nearby, otherwise a heuristic
        that grows with slope plus uniform jitter.

        Args:
            slope: Slope as a ratio
            elevation_samples: Known elevation points
            coordinate: Center of the analysis

        Returns:
            Variability in [0, 1].
        """
        if elevation_samples is not None and coordinate is not None:
            nearby = ElevationSampleSet.of(elevation_samples).within_radius(
                coordinate, TerrainConfig.ANALYSIS_RADIUS_KM
            )
            if len(nearby) >= TerrainConfig.MIN_SAMPLES_FOR_VARIABILITY:
                return min(1.0, _pairwise_difference_std(nearby) / TerrainConfig.VARIABILITY_REFERENCE_M)

        base = min(abs(slope) * TerrainConfig.VARIABILITY_SLOPE_FACTOR, TerrainConfig.VARIABILITY_CAP)
        jitter = self._rng.uniform(-TerrainConfig.VARIABILITY_JITTER, TerrainConfig.VARIABILITY_JITTER)
        return max(0.0, min(1.0, base + jitter))

    def analyze_between(
        self,
        from_coord: Coordinate,
        to_coord: Coordinate,
        elevation_samples: "ElevationSampleSet | Iterable[Coordinate] | None" = None,
    ) -> TerrainAnalysis:
        """Full terrain assessment for moving from from_coord to to_coord."""
        distance_km = from_coord.distance_to(to_coord)
        slope = calculate_slope(
            elevation_diff_m=to_coord.elevation_or_zero - from_coord.elevation_or_zero,
            distance_km=distance_km,
        )
        variability = self.slope_variability(slope, elevation_samples, from_coord)
        terrain_type = detect_terrain_type(slope, variability)
        slope_pct = calculate_slope_percentage(slope)
        return TerrainAnalysis(
            terrain_type=terrain_type,
            slope=slope,
            slope_pct=slope_pct,
            variability=variability,
            hiking_speed_kmh=calculate_hiking_speed(slope),
            multiplier=terrain_multiplier(terrain_type),
            is_dangerous=is_dangerous_slope(slope_pct),
        )
