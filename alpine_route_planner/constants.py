"""Configuration constants for Alpine Route Planner.

All tunable parameters are centralized here for easy tuning.

Classes:
    PathfindingConfig: A* search tolerances and cost scaling
    StepSizeConfig: Adaptive neighbor step size parameters
    TerrainConfig: Slope thresholds, variability thresholds, terrain multipliers
    ToblerConfig: Hiking speed model constants
    TrailConfig: Trail/road proximity radii for the cost model
    SnapConfig: Post-search trail snapping parameters
    ElevationConfig: Elevation service endpoints and sampling
    OverpassConfig: Trail data provider (OpenStreetMap Overpass API)
    DEMConfig: Local elevation raster paths
    OptionsConfig: Validation bounds and defaults for PathfindingOptions
    PresetConfig: Named PathfindingOptions presets
    DifficultyConfig: Route difficulty classification
"""

from pathlib import Path

# Package root directory (where alpine_route_planner/ lives)
PACKAGE_DIR = Path(__file__).parent

# Project root directory (parent of alpine_route_planner/)
PROJECT_ROOT = PACKAGE_DIR.parent

# Data directory outside package (downloaded separately, not shipped with package)
DATA_DIR = PROJECT_ROOT / "data"


class PathfindingConfig:
    """A* search parameters."""

    # Coordinate comparison tolerance in degrees (~11m), elevation ignored
    COORDINATE_TOLERANCE_DEG = 0.0001

    # Heuristic elevation penalty per meter of current elevation
    # Kept small relative to the per-km movement cost (~2-4 units/km off trail)
    ELEVATION_PENALTY_FACTOR = 0.001

    # Hours of walking are scaled into cost units by this factor
    TIME_COST_SCALE_FACTOR = 10

    # Search terminates once the current node is this close to the goal (km)
    GOAL_DISTANCE_THRESHOLD_KM = 0.01

    # Dangerous slope penalty: exp((slope_pct - DANGEROUS) / DIVISOR)
    DANGER_SLOPE_DIVISOR = 50

    # Extra multiplier for slopes above TerrainConfig.VERY_STEEP_GRADE_PCT
    STEEP_TERRAIN_PENALTY = 1.5

    # Neighbor elevation is refined from the nearest sample within this box (degrees)
    ELEVATION_SAMPLE_MATCH_DEG = 0.01

    # Iteration interval for progress logging
    PROGRESS_LOG_INTERVAL = 100


class StepSizeConfig:
    """Adaptive step size for the 8-connected neighbor generator (degrees)."""

    BASE_STEP_DEG = 0.005  # ~550m at the equator
    MIN_STEP_DEG = 0.001  # ~110m for complex or high terrain
    MAX_STEP_DEG = 0.01  # ~1100m for simple terrain
    COMPLEXITY_REDUCTION = 0.5  # Step shrinks by up to 50% in complex terrain
    MIN_ELEVATION_FACTOR = 0.7  # Elevation never shrinks the step below 70%
    MAX_ELEVATION_M = 8000  # Elevation at which the elevation factor would reach 0

    # (d_lat, d_lng) unit directions: 4 cardinal followed by 4 diagonal
    NEIGHBORS_8 = [(-1, 0), (1, 0), (0, -1), (0, 1), (-1, -1), (-1, 1), (1, -1), (1, 1)]


class TerrainConfig:
    """Slope classification thresholds and terrain multipliers."""

    # Slope thresholds (percent)
    VERY_STEEP_PCT = 40
    STEEP_PCT = 35
    MODERATE_PCT = 30
    GENTLE_PCT = 20
    DANGEROUS_PCT = 100
    VERY_STEEP_GRADE_PCT = 58

    # Slope variability thresholds (0-1 scale)
    HIGH_VARIABILITY = 0.3
    LOW_VARIABILITY = 0.15
    VERY_LOW_VARIABILITY = 0.1

    # Simplified variability heuristic: min(|slope| * FACTOR, CAP) + jitter
    VARIABILITY_SLOPE_FACTOR = 2
    VARIABILITY_CAP = 0.5
    VARIABILITY_JITTER = 0.1  # Uniform jitter in [-JITTER, JITTER]

    # Advanced variability: stddev of pairwise elevation differences / REFERENCE
    VARIABILITY_REFERENCE_M = 50.0
    MIN_SAMPLES_FOR_VARIABILITY = 3

    # Terrain complexity
    DEFAULT_COMPLEXITY = 0.5
    COMPLEXITY_ELEVATION_FACTOR = 0.1
    COMPLEXITY_MIN_RANGE_M = 100
    MIN_SAMPLES_FOR_COMPLEXITY = 2

    # Radius for nearby elevation sample analysis (~0.01 degrees)
    ANALYSIS_RADIUS_KM = 1.1

    # Below this distance slope is reported as 0 (km)
    MIN_DISTANCE_KM = 0.0001

    # Movement cost multipliers by terrain type value
    MULTIPLIERS = {
        "trail": 0.8,  # Established paths
        "vegetation": 1.0,  # Grass, forest
        "rock": 1.3,  # Solid rock faces
        "scree": 1.8,  # Loose rock/debris
        "unknown": 1.1,  # Slight penalty for uncertainty
    }


assert (
    TerrainConfig.MULTIPLIERS["trail"]
    < TerrainConfig.MULTIPLIERS["vegetation"]
    < TerrainConfig.MULTIPLIERS["rock"]
    < TerrainConfig.MULTIPLIERS["scree"]
), "Terrain multipliers must be ordered trail < vegetation < rock < scree"
assert TerrainConfig.DANGEROUS_PCT > TerrainConfig.VERY_STEEP_GRADE_PCT


class ToblerConfig:
    """Tobler's hiking function: speed = BASE * exp(COEFF * |slope + OFFSET|)."""

    BASE_SPEED_KMH = 6.0
    SLOPE_COEFFICIENT = -3.5
    SLOPE_OFFSET = 0.05
    MIN_SPEED_KMH = 0.5


class TrailConfig:
    """Trail/road proximity checks used by the movement cost model."""

    MAX_TRAILS_WITH_INDEX = 20  # Candidate cap after spatial index lookup
    TRAIL_DETECTION_RADIUS_KM = 0.15
    ROAD_DETECTION_RADIUS_KM = 0.1

    # Spatial index lookup radius around a coordinate (km)
    INDEX_QUERY_RADIUS_KM = 1.0


class SnapConfig:
    """Trail snapping after the search."""

    MAX_SNAP_DISTANCE_KM = 0.25

    # Trail-guided straight line used by the direct-route fallback
    GUIDE_WAYPOINT_COUNT = 15
    GUIDE_SNAP_DISTANCE_KM = 0.15
    GUIDE_TRAIL_DISTANCE_WEIGHT = 0.5  # Trail vertices count at half distance, so trails beat roads


class ElevationConfig:
    """Elevation lookup service."""

    OPEN_METEO_URL = "https://api.open-meteo.com/v1/elevation"
    MAX_COORDINATES_PER_REQUEST = 100
    REQUEST_TIMEOUT_S = 15

    # Spacing of elevation samples along the straight start-end line (degrees)
    ROUTE_SAMPLE_RESOLUTION_DEG = 0.005


class OverpassConfig:
    """OpenStreetMap Overpass API trail provider."""

    ENDPOINTS = [
        "https://overpass-api.de/api/interpreter",
        "https://overpass.kumi.systems/api/interpreter",
    ]
    QUERY_TIMEOUT_S = 25
    REQUEST_TIMEOUT_S = 30

    # Padding around the start-end box (km)
    BBOX_PADDING_KM = 5.0

    # In-memory network cache lifetime (seconds)
    CACHE_DURATION_S = 30 * 60
    CACHE_KEY_DECIMALS = 3

    FOOT_HIGHWAYS = ["path", "track", "footway", "cycleway", "bridleway", "steps"]
    ROAD_HIGHWAYS = ["tertiary", "secondary", "primary", "trunk", "residential", "service"]
    WATERWAYS = ["river", "stream", "canal"]

    # OSM sac_scale / trail_visibility to difficulty value
    SAC_SCALE_DIFFICULTY = {
        "hiking": "easy",
        "T1": "easy",
        "mountain_hiking": "moderate",
        "T2": "moderate",
        "demanding_mountain_hiking": "difficult",
        "T3": "difficult",
        "alpine_hiking": "expert",
        "T4": "expert",
        "T5": "expert",
        "T6": "expert",
    }
    VISIBILITY_DIFFICULTY = {
        "excellent": "easy",
        "good": "easy",
        "intermediate": "moderate",
        "bad": "difficult",
        "horrible": "expert",
        "no": "expert",
    }


class DEMConfig:
    """Local elevation raster (GeoTIFF) used by DEMElevationService."""

    DEM_PATH = DATA_DIR / "dem.tif"


class OptionsConfig:
    """Defaults and validation bounds for PathfindingOptions."""

    DEFAULTS = {
        "max_iterations": 500,
        "max_waypoints": 50,
        "waypoint_distance_km": 0.01,
        "off_trail_penalty": 2.0,
        "trail_bonus": 0.4,
        "road_bonus": 0.3,
        "roads_only": False,
    }

    MIN_ITERATIONS = 1
    MAX_ITERATIONS = 100_000
    MIN_WAYPOINTS = 2
    MAX_WAYPOINTS = 10_000
    MIN_WAYPOINT_DISTANCE_KM = 0.001
    MIN_OFF_TRAIL_PENALTY = 1.0
    MIN_BONUS = 0.01
    MAX_BONUS = 1.0


class PresetConfig:
    """Named option presets for common planning styles."""

    PRESETS = {
        "FAVOR_TRAILS_HEAVILY": {
            "max_iterations": 1500,
            "off_trail_penalty": 5.0,
            "trail_bonus": 0.1,  # 90% cost reduction
            "road_bonus": 0.05,  # 95% cost reduction
            "max_waypoints": 100,
            "waypoint_distance_km": 0.005,
            "roads_only": False,
        },
        "FAVOR_TRAILS_MODERATELY": {
            "max_iterations": 1000,
            "off_trail_penalty": 3.0,
            "trail_bonus": 0.3,
            "road_bonus": 0.2,
            "max_waypoints": 75,
            "waypoint_distance_km": 0.01,
            "roads_only": False,
        },
        "FAVOR_TRAILS_LITTLE": {
            "max_iterations": 500,
            "off_trail_penalty": 1.5,
            "trail_bonus": 0.7,
            "road_bonus": 0.6,
            "max_waypoints": 50,
            "waypoint_distance_km": 0.02,
            "roads_only": False,
        },
        "DIRECT_ROUTE": {
            "max_iterations": 300,
            "off_trail_penalty": 1.0,
            "trail_bonus": 0.9,
            "road_bonus": 0.8,
            "max_waypoints": 10,
            "waypoint_distance_km": 0.05,
            "roads_only": False,
        },
        "ROADS_ONLY": {
            "max_iterations": 300,
            "off_trail_penalty": 10.0,  # Heavily penalize off-road
            "trail_bonus": 1.0,  # No trail bonus
            "road_bonus": 0.2,
            "max_waypoints": 20,
            "waypoint_distance_km": 0.02,
            "roads_only": True,
        },
    }
    NAMES = list(PRESETS.keys())


assert all(
    set(preset.keys()) == set(OptionsConfig.DEFAULTS.keys()) for preset in PresetConfig.PRESETS.values()
), "Every preset must define every option"


class DifficultyConfig:
    """Route difficulty classification (checked from hardest to easiest).

    A route falls into the first level whose max segment slope OR elevation
    gain per km exceeds the listed threshold.
    """

    THRESHOLDS = {
        "extreme": {"max_slope_pct": 58.0, "gain_per_km_m": 250.0},
        "hard": {"max_slope_pct": 35.0, "gain_per_km_m": 150.0},
        "moderate": {"max_slope_pct": 20.0, "gain_per_km_m": 60.0},
    }
