"""PathfindingOptions - explicit, validated configuration for a single search."""

from dataclasses import dataclass, replace

from alpine_route_planner.constants import OptionsConfig, PresetConfig


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class PathfindingOptions:
    """Search budget and trail preference for one planning request.

    Attributes:
        max_iterations: Search budget (dequeues) before giving up
        max_waypoints: Maximum number of points in the final route
        waypoint_distance_km: Target spacing of interpolated route points
        off_trail_penalty: Cost multiplier off trails and roads (>= 1)
        trail_bonus: Cost multiplier on trails (0 < bonus <= 1, lower is stronger)
        road_bonus: Cost multiplier on roads (0 < bonus <= 1, lower is stronger)
        roads_only: Only roads count as on-path; trails are neither rewarded nor snapped to
    """

    max_iterations: int
    max_waypoints: int
    waypoint_distance_km: float
    off_trail_penalty: float
    trail_bonus: float
    road_bonus: float
    roads_only: bool = False

    @classmethod
    def default(cls) -> "PathfindingOptions":
        """Default options (pure factory, no shared mutable state)."""
        return cls(**OptionsConfig.DEFAULTS)

    @classmethod
    def preset(cls, name: str) -> "PathfindingOptions":
        """Options for a named preset.

        Args:
            name: One of PresetConfig.NAMES (case-insensitive)

        Raises:
            ValueError: If the preset name is unknown.
        """
        key = name.upper()
        if key not in PresetConfig.PRESETS:
            raise ValueError(f"Unknown preset '{name}', expected one of {PresetConfig.NAMES}")
        return cls(**PresetConfig.PRESETS[key])

    def validated(self) -> "PathfindingOptions":
        """Copy with every field clamped into its valid range."""
        return replace(
            self,
            max_iterations=int(_clamp(self.max_iterations, OptionsConfig.MIN_ITERATIONS, OptionsConfig.MAX_ITERATIONS)),
            max_waypoints=int(_clamp(self.max_waypoints, OptionsConfig.MIN_WAYPOINTS, OptionsConfig.MAX_WAYPOINTS)),
            waypoint_distance_km=max(OptionsConfig.MIN_WAYPOINT_DISTANCE_KM, self.waypoint_distance_km),
            off_trail_penalty=max(OptionsConfig.MIN_OFF_TRAIL_PENALTY, self.off_trail_penalty),
            trail_bonus=_clamp(self.trail_bonus, OptionsConfig.MIN_BONUS, OptionsConfig.MAX_BONUS),
            road_bonus=_clamp(self.road_bonus, OptionsConfig.MIN_BONUS, OptionsConfig.MAX_BONUS),
            roads_only=bool(self.roads_only),
        )
