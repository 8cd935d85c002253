"""Post-search trail snapping and elevation enrichment.

Pulls each route point onto the nearest vertex of a nearby road or trail:
1. Nearest road vertex within the snap distance wins
2. Otherwise the nearest walkable trail vertex (skipped in roads-only mode)
3. Water features are never snapped to
4. Otherwise the point is kept unchanged

Elevation of each final point comes from the snapped vertex, else the
original point, else one batched call to the elevation provider. A failing
provider degrades to 0 m with an ElevationUnavailableWarning.

trail_guided_waypoints builds the straight fallback line, pulling its
interior points onto nearby trails or roads before the regular snapping.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from alpine_route_planner.constants import SnapConfig
from alpine_route_planner.core.geo_calculator import GeoCalculator
from alpine_route_planner.model.coordinate import Coordinate, RoutePoint
from alpine_route_planner.model.errors import DataUnavailableError
from alpine_route_planner.model.options import PathfindingOptions
from alpine_route_planner.model.trail import TrailNetwork, TrailSegment
from alpine_route_planner.model.warning import (
    ElevationUnavailableWarning,
    PlanningWarning,
    TrailSnappingSkippedWarning,
)
from alpine_route_planner.services.elevation_service import ElevationProvider
from alpine_route_planner.services.trail_service import find_nearest_trail_point, get_trails_near_coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapResult:
    """Result of snapping a single point.

    Attributes:
        coordinate: Snapped vertex, or the original coordinate
        trail: Segment snapped to, None if unchanged
        distance_km: Distance moved (0 if unchanged)
    """

    coordinate: Coordinate
    trail: Optional[TrailSegment] = None
    distance_km: float = 0.0

    @property
    def snapped(self) -> bool:
        return self.trail is not None

    @property
    def snapped_to_road(self) -> bool:
        return self.trail is not None and self.trail.is_road


@dataclass(frozen=True)
class SnapOutcome:
    """Result of optimizing a whole route.

    Attributes:
        points: Final route points with resolved elevation
        snapped_count: Number of points moved onto a road or trail
        road_count: Number of points moved onto a road
        warnings: Degraded-mode notices
    """

    points: tuple[RoutePoint, ...]
    snapped_count: int = 0
    road_count: int = 0
    warnings: tuple[PlanningWarning, ...] = field(default_factory=tuple)


class TrailSnapper:
    """Snaps route points to nearby roads and trails.

    Example:
        snapper = TrailSnapper(max_snap_distance_km=0.25)
        outcome = await snapper.optimize(points, network, options, elevation_provider)
    """

    def __init__(self, max_snap_distance_km: float = SnapConfig.MAX_SNAP_DISTANCE_KM) -> None:
        self.max_snap_distance_km = max_snap_distance_km

    def snap_point(self, coordinate: Coordinate, trails: Sequence[TrailSegment], roads_only: bool = False) -> SnapResult:
        """Snap one coordinate, roads first, never to water.

        Args:
            coordinate: Point to snap
            trails: Candidate segments (any mix of roads, trails, water)
            roads_only: Ignore walkable trails

        Returns:
            SnapResult with the chosen vertex, or the original coordinate.
        """
        roads = [t for t in trails if t.is_road]
        match = find_nearest_trail_point(coordinate, roads, self.max_snap_distance_km)
        if match is None and not roads_only:
            walkable = [t for t in trails if t.is_walkable_trail]
            match = find_nearest_trail_point(coordinate, walkable, self.max_snap_distance_km)
        if match is None:
            return SnapResult(coordinate=coordinate)
        return SnapResult(coordinate=match.point, trail=match.trail, distance_km=match.distance_km)

    def _candidates(self, coordinate: Coordinate, network: TrailNetwork) -> list[TrailSegment]:
        return get_trails_near_coordinate(
            coordinate, network.spatial_index, network.bounding_box, self.max_snap_distance_km
        )

    async def optimize(
        self,
        points: Sequence[Coordinate],
        network: Optional[TrailNetwork],
        options: PathfindingOptions,
        elevation_provider: Optional[ElevationProvider] = None,
    ) -> SnapOutcome:
        """Snap every point and resolve missing elevations.

        Args:
            points: Route coordinates in order
            network: Trail snapshot, None when trail data is unavailable
            options: Validated options (roads_only is honored)
            elevation_provider: Used for points without any known elevation

        Returns:
            SnapOutcome with final RoutePoints and any warnings.
        """
        start_time = time.time()
        warnings: list[PlanningWarning] = []
        resolved: list[Coordinate] = []
        snapped_count = 0
        road_count = 0

        if network is None:
            warnings.append(TrailSnappingSkippedWarning(reason="no trail network available"))
            resolved = list(points)
        else:
            for point in points:
                result = self.snap_point(point, self._candidates(point, network), options.roads_only)
                if result.snapped:
                    snapped_count += 1
                    road_count += int(result.snapped_to_road)
                    elevation = result.coordinate.elevation if result.coordinate.elevation is not None else point.elevation
                    resolved.append(result.coordinate.with_elevation(elevation))
                else:
                    resolved.append(point)

        missing = [i for i, c in enumerate(resolved) if c.elevation is None]
        if missing:
            resolved, warning = await self._enrich_elevation(resolved, missing, elevation_provider)
            if warning is not None:
                warnings.append(warning)

        logger.info(
            f"Snapped {snapped_count}/{len(points)} points ({road_count} to roads) "
            f"in {time.time() - start_time:.2f}s"
        )
        return SnapOutcome(
            points=tuple(RoutePoint.from_coordinate(c) for c in resolved),
            snapped_count=snapped_count,
            road_count=road_count,
            warnings=tuple(warnings),
        )

    async def _enrich_elevation(
        self,
        coordinates: list[Coordinate],
        missing: list[int],
        elevation_provider: Optional[ElevationProvider],
    ) -> tuple[list[Coordinate], Optional[ElevationUnavailableWarning]]:
        """Fill elevations at the missing indices with one provider call."""
        if elevation_provider is None:
            reason = "no elevation provider configured"
            logger.warning(f"{len(missing)} points without elevation: {reason}")
            return coordinates, ElevationUnavailableWarning(stage="snapping", reason=reason, affected_points=len(missing))

        try:
            elevations = await asyncio.to_thread(elevation_provider.get_elevation, [coordinates[i] for i in missing])
        except DataUnavailableError as e:
            logger.warning(f"Elevation enrichment failed for {len(missing)} points: {e}")
            return coordinates, ElevationUnavailableWarning(stage="snapping", reason=str(e), affected_points=len(missing))

        enriched = list(coordinates)
        for i, elevation in zip(missing, elevations):
            enriched[i] = enriched[i].with_elevation(elevation)
        return enriched, None


def trail_guided_waypoints(
    start: Coordinate,
    end: Coordinate,
    trails: Sequence[TrailSegment],
    roads_only: bool = False,
    count: int = SnapConfig.GUIDE_WAYPOINT_COUNT,
    snap_distance_km: float = SnapConfig.GUIDE_SNAP_DISTANCE_KM,
) -> list[Coordinate]:
    """Straight start-end line whose interior points are pulled onto nearby paths.

    The line is cut into count equal parts. Each interior point moves to the
    nearest usable vertex within snap_distance_km, where trail vertices count
    at GUIDE_TRAIL_DISTANCE_WEIGHT of their distance unless roads_only. Water
    is never used and roads_only ignores walkable trails.

    Returns:
        [start, end] when no usable segment exists, else start, count - 1
        interior points, and end.
    """
    usable = [t for t in trails if not t.is_water and (t.is_road or not roads_only)]
    if not usable:
        logger.info("No usable trails for the guided line, using start and end only")
        return [start, end]

    path = [start]
    snapped = 0
    for i in range(1, count):
        point = start.interpolate_to(end, i / count)
        best, best_score = point, float("inf")
        for trail in usable:
            lats, lngs = trail.vertex_arrays
            distances = GeoCalculator.distances_km(point, lats, lngs)
            j = int(np.argmin(distances))
            if distances[j] > snap_distance_km:
                continue
            weight = 1.0 if roads_only or trail.is_road else SnapConfig.GUIDE_TRAIL_DISTANCE_WEIGHT
            score = float(distances[j]) * weight
            if score < best_score:
                best, best_score = trail.coordinates[j], score
        snapped += int(best is not point)
        path.append(best)
    path.append(end)

    logger.info(f"Guided line: {snapped}/{count - 1} interior points on trails or roads")
    return path
