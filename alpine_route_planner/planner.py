"""RoutePlanner - async facade tying data providers, search, and snapping together.

Pipeline for plan_route:
1. Validate coordinates and options
2. Fetch elevation samples and the trail network concurrently (worker threads)
3. Run the synchronous A* search in a worker thread, cancellable per iteration
4. Densify and limit waypoints
5. Snap to roads/trails and resolve missing elevations
6. Summarise distance, elevation gain/loss, time, and difficulty

Provider failures degrade the result (recorded as warnings) instead of
failing the request. Only an unreachable goal raises NoRouteFoundError.
"""

import asyncio
import logging
import random
import threading
import time
from typing import Optional

from alpine_route_planner.constants import ElevationConfig
from alpine_route_planner.core.elevation_samples import ElevationSampleSet
from alpine_route_planner.core.terrain_analyzer import TerrainAnalyzer
from alpine_route_planner.model.coordinate import Coordinate
from alpine_route_planner.model.errors import DataUnavailableError, NoRouteFoundError
from alpine_route_planner.model.options import PathfindingOptions
from alpine_route_planner.model.route import PlannedRoute
from alpine_route_planner.model.trail import TrailNetwork
from alpine_route_planner.model.warning import (
    ElevationUnavailableWarning,
    PlanningWarning,
    TrailDataUnavailableWarning,
)
from alpine_route_planner.pathfinding.astar import AStarSearch
from alpine_route_planner.pathfinding.cost_model import MovementCostModel
from alpine_route_planner.pathfinding.trail_snapping import TrailSnapper, trail_guided_waypoints
from alpine_route_planner.pathfinding.waypoints import interpolate_waypoints, limit_waypoints
from alpine_route_planner.services.elevation_service import ElevationProvider, sample_line
from alpine_route_planner.services.trail_service import TrailProvider

logger = logging.getLogger(__name__)


class RoutePlanner:
    """Plans walking routes between two coordinates.

    Holds no per-request state, so one planner can serve concurrent requests.
    Each request gets its own TerrainAnalyzer; pass a seed to make the
    variability jitter, and therefore every result, reproducible.

    Example:
        planner = RoutePlanner(OpenMeteoElevationService(), OverpassTrailService())
        route = asyncio.run(planner.plan_route(start, end, PathfindingOptions.preset("FAVOR_TRAILS_MODERATELY")))
    """

    def __init__(
        self,
        elevation_provider: ElevationProvider,
        trail_provider: TrailProvider,
        seed: Optional[int] = None,
        snapper: Optional[TrailSnapper] = None,
    ) -> None:
        self.elevation_provider = elevation_provider
        self.trail_provider = trail_provider
        self.seed = seed
        self.snapper = snapper or TrailSnapper()

    async def plan_route(
        self,
        start: Coordinate,
        end: Coordinate,
        options: Optional[PathfindingOptions] = None,
    ) -> PlannedRoute:
        """Search for a terrain-aware route from start to end.

        Raises:
            InvalidCoordinateError: If start or end is out of range.
            NoRouteFoundError: If the search exhausts its budget or search space.
            SearchCancelledError: If the search was stopped through its cancel event.
        """
        start.validate()
        end.validate()
        options = (options or PathfindingOptions.default()).validated()
        planning_start = time.time()
        logger.info(f"Planning route {start} -> {end} ({start.distance_to(end):.2f}km direct)")

        warnings: list[PlanningWarning] = []
        samples, network = await asyncio.gather(
            self._fetch_elevation_samples(start, end, warnings),
            self._fetch_trail_network(start, end, warnings),
        )
        start = self._with_sample_elevation(start, samples, first=True)
        end = self._with_sample_elevation(end, samples, first=False)

        sample_set = ElevationSampleSet(samples)
        cost_model = MovementCostModel(self._new_analyzer(), options, network, sample_set)
        search = AStarSearch(cost_model, elevation_samples=sample_set, options=options)

        cancel_event = threading.Event()
        try:
            result = await asyncio.to_thread(search.search, start, end, cancel_event)
        except asyncio.CancelledError:
            cancel_event.set()
            raise

        if not result.found:
            raise NoRouteFoundError(
                f"No route found within {result.iterations} iterations", iterations=result.iterations
            )

        points = interpolate_waypoints(list(result.coordinates), options.waypoint_distance_km)
        points = limit_waypoints(points, options.max_waypoints)
        outcome = await self.snapper.optimize(points, network, options, self.elevation_provider)

        route = PlannedRoute.from_points(
            list(outcome.points),
            iterations=result.iterations,
            warnings=tuple(warnings) + outcome.warnings,
        )
        logger.info(f"Planned {route} in {time.time() - planning_start:.2f}s")
        return route

    async def plan_direct_route(
        self,
        start: Coordinate,
        end: Coordinate,
        options: Optional[PathfindingOptions] = None,
    ) -> PlannedRoute:
        """Straight-line fallback route, guided along nearby trails and snapped.

        With usable trails or roads nearby the line follows them (see
        trail_guided_waypoints), otherwise it is the elevation-sampled
        straight line. Use when plan_route raises NoRouteFoundError and any
        route is better than none. The result has is_fallback=True.
        """
        start.validate()
        end.validate()
        options = (options or PathfindingOptions.default()).validated()
        logger.info(f"Planning direct route {start} -> {end}")

        warnings: list[PlanningWarning] = []
        samples, network = await asyncio.gather(
            self._fetch_elevation_samples(start, end, warnings),
            self._fetch_trail_network(start, end, warnings),
        )
        start = self._with_sample_elevation(start, samples, first=True)
        end = self._with_sample_elevation(end, samples, first=False)

        guided = [start, end]
        if network is not None:
            guided = trail_guided_waypoints(start, end, network.trails, options.roads_only)
        if len(guided) > 2:
            line = guided
        else:
            line = samples or sample_line(start, end, ElevationConfig.ROUTE_SAMPLE_RESOLUTION_DEG)

        points = interpolate_waypoints(line, options.waypoint_distance_km)
        points = limit_waypoints(points, options.max_waypoints)
        outcome = await self.snapper.optimize(points, network, options, self.elevation_provider)

        return PlannedRoute.from_points(
            list(outcome.points),
            iterations=0,
            is_fallback=True,
            warnings=tuple(warnings) + outcome.warnings,
        )

    def _new_analyzer(self) -> TerrainAnalyzer:
        return TerrainAnalyzer(rng=random.Random(self.seed))

    async def _fetch_elevation_samples(
        self, start: Coordinate, end: Coordinate, warnings: list[PlanningWarning]
    ) -> list[Coordinate]:
        fetch_start = time.time()
        try:
            samples = await asyncio.to_thread(
                self.elevation_provider.get_elevation_for_route,
                start,
                end,
                ElevationConfig.ROUTE_SAMPLE_RESOLUTION_DEG,
            )
        except DataUnavailableError as e:
            logger.warning(f"Elevation samples unavailable, planning with 0m elevation: {e}")
            warnings.append(ElevationUnavailableWarning(stage="search", reason=str(e)))
            return []
        logger.info(f"Fetched {len(samples)} elevation samples in {time.time() - fetch_start:.2f}s")
        return samples

    async def _fetch_trail_network(
        self, start: Coordinate, end: Coordinate, warnings: list[PlanningWarning]
    ) -> Optional[TrailNetwork]:
        fetch_start = time.time()
        try:
            network = await asyncio.to_thread(self.trail_provider.fetch_trail_network, start, end)
        except DataUnavailableError as e:
            logger.warning(f"Trail data unavailable, planning without trail preference: {e}")
            warnings.append(TrailDataUnavailableWarning(reason=str(e), source=e.source))
            return None
        logger.info(f"Fetched {network} in {time.time() - fetch_start:.2f}s")
        return network

    @staticmethod
    def _with_sample_elevation(coordinate: Coordinate, samples: list[Coordinate], first: bool) -> Coordinate:
        """Fill a missing endpoint elevation from the first or last route sample."""
        if coordinate.elevation is not None or not samples:
            return coordinate
        sample = samples[0] if first else samples[-1]
        return coordinate.with_elevation(sample.elevation)
