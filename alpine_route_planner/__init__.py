"""Alpine Route Planner - terrain-aware walking routes across mountains.

Plans routes between two coordinates with an A* search whose costs combine
Tobler walking time, terrain type, slope danger, and trail/road preference,
then snaps the result onto nearby roads and trails.

Example:
    import asyncio
    from alpine_route_planner import Coordinate, RoutePlanner
    from alpine_route_planner.services import OpenMeteoElevationService, OverpassTrailService

    planner = RoutePlanner(OpenMeteoElevationService(), OverpassTrailService())
    route = asyncio.run(planner.plan_route(Coordinate(46.02, 7.74), Coordinate(46.00, 7.76)))
"""

from alpine_route_planner.model import (
    Coordinate,
    DataUnavailableError,
    InvalidCoordinateError,
    NoRouteFoundError,
    PathfindingOptions,
    PlannedRoute,
    RouteDifficulty,
    RoutePlanningError,
    RoutePoint,
    SearchCancelledError,
)
from alpine_route_planner.planner import RoutePlanner

__all__ = [
    "RoutePlanner",
    "Coordinate",
    "RoutePoint",
    "PathfindingOptions",
    "PlannedRoute",
    "RouteDifficulty",
    "RoutePlanningError",
    "InvalidCoordinateError",
    "NoRouteFoundError",
    "DataUnavailableError",
    "SearchCancelledError",
]
