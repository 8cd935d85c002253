"""Data model classes for route planning.

- Coordinate: Geometry atom (lat, lng, optional elevation)
- RoutePoint: Point of a finished route (elevation always present)
- SearchNode / SearchTree: A* exploration tree (arena with parent indices)
- TrailSegment / TrailNetwork / BoundingBox: Trail data snapshot
- PathfindingOptions: Explicit search configuration with presets
- PlannedRoute / RouteDifficulty: Planning result with summary metrics
- PlanningWarning: Degraded-mode notices
- RoutePlanningError: Exception hierarchy with stable error kinds
"""

from alpine_route_planner.model.errors import (
    DataUnavailableError,
    InvalidCoordinateError,
    NoRouteFoundError,
    RoutePlanningError,
    SearchCancelledError,
)
from alpine_route_planner.model.coordinate import Coordinate, RoutePoint
from alpine_route_planner.model.options import PathfindingOptions
from alpine_route_planner.model.route import PlannedRoute, RouteDifficulty
from alpine_route_planner.model.search_node import SearchNode, SearchTree
from alpine_route_planner.model.trail import (
    BoundingBox,
    TrailDifficulty,
    TrailNetwork,
    TrailSegment,
    TrailSpatialIndex,
)
from alpine_route_planner.model.warning import (
    ElevationUnavailableWarning,
    PlanningWarning,
    TrailDataUnavailableWarning,
    TrailSnappingSkippedWarning,
)

__all__ = [
    "Coordinate",
    "RoutePoint",
    "SearchNode",
    "SearchTree",
    "BoundingBox",
    "TrailDifficulty",
    "TrailSegment",
    "TrailSpatialIndex",
    "TrailNetwork",
    "PathfindingOptions",
    "PlannedRoute",
    "RouteDifficulty",
    "PlanningWarning",
    "ElevationUnavailableWarning",
    "TrailDataUnavailableWarning",
    "TrailSnappingSkippedWarning",
    "RoutePlanningError",
    "InvalidCoordinateError",
    "NoRouteFoundError",
    "DataUnavailableError",
    "SearchCancelledError",
]
