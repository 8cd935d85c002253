"""Collaborator services: elevation and trail data providers.

- ElevationProvider: Protocol; BaseElevationService with OpenMeteoElevationService and DEMElevationService
- TrailProvider: Protocol with OverpassTrailService
- Trail proximity queries: get_trails_near_coordinate, find_nearest_trail_point, is_on_trail
"""

from alpine_route_planner.services.elevation_service import (
    BaseElevationService,
    DEMElevationService,
    ElevationProvider,
    OpenMeteoElevationService,
    sample_line,
)
from alpine_route_planner.services.trail_service import (
    OverpassTrailService,
    TrailPointMatch,
    TrailProvider,
    find_nearest_trail_point,
    get_trails_near_coordinate,
    is_on_trail,
)

__all__ = [
    "ElevationProvider",
    "BaseElevationService",
    "OpenMeteoElevationService",
    "DEMElevationService",
    "sample_line",
    "TrailProvider",
    "OverpassTrailService",
    "TrailPointMatch",
    "get_trails_near_coordinate",
    "find_nearest_trail_point",
    "is_on_trail",
]
