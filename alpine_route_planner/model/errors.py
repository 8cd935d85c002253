"""Route planning exceptions.

Every error carries a stable ``kind`` identifier so callers can branch on the
failure category without matching message text:
- INVALID_COORDINATE: start/end outside the valid lat/lng range
- NO_ROUTE_FOUND: search budget exhausted or search space empty
- DATA_UNAVAILABLE: an elevation or trail provider failed
- SEARCH_CANCELLED: the caller cancelled an in-flight search
"""

from typing import Optional


class RoutePlanningError(Exception):
    """Base class for all route planning failures."""

    kind: str = "ROUTE_PLANNING_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidCoordinateError(RoutePlanningError):
    kind = "INVALID_COORDINATE"


class NoRouteFoundError(RoutePlanningError):
    """Raised when the search cannot reach the goal.

    Attributes:
        iterations: Number of search iterations performed before giving up
    """

    kind = "NO_ROUTE_FOUND"

    def __init__(self, message: str, iterations: int = 0) -> None:
        super().__init__(message)
        self.iterations = iterations


class DataUnavailableError(RoutePlanningError):
    """Raised by providers when elevation or trail data cannot be obtained.

    Attributes:
        source: Name of the failing data source (e.g. "open-meteo", "overpass")
    """

    kind = "DATA_UNAVAILABLE"

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


class SearchCancelledError(RoutePlanningError):
    kind = "SEARCH_CANCELLED"
