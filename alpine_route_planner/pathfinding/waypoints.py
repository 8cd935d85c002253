"""Route point densification and down-sampling."""

import logging
from math import ceil, floor
from typing import Sequence, TypeVar

from alpine_route_planner.model.coordinate import Coordinate

logger = logging.getLogger(__name__)

T = TypeVar("T")


def interpolate_waypoints(points: Sequence[Coordinate], target_distance_km: float) -> list[Coordinate]:
    """Insert evenly spaced points on segments longer than target_distance_km.

    A segment of length d gets ceil(d / target) - 1 intermediate points.
    Elevation is interpolated only where both ends have one.

    Args:
        points: Route points in order
        target_distance_km: Desired maximum spacing

    Returns:
        New list including all original points.
    """
    if len(points) < 2 or target_distance_km <= 0:
        return list(points)

    result: list[Coordinate] = [points[0]]
    for a, b in zip(points[:-1], points[1:]):
        segment_km = a.distance_to(b)
        if segment_km > target_distance_km:
            count = ceil(segment_km / target_distance_km) - 1
            result.extend(a.interpolate_to(b, j / (count + 1)) for j in range(1, count + 1))
        result.append(b)

    logger.debug(f"Interpolated {len(points)} waypoints to {len(result)}")
    return result


def limit_waypoints(points: Sequence[T], max_waypoints: int) -> list[T]:
    """Evenly down-sample to at most max_waypoints, always keeping the first and last point.

    Args:
        points: Route points in order
        max_waypoints: Maximum number of points to keep (>= 2)

    Returns:
        The original points if already within the limit, else a sampled subset.
    """
    if len(points) <= max_waypoints:
        return list(points)
    if max_waypoints < 2:
        raise ValueError(f"max_waypoints must be at least 2, got {max_waypoints}")

    step = len(points) / max_waypoints
    limited = [points[floor(i * step)] for i in range(max_waypoints)]
    limited[-1] = points[-1]
    logger.debug(f"Limited {len(points)} waypoints to {len(limited)}")
    return limited
