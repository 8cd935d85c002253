"""Trail data access - proximity queries and the OpenStreetMap provider.

Proximity queries operate on an in-memory TrailNetwork:
- get_trails_near_coordinate: Spatial index lookup around a coordinate
- find_nearest_trail_point: Closest trail vertex within a distance
- is_on_trail: Whether any trail vertex is within a radius

OverpassTrailService fetches trails, roads, and water features around a
start/end pair from the Overpass API, with endpoint rotation and an
in-memory cache keyed by the rounded bounding box.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol

import numpy as np
import requests

from alpine_route_planner.constants import OverpassConfig, TrailConfig
from alpine_route_planner.core.geo_calculator import GeoCalculator
from alpine_route_planner.model.coordinate import Coordinate
from alpine_route_planner.model.errors import DataUnavailableError
from alpine_route_planner.model.trail import (
    BoundingBox,
    TrailDifficulty,
    TrailNetwork,
    TrailSegment,
    TrailSpatialIndex,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrailPointMatch:
    """Nearest trail vertex to a query coordinate.

    Attributes:
        trail: Segment the vertex belongs to
        point: The vertex itself
        distance_km: Haversine distance from the query coordinate
    """

    trail: TrailSegment
    point: Coordinate
    distance_km: float


class TrailProvider(Protocol):
    """Source of trail networks around a start/end pair."""

    def fetch_trail_network(self, start: Coordinate, end: Coordinate) -> TrailNetwork: ...


# =============================================================================
# Proximity queries
# =============================================================================


def get_trails_near_coordinate(
    coordinate: Coordinate,
    spatial_index: TrailSpatialIndex,
    bounding_box: Optional[BoundingBox] = None,
    radius_km: float = TrailConfig.INDEX_QUERY_RADIUS_KM,
) -> list[TrailSegment]:
    """Trails whose geometry comes within the query window around coordinate.

    Args:
        coordinate: Query position
        spatial_index: Index built over the network's trails
        bounding_box: Network coverage; coordinates farther than radius_km
            outside it return no trails without touching the index
        radius_km: Half-width of the query window

    Returns:
        Candidate trails in network order (may include trails slightly farther
        than radius_km, callers filter by exact distance).
    """
    if bounding_box is not None:
        d_lat = GeoCalculator.km_to_lat_degrees(radius_km)
        d_lng = GeoCalculator.km_to_lng_degrees(radius_km, at_lat=coordinate.lat)
        if (
            coordinate.lat < bounding_box.min_lat - d_lat
            or coordinate.lat > bounding_box.max_lat + d_lat
            or coordinate.lng < bounding_box.min_lng - d_lng
            or coordinate.lng > bounding_box.max_lng + d_lng
        ):
            return []
    return spatial_index.query(coordinate, radius_km)


def find_nearest_trail_point(
    coordinate: Coordinate,
    trails: Iterable[TrailSegment],
    max_distance_km: float = 0.5,
) -> Optional[TrailPointMatch]:
    """Closest vertex of any trail within max_distance_km.

    Every vertex is checked. On equal distance the earlier trail wins.

    Returns:
        The match, or None if no vertex is within max_distance_km.
    """
    best: Optional[TrailPointMatch] = None
    for trail in trails:
        lats, lngs = trail.vertex_arrays
        distances = GeoCalculator.distances_km(coordinate, lats, lngs)
        i = int(np.argmin(distances))
        distance = float(distances[i])
        if distance <= max_distance_km and (best is None or distance < best.distance_km):
            best = TrailPointMatch(trail=trail, point=trail.coordinates[i], distance_km=distance)
    return best


def is_on_trail(
    coordinate: Coordinate,
    trails: Iterable[TrailSegment],
    radius_km: float = TrailConfig.ROAD_DETECTION_RADIUS_KM,
) -> bool:
    """True if any vertex of any trail is within radius_km."""
    for trail in trails:
        lats, lngs = trail.vertex_arrays
        if np.any(GeoCalculator.distances_km(coordinate, lats, lngs) <= radius_km):
            return True
    return False


# =============================================================================
# OSM tag parsing
# =============================================================================


def parse_trail_difficulty(tags: dict[str, str]) -> Optional[TrailDifficulty]:
    """Difficulty from sac_scale, falling back to trail_visibility."""
    value = OverpassConfig.SAC_SCALE_DIFFICULTY.get(tags.get("sac_scale", ""))
    if value is None:
        value = OverpassConfig.VISIBILITY_DIFFICULTY.get(tags.get("trail_visibility", ""))
    return TrailDifficulty(value) if value is not None else None


def parse_overpass_elements(elements: list[dict[str, Any]]) -> list[TrailSegment]:
    """Convert Overpass `out geom` elements into TrailSegments.

    Only ways with at least two geometry nodes are kept. Relations are
    ignored because their member geometry is not flattened.
    """
    segments: list[TrailSegment] = []
    skipped = 0
    for element in elements:
        if element.get("type") != "way" or not element.get("geometry"):
            continue
        coordinates = tuple(Coordinate(lat=node["lat"], lng=node["lon"]) for node in element["geometry"])
        if len(coordinates) < 2:
            skipped += 1
            continue

        tags = element.get("tags") or {}
        highway = tags.get("highway")
        is_water = tags.get("natural") == "water" or tags.get("waterway") in OverpassConfig.WATERWAYS
        is_road = not is_water and highway in OverpassConfig.ROAD_HIGHWAYS
        segments.append(
            TrailSegment(
                id=str(element["id"]),
                coordinates=coordinates,
                is_water=is_water,
                is_road=is_road,
                name=tags.get("name"),
                highway=highway,
                surface=tags.get("surface"),
                sac_scale=tags.get("sac_scale"),
                trail_visibility=tags.get("trail_visibility"),
                difficulty=parse_trail_difficulty(tags),
            )
        )
    if skipped:
        logger.debug(f"Skipped {skipped} ways with fewer than 2 nodes")
    return segments


def build_overpass_query(bbox: BoundingBox) -> str:
    """Overpass QL query for trails, walkable roads, and water in bbox."""
    area = bbox.to_overpass()
    foot = "|".join(OverpassConfig.FOOT_HIGHWAYS)
    roads = "|".join(OverpassConfig.ROAD_HIGHWAYS)
    water = "|".join(OverpassConfig.WATERWAYS)
    return (
        f"[out:json][timeout:{OverpassConfig.QUERY_TIMEOUT_S}];\n"
        "(\n"
        f'  way["highway"~"^({foot})$"]({area});\n'
        f'  way["highway"~"^({roads})$"]["access"!="private"]({area});\n'
        f'  way["route"="hiking"]({area});\n'
        f'  way["sac_scale"]({area});\n'
        f'  way["natural"="water"]({area});\n'
        f'  way["waterway"~"^({water})$"]({area});\n'
        ");\n"
        "out geom;"
    )


# =============================================================================
# Overpass provider
# =============================================================================


class OverpassTrailService:
    """Trail provider backed by the OpenStreetMap Overpass API.

    Blocking (uses requests); the planner calls it from a worker thread.
    Results are cached per rounded bounding box for
    OverpassConfig.CACHE_DURATION_S seconds.

    Example:
        service = OverpassTrailService()
        network = service.fetch_trail_network(start, end)
    """

    def __init__(
        self,
        endpoints: Optional[list[str]] = None,
        session: Optional[requests.Session] = None,
        padding_km: float = OverpassConfig.BBOX_PADDING_KM,
        cache_duration_s: float = OverpassConfig.CACHE_DURATION_S,
    ) -> None:
        self._endpoints = endpoints or list(OverpassConfig.ENDPOINTS)
        self._session = session or requests.Session()
        self._padding_km = padding_km
        self._cache_duration_s = cache_duration_s
        self._cache: dict[tuple[float, float, float, float], TrailNetwork] = {}
        self._cache_lock = threading.Lock()

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def fetch_trail_network(self, start: Coordinate, end: Coordinate) -> TrailNetwork:
        """Trail network covering start and end plus padding.

        Raises:
            DataUnavailableError: If every endpoint fails or returns invalid data.
        """
        bbox = BoundingBox.around(start, end, padding_km=self._padding_km)
        key = bbox.rounded_key(OverpassConfig.CACHE_KEY_DECIMALS)

        with self._cache_lock:
            cached = self._cache.get(key)
        if cached is not None and time.time() - cached.cache_time < self._cache_duration_s:
            logger.info(f"Using cached trail network ({len(cached.trails)} segments)")
            return cached

        query = build_overpass_query(bbox)
        data = self._post_query(query)
        start_time = time.time()
        trails = parse_overpass_elements(data.get("elements") or [])
        network = TrailNetwork(trails=tuple(trails), bounding_box=bbox, cache_time=time.time())
        logger.info(f"Parsed {network} in {time.time() - start_time:.2f}s")

        with self._cache_lock:
            self._cache[key] = network
        return network

    def _post_query(self, query: str) -> dict[str, Any]:
        """POST the query to each endpoint in turn until one answers with JSON."""
        errors: list[str] = []
        for endpoint in self._endpoints:
            start_time = time.time()
            try:
                response = self._session.post(
                    endpoint,
                    data={"data": query},
                    timeout=OverpassConfig.REQUEST_TIMEOUT_S,
                )
                response.raise_for_status()
                data = response.json()
            except (requests.RequestException, ValueError) as e:
                logger.warning(f"Overpass endpoint {endpoint} failed: {e}")
                errors.append(f"{endpoint}: {e}")
                continue
            logger.info(
                f"Overpass {endpoint} answered in {time.time() - start_time:.2f}s "
                f"with {len(data.get('elements') or [])} elements"
            )
            return data
        raise DataUnavailableError(f"All Overpass endpoints failed: {'; '.join(errors)}", source="overpass")
