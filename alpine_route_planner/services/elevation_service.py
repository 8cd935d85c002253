"""Elevation providers.

Two interchangeable implementations of the ElevationProvider protocol:
- OpenMeteoElevationService: Open-Meteo elevation HTTP API (batched requests)
- DEMElevationService: Local GeoTIFF raster via DEMService (offline)

Both are blocking; the planner calls them from worker threads.
"""

import logging
import math
import time
from abc import ABC, abstractmethod
from typing import Optional, Protocol

import requests

from alpine_route_planner.constants import ElevationConfig
from alpine_route_planner.core.dem_service import DEMService
from alpine_route_planner.model.coordinate import Coordinate
from alpine_route_planner.model.errors import DataUnavailableError

logger = logging.getLogger(__name__)


class ElevationProvider(Protocol):
    """Source of terrain elevations."""

    def get_elevation(self, coordinates: list[Coordinate]) -> list[float]: ...

    def get_elevation_for_route(
        self, start: Coordinate, end: Coordinate, resolution_deg: float = ElevationConfig.ROUTE_SAMPLE_RESOLUTION_DEG
    ) -> list[Coordinate]: ...


def sample_line(start: Coordinate, end: Coordinate, resolution_deg: float) -> list[Coordinate]:
    """Evenly spaced points on the straight lat/lng line from start to end (inclusive).

    The number of intervals is ceil(degree_distance / resolution_deg), at least 1.
    """
    lat_diff = end.lat - start.lat
    lng_diff = end.lng - start.lng
    steps = max(1, math.ceil(math.hypot(lat_diff, lng_diff) / resolution_deg))
    return [
        Coordinate(lat=start.lat + lat_diff * i / steps, lng=start.lng + lng_diff * i / steps)
        for i in range(steps + 1)
    ]


class BaseElevationService(ABC):
    """Elevation provider base: get_elevation_for_route in terms of get_elevation."""

    @abstractmethod
    def get_elevation(self, coordinates: list[Coordinate]) -> list[float]:
        """Elevation in meters for each coordinate, in order.

        Raises:
            DataUnavailableError: If the lookup fails.
        """

    def get_elevation_for_route(
        self,
        start: Coordinate,
        end: Coordinate,
        resolution_deg: float = ElevationConfig.ROUTE_SAMPLE_RESOLUTION_DEG,
    ) -> list[Coordinate]:
        """Elevation samples along the straight line from start to end.

        Raises:
            DataUnavailableError: If the underlying lookup fails.
        """
        points = sample_line(start, end, resolution_deg)
        elevations = self.get_elevation(points)
        return [point.with_elevation(elevation) for point, elevation in zip(points, elevations)]


class OpenMeteoElevationService(BaseElevationService):
    """Elevation lookup through the Open-Meteo elevation API.

    Requests are split into batches of ElevationConfig.MAX_COORDINATES_PER_REQUEST.

    Example:
        service = OpenMeteoElevationService()
        elevations = service.get_elevation([Coordinate(lat=46.0, lng=7.7)])
    """

    def __init__(
        self,
        url: str = ElevationConfig.OPEN_METEO_URL,
        session: Optional[requests.Session] = None,
        timeout_s: float = ElevationConfig.REQUEST_TIMEOUT_S,
        batch_size: int = ElevationConfig.MAX_COORDINATES_PER_REQUEST,
    ) -> None:
        self._url = url
        self._session = session or requests.Session()
        self._timeout_s = timeout_s
        self._batch_size = batch_size

    def get_elevation(self, coordinates: list[Coordinate]) -> list[float]:
        """Elevation in meters for each coordinate, in input order.

        Raises:
            DataUnavailableError: On network errors, HTTP errors, or malformed responses.
        """
        elevations: list[float] = []
        for offset in range(0, len(coordinates), self._batch_size):
            elevations.extend(self._fetch_batch(coordinates[offset : offset + self._batch_size]))
        return elevations

    def _fetch_batch(self, batch: list[Coordinate]) -> list[float]:
        params = {
            "latitude": ",".join(f"{c.lat:.6f}" for c in batch),
            "longitude": ",".join(f"{c.lng:.6f}" for c in batch),
        }
        start_time = time.time()
        try:
            response = self._session.get(
                self._url, params=params, headers={"Accept": "application/json"}, timeout=self._timeout_s
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise DataUnavailableError(f"Elevation request failed: {e}", source="open-meteo") from e

        values = data.get("elevation") if isinstance(data, dict) else None
        if not isinstance(values, list) or len(values) != len(batch):
            raise DataUnavailableError("Invalid elevation data format", source="open-meteo")

        elevations: list[float] = []
        for coordinate, value in zip(batch, values):
            if value is None or (isinstance(value, float) and math.isnan(value)):
                logger.warning(f"No elevation for {coordinate}, using 0m")
                elevations.append(0.0)
            else:
                elevations.append(float(value))
        logger.debug(f"Fetched {len(batch)} elevations in {time.time() - start_time:.2f}s")
        return elevations


class DEMElevationService(BaseElevationService):
    """Elevation lookup from a local GeoTIFF through DEMService.

    Example:
        service = DEMElevationService(DEMService(Path("data/dem.tif")))
    """

    def __init__(self, dem: Optional[DEMService] = None) -> None:
        self._dem = dem or DEMService()

    @property
    def dem(self) -> DEMService:
        return self._dem

    def get_elevation(self, coordinates: list[Coordinate]) -> list[float]:
        """Elevation in meters for each coordinate, in input order.

        Raises:
            DataUnavailableError: If the raster is missing or any point is outside coverage.
        """
        try:
            values = self._dem.get_elevations(lons=[c.lng for c in coordinates], lats=[c.lat for c in coordinates])
        except (FileNotFoundError, OSError) as e:
            raise DataUnavailableError(f"DEM unavailable: {e}", source="dem") from e

        missing = sum(1 for v in values if v is None)
        if missing:
            raise DataUnavailableError(f"{missing} of {len(values)} points outside DEM coverage", source="dem")
        return [float(v) for v in values]
