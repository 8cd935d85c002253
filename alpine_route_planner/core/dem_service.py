"""Digital Elevation Model (DEM) service for offline elevation queries.

Provides singleton access to a local GeoTIFF elevation raster:
- Fast elevation lookup using a pre-loaded NumPy array
- Batch lookup with a single coordinate transformation
- Automatic transformation from WGS84 to the raster's native CRS
- Thread-safe lazy loading

Any single-band elevation GeoTIFF works (e.g. EuroDEM, SRTM, Copernicus GLO-30).
"""

import logging
import threading
import time
from pathlib import Path
from typing import Optional

import numpy as np
import rasterio
from rasterio.warp import transform

from alpine_route_planner.constants import DEMConfig

logger = logging.getLogger(__name__)


class DEMService:
    """Singleton service for elevation sampling from a GeoTIFF.

    Uses the singleton pattern to ensure only one DEM file is loaded into memory.
    The DEM array is loaded on first access and cached for fast subsequent queries.

    Example:
        dem = DEMService()
        elevations = dem.get_elevations(lons=[10.295], lats=[46.985])
    """

    _instance: Optional["DEMService"] = None
    _load_lock = threading.Lock()
    _dem = None
    _dem_crs: Optional[str] = None
    _dem_array: Optional[np.ndarray] = None
    _dem_transform = None
    _dem_nodata = None

    def __new__(cls, dem_path: Optional[Path] = None) -> "DEMService":
        """Create or return the singleton instance.

        Args:
            dem_path: Optional path to DEM file (uses DEMConfig.DEM_PATH by default)

        Returns:
            The singleton DEMService instance.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._dem_path = dem_path or DEMConfig.DEM_PATH
        return cls._instance

    @property
    def dem_path(self) -> Path:
        return self._dem_path

    @property
    def is_loaded(self) -> bool:
        """Check if DEM data has been fully loaded into memory."""
        return self._dem_transform is not None

    def _ensure_loaded(self) -> None:
        """Load DEM into memory on first access (thread-safe)."""
        if self.is_loaded:
            return

        with self._load_lock:
            # Another thread may have finished loading while we waited
            if self.is_loaded:
                return

            dem_path = self._dem_path
            if not dem_path.exists():
                raise FileNotFoundError(f"DEM file not found at {dem_path}")

            logger.info(f"Loading DEM from {dem_path}...")
            start_time = time.time()

            self._dem = rasterio.open(dem_path)
            self._dem_crs = self._dem.crs.to_string() if self._dem.crs else "EPSG:4326"
            self._dem_array = self._dem.read(1)
            self._dem_nodata = self._dem.nodata
            # Set _dem_transform LAST - this is what is_loaded checks
            self._dem_transform = self._dem.transform

            elapsed = time.time() - start_time
            logger.info(f"DEM loaded in {elapsed:.2f}s (shape: {self._dem_array.shape}, CRS: {self._dem_crs})")

    def get_elevation(self, lon: float, lat: float) -> float | None:
        """Get elevation at a single point.

        Args:
            lon: Longitude in decimal degrees (WGS84)
            lat: Latitude in decimal degrees (WGS84)

        Returns:
            Elevation in meters, or None if outside coverage or invalid.
        """
        return self.get_elevations(lons=[lon], lats=[lat])[0]

    def get_elevations(self, lons: list[float], lats: list[float]) -> list[float | None]:
        """Get elevations for many points with one CRS transformation.

        Args:
            lons: Longitudes in decimal degrees (WGS84)
            lats: Latitudes in decimal degrees (WGS84), same length as lons

        Returns:
            Elevation in meters per point, None where outside coverage or no-data.
        """
        self._ensure_loaded()
        if not lons:
            return []

        if self._dem_crs != "EPSG:4326":
            xs, ys = transform("EPSG:4326", self._dem_crs, list(lons), list(lats))
        else:
            xs, ys = list(lons), list(lats)

        inverse = ~self._dem_transform
        rows_max, cols_max = self._dem_array.shape
        result: list[float | None] = []
        for lon, lat, x, y in zip(lons, lats, xs, ys):
            col, row = inverse * (x, y)
            col, row = int(col), int(row)

            if row < 0 or row >= rows_max or col < 0 or col >= cols_max:
                logger.warning(f"Coordinates outside DEM bounds: lon={lon}, lat={lat} (row={row}, col={col})")
                result.append(None)
                continue

            elev = self._dem_array[row, col]
            if (self._dem_nodata is not None and elev == self._dem_nodata) or np.isnan(elev):
                logger.warning(f"No-data value at coordinates: lon={lon}, lat={lat} (raw_value={elev})")
                result.append(None)
                continue
            result.append(float(elev))
        return result

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Return (west, south, east, north) bounds in WGS84."""
        self._ensure_loaded()
        b = self._dem.bounds

        if self._dem_crs != "EPSG:4326":
            corners_x = [b.left, b.right, b.left, b.right]
            corners_y = [b.bottom, b.bottom, b.top, b.top]
            lons, lats = transform(self._dem_crs, "EPSG:4326", corners_x, corners_y)
            return min(lons), min(lats), max(lons), max(lats)

        return b.left, b.bottom, b.right, b.top
