"""Indexed set of known elevation samples.

Elevation samples are the points returned by the elevation provider along
the straight start-end line. The search asks two questions of them many
thousands of times:
- Which samples lie within an analysis radius of a coordinate?
- What is the elevation of the nearest sample within a small degree box?

Both are answered with a scipy cKDTree over (lat, lng) in degrees. Radius
queries are widened in degree space and then filtered by Haversine distance.
"""

from typing import Iterable, Optional

import numpy as np
from scipy.spatial import cKDTree

from alpine_route_planner.core.geo_calculator import GeoCalculator
from alpine_route_planner.model.coordinate import Coordinate


class ElevationSampleSet:
    """Immutable collection of coordinates with known elevation.

    Samples without an elevation are dropped on construction.

    Example:
        samples = ElevationSampleSet(route_samples)
        nearby = samples.within_radius(coordinate, radius_km=1.1)
    """

    def __init__(self, samples: Iterable[Coordinate] = ()) -> None:
        self._samples: tuple[Coordinate, ...] = tuple(s for s in samples if s.elevation is not None)
        if self._samples:
            self._lats = np.array([s.lat for s in self._samples], dtype=float)
            self._lngs = np.array([s.lng for s in self._samples], dtype=float)
            self._elevations = np.array([s.elevation for s in self._samples], dtype=float)
            self._tree: Optional[cKDTree] = cKDTree(np.column_stack([self._lats, self._lngs]))
        else:
            self._tree = None

    @classmethod
    def of(cls, samples: "ElevationSampleSet | Iterable[Coordinate] | None") -> "ElevationSampleSet":
        """Coerce None, a sequence of coordinates, or an existing set."""
        if isinstance(samples, ElevationSampleSet):
            return samples
        return cls(samples or ())

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)

    @property
    def samples(self) -> tuple[Coordinate, ...]:
        return self._samples

    def within_radius(self, coordinate: Coordinate, radius_km: float) -> np.ndarray:
        """Elevations of samples strictly closer than radius_km (Haversine).

        Returns:
            Array of elevations in meters, possibly empty.
        """
        if self._tree is None:
            return np.empty(0)
        # Degree radius large enough to cover radius_km in both axes
        radius_deg = max(
            GeoCalculator.km_to_lat_degrees(radius_km),
            GeoCalculator.km_to_lng_degrees(radius_km, at_lat=coordinate.lat),
        )
        # Small slack for the change in longitude scale across the radius
        radius_deg *= 1.01
        candidates = self._tree.query_ball_point([coordinate.lat, coordinate.lng], r=radius_deg)
        if not candidates:
            return np.empty(0)
        idx = np.asarray(candidates, dtype=int)
        distances = GeoCalculator.distances_km(coordinate, self._lats[idx], self._lngs[idx])
        return self._elevations[idx[distances < radius_km]]

    def nearest_elevation(self, coordinate: Coordinate, max_offset_deg: float) -> Optional[float]:
        """Elevation of the nearest sample whose lat and lng both differ by less than max_offset_deg.

        Returns:
            Elevation in meters, or None if no sample is inside the box.
        """
        if self._tree is None:
            return None
        # Chebyshev metric matches the per-axis box test
        distance, index = self._tree.query([coordinate.lat, coordinate.lng], k=1, p=np.inf)
        if not np.isfinite(distance) or distance >= max_offset_deg:
            return None
        return float(self._elevations[index])
