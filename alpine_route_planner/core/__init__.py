"""Core foundation classes for geodesy, elevation, and terrain analysis.

- GeoCalculator: Geodesic calculations (distances, degree conversions)
- DEMService: Local elevation raster access (singleton pattern)
- ElevationSampleSet: KD-tree indexed elevation samples (import from elevation_samples)
- TerrainAnalyzer: Slope, speed, and terrain classification (import from terrain_analyzer)
"""

from alpine_route_planner.core.dem_service import DEMService
from alpine_route_planner.core.geo_calculator import GeoCalculator

# ElevationSampleSet and TerrainAnalyzer have a circular import with model.coordinate
# Import directly: from alpine_route_planner.core.terrain_analyzer import TerrainAnalyzer

__all__ = [
    "GeoCalculator",
    "DEMService",
]
