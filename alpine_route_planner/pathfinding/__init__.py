"""Route search engine.

- PriorityQueue: f-cost ordered open set with tolerance-aware membership
- MovementCostModel: Terrain, trail, and danger aware edge costs
- generate_neighbors: Adaptive 8-connected expansion
- AStarSearch: Search orchestrator with iteration budget and cancellation
- TrailSnapper: Post-search road/trail snapping and elevation enrichment
- trail_guided_waypoints: Trail-guided straight line for the direct-route fallback
- interpolate_waypoints / limit_waypoints: Route densification and down-sampling
"""

from alpine_route_planner.pathfinding.astar import AStarSearch, SearchResult
from alpine_route_planner.pathfinding.cost_model import (
    MovementCostModel,
    calculate_heuristic,
    calculate_movement_cost,
)
from alpine_route_planner.pathfinding.neighbors import calculate_adaptive_step_size, generate_neighbors
from alpine_route_planner.pathfinding.priority_queue import CoordinateIndex, PriorityQueue
from alpine_route_planner.pathfinding.trail_snapping import (
    SnapOutcome,
    SnapResult,
    TrailSnapper,
    trail_guided_waypoints,
)
from alpine_route_planner.pathfinding.waypoints import interpolate_waypoints, limit_waypoints

__all__ = [
    "PriorityQueue",
    "CoordinateIndex",
    "MovementCostModel",
    "calculate_heuristic",
    "calculate_movement_cost",
    "calculate_adaptive_step_size",
    "generate_neighbors",
    "AStarSearch",
    "SearchResult",
    "TrailSnapper",
    "SnapResult",
    "SnapOutcome",
    "trail_guided_waypoints",
    "interpolate_waypoints",
    "limit_waypoints",
]
