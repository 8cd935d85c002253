"""A* search over geographic space.

The search expands an implicit 8-connected grid whose spacing adapts to the
terrain around each node. It is synchronous and CPU bound; each call owns its
queue, closed set, and node arena, so independent searches can run in
parallel threads. Cancellation is checked once per iteration.

Algorithm Overview:
1. Enqueue the start node (g = 0, h = heuristic(start, goal))
2. Pop the lowest f-cost node, skipping stale entries
3. Stop when the node matches the goal (closed-set tolerance) or is within
   GOAL_DISTANCE_THRESHOLD_KM of it
4. Expand the 8 neighbors (plus the goal itself when it is within one step)
5. Relax neighbor costs and enqueue improvements
6. Give up when the queue is empty or the iteration budget is spent
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from alpine_route_planner.constants import PathfindingConfig
from alpine_route_planner.core.elevation_samples import ElevationSampleSet
from alpine_route_planner.model.coordinate import Coordinate, RoutePoint
from alpine_route_planner.model.errors import SearchCancelledError
from alpine_route_planner.model.options import PathfindingOptions
from alpine_route_planner.model.search_node import SearchNode, SearchTree
from alpine_route_planner.pathfinding.cost_model import MovementCostModel
from alpine_route_planner.pathfinding.neighbors import generate_neighbors
from alpine_route_planner.pathfinding.priority_queue import (
    CoordinateCostMap,
    CoordinateIndex,
    PriorityQueue,
)

logger = logging.getLogger(__name__)

NeighborGenerator = Callable[[Coordinate, ElevationSampleSet], list[Coordinate]]


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one search.

    Attributes:
        found: Whether the goal was reached
        coordinates: Path from start to goal (empty if not found)
        iterations: Dequeues performed
        nodes_created: Size of the node arena
        total_cost: g-cost of the goal node (0 if not found)
        elapsed_s: Wall time of the search
    """

    found: bool
    coordinates: tuple[Coordinate, ...] = field(default_factory=tuple)
    iterations: int = 0
    nodes_created: int = 0
    total_cost: float = 0.0
    elapsed_s: float = 0.0

    @property
    def path(self) -> list[RoutePoint]:
        """Path as RoutePoints, unknown elevations set to 0."""
        return [RoutePoint.from_coordinate(c) for c in self.coordinates]


class AStarSearch:
    """Terrain-aware A* between two coordinates.

    Example:
        search = AStarSearch(cost_model, elevation_samples=samples, options=options)
        result = search.search(start, goal)
        if result.found:
            print(f"{len(result.coordinates)} points after {result.iterations} iterations")
    """

    def __init__(
        self,
        cost_model: MovementCostModel,
        neighbor_generator: NeighborGenerator = generate_neighbors,
        elevation_samples: "ElevationSampleSet | Iterable[Coordinate] | None" = None,
        options: Optional[PathfindingOptions] = None,
    ) -> None:
        self.cost_model = cost_model
        self.neighbor_generator = neighbor_generator
        self.elevation_samples = ElevationSampleSet.of(
            elevation_samples if elevation_samples is not None else cost_model.elevation_samples
        )
        self.options = options or cost_model.options

    def _refine_elevation(self, coordinate: Coordinate) -> Coordinate:
        elevation = self.elevation_samples.nearest_elevation(coordinate, PathfindingConfig.ELEVATION_SAMPLE_MATCH_DEG)
        return coordinate.with_elevation(elevation) if elevation is not None else coordinate

    def _candidates(self, current: Coordinate, goal: Coordinate) -> list[Coordinate]:
        """Grid neighbors with refined elevation, plus the goal when within one step."""
        neighbors = [self._refine_elevation(n) for n in self.neighbor_generator(current, self.elevation_samples)]
        if neighbors:
            reach_km = max(current.distance_to(n) for n in neighbors)
            if current.distance_to(goal) <= reach_km:
                neighbors.append(goal if goal.elevation is not None else self._refine_elevation(goal))
        return neighbors

    def search(
        self,
        start: Coordinate,
        goal: Coordinate,
        cancel_event: Optional[threading.Event] = None,
    ) -> SearchResult:
        """Search from start to goal within the iteration budget.

        Args:
            start: Start coordinate (validated by the caller)
            goal: Goal coordinate (validated by the caller)
            cancel_event: Set by another thread to stop the search

        Returns:
            SearchResult; found is False when the budget or search space is exhausted.

        Raises:
            SearchCancelledError: If cancel_event is set during the search.
        """
        start_time = time.time()
        max_iterations = self.options.max_iterations
        tree = SearchTree()
        open_queue = PriorityQueue()
        closed = CoordinateIndex()
        best_g = CoordinateCostMap()

        root = tree.add(start, g_cost=0.0, h_cost=self.cost_model.heuristic(start, goal))
        open_queue.enqueue(root)
        best_g.set(start, 0.0)

        iterations = 0
        while not open_queue.is_empty() and iterations < max_iterations:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"Search cancelled after {iterations} iterations")
                raise SearchCancelledError(f"Search cancelled after {iterations} iterations")

            current: SearchNode = open_queue.dequeue()
            iterations += 1
            if iterations % PathfindingConfig.PROGRESS_LOG_INTERVAL == 0:
                logger.debug(
                    f"Iteration {iterations}/{max_iterations}: queue={len(open_queue)}, "
                    f"nodes={len(tree)}, f={current.f_cost:.3f}"
                )

            if current.coordinate in closed:
                continue
            known = best_g.get(current.coordinate)
            if known is not None and current.g_cost > known:
                continue

            # Goal test covers at least the closed-set tolerance
            at_goal = (
                current.coordinate.matches(goal)
                or current.coordinate.distance_to(goal) < PathfindingConfig.GOAL_DISTANCE_THRESHOLD_KM
            )
            if at_goal:
                coordinates = tree.reconstruct_coordinates(current)
                elapsed = time.time() - start_time
                logger.info(
                    f"Route found in {iterations} iterations ({elapsed:.2f}s): "
                    f"{len(coordinates)} points, cost {current.g_cost:.2f}"
                )
                return SearchResult(
                    found=True,
                    coordinates=tuple(coordinates),
                    iterations=iterations,
                    nodes_created=len(tree),
                    total_cost=current.g_cost,
                    elapsed_s=elapsed,
                )

            closed.add(current.coordinate)

            for neighbor in self._candidates(current.coordinate, goal):
                if neighbor in closed:
                    continue
                tentative_g = current.g_cost + self.cost_model.movement_cost(current.coordinate, neighbor)
                known = best_g.get(neighbor)
                if known is not None and known <= tentative_g:
                    continue
                best_g.set(neighbor, tentative_g)
                node = tree.add(
                    neighbor,
                    g_cost=tentative_g,
                    h_cost=self.cost_model.heuristic(neighbor, goal),
                    parent=current.index,
                )
                open_queue.enqueue(node)

        elapsed = time.time() - start_time
        reason = "iteration budget exhausted" if iterations >= max_iterations else "search space exhausted"
        logger.info(f"No route found: {reason} after {iterations} iterations ({elapsed:.2f}s, {len(tree)} nodes)")
        return SearchResult(found=False, iterations=iterations, nodes_created=len(tree), elapsed_s=elapsed)
