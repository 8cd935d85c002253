"""Min-priority queue of search nodes with tolerance-aware membership.

Nodes are ordered by f_cost; equal f_cost is broken by insertion order so
runs are deterministic. Membership is by coordinate within
PathfindingConfig.COORDINATE_TOLERANCE_DEG, answered in O(1) average time by
a grid-bucket CoordinateIndex instead of a linear scan.
"""

import heapq
import itertools
from collections import defaultdict
from math import floor
from typing import Iterator, Optional

from alpine_route_planner.constants import PathfindingConfig
from alpine_route_planner.model.coordinate import Coordinate
from alpine_route_planner.model.search_node import SearchNode


class CoordinateIndex:
    """Multiset of coordinates supporting tolerance lookups.

    Coordinates are bucketed on a grid whose cell size equals the tolerance,
    so any coordinate within tolerance of a query lies in the query's cell or
    one of its 8 neighbours.
    """

    def __init__(self, tolerance: float = PathfindingConfig.COORDINATE_TOLERANCE_DEG) -> None:
        self._tolerance = tolerance
        self._buckets: dict[tuple[int, int], list[Coordinate]] = defaultdict(list)
        self._size = 0

    def _cell(self, coordinate: Coordinate) -> tuple[int, int]:
        return floor(coordinate.lat / self._tolerance), floor(coordinate.lng / self._tolerance)

    def _neighbour_cells(self, coordinate: Coordinate) -> Iterator[tuple[int, int]]:
        row, col = self._cell(coordinate)
        for d_row in (-1, 0, 1):
            for d_col in (-1, 0, 1):
                yield row + d_row, col + d_col

    def __len__(self) -> int:
        return self._size

    def add(self, coordinate: Coordinate) -> None:
        self._buckets[self._cell(coordinate)].append(coordinate)
        self._size += 1

    def remove(self, coordinate: Coordinate) -> None:
        """Remove one entry equal to coordinate, if present."""
        cell = self._cell(coordinate)
        bucket = self._buckets.get(cell)
        if not bucket:
            return
        for i, stored in enumerate(bucket):
            if stored == coordinate:
                bucket.pop(i)
                self._size -= 1
                if not bucket:
                    del self._buckets[cell]
                return

    def contains(self, coordinate: Coordinate) -> bool:
        for cell in self._neighbour_cells(coordinate):
            bucket = self._buckets.get(cell)
            if bucket and any(stored.matches(coordinate, self._tolerance) for stored in bucket):
                return True
        return False

    def __contains__(self, coordinate: Coordinate) -> bool:
        return self.contains(coordinate)


class PriorityQueue:
    """Binary heap of SearchNodes keyed by (f_cost, insertion order).

    Example:
        queue = PriorityQueue()
        queue.enqueue(node)
        best = queue.dequeue()
    """

    def __init__(self, tolerance: float = PathfindingConfig.COORDINATE_TOLERANCE_DEG) -> None:
        self._heap: list[tuple[float, int, SearchNode]] = []
        self._counter = itertools.count()
        self._index = CoordinateIndex(tolerance)

    def enqueue(self, node: SearchNode) -> None:
        heapq.heappush(self._heap, (node.f_cost, next(self._counter), node))
        self._index.add(node.coordinate)

    def dequeue(self) -> Optional[SearchNode]:
        """Remove and return the node with the lowest f_cost, or None when empty."""
        if not self._heap:
            return None
        _, _, node = heapq.heappop(self._heap)
        self._index.remove(node.coordinate)
        return node

    def is_empty(self) -> bool:
        return not self._heap

    def __len__(self) -> int:
        return len(self._heap)

    def contains(self, coordinate: Coordinate) -> bool:
        """True if any queued node is within tolerance of coordinate."""
        return self._index.contains(coordinate)


class CoordinateCostMap:
    """Best known cost per coordinate, keyed with the same tolerance grid as CoordinateIndex."""

    def __init__(self, tolerance: float = PathfindingConfig.COORDINATE_TOLERANCE_DEG) -> None:
        self._tolerance = tolerance
        self._buckets: dict[tuple[int, int], list[list]] = defaultdict(list)

    def _find(self, coordinate: Coordinate) -> Optional[list]:
        row, col = floor(coordinate.lat / self._tolerance), floor(coordinate.lng / self._tolerance)
        for d_row in (-1, 0, 1):
            for d_col in (-1, 0, 1):
                for entry in self._buckets.get((row + d_row, col + d_col), ()):
                    if entry[0].matches(coordinate, self._tolerance):
                        return entry
        return None

    def get(self, coordinate: Coordinate) -> Optional[float]:
        entry = self._find(coordinate)
        return entry[1] if entry is not None else None

    def set(self, coordinate: Coordinate, cost: float) -> None:
        entry = self._find(coordinate)
        if entry is not None:
            entry[1] = cost
            return
        cell = floor(coordinate.lat / self._tolerance), floor(coordinate.lng / self._tolerance)
        self._buckets[cell].append([coordinate, cost])
