"""SearchNode and SearchTree - the A* exploration tree.

Nodes are stored in an arena (SearchTree) and reference their parent by
integer index, so the tree is rooted and acyclic by construction and no
node holds a reference to another node object.
"""

from dataclasses import dataclass
from typing import Optional

from alpine_route_planner.model.coordinate import Coordinate, RoutePoint


@dataclass(frozen=True)
class SearchNode:
    """A state in the search.

    Attributes:
        index: Position of this node in its SearchTree
        coordinate: Position (and known elevation) of the node
        g_cost: Accumulated movement cost from the start
        h_cost: Heuristic estimate to the goal
        parent: Arena index of the predecessor, None for the root
    """

    index: int
    coordinate: Coordinate
    g_cost: float
    h_cost: float
    parent: Optional[int] = None

    @property
    def f_cost(self) -> float:
        return self.g_cost + self.h_cost


class SearchTree:
    """Append-only arena of SearchNodes owned by a single search."""

    def __init__(self) -> None:
        self._nodes: list[SearchNode] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index: int) -> SearchNode:
        return self._nodes[index]

    def add(self, coordinate: Coordinate, g_cost: float, h_cost: float, parent: Optional[int] = None) -> SearchNode:
        """Create a node and append it to the arena.

        Args:
            coordinate: Node position
            g_cost: Accumulated cost from the start
            h_cost: Heuristic estimate to the goal
            parent: Index of an existing node, or None for the root

        Returns:
            The new node.

        Raises:
            IndexError: If parent does not refer to an existing node.
        """
        if parent is not None and not 0 <= parent < len(self._nodes):
            raise IndexError(f"Parent index {parent} not in tree of size {len(self._nodes)}")
        node = SearchNode(index=len(self._nodes), coordinate=coordinate, g_cost=g_cost, h_cost=h_cost, parent=parent)
        self._nodes.append(node)
        return node

    def reconstruct_coordinates(self, node: SearchNode) -> list[Coordinate]:
        """Walk parent links from node back to the root.

        Args:
            node: Final node of the path (usually the goal node)

        Returns:
            Coordinates in start-to-end order, elevations as stored on the nodes.
        """
        coordinates: list[Coordinate] = []
        current: Optional[SearchNode] = node
        while current is not None:
            coordinates.append(current.coordinate)
            current = self._nodes[current.parent] if current.parent is not None else None
        coordinates.reverse()
        return coordinates

    def reconstruct_path(self, node: SearchNode) -> list[RoutePoint]:
        """Like reconstruct_coordinates, with unknown elevations set to 0."""
        return [RoutePoint.from_coordinate(c) for c in self.reconstruct_coordinates(node)]
