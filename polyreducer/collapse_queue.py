"""
Collapse Queue
==============

Priority structure holding the single best outgoing edge of every
collapsible vertex, ordered by cost.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from sortedcontainers import SortedList

from .mesh_graph import InvariantViolation


@dataclass(order=True, frozen=True)
class Edge:
    """Collapse candidate: merge from_vertex into to_vertex at this cost."""
    cost: float
    from_vertex: int
    to_vertex: int  # -1 deletes an isolated from_vertex


class CollapseQueue:
    """
    Sorted set of edges keyed by source vertex.

    Edges are ordered by (cost, from_vertex, to_vertex). A vertex owns at
    most one entry, so equal costs are told apart by the vertex index and
    every entry can be located and removed on its own.
    """

    def __init__(self):
        self._edges = SortedList()
        self._by_vertex: Dict[int, Edge] = {}

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, vertex: int) -> bool:
        return vertex in self._by_vertex

    def __iter__(self) -> Iterator[Edge]:
        return iter(self._edges)

    def get(self, vertex: int) -> Optional[Edge]:
        """Current candidate edge of a vertex, if any."""
        return self._by_vertex.get(vertex)

    def peek(self) -> Edge:
        if not self._edges:
            raise InvariantViolation("Cannot peek at minimum collapse cost: queue is empty")
        return self._edges[0]

    def add(self, edge: Edge):
        """
        Insert a candidate edge.

        Args:
            edge: Edge whose source vertex has no entry yet
        """
        if math.isnan(edge.cost):
            raise InvariantViolation(f"Collapse cost of vertex {edge.from_vertex} is NaN")

        if edge.from_vertex in self._by_vertex:
            raise InvariantViolation(
                f"Vertex {edge.from_vertex} already has a collapse candidate "
                f"({self._by_vertex[edge.from_vertex]})"
            )

        self._edges.add(edge)
        self._by_vertex[edge.from_vertex] = edge

    def remove_by_vertex(self, vertex: int) -> Edge:
        """Remove and return the candidate edge of a vertex."""
        edge = self._by_vertex.pop(vertex, None)

        if edge is None:
            raise InvariantViolation(f"Vertex {vertex} has no collapse candidate to remove")

        try:
            self._edges.remove(edge)
        except ValueError:
            raise InvariantViolation(f"Failed to remove collapse candidate {edge}") from None

        return edge

    def pop_minimum_cost(self) -> Edge:
        """Remove and return the globally cheapest edge."""
        if not self._edges:
            raise InvariantViolation(
                "Cannot retrieve minimum collapse cost: queue is empty"
            )

        edge = self._edges.pop(0)

        if self._by_vertex.pop(edge.from_vertex, None) is None:
            raise InvariantViolation(
                f"Failed to remove cost of minimum cost vertex {edge.from_vertex}"
            )

        return edge
