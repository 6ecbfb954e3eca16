"""
Collapse Steps
==============

A collapse step records everything that changes in a MeshGraph when one
vertex is merged into a neighbor. The delta is computed up front from the
graph's current state, so applying and undoing it are plain replays that
never rescore or search the mesh.
"""

from typing import Dict, FrozenSet, List, Set, Tuple

import numpy as np

from .mesh_graph import MeshGraph


class CollapseStep:
    """
    Reversible record of collapsing from_vertex into to_vertex.

    A to_vertex of -1 marks from_vertex as isolated: the step only deletes
    it. The step borrows the graph it was built from; the simplifier owns
    both.
    """

    def __init__(self, graph: MeshGraph, from_vertex: int, to_vertex: int):
        """
        Precompute the collapse delta.

        Args:
            graph: Graph in the state the step will be applied to
            from_vertex: Vertex removed by the collapse (u)
            to_vertex: Vertex receiving u's triangles (v), or -1
        """
        self._graph = graph
        self.from_vertex = from_vertex
        self.to_vertex = to_vertex

        self._triangle_deletions: Set[int] = set()
        self._vertex_replacements: List[int] = []
        # triangle -> (normal before, normal after)
        self._normal_updates: Dict[int, Tuple[np.ndarray, np.ndarray]] = {}
        self._adjacency_removals: Dict[int, Set[int]] = {}
        self._adjacency_additions: Dict[int, Set[int]] = {}
        self._affected_vertices: FrozenSet[int] = frozenset()

        if to_vertex == -1:
            return

        u, v = from_vertex, to_vertex

        for t in sorted(graph.adjacent_triangles[u]):
            if graph.triangle_has_vertex(t, v):
                self._triangle_deletions.add(t)

                # u keeps its triangles; it is deleted along with them
                for vertex in graph.faces[t]:
                    if vertex != u:
                        self._adjacency_removals.setdefault(vertex, set()).add(t)
                continue

            self._vertex_replacements.append(t)
            self._adjacency_additions.setdefault(v, set()).add(t)
            self._normal_updates[t] = (
                graph.triangle_normals[t].copy(),
                graph.get_triangle_normal(t, replace=(u, v))
            )

        # Live neighbor sets change while the step is applied
        self._affected_vertices = frozenset(
            graph.neighbor_vertices[u] | graph.neighbor_vertices[v]
        )

    @property
    def is_isolated_deletion(self) -> bool:
        return self.to_vertex == -1

    @property
    def deleted_triangles(self) -> FrozenSet[int]:
        return frozenset(self._triangle_deletions)

    @property
    def replaced_triangles(self) -> Tuple[int, ...]:
        return tuple(self._vertex_replacements)

    @property
    def affected_vertices(self) -> FrozenSet[int]:
        """Vertices whose neighbor sets are rebuilt by apply and undo."""
        return self._affected_vertices

    def apply(self):
        """Replay the collapse on the graph."""
        graph = self._graph

        if self.to_vertex == -1:
            graph.deleted_vertices.add(self.from_vertex)
            return

        graph.deleted_triangles.update(self._triangle_deletions)

        # Removals first so v never holds a deleted triangle twice
        for vertex, triangles in self._adjacency_removals.items():
            graph.adjacent_triangles[vertex].difference_update(triangles)

        for vertex, triangles in self._adjacency_additions.items():
            graph.adjacent_triangles[vertex].update(triangles)

        for t in self._vertex_replacements:
            graph.replace_vertex(t, self.from_vertex, self.to_vertex)

        for t, (_, after) in self._normal_updates.items():
            graph.triangle_normals[t] = after

        graph.deleted_vertices.add(self.from_vertex)

        self._recalculate_neighbor_vertices()

    def undo(self):
        """Reverse apply(), restoring the graph exactly."""
        graph = self._graph

        graph.deleted_vertices.discard(self.from_vertex)

        if self.to_vertex == -1:
            return

        for t, (before, _) in self._normal_updates.items():
            graph.triangle_normals[t] = before

        for t in self._vertex_replacements:
            graph.replace_vertex(t, self.to_vertex, self.from_vertex)

        for vertex, triangles in self._adjacency_additions.items():
            graph.adjacent_triangles[vertex].difference_update(triangles)

        for vertex, triangles in self._adjacency_removals.items():
            graph.adjacent_triangles[vertex].update(triangles)

        graph.deleted_triangles.difference_update(self._triangle_deletions)

        self._recalculate_neighbor_vertices()

    def _recalculate_neighbor_vertices(self):
        graph = self._graph
        graph.recalculate_neighbor_vertices(self.to_vertex)

        for n in self._affected_vertices:
            graph.recalculate_neighbor_vertices(n)

    def __repr__(self) -> str:
        return (f"CollapseStep({self.from_vertex} -> {self.to_vertex}, "
                f"deleted={sorted(self._triangle_deletions)}, "
                f"replaced={self._vertex_replacements})")
