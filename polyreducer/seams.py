"""
Seam Detection
==============

Finds vertices that must never be collapsed because removing them would
open a gap in the surface: mesh boundaries, UV seams where vertices are
split, and the shared border between independently reduced meshes.

A vertex is interior when the triangles around it form one closed fan.
Each triangle contributes the pair of its other two vertices, ordered by
winding, and the pairs are chained end to end until the loop closes.
"""

from typing import Dict, FrozenSet, Optional, Set, Tuple

from .mesh_graph import MeshGraph


def find_seams(graph: MeshGraph) -> FrozenSet[int]:
    """
    Classify every vertex of the graph.

    Args:
        graph: Freshly built mesh graph

    Returns:
        Frozen set of seam vertex indices
    """
    return frozenset(v for v in range(graph.vertex_count) if is_seam(v, graph))


def is_seam(v: int, graph: MeshGraph) -> bool:
    """
    Check whether a vertex lies on a seam.

    Isolated vertices are not seams; they are deleted unconditionally.
    """
    triangles = graph.adjacent_triangles[v]

    if not triangles:
        return False

    # A pyramid tip is the smallest closed fan
    if len(triangles) < 3:
        return True

    pairs: Dict[int, Tuple[int, int]] = {}
    for t in triangles:
        pair = _vertex_pair(v, t, graph)
        if pair is not None:
            pairs[t] = pair

    for start in pairs:
        used = {start}
        if _close_loop(pairs[start], used, pairs) and len(used) >= 3:
            return False

    return True


def _vertex_pair(v: int, t: int, graph: MeshGraph) -> Optional[Tuple[int, int]]:
    """The other two vertices of triangle t, in winding order starting after v."""
    a, b, c = graph.faces[t]

    if a == v:
        return b, c
    if b == v:
        return c, a
    if c == v:
        return a, b

    return None


def _close_loop(loop: Tuple[int, int], used: Set[int],
                pairs: Dict[int, Tuple[int, int]]) -> bool:
    """
    Greedily extend a chain of vertex pairs until it closes.

    Each round consumes one unused triangle, so the search ends after at
    most len(pairs) rounds even on non-manifold fans.
    """
    for _ in range(len(pairs)):
        extended = False

        for t, pair in pairs.items():
            if t in used:
                continue

            a_match = loop[0] == pair[1]
            b_match = loop[1] == pair[0]

            if not a_match and not b_match:
                continue

            used.add(t)

            if a_match and b_match:
                return True

            if a_match:
                loop = (pair[0], loop[1])
            else:
                loop = (loop[0], pair[1])

            extended = True
            break

        if not extended:
            return False

    return False
