"""
Collapse Cost Models
====================

Scoring functions for collapsing vertex u into its neighbor v. Lower
cost means the collapse is more desirable.

Both models combine the edge length with a curvature term in [0, 1]:
for every triangle around u, find the most coplanar triangle shared by
u and v; the least coplanar of those pairings is the curvature.
"""

import math
from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from .mesh_graph import InvariantViolation, MeshGraph


def edge_length(u: int, v: int, graph: MeshGraph) -> float:
    return float(np.linalg.norm(graph.vertices[u] - graph.vertices[v]))


def curvature(u: int, v: int, graph: MeshGraph) -> float:
    """
    Compute the curvature term for collapsing u into v.

    Args:
        u: Vertex being removed
        v: Vertex receiving u's triangles
        graph: Current mesh graph

    Returns:
        Value in [0, 1], where 0 means u's fan is flat around the edge
        and 1 means some triangle at u faces opposite to every triangle
        shared by u and v
    """
    u_triangles = graph.adjacent_triangles[u]
    uv_triangles = [t for t in u_triangles if graph.triangle_has_vertex(t, v)]

    normals = graph.triangle_normals
    max_curvature = 0.0

    for t in u_triangles:
        # Triangles containing v are coplanar with themselves
        if graph.triangle_has_vertex(t, v):
            continue

        min_curvature = 1.0
        for t2 in uv_triangles:
            dot = float(np.dot(normals[t], normals[t2]))
            min_curvature = min(min_curvature, (1.0 - dot) / 2.0)

        max_curvature = max(max_curvature, min_curvature)

    return max_curvature


class CostModel(ABC):
    """
    Stateless strategy scoring the collapse of u into v.
    """

    name = "base"

    @abstractmethod
    def cost(self, u: int, v: int, graph: MeshGraph) -> float:
        """Cost of collapsing vertex u into vertex v."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PreserveDetailCost(CostModel):
    """
    Default model: remove vertices whose fan is nearly flat and whose edge
    is short first, keeping sharp features for last.
    """

    name = "preserve_detail"

    def cost(self, u: int, v: int, graph: MeshGraph) -> float:
        return edge_length(u, v, graph) * curvature(u, v, graph)


class RemoveDetailCost(CostModel):
    """
    Inverse model: remove short, sharp features first.

    Meant for smoothing the bumps left on meshes built from voxels, which
    only have right angles.
    """

    name = "remove_detail"

    def cost(self, u: int, v: int, graph: MeshGraph) -> float:
        length = edge_length(u, v, graph)

        # Coincident vertices are the shortest possible feature
        if length == 0.0:
            return 0.0

        return (1.0 / length) * (1.0 - curvature(u, v, graph))


COST_MODELS = {
    PreserveDetailCost.name: PreserveDetailCost,
    RemoveDetailCost.name: RemoveDetailCost,
}


def get_cost_model(name: str) -> CostModel:
    """
    Resolve a cost model by name.

    Args:
        name: "preserve_detail" or "remove_detail"

    Returns:
        New cost model instance
    """
    try:
        return COST_MODELS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown cost model '{name}', expected one of {sorted(COST_MODELS)}"
        ) from None


def best_collapse(u: int, graph: MeshGraph, cost_model: CostModel) -> Tuple[float, int]:
    """
    Find the cheapest neighbor to collapse u into.

    Args:
        u: Source vertex
        graph: Current mesh graph
        cost_model: Scoring strategy

    Returns:
        Tuple of (cost, target_vertex); (-1.0, -1) when u is isolated
    """
    u_triangles = graph.adjacent_triangles[u]

    if not u_triangles:
        return -1.0, -1

    min_cost = math.inf
    target = -1
    seen = set()

    for t in u_triangles:
        for v in graph.faces[t]:
            if v == u or v in seen:
                continue
            seen.add(v)

            cost = cost_model.cost(u, v, graph)
            if math.isnan(cost):
                continue

            if target == -1 or cost < min_cost:
                min_cost = cost
                target = v

    if target == -1:
        raise InvariantViolation(f"Could not determine collapse cost of vertex {u}")

    return min_cost, target
