"""Tests for polyreducer.costs: curvature, cost models and best collapse."""

import math

import numpy as np
import pytest

from polyreducer.costs import (
    PreserveDetailCost,
    RemoveDetailCost,
    best_collapse,
    curvature,
    edge_length,
    get_cost_model,
)
from polyreducer.mesh_graph import InvariantViolation, MeshGraph


def center_of(grid_size: int) -> int:
    return (grid_size // 2) * grid_size + grid_size // 2


class TestCurvature:
    def test_flat_fan_has_zero_curvature(self, grid):
        graph = MeshGraph(*grid)
        u = center_of(8)

        for v in graph.neighbor_vertices[u]:
            assert curvature(u, v, graph) == pytest.approx(0.0)

    def test_cube_corner(self, cube):
        graph = MeshGraph(cube.vertices, cube.faces)

        # Every corner has a triangle on a face perpendicular to the edge
        for u in range(8):
            for v in graph.neighbor_vertices[u]:
                assert curvature(u, v, graph) == pytest.approx(0.5)

    def test_curvature_in_unit_interval(self, icosphere):
        graph = MeshGraph(icosphere.vertices, icosphere.faces)

        for u in range(graph.vertex_count):
            for v in graph.neighbor_vertices[u]:
                assert 0.0 <= curvature(u, v, graph) <= 1.0


class TestCostModels:
    def test_preserve_detail_on_flat_grid(self, grid):
        graph = MeshGraph(*grid)
        u = center_of(8)

        for v in graph.neighbor_vertices[u]:
            assert PreserveDetailCost().cost(u, v, graph) == pytest.approx(0.0)

    def test_remove_detail_on_flat_grid(self, grid):
        graph = MeshGraph(*grid)
        u = center_of(8)

        for v in graph.neighbor_vertices[u]:
            expected = 1.0 / edge_length(u, v, graph)
            assert RemoveDetailCost().cost(u, v, graph) == pytest.approx(expected)

    def test_remove_detail_zero_length_edge(self):
        vertices = np.array([[0.0, 0, 0], [0.0, 0, 0], [1.0, 0, 0]])
        graph = MeshGraph(vertices, [[0, 1, 2]])
        assert RemoveDetailCost().cost(0, 1, graph) == 0.0

    def test_models_are_stateless(self, icosphere):
        graph = MeshGraph(icosphere.vertices, icosphere.faces)
        model = PreserveDetailCost()
        first = model.cost(0, next(iter(graph.neighbor_vertices[0])), graph)
        second = model.cost(0, next(iter(graph.neighbor_vertices[0])), graph)
        assert first == second

    def test_get_cost_model(self):
        assert isinstance(get_cost_model("preserve_detail"), PreserveDetailCost)
        assert isinstance(get_cost_model("remove_detail"), RemoveDetailCost)

        with pytest.raises(ValueError):
            get_cost_model("quadric")


class TestBestCollapse:
    def test_isolated_vertex_sentinel(self, flat_quad):
        vertices, faces = flat_quad
        graph = MeshGraph(np.vstack([vertices, [[2.0, 2.0, 2.0]]]), faces)

        assert best_collapse(4, graph, PreserveDetailCost()) == (-1.0, -1)
        assert best_collapse(4, graph, RemoveDetailCost()) == (-1.0, -1)

    def test_preserve_detail_prefers_cube_edges(self, cube):
        graph = MeshGraph(cube.vertices, cube.faces)

        for u in range(8):
            cost, v = best_collapse(u, graph, PreserveDetailCost())
            assert cost == pytest.approx(0.5)
            assert edge_length(u, v, graph) == pytest.approx(1.0)

    def test_remove_detail_prefers_cube_diagonals(self, cube):
        graph = MeshGraph(cube.vertices, cube.faces)

        for u in range(8):
            cost, v = best_collapse(u, graph, RemoveDetailCost())
            if len(graph.adjacent_triangles[u]) > 3:
                # Corner lies on at least one face diagonal
                assert cost == pytest.approx(0.5 / math.sqrt(2))
                assert edge_length(u, v, graph) == pytest.approx(math.sqrt(2))
            else:
                assert cost == pytest.approx(0.5)

    def test_target_is_a_neighbor(self, icosphere):
        graph = MeshGraph(icosphere.vertices, icosphere.faces)

        for u in range(graph.vertex_count):
            _, v = best_collapse(u, graph, PreserveDetailCost())
            assert v in graph.neighbor_vertices[u]

    def test_undeterminable_cost(self, flat_quad):
        class NanCost(PreserveDetailCost):
            def cost(self, u, v, graph):
                return float("nan")

        graph = MeshGraph(*flat_quad)
        with pytest.raises(InvariantViolation):
            best_collapse(0, graph, NanCost())
