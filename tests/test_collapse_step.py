"""Tests for polyreducer.collapse_step: precomputed deltas, apply and undo."""

import numpy as np
import pytest

from conftest import assert_same_state, graph_state
from polyreducer.collapse_step import CollapseStep
from polyreducer.mesh_graph import MeshGraph


@pytest.fixture
def sphere_graph(icosphere) -> MeshGraph:
    return MeshGraph(icosphere.vertices, icosphere.faces)


def first_neighbor(graph: MeshGraph, u: int) -> int:
    return min(graph.neighbor_vertices[u])


class TestConstruction:
    def test_construction_does_not_mutate(self, sphere_graph):
        before = graph_state(sphere_graph)
        CollapseStep(sphere_graph, 0, first_neighbor(sphere_graph, 0))
        assert_same_state(before, graph_state(sphere_graph))

    def test_records_shared_triangles_as_deleted(self, sphere_graph):
        u = 0
        v = first_neighbor(sphere_graph, u)
        step = CollapseStep(sphere_graph, u, v)

        shared = sphere_graph.adjacent_triangles[u] & sphere_graph.adjacent_triangles[v]
        assert step.deleted_triangles == shared
        # Interior edge of a closed mesh
        assert len(shared) == 2
        assert set(step.replaced_triangles) == sphere_graph.adjacent_triangles[u] - shared

    def test_isolated_step_records_nothing(self, flat_quad):
        vertices, faces = flat_quad
        graph = MeshGraph(np.vstack([vertices, [[1.0, 1.0, 1.0]]]), faces)
        step = CollapseStep(graph, 4, -1)

        assert step.is_isolated_deletion
        assert step.deleted_triangles == frozenset()
        assert step.replaced_triangles == ()


class TestApply:
    def test_apply_removes_vertex(self, sphere_graph):
        u = 5
        v = first_neighbor(sphere_graph, u)
        step = CollapseStep(sphere_graph, u, v)
        step.apply()

        assert u in sphere_graph.deleted_vertices
        assert sphere_graph.live_vertex_count == 41
        assert sphere_graph.live_triangle_count == 78

        for t in sphere_graph.live_triangles():
            face = sphere_graph.faces[t]
            assert u not in face
            assert len(set(face)) == 3

    def test_apply_moves_triangles_to_target(self, sphere_graph):
        u = 5
        v = first_neighbor(sphere_graph, u)
        step = CollapseStep(sphere_graph, u, v)
        step.apply()

        for t in step.replaced_triangles:
            assert t in sphere_graph.adjacent_triangles[v]
            assert sphere_graph.triangle_has_vertex(t, v)
            assert np.allclose(sphere_graph.triangle_normals[t],
                               sphere_graph.get_triangle_normal(t))

        for t in step.deleted_triangles:
            assert t not in sphere_graph.adjacent_triangles[v]

    def test_neighbor_sets_match_live_triangles(self, sphere_graph):
        u = 5
        step = CollapseStep(sphere_graph, u, first_neighbor(sphere_graph, u))
        step.apply()

        rebuilt = MeshGraph(sphere_graph.vertices,
                            [sphere_graph.faces[t] for t in sphere_graph.live_triangles()])
        for x in range(sphere_graph.vertex_count):
            if x in sphere_graph.deleted_vertices:
                continue
            assert sphere_graph.neighbor_vertices[x] == rebuilt.neighbor_vertices[x]

    def test_isolated_apply(self, flat_quad):
        vertices, faces = flat_quad
        graph = MeshGraph(np.vstack([vertices, [[1.0, 1.0, 1.0]]]), faces)
        step = CollapseStep(graph, 4, -1)

        step.apply()
        assert graph.deleted_vertices == {4}

        step.undo()
        assert graph.deleted_vertices == set()


class TestUndo:
    def test_apply_then_undo_is_identity(self, sphere_graph):
        before = graph_state(sphere_graph)

        step = CollapseStep(sphere_graph, 7, first_neighbor(sphere_graph, 7))
        step.apply()
        step.undo()

        assert_same_state(before, graph_state(sphere_graph))

    def test_chained_steps_unwind(self, sphere_graph):
        before = graph_state(sphere_graph)
        steps = []

        for u in (0, 11, 20, 33):
            if u in sphere_graph.deleted_vertices:
                continue
            step = CollapseStep(sphere_graph, u, first_neighbor(sphere_graph, u))
            step.apply()
            steps.append(step)

        for step in reversed(steps):
            step.undo()

        assert_same_state(before, graph_state(sphere_graph))

    def test_redo_after_undo_is_deterministic(self, sphere_graph):
        step = CollapseStep(sphere_graph, 3, first_neighbor(sphere_graph, 3))
        step.apply()
        applied = graph_state(sphere_graph)

        step.undo()
        step.apply()

        assert_same_state(applied, graph_state(sphere_graph))
