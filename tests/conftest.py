"""Shared pytest fixtures for polygon reduction tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
import trimesh

from polyreducer.mesh_graph import MeshGraph


def graph_state(graph: MeshGraph) -> dict:
    """Deep copy of everything a collapse step may touch."""
    return {
        "faces": [list(f) for f in graph.faces],
        "normals": graph.triangle_normals.copy(),
        "deleted_vertices": set(graph.deleted_vertices),
        "deleted_triangles": set(graph.deleted_triangles),
        "neighbor_vertices": [set(s) for s in graph.neighbor_vertices],
        "adjacent_triangles": [set(s) for s in graph.adjacent_triangles],
    }


def assert_same_state(a: dict, b: dict):
    assert a["faces"] == b["faces"]
    assert np.array_equal(a["normals"], b["normals"])
    assert a["deleted_vertices"] == b["deleted_vertices"]
    assert a["deleted_triangles"] == b["deleted_triangles"]
    assert a["neighbor_vertices"] == b["neighbor_vertices"]
    assert a["adjacent_triangles"] == b["adjacent_triangles"]


def flat_grid(rows: int, cols: int):
    """Flat grid in the XY plane, two triangles per cell."""
    x, y = np.meshgrid(np.arange(cols, dtype=float), np.arange(rows, dtype=float))
    vertices = np.column_stack([x.flatten(), y.flatten(), np.zeros(rows * cols)])

    faces = []
    for i in range(rows - 1):
        for j in range(cols - 1):
            idx = i * cols + j
            faces.append([idx, idx + 1, idx + cols])
            faces.append([idx + 1, idx + cols + 1, idx + cols])

    return vertices, np.array(faces)


@pytest.fixture
def cube() -> trimesh.Trimesh:
    """Unit cube: 8 vertices, 12 triangles, closed."""
    mesh = trimesh.creation.box(extents=[1, 1, 1])
    assert len(mesh.vertices) == 8 and len(mesh.faces) == 12
    return mesh


@pytest.fixture
def tetrahedron():
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ])
    # Outward winding
    faces = np.array([
        [0, 2, 1],
        [0, 1, 3],
        [0, 3, 2],
        [1, 2, 3],
    ])
    return vertices, faces


@pytest.fixture
def flat_quad():
    """Single quad made of two triangles: every vertex is on the border."""
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
    ])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    return vertices, faces


@pytest.fixture
def open_pyramid():
    """Square pyramid without its base: closed fan at the apex only."""
    vertices = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [1.0, 1.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.5, 0.5, 1.0],
    ])
    faces = np.array([
        [0, 1, 4],
        [1, 2, 4],
        [2, 3, 4],
        [3, 0, 4],
    ])
    return vertices, faces


@pytest.fixture
def grid():
    """8x8 flat grid: 28 border vertices, 36 interior vertices."""
    return flat_grid(8, 8)


@pytest.fixture
def wavy_grid() -> trimesh.Trimesh:
    from polyreducer.utils import create_mesh_with_boundary
    return create_mesh_with_boundary(rows=8, cols=8, noise=0.01, seed=3)


@pytest.fixture
def icosphere() -> trimesh.Trimesh:
    """Closed sphere with 42 vertices and 80 triangles."""
    return trimesh.creation.icosphere(subdivisions=1, radius=1.0)
