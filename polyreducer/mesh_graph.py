"""
Mesh Graph
==========

Adjacency structure over a triangle mesh: vertex positions, per-vertex
neighbor and triangle sets, cached triangle normals, and the sets of
deleted vertices and triangles that collapse steps mutate.
"""

import numpy as np
from typing import List, Optional, Set, Tuple


class InvariantViolation(RuntimeError):
    """Raised when the graph, queue or step log reach an inconsistent state."""


def _normalize_triangles(triangles) -> np.ndarray:
    """Accept either an (F, 3) array or a flat stride-3 index buffer."""
    triangles = np.asarray(triangles, dtype=np.int64)

    if triangles.ndim == 1:
        if len(triangles) % 3 != 0:
            raise ValueError(
                f"Triangle index buffer length {len(triangles)} is not a multiple of 3"
            )
        triangles = triangles.reshape(-1, 3)

    if triangles.ndim != 2 or triangles.shape[1] != 3:
        raise ValueError(f"Expected (F, 3) triangle indices, got shape {triangles.shape}")

    return triangles


def compute_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """
    Compute unit normals for all faces at once.

    Degenerate faces get a zero vector instead of NaNs.
    """
    if len(faces) == 0:
        return np.zeros((0, 3))

    v0 = vertices[faces[:, 0]]
    e1 = vertices[faces[:, 1]] - v0
    e2 = vertices[faces[:, 2]] - v0

    normals = np.cross(e1, e2)
    lengths = np.linalg.norm(normals, axis=1)
    valid = lengths > 1e-12

    normals[valid] /= lengths[valid][:, None]
    normals[~valid] = 0.0

    return normals


class MeshGraph:
    """
    Mutable adjacency graph of a triangle mesh.

    Vertex positions never change. Collapse steps rewrite triangle vertex
    slots, move triangles between vertices' adjacency sets, and mark
    vertices and triangles as deleted. Triangles are addressed by face
    number.
    """

    def __init__(self, vertices, triangles):
        """
        Build the graph from raw buffers.

        Args:
            vertices: (V, 3) array of vertex positions
            triangles: (F, 3) array of vertex indices, or a flat index
                       buffer whose length is a multiple of 3
        """
        vertices = np.array(vertices, dtype=np.float64)
        if vertices.ndim != 2 or vertices.shape[1] != 3:
            raise ValueError(f"Expected (V, 3) vertex positions, got shape {vertices.shape}")

        faces = _normalize_triangles(triangles)
        if len(faces) > 0 and (faces.min() < 0 or faces.max() >= len(vertices)):
            raise ValueError("Triangle indices reference vertices out of range")

        self.vertices = vertices
        self.vertices.setflags(write=False)

        self.faces: List[List[int]] = [[int(i) for i in f] for f in faces]
        self.triangle_normals = compute_normals(vertices, faces)

        self.deleted_vertices: Set[int] = set()
        self.deleted_triangles: Set[int] = set()

        self.neighbor_vertices, self.adjacent_triangles = self._build_adjacency()

    def _build_adjacency(self) -> Tuple[List[Set[int]], List[Set[int]]]:
        """Collect neighbor vertices and incident triangles of every vertex."""
        neighbor_vertices = [set() for _ in range(len(self.vertices))]
        adjacent_triangles = [set() for _ in range(len(self.vertices))]

        for t, face in enumerate(self.faces):
            for j in range(3):
                v = face[j]
                for k in range(3):
                    if j != k:
                        neighbor_vertices[v].add(face[k])
                adjacent_triangles[v].add(t)

        return neighbor_vertices, adjacent_triangles

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.faces)

    @property
    def live_vertex_count(self) -> int:
        return len(self.vertices) - len(self.deleted_vertices)

    @property
    def live_triangle_count(self) -> int:
        return len(self.faces) - len(self.deleted_triangles)

    def isolated_vertices(self) -> Set[int]:
        """Live vertices that belong to no triangle."""
        return {
            v for v, triangles in enumerate(self.adjacent_triangles)
            if not triangles and v not in self.deleted_vertices
        }

    def triangle_has_vertex(self, t: int, v: int) -> bool:
        face = self.faces[t]
        return face[0] == v or face[1] == v or face[2] == v

    def replace_vertex(self, t: int, from_vertex: int, to_vertex: int):
        """Rewrite the first slot of triangle t holding from_vertex."""
        face = self.faces[t]
        for i in range(3):
            if face[i] == from_vertex:
                face[i] = to_vertex
                break

    def get_triangle_normal(self, t: int,
                            replace: Optional[Tuple[int, int]] = None) -> np.ndarray:
        """
        Compute the unit normal of triangle t from current positions.

        Args:
            t: Triangle index
            replace: Optional (from_vertex, to_vertex) pair; the normal is
                     computed as if from_vertex were already replaced

        Returns:
            Unit normal, or a zero vector for degenerate geometry
        """
        face = self.faces[t]
        if replace is not None:
            from_vertex, to_vertex = replace
            face = [to_vertex if x == from_vertex else x for x in face]

        p0, p1, p2 = self.vertices[face[0]], self.vertices[face[1]], self.vertices[face[2]]
        normal = np.cross(p1 - p0, p2 - p0)
        length = np.linalg.norm(normal)

        if length < 1e-12:
            return np.zeros(3)

        return normal / length

    def recalculate_neighbor_vertices(self, vertex: int):
        """Rebuild one vertex's neighbor set from its current triangles."""
        neighbors = set()

        for t in self.adjacent_triangles[vertex]:
            for x in self.faces[t]:
                if x != vertex:
                    neighbors.add(x)

        self.neighbor_vertices[vertex] = neighbors

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Export live geometry with dense indices.

        Returns:
            Tuple of (vertices, faces, vertex_map) where faces index into the
            returned vertices and vertex_map[i] is the original index of
            returned vertex i
        """
        vertex_map = np.array(
            [i for i in range(len(self.vertices)) if i not in self.deleted_vertices],
            dtype=np.int64
        )
        remap = np.full(len(self.vertices), -1, dtype=np.int64)
        remap[vertex_map] = np.arange(len(vertex_map))

        live_faces = [
            self.faces[t] for t in range(len(self.faces))
            if t not in self.deleted_triangles
        ]

        if live_faces:
            faces = remap[np.array(live_faces, dtype=np.int64)]
        else:
            faces = np.zeros((0, 3), dtype=np.int64)

        if (faces < 0).any():
            raise InvariantViolation("Live triangle references a deleted vertex")

        return self.vertices[vertex_map], faces, vertex_map

    def live_triangles(self) -> List[int]:
        """Indices of non-deleted triangles, in buffer order."""
        return [t for t in range(len(self.faces)) if t not in self.deleted_triangles]
