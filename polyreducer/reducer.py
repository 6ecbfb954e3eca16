"""
Mesh Reducer
============

Host-facing wrapper around the simplification engine: turns a reduction
percentage into a quality level, exports the live geometry with dense
indices, reports summary counts, and keeps one reducer per source mesh.
"""

import math
import threading
import warnings
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import trimesh

from .costs import CostModel
from .mesh_graph import MeshGraph
from .seams import find_seams
from .simplifier import Simplifier


@dataclass
class MeshInfo:
    """Read-only summary of a reducer's current quality level."""
    name: str
    original_vertex_count: int
    reduced_vertex_count: int
    original_triangle_count: int
    reduced_triangle_count: int
    seam_vertex_count: int

    @property
    def vertex_ratio(self) -> float:
        return self.reduced_vertex_count / max(1, self.original_vertex_count)

    @property
    def triangle_ratio(self) -> float:
        return self.reduced_triangle_count / max(1, self.original_triangle_count)


@dataclass
class ReducedMesh:
    """
    Live geometry of one quality level.

    faces index into vertices; vertex_map[i] is the original index of
    vertex i; submesh_faces splits faces by the source submeshes.
    """
    vertices: np.ndarray
    faces: np.ndarray
    vertex_map: np.ndarray
    submesh_faces: List[np.ndarray] = field(default_factory=list)

    @property
    def triangles(self) -> np.ndarray:
        """Flat index buffer of all submeshes."""
        return self.faces.reshape(-1)


def clamp_reduction_percent(reduction_percent: float) -> float:
    """Clamp to [0, 100], warning when the value was out of range or NaN."""
    reduction_percent = float(reduction_percent)
    if math.isnan(reduction_percent) or reduction_percent < 0.0 or reduction_percent > 100.0:
        warnings.warn(
            f"Reduction percentage of {reduction_percent} is out of bounds. "
            "Clamping to [0, 100].",
            stacklevel=2
        )
    if math.isnan(reduction_percent):
        return 0.0
    return min(100.0, max(0.0, reduction_percent))


class MeshReducer:
    """
    Reducible mesh: graph, seams and simplifier for one source mesh.

    Example:
        reducer = MeshReducer.from_trimesh(mesh)
        half = reducer.reduce(50)
        reducer.reduce(20)  # replays cached steps backward
    """

    def __init__(self, vertices, triangles,
                 submesh_triangle_counts: Optional[Sequence[int]] = None,
                 cost_model: Optional[CostModel] = None,
                 name: str = "mesh",
                 progress_callback: Optional[Callable[[float], None]] = None):
        """
        Build the graph, classify seams and score the initial queue.

        Args:
            vertices: (V, 3) vertex positions
            triangles: (F, 3) faces or flat index buffer of all submeshes
            submesh_triangle_counts: Triangles per submesh, in buffer order
                                     (default: a single submesh)
            cost_model: Collapse scoring strategy (default PreserveDetailCost)
            name: Label used in summaries
            progress_callback: Optional callback for pass progress
        """
        self.name = name
        self.graph = MeshGraph(vertices, triangles)

        if submesh_triangle_counts is None:
            submesh_triangle_counts = [self.graph.triangle_count]
        submesh_triangle_counts = [int(c) for c in submesh_triangle_counts]

        if sum(submesh_triangle_counts) != self.graph.triangle_count or \
                any(c < 0 for c in submesh_triangle_counts):
            raise ValueError(
                f"Submesh triangle counts {submesh_triangle_counts} do not add up "
                f"to {self.graph.triangle_count} triangles"
            )
        self.submesh_triangle_counts = submesh_triangle_counts

        self.seams = find_seams(self.graph)
        self.simplifier = Simplifier(
            self.graph,
            cost_model=cost_model,
            seams=self.seams,
            progress_callback=progress_callback
        )
        self.reduction_percent = 0.0

    @classmethod
    def from_trimesh(cls, mesh: trimesh.Trimesh, **kwargs) -> "MeshReducer":
        """Create a reducer from a trimesh object (single submesh)."""
        kwargs.setdefault("name", mesh.metadata.get("name", "mesh"))
        return cls(mesh.vertices, mesh.faces, **kwargs)

    def set_reduction_percent(self, reduction_percent: float):
        """Move to a quality level without exporting geometry."""
        self.reduction_percent = clamp_reduction_percent(reduction_percent)
        self.simplifier.set_quality(self.reduction_percent / 100.0)

    def reduce(self, reduction_percent: float) -> ReducedMesh:
        """
        Move to a quality level and export it.

        Args:
            reduction_percent: Percentage of collapsible vertices to remove;
                               clamped to [0, 100] with a warning

        Returns:
            Live geometry with dense indices
        """
        self.set_reduction_percent(reduction_percent)
        return self.get_reduced_mesh()

    def get_reduced_mesh(self) -> ReducedMesh:
        """Export the current quality level."""
        vertices, faces, vertex_map = self.graph.to_arrays()
        return ReducedMesh(
            vertices=vertices,
            faces=faces,
            vertex_map=vertex_map,
            submesh_faces=self._split_submeshes(faces)
        )

    def _split_submeshes(self, faces: np.ndarray) -> List[np.ndarray]:
        """Split live faces by the submesh each triangle came from."""
        live = np.array(self.graph.live_triangles(), dtype=np.int64)
        bounds = np.cumsum(self.submesh_triangle_counts)
        submesh_of = np.searchsorted(bounds, live, side="right")

        return [faces[submesh_of == i] for i in range(len(self.submesh_triangle_counts))]

    def to_trimesh(self, reduction_percent: Optional[float] = None) -> trimesh.Trimesh:
        """
        Build a trimesh object of a quality level.

        Args:
            reduction_percent: Level to move to first (None keeps the current one)
        """
        if reduction_percent is None:
            reduced = self.get_reduced_mesh()
        else:
            reduced = self.reduce(reduction_percent)

        return trimesh.Trimesh(vertices=reduced.vertices, faces=reduced.faces, process=False)

    @property
    def info(self) -> MeshInfo:
        return MeshInfo(
            name=self.name,
            original_vertex_count=self.graph.vertex_count,
            reduced_vertex_count=self.graph.live_vertex_count,
            original_triangle_count=self.graph.triangle_count,
            reduced_triangle_count=self.graph.live_triangle_count,
            seam_vertex_count=len(self.seams)
        )


class MeshRegistry:
    """
    Keyed store holding one MeshReducer per source mesh.

    Meshes are keyed by object identity. The registry keeps a reference
    to each registered mesh so its identity cannot be reused while the
    entry lives; call evict() or clear() to release it.
    """

    def __init__(self):
        self._entries: Dict[int, Tuple[object, MeshReducer]] = {}
        self._creating: Dict[int, threading.Lock] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, mesh) -> bool:
        return id(mesh) in self._entries

    def get(self, mesh) -> Optional[MeshReducer]:
        entry = self._entries.get(id(mesh))
        return entry[1] if entry is not None else None

    def get_or_create(self, mesh,
                      factory: Optional[Callable[[object], MeshReducer]] = None) -> MeshReducer:
        """
        Return the reducer of a mesh, creating it on first use.

        Args:
            mesh: Source mesh (a trimesh object unless factory is given)
            factory: Callable building a reducer from the mesh
                     (default MeshReducer.from_trimesh)
        """
        key = id(mesh)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                return entry[1]
            creation_lock = self._creating.setdefault(key, threading.Lock())

        # Only callers for this mesh wait on the build
        with creation_lock:
            with self._lock:
                entry = self._entries.get(key)
            if entry is None:
                factory = factory if factory is not None else MeshReducer.from_trimesh
                reducer = factory(mesh)
                with self._lock:
                    entry = self._entries.setdefault(key, (mesh, reducer))
                    if self._creating.get(key) is creation_lock:
                        del self._creating[key]
            return entry[1]

    def evict(self, mesh) -> bool:
        """Drop a mesh's reducer. Returns False if it was not registered."""
        with self._lock:
            return self._entries.pop(id(mesh), None) is not None

    def clear(self):
        with self._lock:
            self._entries.clear()
