"""
Mesh Visualization Module
=========================

Matplotlib views of reduced meshes: side-by-side comparison, quality level
grids, seam highlighting, and per-level statistics.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import trimesh
from mpl_toolkits.mplot3d import Axes3D
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from .reducer import MeshReducer


def _to_plot_axes(points: np.ndarray) -> np.ndarray:
    """Rotate Y-up mesh coordinates into matplotlib's Z-up axes."""
    rotated = points.copy()
    rotated[..., 0] = points[..., 2]
    rotated[..., 1] = points[..., 0]
    rotated[..., 2] = points[..., 1]
    return rotated


class MeshVisualizer:
    """
    Visualization tools for polygon reduction results.
    """

    def __init__(self, figsize: Tuple[int, int] = (14, 7)):
        """
        Initialize visualizer.

        Args:
            figsize: Default figure size for plots
        """
        self.figsize = figsize
        self.seam_color = 'crimson'

    def _normalize(self, vertices: np.ndarray,
                   reference: Optional[np.ndarray] = None) -> np.ndarray:
        """Fit vertices into [-1, 1] using the reference point cloud's frame."""
        reference = vertices if reference is None else reference
        center = reference.mean(axis=0)
        scale = np.max(np.abs(reference - center))
        if scale == 0:
            scale = 1.0
        return (vertices - center) / scale

    def _plot_single_mesh(self, ax: Axes3D, mesh: trimesh.Trimesh,
                          title: str, show_wireframe: bool,
                          highlight: Optional[np.ndarray] = None):
        """Plot a single mesh on a 3D axis, optionally marking some vertices."""
        vertices = np.asarray(mesh.vertices)
        faces = np.asarray(mesh.faces)
        vertices_normalized = self._normalize(vertices)

        if len(faces) > 0:
            triangles = _to_plot_axes(vertices_normalized[faces])
            poly = Poly3DCollection(triangles,
                                    facecolors=self._compute_face_colors(vertices_normalized, faces),
                                    edgecolors='black' if show_wireframe else 'none',
                                    linewidths=0.1 if show_wireframe else 0,
                                    alpha=0.9)
            ax.add_collection3d(poly)

        if highlight is not None and len(highlight) > 0:
            points = _to_plot_axes(vertices_normalized[highlight])
            ax.scatter(points[:, 0], points[:, 1], points[:, 2],
                       color=self.seam_color, s=6, depthshade=False)

        ax.set_xlim(-1, 1)
        ax.set_ylim(-1, 1)
        ax.set_zlim(-1, 1)
        ax.set_box_aspect([1, 1, 1])

        ax.set_title(title, fontsize=10)
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_zlabel('Z')

    def _compute_face_colors(self, vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
        """Compute face colors based on normals for shading."""
        light_dir = np.array([1, 1, 2])
        light_dir = light_dir / np.linalg.norm(light_dir)

        v0 = vertices[faces[:, 0]]
        normals = np.cross(vertices[faces[:, 1]] - v0, vertices[faces[:, 2]] - v0)
        lengths = np.linalg.norm(normals, axis=1)
        normals[lengths > 1e-10] /= lengths[lengths > 1e-10][:, None]

        intensity = np.clip(normals @ light_dir, 0.2, 1.0)

        colors = np.zeros((len(faces), 4))
        colors[:, 0] = 0.3 + 0.4 * intensity
        colors[:, 1] = 0.4 + 0.4 * intensity
        colors[:, 2] = 0.6 + 0.3 * intensity
        colors[:, 3] = 1.0

        return colors

    def _save(self, fig: plt.Figure, save_path: Optional[str], label: str):
        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved {label} to {save_path}")

    def plot_mesh_comparison(self, original: trimesh.Trimesh,
                             reduced: trimesh.Trimesh,
                             title: str = "Mesh Comparison",
                             show_wireframe: bool = True,
                             save_path: Optional[str] = None) -> plt.Figure:
        """
        Create side-by-side comparison of original and reduced meshes.

        Args:
            original: Original mesh
            reduced: Reduced mesh
            title: Plot title
            show_wireframe: Whether to show wireframe overlay
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        fig, axes = plt.subplots(1, 2, figsize=self.figsize,
                                 subplot_kw={'projection': '3d'})

        self._plot_single_mesh(axes[0], original,
                               f"Original\n({len(original.faces)} faces, {len(original.vertices)} vertices)",
                               show_wireframe)
        self._plot_single_mesh(axes[1], reduced,
                               f"Reduced\n({len(reduced.faces)} faces, {len(reduced.vertices)} vertices)",
                               show_wireframe)

        fig.suptitle(title, fontsize=14, fontweight='bold')
        fig.tight_layout()
        self._save(fig, save_path, "comparison")

        return fig

    def plot_seams(self, reducer: MeshReducer,
                   title: str = "Seam Vertices",
                   save_path: Optional[str] = None) -> plt.Figure:
        """
        Show the reducer's current level with seam vertices marked.

        Seam vertices are never collapsed; they keep the mesh border in
        place so neighboring meshes stay connected.
        """
        reduced = reducer.get_reduced_mesh()
        mesh = trimesh.Trimesh(vertices=reduced.vertices, faces=reduced.faces, process=False)

        is_seam = np.isin(reduced.vertex_map, np.fromiter(reducer.seams, dtype=np.int64))

        fig = plt.figure(figsize=(self.figsize[1], self.figsize[1]))
        ax = fig.add_subplot(111, projection='3d')
        self._plot_single_mesh(ax, mesh,
                               f"{title}\n({len(reducer.seams)} of {reducer.graph.vertex_count} vertices)",
                               show_wireframe=True,
                               highlight=np.flatnonzero(is_seam))
        fig.tight_layout()
        self._save(fig, save_path, "seam plot")

        return fig

    def plot_multi_resolution(self, meshes: List[trimesh.Trimesh],
                              labels: Optional[List[str]] = None,
                              title: str = "Quality Levels",
                              save_path: Optional[str] = None) -> plt.Figure:
        """
        Plot multiple meshes at different quality levels.

        Args:
            meshes: List of meshes at different levels
            labels: Optional labels for each mesh
            title: Plot title
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        n = len(meshes)
        cols = min(4, n)
        rows = (n + cols - 1) // cols

        fig = plt.figure(figsize=(5 * cols, 5 * rows))

        for i, mesh in enumerate(meshes):
            ax = fig.add_subplot(rows, cols, i + 1, projection='3d')

            if labels and i < len(labels):
                label = labels[i]
            else:
                ratio = len(mesh.vertices) / max(1, len(meshes[0].vertices))
                label = f"{len(mesh.vertices)} vertices ({ratio * 100:.1f}%)"

            self._plot_single_mesh(ax, mesh, label, show_wireframe=True)

        fig.suptitle(title, fontsize=14, fontweight='bold')
        fig.tight_layout()
        self._save(fig, save_path, "quality levels")

        return fig

    def plot_statistics(self, level_metrics: Sequence[Dict[str, float]],
                        save_path: Optional[str] = None) -> plt.Figure:
        """
        Plot counts, error and timing for a sequence of visited levels.

        Args:
            level_metrics: Metrics dictionaries from MeshEvaluator.evaluate_levels,
                           in visiting order
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        fig, axes = plt.subplots(1, 3, figsize=(15, 4))

        visits = range(len(level_metrics))
        labels = [f"{m['reduction_percent']:.0f}%" for m in level_metrics]

        axes[0].plot(visits, [m['reduced_vertices'] for m in level_metrics],
                     'o-', color='forestgreen', label='Vertices')
        axes[0].plot(visits, [m['reduced_triangles'] for m in level_metrics],
                     's-', color='steelblue', label='Triangles')
        axes[0].set_title('Counts per Visit')
        axes[0].legend()

        axes[1].plot(visits, [m.get('hausdorff_distance', np.nan) for m in level_metrics],
                     'o-', color='crimson')
        axes[1].set_ylabel('Hausdorff Distance')
        axes[1].set_title('Geometric Error per Visit')

        axes[2].bar(visits, [m.get('runtime', 0.0) for m in level_metrics], color='purple')
        axes[2].set_ylabel('Runtime (seconds)')
        axes[2].set_title('Time to Reach Level')

        for ax in axes:
            ax.set_xticks(list(visits))
            ax.set_xticklabels(labels)
            ax.set_xlabel('Requested Reduction')

        fig.suptitle('Reduction Statistics', fontsize=14, fontweight='bold')
        fig.tight_layout()
        self._save(fig, save_path, "statistics")

        return fig

    def interactive_view(self, mesh: trimesh.Trimesh):
        """
        Open an interactive 3D viewer for the mesh.

        Uses trimesh's built-in viewer, falling back to matplotlib.
        """
        try:
            mesh.show()
        except Exception as e:
            print(f"Could not open interactive viewer: {e}")
            print("Falling back to matplotlib view...")
            fig = plt.figure(figsize=(10, 10))
            ax = fig.add_subplot(111, projection='3d')
            self._plot_single_mesh(ax, mesh, f"Mesh ({len(mesh.faces)} faces)", True)
            plt.show()
