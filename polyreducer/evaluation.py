"""
Reduction Evaluation
====================

Quantitative checks of reduced quality levels against the original mesh:
- Hausdorff and Chamfer distance
- Vertex/triangle count statistics
- Seam preservation
- Cost model comparison
"""

import time
from typing import Dict, List, Sequence, Tuple

import numpy as np
import trimesh
from scipy.spatial import cKDTree

from .costs import get_cost_model
from .reducer import MeshReducer


class MeshEvaluator:
    """
    Evaluation tools for assessing reduction quality.
    """

    def __init__(self, sample_points: int = 5000):
        """
        Initialize evaluator.

        Args:
            sample_points: Number of surface points sampled per mesh
        """
        self.sample_points = sample_points

    def _sample(self, mesh: trimesh.Trimesh) -> np.ndarray:
        """Sample the surface, falling back to vertices for empty meshes."""
        if len(mesh.faces) == 0 or mesh.area <= 0:
            return np.asarray(mesh.vertices)
        return mesh.sample(self.sample_points)

    def hausdorff_distance(self, mesh1: trimesh.Trimesh,
                           mesh2: trimesh.Trimesh) -> Tuple[float, float, float]:
        """
        Compute symmetric Hausdorff distance between two meshes.

        Returns:
            Tuple of (symmetric_hausdorff, forward, backward) distances
        """
        points1 = self._sample(mesh1)
        points2 = self._sample(mesh2)

        forward, _ = cKDTree(points2).query(points1)
        backward, _ = cKDTree(points1).query(points2)

        hausdorff_forward = float(np.max(forward))
        hausdorff_backward = float(np.max(backward))

        return max(hausdorff_forward, hausdorff_backward), hausdorff_forward, hausdorff_backward

    def chamfer_distance(self, mesh1: trimesh.Trimesh,
                         mesh2: trimesh.Trimesh) -> float:
        """Symmetric Chamfer distance (sum of mean squared nearest distances)."""
        points1 = self._sample(mesh1)
        points2 = self._sample(mesh2)

        forward, _ = cKDTree(points2).query(points1)
        backward, _ = cKDTree(points1).query(points2)

        return float(np.mean(forward ** 2)) + float(np.mean(backward ** 2))

    def seams_preserved(self, reducer: MeshReducer) -> bool:
        """Check that no seam vertex has been deleted."""
        return reducer.seams.isdisjoint(reducer.graph.deleted_vertices)

    def compute_all_metrics(self, original: trimesh.Trimesh,
                            reducer: MeshReducer) -> Dict[str, float]:
        """
        Compute metrics for the reducer's current quality level.

        Args:
            original: Original mesh
            reducer: Reducer positioned at the level to evaluate

        Returns:
            Dictionary of metric names to values
        """
        reduced = reducer.to_trimesh()
        info = reducer.info

        metrics = {
            'reduction_percent': reducer.reduction_percent,
            'original_vertices': info.original_vertex_count,
            'reduced_vertices': info.reduced_vertex_count,
            'original_triangles': info.original_triangle_count,
            'reduced_triangles': info.reduced_triangle_count,
            'seam_vertices': info.seam_vertex_count,
            'vertex_ratio': info.vertex_ratio,
            'triangle_ratio': info.triangle_ratio,
            'seams_preserved': int(self.seams_preserved(reducer)),
            'step_count': reducer.simplifier.step_count,
        }

        hausdorff, forward, backward = self.hausdorff_distance(original, reduced)
        metrics['hausdorff_distance'] = hausdorff
        metrics['hausdorff_forward'] = forward
        metrics['hausdorff_backward'] = backward
        metrics['chamfer_distance'] = self.chamfer_distance(original, reduced)

        original_area = float(original.area)
        metrics['area_error'] = abs(float(reduced.area) - original_area) / max(original_area, 1e-10)

        return metrics

    def evaluate_levels(self, original: trimesh.Trimesh, reducer: MeshReducer,
                        percents: Sequence[float]) -> List[Dict[str, float]]:
        """
        Visit several quality levels and collect metrics and timings for each.
        """
        results = []

        for percent in percents:
            start_time = time.time()
            reducer.set_reduction_percent(percent)
            runtime = time.time() - start_time

            metrics = self.compute_all_metrics(original, reducer)
            metrics['runtime'] = runtime
            results.append(metrics)

        return results

    def compare_cost_models(self, original: trimesh.Trimesh,
                            reduction_percent: float,
                            cost_names: Sequence[str] = ("preserve_detail", "remove_detail")
                            ) -> Dict[str, Dict]:
        """
        Reduce the same mesh with each cost model.

        Returns:
            Dictionary of cost model names to their reducer and metrics
        """
        results = {}

        for name in cost_names:
            print(f"Running {name}...")

            start_time = time.time()
            reducer = MeshReducer.from_trimesh(original, cost_model=get_cost_model(name))
            reducer.set_reduction_percent(reduction_percent)
            runtime = time.time() - start_time

            metrics = self.compute_all_metrics(original, reducer)
            metrics['runtime'] = runtime

            results[name] = {
                'reducer': reducer,
                'metrics': metrics
            }

        return results

    def generate_report(self, metrics: Dict[str, float],
                        method_name: str = "preserve_detail") -> str:
        """
        Generate a human-readable evaluation report.

        Args:
            metrics: Dictionary of metric values
            method_name: Name of the cost model

        Returns:
            Formatted report string
        """
        lines = [
            "=" * 60,
            f"Polygon Reduction Report - {method_name}",
            "=" * 60,
            "",
            "MESH STATISTICS",
            "-" * 40,
            f"  Original:    {metrics.get('original_triangles', 'N/A'):>8} triangles, "
            f"{metrics.get('original_vertices', 'N/A'):>8} vertices",
            f"  Reduced:     {metrics.get('reduced_triangles', 'N/A'):>8} triangles, "
            f"{metrics.get('reduced_vertices', 'N/A'):>8} vertices",
            f"  Seams:       {metrics.get('seam_vertices', 'N/A'):>8} vertices "
            f"({'preserved' if metrics.get('seams_preserved') else 'BROKEN'})",
            f"  Reduction:   {metrics.get('reduction_percent', 0):>7.2f}% requested, "
            f"{metrics.get('vertex_ratio', 0) * 100:.2f}% of vertices kept",
            "",
            "GEOMETRIC ACCURACY",
            "-" * 40,
            f"  Hausdorff Distance:    {metrics.get('hausdorff_distance', np.nan):>12.6f}",
            f"    Forward:             {metrics.get('hausdorff_forward', np.nan):>12.6f}",
            f"    Backward:            {metrics.get('hausdorff_backward', np.nan):>12.6f}",
            f"  Chamfer Distance:      {metrics.get('chamfer_distance', np.nan):>12.6f}",
            f"  Area Error:            {metrics.get('area_error', 0) * 100:>11.4f}%",
            "",
            "=" * 60,
        ]

        if 'runtime' in metrics:
            lines.insert(-1, f"  Runtime:               {metrics['runtime']:>11.4f} seconds")

        return "\n".join(lines)
