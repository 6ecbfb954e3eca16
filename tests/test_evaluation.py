"""Tests for polyreducer.evaluation and polyreducer.visualization."""

import matplotlib.pyplot as plt
import pytest

from polyreducer.evaluation import MeshEvaluator
from polyreducer.reducer import MeshReducer
from polyreducer.visualization import MeshVisualizer


@pytest.fixture
def evaluator() -> MeshEvaluator:
    return MeshEvaluator(sample_points=500)


class TestMeshEvaluator:
    def test_identical_meshes(self, evaluator, icosphere):
        reducer = MeshReducer.from_trimesh(icosphere)
        metrics = evaluator.compute_all_metrics(icosphere, reducer)

        assert metrics['reduced_vertices'] == 42
        assert metrics['area_error'] == pytest.approx(0.0)
        assert metrics['seams_preserved'] == 1

    def test_reduced_level(self, evaluator, icosphere):
        reducer = MeshReducer.from_trimesh(icosphere)
        reducer.set_reduction_percent(50)
        metrics = evaluator.compute_all_metrics(icosphere, reducer)

        assert metrics['reduced_vertices'] == 21
        assert metrics['reduced_triangles'] < 80
        assert metrics['hausdorff_distance'] >= metrics['hausdorff_forward']
        assert metrics['chamfer_distance'] >= 0.0

    def test_evaluate_levels(self, evaluator, wavy_grid):
        reducer = MeshReducer.from_trimesh(wavy_grid)
        results = evaluator.evaluate_levels(wavy_grid, reducer, [25, 75, 25])

        assert [r['reduced_vertices'] for r in results] == [55, 37, 55]
        assert all(r['seams_preserved'] for r in results)
        assert results[1]['step_count'] == results[2]['step_count'] == 27
        assert all('runtime' in r for r in results)

    def test_compare_cost_models(self, evaluator, cube):
        results = evaluator.compare_cost_models(cube, 50)

        assert set(results) == {"preserve_detail", "remove_detail"}
        for entry in results.values():
            assert entry['metrics']['reduced_vertices'] == 4

    def test_report(self, evaluator, cube):
        reducer = MeshReducer.from_trimesh(cube)
        reducer.set_reduction_percent(25)
        report = evaluator.generate_report(evaluator.compute_all_metrics(cube, reducer))

        assert "Hausdorff Distance" in report
        assert "preserved" in report


class TestMeshVisualizer:
    def test_plot_seams(self, wavy_grid):
        reducer = MeshReducer.from_trimesh(wavy_grid)
        reducer.set_reduction_percent(50)

        fig = MeshVisualizer(figsize=(6, 4)).plot_seams(reducer)
        assert isinstance(fig, plt.Figure)
        plt.close(fig)

    def test_plot_comparison(self, icosphere):
        reducer = MeshReducer.from_trimesh(icosphere)

        fig = MeshVisualizer(figsize=(6, 4)).plot_mesh_comparison(
            icosphere, reducer.to_trimesh(60))
        assert isinstance(fig, plt.Figure)
        plt.close(fig)
