"""
Interactive Polygon Reduction - Main Demo
=========================================

Demonstrates progressive mesh reduction with cached collapse steps.

This script:
1. Loads a mesh or creates a sample mesh
2. Reduces it to several quality levels
3. Scrubs back and forth between levels, replaying cached steps
4. Computes quantitative metrics and compares cost models
5. Saves reduced meshes and plots
"""

import argparse
import time
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import trimesh

from polyreducer.costs import COST_MODELS, get_cost_model
from polyreducer.evaluation import MeshEvaluator
from polyreducer.reducer import MeshReducer
from polyreducer.utils import create_sample_mesh, load_mesh, print_mesh_info
from polyreducer.visualization import MeshVisualizer


def demo_quality_levels(mesh: trimesh.Trimesh, reducer: MeshReducer,
                        percents: list, output_dir: Path,
                        mesh_name: str = "mesh"):
    """
    Reduce to each requested level, export it, and plot the levels.
    """
    print("\n" + "=" * 60)
    print("QUALITY LEVELS")
    print("=" * 60)

    visualizer = MeshVisualizer()
    evaluator = MeshEvaluator()

    metrics_list = evaluator.evaluate_levels(mesh, reducer, percents)
    reduced_meshes = []

    for percent, metrics in zip(percents, metrics_list):
        reduced = reducer.to_trimesh(percent)
        reduced_meshes.append(reduced)

        print(f"\n--- Reduction {percent:.0f}% ---")
        print(f"  Vertices: {metrics['original_vertices']} -> {metrics['reduced_vertices']}")
        print(f"  Triangles: {metrics['original_triangles']} -> {metrics['reduced_triangles']}")
        print(f"  Hausdorff: {metrics['hausdorff_distance']:.6f}")
        print(f"  Runtime: {metrics['runtime']:.3f}s")

        output_path = output_dir / f"{mesh_name}_reduced_{int(percent)}pct.ply"
        reduced.export(str(output_path))
        print(f"Saved: {output_path}")

    fig = visualizer.plot_multi_resolution(
        [mesh] + reduced_meshes,
        ["Original"] + [f"{p:.0f}% reduced" for p in percents],
        title=f"{mesh_name} - Quality Levels",
        save_path=str(output_dir / f"{mesh_name}_levels.png")
    )
    plt.close(fig)

    fig = visualizer.plot_seams(
        reducer,
        title=f"{mesh_name} - Seams at {reducer.reduction_percent:.0f}%",
        save_path=str(output_dir / f"{mesh_name}_seams.png")
    )
    plt.close(fig)

    print("\n" + evaluator.generate_report(metrics_list[-1], reducer.simplifier.cost_model.name))

    return metrics_list


def demo_scrubbing(mesh: trimesh.Trimesh, reducer: MeshReducer,
                   output_dir: Path, mesh_name: str = "mesh"):
    """
    Move a quality slider back and forth and time each move.

    The first sweep computes collapse steps; later visits only replay them.
    """
    print("\n" + "=" * 60)
    print("SLIDER SCRUBBING")
    print("=" * 60)

    visualizer = MeshVisualizer()
    evaluator = MeshEvaluator(sample_points=2000)

    sweep = [0, 25, 50, 75, 50, 25, 0, 75]
    steps_before = reducer.simplifier.step_count

    level_metrics = evaluator.evaluate_levels(mesh, reducer, sweep)

    for metrics in level_metrics:
        print(f"  {metrics['reduction_percent']:>5.1f}% -> "
              f"{metrics['reduced_vertices']:>6} vertices, "
              f"{metrics['step_count']:>6} cached steps, "
              f"{metrics['runtime'] * 1000:>8.2f} ms")

    print(f"  New steps computed during sweep: {reducer.simplifier.step_count - steps_before}")

    fig = visualizer.plot_statistics(
        level_metrics,
        save_path=str(output_dir / f"{mesh_name}_scrubbing.png")
    )
    plt.close(fig)

    return level_metrics


def demo_cost_comparison(mesh: trimesh.Trimesh, percent: float,
                         output_dir: Path, mesh_name: str = "mesh"):
    """
    Compare the two cost models at one reduction level.
    """
    print("\n" + "=" * 60)
    print("COST MODEL COMPARISON")
    print("=" * 60)

    visualizer = MeshVisualizer()
    evaluator = MeshEvaluator()

    results = evaluator.compare_cost_models(mesh, percent, sorted(COST_MODELS))

    print("\n" + "-" * 80)
    print(f"{'Cost model':<20} {'Vertices':>10} {'Hausdorff':>12} {'Chamfer':>12} {'Runtime':>10}")
    print("-" * 80)

    for name, result in results.items():
        m = result['metrics']
        print(f"{name:<20} {m['reduced_vertices']:>10} "
              f"{m['hausdorff_distance']:>12.6f} "
              f"{m['chamfer_distance']:>12.6f} "
              f"{m['runtime']:>10.3f}s")

    print("-" * 80)

    fig = visualizer.plot_multi_resolution(
        [r['reducer'].to_trimesh() for r in results.values()],
        list(results),
        title=f"{mesh_name} - Cost Models ({percent:.0f}% reduction)",
        save_path=str(output_dir / f"{mesh_name}_cost_models.png")
    )
    plt.close(fig)

    return results


def main():
    """Main demo entry point."""
    parser = argparse.ArgumentParser(
        description="Interactive polygon reduction demo"
    )
    parser.add_argument(
        "--mesh", "-m", type=str, default=None,
        help="Path to input mesh file. If not provided, uses a sample mesh."
    )
    parser.add_argument(
        "--sample", "-s", type=str, default="sphere",
        choices=["cube", "sphere", "torus", "cylinder", "grid"],
        help="Sample mesh to create when no mesh file is given"
    )
    parser.add_argument(
        "--output", "-o", type=str, default="output",
        help="Output directory for results"
    )
    parser.add_argument(
        "--percent", "-p", type=float, action="append", default=None,
        help="Reduction percentage to export (repeatable, default: 25 50 75)"
    )
    parser.add_argument(
        "--cost", "-c", type=str, default="preserve_detail",
        choices=sorted(COST_MODELS),
        help="Collapse cost model (default: preserve_detail)"
    )
    parser.add_argument(
        "--quick", "-q", action="store_true",
        help="Quick mode - skip scrubbing and cost comparison demos"
    )
    parser.add_argument(
        "--interactive", "-i", action="store_true",
        help="Open interactive 3D viewer on the last level"
    )

    args = parser.parse_args()
    percents = args.percent or [25.0, 50.0, 75.0]

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    print("=" * 60)
    print("INTERACTIVE POLYGON REDUCTION")
    print("=" * 60)

    if args.mesh:
        print(f"\nLoading mesh from: {args.mesh}")
        mesh = load_mesh(args.mesh)
        mesh_name = Path(args.mesh).stem
    else:
        print("\nNo mesh specified, creating sample mesh...")
        mesh = create_sample_mesh(args.sample)
        mesh_name = f"sample_{args.sample}"

    print_mesh_info(mesh, mesh_name)

    start_time = time.time()
    reducer = MeshReducer.from_trimesh(mesh, cost_model=get_cost_model(args.cost), name=mesh_name)
    print(f"\nBuilt reducer in {time.time() - start_time:.3f}s "
          f"({reducer.info.seam_vertex_count} seam vertices)")

    demo_quality_levels(mesh, reducer, percents, output_dir, mesh_name)

    if not args.quick:
        demo_scrubbing(mesh, reducer, output_dir, mesh_name)
        demo_cost_comparison(mesh, percents[-1], output_dir, mesh_name)

    if args.interactive:
        print("\nOpening interactive viewer...")
        MeshVisualizer().interactive_view(reducer.to_trimesh(percents[-1]))

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print(f"Results saved to: {output_dir.absolute()}")
    print("=" * 60)


if __name__ == "__main__":
    main()
