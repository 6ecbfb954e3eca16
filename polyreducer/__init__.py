"""
Interactive Polygon Reduction
=============================

Progressive mesh simplification by cheapest-edge collapse, with a
replayable collapse log so any quality level can be revisited at
interactive speed, and seam preservation so independently reduced
meshes stay connected.
"""

from .mesh_graph import MeshGraph, InvariantViolation
from .seams import find_seams
from .costs import CostModel, PreserveDetailCost, RemoveDetailCost, get_cost_model
from .collapse_queue import CollapseQueue, Edge
from .collapse_step import CollapseStep
from .simplifier import Simplifier
from .reducer import MeshReducer, MeshInfo, MeshRegistry, ReducedMesh
from .visualization import MeshVisualizer
from .evaluation import MeshEvaluator

__version__ = "1.0.0"
__all__ = [
    "MeshGraph", "InvariantViolation", "find_seams",
    "CostModel", "PreserveDetailCost", "RemoveDetailCost", "get_cost_model",
    "CollapseQueue", "Edge", "CollapseStep", "Simplifier",
    "MeshReducer", "MeshInfo", "MeshRegistry", "ReducedMesh",
    "MeshVisualizer", "MeshEvaluator",
]
