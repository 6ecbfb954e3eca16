"""
Simplifier
==========

Drives iterative edge collapse over a MeshGraph and keeps every collapse
it has computed, so that any quality level visited before can be reached
again by replaying steps forward or backward instead of rescoring.
"""

import math
from typing import Callable, FrozenSet, List, Optional, Tuple

from .collapse_queue import CollapseQueue, Edge
from .collapse_step import CollapseStep
from .costs import CostModel, PreserveDetailCost, best_collapse
from .mesh_graph import InvariantViolation, MeshGraph
from .seams import find_seams


class Simplifier:
    """
    Edge-collapse simplifier with a replayable step log.

    The log only grows. A cursor points at the last applied step: moving
    to fewer vertices redoes steps ahead of the cursor (or computes new
    ones once the log is exhausted), moving to more vertices undoes steps
    behind it.
    """

    def __init__(self, graph: MeshGraph,
                 cost_model: Optional[CostModel] = None,
                 seams: Optional[FrozenSet[int]] = None,
                 progress_callback: Optional[Callable[[float], None]] = None):
        """
        Initialize the simplifier and score every collapsible vertex.

        Args:
            graph: Mesh graph to simplify; owned by this simplifier from now on
            cost_model: Collapse scoring strategy (default PreserveDetailCost)
            seams: Precomputed seam vertices (computed from graph if None)
            progress_callback: Optional callback receiving pass progress in [0, 1]
        """
        self.graph = graph
        self.cost_model = cost_model if cost_model is not None else PreserveDetailCost()
        self.seams = seams if seams is not None else find_seams(graph)
        self.progress_callback = progress_callback

        self._steps: List[CollapseStep] = []
        self._last_applied_step = -1
        self._busy = False

        self.queue = self._initial_queue()

    @property
    def steps(self) -> Tuple[CollapseStep, ...]:
        return tuple(self._steps)

    @property
    def step_count(self) -> int:
        return len(self._steps)

    @property
    def last_applied_step(self) -> int:
        """Index of the last applied step, -1 when none is applied."""
        return self._last_applied_step

    @property
    def vertex_count(self) -> int:
        return self.graph.vertex_count

    @property
    def current_vertex_count(self) -> int:
        return self.graph.live_vertex_count

    def get_target_vertex_count(self, reduction_factor: float) -> int:
        """
        Vertex count for a reduction factor.

        Seam vertices are always kept; the remaining vertices are reduced
        proportionally.

        Args:
            reduction_factor: Fraction of collapsible vertices to remove, in [0, 1]
        """
        untouchable = len(self.seams)
        touchable = self.graph.vertex_count - untouchable
        return untouchable + math.floor(touchable * (1.0 - reduction_factor))

    def set_quality(self, reduction_factor: float):
        """Collapse or restore vertices until the reduction factor is met."""
        self.set_target_vertex_count(self.get_target_vertex_count(reduction_factor))

    def set_target_vertex_count(self, target: int):
        """
        Move the mesh to the given live vertex count.

        Args:
            target: Desired number of live vertices; values below the seam
                    count cannot be reached and exhaust the queue
        """
        if self._busy:
            raise InvariantViolation("Simplification pass already in progress on this graph")

        self._busy = True
        try:
            self._move_to(target)
        finally:
            self._busy = False

    def _move_to(self, target: int):
        start = self.current_vertex_count
        total = max(1, abs(start - target))
        last_progress = 0.0

        while self.current_vertex_count > target:
            if self._last_applied_step == len(self._steps) - 1:
                self._apply_new_step()
            else:
                self._redo_step()
            last_progress = self._report_progress(start, total, last_progress)

        while self._last_applied_step > -1 and self.current_vertex_count < target:
            self._undo_step()
            last_progress = self._report_progress(start, total, last_progress)

    def _report_progress(self, start: int, total: int, last_progress: float) -> float:
        if self.progress_callback is None:
            return last_progress

        progress = abs(start - self.current_vertex_count) / total
        # Update every 5%
        if progress - last_progress >= 0.05 or progress >= 1.0 > last_progress:
            self.progress_callback(min(1.0, progress))
            return progress

        return last_progress

    def _redo_step(self):
        self._steps[self._last_applied_step + 1].apply()
        self._last_applied_step += 1

    def _undo_step(self):
        self._steps[self._last_applied_step].undo()
        self._last_applied_step -= 1

    def _apply_new_step(self):
        edge = self.queue.pop_minimum_cost()

        step = CollapseStep(self.graph, edge.from_vertex, edge.to_vertex)

        # Applying the step rewrites u's neighbor set
        neighbors = set(self.graph.neighbor_vertices[edge.from_vertex])

        step.apply()

        if step.is_isolated_deletion:
            rescored = []
        else:
            try:
                rescored = self._score_vertices(n for n in neighbors if n not in self.seams)
            except Exception:
                # Back to the state before the pop
                step.undo()
                self.queue.add(edge)
                raise

        self._steps.append(step)
        self._last_applied_step += 1

        for new_edge in rescored:
            self.queue.remove_by_vertex(new_edge.from_vertex)
            self.queue.add(new_edge)

    def _initial_queue(self) -> CollapseQueue:
        queue = CollapseQueue()

        for u in range(self.graph.vertex_count):
            # Seams are untouchable
            if u in self.seams or u in self.graph.deleted_vertices:
                continue

            cost, target = best_collapse(u, self.graph, self.cost_model)
            queue.add(Edge(cost, u, target))

        return queue

    def _score_vertices(self, vertices) -> List[Edge]:
        """Best collapse of each vertex, computed without touching the queue."""
        edges = []
        for u in sorted(vertices):
            cost, target = best_collapse(u, self.graph, self.cost_model)
            edges.append(Edge(cost, u, target))
        return edges
