"""
Solver Callbacks - progress reporting while CP-SAT searches.
"""

from __future__ import annotations

import logging

from ortools.sat.python import cp_model

from .logging import ConstraintLogger

logger = logging.getLogger(__name__)

# Detailed bound/gap lines are only written for the first few solutions
DETAILED_SOLUTIONS = 5


class SolverProgressCallback(cp_model.CpSolverSolutionCallback):
    """Records every improving solution with its objective and bound."""

    def __init__(self, constraint_logger: ConstraintLogger, debug_mode: bool = False) -> None:
        cp_model.CpSolverSolutionCallback.__init__(self)
        self.constraint_logger = constraint_logger
        self.debug_mode = debug_mode
        # (wall time, objective, best bound) per improving solution
        self.history: list[tuple[float, float, float]] = []

    @property
    def solution_count(self) -> int:
        return len(self.history)

    def on_solution_callback(self) -> None:
        objective, bound = self.ObjectiveValue(), self.BestObjectiveBound()
        self.history.append((self.WallTime(), objective, bound))

        self.constraint_logger.log_progress(
            f"Solution #{self.solution_count} at {self.WallTime():.2f}s: objective {objective:g}, bound {bound:g}"
        )
        if self.debug_mode and self.solution_count <= DETAILED_SOLUTIONS:
            gap = abs(objective - bound)
            relative = gap / abs(objective) if objective else (0.0 if gap == 0 else float("inf"))
            logger.debug(f"  Absolute gap {gap:g}, relative gap {relative:.2%}")
