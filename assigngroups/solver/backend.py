"""
Solver backend - the blocking optimize call and its result.

Model builders create a cp_model.CpModel and hand it to a SolverBackend. The
backend owns everything solver-specific: parameters, status mapping and value
retrieval. Builders only see TerminationStatus and SolveResult.value(), so a
different backend can be injected (tests use this to force statuses).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from ortools.sat.python import cp_model
from pydantic import BaseModel, Field

from assigngroups.errors import SolverError
from assigngroups.settings import Settings, get_settings

from .callbacks import SolverProgressCallback
from .logging import ConstraintLogger

logger = logging.getLogger(__name__)


class TerminationStatus(str, Enum):
    """Outcome of one solve call."""

    OPTIMAL = "OPTIMAL"
    TIME_LIMIT = "TIME_LIMIT"
    INFEASIBLE = "INFEASIBLE"
    OTHER = "OTHER"


class SolverOptions(BaseModel):
    """Per-call solver configuration.

    tuning entries are passed to the solver verbatim (name -> value); this
    layer does not interpret or validate them.
    """

    verbose: bool = False
    time_limit_seconds: float = Field(default=60.0, gt=0)
    tuning: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides: Any) -> SolverOptions:
        settings = settings or get_settings()
        values: dict[str, Any] = {
            "verbose": settings.verbose,
            "time_limit_seconds": settings.time_limit_seconds,
        }
        values.update(overrides)
        return cls(**values)


@dataclass
class SolveResult:
    """Values and status returned by a backend."""

    status: TerminationStatus
    has_solution: bool
    objective_value: float | None = None
    best_bound: float | None = None
    wall_time: float = 0.0
    # (wall time, objective, best bound) of every improving solution, in order
    solution_history: list[tuple[float, float, float]] = field(default_factory=list)
    value_of: Callable[[Any], float] | None = field(default=None, repr=False)

    def value(self, var: Any) -> float:
        """Raw value of a decision variable in the best solution found."""
        if not self.has_solution or self.value_of is None:
            raise SolverError(f"No solution available (status {self.status.value})")
        return self.value_of(var)

    @property
    def relative_gap(self) -> float | None:
        """|objective - bound| / |objective|, or None when either is unknown."""
        if self.objective_value is None or self.best_bound is None:
            return None
        gap = abs(self.objective_value - self.best_bound)
        if gap == 0:
            return 0.0
        if self.objective_value == 0:
            return math.inf
        return gap / abs(self.objective_value)


class SolverBackend(Protocol):
    """Anything that can optimize a CP-SAT model and report the outcome."""

    def solve(
        self,
        model: cp_model.CpModel,
        options: SolverOptions,
        constraint_logger: ConstraintLogger | None = None,
    ) -> SolveResult: ...


def map_status(status: Any) -> TerminationStatus:
    """Map a CP-SAT status onto TerminationStatus.

    CP-SAT reports FEASIBLE when a limit stopped the search before optimality
    was proven; with only a time budget configured that limit is the clock.
    """
    if status == cp_model.OPTIMAL:
        return TerminationStatus.OPTIMAL
    if status == cp_model.FEASIBLE:
        return TerminationStatus.TIME_LIMIT
    if status == cp_model.INFEASIBLE:
        return TerminationStatus.INFEASIBLE
    return TerminationStatus.OTHER


class CpSatBackend:
    """OR-Tools CP-SAT backend."""

    def solve(
        self,
        model: cp_model.CpModel,
        options: SolverOptions,
        constraint_logger: ConstraintLogger | None = None,
    ) -> SolveResult:
        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = options.time_limit_seconds
        solver.parameters.log_search_progress = options.verbose
        for name, value in options.tuning.items():
            # Unknown names raise from the protobuf itself
            setattr(solver.parameters, name, value)

        constraint_logger = constraint_logger or ConstraintLogger()
        callback = SolverProgressCallback(constraint_logger, debug_mode=constraint_logger.debug_mode)

        logger.info(f"Solving with CP-SAT (time limit {options.time_limit_seconds}s)")
        raw_status = solver.Solve(model, callback)
        status = map_status(raw_status)
        has_solution = raw_status in (cp_model.OPTIMAL, cp_model.FEASIBLE)

        constraint_logger.log_progress(
            f"Solver finished with {solver.StatusName(raw_status)} after {solver.WallTime():.2f}s "
            f"({callback.solution_count} improving solutions)"
        )

        if not has_solution:
            return SolveResult(
                status=status, has_solution=False, wall_time=solver.WallTime(), solution_history=callback.history
            )

        return SolveResult(
            status=status,
            has_solution=True,
            objective_value=solver.ObjectiveValue(),
            best_bound=solver.BestObjectiveBound(),
            wall_time=solver.WallTime(),
            solution_history=callback.history,
            value_of=lambda var: float(solver.Value(var)),
        )
