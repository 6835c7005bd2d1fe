"""
Shared fixtures for solver unit tests.

Provides student factories, a minimal ImmersionContext builder for isolated
constraint tests, and backends that force particular solver outcomes.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Sequence

import pytest
from ortools.sat.python import cp_model

from assigngroups.models import ImmersionStudent, PartnerStudent
from assigngroups.preferences import Matrix, OptionLayout, is_sentinel_week
from assigngroups.solver.backend import CpSatBackend, SolverOptions, SolveResult, TerminationStatus
from assigngroups.solver.constraints.base import ImmersionContext, ImmersionFormulation, ImmersionWeights
from assigngroups.solver.logging import ConstraintLogger


def create_immersion_students(programs: str = "123123") -> list[ImmersionStudent]:
    """StudentA.. with programs Program<digit>, all with last name 'Last'."""
    letters = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    return [
        ImmersionStudent(first_name=f"Student{letter}", last_name="Last", program=f"Program{program}")
        for letter, program in zip(letters, programs)
    ]


def create_partner_students(scores: Sequence[float] = (1, 2, 3, 1, 2, 3)) -> list[PartnerStudent]:
    letters = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    return [
        PartnerStudent(first_name=f"Student{letter}", last_name="Last", score=score)
        for letter, score in zip(letters, scores)
    ]


def zeros(rows: int, columns: int) -> list[list[float]]:
    return [[0.0] * columns for _ in range(rows)]


def build_immersion_context(
    students: list[ImmersionStudent],
    preferences: Sequence[Matrix],
    weights: ImmersionWeights | None = None,
    formulation: ImmersionFormulation = ImmersionFormulation.LINEAR,
    balance_includes_sentinel_weeks: bool = True,
    scale: int = 1,
) -> ImmersionContext:
    """
    Build a minimal ImmersionContext for constraint testing.

    Creates the indicator variables only; tests add whichever constraints
    they exercise.
    """
    model = cp_model.CpModel()
    layout = OptionLayout.from_preferences(preferences)

    indicators: dict[tuple[int, int], cp_model.IntVar] = {}
    for student_idx in range(len(students)):
        for column in range(layout.ncolumns):
            indicators[(student_idx, column)] = model.NewBoolVar(f"s{student_idx}_c{column}")

    return ImmersionContext(
        model=model,
        indicators=indicators,
        students=students,
        preferences=preferences,
        layout=layout,
        first_free_week=[len(s.assigned) for s in students],
        weights=weights or ImmersionWeights(),
        formulation=formulation,
        scale=scale,
        balance_includes_sentinel_weeks=balance_includes_sentinel_weeks,
        constraint_logger=ConstraintLogger(),
        sentinel_weeks=frozenset(idx for idx, week in enumerate(preferences) if is_sentinel_week(week)),
    )


def minimize_terms(ctx: ImmersionContext, terms: list[tuple[cp_model.IntVar, int]]) -> cp_model.CpSolver:
    """Minimize the given terms and return the solved CpSolver."""
    ctx.model.Minimize(sum(coefficient * var for var, coefficient in terms))
    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = 10
    status = solver.Solve(ctx.model)
    assert status == cp_model.OPTIMAL
    return solver


class UnreachableBackend:
    """Backend that fails the test if anything tries to solve."""

    def solve(self, model, options, constraint_logger=None) -> SolveResult:
        raise AssertionError("solver backend must not be called")


class ForcedStatusBackend(CpSatBackend):
    """Solves normally, then reports the given status (and optionally a bound)."""

    def __init__(self, status: TerminationStatus, best_bound: float | None = None):
        self.status = status
        self.best_bound = best_bound
        self.calls = 0

    def solve(self, model, options, constraint_logger=None) -> SolveResult:
        self.calls += 1
        result = super().solve(model, options, constraint_logger)
        best_bound = self.best_bound if self.best_bound is not None else result.best_bound
        return dataclasses.replace(result, status=self.status, best_bound=best_bound)


class NoSolutionBackend:
    """Reports infeasibility without a solution."""

    def solve(self, model, options, constraint_logger=None) -> SolveResult:
        return SolveResult(status=TerminationStatus.INFEASIBLE, has_solution=False)


@pytest.fixture
def solver_options() -> SolverOptions:
    return SolverOptions(time_limit_seconds=30)


class ZeroValueBackend:
    """Claims an optimal solution in which every variable is 0."""

    def solve(self, model, options, constraint_logger=None) -> SolveResult:
        return SolveResult(
            status=TerminationStatus.OPTIMAL,
            has_solution=True,
            objective_value=0.0,
            best_bound=0.0,
            value_of=lambda var: 0.0,
        )
