"""
Immersion Assignment Solver - multi-week option assignment.

Each student takes one option per week. The minimized objective combines
    1. preference cost of the chosen options
    2. per-week spread between the fullest and emptiest option
    3. extra same-program students sharing an option
    4. extra weeks a pair of students shares an option
each with its own non-negative weight.

Students keep their assignment history between calls: weeks already present
in ImmersionStudent.assigned are fixed and only the remaining weeks are
optimized, then appended. Use assigngroups.models.unassign() to start over.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from ortools.sat.python import cp_model

from assigngroups.models import ImmersionStudent
from assigngroups.preferences import Matrix, is_sentinel_week
from assigngroups.settings import Settings, get_settings
from assigngroups.validation import validate_immersion_inputs

from .backend import CpSatBackend, SolverBackend, SolverOptions, TerminationStatus
from .constraints import (
    ConstraintBuilder,
    ImmersionContext,
    ImmersionFormulation,
    ImmersionWeights,
    ObjectiveBuilder,
    add_group_size_terms,
    add_preassignment_constraints,
    add_preference_cost_terms,
    add_repeat_partner_terms,
    add_same_program_terms,
    add_week_exclusivity_constraints,
)
from .extraction import apply_week_choices, extract_week_choices
from .logging import ConstraintLogger

logger = logging.getLogger(__name__)

ALL_ASSIGNED_WARNING = "All students are already assigned to groups (use `unassign` to reset)"
NO_STUDENTS_WARNING = "No students to assign"

HARD_CONSTRAINTS: tuple[ConstraintBuilder, ...] = (
    add_preassignment_constraints,
    add_week_exclusivity_constraints,
)

OBJECTIVE_BUILDERS: tuple[ObjectiveBuilder, ...] = (
    add_preference_cost_terms,
    add_group_size_terms,
    add_same_program_terms,
    add_repeat_partner_terms,
)


@dataclass
class ImmersionAssignmentResult:
    """Outcome of one immersion call. status is None when nothing was solved."""

    students: Sequence[ImmersionStudent]
    status: TerminationStatus | None = None
    objective_value: float | None = None
    constraint_summary: dict = field(default_factory=dict)


class ImmersionAssignmentSolver:
    """Builds and solves the immersion model for the weeks students still lack."""

    def __init__(
        self,
        students: Sequence[ImmersionStudent],
        preferences: Sequence[Matrix],
        weights: ImmersionWeights | None = None,
        options: SolverOptions | None = None,
        backend: SolverBackend | None = None,
        settings: Settings | None = None,
        formulation: ImmersionFormulation | str | None = None,
    ):
        self.layout = validate_immersion_inputs(students, preferences)

        self.students = students
        self.preferences = preferences
        self.settings = settings or get_settings()
        self.weights = weights or ImmersionWeights.from_settings(self.settings)
        self.options = options or SolverOptions.from_settings(self.settings)
        self.backend = backend or CpSatBackend()
        self.formulation = ImmersionFormulation(formulation or self.settings.immersion_formulation)
        self.constraint_logger = ConstraintLogger(debug_mode=logger.isEnabledFor(logging.DEBUG))
        self.model = cp_model.CpModel()

        if self.formulation == ImmersionFormulation.PAIRWISE_PRODUCT:
            logger.warning("Using legacy pairwise-product penalties; collision counts differ from the linear model")

        # indicators[(i, c)] = 1 if student i takes the option at column c
        self.indicators: dict[tuple[int, int], cp_model.IntVar] = {}
        for student_idx in range(len(students)):
            for column in range(self.layout.ncolumns):
                self.indicators[(student_idx, column)] = self.model.NewBoolVar(f"student_{student_idx}_col_{column}")

        self.first_free_week = [len(student.assigned) for student in students]
        self.sentinel_weeks = frozenset(idx for idx, week in enumerate(preferences) if is_sentinel_week(week))

    @property
    def all_assigned(self) -> bool:
        return all(start == self.layout.nweeks for start in self.first_free_week)

    def _build_context(self) -> ImmersionContext:
        return ImmersionContext(
            model=self.model,
            indicators=self.indicators,
            students=self.students,
            preferences=self.preferences,
            layout=self.layout,
            first_free_week=self.first_free_week,
            weights=self.weights,
            formulation=self.formulation,
            scale=self.settings.objective_scale,
            balance_includes_sentinel_weeks=self.settings.balance_includes_sentinel_weeks,
            constraint_logger=self.constraint_logger,
            sentinel_weeks=self.sentinel_weeks,
        )

    def add_constraints(self, ctx: ImmersionContext) -> None:
        """Add all hard constraints to the model."""
        for builder in HARD_CONSTRAINTS:
            builder(ctx)

    def add_objective(self, ctx: ImmersionContext) -> None:
        """Minimize the weighted sum of all objective terms."""
        objective_terms: list[tuple[cp_model.IntVar, int]] = []
        for builder in OBJECTIVE_BUILDERS:
            terms = builder(ctx)
            self.constraint_logger.log_terms(builder.__name__.removeprefix("add_").removesuffix("_terms"), len(terms))
            objective_terms.extend(terms)

        logger.info(f"Immersion objective: {len(objective_terms)} terms")
        self.model.Minimize(sum(coefficient * var for var, coefficient in objective_terms if coefficient != 0))

    def _check_solution(self) -> None:
        for student in self.students:
            if len(student.assigned) < self.layout.nweeks:
                self.constraint_logger.log_violation(
                    "week_exclusivity",
                    f"{student.name} has no option from week {len(student.assigned) + 1} on",
                    severity="error",
                )

    def solve(self) -> ImmersionAssignmentResult:
        """Optimize the free weeks and append the chosen options to each student."""
        if not self.students:
            logger.warning(NO_STUDENTS_WARNING)
            return ImmersionAssignmentResult(students=self.students)
        if self.all_assigned:
            logger.warning(ALL_ASSIGNED_WARNING)
            return ImmersionAssignmentResult(students=self.students)

        ctx = self._build_context()
        self.add_constraints(ctx)
        self.add_objective(ctx)

        logger.info(
            f"Immersion model: {len(self.students)} students, {self.layout.nweeks} weeks, "
            f"{self.layout.ncolumns} options, {len(self.sentinel_weeks)} externally decided weeks"
        )
        result = self.backend.solve(self.model, self.options, self.constraint_logger)
        if result.status != TerminationStatus.OPTIMAL:
            logger.error(f"Solver terminated with status {result.status.value}")

        choices = extract_week_choices(result, self.indicators, self.layout, self.first_free_week)
        apply_week_choices(self.students, choices)
        if result.has_solution:
            self._check_solution()

        objective = None
        if result.objective_value is not None:
            objective = result.objective_value / self.settings.objective_scale

        return ImmersionAssignmentResult(
            students=self.students,
            status=result.status,
            objective_value=objective,
            constraint_summary=self.constraint_logger.get_summary(),
        )


def assign(
    students: Sequence[ImmersionStudent],
    preferences: Sequence[Matrix],
    *,
    weights: ImmersionWeights | None = None,
    options: SolverOptions | None = None,
    backend: SolverBackend | None = None,
    settings: Settings | None = None,
    formulation: ImmersionFormulation | str | None = None,
) -> ImmersionAssignmentResult:
    """Extend every student's assignment by one option per remaining week.

    Mutates students in place.

    Args:
        students: Students in matrix row order
        preferences: One n x options[w] matrix per week; lower is better, an
            all-zero week means its choices are pre-assigned elsewhere
        weights: Objective weights (defaults from settings)
        options: Solver verbosity, time limit and tuning pass-through
        backend: Solver backend (CP-SAT by default)
        settings: Settings override (defaults to get_settings())
        formulation: "linear" (default) or the legacy "pairwise_product"

    Returns:
        ImmersionAssignmentResult wrapping the same students

    Raises:
        ShapeError: If week/student counts or pre-assignments are inconsistent
        DomainError: If a scored week contains a non-positive preference
    """
    return ImmersionAssignmentSolver(
        students,
        preferences,
        weights=weights,
        options=options,
        backend=backend,
        settings=settings,
        formulation=formulation,
    ).solve()
