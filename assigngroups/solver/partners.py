"""
Partner Assignment Solver - balanced single-round partition with partner bonuses.

Students are split into ngroups groups of nearly equal size so that every
group's total score is as close as possible to its fair share, while negative
preference entries reward putting requested partners together.

The model is integral: scores are scaled by settings.objective_scale and each
group deviation is multiplied through by the number of students, so

    dev_j = n * sum_i(q_i * A[i, j]) - Q * size_j        (Q = sum_i q_i)

is exactly n * scale * (group score - size_j * mean score). Preference
coefficients carry the same n * scale factor so balance and bonuses trade off
in the original units.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import combinations

from ortools.sat.python import cp_model

from assigngroups.models import PartnerStudent
from assigngroups.preferences import Matrix
from assigngroups.settings import Settings, get_settings
from assigngroups.validation import validate_partner_inputs

from .backend import CpSatBackend, SolverBackend, SolverOptions, SolveResult, TerminationStatus
from .extraction import extract_groups
from .logging import ConstraintLogger

logger = logging.getLogger(__name__)


@dataclass
class PartnerAssignmentResult:
    """Groups produced by one partner solve."""

    groups: list[list[PartnerStudent]]
    status: TerminationStatus
    objective_value: float | None = None
    relative_gap: float | None = None
    constraint_summary: dict = field(default_factory=dict)


class PartnerAssignmentSolver:
    """Builds and solves the partner partition model. Never mutates its input."""

    def __init__(
        self,
        students: Sequence[PartnerStudent],
        ngroups: int,
        preferences: Matrix,
        options: SolverOptions | None = None,
        backend: SolverBackend | None = None,
        settings: Settings | None = None,
    ):
        validate_partner_inputs(students, ngroups, preferences)

        self.students = list(students)
        self.ngroups = ngroups
        self.preferences = preferences
        self.settings = settings or get_settings()
        self.options = options or SolverOptions.from_settings(self.settings)
        self.backend = backend or CpSatBackend()
        self.constraint_logger = ConstraintLogger(debug_mode=logger.isEnabledFor(logging.DEBUG))
        self.model = cp_model.CpModel()

        nstudents = len(self.students)
        self.scale = self.settings.objective_scale
        self.scaled_scores = [round(s.score * self.scale) for s in self.students]
        self.min_size = nstudents // ngroups
        self.max_size = math.ceil(nstudents / ngroups)

        # assignments[(i, j)] = 1 if student i is in group j
        self.assignments: dict[tuple[int, int], cp_model.IntVar] = {}
        for i in range(nstudents):
            for j in range(ngroups):
                self.assignments[(i, j)] = self.model.NewBoolVar(f"student_{i}_in_group_{j}")

        self.group_sizes = [
            self.model.NewIntVar(self.min_size, self.max_size, f"group_{j}_size") for j in range(ngroups)
        ]
        self.paired: dict[tuple[int, int, int], cp_model.IntVar] = {}

    def add_constraints(self) -> None:
        """Each student in exactly one group; group sizes within floor/ceil of n/g."""
        nstudents = len(self.students)

        self.constraint_logger.log_constraint(
            "hard", "assignment", f"Each of {nstudents} students must be assigned to exactly one group"
        )
        for i in range(nstudents):
            self.model.Add(sum(self.assignments[(i, j)] for j in range(self.ngroups)) == 1)

        self.constraint_logger.log_constraint(
            "hard",
            "group_size",
            f"{self.ngroups} groups of {self.min_size}..{self.max_size} students",
        )
        for j in range(self.ngroups):
            self.model.Add(self.group_sizes[j] == sum(self.assignments[(i, j)] for i in range(nstudents)))

    def _add_balance_term(self) -> cp_model.IntVar:
        """Return t with t >= sum_j |dev_j| (L1 epigraph)."""
        nstudents = len(self.students)
        total = sum(self.scaled_scores)
        bound = nstudents * sum(abs(q) for q in self.scaled_scores) + abs(total) * self.max_size

        abs_deviations = []
        for j in range(self.ngroups):
            deviation = self.model.NewIntVar(-bound, bound, f"group_{j}_deviation")
            self.model.Add(
                deviation
                == nstudents * sum(q * self.assignments[(i, j)] for i, q in enumerate(self.scaled_scores))
                - total * self.group_sizes[j]
            )
            abs_deviation = self.model.NewIntVar(0, bound, f"group_{j}_abs_deviation")
            self.model.AddAbsEquality(abs_deviation, deviation)
            abs_deviations.append(abs_deviation)

        t = self.model.NewIntVar(0, bound * self.ngroups, "score_imbalance")
        self.model.Add(t >= sum(abs_deviations))

        self.constraint_logger.log_constraint(
            "soft", "score_balance", f"Sum of |group score - fair share| over {self.ngroups} groups"
        )
        return t

    def _add_pairing_terms(self) -> list[tuple[cp_model.IntVar, int]]:
        """Co-assignment indicators for every pair with a non-zero preference."""
        nstudents = len(self.students)
        coefficient_scale = nstudents * self.scale
        terms: list[tuple[cp_model.IntVar, int]] = []

        for i1, i2 in combinations(range(nstudents), 2):
            preference = self.preferences[i1][i2]
            if preference == 0:
                continue
            coefficient = round(preference * coefficient_scale)
            for j in range(self.ngroups):
                paired = self.model.NewBoolVar(f"paired_{i1}_{i2}_group_{j}")
                # paired <= (A[i1, j] + A[i2, j]) / 2
                self.model.Add(2 * paired <= self.assignments[(i1, j)] + self.assignments[(i2, j)])
                self.paired[(i1, i2, j)] = paired
                terms.append((paired, coefficient))

        if terms:
            self.constraint_logger.log_constraint(
                "soft",
                "partner_preference",
                f"{len(terms) // self.ngroups} student pairs with partner preferences",
            )
        return terms

    def add_objective(self) -> None:
        """Minimize score imbalance plus the (signed) partner preference terms."""
        t = self._add_balance_term()
        pairing_terms = self._add_pairing_terms()
        self.model.Minimize(t + sum(coefficient * var for var, coefficient in pairing_terms))

    def _report_status(self, result: SolveResult) -> None:
        if result.status == TerminationStatus.OPTIMAL:
            return
        logger.error(f"Solver terminated with status {result.status.value}")
        if result.status == TerminationStatus.TIME_LIMIT:
            gap = result.relative_gap
            gap_text = f"{gap:.2%}" if gap is not None else "unknown"
            logger.error(
                f"Time limit of {self.options.time_limit_seconds}s reached with relative gap {gap_text}. "
                "Increase the time limit or the optimality gap tolerance, "
                "or strengthen the partner bonuses so they dominate score balance."
            )

    def _check_solution(self, groups: list[list[PartnerStudent]]) -> None:
        placed = sum(len(group) for group in groups)
        if placed != len(self.students):
            self.constraint_logger.log_violation(
                "assignment", f"{placed} placements for {len(self.students)} students", severity="error"
            )
        for j, group in enumerate(groups):
            if not self.min_size <= len(group) <= self.max_size:
                self.constraint_logger.log_violation(
                    "group_size",
                    f"Group {j + 1} has {len(group)} students, expected {self.min_size}..{self.max_size}",
                    severity="error",
                )

    def solve(self) -> PartnerAssignmentResult:
        """Build the model, run the backend and extract groups."""
        self.add_constraints()
        self.add_objective()

        logger.info(
            f"Partner model: {len(self.students)} students, {self.ngroups} groups, {len(self.paired)} pair indicators"
        )
        result = self.backend.solve(self.model, self.options, self.constraint_logger)
        self._report_status(result)

        groups = extract_groups(result, self.assignments, self.students, self.ngroups)
        if result.has_solution:
            self._check_solution(groups)
        objective = None
        if result.objective_value is not None:
            objective = result.objective_value / (len(self.students) * self.scale)

        return PartnerAssignmentResult(
            groups=groups,
            status=result.status,
            objective_value=objective,
            relative_gap=result.relative_gap,
            constraint_summary=self.constraint_logger.get_summary(),
        )


def assign_partners(
    students: Sequence[PartnerStudent],
    ngroups: int,
    preferences: Matrix,
    *,
    options: SolverOptions | None = None,
    backend: SolverBackend | None = None,
    settings: Settings | None = None,
) -> PartnerAssignmentResult:
    """Partition students into ngroups balanced groups honoring partner bonuses.

    Args:
        students: Students in matrix order
        ngroups: Number of groups
        preferences: Symmetric n x n matrix; negative entries reward pairing
        options: Solver verbosity, time limit and tuning pass-through
        backend: Solver backend (CP-SAT by default)
        settings: Settings override (defaults to get_settings())

    Returns:
        PartnerAssignmentResult with one list of students per group

    Raises:
        ShapeError: If inputs are malformed
    """
    return PartnerAssignmentSolver(
        students, ngroups, preferences, options=options, backend=backend, settings=settings
    ).solve()
