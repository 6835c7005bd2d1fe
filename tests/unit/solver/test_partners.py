"""
Tests for the partner assignment solver.

Students A..F carry scores 1, 2, 3, 1, 2, 3 (mean 2), so every balanced
split has each group averaging exactly 2.
"""

from __future__ import annotations

import logging
from statistics import mean

import pytest

from assigngroups.errors import ShapeError
from assigngroups.settings import Settings
from assigngroups.solver.backend import TerminationStatus
from assigngroups.solver.partners import PartnerAssignmentSolver, assign_partners

from .conftest import ForcedStatusBackend, NoSolutionBackend, ZeroValueBackend, create_partner_students, zeros


def _group_means(groups):
    return [mean(student.score for student in group) for group in groups]


def _group_of(groups, student):
    return next(idx for idx, group in enumerate(groups) if student in group)


@pytest.fixture
def students():
    return create_partner_students()


class TestBalance:
    """Score balance without partner preferences."""

    def test_two_groups(self, students, solver_options, settings):
        result = assign_partners(students, 2, zeros(6, 6), options=solver_options, settings=settings)

        assert result.status == TerminationStatus.OPTIMAL
        assert [len(group) for group in result.groups] == [3, 3]
        assert _group_means(result.groups) == [2, 2]
        assert result.objective_value == pytest.approx(0.0)
        assert result.relative_gap == 0.0

    def test_three_groups(self, students, solver_options, settings):
        result = assign_partners(students, 3, zeros(6, 6), options=solver_options, settings=settings)

        assert [len(group) for group in result.groups] == [2, 2, 2]
        assert _group_means(result.groups) == [2, 2, 2]

    def test_uneven_group_sizes(self, solver_options, settings):
        students = create_partner_students([1, 2, 3, 1, 2, 3, 2])

        result = assign_partners(students, 3, zeros(7, 7), options=solver_options, settings=settings)

        assert sorted(len(group) for group in result.groups) == [2, 2, 3]
        assert sorted(s.name for group in result.groups for s in group) == sorted(s.name for s in students)

    def test_input_not_mutated(self, students, solver_options, settings):
        original = list(students)

        assign_partners(students, 2, zeros(6, 6), options=solver_options, settings=settings)

        assert students == original


class TestPartnerPreferences:
    """Negative preference entries reward co-assignment."""

    def test_strong_bonus_pairs_students(self, students, solver_options, settings):
        preferences = zeros(6, 6)
        preferences[0][3] = preferences[3][0] = -1000

        result = assign_partners(students, 2, preferences, options=solver_options, settings=settings)

        assert _group_of(result.groups, students[0]) == _group_of(result.groups, students[3])
        assert result.objective_value < 0

    def test_weak_bonus_keeps_balance(self, students, solver_options, settings):
        preferences = zeros(6, 6)
        preferences[0][3] = preferences[3][0] = -0.1

        result = assign_partners(students, 2, preferences, options=solver_options, settings=settings)

        assert _group_means(result.groups) == [2, 2]
        assert result.objective_value == pytest.approx(0.0)

    def test_strong_bonus_pairs_students_in_three_groups(self, students, solver_options, settings):
        """Pairing A and D costs balance (their group averages 1) but the bonus dominates."""
        preferences = zeros(6, 6)
        preferences[0][3] = preferences[3][0] = -1000

        result = assign_partners(students, 3, preferences, options=solver_options, settings=settings)

        assert _group_of(result.groups, students[0]) == _group_of(result.groups, students[3])
        assert [len(group) for group in result.groups] == [2, 2, 2]

    def test_weak_bonus_keeps_balance_in_three_groups(self, students, solver_options, settings):
        preferences = zeros(6, 6)
        preferences[0][3] = preferences[3][0] = -0.1

        result = assign_partners(students, 3, preferences, options=solver_options, settings=settings)

        assert _group_means(result.groups) == [2, 2, 2]

    def test_positive_entries_add_nothing(self, students, solver_options, settings):
        preferences = zeros(6, 6)
        preferences[1][4] = preferences[4][1] = 1000

        result = assign_partners(students, 2, preferences, options=solver_options, settings=settings)

        assert _group_means(result.groups) == [2, 2]
        assert result.objective_value == pytest.approx(0.0)

    def test_pair_indicators_only_for_nonzero_entries(self, students, solver_options, settings):
        preferences = zeros(6, 6)
        preferences[0][3] = preferences[3][0] = -1

        solver = PartnerAssignmentSolver(students, 2, preferences, options=solver_options, settings=settings)
        solver.solve()

        assert set(solver.paired) == {(0, 3, 0), (0, 3, 1)}


class TestStatusReporting:
    def test_time_limit_logs_hint(self, students, solver_options, settings, caplog):
        backend = ForcedStatusBackend(TerminationStatus.TIME_LIMIT, best_bound=-1.0)

        with caplog.at_level(logging.ERROR):
            result = assign_partners(
                students, 2, zeros(6, 6), options=solver_options, backend=backend, settings=settings
            )

        assert result.status == TerminationStatus.TIME_LIMIT
        assert "Solver terminated with status TIME_LIMIT" in caplog.text
        assert "Increase the time limit" in caplog.text
        # The best solution found is still returned
        assert sum(len(group) for group in result.groups) == 6

    def test_no_solution_gives_empty_groups(self, students, solver_options, settings, caplog):
        with caplog.at_level(logging.ERROR):
            result = assign_partners(
                students, 2, zeros(6, 6), options=solver_options, backend=NoSolutionBackend(), settings=settings
            )

        assert result.status == TerminationStatus.INFEASIBLE
        assert result.groups == [[], []]
        assert result.objective_value is None
        assert "Solver terminated with status INFEASIBLE" in caplog.text

    def test_objective_scale_does_not_change_reported_objective(self, students, solver_options):
        preferences = zeros(6, 6)
        preferences[0][3] = preferences[3][0] = -1000

        coarse = assign_partners(
            students, 2, preferences, options=solver_options, settings=Settings(_env_file=None, objective_scale=1)
        )
        fine = assign_partners(
            students, 2, preferences, options=solver_options, settings=Settings(_env_file=None, objective_scale=100)
        )

        assert coarse.objective_value == pytest.approx(fine.objective_value)


    def test_unplaced_students_recorded_as_violations(self, students, solver_options, settings, caplog):
        with caplog.at_level(logging.ERROR):
            result = assign_partners(
                students, 2, zeros(6, 6), options=solver_options, backend=ZeroValueBackend(), settings=settings
            )

        violations = result.constraint_summary["violations"]
        assert violations["assignment"][0]["details"] == "0 placements for 6 students"
        assert len(violations["group_size"]) == 2
        assert "[VIOLATION] assignment" in caplog.text

class TestInputErrors:
    def test_wrong_matrix_shape(self, students):
        with pytest.raises(ShapeError):
            assign_partners(students, 2, zeros(5, 6))

    def test_empty_roster(self, solver_options, settings):
        with pytest.raises(ShapeError, match="At least one student"):
            assign_partners([], 2, [], options=solver_options, settings=settings)

    def test_asymmetric_preferences(self, students):
        preferences = zeros(6, 6)
        preferences[0][3] = -1
        with pytest.raises(ShapeError, match="must be symmetric"):
            assign_partners(students, 2, preferences)

    def test_zero_groups(self, students):
        with pytest.raises(ShapeError):
            assign_partners(students, 0, zeros(6, 6))
