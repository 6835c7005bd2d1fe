"""
Unit tests for the same-program penalty.

Three students of one program forced into a single option: the linear
formulation charges the two extra students, the pairwise product charges all
three pairs.
"""

from __future__ import annotations

from assigngroups.solver.constraints.base import ImmersionFormulation, ImmersionWeights
from assigngroups.solver.constraints.exclusivity import add_week_exclusivity_constraints
from assigngroups.solver.constraints.same_program import add_same_program_terms

from ..conftest import build_immersion_context, create_immersion_students, minimize_terms


class TestSameProgramLinear:
    def test_counts_extra_students(self):
        ctx = build_immersion_context(create_immersion_students("111"), [[[1]] * 3])
        add_week_exclusivity_constraints(ctx)

        terms = add_same_program_terms(ctx)
        solver = minimize_terms(ctx, terms)

        assert solver.ObjectiveValue() == 2

    def test_spreads_program_when_possible(self):
        ctx = build_immersion_context(create_immersion_students("11"), [[[1, 1]] * 2])
        add_week_exclusivity_constraints(ctx)

        solver = minimize_terms(ctx, add_same_program_terms(ctx))

        assert solver.ObjectiveValue() == 0
        assert solver.Value(ctx.indicators[(0, 0)]) != solver.Value(ctx.indicators[(1, 0)])

    def test_single_member_programs_skipped(self):
        ctx = build_immersion_context(create_immersion_students("123"), [[[1]] * 3])

        assert add_same_program_terms(ctx) == []

    def test_disabled_by_zero_weight(self):
        ctx = build_immersion_context(
            create_immersion_students("111"), [[[1]] * 3], weights=ImmersionWeights(same_program=0)
        )

        assert add_same_program_terms(ctx) == []


class TestSameProgramPairwiseProduct:
    def test_counts_every_pair(self):
        ctx = build_immersion_context(
            create_immersion_students("111"),
            [[[1]] * 3],
            formulation=ImmersionFormulation.PAIRWISE_PRODUCT,
        )
        add_week_exclusivity_constraints(ctx)

        solver = minimize_terms(ctx, add_same_program_terms(ctx))

        assert solver.ObjectiveValue() == 3
        assert len(ctx.co_assigned) == 3
