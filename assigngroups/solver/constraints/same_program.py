"""
Same Program Penalty - spread students of one program across options.

LINEAR formulation (default): for every option column and program with at
least two members,
    excess >= (members taking the option) - 1,  excess >= 0
so the penalty counts the extra same-program students beyond the first.

PAIRWISE_PRODUCT formulation (legacy): every same-program pair sharing an
option costs one unit, so three students of one program in one option cost 3
rather than 2.
"""

from __future__ import annotations

import logging
from itertools import combinations

from ortools.sat.python import cp_model

from .base import ImmersionContext, ImmersionFormulation
from .helpers import get_co_assignment, students_by_program

logger = logging.getLogger(__name__)


def add_same_program_terms(ctx: ImmersionContext) -> list[tuple[cp_model.IntVar, int]]:
    """Return same-program penalty terms for the configured formulation."""
    terms: list[tuple[cp_model.IntVar, int]] = []
    weight = ctx.weights.same_program
    if weight == 0:
        logger.info("Same program penalty DISABLED (weight 0)")
        return terms

    coefficient = ctx.coefficient(weight)
    programs = {program: members for program, members in students_by_program(ctx).items() if len(members) > 1}
    if not programs:
        logger.info("No program has two or more students - skipping same program penalty")
        return terms

    for program, members in programs.items():
        for column in range(ctx.layout.ncolumns):
            if ctx.formulation == ImmersionFormulation.PAIRWISE_PRODUCT:
                for i1, i2 in combinations(members, 2):
                    terms.append((get_co_assignment(ctx, i1, i2, column), coefficient))
            else:
                excess = ctx.model.NewIntVar(0, len(members) - 1, f"program_{program}_col_{column}_excess")
                ctx.model.Add(excess >= sum(ctx.indicators[(idx, column)] for idx in members) - 1)
                terms.append((excess, coefficient))

    ctx.constraint_logger.log_constraint(
        "soft",
        "same_program",
        f"{ctx.formulation.value} same-program penalty for {len(programs)} programs (weight {weight})",
    )
    return terms
