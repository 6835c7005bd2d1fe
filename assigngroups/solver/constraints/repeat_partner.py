"""
Repeat Partner Penalty - avoid the same two students sharing an option twice.

LINEAR formulation (default): for every pair,
    excess >= (options the pair shares across all weeks) - 1,  excess >= 0
so sharing one week is free and every further shared week costs one unit.

PAIRWISE_PRODUCT formulation (legacy): every shared option costs one unit,
including the first.
"""

from __future__ import annotations

import logging
from itertools import combinations

from ortools.sat.python import cp_model

from .base import ImmersionContext, ImmersionFormulation
from .helpers import get_co_assignment

logger = logging.getLogger(__name__)


def add_repeat_partner_terms(ctx: ImmersionContext) -> list[tuple[cp_model.IntVar, int]]:
    """Return repeat-partner penalty terms for the configured formulation."""
    terms: list[tuple[cp_model.IntVar, int]] = []
    weight = ctx.weights.repeat_partner
    if weight == 0:
        logger.info("Repeat partner penalty DISABLED (weight 0)")
        return terms

    legacy = ctx.formulation == ImmersionFormulation.PAIRWISE_PRODUCT
    if ctx.layout.nweeks < 2 and not legacy:
        # A pair can share at most one option in a single week
        logger.info("Single week - skipping repeat partner penalty")
        return terms

    coefficient = ctx.coefficient(weight)
    for i1, i2 in combinations(range(ctx.nstudents), 2):
        shared = [get_co_assignment(ctx, i1, i2, column) for column in range(ctx.layout.ncolumns)]
        if legacy:
            terms.extend((co, coefficient) for co in shared)
            continue
        excess = ctx.model.NewIntVar(0, ctx.layout.nweeks - 1, f"pair_{i1}_{i2}_repeat_excess")
        ctx.model.Add(excess >= sum(shared) - 1)
        terms.append((excess, coefficient))

    ctx.constraint_logger.log_constraint(
        "soft",
        "repeat_partner",
        f"{ctx.formulation.value} repeat-partner penalty for {ctx.nstudents * (ctx.nstudents - 1) // 2} pairs "
        f"(weight {weight})",
    )
    return terms
