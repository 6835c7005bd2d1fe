"""
Group Size Balance - penalize uneven option occupancy within a week.

For every week the term is (largest occupancy - smallest occupancy), built
from two bound variables:
    max_occ >= occ_k and min_occ <= occ_k for every option k
"""

from __future__ import annotations

import logging

from ortools.sat.python import cp_model

from .base import ImmersionContext
from .helpers import week_occupancy

logger = logging.getLogger(__name__)


def add_group_size_terms(ctx: ImmersionContext) -> list[tuple[cp_model.IntVar, int]]:
    """Return (max_occ, +w) and (min_occ, -w) pairs for every balanced week."""
    terms: list[tuple[cp_model.IntVar, int]] = []
    weight = ctx.weights.size_imbalance
    if weight == 0:
        logger.info("Group size balance DISABLED (weight 0)")
        return terms

    coefficient = ctx.coefficient(weight)
    weeks_balanced = 0

    for week_idx in range(ctx.layout.nweeks):
        if week_idx in ctx.sentinel_weeks and not ctx.balance_includes_sentinel_weeks:
            continue
        columns = ctx.layout.columns(week_idx)
        if len(columns) < 2:
            continue

        max_occ = ctx.model.NewIntVar(0, ctx.nstudents, f"week_{week_idx}_max_occupancy")
        min_occ = ctx.model.NewIntVar(0, ctx.nstudents, f"week_{week_idx}_min_occupancy")
        for column in columns:
            occupancy = week_occupancy(ctx, column)
            ctx.model.Add(max_occ >= occupancy)
            ctx.model.Add(min_occ <= occupancy)

        terms.append((max_occ, coefficient))
        terms.append((min_occ, -coefficient))
        weeks_balanced += 1

    ctx.constraint_logger.log_constraint(
        "soft", "group_size", f"Occupancy spread penalized in {weeks_balanced} weeks (weight {weight})"
    )
    return terms
