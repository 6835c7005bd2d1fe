"""
Preference Cost - penalize options students are less interested in.

Weeks whose preference matrix is entirely zero are decided elsewhere and add
nothing.
"""

from __future__ import annotations

import logging

from ortools.sat.python import cp_model

from .base import ImmersionContext

logger = logging.getLogger(__name__)


def add_preference_cost_terms(ctx: ImmersionContext) -> list[tuple[cp_model.IntVar, int]]:
    """Return (indicator, weight * preference) for every student-option of non-sentinel weeks."""
    terms: list[tuple[cp_model.IntVar, int]] = []
    weight = ctx.weights.preference
    if weight == 0:
        logger.info("Preference cost DISABLED (weight 0)")
        return terms

    for week_idx in range(ctx.layout.nweeks):
        if week_idx in ctx.sentinel_weeks:
            continue
        week = ctx.preferences[week_idx]
        for student_idx in range(ctx.nstudents):
            if not ctx.is_free(student_idx, week_idx):
                continue
            for column in ctx.layout.columns(week_idx):
                option = ctx.layout.option_of(week_idx, column)
                value = week[student_idx][option - 1]
                terms.append((ctx.indicators[(student_idx, column)], ctx.coefficient(weight, value)))

    ctx.constraint_logger.log_constraint(
        "soft",
        "preference_cost",
        f"Preference cost over {ctx.layout.nweeks - len(ctx.sentinel_weeks)} scored weeks (weight {weight})",
    )
    return terms
