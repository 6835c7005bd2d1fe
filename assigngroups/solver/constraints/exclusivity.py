"""
Week Exclusivity Constraints - one option per student per free week.
"""

from __future__ import annotations

import logging

from .base import ImmersionContext

logger = logging.getLogger(__name__)


def add_week_exclusivity_constraints(ctx: ImmersionContext) -> None:
    """Each student selects exactly one option in every week that is not pre-assigned."""
    constraints_added = 0

    for student_idx in range(ctx.nstudents):
        for week_idx in range(ctx.first_free_week[student_idx], ctx.layout.nweeks):
            ctx.model.Add(sum(ctx.indicators[(student_idx, column)] for column in ctx.layout.columns(week_idx)) == 1)
            constraints_added += 1

    ctx.constraint_logger.log_constraint(
        "hard", "week_exclusivity", f"{constraints_added} student-weeks must select exactly one option"
    )
    logger.debug(f"Week exclusivity: {constraints_added} constraints")
