"""
Pre-assignment Constraints - keep weeks that students already have.

A student whose assignment history covers weeks 1..k has those weeks fixed
with equalities; they still count toward group sizes, program mixing and
repeated partners for the weeks being optimized.
"""

from __future__ import annotations

import logging

from assigngroups.models import NOT_PARTICIPATING

from .base import ImmersionContext

logger = logging.getLogger(__name__)


def add_preassignment_constraints(ctx: ImmersionContext) -> None:
    """Fix every already-assigned week to the stored option."""
    fixed_weeks = 0

    for student_idx, student in enumerate(ctx.students):
        for week_idx, option in enumerate(student.assigned):
            chosen = None if option == NOT_PARTICIPATING else ctx.layout.column(week_idx, option)
            for column in ctx.layout.columns(week_idx):
                ctx.model.Add(ctx.indicators[(student_idx, column)] == (1 if column == chosen else 0))
            fixed_weeks += 1

    if fixed_weeks:
        ctx.constraint_logger.log_constraint(
            "hard", "preassignment", f"{fixed_weeks} student-weeks fixed from existing assignments"
        )
        logger.info(f"Keeping {fixed_weeks} pre-assigned student-weeks")
