"""
Shared helper functions for immersion constraint modules.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from ortools.sat.python import cp_model

if TYPE_CHECKING:
    from .base import ImmersionContext


def students_by_program(ctx: ImmersionContext) -> dict[str, list[int]]:
    """Map program -> student indices, in student order."""
    programs: dict[str, list[int]] = defaultdict(list)
    for idx, student in enumerate(ctx.students):
        programs[student.program].append(idx)
    return dict(programs)


def get_co_assignment(ctx: ImmersionContext, i1: int, i2: int, column: int) -> cp_model.IntVar:
    """Indicator that students i1 and i2 both take the option at column.

    Exact AND linearization: co <= a, co <= b, co >= a + b - 1.
    Indicators are cached on the context so several terms can share them.
    """
    if i1 > i2:
        i1, i2 = i2, i1
    key = (i1, i2, column)
    if key in ctx.co_assigned:
        return ctx.co_assigned[key]

    a = ctx.indicators[(i1, column)]
    b = ctx.indicators[(i2, column)]
    co = ctx.model.NewBoolVar(f"co_{i1}_{i2}_col_{column}")
    ctx.model.Add(co <= a)
    ctx.model.Add(co <= b)
    ctx.model.Add(co >= a + b - 1)
    ctx.co_assigned[key] = co
    return co


def week_occupancy(ctx: ImmersionContext, column: int) -> cp_model.LinearExpr:
    """Number of students taking the option at column."""
    return sum(ctx.indicators[(idx, column)] for idx in range(ctx.nstudents))
