"""Solution extraction - turn raw solver values into discrete assignments.

An indicator counts as selected when its value exceeds SELECTION_THRESHOLD.
Values are never assumed to be exactly 0 or 1.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from assigngroups.logging_config import TRACE
from assigngroups.models import ImmersionStudent
from assigngroups.preferences import OptionLayout

from .backend import SolveResult

logger = logging.getLogger(__name__)

SELECTION_THRESHOLD = 0.5

T = TypeVar("T")


def is_selected(value: float) -> bool:
    """True if a binary indicator value counts as chosen."""
    return value > SELECTION_THRESHOLD


def extract_groups(
    result: SolveResult,
    indicators: Mapping[tuple[int, int], Any],
    students: Sequence[T],
    ngroups: int,
) -> list[list[T]]:
    """Split students into groups from indicators[(student_idx, group_idx)].

    Returns ngroups lists (all empty when the result holds no solution).
    """
    groups: list[list[T]] = [[] for _ in range(ngroups)]
    if not result.has_solution:
        return groups

    for student_idx, student in enumerate(students):
        for group_idx in range(ngroups):
            if is_selected(result.value(indicators[(student_idx, group_idx)])):
                groups[group_idx].append(student)

    for group_idx, group in enumerate(groups):
        logger.log(TRACE, f"Group {group_idx + 1}: {', '.join(str(student) for student in group)}")
    return groups


def extract_week_choices(
    result: SolveResult,
    indicators: Mapping[tuple[int, int], Any],
    layout: OptionLayout,
    first_free_week: Sequence[int],
) -> list[list[int]]:
    """Read the options chosen for every free week, in week order.

    Args:
        result: Solver result
        indicators: (student_idx, column) -> indicator variable
        layout: Concatenated option space
        first_free_week: Per student, the 0-based index of the first week
            that was optimized (weeks before it were fixed)

    Returns:
        Per student, the 1-based options for weeks first_free_week..nweeks-1.
        If a week has no selected option the list stops there so later weeks
        cannot shift into the wrong position.
    """
    choices: list[list[int]] = [[] for _ in first_free_week]
    if not result.has_solution:
        return choices

    for student_idx, start in enumerate(first_free_week):
        for week_idx in range(start, layout.nweeks):
            chosen = [
                column
                for column in layout.columns(week_idx)
                if is_selected(result.value(indicators[(student_idx, column)]))
            ]
            if not chosen:
                logger.error(
                    f"No option selected for student {student_idx + 1} in week {week_idx + 1}; "
                    "leaving the remaining weeks unassigned"
                )
                break
            choices[student_idx].append(layout.option_of(week_idx, chosen[0]))
        logger.log(TRACE, f"Student {student_idx + 1}: weeks {start + 1}.. -> options {choices[student_idx]}")
    return choices


def apply_week_choices(students: Sequence[ImmersionStudent], choices: Sequence[Sequence[int]]) -> None:
    """Append extracted choices to each student's assignment history in place."""
    for student, new_options in zip(students, choices, strict=True):
        student.assigned.extend(new_options)
