"""
Input validation for the assignment solvers.

Every check here runs before a model is built, so a malformed call fails fast
with a ShapeError or DomainError and never reaches the solver.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence, Set
from typing import Any

from .errors import DomainError, ShapeError
from .models import NOT_PARTICIPATING, ImmersionStudent, PartnerStudent
from .preferences import Matrix, OptionLayout, is_sentinel_week

logger = logging.getLogger(__name__)


def _require_positional(students: Any) -> None:
    # Position in the sequence is the row index in every preference matrix
    if isinstance(students, (Mapping, Set, str)) or not isinstance(students, Sequence):
        raise ShapeError("`students` must be a positional sequence indexed from the first row")


def validate_partner_inputs(
    students: Sequence[PartnerStudent],
    ngroups: int,
    preferences: Matrix,
) -> None:
    """Check a partner problem before model construction.

    Raises:
        ShapeError: students not positional or empty, ngroups < 1, or preferences
            not a symmetric n x n matrix
    """
    _require_positional(students)
    nstudents = len(students)

    if nstudents == 0:
        raise ShapeError("At least one student is required")
    if ngroups < 1:
        raise ShapeError(f"Number of groups must be at least 1, got {ngroups}")
    if len(preferences) != nstudents:
        raise ShapeError(
            f"Dimensions of `preferences` must match `students`: {len(preferences)} rows for {nstudents} students"
        )
    for i, row in enumerate(preferences):
        if len(row) != nstudents:
            raise ShapeError(
                f"Dimensions of `preferences` must match `students`: row {i + 1} has {len(row)} columns"
            )
    for i in range(nstudents):
        for j in range(i + 1, nstudents):
            if preferences[i][j] != preferences[j][i]:
                raise ShapeError(
                    f"`preferences` must be symmetric: entry ({i + 1}, {j + 1}) is {preferences[i][j]} "
                    f"but ({j + 1}, {i + 1}) is {preferences[j][i]}"
                )

    if ngroups > nstudents:
        logger.warning(f"{ngroups} groups requested for {nstudents} students - some groups will be empty")


def validate_immersion_inputs(
    students: Sequence[ImmersionStudent],
    preferences: Sequence[Matrix],
) -> OptionLayout:
    """Check an immersion problem before model construction.

    Returns:
        The option layout of the weeks

    Raises:
        ShapeError: Inconsistent week/student counts, ragged rows, weeks without
            options, or pre-assigned options outside their week's range
        DomainError: Non-positive preference in a week that is not all-zero
    """
    _require_positional(students)
    nstudents, nweeks = len(students), len(preferences)

    if nweeks == 0:
        raise ShapeError("At least one week of preferences is required")

    for week_idx, week in enumerate(preferences):
        if len(week) != nstudents:
            raise ShapeError(
                f"All weeks must have the same number of students: week {week_idx + 1} has "
                f"{len(week)} rows for {nstudents} students"
            )
        if nstudents == 0:
            continue
        noptions = len(week[0])
        if noptions == 0:
            raise ShapeError(f"Week {week_idx + 1} has no options")
        for i, row in enumerate(week):
            if len(row) != noptions:
                raise ShapeError(
                    f"Week {week_idx + 1}: row {i + 1} has {len(row)} options, expected {noptions}"
                )
        if not is_sentinel_week(week):
            for i, row in enumerate(week):
                for k, value in enumerate(row):
                    if value <= 0:
                        raise DomainError(
                            f"Week {week_idx + 1}: preference for student {i + 1}, option {k + 1} is {value}; "
                            "scores must be positive unless the whole week is zero"
                        )

    layout = OptionLayout.from_preferences(preferences)

    for student in students:
        if len(student.assigned) > nweeks:
            raise ShapeError(
                f"{student.name} has {len(student.assigned)} assigned weeks but only {nweeks} weeks were given"
            )
        for week_idx, option in enumerate(student.assigned):
            if option == NOT_PARTICIPATING:
                continue
            if not 1 <= option <= layout.noptions[week_idx]:
                raise ShapeError(
                    f"{student.name}: week {week_idx + 1} option {option} is outside "
                    f"1..{layout.noptions[week_idx]}"
                )

    return layout
