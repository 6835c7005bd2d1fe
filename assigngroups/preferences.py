"""
Preference data helpers.

All weeks' options are laid out side by side in one column space so that a
single indicator matrix A[student, column] covers every week:

    week 1: columns coptions[0] .. coptions[1] - 1
    week 2: columns coptions[1] .. coptions[2] - 1
    ...

Option numbers are 1-based everywhere they are visible to callers; columns
are 0-based solver indices.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from itertools import accumulate

from .errors import ShapeError
from .models import PartnerStudent
from .settings import get_settings

Matrix = Sequence[Sequence[float]]


@dataclass(frozen=True)
class OptionLayout:
    """Concatenated option space for all weeks."""

    noptions: tuple[int, ...]
    coptions: tuple[int, ...]

    @classmethod
    def from_preferences(cls, preferences: Sequence[Matrix]) -> OptionLayout:
        noptions = tuple(len(week[0]) if len(week) else 0 for week in preferences)
        return cls(noptions=noptions, coptions=(0, *accumulate(noptions)))

    @property
    def nweeks(self) -> int:
        return len(self.noptions)

    @property
    def ncolumns(self) -> int:
        return self.coptions[-1]

    def columns(self, week_idx: int) -> range:
        """Solver columns belonging to 0-based week week_idx."""
        return range(self.coptions[week_idx], self.coptions[week_idx + 1])

    def column(self, week_idx: int, option: int) -> int:
        """Solver column of 1-based option in 0-based week week_idx."""
        return self.coptions[week_idx] + option - 1

    def option_of(self, week_idx: int, column: int) -> int:
        """1-based option number of a solver column within its week."""
        return column - self.coptions[week_idx] + 1


def is_sentinel_week(matrix: Matrix) -> bool:
    """An all-zero week: choices are supplied externally and carry no preference cost."""
    return all(value == 0 for row in matrix for value in row)


def partner_bonus_matrix(
    students: Sequence[PartnerStudent],
    requests: Mapping[str, str | Sequence[str]],
    bonus: float | None = None,
) -> list[list[float]]:
    """Build a symmetric partner preference matrix from requested partner names.

    Args:
        students: Students in matrix order
        requests: "First Last" -> requested partner names (a comma-separated
            string or a list of names)
        bonus: Value placed at [i][j] and [j][i] for every request; negative
            values reward co-assignment (defaults to settings.partner_bonus)

    Returns:
        n x n matrix of floats, zero where nobody asked for anybody

    Raises:
        ShapeError: If a requester or requested partner is not in students
    """
    if bonus is None:
        bonus = get_settings().partner_bonus
    index = {student.name: idx for idx, student in enumerate(students)}
    matrix = [[0.0] * len(students) for _ in students]

    for requester, requested in requests.items():
        if requester not in index:
            raise ShapeError(f"Partner request from unknown student '{requester}'")
        names = requested.split(",") if isinstance(requested, str) else requested
        i = index[requester]
        for raw_name in names:
            name = raw_name.strip()
            if not name:
                continue
            if name not in index:
                raise ShapeError(f"'{requester}' requested unknown partner '{name}'")
            j = index[name]
            matrix[i][j] = matrix[j][i] = bonus

    return matrix
