"""
Entity models for group assignment.

Two kinds of students exist:
- PartnerStudent: single-round partition, balanced on a performance score
- ImmersionStudent: multi-week assignment, carries its own assignment history

ImmersionStudent.assigned is mutated in place by the immersion solver so that
weeks can be solved in stages. Use unassign() to reset it.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

# Stored in ImmersionStudent.assigned for a week the student sits out.
# Only ever supplied by callers as a pre-assignment; the solver never produces it.
NOT_PARTICIPATING = 0


class PartnerStudent(BaseModel):
    """Student for the partner (single-round) problem. Equality is by name only."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    score: float

    @property
    def name(self) -> str:
        """Full name for display."""
        return f"{self.first_name} {self.last_name}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PartnerStudent):
            return NotImplemented
        return self.first_name == other.first_name and self.last_name == other.last_name

    def __hash__(self) -> int:
        return hash((self.first_name, self.last_name))

    def __str__(self) -> str:
        return f"{self.name} ({self.score})"


class ImmersionStudent(BaseModel):
    """Student for the multi-week immersion problem.

    assigned[w] is the 1-based option chosen for week w + 1.
    """

    first_name: str
    last_name: str
    program: str
    assigned: list[int] = Field(default_factory=list)

    @property
    def name(self) -> str:
        """Full name for display."""
        return f"{self.first_name} {self.last_name}"

    @property
    def sort_name(self) -> str:
        """'Last, First' - the form used in pair keys."""
        return f"{self.last_name}, {self.first_name}"

    def participates(self, week_idx: int) -> bool:
        """True if the student has a real option for 0-based week week_idx."""
        return week_idx < len(self.assigned) and self.assigned[week_idx] != NOT_PARTICIPATING


def unassign(students: Iterable[ImmersionStudent]) -> None:
    """Clear every student's assignment history in place."""
    for student in students:
        student.assigned.clear()


def pair_key(first: ImmersionStudent, second: ImmersionStudent) -> tuple[str, str]:
    """Order-independent key for a pair of students."""
    a, b = first.sort_name, second.sort_name
    return (a, b) if a <= b else (b, a)
