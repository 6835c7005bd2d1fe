"""Assignment Analysis - statistics over a finished immersion assignment.

Pure functions: nothing here touches the solver. The collision counts use the
same "extra occurrence" semantics as the linear penalties, so a cell with two
same-program students counts 1 and a pair sharing two weeks counts 2 in
pair_collisions (one of which is a repeat).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from itertools import combinations

from assigngroups.errors import ShapeError
from assigngroups.models import ImmersionStudent, pair_key
from assigngroups.preferences import Matrix, OptionLayout, is_sentinel_week


@dataclass
class AssignmentStats:
    """Collision and balance statistics for one assignment."""

    mean_preference: float
    max_imbalance: int

    # pair_key -> number of weeks the pair shares an option (absent = 0)
    pair_collisions: Counter[tuple[str, str]] = field(default_factory=Counter)

    # (week, option, program) -> extra same-program students in that cell (1-based week/option)
    program_collisions: Counter[tuple[int, int, str]] = field(default_factory=Counter)

    @property
    def total_program_collisions(self) -> int:
        return len(self.program_collisions)

    @property
    def max_program_collisions(self) -> int:
        return max(self.program_collisions.values(), default=0)

    @property
    def program_collision_totals(self) -> Counter[str]:
        """Program -> summed collisions over all weeks and options."""
        totals: Counter[str] = Counter()
        for (_, _, program), count in self.program_collisions.items():
            totals[program] += count
        return totals

    @property
    def total_student_collisions(self) -> int:
        """Pairs sharing an option in more than one week."""
        return sum(1 for count in self.pair_collisions.values() if count > 1)

    @property
    def max_pair_collisions(self) -> int:
        return max(self.pair_collisions.values(), default=0)


def analyze(students: Sequence[ImmersionStudent], preferences: Sequence[Matrix]) -> AssignmentStats:
    """Compute preference, balance and collision statistics.

    Args:
        students: Students whose assigned lists cover every week
        preferences: The per-week preference matrices used for the assignment

    Returns:
        AssignmentStats

    Raises:
        ShapeError: If a student is missing weeks or preferences do not match
    """
    nweeks = len(preferences)
    layout = OptionLayout.from_preferences(preferences)
    for student in students:
        if len(student.assigned) < nweeks:
            raise ShapeError(f"{student.name} has {len(student.assigned)} assigned weeks, expected {nweeks}")
    for week in preferences:
        if len(week) != len(students):
            raise ShapeError("All weeks must have the same number of students as `students`")

    # Mean preference over scored weeks
    scored_weeks = [idx for idx, week in enumerate(preferences) if not is_sentinel_week(week)]
    total, count = 0.0, 0
    for student_idx, student in enumerate(students):
        for week_idx in scored_weeks:
            if not student.participates(week_idx):
                continue
            total += preferences[week_idx][student_idx][student.assigned[week_idx] - 1]
            count += 1
    mean_preference = total / count if count else 0.0

    # Occupancy per week, including empty options
    max_imbalance = 0
    cells: dict[tuple[int, int], list[ImmersionStudent]] = {}
    for week_idx in range(nweeks):
        occupancy = Counter({option: 0 for option in range(1, layout.noptions[week_idx] + 1)})
        for student in students:
            if not student.participates(week_idx):
                continue
            option = student.assigned[week_idx]
            occupancy[option] += 1
            cells.setdefault((week_idx + 1, option), []).append(student)
        if occupancy:
            max_imbalance = max(max_imbalance, max(occupancy.values()) - min(occupancy.values()))

    pair_collisions: Counter[tuple[str, str]] = Counter()
    program_collisions: Counter[tuple[int, int, str]] = Counter()
    for (week, option), members in cells.items():
        for first, second in combinations(members, 2):
            pair_collisions[pair_key(first, second)] += 1
        by_program = Counter(student.program for student in members)
        for program, members_in_program in by_program.items():
            if members_in_program > 1:
                program_collisions[(week, option, program)] = members_in_program - 1

    return AssignmentStats(
        mean_preference=mean_preference,
        max_imbalance=max_imbalance,
        pair_collisions=pair_collisions,
        program_collisions=program_collisions,
    )


def format_stats(stats: AssignmentStats) -> list[str]:
    """Report lines in the fixed wording downstream consumers parse."""
    totals = dict(sorted(stats.program_collision_totals.items()))
    return [
        f"Mean preference score: {stats.mean_preference}",
        f"Maximum imbalance in group size: {stats.max_imbalance}",
        'Two or more students from the same program assigned to the same group ("program collisions"):',
        f"  Total number of program collisions: {stats.total_program_collisions}",
        f"  Maximum number of collisions in a single group: {stats.max_program_collisions}",
        f"  Number of times each program appears in a collision: {totals}",
        'Two or more students sharing a group in more than one week ("student collisions"):',
        f"  Total number of student collisions: {stats.total_student_collisions}",
        f"  Maximum number of collisions for a single pair: {stats.max_pair_collisions}",
    ]
