"""
Base types and context for immersion constraint builders.

Provides the ImmersionContext dataclass that holds all state needed by the
constraint and objective modules.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from ortools.sat.python import cp_model
from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from assigngroups.models import ImmersionStudent
    from assigngroups.preferences import Matrix, OptionLayout
    from assigngroups.settings import Settings
    from assigngroups.solver.logging import ConstraintLogger


class ImmersionFormulation(str, Enum):
    """How the same-program and repeat-partner penalties count collisions."""

    # Extra occurrences beyond the first (canonical)
    LINEAR = "linear"
    # Every co-assigned pair-option product (legacy nonlinear objective)
    PAIRWISE_PRODUCT = "pairwise_product"


class ImmersionWeights(BaseModel):
    """Non-negative weights of the immersion objective terms."""

    preference: float = Field(default=1.0, ge=0)
    size_imbalance: float = Field(default=1.0, ge=0)
    same_program: float = Field(default=1.0, ge=0)
    repeat_partner: float = Field(default=1.0, ge=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> ImmersionWeights:
        return cls(
            preference=settings.weight_preference,
            size_imbalance=settings.weight_size_imbalance,
            same_program=settings.weight_same_program,
            repeat_partner=settings.weight_repeat_partner,
        )


@dataclass
class ImmersionContext:
    """
    Shared context passed to all immersion constraint builders.
    """

    # Core CP-SAT model
    model: cp_model.CpModel

    # indicators[(student_idx, column)] = BoolVar (1 if student takes that option)
    indicators: dict[tuple[int, int], cp_model.IntVar]

    students: Sequence[ImmersionStudent]
    preferences: Sequence[Matrix]
    layout: OptionLayout

    # first_free_week[i] = number of weeks already fixed for student i
    first_free_week: list[int]

    weights: ImmersionWeights
    formulation: ImmersionFormulation
    scale: int
    balance_includes_sentinel_weeks: bool

    constraint_logger: ConstraintLogger

    # 0-based indices of all-zero weeks
    sentinel_weeks: frozenset[int] = frozenset()

    # co_assigned[(i1, i2, column)] = BoolVar, created on demand (i1 < i2)
    co_assigned: dict[tuple[int, int, int], cp_model.IntVar] = field(default_factory=dict)

    @property
    def nstudents(self) -> int:
        return len(self.students)

    def coefficient(self, weight: float, value: float = 1.0) -> int:
        """Integer objective coefficient for weight * value."""
        return round(weight * value * self.scale)

    def is_free(self, student_idx: int, week_idx: int) -> bool:
        """True if the week is optimized for this student (not pre-assigned)."""
        return week_idx >= self.first_free_week[student_idx]


class ConstraintBuilder(Protocol):
    """Adds hard constraints to the model."""

    def __call__(self, ctx: ImmersionContext) -> None: ...


class ObjectiveBuilder(Protocol):
    """
    Builds objective terms.

    Returns a list of (variable, coefficient) tuples to be added to the
    minimized objective.
    """

    def __call__(self, ctx: ImmersionContext) -> list[tuple[cp_model.IntVar, int]]: ...
