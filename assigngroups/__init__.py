"""
assigngroups - assign students to groups with CP-SAT.

Two problems are supported:
- Partners: split students into balanced groups for one round, honoring
  requested partners
- Immersion: give every student one option per week while spreading
  programs and avoiding repeated partners

The package only logs through module loggers; call configure_logging() to
see model sizes, solver status and, at DEBUG or TRACE, the constraint ledger
and extracted choices.
"""

from .errors import AssignGroupsError, DomainError, ShapeError, SolverError
from .logging_config import TRACE, configure_logging
from .models import NOT_PARTICIPATING, ImmersionStudent, PartnerStudent, pair_key, unassign
from .preferences import OptionLayout, is_sentinel_week, partner_bonus_matrix
from .solver import (
    AssignmentStats,
    ImmersionFormulation,
    ImmersionWeights,
    SolverOptions,
    TerminationStatus,
    analyze,
    assign,
    assign_partners,
    format_stats,
)

__all__ = [
    "NOT_PARTICIPATING",
    "AssignGroupsError",
    "AssignmentStats",
    "DomainError",
    "ImmersionFormulation",
    "ImmersionStudent",
    "ImmersionWeights",
    "OptionLayout",
    "PartnerStudent",
    "ShapeError",
    "SolverError",
    "SolverOptions",
    "TRACE",
    "TerminationStatus",
    "analyze",
    "assign",
    "assign_partners",
    "configure_logging",
    "format_stats",
    "is_sentinel_week",
    "pair_key",
    "partner_bonus_matrix",
    "unassign",
]
