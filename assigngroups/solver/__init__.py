"""
Assignment solvers - OR-Tools CP-SAT models for group assignment.

This package contains:
- assign_partners / PartnerAssignmentSolver: balanced single-round partition
- assign / ImmersionAssignmentSolver: multi-week assignment with penalties
- CpSatBackend: the solve call and status mapping
- Constraint builders: one module per immersion constraint or penalty
- Solution extraction and post-solve analysis
"""

from .analysis import AssignmentStats, analyze, format_stats
from .backend import CpSatBackend, SolverBackend, SolverOptions, SolveResult, TerminationStatus
from .callbacks import SolverProgressCallback
from .constraints import ImmersionFormulation, ImmersionWeights
from .extraction import SELECTION_THRESHOLD, apply_week_choices, extract_groups, extract_week_choices, is_selected
from .immersion import ImmersionAssignmentResult, ImmersionAssignmentSolver, assign
from .logging import ConstraintLogger
from .partners import PartnerAssignmentResult, PartnerAssignmentSolver, assign_partners

__all__ = [
    "SELECTION_THRESHOLD",
    "AssignmentStats",
    "ConstraintLogger",
    "CpSatBackend",
    "ImmersionAssignmentResult",
    "ImmersionAssignmentSolver",
    "ImmersionFormulation",
    "ImmersionWeights",
    "PartnerAssignmentResult",
    "PartnerAssignmentSolver",
    "SolveResult",
    "SolverBackend",
    "SolverOptions",
    "SolverProgressCallback",
    "TerminationStatus",
    # Solution handling
    "analyze",
    "apply_week_choices",
    "assign",
    "assign_partners",
    "extract_groups",
    "extract_week_choices",
    "format_stats",
    "is_selected",
]
