"""
Constraint builders for the immersion solver.

Each module adds one family of hard constraints or objective terms to the
CP-SAT model.
"""

from .base import ConstraintBuilder, ImmersionContext, ImmersionFormulation, ImmersionWeights, ObjectiveBuilder
from .exclusivity import add_week_exclusivity_constraints
from .group_size import add_group_size_terms
from .preassignment import add_preassignment_constraints
from .preference_cost import add_preference_cost_terms
from .repeat_partner import add_repeat_partner_terms
from .same_program import add_same_program_terms

__all__ = [
    "ConstraintBuilder",
    "ImmersionContext",
    "ImmersionFormulation",
    "ImmersionWeights",
    "ObjectiveBuilder",
    "add_group_size_terms",
    "add_preassignment_constraints",
    "add_preference_cost_terms",
    "add_repeat_partner_terms",
    "add_same_program_terms",
    "add_week_exclusivity_constraints",
]
