"""Error classes for group assignment.

Input problems are raised before any model is built. Solver outcomes are
never raised: a non-optimal termination is logged and the best available
solution is still returned.
"""

from __future__ import annotations


class AssignGroupsError(Exception):
    """Base exception for assignment errors."""

    pass


class ShapeError(AssignGroupsError, ValueError):
    """Raised when entity lists, preference matrices or option indices disagree in shape."""

    pass


class DomainError(AssignGroupsError, ValueError):
    """Raised when a value is outside its allowed domain (e.g. non-positive interest score)."""

    pass


class SolverError(AssignGroupsError):
    """Raised when a solver result is queried for values it does not hold."""

    pass
