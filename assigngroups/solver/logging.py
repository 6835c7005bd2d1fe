"""
Constraint Logger - per-solve ledger of what went into the model.

One instance lives for one solve. It records:
    constraints   hard/soft entries, keyed by constraint type
    terms         objective term counts per builder
    violations    problems found when reading the solution back
    progress      improving solutions and the final solver status
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from typing import Any

logger = logging.getLogger(__name__)

MODES = ("hard", "soft")


class ConstraintLogger:
    """Ledger of model construction and solver progress for one solve."""

    def __init__(self, debug_mode: bool = False) -> None:
        self.debug_mode = debug_mode
        self.constraints: dict[str, defaultdict[str, list[str]]] = {mode: defaultdict(list) for mode in MODES}
        self.term_counts: Counter[str] = Counter()
        self.violations: defaultdict[str, list[dict[str, str]]] = defaultdict(list)
        self.solver_progress: list[str] = []

    def log_constraint(self, mode: str, constraint_type: str, details: str) -> None:
        """Record a hard constraint family or soft objective component."""
        if mode not in MODES:
            raise ValueError(f"Unknown constraint mode: {mode}")
        self.constraints[mode][constraint_type].append(details)
        if self.debug_mode:
            logger.debug(f"[CONSTRAINT] {mode.upper()} {constraint_type}: {details}")

    def log_terms(self, constraint_type: str, count: int) -> None:
        """Record how many objective terms a builder contributed."""
        self.term_counts[constraint_type] += count
        if self.debug_mode:
            logger.debug(f"[OBJECTIVE] {constraint_type}: {count} terms")

    def log_violation(self, constraint_type: str, details: str, severity: str = "info") -> None:
        """Record a problem found in the extracted solution."""
        self.violations[constraint_type].append({"details": details, "severity": severity})
        if severity == "error":
            logger.error(f"[VIOLATION] {constraint_type}: {details}")
        else:
            logger.info(f"[VIOLATION] {constraint_type}: {details}")

    def log_progress(self, message: str) -> None:
        self.solver_progress.append(message)
        if self.debug_mode:
            logger.debug(f"[SOLVER] {message}")

    @property
    def has_errors(self) -> bool:
        return any(entry["severity"] == "error" for entries in self.violations.values() for entry in entries)

    def get_summary(self) -> dict[str, Any]:
        """Plain-dict snapshot of everything recorded so far."""
        return {
            "constraints_added": {mode: dict(entries) for mode, entries in self.constraints.items()},
            "objective_terms": dict(self.term_counts),
            "violations": dict(self.violations),
            "solver_progress": list(self.solver_progress),
        }
