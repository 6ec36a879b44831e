"""Scenario grid, cell kinds and pre-run validation."""

from .model import Scenario
from .types import DEFAULT_GRID_SIZE, CellKind, ErrorState, SessionStatus
from .validate import INVALID_ACTORS, ValidationResult, validate

__all__ = [
    "DEFAULT_GRID_SIZE",
    "CellKind",
    "ErrorState",
    "INVALID_ACTORS",
    "Scenario",
    "SessionStatus",
    "ValidationResult",
    "validate",
]
