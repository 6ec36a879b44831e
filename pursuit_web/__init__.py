"""pursuit_web package initialization."""

from __future__ import annotations

from .scenario import CellKind, Scenario, SessionStatus, validate

__all__ = ["CellKind", "Scenario", "SessionStatus", "validate"]
