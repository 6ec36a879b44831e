"""State management for the scenario UI."""

from .Session import CONNECT_FAILED, START_FAILED, SessionController
from .Palette import PaletteModel, TOOLS

__all__ = [
    "CONNECT_FAILED",
    "START_FAILED",
    "SessionController",
    "PaletteModel",
    "TOOLS",
]
