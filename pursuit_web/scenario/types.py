from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

#: Default edge length of the square scenario grid.
DEFAULT_GRID_SIZE = 10


class CellKind(IntEnum):
    """Content of a single grid cell.

    The integer values double as the wire encoding.
    """

    EMPTY = 0
    OBSTACLE = 1
    CATCHER = 2
    RUNNER = 3


class SessionStatus(str, Enum):
    """Lifecycle of one simulation session."""

    IDLE = "idle"
    AWAITING_START = "awaiting_start"
    RUNNING = "running"
    STOPPED = "stopped"
    ERRORED = "errored"

    @property
    def simulating(self) -> bool:
        """Return ``True`` while a run is pending or in flight."""
        return self in (SessionStatus.AWAITING_START, SessionStatus.RUNNING)


@dataclass(frozen=True)
class ErrorState:
    """Single error banner shown to the operator."""

    message: str
