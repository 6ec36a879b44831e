"""UI-facing projection of the session state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

import numpy as np

from .scenario.types import CellKind, ErrorState, SessionStatus

GLYPHS = {
    CellKind.EMPTY: ".",
    CellKind.OBSTACLE: "#",
    CellKind.CATCHER: "C",
    CellKind.RUNNER: "R",
}

START_LABEL = "Start Simulation"
RUNNING_LABEL = "Simulation Running..."


@dataclass(frozen=True)
class GridView:
    """Read-only snapshot of everything the operator sees."""

    rows: Tuple[Tuple[CellKind, ...], ...]
    status: SessionStatus
    error: Optional[str] = None

    @property
    def editable(self) -> bool:
        return not self.status.simulating

    @property
    def start_label(self) -> str:
        return RUNNING_LABEL if self.status.simulating else START_LABEL

    def to_text(self) -> str:
        """Render one glyph per cell followed by status and error lines."""
        lines = [" ".join(GLYPHS[cell] for cell in row) for row in self.rows]
        lines.append(f"[{self.status.value}]")
        if self.error:
            lines.append(f"! {self.error}")
        return "\n".join(lines)


def project(
    grid: np.ndarray,
    status: SessionStatus,
    error: Optional[ErrorState] = None,
) -> GridView:
    """Build a :class:`GridView` from the grid array, status and error state."""
    rows = tuple(tuple(CellKind(int(v)) for v in row) for row in np.asarray(grid))
    return GridView(rows, status, error.message if error else None)


def project_session(session: Any) -> GridView:
    """Project any object exposing ``grid_view``, ``state`` and ``error_state``."""
    return project(session.grid_view(), session.state, session.error_state)
