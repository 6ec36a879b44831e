"""Structural checks run before a scenario may be submitted."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from .model import Scenario
from .types import CellKind

INVALID_ACTORS = "Grid must have exactly one runner and one catcher"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of :func:`validate`; ``reason`` is set only when invalid."""

    ok: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


OK = ValidationResult(True)


def validate(
    scenario: Union[Scenario, np.ndarray, Sequence[Sequence[int]]],
) -> ValidationResult:
    """Return whether ``scenario`` holds exactly one catcher and one runner.

    Obstacle count and placement are unconstrained. The grid is scanned once
    with :func:`numpy.bincount`.
    """
    cells = scenario.view() if isinstance(scenario, Scenario) else np.asarray(scenario)
    counts = np.bincount(
        cells.astype(np.int64).ravel(), minlength=len(CellKind)
    )
    if counts[CellKind.CATCHER] == 1 and counts[CellKind.RUNNER] == 1:
        return OK
    return ValidationResult(False, INVALID_ACTORS)
