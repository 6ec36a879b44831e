import sys
from pathlib import Path

# Ensure package import for tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from pursuit_web.config import Config
from pursuit_web.scenario import CellKind


@pytest.fixture(autouse=True)
def _restore_config():
    """Undo class-level Config changes made by a test."""

    saved = {
        key: value
        for key, value in vars(Config).items()
        if not key.startswith("_") and not callable(value)
        and not isinstance(value, classmethod)
    }
    yield
    for key, value in saved.items():
        setattr(Config, key, value)


@pytest.fixture
def valid_rows():
    """10x10 grid with the runner top-left and the catcher bottom-right."""

    rows = [[int(CellKind.EMPTY)] * 10 for _ in range(10)]
    rows[0][0] = int(CellKind.RUNNER)
    rows[9][9] = int(CellKind.CATCHER)
    return rows
