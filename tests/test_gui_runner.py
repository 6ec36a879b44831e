import os
import sys
import time

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6")
pytest.importorskip("qasync")

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from pursuit_web.main import EXIT_OK, MainService
from pursuit_web.scenario import CellKind
from pursuit_ui.state import CONNECT_FAILED
from pursuit_ui.window import ScenarioWindow
from tests.service_utils import free_port


def test_window_outlives_exhausted_reconnects(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    app = QApplication.instance() or QApplication([])
    url = f"ws://127.0.0.1:{free_port()}"
    seen = {}

    def inspect():
        windows = [w for w in app.topLevelWidgets() if isinstance(w, ScenarioWindow)]
        try:
            window = windows[0]
            session = window.session
            seen["visible"] = window.isVisible()
            seen["error"] = session.error
            seen["notice"] = window.notice.text()
            window.palette_model.select(CellKind.OBSTACLE)
            window.paint(3, 3)
            seen["painted"] = session.cell(3, 3)
            window.reset_button.click()
            seen["grid"] = session.grid
        finally:
            for widget in app.topLevelWidgets():
                widget.close()

    # Retries are exhausted well before the check runs.
    QTimer.singleShot(1500, inspect)
    started = time.monotonic()
    code = MainService(
        argv=[
            "--ws-url",
            url,
            "--reconnect_attempts",
            "1",
            "--reconnect_delay",
            "0.05",
            "--log_file",
            str(tmp_path / "gui.log"),
        ]
    ).run()

    assert code == EXIT_OK
    assert time.monotonic() - started >= 1.4
    assert seen["visible"] is True
    assert seen["error"] == CONNECT_FAILED
    assert seen["notice"] == f"Offline: could not reach {url}"
    assert seen["painted"] is CellKind.OBSTACLE
    assert seen["grid"] == [[0] * 10 for _ in range(10)]
