"""Widgets window projecting the session onto a clickable grid."""

from __future__ import annotations

from typing import Dict, List

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from pursuit_web.scenario import CellKind
from pursuit_web.view import project_session

from .state import PaletteModel, SessionController

CELL_STYLES = {
    CellKind.EMPTY: "background: #f3f4f6; border: 1px solid #e5e7eb;",
    CellKind.OBSTACLE: "background: #1f2937;",
    CellKind.CATCHER: "background: #ef4444;",
    CellKind.RUNNER: "background: #3b82f6;",
}
CELL_PX = 40


class ScenarioWindow(QWidget):
    """Grid editor, tool palette, Start/Reset actions and an error banner.

    The window only reads the session and forwards operator intents to it; it
    redraws from scratch whenever the session signals a change.
    """

    def __init__(
        self, session: SessionController, palette: PaletteModel | None = None
    ) -> None:
        super().__init__()
        self.session = session
        self.palette_model = palette or PaletteModel()
        self._controls_enabled = False
        self.setWindowTitle("Grid Simulation")

        self.banner = QLabel("")
        self.banner.setStyleSheet("background: #fee2e2; color: #b91c1c; padding: 8px;")
        self.banner.setVisible(False)
        self.notice = QLabel("")
        self.notice.setStyleSheet("color: #6b7280; padding: 4px 8px;")
        self.notice.setVisible(False)

        grid_box = QWidget()
        grid_layout = QGridLayout(grid_box)
        grid_layout.setSpacing(2)
        self.cells: List[List[QPushButton]] = []
        for row in range(session.size):
            buttons = []
            for col in range(session.size):
                btn = QPushButton()
                btn.setFixedSize(CELL_PX, CELL_PX)
                btn.clicked.connect(
                    lambda _checked=False, r=row, c=col: self.paint(r, c)
                )
                grid_layout.addWidget(btn, row, col)
                buttons.append(btn)
            self.cells.append(buttons)

        controls = QVBoxLayout()
        controls.addWidget(QLabel("Controls"))
        self.tool_buttons: Dict[int, QPushButton] = {}
        for tool in self.palette_model.tools():
            btn = QPushButton(f"{tool['icon']}  {tool['label']}")
            btn.setCheckable(True)
            btn.clicked.connect(
                lambda _checked=False, k=tool["kind"]: self.palette_model.select(k)
            )
            controls.addWidget(btn)
            self.tool_buttons[tool["kind"]] = btn
        self.start_button = QPushButton()
        self.start_button.clicked.connect(session.start)
        self.reset_button = QPushButton("Reset Grid")
        self.reset_button.clicked.connect(session.reset)
        controls.addSpacing(12)
        controls.addWidget(self.start_button)
        controls.addWidget(self.reset_button)
        controls.addStretch(1)

        body = QHBoxLayout()
        body.addWidget(grid_box, 1)
        body.addLayout(controls)
        root = QVBoxLayout(self)
        root.addWidget(self.banner)
        root.addWidget(self.notice)
        root.addLayout(body)

        session.gridChanged.connect(self.refresh)
        session.statusChanged.connect(self.refresh)
        session.errorChanged.connect(self.refresh)
        session.editableChanged.connect(self.palette_model.setEnabled)
        self.palette_model.toolChanged.connect(self.refresh)
        self.refresh()

    # ------------------------------------------------------------------
    @property
    def controlsEnabled(self) -> bool:
        return self._controls_enabled

    @controlsEnabled.setter
    def controlsEnabled(self, value: bool) -> None:
        self._controls_enabled = bool(value)
        self.refresh()

    def show_notice(self, text: str) -> None:
        """Show a persistent line under the error banner."""
        self.notice.setText(text)
        self.notice.setVisible(bool(text))

    # ------------------------------------------------------------------
    def paint(self, row: int, col: int) -> None:
        """Apply the selected tool to ``(row, col)``."""
        self.session.setCell(row, col, int(self.palette_model.selected))

    def refresh(self, *_args: object) -> None:
        """Redraw every widget from the current session state."""
        view = project_session(self.session)
        for r, row in enumerate(view.rows):
            for c, kind in enumerate(row):
                btn = self.cells[r][c]
                btn.setStyleSheet(CELL_STYLES[kind])
                btn.setCursor(
                    Qt.CursorShape.PointingHandCursor
                    if view.editable
                    else Qt.CursorShape.ForbiddenCursor
                )
        for kind, btn in self.tool_buttons.items():
            btn.setChecked(kind == int(self.palette_model.selected))
            btn.setEnabled(view.editable)
        self.start_button.setText(view.start_label)
        self.start_button.setEnabled(view.editable and self._controls_enabled)
        self.banner.setText(view.error or "")
        self.banner.setVisible(bool(view.error))
