from __future__ import annotations

"""Tool palette selecting which cell kind a click paints."""

from typing import Dict, List

from PySide6.QtCore import QObject, Property, Signal, Slot

from pursuit_web.scenario import CellKind

#: Button label and icon for each tool, in display order.
TOOLS: Dict[CellKind, tuple[str, str]] = {
    CellKind.EMPTY: ("Empty Cell", "⬜"),
    CellKind.OBSTACLE: ("Obstacle", "⬛"),
    CellKind.CATCHER: ("Catcher", "🔴"),
    CellKind.RUNNER: ("Runner", "🔵"),
}


class PaletteModel(QObject):
    """Track the selected tool and whether the palette accepts input."""

    toolChanged = Signal(int)
    enabledChanged = Signal(bool)

    def __init__(self) -> None:
        super().__init__()
        self._tool = CellKind.EMPTY
        self._enabled = True

    # ------------------------------------------------------------------
    @property
    def selected(self) -> CellKind:
        return self._tool

    def _get_tool(self) -> int:
        return int(self._tool)

    tool = Property(int, _get_tool, notify=toolChanged)

    # ------------------------------------------------------------------
    def _get_enabled(self) -> bool:
        return self._enabled

    @Slot(bool)
    def setEnabled(self, value: bool) -> None:
        """Follow the session's ``editable`` flag."""
        value = bool(value)
        if self._enabled != value:
            self._enabled = value
            self.enabledChanged.emit(value)

    enabled = Property(bool, _get_enabled, setEnabled, notify=enabledChanged)

    # ------------------------------------------------------------------
    @Slot(int)
    def select(self, kind: int) -> None:
        """Select ``kind`` as the painting tool unless the palette is disabled."""
        if not self._enabled:
            return
        kind = CellKind(kind)
        if kind is not self._tool:
            self._tool = kind
            self.toolChanged.emit(int(kind))

    def tools(self) -> List[dict]:
        """Return the tool buttons for display."""
        return [
            {"kind": int(kind), "label": label, "icon": icon, "selected": kind is self._tool}
            for kind, (label, icon) in TOOLS.items()
        ]
