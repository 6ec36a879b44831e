from __future__ import annotations

"""Session controller owning the scenario grid and the run status."""

import logging
from typing import List, Optional

import numpy as np
from PySide6.QtCore import QObject, Property, Signal, Slot

from pursuit_web.scenario import (
    DEFAULT_GRID_SIZE,
    CellKind,
    ErrorState,
    Scenario,
    SessionStatus,
    ValidationResult,
    validate,
)
from pursuit_web.stream.events import (
    ConnectionFailed,
    EventName,
    GridUpdate,
    RemoteError,
    RemoteEvent,
)

from ..ipc import Channel

logger = logging.getLogger(__name__)

CONNECT_FAILED = "Failed to connect to server"
START_FAILED = "Failed to start simulation. Please try again."


class SessionController(QObject):
    """Single writer of the scenario grid, the session status and the error.

    Operator intents (:meth:`setCell`, :meth:`start`, :meth:`stop`,
    :meth:`reset`) and remote events (:meth:`dispatch`) are the only inputs.
    The grid is editable while no run is pending or in flight; while a run is
    in flight the remote snapshots are its only source.
    """

    statusChanged = Signal(str)
    errorChanged = Signal(str)
    gridChanged = Signal()
    editableChanged = Signal(bool)
    finished = Signal(str)

    def __init__(self, size: int = DEFAULT_GRID_SIZE) -> None:
        super().__init__()
        self._scenario = Scenario(size)
        self._status = SessionStatus.IDLE
        self._error: Optional[ErrorState] = None
        self._client: Optional[Channel] = None

    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionStatus:
        """Return the current :class:`SessionStatus`."""
        return self._status

    def _get_status(self) -> str:
        return self._status.value

    def _set_status(self, value: SessionStatus) -> None:
        old = self._status
        if old is value:
            return
        self._status = value
        logger.info("Session %s -> %s", old.value, value.value)
        self.statusChanged.emit(value.value)
        if old.simulating != value.simulating:
            self.editableChanged.emit(not value.simulating)
            if old.simulating:
                self.finished.emit(value.value)

    status = Property(str, _get_status, notify=statusChanged)

    # ------------------------------------------------------------------
    @property
    def error_state(self) -> Optional[ErrorState]:
        return self._error

    def _get_error(self) -> str:
        return self._error.message if self._error else ""

    def _set_error(self, message: Optional[str]) -> None:
        new = ErrorState(message) if message is not None else None
        if self._error != new:
            self._error = new
            if new is not None:
                logger.warning("Session error: %s", new.message)
            self.errorChanged.emit(new.message if new else "")

    error = Property(str, _get_error, notify=errorChanged)

    # ------------------------------------------------------------------
    def _get_editable(self) -> bool:
        return not self._status.simulating

    editable = Property(bool, _get_editable, notify=editableChanged)

    def _get_simulating(self) -> bool:
        return self._status.simulating

    simulating = Property(bool, _get_simulating, notify=editableChanged)

    # ------------------------------------------------------------------
    def _get_size(self) -> int:
        return self._scenario.size

    size = Property(int, _get_size, constant=True)

    def _get_grid(self) -> List[List[int]]:
        return self._scenario.to_rows()

    grid = Property("QVariant", _get_grid, notify=gridChanged)

    def grid_view(self) -> np.ndarray:
        """Return a read-only view of the current grid."""
        return self._scenario.view()

    def cell(self, row: int, col: int) -> CellKind:
        return self._scenario[row, col]

    def validity(self) -> ValidationResult:
        """Recompute whether the current grid may be submitted."""
        return validate(self._scenario)

    # ------------------------------------------------------------------
    def set_client(self, client: Channel | None) -> None:
        """Attach the ``client`` channel used for outbound events."""
        self._client = client

    def _emit(self, event: EventName, payload: Optional[dict] = None) -> bool:
        if self._client is None:
            logger.warning("Dropping %s: no channel attached", event.value)
            return False
        return self._client.emit(event, payload)

    # ------------------------------------------------------------------
    @Slot(int, int, int, result=bool)
    def setCell(self, row: int, col: int, kind: int) -> bool:
        """Paint ``kind`` at ``(row, col)``; a no-op while a run is in flight."""
        if self._status.simulating:
            return False
        if not self._scenario.in_bounds(row, col):
            return False
        kind = CellKind(kind)
        if self._scenario[row, col] is kind:
            return True
        self._scenario.set_cell(row, col, kind)
        self.gridChanged.emit()
        return True

    @Slot()
    def start(self) -> None:
        """Validate the grid and ask the service to start simulating it."""
        if self._status.simulating:
            logger.info("Start ignored while %s", self._status.value)
            return
        self._set_error(None)
        result = validate(self._scenario)
        if not result.ok:
            self._set_error(result.reason)
            return
        if not self._emit(EventName.START_SIMULATION, {"grid": self._scenario.to_rows()}):
            self._set_error(START_FAILED)
            return
        logger.info(
            "Submitted %dx%d scenario with %d obstacles",
            self._scenario.size,
            self._scenario.size,
            self._scenario.count(CellKind.OBSTACLE),
        )
        self._set_status(SessionStatus.AWAITING_START)

    @Slot()
    def stop(self) -> None:
        """Ask the service to stop; the last known grid is kept."""
        self._emit(EventName.STOP_SIMULATION)
        self._set_status(SessionStatus.STOPPED)

    @Slot()
    def reset(self) -> None:
        """Stop any run in flight, clear the grid and the error banner."""
        if self._status.simulating:
            self._emit(EventName.STOP_SIMULATION)
        self._scenario.clear()
        self.gridChanged.emit()
        self._set_error(None)
        self._set_status(SessionStatus.IDLE)

    # ------------------------------------------------------------------
    def dispatch(self, event: RemoteEvent) -> None:
        """Apply one inbound channel event."""
        if isinstance(event, GridUpdate):
            self._apply_snapshot(event)
        elif isinstance(event, RemoteError):
            self._fail(event.message)
        elif isinstance(event, ConnectionFailed):
            self._fail(CONNECT_FAILED)
        else:
            raise TypeError(f"unsupported event {event!r}")

    def _apply_snapshot(self, event: GridUpdate) -> None:
        # Snapshots in transit at stop time still land; idle/errored grids are local.
        if self._status in (SessionStatus.IDLE, SessionStatus.ERRORED):
            logger.debug("Dropping snapshot while %s", self._status.value)
            return
        try:
            self._scenario.replace(event.grid)
        except ValueError as exc:
            logger.warning("Rejected snapshot: %s", exc)
            return
        if event.done:
            self._set_status(SessionStatus.STOPPED)
        elif self._status.simulating:
            self._set_status(SessionStatus.RUNNING)
        self.gridChanged.emit()

    def _fail(self, message: str) -> None:
        self._set_error(message)
        if self._status.simulating:
            self._set_status(SessionStatus.ERRORED)
