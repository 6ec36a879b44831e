"""MessagePack helpers for simulation stream messages.

Every frame is a map carrying a ``type`` discriminator (the event name) and a
``v`` version field next to the event payload. Unknown versions, missing
fields and malformed grids raise a ``ValueError`` to keep the IPC contract
stable.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import msgpack  # type: ignore[import-untyped]

from ..scenario.types import CellKind
from .events import EventName, GridUpdate, RemoteError, RemoteEvent

PROTOCOL_VERSION = 1
HELLO = "Hello"

_CELL_VALUES = frozenset(int(kind) for kind in CellKind)


def _pack(payload: Dict[str, Any]) -> bytes:
    return msgpack.packb(payload, use_bin_type=True)


def _unpack(raw: bytes) -> Dict[str, Any]:
    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise ValueError("expected a binary frame")
    try:
        msg = msgpack.unpackb(raw, raw=False)
    except (msgpack.UnpackException, ValueError) as exc:
        raise ValueError(f"undecodable frame: {exc}") from exc
    if not isinstance(msg, dict):
        raise ValueError("expected a map frame")
    if "v" not in msg:
        raise ValueError("missing 'v' field")
    if msg["v"] != PROTOCOL_VERSION:
        raise ValueError(f"unsupported protocol version: {msg['v']}")
    return msg


# ----------------------------------------------------------------------
def pack_hello(token: str) -> bytes:
    """Return the handshake frame carrying the session ``token``."""
    return _pack({"type": HELLO, "v": PROTOCOL_VERSION, "token": token})


def is_hello(raw: bytes) -> bool:
    """Return ``True`` if ``raw`` is a well-formed handshake reply."""
    try:
        return _unpack(raw).get("type") == HELLO
    except ValueError:
        return False


# ----------------------------------------------------------------------
def check_grid(grid: Any, size: Optional[int] = None) -> List[List[int]]:
    """Return ``grid`` as a list of int rows after validating its shape.

    The grid must be square, non-empty and made only of :class:`CellKind`
    values. When ``size`` is given the edge length must match it.
    """
    if not isinstance(grid, (list, tuple)) or not grid:
        raise ValueError("grid must be a non-empty list of rows")
    n = len(grid)
    if size is not None and n != size:
        raise ValueError(f"expected {size} rows, got {n}")
    rows: List[List[int]] = []
    for i, row in enumerate(grid):
        if not isinstance(row, (list, tuple)) or len(row) != n:
            raise ValueError(f"row {i} must hold exactly {n} cells")
        for value in row:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"row {i} holds non-integer cell {value!r}")
            if value not in _CELL_VALUES:
                raise ValueError(f"row {i} holds unknown cell value {value}")
        rows.append(list(row))
    return rows


def pack_event(event: EventName | str, payload: Optional[Dict[str, Any]] = None) -> bytes:
    """Return the msgpack frame for ``event`` with an optional ``payload``."""
    name = EventName(event)
    body = dict(payload or {})
    if name is EventName.START_SIMULATION:
        body["grid"] = check_grid(body.get("grid"))
    return _pack({"type": name.value, "v": PROTOCOL_VERSION, **body})


def unpack_event(raw: bytes, size: Optional[int] = None) -> RemoteEvent:
    """Decode an inbound ``grid_update`` or ``error`` frame."""
    msg = _unpack(raw)
    mtype = msg.get("type")
    if mtype == EventName.GRID_UPDATE.value:
        if "grid" not in msg:
            raise ValueError("grid_update missing 'grid' field")
        done = msg.get("done", False)
        if not isinstance(done, bool):
            raise ValueError("grid_update 'done' must be a boolean")
        return GridUpdate(grid=check_grid(msg["grid"], size), done=done)
    if mtype == EventName.ERROR.value:
        message = msg.get("message")
        if not isinstance(message, str):
            raise ValueError("error event missing 'message' field")
        return RemoteError(message=message)
    raise ValueError(f"unexpected message type: {mtype!r}")
