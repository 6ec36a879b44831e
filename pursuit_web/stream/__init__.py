"""Wire events and MessagePack framing for the simulation channel."""

from .events import (
    INBOUND_EVENTS,
    OUTBOUND_EVENTS,
    ConnectionFailed,
    EventName,
    GridUpdate,
    RemoteError,
    RemoteEvent,
)
from .protocol import PROTOCOL_VERSION, check_grid, pack_event, unpack_event

__all__ = [
    "INBOUND_EVENTS",
    "OUTBOUND_EVENTS",
    "PROTOCOL_VERSION",
    "ConnectionFailed",
    "EventName",
    "GridUpdate",
    "RemoteError",
    "RemoteEvent",
    "check_grid",
    "pack_event",
    "unpack_event",
]
