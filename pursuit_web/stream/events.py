"""Event names and typed inbound events exchanged with the simulation service."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Union


class EventName(str, Enum):
    """Closed set of event names on the channel."""

    START_SIMULATION = "start_simulation"
    STOP_SIMULATION = "stop_simulation"
    GRID_UPDATE = "grid_update"
    ERROR = "error"
    CONNECT_ERROR = "connect_error"


#: Events the client sends to the service.
OUTBOUND_EVENTS = frozenset({EventName.START_SIMULATION, EventName.STOP_SIMULATION})

#: Events the channel delivers to handlers.
INBOUND_EVENTS = frozenset(
    {EventName.GRID_UPDATE, EventName.ERROR, EventName.CONNECT_ERROR}
)


@dataclass(frozen=True)
class GridUpdate:
    """One simulation tick: the full grid and whether the run finished."""

    name: ClassVar[EventName] = EventName.GRID_UPDATE

    grid: List[List[int]]
    done: bool = False


@dataclass(frozen=True)
class RemoteError:
    """Application error reported by the simulation service."""

    name: ClassVar[EventName] = EventName.ERROR

    message: str


@dataclass(frozen=True)
class ConnectionFailed:
    """Transport failure detected by the channel itself."""

    name: ClassVar[EventName] = EventName.CONNECT_ERROR

    reason: str = field(default="", compare=False)


RemoteEvent = Union[GridUpdate, RemoteError, ConnectionFailed]
