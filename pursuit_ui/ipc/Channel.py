"""WebSocket channel to the simulation service using msgpack frames."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, InvalidHandshake

from pursuit_web.stream.events import (
    INBOUND_EVENTS,
    OUTBOUND_EVENTS,
    ConnectionFailed,
    EventName,
    RemoteEvent,
)
from pursuit_web.stream.protocol import is_hello, pack_event, pack_hello, unpack_event

logger = logging.getLogger(__name__)

Handler = Callable[[RemoteEvent], Any]


class ConnectError(Exception):
    """Raised when the channel fails to establish a connection."""


class Channel:
    """Single persistent connection to the simulation service.

    A channel is used for exactly one mount: :meth:`open` once, :meth:`close`
    once. Inbound frames are decoded by a receiver task and handed to the
    handler registered for their event name, one at a time and in arrival
    order. Outbound events are queued by :meth:`emit` and written by a sender
    task in call order. After :meth:`close` returns no handler runs again.
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        grid_size: int | None = None,
        ping_interval: float = 20.0,
        open_timeout: float = 5.0,
    ) -> None:
        """Initialize the channel.

        Parameters
        ----------
        url:
            WebSocket server URL.
        token:
            Optional session token sent in the ``Hello`` handshake.
        grid_size:
            Expected edge length of incoming grids. Snapshots of another size
            are dropped.
        ping_interval:
            Seconds between keepalive pings.
        open_timeout:
            Seconds allowed for connecting and completing the handshake.
        """
        self.url = url
        self.token = token or ""
        self.grid_size = grid_size
        self.ping_interval = ping_interval
        self.open_timeout = open_timeout
        self.connection: Optional[Any] = None
        self._handlers: Dict[EventName, Handler] = {}
        self._outbox: asyncio.Queue[bytes] = asyncio.Queue()
        self._recv_task: Optional[asyncio.Task] = None
        self._send_task: Optional[asyncio.Task] = None
        self._state = "new"
        self._writable = True
        self._ended = asyncio.Event()

    # ------------------------------------------------------------------
    @property
    def connected(self) -> bool:
        """Return ``True`` while the connection is open and usable."""
        return (
            self._state == "open" and self.connection is not None and self._writable
        )

    @property
    def closed(self) -> bool:
        return self._state == "closed"

    def on(self, event: EventName | str, handler: Handler) -> None:
        """Register the single ``handler`` for inbound ``event``."""
        name = EventName(event)
        if name not in INBOUND_EVENTS:
            raise ValueError(f"{name.value!r} is not an inbound event")
        if name in self._handlers:
            raise ValueError(f"handler already registered for {name.value!r}")
        self._handlers[name] = handler

    def _dispatch(self, event: RemoteEvent) -> None:
        if self._state == "closed":
            return
        handler = self._handlers.get(event.name)
        if handler is None:
            logger.debug("No handler for %s; dropping", event.name.value)
            return
        try:
            handler(event)
        except Exception:
            logger.exception("Handler for %s failed", event.name.value)

    # ------------------------------------------------------------------
    async def open(self) -> bool:
        """Connect and start delivering events.

        Returns ``True`` on success. On failure the ``connect_error`` handler
        runs, ``False`` is returned and no other event will ever be delivered.
        """
        if self._state != "new":
            raise RuntimeError("Channel.open() called twice")
        self._state = "open"
        try:
            await self._connect()
        except ConnectError as exc:
            logger.warning("Could not connect to %s: %s", self.url, exc)
            self._ended.set()
            self._dispatch(ConnectionFailed(str(exc)))
            return False
        logger.info("Connected to %s", self.url)
        self._recv_task = asyncio.create_task(self._receiver())
        self._send_task = asyncio.create_task(self._sender())
        return True

    async def _connect(self) -> None:
        """Open the WebSocket connection and perform the hello handshake."""
        try:
            self.connection = await websockets.connect(
                self.url,
                open_timeout=self.open_timeout,
                ping_interval=self.ping_interval,
            )
            await self.connection.send(pack_hello(self.token))
            data = await asyncio.wait_for(
                self.connection.recv(), timeout=self.open_timeout
            )
            if not is_hello(data):
                raise ConnectError("handshake failed")
        except (
            OSError,
            asyncio.TimeoutError,
            InvalidHandshake,
            ConnectionClosed,
            ConnectError,
        ) as e:
            if self.connection is not None:
                await self.connection.close()
                self.connection = None
            if isinstance(e, ConnectError):
                raise
            raise ConnectError(str(e) or type(e).__name__) from e

    async def _receiver(self) -> None:
        """Background task decoding frames and dispatching them."""
        assert self.connection is not None
        reason = "connection closed by server"
        try:
            async for raw in self.connection:
                try:
                    event = unpack_event(raw, self.grid_size)
                except ValueError as exc:
                    logger.warning("Dropping malformed frame: %s", exc)
                    continue
                self._dispatch(event)
        except ConnectionClosedError as exc:
            reason = str(exc) or reason
        if self._state != "open":
            return
        logger.warning("Lost connection to %s: %s", self.url, reason)
        self.connection = None
        self._ended.set()
        if self._send_task is not None:
            self._send_task.cancel()
        self._dispatch(ConnectionFailed(reason))

    async def _sender(self) -> None:
        """Background task writing queued frames in order."""
        try:
            while True:
                packed = await self._outbox.get()
                if self.connection is None:
                    break
                try:
                    await self.connection.send(packed)
                except ConnectionClosed as exc:
                    logger.warning("Dropping outbound frame: %s", exc)
                    break
        finally:
            # Nothing queued after this point would ever be written.
            self._writable = False

    # ------------------------------------------------------------------
    def emit(self, event: EventName | str, payload: Optional[Dict[str, Any]] = None) -> bool:
        """Queue ``event`` for sending without waiting for an acknowledgement.

        Returns ``False`` when the channel is not connected; the event is then
        dropped.
        """
        name = EventName(event)
        if name not in OUTBOUND_EVENTS:
            raise ValueError(f"{name.value!r} is not an outbound event")
        if not self.connected:
            logger.warning("Dropping %s: channel not connected", name.value)
            return False
        self._outbox.put_nowait(pack_event(name, payload))
        return True

    async def wait_closed(self) -> None:
        """Wait until the connection has ended for any reason."""
        await self._ended.wait()

    async def close(self) -> None:
        """Close the connection; no handler runs after this returns."""
        if self._state == "closed":
            return
        self._state = "closed"
        self._handlers.clear()
        for task in (self._send_task, self._recv_task):
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._send_task = None
        self._recv_task = None
        if self.connection is not None:
            await self.connection.close()
            self.connection = None
        self._ended.set()
        logger.info("Channel to %s closed", self.url)

    async def __aenter__(self) -> "Channel":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
