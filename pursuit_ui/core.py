"""Mount wiring one simulation channel to one session controller."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, AsyncIterator

from pursuit_web.stream.events import INBOUND_EVENTS

from .ipc import Channel
from .state import SessionController

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def mount(
    url: str,
    session: SessionController,
    token: str | None = None,
    ping_interval: float = 20.0,
    open_timeout: float = 5.0,
) -> AsyncIterator[Channel]:
    """Open a channel to ``url`` feeding ``session`` for the duration of the block.

    Every inbound event is routed to :meth:`SessionController.dispatch`. The
    yielded channel may have failed to connect (``channel.connected`` is then
    ``False`` and the session already shows the connection error). On every
    exit path the session is detached and the channel closed, so no event
    reaches the session afterwards.
    """

    channel = Channel(
        url,
        token,
        grid_size=session.size,
        ping_interval=ping_interval,
        open_timeout=open_timeout,
    )
    for name in INBOUND_EVENTS:
        channel.on(name, session.dispatch)
    session.set_client(channel)
    try:
        await channel.open()
        yield channel
    finally:
        session.set_client(None)
        await channel.close()


async def run(
    url: str,
    session: SessionController,
    window: Any = None,
    token: str | None = None,
    ping_interval: float = 20.0,
    open_timeout: float = 5.0,
) -> bool:
    """Mount a channel and keep it until the connection ends.

    ``window`` controls overall UI enabling and is disabled again when the
    channel goes away. Returns ``True`` if the channel connected at all.
    """

    if window is not None:
        window.controlsEnabled = False
    async with mount(
        url,
        session,
        token=token,
        ping_interval=ping_interval,
        open_timeout=open_timeout,
    ) as channel:
        if not channel.connected:
            return False
        if window is not None:
            window.controlsEnabled = True
        try:
            await channel.wait_closed()
        finally:
            if window is not None:
                window.controlsEnabled = False
        logger.info("Channel to %s ended", url)
        return True


async def supervise(
    url: str,
    session: SessionController,
    window: Any = None,
    token: str | None = None,
    attempts: int = 10,
    delay: float = 0.3,
    ping_interval: float = 20.0,
    open_timeout: float = 5.0,
) -> None:
    """Keep a channel mounted, remounting each time it ends.

    Gives up after ``attempts`` remounts in a row fail to connect; a mount
    that connected starts the count again. The session and ``window`` stay
    usable after giving up.
    """

    failures = 0
    while True:
        connected = await run(
            url,
            session,
            window,
            token=token,
            ping_interval=ping_interval,
            open_timeout=open_timeout,
        )
        failures = 0 if connected else failures + 1
        if failures > attempts:
            logger.warning("Giving up on %s after %d attempts", url, failures)
            return
        await asyncio.sleep(delay)
        logger.info("Remounting channel to %s", url)
