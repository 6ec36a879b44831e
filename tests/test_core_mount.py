import asyncio

import pytest

pytest.importorskip("PySide6")

from pursuit_web.scenario import CellKind, SessionStatus
from pursuit_ui import core
from pursuit_ui.state import CONNECT_FAILED, SessionController
from tests.service_utils import error, fake_service, free_port, grid_update


class Window:
    controlsEnabled = False


def _runnable(session):
    session.setCell(0, 0, CellKind.RUNNER)
    session.setCell(9, 9, CellKind.CATCHER)


def _moved(step):
    rows = [[0] * 10 for _ in range(10)]
    rows[0][step] = int(CellKind.RUNNER)
    rows[9][9 - step] = int(CellKind.CATCHER)
    return rows


def test_mount_runs_a_session_to_completion():
    async def script(ws, msg):
        if msg["type"] == "start_simulation":
            for step in range(1, 4):
                await ws.send(grid_update(_moved(step), done=step == 3))

    async def scenario():
        session = SessionController()
        finished = asyncio.Event()
        session.finished.connect(lambda _status: finished.set())
        async with fake_service(script) as service:
            async with core.mount(service.url, session) as channel:
                assert channel.connected
                _runnable(session)
                session.start()
                await asyncio.wait_for(finished.wait(), 2.0)
            return session, service.received

    session, received = asyncio.run(scenario())
    assert received[0]["type"] == "start_simulation"
    assert received[0]["grid"][0][0] == int(CellKind.RUNNER)
    assert session.state is SessionStatus.STOPPED
    assert session.grid == _moved(3)
    assert session.editable


def test_mount_surfaces_remote_error():
    async def script(ws, msg):
        if msg["type"] == "start_simulation":
            await ws.send(grid_update(_moved(1)))
            await ws.send(error("catcher lost"))

    async def scenario():
        session = SessionController()
        finished = asyncio.Event()
        session.finished.connect(lambda _status: finished.set())
        async with fake_service(script) as service:
            async with core.mount(service.url, session):
                _runnable(session)
                session.start()
                await asyncio.wait_for(finished.wait(), 2.0)
        return session

    session = asyncio.run(scenario())
    assert session.state is SessionStatus.ERRORED
    assert session.error == "catcher lost"
    assert session.grid == _moved(1)


def test_reset_mid_run_sends_stop():
    async def script(ws, msg):
        if msg["type"] == "start_simulation":
            await ws.send(grid_update(_moved(1)))

    async def scenario():
        session = SessionController()
        running = asyncio.Event()
        session.statusChanged.connect(
            lambda status: running.set() if status == "running" else None
        )
        async with fake_service(script) as service:
            async with core.mount(service.url, session):
                _runnable(session)
                session.start()
                await asyncio.wait_for(running.wait(), 2.0)
                session.reset()
                await service.wait_for("stop_simulation")
        return session, [m["type"] for m in service.received]

    session, types = asyncio.run(scenario())
    assert types == ["start_simulation", "stop_simulation"]
    assert session.state is SessionStatus.IDLE
    assert session.grid == [[0] * 10 for _ in range(10)]


def test_mount_detaches_session_on_exit():
    async def scenario():
        session = SessionController()
        async with fake_service() as service:
            async with core.mount(service.url, session):
                pass
        _runnable(session)
        session.start()
        return session

    session = asyncio.run(scenario())
    assert session.state is SessionStatus.IDLE
    assert session.error != ""


def test_run_without_service_reports_connect_error():
    async def scenario():
        session = SessionController()
        window = Window()
        ok = await core.run(f"ws://127.0.0.1:{free_port()}", session, window)
        return ok, session, window

    ok, session, window = asyncio.run(scenario())
    assert ok is False
    assert session.error == CONNECT_FAILED
    assert session.state is SessionStatus.IDLE
    assert window.controlsEnabled is False


def test_run_returns_when_service_drops_connection():
    async def on_connect(ws):
        await asyncio.sleep(0.05)
        await ws.close()

    async def scenario():
        session = SessionController()
        window = Window()
        async with fake_service(on_connect=on_connect) as service:
            ok = await asyncio.wait_for(core.run(service.url, session, window), 2.0)
        return ok, session, window

    ok, session, window = asyncio.run(scenario())
    assert ok is True
    assert session.error == CONNECT_FAILED
    assert window.controlsEnabled is False


def test_supervise_gives_up_and_leaves_session_usable():
    async def scenario():
        session = SessionController()
        window = Window()
        url = f"ws://127.0.0.1:{free_port()}"
        await asyncio.wait_for(
            core.supervise(url, session, window, attempts=2, delay=0.01), 5.0
        )
        return session, window

    session, window = asyncio.run(scenario())
    assert session.error == CONNECT_FAILED
    assert window.controlsEnabled is False
    assert session.setCell(0, 0, CellKind.OBSTACLE)
    session.reset()
    assert session.grid == [[0] * 10 for _ in range(10)]
    assert session.error == ""


def test_supervise_keeps_remounting_after_healthy_mounts():
    connections = []

    async def on_connect(ws):
        connections.append(ws)
        await ws.close()

    async def scenario():
        session = SessionController()
        async with fake_service(on_connect=on_connect) as service:
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(
                    core.supervise(service.url, session, attempts=1, delay=0.01),
                    1.0,
                )

    asyncio.run(scenario())
    assert len(connections) > 2
