# main.py

"""Entry point for launching the scenario editor or a headless run."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any

from pursuit_web.config import Config

# Internal Config attributes that should not be exposed as CLI flags
_PRIVATE_KEYS = {
    "base_dir",
    "config_file",
    "ws_url",
    "ws_host",
    "ws_port",
    "session_token",
}

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def _configure_logging() -> None:
    """Configure application logging and capture uncaught exceptions."""

    logging.basicConfig(
        level=getattr(logging, str(Config.log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=Config.log_file,
        filemode="a",
    )

    def _log_excepthook(exc_type, exc, tb) -> None:
        logging.getLogger(__name__).exception(
            "Uncaught exception", exc_info=(exc_type, exc, tb)
        )

    sys.excepthook = _log_excepthook


def _cell(text: str) -> tuple[int, int]:
    """Parse a ``ROW,COL`` CLI value."""
    try:
        row, col = (int(part) for part in text.split(","))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected ROW,COL, got {text!r}") from exc
    return row, col


def _add_config_args(
    parser: argparse.ArgumentParser, data: dict[str, Any], prefix: str = ""
) -> None:
    """Recursively add CLI flags based on ``data`` keys."""
    for key, value in data.items():
        if key in _PRIVATE_KEYS:
            continue
        arg_name = f"--{prefix}{key}"
        dest = f"{prefix}{key}".replace(".", "_")
        if isinstance(value, dict):
            _add_config_args(parser, value, prefix=f"{prefix}{key}.")
            continue
        if isinstance(value, bool):
            parser.add_argument(arg_name, type=lambda x: x.lower() == "true", dest=dest)
        elif value is None:
            parser.add_argument(arg_name, dest=dest)
        else:
            parser.add_argument(arg_name, type=type(value), dest=dest)


def _config_defaults() -> dict[str, Any]:
    """Return a dictionary of all attributes defined on :class:`Config`."""
    defaults: dict[str, Any] = {}
    for key, value in Config.__dict__.items():
        if key.startswith("_") or key in _PRIVATE_KEYS:
            continue
        if callable(value) or isinstance(value, (classmethod, staticmethod)):
            continue
        defaults[key] = value
    return defaults


def _merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base`` returning a new dict."""
    result: dict[str, Any] = {}
    keys = set(base) | set(override)
    for key in keys:
        if isinstance(base.get(key), dict) and isinstance(override.get(key), dict):
            result[key] = _merge_configs(base[key], override[key])
        elif key in override:
            result[key] = override[key]
        else:
            result[key] = base[key]
    return result


def _apply_overrides(
    args: argparse.Namespace, data: dict[str, Any], prefix: str = ""
) -> None:
    """Apply CLI overrides back onto :class:`Config`."""
    for key, value in data.items():
        full = f"{prefix}{key}"
        dest = full.replace(".", "_")
        override = getattr(args, dest, None)
        if override is not None:
            parts = full.split(".")
            target = Config
            for part in parts[:-1]:
                target = target[part] if isinstance(target, dict) else getattr(target, part)
            if isinstance(target, dict):
                target[parts[-1]] = override
            else:
                setattr(target, parts[-1], override)
        elif isinstance(value, dict):
            _apply_overrides(args, value, prefix=f"{full}.")


@dataclass
class MainService:
    """Handle CLI parsing and runtime selection."""

    argv: list[str] | None = None

    def run(self) -> int:
        args, cfg = self._parse_args()
        _apply_overrides(args, cfg)
        _configure_logging()
        if args.no_gui:
            return self._run_headless(args)
        return self._launch_gui(args)

    # ------------------------------------------------------------------
    def _parse_args(self) -> tuple[argparse.Namespace, dict[str, Any]]:
        initial = argparse.ArgumentParser(add_help=False)
        initial.add_argument(
            "--config",
            default=Config.config_file,
            help="Path to JSON configuration file",
        )
        initial.add_argument(
            "--no-gui",
            action="store_true",
            help="Run one simulation in the terminal instead of the window",
        )
        known, _ = initial.parse_known_args(self.argv)

        config_data: dict[str, Any] = {}
        if known.config and os.path.exists(known.config):
            with open(known.config) as f:
                config_data = json.load(f)
            Config.load_from_file(known.config)

        parser = argparse.ArgumentParser(
            parents=[initial], description="Edit a pursuit scenario and simulate it"
        )
        defaults = _merge_configs(_config_defaults(), config_data)
        _add_config_args(parser, defaults)
        parser.add_argument("--ws-url", default=None, help="WebSocket URL of service")
        parser.add_argument("--ws-host", default=None, help="Service host override")
        parser.add_argument(
            "--ws-port", type=int, default=None, help="Service port override"
        )
        parser.add_argument("--token", default=None, help="Session token override")
        parser.add_argument(
            "--runner", type=_cell, default=None, help="Runner cell as ROW,COL"
        )
        parser.add_argument(
            "--catcher", type=_cell, default=None, help="Catcher cell as ROW,COL"
        )
        parser.add_argument(
            "--obstacle",
            type=_cell,
            action="append",
            default=[],
            help="Obstacle cell as ROW,COL (repeatable)",
        )
        args = parser.parse_args(self.argv)
        return args, defaults

    # ------------------------------------------------------------------
    @staticmethod
    def _connection(args: argparse.Namespace) -> tuple[str, str]:
        from pursuit_ui.auth import resolve_connection_info

        return resolve_connection_info(
            ws_url=args.ws_url,
            token=args.token,
            ws_host=args.ws_host,
            ws_port=args.ws_port,
        )

    # ------------------------------------------------------------------
    def _run_headless(self, args: argparse.Namespace) -> int:
        """Submit the scenario given on the command line and print each tick."""
        return asyncio.run(self._headless(args))

    async def _headless(self, args: argparse.Namespace) -> int:
        from pursuit_web.scenario import CellKind, SessionStatus
        from pursuit_web.view import project_session
        from pursuit_ui.core import mount
        from pursuit_ui.state import SessionController

        session = SessionController(int(Config.grid_size))
        placements = [(cell, CellKind.OBSTACLE) for cell in args.obstacle]
        if args.catcher is not None:
            placements.append((args.catcher, CellKind.CATCHER))
        if args.runner is not None:
            placements.append((args.runner, CellKind.RUNNER))
        for (row, col), kind in placements:
            if not session.setCell(row, col, kind):
                print(f"Cell ({row}, {col}) is outside the grid", file=sys.stderr)
                return EXIT_INVALID

        result = session.validity()
        if not result.ok:
            print(result.reason, file=sys.stderr)
            return EXIT_INVALID

        finished = asyncio.Event()
        session.gridChanged.connect(lambda: print(project_session(session).to_text()))
        session.finished.connect(lambda _status: finished.set())

        url, token = self._connection(args)
        async with mount(
            url,
            session,
            token=token,
            ping_interval=Config.ping_interval,
            open_timeout=Config.open_timeout,
        ) as channel:
            if not channel.connected:
                print(session.error, file=sys.stderr)
                return EXIT_FAILED
            session.start()
            if session.state is not SessionStatus.AWAITING_START:
                print(session.error, file=sys.stderr)
                return EXIT_FAILED
            try:
                await finished.wait()
            except asyncio.CancelledError:
                session.stop()
                raise

        if session.state is SessionStatus.ERRORED:
            print(session.error, file=sys.stderr)
            return EXIT_FAILED
        return EXIT_OK

    # ------------------------------------------------------------------
    def _launch_gui(self, args: argparse.Namespace) -> int:
        """Launch the widgets window on a qasync event loop."""

        from PySide6.QtWidgets import QApplication
        from qasync import QEventLoop

        from pursuit_ui import core
        from pursuit_ui.state import PaletteModel, SessionController
        from pursuit_ui.window import ScenarioWindow

        app = QApplication.instance() or QApplication([])
        session = SessionController(int(Config.grid_size))
        window = ScenarioWindow(session, PaletteModel())
        window.show()

        loop = QEventLoop(app)
        asyncio.set_event_loop(loop)

        async def runner() -> None:
            url, token = self._connection(args)
            await core.supervise(
                url,
                session,
                window,
                token=token,
                attempts=int(Config.reconnect_attempts),
                delay=Config.reconnect_delay,
                ping_interval=Config.ping_interval,
                open_timeout=Config.open_timeout,
            )
            window.show_notice(f"Offline: could not reach {url}")

        task = loop.create_task(runner())

        def _quit() -> None:
            task.cancel()
            loop.stop()

        app.lastWindowClosed.connect(_quit)
        with loop:
            loop.run_forever()
            if not task.done():
                with contextlib.suppress(asyncio.CancelledError):
                    loop.run_until_complete(task)
        return EXIT_OK


def main() -> None:
    """Entry point for external callers."""
    sys.exit(MainService().run())


if __name__ == "__main__":
    main()
