from __future__ import annotations

import os
from typing import Tuple

from pursuit_web.config import Config


def resolve_connection_info(
    ws_url: str | None = None,
    token: str | None = None,
    ws_host: str | None = None,
    ws_port: int | None = None,
) -> Tuple[str, str]:
    """Resolve WebSocket URL and token using CLI/env/config precedence."""
    ws_url = ws_url or os.getenv("PURSUIT_WS_URL") or Config.ws_url
    token = token or os.getenv("PURSUIT_SESSION_TOKEN") or Config.session_token

    if ws_url:
        return ws_url, token or ""

    ws_host = ws_host or os.getenv("PURSUIT_WS_HOST") or Config.ws_host
    ws_port = int(ws_port or os.getenv("PURSUIT_WS_PORT") or Config.ws_port)
    path = Config.ws_path if Config.ws_path.startswith("/") else f"/{Config.ws_path}"
    return f"ws://{ws_host}:{ws_port}{path}", token or ""
