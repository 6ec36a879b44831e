# config.py

import json
import os


class Config:
    """Global client configuration, optionally loaded from a JSON file.

    Attributes
    ----------
    grid_size:
        Edge length ``N`` of the square scenario grid. Fixed for a session;
        incoming snapshots of any other size are rejected.
    ws_url:
        Full WebSocket URL of the simulation service. When empty the URL is
        assembled from ``ws_host``, ``ws_port`` and ``ws_path``.
    session_token:
        Token sent in the ``Hello`` handshake. Empty when the service does not
        require one.
    ping_interval:
        Seconds between keepalive pings on an open channel.
    open_timeout:
        Seconds allowed for connecting and completing the handshake.
    reconnect_attempts:
        How many times the GUI remounts the channel after it closes. The
        channel itself never retries.
    reconnect_delay:
        Seconds to wait between remount attempts.
    log_file:
        Path of the append-only application log. ``None`` logs to stderr.
    log_level:
        Name of the root logging level.
    """

    base_dir = os.path.abspath(os.path.dirname(__file__))
    config_file = os.path.join(base_dir, "input", "config.json")

    grid_size = 10

    # Simulation service endpoint
    ws_host = "localhost"
    ws_port = 8000
    ws_path = "/ws"
    ws_url = ""
    session_token = ""

    # Channel timing
    ping_interval = 20.0
    open_timeout = 5.0
    reconnect_attempts = 10
    reconnect_delay = 0.3

    log_file: str | None = "pursuit_web.log"
    log_level = "INFO"

    @classmethod
    def load_from_file(cls, path: str) -> None:
        """Load configuration values from a JSON file.

        Only keys that already exist as attributes on ``Config`` are assigned.
        Nested dictionaries are merged when the existing attribute is also a
        ``dict``. A relative ``log_file`` is resolved against the directory
        containing ``path``.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(path)
        with open(path) as f:
            data = json.load(f)
        cls.config_file = os.path.abspath(path)
        base_dir = os.path.dirname(cls.config_file)

        for key, value in data.items():
            if key.startswith("_") or not hasattr(cls, key):
                continue
            current = getattr(cls, key)
            if callable(current):
                continue
            if key == "log_file" and value and not os.path.isabs(value):
                value = os.path.join(base_dir, value)
            if isinstance(current, dict) and isinstance(value, dict):
                current.update(value)
            else:
                setattr(cls, key, value)

        if int(cls.grid_size) < 1:
            raise ValueError(f"grid_size must be positive, got {cls.grid_size}")


def load_config(path: str | None = None) -> dict:
    """Load configuration from ``path`` and return the data."""
    if path is None:
        path = Config.config_file
    Config.load_from_file(path)
    with open(path) as f:
        return json.load(f)
