"""Contract tests for stream protocol MessagePack helpers."""

from __future__ import annotations

import msgpack
import pytest

from pursuit_web.stream import (
    EventName,
    GridUpdate,
    RemoteError,
    check_grid,
    pack_event,
    unpack_event,
)
from pursuit_web.stream.protocol import is_hello, pack_hello


def _raw(payload):
    return msgpack.packb(payload, use_bin_type=True)


def test_start_simulation_frame(valid_rows) -> None:
    msg = msgpack.unpackb(
        pack_event(EventName.START_SIMULATION, {"grid": valid_rows}), raw=False
    )
    assert msg == {"type": "start_simulation", "v": 1, "grid": valid_rows}


def test_stop_simulation_has_no_payload() -> None:
    msg = msgpack.unpackb(pack_event("stop_simulation"), raw=False)
    assert msg == {"type": "stop_simulation", "v": 1}


def test_start_simulation_requires_grid() -> None:
    with pytest.raises(ValueError):
        pack_event(EventName.START_SIMULATION, {})


def test_unpack_grid_update(valid_rows) -> None:
    event = unpack_event(
        _raw({"type": "grid_update", "v": 1, "grid": valid_rows, "done": True}), 10
    )
    assert event == GridUpdate(grid=valid_rows, done=True)


def test_grid_update_done_defaults_false(valid_rows) -> None:
    event = unpack_event(_raw({"type": "grid_update", "v": 1, "grid": valid_rows}))
    assert event.done is False


def test_unpack_error() -> None:
    event = unpack_event(_raw({"type": "error", "v": 1, "message": "boom"}))
    assert event == RemoteError("boom")


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "grid_update", "grid": [[0]]},
        {"type": "grid_update", "v": 2, "grid": [[0]]},
        {"type": "grid_update", "v": 1},
        {"type": "grid_update", "v": 1, "grid": [[0]], "done": "yes"},
        {"type": "error", "v": 1},
        {"type": "start_simulation", "v": 1, "grid": [[0]]},
        {"type": "mystery", "v": 1},
    ],
)
def test_unpack_rejects_bad_frames(payload) -> None:
    with pytest.raises(ValueError):
        unpack_event(_raw(payload))


def test_unpack_rejects_wrong_size(valid_rows) -> None:
    raw = _raw({"type": "grid_update", "v": 1, "grid": valid_rows})
    with pytest.raises(ValueError):
        unpack_event(raw, size=12)


def test_unpack_rejects_non_binary_and_garbage() -> None:
    with pytest.raises(ValueError):
        unpack_event("grid_update")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        unpack_event(b"\xc1\xc1")


@pytest.mark.parametrize(
    "grid",
    [[], [[0, 0], [0]], [[0, 5], [0, 0]], [[0, True], [0, 0]], [[0.0]], "00"],
)
def test_check_grid_rejects(grid) -> None:
    with pytest.raises(ValueError):
        check_grid(grid)


def test_hello_round_trip() -> None:
    assert is_hello(pack_hello("tok"))
    assert msgpack.unpackb(pack_hello("tok"), raw=False)["token"] == "tok"
    assert not is_hello(_raw({"type": "Error", "v": 1}))
    assert not is_hello(b"\xc1")
