from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from models import PlayerState, Position, SessionSnapshot, SessionStatus
from services.room_hub import room_hub
from services.store import session_store

# 7x5 ring corridor around a wall island; goal in the bottom-right corner.
SMALL_MAZE = [
    [1, 1, 1, 1, 1, 1, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 0, 1, 1, 1, 0, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 1, 1, 1, 1, 1, 1],
]


@pytest.fixture
def anyio_backend() -> str:
    """Async tests are written against asyncio (they use asyncio primitives directly)."""
    return "asyncio"


@pytest.fixture(autouse=True)
def clear_store() -> None:
    """Isolate tests by clearing the module-level room store and hub."""
    session_store.clear()
    room_hub.reset()
    yield
    session_store.clear()
    room_hub.reset()


@pytest.fixture
def make_snapshot() -> Callable[..., SessionSnapshot]:
    def _make(**overrides: Any) -> SessionSnapshot:
        player = overrides.pop("player", None) or PlayerState(x=1, y=1, health=100)
        fields: dict[str, Any] = {
            "id": "room-1",
            "status": SessionStatus.PLAYING,
            "maze": [row[:] for row in SMALL_MAZE],
            "player": player,
            "goal": Position(x=5, y=3),
            "time_remaining_seconds": 120,
            "last_tick_timestamp": 1_000_000,
        }
        fields.update(overrides)
        return SessionSnapshot(**fields)

    return _make
