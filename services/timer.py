from __future__ import annotations

import time

from models.events import GameEvent
from models.session import SessionSnapshot, SessionStatus


def now_ms() -> int:
    return int(time.time() * 1000)


def apply_timer(snapshot: SessionSnapshot, now: int) -> list[GameEvent]:
    """
    Decay the countdown by the whole seconds elapsed since the last tick.

    Time is reconstructed lazily whenever a transition runs, so precision is
    bounded by how often the room is touched. The tick timestamp is refreshed
    to ``now`` on every call, whatever the status.
    """
    events: list[GameEvent] = []
    elapsed = (now - snapshot.last_tick_timestamp) // 1000
    if snapshot.status is SessionStatus.PLAYING and elapsed > 0:
        snapshot.time_remaining_seconds = max(0, snapshot.time_remaining_seconds - elapsed)
        if snapshot.time_remaining_seconds == 0:
            snapshot.status = SessionStatus.LOST
            events.append(GameEvent.LOST)
    snapshot.last_tick_timestamp = now
    return events
