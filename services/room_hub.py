"""
Fan-out of persisted room updates to WebSocket watchers.

Every watcher holds a one-slot mailbox: when a newer update arrives before the
previous one was sent, the older one is replaced. A room also remembers the
highest snapshot version it has pushed, so an update that lost a race against a
later write is never delivered after it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypedDict

from models.events import GameEvent
from models.session import SessionSnapshot

if TYPE_CHECKING:
    from services.orchestrator import ActionResult

logger = logging.getLogger(__name__)


class RoomUpdate(TypedDict):
    snapshot: dict
    events: list[str]


def build_update(snapshot: SessionSnapshot, events: Sequence[GameEvent] = ()) -> RoomUpdate:
    return {"snapshot": snapshot.model_dump(mode="json"), "events": [e.value for e in events]}


@dataclass
class _Room:
    watchers: set[asyncio.Queue[RoomUpdate]] = field(default_factory=set)
    last_version: int = 0


class RoomHub:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._rooms: dict[str, _Room] = {}

    async def subscribe(self, room_id: str) -> asyncio.Queue[RoomUpdate]:
        mailbox: asyncio.Queue[RoomUpdate] = asyncio.Queue(maxsize=1)
        async with self._lock:
            self._rooms.setdefault(room_id, _Room()).watchers.add(mailbox)
        return mailbox

    async def unsubscribe(self, room_id: str, mailbox: asyncio.Queue[RoomUpdate]) -> None:
        async with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return
            room.watchers.discard(mailbox)
            if not room.watchers:
                del self._rooms[room_id]

    async def publish(self, room_id: str, result: ActionResult) -> int:
        """Deliver ``result`` to the room's watchers; returns how many got it."""
        version = result.snapshot.version
        async with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                return 0
            if version <= room.last_version:
                logger.debug("[room_hub] Stale update room=%s version=%d <= %d", room_id, version, room.last_version)
                return 0
            room.last_version = version
            watchers = list(room.watchers)

        update = build_update(result.snapshot, result.events)
        for mailbox in watchers:
            _replace(mailbox, update)
        return len(watchers)

    def subscriber_count(self, room_id: str) -> int:
        room = self._rooms.get(room_id)
        return len(room.watchers) if room else 0

    def reset(self) -> None:
        self._rooms.clear()
        self._lock = asyncio.Lock()


def _replace(mailbox: asyncio.Queue[RoomUpdate], update: RoomUpdate) -> None:
    if mailbox.full():
        mailbox.get_nowait()
    mailbox.put_nowait(update)


room_hub = RoomHub()
