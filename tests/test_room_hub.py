from __future__ import annotations

import asyncio

import pytest

from models import GameEvent, PlayerState
from services.orchestrator import ActionResult
from services.room_hub import RoomHub, build_update


def _result(make_snapshot, version: int, events=(), speed: float = 1.0) -> ActionResult:
    snapshot = make_snapshot(version=version, player=PlayerState(x=1, y=1, speed=speed))
    return ActionResult(snapshot, list(events))


@pytest.mark.anyio
async def test_room_hub_is_latest_wins(make_snapshot) -> None:
    hub = RoomHub()
    q = await hub.subscribe("room-1")

    await hub.publish("room-1", _result(make_snapshot, 1))
    await hub.publish("room-1", _result(make_snapshot, 2, [GameEvent.HIT]))

    latest = await asyncio.wait_for(q.get(), timeout=0.5)
    assert latest["snapshot"]["version"] == 2
    assert latest["events"] == ["hit"]
    assert q.empty()

    await hub.unsubscribe("room-1", q)


@pytest.mark.anyio
async def test_room_hub_drops_updates_older_than_last_pushed(make_snapshot) -> None:
    hub = RoomHub()
    q = await hub.subscribe("room-1")

    assert await hub.publish("room-1", _result(make_snapshot, 5, speed=0.7)) == 1
    assert q.get_nowait()["snapshot"]["version"] == 5

    assert await hub.publish("room-1", _result(make_snapshot, 4)) == 0
    assert await hub.publish("room-1", _result(make_snapshot, 5)) == 0
    assert q.empty()

    await hub.unsubscribe("room-1", q)


@pytest.mark.anyio
async def test_room_hub_only_delivers_to_that_room(make_snapshot) -> None:
    hub = RoomHub()
    mine = await hub.subscribe("room-1")
    other = await hub.subscribe("room-2")

    await hub.publish("room-1", _result(make_snapshot, 1))
    assert not mine.empty()
    assert other.empty()

    await hub.unsubscribe("room-1", mine)
    await hub.unsubscribe("room-2", other)
    assert hub.subscriber_count("room-1") == 0
    assert hub.subscriber_count("room-2") == 0


@pytest.mark.anyio
async def test_publish_without_subscribers_is_noop(make_snapshot) -> None:
    hub = RoomHub()
    assert await hub.publish("nobody", _result(make_snapshot, 1)) == 0
    assert hub.subscriber_count("nobody") == 0


def test_build_update_serialises_snapshot_and_events(make_snapshot) -> None:
    update = build_update(make_snapshot(), [GameEvent.GOAL_REACHED, GameEvent.WON])
    assert update["snapshot"]["status"] == "playing"
    assert update["snapshot"]["goal"] == {"x": 5, "y": 3}
    assert update["events"] == ["goal_reached", "won"]
