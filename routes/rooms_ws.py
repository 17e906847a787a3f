from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from services.room_hub import RoomUpdate, build_update, room_hub
from services.store import session_store

router = APIRouter(tags=["rooms"])
logger = logging.getLogger(__name__)


@router.websocket("/ws/rooms/{room_id}")
async def ws_room_updates(websocket: WebSocket, room_id: str) -> None:
    """
    Push room updates to watchers as they are persisted.

    Payload schema:
      {
        "snapshot": {...},   # full room document
        "events": [str],     # won / lost / hit / goal_reached
      }
    """
    await websocket.accept()
    q = await room_hub.subscribe(room_id)
    logger.info("[rooms_ws] Subscribed room_id=%r", room_id)
    try:
        current = await session_store.get(room_id)
        if current is not None:
            await websocket.send_json(build_update(current))
        while True:
            update: RoomUpdate = await q.get()
            await websocket.send_json(update)
    except WebSocketDisconnect:
        return
    finally:
        await room_hub.unsubscribe(room_id, q)
