"""Room REST API: lifecycle, moves, ticks, sabotage, state polling and presence."""

import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from app.config import settings
from models.difficulty import DEFAULT_DIFFICULTY, Difficulty
from models.sabotage import SABOTAGE_CATALOG, SabotageKind
from services.orchestrator import GameRules, InvalidActionError, SessionOrchestrator
from services.room_hub import room_hub
from services.sabotage import SabotageEngine
from services.store import SessionNotFoundError, StoreUnavailableError, VersionConflictError, session_store

router = APIRouter(tags=["rooms"])
logger = logging.getLogger(__name__)

T = TypeVar("T")

_orchestrator = SessionOrchestrator(
    session_store,
    rules=GameRules(
        maze_width=settings.maze_width,
        maze_height=settings.maze_height,
        sabotage=SabotageEngine(
            damage_amount=settings.sabotage_damage,
            enemy_cap=settings.enemy_cap,
            block_search_radius=settings.block_search_radius,
        ),
    ),
    hub=room_hub,
    max_retries=settings.store_max_retries,
)


def get_orchestrator() -> SessionOrchestrator:
    return _orchestrator


class RoomCreateResponse(BaseModel):
    room_id: str
    play_url: str
    watch_url: str


class StartRequest(BaseModel):
    difficulty: Difficulty = DEFAULT_DIFFICULTY


class MoveRequest(BaseModel):
    x: int = Field(ge=-1, le=1)
    y: int = Field(ge=-1, le=1)


class SabotageRequest(BaseModel):
    action: SabotageKind


class PresenceResponse(BaseModel):
    success: bool
    viewers: int


class SabotageInfoResponse(BaseModel):
    id: SabotageKind
    name: str
    description: str
    cost: int
    cooldown_ms: int


async def _perform(call: Awaitable[T]) -> T:
    """Translate orchestrator failures into HTTP errors."""
    try:
        return await call
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Game not found")
    except InvalidActionError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except VersionConflictError as exc:
        logger.warning("[rooms] Giving up after repeated write conflicts: %s", exc)
        raise HTTPException(status_code=409, detail="Room was updated concurrently, retry")
    except StoreUnavailableError as exc:
        logger.error("[rooms] Store unavailable: %s", exc)
        raise HTTPException(status_code=503, detail="Room store unavailable")


@router.post("/rooms", response_model=RoomCreateResponse, status_code=201)
async def create_room(orchestrator: SessionOrchestrator = Depends(get_orchestrator)) -> RoomCreateResponse:
    """Create a waiting room and return the player / spectator links."""
    room = await _perform(orchestrator.create_room())
    logger.info("[rooms] POST /api/rooms -> 201 room_id=%s", room.id)
    return RoomCreateResponse(room_id=room.id, play_url=f"/play/{room.id}", watch_url=f"/watch/{room.id}")


@router.get("/rooms/{room_id}")
async def get_room(room_id: str, orchestrator: SessionOrchestrator = Depends(get_orchestrator)) -> dict[str, Any]:
    """Raw stored document, without the lazy timer tick."""
    snapshot = await _perform(orchestrator.store.get(room_id))
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return snapshot.model_dump(mode="json")


@router.post("/rooms/{room_id}/start")
async def start_game(
    room_id: str,
    body: StartRequest | None = None,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    difficulty = body.difficulty if body else DEFAULT_DIFFICULTY
    logger.info("[rooms] POST /api/rooms/%s/start difficulty=%s", room_id, difficulty.value)
    result = await _perform(orchestrator.start(room_id, difficulty))
    return result.to_payload()


@router.post("/rooms/{room_id}/move")
async def move_player(
    room_id: str,
    body: MoveRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Blocked moves still answer 200 with the unchanged snapshot."""
    result = await _perform(orchestrator.move(room_id, body.x, body.y))
    return result.to_payload()


@router.post("/rooms/{room_id}/tick")
async def tick_room(room_id: str, orchestrator: SessionOrchestrator = Depends(get_orchestrator)) -> dict[str, Any]:
    result = await _perform(orchestrator.tick(room_id))
    return result.to_payload()


@router.post("/rooms/{room_id}/sabotage")
async def sabotage_room(
    room_id: str,
    body: SabotageRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    result = await _perform(orchestrator.sabotage(room_id, body.action))
    if result.rejected:
        raise HTTPException(status_code=400, detail=result.rejected)
    return result.to_payload()


@router.get("/rooms/{room_id}/state")
async def room_state(
    room_id: str,
    x_new_viewer: str | None = Header(default=None),
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Polling endpoint. Missing rooms come back as a waiting placeholder, not 404."""
    is_new_viewer = (x_new_viewer or "").strip().lower() == "true"
    result = await orchestrator.state(room_id, is_new_viewer=is_new_viewer)
    return result.to_payload()


@router.post("/rooms/{room_id}/presence", response_model=PresenceResponse)
async def presence_join(room_id: str, orchestrator: SessionOrchestrator = Depends(get_orchestrator)) -> PresenceResponse:
    viewers = await _perform(orchestrator.join(room_id))
    return PresenceResponse(success=True, viewers=viewers)


@router.delete("/rooms/{room_id}/presence", response_model=PresenceResponse)
async def presence_leave(room_id: str, orchestrator: SessionOrchestrator = Depends(get_orchestrator)) -> PresenceResponse:
    viewers = await _perform(orchestrator.leave(room_id))
    return PresenceResponse(success=True, viewers=viewers)


@router.get("/sabotages", response_model=list[SabotageInfoResponse])
def list_sabotages() -> list[SabotageInfoResponse]:
    return [
        SabotageInfoResponse(
            id=info.kind,
            name=info.name,
            description=info.description,
            cost=info.cost,
            cooldown_ms=info.cooldown_ms,
        )
        for info in SABOTAGE_CATALOG
    ]
