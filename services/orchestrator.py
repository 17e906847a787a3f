"""
Room state machine.

``apply_action`` is the pure transition: it takes a snapshot and an action and
returns a new snapshot plus the events it produced, never touching the input.
``SessionOrchestrator`` wraps it with the store: load, transition, compare-and-
swap write, retry on a lost race, then fan the result out to watchers.

Status flow: waiting -(start)-> playing -(goal)-> won
                                playing -(health 0 / timer 0)-> lost
A fresh ``start`` is the only way out of won/lost.
"""

from __future__ import annotations

import logging
import random
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Union

from models.difficulty import DEFAULT_DIFFICULTY, DIFFICULTY_PRESETS, Difficulty
from models.events import GameEvent
from models.sabotage import SabotageKind
from models.session import PlayerState, Position, SessionSnapshot, SessionStatus
from services.collision import resolve_collisions
from services.enemies import place_initial_enemies, step_enemies
from services.maze_generator import generate_maze
from services.movement import apply_move, is_valid_delta
from services.room_hub import RoomHub
from services.sabotage import REASON_NOT_PLAYING, SabotageEngine
from services.store import SessionNotFoundError, SessionStore, StoreUnavailableError, VersionConflictError
from services.timer import apply_timer, now_ms

logger = logging.getLogger(__name__)

# Avoid 0/O, 1/I/l in room IDs so shared links don't get misread.
_ROOM_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
_ROOM_ID_LENGTH = 12

REASON_BLOCKED = "move blocked"


class InvalidActionError(ValueError):
    """Malformed action input, rejected before the room is loaded."""


@dataclass(frozen=True)
class StartAction:
    difficulty: Difficulty = DEFAULT_DIFFICULTY


@dataclass(frozen=True)
class MoveAction:
    dx: int
    dy: int


@dataclass(frozen=True)
class TickAction:
    pass


@dataclass(frozen=True)
class SabotageAction:
    kind: SabotageKind


@dataclass(frozen=True)
class StateReadAction:
    pass


Action = Union[StartAction, MoveAction, TickAction, SabotageAction, StateReadAction]


@dataclass
class ActionResult:
    snapshot: SessionSnapshot
    events: list[GameEvent] = field(default_factory=list)
    rejected: str | None = None

    def to_payload(self) -> dict:
        payload = self.snapshot.model_dump(mode="json")
        payload["events"] = [e.value for e in self.events]
        if self.rejected:
            payload["rejected"] = self.rejected
        return payload


@dataclass
class GameRules:
    maze_width: int = 35
    maze_height: int = 25
    sabotage: SabotageEngine = field(default_factory=SabotageEngine)


def new_game(
    snapshot: SessionSnapshot,
    difficulty: Difficulty,
    *,
    rules: GameRules,
    now: int,
    rng: random.Random,
) -> SessionSnapshot:
    """Regenerate maze and entities for ``snapshot``'s room; presence is kept."""
    preset = DIFFICULTY_PRESETS[difficulty]
    width, height = rules.maze_width, rules.maze_height
    maze = generate_maze(width, height, preset.extra_connections, rng=rng)
    fresh = SessionSnapshot(
        id=snapshot.id,
        status=SessionStatus.PLAYING,
        maze=maze,
        player=PlayerState(x=1, y=1, health=preset.player_health),
        goal=Position(x=width - 2, y=height - 2),
        viewers=snapshot.viewers,
        time_remaining_seconds=preset.time_limit,
        last_tick_timestamp=now,
        difficulty=difficulty,
        difficulty_settings=preset.model_copy(),
        created_at=snapshot.created_at,
    )
    fresh.enemies = place_initial_enemies(fresh, preset.enemy_count, rng)
    return fresh


def apply_action(
    snapshot: SessionSnapshot,
    action: Action,
    *,
    now: int,
    rng: random.Random,
    rules: GameRules,
) -> ActionResult:
    """Timer first, then the action, then collisions if the player moved."""
    state = snapshot.model_copy(deep=True)
    events = apply_timer(state, now)

    if isinstance(action, StartAction):
        state = new_game(state, action.difficulty, rules=rules, now=now, rng=rng)
        return ActionResult(state, [])

    if isinstance(action, MoveAction):
        if action.dx == 0 and action.dy == 0:
            return ActionResult(state, events)
        if state.status is not SessionStatus.PLAYING:
            return ActionResult(state, events, REASON_NOT_PLAYING)
        if not apply_move(state, action.dx, action.dy):
            return ActionResult(state, events, REASON_BLOCKED)
        events.extend(resolve_collisions(state))
        return ActionResult(state, events)

    if isinstance(action, TickAction):
        if state.status is SessionStatus.PLAYING:
            step_enemies(state, rng)
        return ActionResult(state, events)

    if isinstance(action, SabotageAction):
        outcome = rules.sabotage.apply(state, action.kind, rng)
        if not outcome.applied:
            return ActionResult(state, events, outcome.reason)
        events.extend(outcome.events)
        return ActionResult(state, events)

    if isinstance(action, StateReadAction):
        return ActionResult(state, events)

    raise InvalidActionError(f"unsupported action {action!r}")


def _generate_room_id() -> str:
    return "".join(secrets.choice(_ROOM_ALPHABET) for _ in range(_ROOM_ID_LENGTH))


class SessionOrchestrator:
    """
    Entry point for every room action.

    Holds no room state between calls: each action re-reads the document,
    computes the transition and writes it back with ``expected_version`` so a
    concurrent writer is detected and the transition recomputed on fresh data.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        rules: GameRules | None = None,
        hub: RoomHub | None = None,
        clock: Callable[[], int] = now_ms,
        rng: random.Random | None = None,
        max_retries: int = 3,
    ) -> None:
        self.store = store
        self.rules = rules or GameRules()
        self._hub = hub
        self._clock = clock
        self._rng = rng or random.Random()
        self._max_retries = max(1, max_retries)

    async def create_room(self) -> SessionSnapshot:
        for _ in range(self._max_retries):
            room_id = _generate_room_id()
            try:
                stored = await self.store.put(room_id, SessionSnapshot.waiting(room_id), expected_version=0)
            except VersionConflictError:
                continue
            logger.info("[orchestrator] Room created room_id=%s", room_id)
            return stored
        raise RuntimeError("could not allocate a unique room id")

    async def start(self, session_id: str, difficulty: Difficulty | str = DEFAULT_DIFFICULTY) -> ActionResult:
        try:
            level = Difficulty(difficulty)
        except ValueError as exc:
            raise InvalidActionError(f"unknown difficulty {difficulty!r}") from exc
        result = await self._run(session_id, StartAction(level), allow_missing=True)
        logger.info("[orchestrator] Game started room=%s difficulty=%s", session_id, level.value)
        return result

    async def move(self, session_id: str, dx: int, dy: int) -> ActionResult:
        if not is_valid_delta(dx, dy):
            raise InvalidActionError(f"move delta must be in {{-1, 0, 1}}, got ({dx}, {dy})")
        return await self._run(session_id, MoveAction(dx, dy))

    async def tick(self, session_id: str) -> ActionResult:
        return await self._run(session_id, TickAction())

    async def sabotage(self, session_id: str, kind: SabotageKind | str) -> ActionResult:
        try:
            resolved = SabotageKind(kind)
        except ValueError as exc:
            raise InvalidActionError(f"unknown sabotage {kind!r}") from exc
        return await self._run(session_id, SabotageAction(resolved))

    async def state(self, session_id: str, is_new_viewer: bool = False) -> ActionResult:
        """
        Read a room, applying the lazy timer tick.

        Never raises for a missing room or an unavailable store: the caller
        gets a waiting placeholder (or the computed snapshot if only the
        write failed) so polling clients keep rendering.
        """
        if is_new_viewer:
            try:
                await self.store.increment(session_id, "viewers", 1)
            except SessionNotFoundError:
                logger.debug("[orchestrator] New viewer for missing room=%s", session_id)
            except StoreUnavailableError as exc:
                logger.warning("[orchestrator] Viewer increment failed room=%s: %s", session_id, exc)
        try:
            return await self._run(session_id, StateReadAction(), degrade=True)
        except SessionNotFoundError:
            return ActionResult(SessionSnapshot.waiting(session_id, "Room not initialized yet"))
        except StoreUnavailableError as exc:
            logger.warning("[orchestrator] Store unavailable reading room=%s: %s", session_id, exc)
            return ActionResult(SessionSnapshot.waiting(session_id, "Service temporarily unavailable"))

    async def join(self, session_id: str) -> int:
        viewers = await self.store.increment(session_id, "viewers", 1)
        logger.info("[orchestrator] Presence join room=%s viewers=%d", session_id, viewers)
        return viewers

    async def leave(self, session_id: str) -> int:
        viewers = await self.store.increment(session_id, "viewers", -1)
        logger.info("[orchestrator] Presence leave room=%s viewers=%d", session_id, viewers)
        return viewers

    async def _run(
        self,
        session_id: str,
        action: Action,
        *,
        allow_missing: bool = False,
        degrade: bool = False,
    ) -> ActionResult:
        conflict: VersionConflictError | None = None
        result: ActionResult | None = None
        for attempt in range(1, self._max_retries + 1):
            current = await self.store.get(session_id)
            if current is None and not allow_missing:
                raise SessionNotFoundError(session_id)
            base = current if current is not None else SessionSnapshot.waiting(session_id)
            expected = current.version if current is not None else 0

            result = apply_action(base, action, now=self._clock(), rng=self._rng, rules=self.rules)
            if current is not None and result.snapshot == current:
                return result

            try:
                stored = await self.store.put(session_id, result.snapshot, expected_version=expected)
            except VersionConflictError as exc:
                conflict = exc
                logger.info(
                    "[orchestrator] Version conflict room=%s action=%s attempt=%d/%d",
                    session_id,
                    type(action).__name__,
                    attempt,
                    self._max_retries,
                )
                continue
            except StoreUnavailableError as exc:
                if not degrade:
                    raise
                logger.warning("[orchestrator] Write skipped for room=%s: %s", session_id, exc)
                return result

            result.snapshot = stored
            if result.events:
                logger.info(
                    "[orchestrator] room=%s events=%s status=%s",
                    session_id,
                    [e.value for e in result.events],
                    stored.status.value,
                )
            if self._hub is not None:
                await self._hub.publish(session_id, result)
            return result

        if degrade and result is not None:
            return result
        assert conflict is not None
        raise conflict

