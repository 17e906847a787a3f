"""Spectator sabotage: legality checks and effects on a room snapshot."""

from __future__ import annotations

import logging
import random
import secrets
from dataclasses import dataclass, field

from models.events import GameEvent
from models.sabotage import SLOW_FACTOR, SabotageKind
from models.session import Enemy, Obstacle, SessionSnapshot, SessionStatus
from services.collision import apply_damage
from services.maze_generator import open_cells, open_cells_within

logger = logging.getLogger(__name__)

DEFAULT_DAMAGE = 20
DEFAULT_ENEMY_CAP = 10
DEFAULT_BLOCK_RADIUS = 3

REASON_NOT_PLAYING = "game not in progress"
REASON_NO_PLACEMENT = "no legal placement"
REASON_ENEMY_CAP = "enemy cap reached"
REASON_PLAYER_DOWN = "player already down"


@dataclass
class SabotageOutcome:
    applied: bool
    reason: str | None = None
    events: list[GameEvent] = field(default_factory=list)

    @classmethod
    def rejected(cls, reason: str) -> "SabotageOutcome":
        return cls(applied=False, reason=reason)


class SabotageEngine:
    """
    Apply a resolved sabotage kind to a snapshot in place.

    Every kind requires a game in progress. When a precondition fails the
    snapshot is left untouched and the outcome carries the reason, which is
    what spectators see as "blocked".
    """

    def __init__(
        self,
        *,
        damage_amount: int = DEFAULT_DAMAGE,
        enemy_cap: int = DEFAULT_ENEMY_CAP,
        block_search_radius: int = DEFAULT_BLOCK_RADIUS,
    ) -> None:
        self.damage_amount = damage_amount
        self.enemy_cap = enemy_cap
        self.block_search_radius = block_search_radius

    def apply(self, snapshot: SessionSnapshot, kind: SabotageKind, rng: random.Random) -> SabotageOutcome:
        if snapshot.status is not SessionStatus.PLAYING:
            return SabotageOutcome.rejected(REASON_NOT_PLAYING)
        handler = {
            SabotageKind.SLOW: self._slow,
            SabotageKind.BLOCK: self._block,
            SabotageKind.DAMAGE: self._damage,
            SabotageKind.ENEMY: self._spawn_enemy,
        }[kind]
        outcome = handler(snapshot, rng)
        if outcome.applied:
            logger.info("[sabotage] Applied %s to room=%s", kind.value, snapshot.id)
        else:
            logger.info("[sabotage] Rejected %s for room=%s: %s", kind.value, snapshot.id, outcome.reason)
        return outcome

    def _slow(self, snapshot: SessionSnapshot, rng: random.Random) -> SabotageOutcome:
        snapshot.player.speed *= SLOW_FACTOR
        return SabotageOutcome(applied=True)

    def _block(self, snapshot: SessionSnapshot, rng: random.Random) -> SabotageOutcome:
        player = (snapshot.player.x, snapshot.player.y)
        obstacles = {(o.x, o.y) for o in snapshot.obstacles}
        excluded = set(obstacles) | {player}
        if snapshot.goal is not None:
            excluded.add((snapshot.goal.x, snapshot.goal.y))

        reachable = open_cells_within(snapshot.maze, player, self.block_search_radius, blocked=obstacles)
        candidates = {cell: dist for cell, dist in reachable.items() if cell not in excluded}
        if not candidates:
            return SabotageOutcome.rejected(REASON_NO_PLACEMENT)
        nearest = min(candidates.values())
        # Sorted so a seeded rng picks the same cell on every run.
        ring = sorted(cell for cell, dist in candidates.items() if dist == nearest)
        x, y = rng.choice(ring)
        snapshot.obstacles.append(Obstacle(id=f"obstacle_{secrets.token_hex(4)}", x=x, y=y))
        return SabotageOutcome(applied=True)

    def _damage(self, snapshot: SessionSnapshot, rng: random.Random) -> SabotageOutcome:
        if snapshot.player.health <= 0:
            return SabotageOutcome.rejected(REASON_PLAYER_DOWN)
        return SabotageOutcome(applied=True, events=apply_damage(snapshot, self.damage_amount))

    def _spawn_enemy(self, snapshot: SessionSnapshot, rng: random.Random) -> SabotageOutcome:
        if len(snapshot.enemies) >= self.enemy_cap:
            return SabotageOutcome.rejected(REASON_ENEMY_CAP)
        excluded = {(snapshot.player.x, snapshot.player.y)}
        if snapshot.goal is not None:
            excluded.add((snapshot.goal.x, snapshot.goal.y))
        candidates = [cell for cell in open_cells(snapshot.maze) if cell not in excluded]
        if not candidates:
            return SabotageOutcome.rejected(REASON_NO_PLACEMENT)
        x, y = rng.choice(candidates)
        snapshot.enemies.append(Enemy(id=_next_enemy_id(snapshot), x=x, y=y))
        return SabotageOutcome(applied=True)


def _next_enemy_id(snapshot: SessionSnapshot) -> str:
    taken = {e.id for e in snapshot.enemies}
    n = len(snapshot.enemies)
    while f"enemy_{n}" in taken:
        n += 1
    return f"enemy_{n}"
