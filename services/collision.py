from __future__ import annotations

from models.events import GameEvent
from models.session import SessionSnapshot, SessionStatus

GOAL_SCORE = 1000
ENEMY_HIT_DAMAGE = 25


def apply_damage(snapshot: SessionSnapshot, amount: int) -> list[GameEvent]:
    """Reduce health (clamped at 0) and mark the game lost when it runs out."""
    player = snapshot.player
    player.health = max(0, player.health - amount)
    if player.health == 0 and snapshot.status is SessionStatus.PLAYING:
        snapshot.status = SessionStatus.LOST
        return [GameEvent.LOST]
    return []


def resolve_collisions(snapshot: SessionSnapshot) -> list[GameEvent]:
    """Goal entry wins the game; otherwise standing on an enemy costs health."""
    if snapshot.status is not SessionStatus.PLAYING:
        return []
    player = snapshot.player
    goal = snapshot.goal
    if goal is not None and (player.x, player.y) == (goal.x, goal.y):
        snapshot.status = SessionStatus.WON
        player.score += GOAL_SCORE
        return [GameEvent.GOAL_REACHED, GameEvent.WON]
    if snapshot.enemy_at(player.x, player.y) is not None:
        return [GameEvent.HIT, *apply_damage(snapshot, ENEMY_HIT_DAMAGE)]
    return []
