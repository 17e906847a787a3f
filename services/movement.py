from __future__ import annotations

from models.session import Position, SessionSnapshot

VALID_STEPS = (-1, 0, 1)


def is_valid_delta(dx: int, dy: int) -> bool:
    return dx in VALID_STEPS and dy in VALID_STEPS


def apply_move(snapshot: SessionSnapshot, dx: int, dy: int) -> bool:
    """
    Move the player by (dx, dy) in place if the destination is legal.

    Out-of-bounds, wall and obstacle destinations are rejected by returning
    False and leaving the snapshot untouched. A (0, 0) delta is a no-op.
    """
    if dx == 0 and dy == 0:
        return False
    player = snapshot.player
    nx, ny = player.x + dx, player.y + dy
    if not snapshot.is_open(nx, ny) or snapshot.has_obstacle(nx, ny):
        return False
    player.x = nx
    player.y = ny
    snapshot.last_move = Position(x=dx, y=dy)
    return True
