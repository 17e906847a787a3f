from __future__ import annotations

import random

from models.session import Enemy, SessionSnapshot
from services.maze_generator import CARDINALS

PLACEMENT_ATTEMPTS = 50


def step_enemies(snapshot: SessionSnapshot, rng: random.Random) -> int:
    """
    Advance every enemy one random cardinal step, in place.

    Each enemy picks a direction uniformly and stays put when the target is
    a wall or off the grid. Obstacles and other enemies do not block enemies.
    Returns how many enemies actually moved.
    """
    moved = 0
    for enemy in snapshot.enemies:
        dx, dy = rng.choice(CARDINALS)
        if snapshot.is_open(enemy.x + dx, enemy.y + dy):
            enemy.x += dx
            enemy.y += dy
            moved += 1
    return moved


def place_initial_enemies(snapshot: SessionSnapshot, count: int, rng: random.Random) -> list[Enemy]:
    """
    Drop ``count`` enemies on random open interior cells away from start and goal.

    Each enemy gets a bounded number of attempts; one that cannot be placed is
    skipped rather than forced onto a bad cell.
    """
    width, height = snapshot.width, snapshot.height
    reserved = {(snapshot.player.x, snapshot.player.y)}
    if snapshot.goal is not None:
        reserved.add((snapshot.goal.x, snapshot.goal.y))

    enemies: list[Enemy] = []
    if width < 5 or height < 5:
        return enemies
    for i in range(count):
        for _ in range(PLACEMENT_ATTEMPTS):
            x = rng.randrange(2, width - 2)
            y = rng.randrange(2, height - 2)
            if snapshot.is_open(x, y) and (x, y) not in reserved:
                enemies.append(Enemy(id=f"enemy_{i}", x=x, y=y))
                break
    return enemies
