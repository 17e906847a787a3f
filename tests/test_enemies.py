import random

from models import Enemy, Obstacle, PlayerState, Position, SessionSnapshot, SessionStatus
from services.enemies import place_initial_enemies, step_enemies
from services.maze_generator import generate_maze


# 5x5 room whose only open cell is the start.
BOXED_IN = [
    [1, 1, 1, 1, 1],
    [1, 0, 1, 1, 1],
    [1, 1, 1, 1, 1],
    [1, 1, 1, 1, 1],
    [1, 1, 1, 1, 1],
]


def test_enemies_only_ever_stand_on_open_cells(make_snapshot) -> None:
    snapshot = make_snapshot(
        enemies=[Enemy(id="enemy_0", x=3, y=1), Enemy(id="enemy_1", x=1, y=3), Enemy(id="enemy_2", x=5, y=2)],
    )
    rng = random.Random(11)
    for _ in range(200):
        step_enemies(snapshot, rng)
        for enemy in snapshot.enemies:
            assert snapshot.is_open(enemy.x, enemy.y)


def test_enemy_steps_are_single_cardinal_moves(make_snapshot) -> None:
    snapshot = make_snapshot(enemies=[Enemy(id="enemy_0", x=3, y=1)])
    rng = random.Random(2)
    for _ in range(50):
        before = (snapshot.enemies[0].x, snapshot.enemies[0].y)
        step_enemies(snapshot, rng)
        after = (snapshot.enemies[0].x, snapshot.enemies[0].y)
        assert abs(after[0] - before[0]) + abs(after[1] - before[1]) in (0, 1)


def test_walled_in_enemy_never_moves() -> None:
    snapshot = SessionSnapshot(
        id="box",
        status=SessionStatus.PLAYING,
        maze=BOXED_IN,
        player=PlayerState(x=1, y=1),
        enemies=[Enemy(id="enemy_0", x=1, y=1)],
    )
    rng = random.Random(0)
    for _ in range(20):
        assert step_enemies(snapshot, rng) == 0
    assert (snapshot.enemies[0].x, snapshot.enemies[0].y) == (1, 1)


def test_obstacles_do_not_block_enemies(make_snapshot) -> None:
    snapshot = make_snapshot(
        player=PlayerState(x=5, y=1),
        enemies=[Enemy(id="enemy_0", x=1, y=1)],
        obstacles=[Obstacle(id="o1", x=2, y=1), Obstacle(id="o2", x=1, y=2)],
    )
    rng = random.Random(4)
    visited = set()
    for _ in range(20):
        step_enemies(snapshot, rng)
        visited.add((snapshot.enemies[0].x, snapshot.enemies[0].y))
    assert visited & {(2, 1), (1, 2)}


def test_initial_placement_avoids_start_and_goal() -> None:
    maze = generate_maze(35, 25, 18, rng=random.Random(8))
    snapshot = SessionSnapshot(
        id="room",
        status=SessionStatus.PLAYING,
        maze=maze,
        player=PlayerState(x=1, y=1),
        goal=Position(x=33, y=23),
    )
    enemies = place_initial_enemies(snapshot, 4, random.Random(8))
    assert [e.id for e in enemies] == ["enemy_0", "enemy_1", "enemy_2", "enemy_3"]
    for enemy in enemies:
        assert snapshot.is_open(enemy.x, enemy.y)
        assert 2 <= enemy.x <= 32 and 2 <= enemy.y <= 22
        assert (enemy.x, enemy.y) not in {(1, 1), (33, 23)}
