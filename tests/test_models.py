from datetime import datetime

import pytest
from pydantic import ValidationError

from models import (
    DIFFICULTY_PRESETS,
    SABOTAGE_CATALOG,
    Difficulty,
    Enemy,
    Obstacle,
    PlayerState,
    Position,
    SabotageKind,
    SessionSnapshot,
    SessionStatus,
)


def test_waiting_snapshot_defaults() -> None:
    snapshot = SessionSnapshot.waiting("abc123")
    assert snapshot.status is SessionStatus.WAITING
    assert isinstance(snapshot.created_at, datetime)
    assert snapshot.maze == []
    assert snapshot.enemies == []
    assert snapshot.obstacles == []
    assert snapshot.goal is None
    assert snapshot.viewers == 0
    assert snapshot.time_remaining_seconds == 0
    assert snapshot.version == 0
    assert snapshot.player.speed == 1.0


def test_snapshot_round_trips_through_json(make_snapshot) -> None:
    snapshot = make_snapshot(enemies=[Enemy(id="enemy_0", x=3, y=1)])
    restored = SessionSnapshot.model_validate(snapshot.model_dump(mode="json"))
    assert restored == snapshot
    assert restored.model_dump(mode="json")["status"] == "playing"


def test_player_on_wall_is_rejected(make_snapshot) -> None:
    with pytest.raises(ValidationError):
        make_snapshot(player=PlayerState(x=2, y=2))


def test_enemy_on_wall_is_rejected(make_snapshot) -> None:
    with pytest.raises(ValidationError):
        make_snapshot(enemies=[Enemy(id="enemy_0", x=0, y=0)])


def test_ragged_maze_is_rejected() -> None:
    with pytest.raises(ValidationError):
        SessionSnapshot(id="bad", maze=[[1, 1, 1], [1, 0]])


@pytest.mark.parametrize(
    "maze",
    [
        [[1] * 6] + [[1, 0, 0, 0, 0, 1]] * 3 + [[1] * 6],
        [[1, 1, 1], [1, 0, 1], [1, 1, 1]],
        [[1] * 5, [0, 0, 0, 0, 1], [1, 0, 1, 0, 1], [1, 0, 0, 0, 1], [1] * 5],
        [[1] * 5, [1, 1, 0, 0, 1], [1, 0, 1, 0, 1], [1, 0, 0, 0, 1], [1] * 5],
    ],
    ids=["even-width", "too-small", "open-border", "walled-start"],
)
def test_malformed_maze_is_rejected(maze: list[list[int]]) -> None:
    with pytest.raises(ValidationError):
        SessionSnapshot(id="bad", maze=maze)


def test_goal_on_wall_is_rejected(make_snapshot) -> None:
    with pytest.raises(ValidationError):
        make_snapshot(goal=Position(x=2, y=2))


def test_goal_out_of_bounds_is_rejected(make_snapshot) -> None:
    with pytest.raises(ValidationError):
        make_snapshot(goal=Position(x=40, y=3))


def test_obstacle_off_the_open_grid_is_rejected(make_snapshot) -> None:
    with pytest.raises(ValidationError):
        make_snapshot(obstacles=[Obstacle(id="o1", x=7, y=1)])


@pytest.mark.parametrize(
    ("field", "value"),
    [("health", -1), ("speed", 0.0), ("score", -5)],
)
def test_player_counters_are_bounded(field: str, value: float) -> None:
    with pytest.raises(ValidationError):
        PlayerState(**{field: value})


def test_negative_viewers_rejected() -> None:
    with pytest.raises(ValidationError):
        SessionSnapshot(id="bad", viewers=-1)


def test_difficulty_presets() -> None:
    easy = DIFFICULTY_PRESETS[Difficulty.EASY]
    assert (easy.enemy_count, easy.player_health, easy.time_limit) == (2, 150, 180)
    medium = DIFFICULTY_PRESETS[Difficulty.MEDIUM]
    assert (medium.enemy_count, medium.player_health, medium.time_limit) == (3, 100, 120)
    hard = DIFFICULTY_PRESETS[Difficulty.HARD]
    assert (hard.enemy_count, hard.player_health, hard.time_limit) == (4, 75, 90)
    assert easy.extra_connections > medium.extra_connections > hard.extra_connections


def test_catalog_covers_every_sabotage_kind() -> None:
    assert {info.kind for info in SABOTAGE_CATALOG} == set(SabotageKind)
