from .difficulty import DEFAULT_DIFFICULTY, DIFFICULTY_PRESETS, Difficulty, DifficultySettings
from .events import GameEvent
from .sabotage import SABOTAGE_CATALOG, SLOW_FACTOR, SabotageInfo, SabotageKind
from .session import (
    OPEN,
    WALL,
    Enemy,
    Obstacle,
    PlayerState,
    Position,
    SessionSnapshot,
    SessionStatus,
)

__all__ = [
    "DEFAULT_DIFFICULTY",
    "DIFFICULTY_PRESETS",
    "Difficulty",
    "DifficultySettings",
    "GameEvent",
    "SABOTAGE_CATALOG",
    "SLOW_FACTOR",
    "SabotageInfo",
    "SabotageKind",
    "OPEN",
    "WALL",
    "Enemy",
    "Obstacle",
    "PlayerState",
    "Position",
    "SessionSnapshot",
    "SessionStatus",
]
