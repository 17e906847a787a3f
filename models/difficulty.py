from enum import Enum

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class DifficultySettings(BaseModel):
    enemy_count: int = Field(ge=0)
    enemy_speed: int = Field(ge=1)          # speed tier, display only
    enemy_chase_rate: float = Field(ge=0.0, le=1.0)
    player_health: int = Field(gt=0)
    time_limit: int = Field(gt=0)           # seconds
    extra_connections: int = Field(ge=0)    # extra maze loops carved after backtracking


DIFFICULTY_PRESETS: dict[Difficulty, DifficultySettings] = {
    Difficulty.EASY: DifficultySettings(
        enemy_count=2,
        enemy_speed=1,
        enemy_chase_rate=0.6,
        player_health=150,
        time_limit=180,
        extra_connections=18,
    ),
    Difficulty.MEDIUM: DifficultySettings(
        enemy_count=3,
        enemy_speed=2,
        enemy_chase_rate=0.75,
        player_health=100,
        time_limit=120,
        extra_connections=10,
    ),
    Difficulty.HARD: DifficultySettings(
        enemy_count=4,
        enemy_speed=3,
        enemy_chase_rate=0.9,
        player_health=75,
        time_limit=90,
        extra_connections=4,
    ),
}

DEFAULT_DIFFICULTY = Difficulty.MEDIUM
