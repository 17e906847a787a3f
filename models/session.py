from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from .difficulty import Difficulty, DifficultySettings

OPEN = 0
WALL = 1


class SessionStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


class Position(BaseModel):
    x: int
    y: int


class PlayerState(BaseModel):
    x: int = 1
    y: int = 1
    health: int = Field(default=100, ge=0)
    speed: float = Field(default=1.0, gt=0)  # client-side movement multiplier
    score: int = Field(default=0, ge=0)


class Enemy(BaseModel):
    id: str
    x: int
    y: int


class Obstacle(BaseModel):
    id: str
    x: int
    y: int


class SessionSnapshot(BaseModel):
    """
    Complete persisted state of one room.

    The maze is row-major (``maze[y][x]``) with OPEN=0 and WALL=1. ``version``
    is owned by the store and bumped on every write; callers never set it.
    """

    id: str
    status: SessionStatus = SessionStatus.WAITING
    maze: list[list[int]] = Field(default_factory=list)
    player: PlayerState = Field(default_factory=PlayerState)
    enemies: list[Enemy] = Field(default_factory=list)
    obstacles: list[Obstacle] = Field(default_factory=list)
    goal: Position | None = None
    viewers: int = Field(default=0, ge=0)
    time_remaining_seconds: int = Field(default=0, ge=0)
    last_tick_timestamp: int = 0           # epoch milliseconds
    difficulty: Difficulty | None = None
    difficulty_settings: DifficultySettings | None = None
    last_move: Position | None = None      # display hint for the runner sprite
    message: str | None = None
    version: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def check_layout(self) -> "SessionSnapshot":
        if not self.maze:
            return self
        width = len(self.maze[0])
        height = len(self.maze)
        if any(len(row) != width for row in self.maze):
            raise ValueError("maze rows must all have the same width")
        if width < 5 or height < 5 or width % 2 == 0 or height % 2 == 0:
            raise ValueError(f"maze must be odd-sized and at least 5x5, got {width}x{height}")
        border = [*self.maze[0], *self.maze[-1], *(row[0] for row in self.maze), *(row[-1] for row in self.maze)]
        if any(cell != WALL for cell in border):
            raise ValueError("maze border must be all wall")
        if not self.is_open(1, 1):
            raise ValueError("start cell (1, 1) must be open")
        if self.goal is not None and not self.is_open(self.goal.x, self.goal.y):
            raise ValueError(f"goal at ({self.goal.x}, {self.goal.y}) is not on an open cell")
        for obstacle in self.obstacles:
            if not self.is_open(obstacle.x, obstacle.y):
                raise ValueError(f"{obstacle.id} at ({obstacle.x}, {obstacle.y}) is not on an open cell")
        if self.status is SessionStatus.WAITING:
            return self
        if not self.is_open(self.player.x, self.player.y):
            raise ValueError(f"player at ({self.player.x}, {self.player.y}) is not on an open cell")
        for enemy in self.enemies:
            if not self.is_open(enemy.x, enemy.y):
                raise ValueError(f"{enemy.id} at ({enemy.x}, {enemy.y}) is not on an open cell")
        return self

    @classmethod
    def waiting(cls, session_id: str, message: str | None = None) -> "SessionSnapshot":
        """Placeholder for a room that has not been started (or cannot be read)."""
        return cls(id=session_id, message=message)

    @property
    def width(self) -> int:
        return len(self.maze[0]) if self.maze else 0

    @property
    def height(self) -> int:
        return len(self.maze)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_open(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.maze[y][x] == OPEN

    def has_obstacle(self, x: int, y: int) -> bool:
        return any(o.x == x and o.y == y for o in self.obstacles)

    def enemy_at(self, x: int, y: int) -> Enemy | None:
        return next((e for e in self.enemies if e.x == x and e.y == y), None)
