"""Runtime settings read from the environment (and a project-level .env when present)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    return int(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    maze_width: int = 35
    maze_height: int = 25
    sabotage_damage: int = 20
    enemy_cap: int = 10
    block_search_radius: int = 3
    store_max_retries: int = 3
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self) -> None:
        for name in ("maze_width", "maze_height"):
            value = getattr(self, name)
            if value < 5 or value % 2 == 0:
                raise ValueError(f"{name.upper()} must be an odd number >= 5, got {value}")

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.environ.get("CORS_ORIGINS", "").strip()
        return cls(
            maze_width=_env_int("MAZE_WIDTH", cls.maze_width),
            maze_height=_env_int("MAZE_HEIGHT", cls.maze_height),
            sabotage_damage=_env_int("SABOTAGE_DAMAGE", cls.sabotage_damage),
            enemy_cap=_env_int("ENEMY_CAP", cls.enemy_cap),
            block_search_radius=_env_int("BLOCK_SEARCH_RADIUS", cls.block_search_radius),
            store_max_retries=_env_int("STORE_MAX_RETRIES", cls.store_max_retries),
            log_level=os.environ.get("LOG_LEVEL", "").strip().upper() or cls.log_level,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        )


settings = Settings.from_env()
