from dataclasses import dataclass
from enum import Enum


class SabotageKind(str, Enum):
    SLOW = "slow"
    BLOCK = "block"
    DAMAGE = "damage"
    ENEMY = "enemy"


@dataclass(frozen=True)
class SabotageInfo:
    kind: SabotageKind
    name: str
    description: str
    cost: int                  # spectator tokens
    cooldown_ms: int           # client-side cooldown after a successful use


SABOTAGE_CATALOG: list[SabotageInfo] = [
    SabotageInfo(SabotageKind.SLOW, "Slow Down", "Reduce player speed by 30%", 50, 10_000),
    SabotageInfo(SabotageKind.BLOCK, "Block Path", "Place obstacle near player", 75, 15_000),
    SabotageInfo(SabotageKind.DAMAGE, "Damage", "Reduce player health", 100, 12_000),
    SabotageInfo(SabotageKind.ENEMY, "Spawn Enemy", "Spawn a new enemy in the maze", 125, 20_000),
]

SLOW_FACTOR = 0.7
