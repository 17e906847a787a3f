from enum import Enum


class GameEvent(str, Enum):
    """Notable outcomes of a transition, returned alongside the new snapshot."""

    WON = "won"
    LOST = "lost"
    HIT = "hit"
    GOAL_REACHED = "goal_reached"
