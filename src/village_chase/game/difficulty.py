"""Score and difficulty derivation.

All functions are pure functions of the real-valued score.
"""

import math

from village_chase.game.constants import (
    BASE_SPEED,
    COW_ROLL_THRESHOLD,
    PUDDLE_ROLL_THRESHOLD,
    SPAWN_BASE_INTERVAL,
    SPAWN_MIN_INTERVAL,
    SPAWN_SCORE_DIVISOR,
    SPEED_SCORE_DIVISOR,
)
from village_chase.game.entities import ObstacleKind


def scroll_speed(score: float) -> float:
    """Horizontal scroll speed in px per tick. Strictly increasing, uncapped."""
    return BASE_SPEED + score / SPEED_SCORE_DIVISOR


def spawn_threshold(score: float) -> float:
    """Ticks that must pass since the last spawn before the next one.

    Shrinks as the score rises but never below SPAWN_MIN_INTERVAL.
    """
    return max(SPAWN_MIN_INTERVAL, SPAWN_BASE_INTERVAL - score / SPAWN_SCORE_DIVISOR)


def choose_obstacle_kind(roll: float) -> ObstacleKind:
    """Map a uniform roll in [0, 1) onto an obstacle kind."""
    if roll > COW_ROLL_THRESHOLD:
        return ObstacleKind.COW
    if roll > PUDDLE_ROLL_THRESHOLD:
        return ObstacleKind.PUDDLE
    return ObstacleKind.ROCK


def displayed_score(score: float) -> int:
    """Whole points shown on the HUD and reported at game over."""
    return math.floor(score)
