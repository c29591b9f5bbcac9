"""Level progression: speed, theme and obstacle density per level."""

import math

from .constants import (
    POINTS_PER_LEVEL, BASE_SPEED_MS, LEVEL_SPEED_STEP_MS, HARD_MODE_BONUS_MS,
    SPEED_FLOOR_MS, POWER_UP_BOOST_MS, POWER_UP_FLOOR_MS,
    OBSTACLE_BASE, OBSTACLE_DENSITY, MAX_OBSTACLES,
)
from .models import Difficulty, Theme


def level_for_score(score: int) -> int:
    return 1 + score // POINTS_PER_LEVEL


def theme_for_level(level: int) -> Theme:
    if level >= 6:
        return Theme.ICE
    if level >= 3:
        return Theme.DESERT
    return Theme.CLASSIC


def speed_for_level(difficulty: Difficulty, level: int, boosted: bool = False) -> int:
    """Milliseconds between ticks.

    The power-up boost is applied on top of the level speed, so dropping it
    gives back exactly the level speed.
    """
    bonus = HARD_MODE_BONUS_MS if difficulty is Difficulty.HARD else 0
    speed = max(SPEED_FLOOR_MS, BASE_SPEED_MS[difficulty.value] - (level - 1) * LEVEL_SPEED_STEP_MS - bonus)
    if boosted:
        speed = max(POWER_UP_FLOOR_MS, speed - POWER_UP_BOOST_MS)
    return speed


def speed_label(level: int, boosted: bool) -> str:
    if boosted:
        return "Boosted"
    if level > 5:
        return "Very Fast"
    if level > 3:
        return "Fast"
    if level > 1:
        return "Medium"
    return "Normal"


def obstacle_target(difficulty: Difficulty, level: int) -> int:
    base = OBSTACLE_BASE[difficulty.value]
    density = OBSTACLE_DENSITY[difficulty.value]
    return min(MAX_OBSTACLES, base + math.floor(level * density))
