"""
Level System

Derives a user's level from cumulative points.

Leveling Curve:
- Levels 1-15 follow LEVEL_THRESHOLDS (cumulative points per level)
- Past the table each band is 1.5x the previous band, rounded down

The level depends only on the point total, so a run of small awards and a
single large award of the same sum always land on the same level.
"""

import logging
from functools import lru_cache

from fittracker.models.gamification import LevelProgress

logger = logging.getLogger(__name__)

# Cumulative points required for each level (index 0 = level 1)
LEVEL_THRESHOLDS = [
    0, 100, 250, 500, 1000, 2000, 3500, 5500, 8000, 12000, 17000, 25000, 35000, 50000, 75000
]

BAND_GROWTH_FACTOR = 1.5


@lru_cache(maxsize=None)
def band_size(level: int) -> int:
    """
    Points needed to go from `level` to `level + 1`

    Inside the table this is the threshold difference; after the table ends
    each band grows by BAND_GROWTH_FACTOR and is floored to an integer.
    """
    if level < 1:
        raise ValueError(f"Level must be >= 1, got {level}")

    if level < len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[level] - LEVEL_THRESHOLDS[level - 1]

    size = LEVEL_THRESHOLDS[-1] - LEVEL_THRESHOLDS[-2]
    for _ in range(len(LEVEL_THRESHOLDS) - 1, level):
        size = int(size * BAND_GROWTH_FACTOR)
    return size


def threshold_for_level(level: int) -> int:
    """Cumulative points required to reach `level`"""
    if level < 1:
        raise ValueError(f"Level must be >= 1, got {level}")

    if level <= len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[level - 1]

    total = LEVEL_THRESHOLDS[-1]
    for lvl in range(len(LEVEL_THRESHOLDS), level):
        total += band_size(lvl)
    return total


def calculate_level(total_points: int) -> LevelProgress:
    """
    Calculate level and progress within the level from total points

    Steps through the bands starting at level 1: while the remaining points
    cover the current band, consume it and move up a level.

    Returns:
        LevelProgress(level, current_level_points, next_level_points)
    """
    level = 1
    current_level_points = total_points
    next_level_points = band_size(level)

    while current_level_points >= next_level_points:
        current_level_points -= next_level_points
        level += 1
        next_level_points = band_size(level)

    return LevelProgress(
        level=level,
        current_level_points=current_level_points,
        next_level_points=next_level_points,
    )


def calculate_level_from_points(total_points: int) -> int:
    """Level only, for callers that do not need progress"""
    return calculate_level(total_points).level
