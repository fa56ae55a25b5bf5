"""Geometric leveling curve mapping cumulative XP to levels."""
from __future__ import annotations

import math
from dataclasses import dataclass

BASE_LEVEL_XP = 100
LEVEL_GROWTH = 1.5

# Progress columns are 32-bit integers.
MAX_PROGRESS_INT = 2_147_483_647


@dataclass(frozen=True, slots=True)
class LevelProgress:
    """Position of a user inside their current level."""

    current: int
    needed: int
    percentage: float


def clamp_progress_int(value: int) -> int:
    """Clamp ``value`` into the storable non-negative range."""

    return min(MAX_PROGRESS_INT, max(0, int(value)))


def xp_required_for_level(level: int) -> int:
    """XP needed to go from ``level`` to ``level + 1``.

    100 XP for level 1 -> 2, then each step grows by a factor of 1.5,
    rounded down.
    """
    return math.floor(BASE_LEVEL_XP * LEVEL_GROWTH ** (level - 1))


def level_from_xp(xp: int) -> int:
    """Return the level reached with ``xp`` cumulative experience."""

    remaining = max(0, int(xp))
    level = 1
    while remaining >= xp_required_for_level(level):
        remaining -= xp_required_for_level(level)
        level += 1
    return level


def total_xp_for_level(level: int) -> int:
    """Cumulative XP needed to reach ``level`` from zero."""

    return sum(xp_required_for_level(i) for i in range(1, max(1, level)))


def progress_within_level(xp: int, level: int) -> LevelProgress:
    """Return how far ``xp`` sits inside ``level``.

    ``level`` is trusted as given; callers pass ``level_from_xp(xp)``.
    """
    current = xp - total_xp_for_level(level)
    needed = xp_required_for_level(level)
    percentage = min(100.0, current / needed * 100)
    return LevelProgress(current=current, needed=needed, percentage=percentage)


__all__ = [
    "LevelProgress",
    "MAX_PROGRESS_INT",
    "clamp_progress_int",
    "level_from_xp",
    "progress_within_level",
    "total_xp_for_level",
    "xp_required_for_level",
]
