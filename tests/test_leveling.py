"""Tests for the XP to level curve."""
from __future__ import annotations

import pytest

from questboard.core.leveling import (
    MAX_PROGRESS_INT,
    clamp_progress_int,
    level_from_xp,
    progress_within_level,
    total_xp_for_level,
    xp_required_for_level,
)


@pytest.mark.parametrize(
    ("level", "required"),
    [(1, 100), (2, 150), (3, 225), (4, 337), (5, 506)],
)
def test_xp_required_for_level_grows_geometrically(level: int, required: int) -> None:
    assert xp_required_for_level(level) == required


def test_level_thresholds_are_exact() -> None:
    assert level_from_xp(0) == 1
    assert level_from_xp(99) == 1
    assert level_from_xp(100) == 2
    assert level_from_xp(249) == 2
    assert level_from_xp(250) == 3
    assert level_from_xp(475) == 4


def test_cumulative_xp_reaches_exactly_that_level() -> None:
    for level in range(2, 40):
        threshold = total_xp_for_level(level)
        assert level_from_xp(threshold) == level
        assert level_from_xp(threshold - 1) == level - 1


def test_level_from_xp_is_monotonic() -> None:
    previous = level_from_xp(0)
    for xp in range(0, 20_000, 7):
        current = level_from_xp(xp)
        assert current >= previous
        previous = current


def test_negative_xp_counts_as_zero() -> None:
    assert level_from_xp(-500) == 1


def test_total_xp_for_first_levels() -> None:
    assert total_xp_for_level(1) == 0
    assert total_xp_for_level(2) == 100
    assert total_xp_for_level(3) == 250


def test_progress_within_level() -> None:
    progress = progress_within_level(175, 2)

    assert progress.current == 75
    assert progress.needed == 150
    assert progress.percentage == pytest.approx(50.0)


def test_progress_percentage_is_capped_for_inconsistent_level() -> None:
    progress = progress_within_level(1_000, 1)

    assert progress.percentage == 100.0


def test_clamp_progress_int_bounds() -> None:
    assert clamp_progress_int(-3) == 0
    assert clamp_progress_int(MAX_PROGRESS_INT + 10) == MAX_PROGRESS_INT
    assert level_from_xp(MAX_PROGRESS_INT) > 30
