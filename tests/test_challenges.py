"""Tests for weekly challenge generation and progress rules."""
from __future__ import annotations

import random
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from questboard.core.challenges import (
    WEEKLY_CHALLENGE_POOL,
    Challenge,
    completed_count,
    earned_rewards,
    generate_weekly_challenges,
    time_until_week_end,
    total_possible_rewards,
    update_challenge_progress,
    week_bounds,
)


def test_week_bounds_run_sunday_to_saturday(fixed_now) -> None:
    bounds = week_bounds(fixed_now)

    assert bounds.start == datetime(2026, 10, 18, tzinfo=timezone.utc)
    assert bounds.end == datetime(2026, 10, 24, 23, 59, 59, 999000, tzinfo=timezone.utc)
    assert bounds.key == "2026-10-18"


def test_week_bounds_on_the_edges() -> None:
    sunday = datetime(2026, 10, 18, 0, 0, tzinfo=timezone.utc)
    saturday_night = datetime(2026, 10, 24, 23, 30, tzinfo=timezone.utc)

    assert week_bounds(sunday).start == sunday
    assert week_bounds(saturday_night).start == sunday
    assert week_bounds(sunday + timedelta(days=7)).key == "2026-10-25"


def test_generation_picks_one_easy_two_distinct_medium_one_hard(fixed_now) -> None:
    start_ms = int(week_bounds(fixed_now).start.timestamp() * 1000)

    for seed in range(50):
        challenges = generate_weekly_challenges(fixed_now, random.Random(seed))

        assert [challenge.difficulty for challenge in challenges] == ["easy", "medium", "medium", "hard"]
        assert challenges[1].title != challenges[2].title
        for challenge in challenges:
            prefix, _, index = challenge.id.rpartition("_")
            assert prefix == f"challenge_{start_ms}"
            assert WEEKLY_CHALLENGE_POOL[int(index)].title == challenge.title
            assert challenge.current == 0
            assert not challenge.completed
            assert challenge.start_date == week_bounds(fixed_now).start


def test_generation_is_reproducible_with_same_seed(fixed_now) -> None:
    first = generate_weekly_challenges(fixed_now, random.Random("user:2026-10-18"))
    second = generate_weekly_challenges(fixed_now, random.Random("user:2026-10-18"))

    assert [challenge.id for challenge in first] == [challenge.id for challenge in second]


def _challenge(fixed_now, pool_index: int, **overrides) -> Challenge:
    template = WEEKLY_CHALLENGE_POOL[pool_index]
    bounds = week_bounds(fixed_now)
    challenge = Challenge(
        id=f"challenge_test_{pool_index}",
        title=template.title,
        description=template.description,
        icon=template.icon,
        type=template.type,
        target=template.target,
        reward=template.reward,
        difficulty=template.difficulty,
        start_date=bounds.start,
        end_date=bounds.end,
    )
    return replace(challenge, **overrides)


def test_update_progress_caps_at_target_and_freezes(fixed_now) -> None:
    tasks = _challenge(fixed_now, 0)  # 5 tasks
    events = _challenge(fixed_now, 1)  # 3 events

    updated = update_challenge_progress([tasks, events], "tasks", 4)
    assert updated[0].current == 4 and not updated[0].completed
    assert updated[1] == events

    updated = update_challenge_progress(updated, "tasks", 10)
    assert updated[0].current == 5 and updated[0].completed

    frozen = update_challenge_progress(updated, "tasks", 3)
    assert frozen[0].current == 5
    assert frozen[0].completed


def test_time_until_week_end() -> None:
    assert time_until_week_end(datetime(2026, 10, 21, 12, 0, tzinfo=timezone.utc)) == "3d 11h"
    assert time_until_week_end(datetime(2026, 10, 24, 20, 0, tzinfo=timezone.utc)) == "3h"
    assert time_until_week_end(datetime(2026, 10, 18, 0, 0, tzinfo=timezone.utc)) == "6d 23h"


def test_reward_aggregates(fixed_now) -> None:
    challenges = [
        _challenge(fixed_now, 0, current=5, completed=True),
        _challenge(fixed_now, 3),
        _challenge(fixed_now, 9),
    ]

    assert completed_count(challenges) == 1
    assert total_possible_rewards(challenges).xp == 50 + 150 + 600
    assert total_possible_rewards(challenges).coins == 10 + 30 + 120
    assert earned_rewards(challenges).xp == 50
    assert earned_rewards(challenges).coins == 10


def test_serialized_challenge_restores_claim_state(fixed_now) -> None:
    claimed = _challenge(fixed_now, 9, current=7, completed=True, claimed_at=fixed_now)

    restored = Challenge.from_dict(claimed.to_dict())

    assert restored == claimed
    assert restored.reward.title == "consistent"
