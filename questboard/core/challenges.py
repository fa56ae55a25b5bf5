"""Weekly challenge pool, generation and progress rules."""
from __future__ import annotations

import random
from dataclasses import dataclass, replace
from datetime import datetime, time, timedelta
from typing import Any, Iterable, Literal, Sequence

ChallengeType = Literal["tasks", "goals", "streak", "events", "login"]
Difficulty = Literal["easy", "medium", "hard", "extreme"]

CHALLENGE_TYPES: tuple[str, ...] = ("tasks", "goals", "streak", "events", "login")
WEEK_END_TIME = time(23, 59, 59, 999000)


@dataclass(frozen=True, slots=True)
class ChallengeReward:
    xp: int
    coins: int
    title: str | None = None


@dataclass(frozen=True, slots=True)
class ChallengeTemplate:
    title: str
    description: str
    icon: str
    type: ChallengeType
    target: int
    reward: ChallengeReward
    difficulty: Difficulty


@dataclass(frozen=True, slots=True)
class Challenge:
    """A challenge instance scoped to one week."""

    id: str
    title: str
    description: str
    icon: str
    type: ChallengeType
    target: int
    reward: ChallengeReward
    difficulty: Difficulty
    start_date: datetime
    end_date: datetime
    current: int = 0
    completed: bool = False
    claimed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "type": self.type,
            "target": self.target,
            "reward": {
                "xp": self.reward.xp,
                "coins": self.reward.coins,
                "title": self.reward.title,
            },
            "difficulty": self.difficulty,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "current": self.current,
            "completed": self.completed,
            "claimed_at": self.claimed_at.isoformat() if self.claimed_at else None,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Challenge":
        reward = raw.get("reward") or {}
        target = max(1, int(raw.get("target") or 1))
        current = min(max(0, int(raw.get("current") or 0)), target)
        claimed_at = raw.get("claimed_at")
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title", "")),
            description=str(raw.get("description", "")),
            icon=str(raw.get("icon") or "target"),
            type=raw.get("type", "tasks"),
            target=target,
            reward=ChallengeReward(
                xp=max(0, int(reward.get("xp") or 0)),
                coins=max(0, int(reward.get("coins") or 0)),
                title=reward.get("title"),
            ),
            difficulty=raw.get("difficulty", "easy"),
            start_date=datetime.fromisoformat(raw["start_date"]),
            end_date=datetime.fromisoformat(raw["end_date"]),
            current=current,
            completed=bool(raw.get("completed")) or current >= target,
            claimed_at=datetime.fromisoformat(claimed_at) if claimed_at else None,
        )


@dataclass(frozen=True, slots=True)
class WeekBounds:
    start: datetime
    end: datetime

    @property
    def key(self) -> str:
        return self.start.date().isoformat()

    @property
    def start_epoch_millis(self) -> int:
        return int(self.start.timestamp() * 1000)


@dataclass(frozen=True, slots=True)
class RewardTotals:
    xp: int = 0
    coins: int = 0


WEEKLY_CHALLENGE_POOL: tuple[ChallengeTemplate, ...] = (
    # Easy
    ChallengeTemplate("Kick Off the Week", "Complete 5 tasks this week", "check", "tasks", 5, ChallengeReward(50, 10), "easy"),
    ChallengeTemplate("Organizer", "Create 3 calendar events", "calendar", "events", 3, ChallengeReward(40, 8), "easy"),
    ChallengeTemplate("Persistence", "Keep a 3 day streak", "flame", "streak", 3, ChallengeReward(60, 12), "easy"),
    # Medium
    ChallengeTemplate("Productive", "Complete 20 tasks this week", "shield", "tasks", 20, ChallengeReward(150, 30), "medium"),
    ChallengeTemplate("Goal Focused", "Complete 2 goals this week", "target", "goals", 2, ChallengeReward(200, 40), "medium"),
    ChallengeTemplate("Steady", "Keep a 5 day streak", "zap", "streak", 5, ChallengeReward(180, 35), "medium"),
    ChallengeTemplate("Master Planner", "Organize 10 events", "trending", "events", 10, ChallengeReward(120, 25), "medium"),
    # Hard
    ChallengeTemplate("Marathon", "Complete 50 tasks this week", "footprints", "tasks", 50, ChallengeReward(400, 80), "hard"),
    ChallengeTemplate("Conqueror", "Complete 5 goals this week", "crown", "goals", 5, ChallengeReward(500, 100), "hard"),
    ChallengeTemplate("Perfect Week", "Keep a full 7 day streak", "star", "streak", 7, ChallengeReward(600, 120, "consistent"), "hard"),
    # Extreme
    ChallengeTemplate("Workaholic", "Complete 100 tasks this week", "briefcase", "tasks", 100, ChallengeReward(1000, 200), "extreme"),
    ChallengeTemplate("Unstoppable", "Complete 10 goals this week", "rocket", "goals", 10, ChallengeReward(1500, 300), "extreme"),
)


def week_bounds(now: datetime) -> WeekBounds:
    """Return the Sunday-to-Saturday week containing ``now``, in ``now``'s timezone."""

    days_since_sunday = (now.weekday() + 1) % 7
    start_day = now.date() - timedelta(days=days_since_sunday)
    start = datetime.combine(start_day, time.min, tzinfo=now.tzinfo)
    end = datetime.combine(start_day + timedelta(days=6), WEEK_END_TIME, tzinfo=now.tzinfo)
    return WeekBounds(start=start, end=end)


def _pool_by_difficulty(difficulty: Difficulty) -> list[tuple[int, ChallengeTemplate]]:
    return [
        (index, template)
        for index, template in enumerate(WEEKLY_CHALLENGE_POOL)
        if template.difficulty == difficulty
    ]


def _instantiate(index: int, template: ChallengeTemplate, bounds: WeekBounds) -> Challenge:
    return Challenge(
        id=f"challenge_{bounds.start_epoch_millis}_{index}",
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


def generate_weekly_challenges(now: datetime, rng: random.Random | None = None) -> list[Challenge]:
    """Pick 1 easy, 2 distinct medium and 1 hard challenge for the week of ``now``."""

    rng = rng or random.Random()
    bounds = week_bounds(now)

    easy = _pool_by_difficulty("easy")
    medium = _pool_by_difficulty("medium")
    hard = _pool_by_difficulty("hard")

    selected_easy = rng.choice(easy)
    selected_medium_1 = rng.choice(medium)
    selected_medium_2 = rng.choice(medium)
    while selected_medium_2[1].title == selected_medium_1[1].title:
        selected_medium_2 = rng.choice(medium)
    selected_hard = rng.choice(hard)

    return [
        _instantiate(index, template, bounds)
        for index, template in (selected_easy, selected_medium_1, selected_medium_2, selected_hard)
    ]


def update_challenge_progress(
    challenges: Sequence[Challenge], type: str, increment: int = 1
) -> list[Challenge]:
    """Advance every open challenge of ``type`` by ``increment``, capped at its target."""

    updated: list[Challenge] = []
    for challenge in challenges:
        if challenge.type == type and not challenge.completed:
            current = min(max(0, challenge.current + increment), challenge.target)
            challenge = replace(challenge, current=current, completed=current >= challenge.target)
        updated.append(challenge)
    return updated


def time_until_week_end(now: datetime) -> str:
    """Format the time left until Saturday 23:59:59.999 as ``"{d}d {h}h"`` or ``"{h}h"``."""

    days_to_saturday = (5 - now.weekday()) % 7
    end = datetime.combine(now.date() + timedelta(days=days_to_saturday), WEEK_END_TIME, tzinfo=now.tzinfo)
    diff = end - now
    days = diff.days
    hours = diff.seconds // 3600
    if days > 0:
        return f"{days}d {hours}h"
    return f"{hours}h"


def completed_count(challenges: Iterable[Challenge]) -> int:
    return sum(1 for challenge in challenges if challenge.completed)


def total_possible_rewards(challenges: Iterable[Challenge]) -> RewardTotals:
    xp = coins = 0
    for challenge in challenges:
        xp += challenge.reward.xp
        coins += challenge.reward.coins
    return RewardTotals(xp=xp, coins=coins)


def earned_rewards(challenges: Iterable[Challenge]) -> RewardTotals:
    return total_possible_rewards(challenge for challenge in challenges if challenge.completed)


__all__ = [
    "CHALLENGE_TYPES",
    "Challenge",
    "ChallengeReward",
    "ChallengeTemplate",
    "ChallengeType",
    "Difficulty",
    "RewardTotals",
    "WEEKLY_CHALLENGE_POOL",
    "WeekBounds",
    "completed_count",
    "earned_rewards",
    "generate_weekly_challenges",
    "time_until_week_end",
    "total_possible_rewards",
    "update_challenge_progress",
    "week_bounds",
]
