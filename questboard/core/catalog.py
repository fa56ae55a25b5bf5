"""Static achievement and title catalogs."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Literal

AchievementRarity = Literal["bronze", "silver", "gold", "diamond"]
TitleRarity = Literal["common", "rare", "epic", "legendary", "mythic"]

TITLE_RARITY_ORDER: dict[str, int] = {
    "common": 1,
    "rare": 2,
    "epic": 3,
    "legendary": 4,
    "mythic": 5,
}


@dataclass(frozen=True, slots=True)
class UserStats:
    """Snapshot of user statistics used to evaluate achievements."""

    total_goals_completed: int = 0
    total_tasks_completed: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    total_events_created: int = 0
    days_active: int = 0
    level: int = 1
    xp: int = 0
    achievements_count: int = 0


class StatKind(str, Enum):
    """Statistic a condition or requirement is measured against."""

    GOAL_COUNT = "goals"
    TASK_COUNT = "tasks"
    STREAK = "streak"
    LONGEST_STREAK = "longest_streak"
    EVENT_COUNT = "events"
    DAYS_ACTIVE = "days_active"
    LEVEL = "level"
    XP = "xp"
    ACHIEVEMENT_COUNT = "achievements"
    SPECIAL = "special"


@dataclass(frozen=True, slots=True)
class AchievementCondition:
    """``stat(kind) >= threshold``."""

    kind: StatKind
    threshold: int


def stat_value(stats: UserStats, kind: StatKind) -> int | None:
    """Return the value of ``kind`` in ``stats``; ``None`` for special kinds."""

    if kind is StatKind.GOAL_COUNT:
        return stats.total_goals_completed
    if kind is StatKind.TASK_COUNT:
        return stats.total_tasks_completed
    if kind is StatKind.STREAK:
        return stats.current_streak
    if kind is StatKind.LONGEST_STREAK:
        return stats.longest_streak
    if kind is StatKind.EVENT_COUNT:
        return stats.total_events_created
    if kind is StatKind.DAYS_ACTIVE:
        return stats.days_active
    if kind is StatKind.LEVEL:
        return stats.level
    if kind is StatKind.XP:
        return stats.xp
    if kind is StatKind.ACHIEVEMENT_COUNT:
        return stats.achievements_count
    return None


def evaluate_condition(condition: AchievementCondition, stats: UserStats) -> bool:
    value = stat_value(stats, condition.kind)
    if value is None:
        return False
    return value >= condition.threshold


# ----------------------------------------------------------------------
# Achievements
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class AchievementDefinition:
    """Catalog entry for a permanently unlockable milestone."""

    id: str
    name: str
    description: str
    icon: str
    rarity: AchievementRarity
    xp_reward: int
    condition: AchievementCondition


ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(
        id="first_goal",
        name="First Step",
        description="Complete your first goal",
        icon="target",
        rarity="bronze",
        xp_reward=50,
        condition=AchievementCondition(StatKind.GOAL_COUNT, 1),
    ),
    AchievementDefinition(
        id="goal_master",
        name="Goal Master",
        description="Complete 10 goals",
        icon="trophy",
        rarity="gold",
        xp_reward=200,
        condition=AchievementCondition(StatKind.GOAL_COUNT, 10),
    ),
    AchievementDefinition(
        id="first_task",
        name="Productive",
        description="Complete your first task",
        icon="check",
        rarity="bronze",
        xp_reward=25,
        condition=AchievementCondition(StatKind.TASK_COUNT, 1),
    ),
    AchievementDefinition(
        id="task_warrior",
        name="Task Warrior",
        description="Complete 50 tasks",
        icon="sword",
        rarity="silver",
        xp_reward=150,
        condition=AchievementCondition(StatKind.TASK_COUNT, 50),
    ),
    AchievementDefinition(
        id="task_legend",
        name="Productivity Legend",
        description="Complete 200 tasks",
        icon="crown",
        rarity="diamond",
        xp_reward=500,
        condition=AchievementCondition(StatKind.TASK_COUNT, 200),
    ),
    AchievementDefinition(
        id="streak_starter",
        name="Consistency Unlocked",
        description="Keep a 7 day streak",
        icon="flame",
        rarity="bronze",
        xp_reward=100,
        condition=AchievementCondition(StatKind.STREAK, 7),
    ),
    AchievementDefinition(
        id="streak_master",
        name="Consistency Master",
        description="Keep a 30 day streak",
        icon="diamond",
        rarity="gold",
        xp_reward=300,
        condition=AchievementCondition(StatKind.STREAK, 30),
    ),
    AchievementDefinition(
        id="streak_legend",
        name="Unstoppable",
        description="Keep a 100 day streak",
        icon="star",
        rarity="diamond",
        xp_reward=1000,
        condition=AchievementCondition(StatKind.STREAK, 100),
    ),
    AchievementDefinition(
        id="scheduler",
        name="Planner",
        description="Schedule 5 streams",
        icon="calendar",
        rarity="bronze",
        xp_reward=75,
        condition=AchievementCondition(StatKind.EVENT_COUNT, 5),
    ),
    AchievementDefinition(
        id="early_adopter",
        name="Pioneer",
        description="Be active on 7 different days",
        icon="rocket",
        rarity="silver",
        xp_reward=100,
        condition=AchievementCondition(StatKind.DAYS_ACTIVE, 7),
    ),
    AchievementDefinition(
        id="dedicated",
        name="Dedicated",
        description="Be active on 30 different days",
        icon="shield",
        rarity="gold",
        xp_reward=250,
        condition=AchievementCondition(StatKind.DAYS_ACTIVE, 30),
    ),
)

_ACHIEVEMENTS_BY_ID = {achievement.id: achievement for achievement in ACHIEVEMENTS}


def get_achievement(achievement_id: str) -> AchievementDefinition | None:
    return _ACHIEVEMENTS_BY_ID.get(achievement_id)


# ----------------------------------------------------------------------
# Titles
# ----------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class TitleRequirement:
    kind: StatKind
    value: int
    description: str


@dataclass(frozen=True, slots=True)
class TitleDefinition:
    """Cosmetic label unlocked by a requirement or an explicit grant."""

    id: str
    name: str
    description: str
    icon: str
    color: str
    rarity: TitleRarity
    requirement: TitleRequirement

    @property
    def is_special(self) -> bool:
        return self.requirement.kind is StatKind.SPECIAL


def _title(
    id: str,
    name: str,
    description: str,
    icon: str,
    color: str,
    rarity: TitleRarity,
    kind: StatKind,
    value: int,
    requirement: str,
) -> TitleDefinition:
    return TitleDefinition(
        id=id,
        name=name,
        description=description,
        icon=icon,
        color=color,
        rarity=rarity,
        requirement=TitleRequirement(kind=kind, value=value, description=requirement),
    )


TITLES: tuple[TitleDefinition, ...] = (
    # Level based
    _title("novice", "Novice", "Every great streamer starts here", "sprout", "#9ca3af", "common", StatKind.LEVEL, 1, "Reach level 1"),
    _title("streamer", "Streamer", "You are doing great", "gamepad", "#06b6d4", "common", StatKind.LEVEL, 5, "Reach level 5"),
    _title("pro", "Pro Player", "Things just got serious", "zap", "#8b5cf6", "rare", StatKind.LEVEL, 10, "Reach level 10"),
    _title("legend", "Legend", "Few make it this far", "crown", "#f59e0b", "epic", StatKind.LEVEL, 25, "Reach level 25"),
    _title("god", "Stream God", "You transcended reality", "sparkles", "#ec4899", "legendary", StatKind.LEVEL, 50, "Reach level 50"),
    _title("immortal", "Immortal", "Your name will be remembered", "flame", "#ff0000", "mythic", StatKind.LEVEL, 100, "Reach level 100"),
    # Streak based
    _title("consistent", "Consistent", "Consistency is key", "calendar", "#10b981", "rare", StatKind.LONGEST_STREAK, 7, "Keep a 7 day streak"),
    _title("marathoner", "Marathoner", "You never stop", "footprints", "#f59e0b", "epic", StatKind.LONGEST_STREAK, 30, "Keep a 30 day streak"),
    _title("unstoppable", "Unstoppable", "Nothing can hold you back", "rocket", "#ec4899", "legendary", StatKind.LONGEST_STREAK, 100, "Keep a 100 day streak"),
    # Task based
    _title("taskmaster", "Taskmaster", "Organized and efficient", "check", "#06b6d4", "rare", StatKind.TASK_COUNT, 100, "Complete 100 tasks"),
    _title("workaholic", "Workaholic", "You never rest", "briefcase", "#8b5cf6", "epic", StatKind.TASK_COUNT, 500, "Complete 500 tasks"),
    _title("productivity_god", "Productivity God", "Maximum productivity", "star", "#fbbf24", "legendary", StatKind.TASK_COUNT, 1000, "Complete 1000 tasks"),
    # Goal based
    _title("dreamer", "Dreamer", "You dream big", "cloud", "#a78bfa", "common", StatKind.GOAL_COUNT, 5, "Complete 5 goals"),
    _title("achiever", "Achiever", "You get what you aim for", "target", "#ec4899", "rare", StatKind.GOAL_COUNT, 20, "Complete 20 goals"),
    _title("champion", "Champion", "Always winning", "trophy", "#fbbf24", "epic", StatKind.GOAL_COUNT, 50, "Complete 50 goals"),
    # Achievement based
    _title("collector", "Collector", "You love achievements", "medal", "#8b5cf6", "rare", StatKind.ACHIEVEMENT_COUNT, 5, "Unlock 5 achievements"),
    _title("completionist", "Completionist", "100% on everything", "hundred", "#fbbf24", "legendary", StatKind.ACHIEVEMENT_COUNT, len(ACHIEVEMENTS), "Unlock every achievement"),
    # Special
    _title("early_bird", "Early Bird", "First in, last out", "sunrise", "#f59e0b", "epic", StatKind.SPECIAL, 0, "Special title: early adopter"),
    _title("night_owl", "Night Owl", "The night is young", "owl", "#6366f1", "rare", StatKind.SPECIAL, 0, "Special title: night streamer"),
)

_TITLES_BY_ID = {title.id: title for title in TITLES}


def get_title(title_id: str) -> TitleDefinition | None:
    return _TITLES_BY_ID.get(title_id)


def title_requirement_met(title: TitleDefinition, stats: UserStats) -> bool:
    """Special titles never qualify through requirements."""

    if title.is_special:
        return False
    return evaluate_condition(AchievementCondition(title.requirement.kind, title.requirement.value), stats)


def qualifying_titles(stats: UserStats) -> list[str]:
    """Return ids of every non-special title ``stats`` qualifies for, in catalog order."""

    return [title.id for title in TITLES if title_requirement_met(title, stats)]


def highest_title(unlocked_title_ids: Iterable[str]) -> TitleDefinition | None:
    """Return the unlocked title with the highest rarity, first in catalog order on ties."""

    unlocked = set(unlocked_title_ids)
    best: TitleDefinition | None = None
    for title in TITLES:
        if title.id not in unlocked:
            continue
        if best is None or TITLE_RARITY_ORDER[title.rarity] > TITLE_RARITY_ORDER[best.rarity]:
            best = title
    return best


__all__ = [
    "ACHIEVEMENTS",
    "AchievementCondition",
    "AchievementDefinition",
    "StatKind",
    "TITLES",
    "TITLE_RARITY_ORDER",
    "TitleDefinition",
    "TitleRequirement",
    "UserStats",
    "evaluate_condition",
    "get_achievement",
    "get_title",
    "highest_title",
    "qualifying_titles",
    "stat_value",
    "title_requirement_met",
]
