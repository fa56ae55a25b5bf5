"""Reward pipeline for completed tasks, goals and created events."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from uuid import UUID

from loguru import logger
from sqlalchemy.orm import Session

from questboard.db.models.challenge import RewardLedgerEntry
from questboard.services.achievement import AchievementEvaluator
from questboard.services.activity import ActivityRecorder
from questboard.services.challenges import ChallengeService
from questboard.services.ledger import ProgressLedger
from questboard.services.streaks import StreakService
from questboard.services.titles import TitleService
from questboard.utils.clock import local_now
from questboard.utils.exceptions import ValidationError

SourceType = Literal["task", "goal", "event"]


@dataclass(frozen=True, slots=True)
class RewardRule:
    xp: int
    coins: int
    daily_limit: int
    counter: str
    challenge_type: str


REWARD_RULES: dict[str, RewardRule] = {
    "task": RewardRule(xp=10, coins=2, daily_limit=20, counter="tasks_completed", challenge_type="tasks"),
    "goal": RewardRule(xp=100, coins=20, daily_limit=5, counter="goals_completed", challenge_type="goals"),
    "event": RewardRule(xp=5, coins=1, daily_limit=15, counter="events_created", challenge_type="events"),
}


@dataclass(frozen=True, slots=True)
class ActionReward:
    awarded: bool
    reason: Literal["already_rewarded", "daily_limit_reached"] | None = None
    xp: int = 0
    coins: int = 0
    leveled_up: bool = False
    new_level: int | None = None
    achievements: list[str] = field(default_factory=list)
    titles: list[str] = field(default_factory=list)
    completed_challenges: list[str] = field(default_factory=list)


def reward_ledger_id(user_id: UUID, source_type: str, source_id: str) -> str:
    return f"{user_id}:{source_type}:{source_id}"


class RewardService:
    """Turn one user action into XP, coins, streak, challenge and unlock updates."""

    def __init__(self, db: Session, ledger: ProgressLedger | None = None):
        self.db = db
        self.ledger = ledger or ProgressLedger(db)
        self.activity = ActivityRecorder(db, self.ledger)
        self.streaks = StreakService(db, self.ledger)
        self.challenges = ChallengeService(db, self.ledger)
        self.achievements = AchievementEvaluator(db, self.ledger)
        self.titles = TitleService(db, self.ledger)

    def apply_action_reward(
        self,
        user_id: UUID | str,
        source_type: SourceType,
        source_id: str,
        now: datetime | None = None,
    ) -> ActionReward:
        """
        Reward one action at most once per ``source_id``.

        Everything the action triggers is written in a single commit. A retry
        after success returns ``already_rewarded``; an action beyond the daily
        cap for its type returns ``daily_limit_reached``. Neither changes state.
        """
        rule = REWARD_RULES.get(source_type)
        if rule is None:
            raise ValidationError("Unknown reward source type", {"source_type": source_type})
        source_id = (source_id or "").strip()
        if not source_id:
            raise ValidationError("source_id is required")

        now = now or local_now()
        today = now.date()

        with self.ledger.transaction(user_id) as progress:
            uid = progress.user_id
            starting_level = progress.level
            ledger_id = reward_ledger_id(uid, source_type, source_id)
            if self.db.get(RewardLedgerEntry, ledger_id) is not None:
                return ActionReward(awarded=False, reason="already_rewarded")

            day = self.activity.get_activity_for_day(uid, today)
            if day is not None and (getattr(day, rule.counter) or 0) >= rule.daily_limit:
                logger.info(
                    "Daily reward limit reached",
                    user_id=str(uid),
                    source_type=source_type,
                    limit=rule.daily_limit,
                )
                return ActionReward(awarded=False, reason="daily_limit_reached")
            first_action_today = day is None or day.total_actions == 0

            self.db.add(
                RewardLedgerEntry(
                    id=ledger_id,
                    user_id=uid,
                    source_type=source_type,
                    source_id=source_id,
                    xp=rule.xp,
                    coins=rule.coins,
                )
            )
            self.db.flush()

            self.activity.record_daily_activity(uid, source_type, rule.xp, rule.coins, day=today)
            self.ledger.grant_xp(uid, rule.xp)
            self.ledger.add_coins(uid, rule.coins)

            checkin = self.streaks.register_checkin(uid, today)
            completed = self.challenges.record_progress(uid, rule.challenge_type, 1, now)
            if first_action_today:
                completed += self.challenges.record_progress(uid, "login", 1, now)
            if checkin.growth:
                completed += self.challenges.record_progress(uid, "streak", checkin.growth, now)

            unlocked_achievements = self.achievements.evaluate_for_user(uid, today)
            unlocked_titles = self.titles.sync_unlocked_titles(uid)

            result = ActionReward(
                awarded=True,
                xp=rule.xp,
                coins=rule.coins,
                leveled_up=progress.level > starting_level,
                new_level=progress.level,
                achievements=unlocked_achievements,
                titles=unlocked_titles,
                completed_challenges=[challenge.id for challenge in completed],
            )

        logger.info(
            "Action rewarded",
            user_id=str(uid),
            source_type=source_type,
            source_id=source_id,
            xp=rule.xp,
            coins=rule.coins,
            level=result.new_level,
        )
        return result


__all__ = ["ActionReward", "REWARD_RULES", "RewardRule", "RewardService", "reward_ledger_id"]
