"""Persisted weekly challenge sets, progress and reward claims."""
from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from questboard.core.challenges import (
    CHALLENGE_TYPES,
    Challenge,
    RewardTotals,
    WeekBounds,
    completed_count,
    earned_rewards,
    generate_weekly_challenges,
    time_until_week_end,
    total_possible_rewards,
    update_challenge_progress,
    week_bounds,
)
from questboard.db.models.challenge import RewardLedgerEntry, UserWeeklyChallenges
from questboard.services.achievement import AchievementEvaluator
from questboard.services.activity import ActivityRecorder
from questboard.services.ledger import ProgressLedger
from questboard.services.titles import TitleService
from questboard.utils.clock import local_now
from questboard.utils.exceptions import ValidationError

ClaimFailure = Literal["not_found", "not_completed", "already_claimed"]


@dataclass(frozen=True, slots=True)
class WeeklyChallengeSet:
    week_key: str
    start_date: datetime
    end_date: datetime
    time_remaining: str
    challenges: list[Challenge] = field(default_factory=list)

    @property
    def completed_count(self) -> int:
        return completed_count(self.challenges)

    @property
    def total_rewards(self) -> RewardTotals:
        return total_possible_rewards(self.challenges)

    @property
    def earned_rewards(self) -> RewardTotals:
        return earned_rewards(self.challenges)


@dataclass(frozen=True, slots=True)
class ChallengeClaim:
    success: bool
    reason: ClaimFailure | None = None
    challenge: Challenge | None = None
    xp: int = 0
    coins: int = 0
    title_unlocked: str | None = None
    leveled_up: bool = False
    achievements: list[str] = field(default_factory=list)
    titles: list[str] = field(default_factory=list)


def challenge_ledger_id(user_id: UUID, week_key: str, challenge_id: str) -> str:
    return f"{user_id}:challenge:{week_key}:{challenge_id}"


class ChallengeService:
    """Generate once per week, track progress and pay out rewards exactly once."""

    def __init__(self, db: Session, ledger: ProgressLedger | None = None):
        self.db = db
        self.ledger = ledger or ProgressLedger(db)

    # ------------------------------------------------------------------
    # Weekly sets
    # ------------------------------------------------------------------
    def _load_row(self, user_id: UUID, week_key: str) -> UserWeeklyChallenges | None:
        return self.db.execute(
            select(UserWeeklyChallenges).where(
                UserWeeklyChallenges.user_id == user_id,
                UserWeeklyChallenges.week_key == week_key,
            )
        ).scalar_one_or_none()

    def _get_or_generate_row(self, user_id: UUID, bounds: WeekBounds) -> UserWeeklyChallenges:
        """Return the persisted set for ``bounds``, generating it on first access.

        Must be called inside a ledger transaction for ``user_id``.
        """
        row = self._load_row(user_id, bounds.key)
        if row is not None:
            return row

        rng = random.Random(f"{user_id}:{bounds.key}")
        challenges = generate_weekly_challenges(bounds.start, rng)
        row = UserWeeklyChallenges(
            id=f"{user_id}_{bounds.key}",
            user_id=user_id,
            week_key=bounds.key,
            start_date=bounds.start.date(),
            end_date=bounds.end.date(),
            challenges=[challenge.to_dict() for challenge in challenges],
        )
        self.db.add(row)
        self.db.flush()
        logger.info(
            "Generated weekly challenges",
            user_id=str(user_id),
            week_key=bounds.key,
            challenge_ids=[challenge.id for challenge in challenges],
        )
        return row

    @staticmethod
    def _challenges(row: UserWeeklyChallenges) -> list[Challenge]:
        return [Challenge.from_dict(raw) for raw in row.challenges or []]

    @staticmethod
    def _store(row: UserWeeklyChallenges, challenges: list[Challenge]) -> None:
        # JSON columns only detect reassignment.
        row.challenges = [challenge.to_dict() for challenge in challenges]

    def get_weekly_challenges(self, user_id: UUID | str, now: datetime | None = None) -> WeeklyChallengeSet:
        now = now or local_now()
        bounds = week_bounds(now)
        with self.ledger.transaction(user_id) as progress:
            row = self._get_or_generate_row(progress.user_id, bounds)
            challenges = self._challenges(row)
        return WeeklyChallengeSet(
            week_key=bounds.key,
            start_date=bounds.start,
            end_date=bounds.end,
            time_remaining=time_until_week_end(now),
            challenges=challenges,
        )

    def record_progress(
        self, user_id: UUID | str, type: str, increment: int = 1, now: datetime | None = None
    ) -> list[Challenge]:
        """Advance this week's open challenges of ``type``; return the ones it completed."""

        if type not in CHALLENGE_TYPES:
            raise ValidationError("Unknown challenge type", {"type": type})
        if increment <= 0:
            return []

        bounds = week_bounds(now or local_now())
        with self.ledger.transaction(user_id) as progress:
            row = self._get_or_generate_row(progress.user_id, bounds)
            before = self._challenges(row)
            after = update_challenge_progress(before, type, increment)
            if after != before:
                self._store(row, after)

        newly_completed = [
            updated for previous, updated in zip(before, after) if updated.completed and not previous.completed
        ]
        for challenge in newly_completed:
            logger.info(
                "Challenge completed",
                user_id=str(progress.user_id),
                challenge_id=challenge.id,
                week_key=bounds.key,
            )
        return newly_completed

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------
    def claim_reward(
        self, user_id: UUID | str, challenge_id: str, now: datetime | None = None
    ) -> ChallengeClaim:
        """
        Pay out a completed challenge from the current week.

        XP, coins, the optional title, the payout ledger entry, today's
        activity totals, achievements and titles the new XP qualifies for and
        ``claimed_at`` are written in one commit.
        """
        now = now or local_now()
        bounds = week_bounds(now)

        with self.ledger.transaction(user_id) as progress:
            row = self._get_or_generate_row(progress.user_id, bounds)
            challenges = self._challenges(row)
            index = next((i for i, item in enumerate(challenges) if item.id == challenge_id), None)
            if index is None:
                return ChallengeClaim(success=False, reason="not_found")

            challenge = challenges[index]
            if challenge.claimed_at is not None:
                return ChallengeClaim(success=False, reason="already_claimed", challenge=challenge)
            if not challenge.completed:
                return ChallengeClaim(success=False, reason="not_completed", challenge=challenge)

            ledger_id = challenge_ledger_id(progress.user_id, bounds.key, challenge_id)
            if self.db.get(RewardLedgerEntry, ledger_id) is not None:
                return ChallengeClaim(success=False, reason="already_claimed", challenge=challenge)

            starting_level = progress.level
            reward = challenge.reward
            self.db.add(
                RewardLedgerEntry(
                    id=ledger_id,
                    user_id=progress.user_id,
                    source_type="challenge",
                    source_id=challenge_id,
                    xp=reward.xp,
                    coins=reward.coins,
                )
            )
            self.db.flush()

            self.ledger.grant_xp(progress.user_id, reward.xp)
            self.ledger.add_coins(progress.user_id, reward.coins)
            title_unlocked = None
            if reward.title and self.ledger.unlock_title(progress.user_id, reward.title):
                title_unlocked = reward.title
            ActivityRecorder(self.db, self.ledger).add_daily_rewards(
                progress.user_id, reward.xp, reward.coins, day=now.date()
            )
            unlocked_achievements = AchievementEvaluator(self.db, self.ledger).evaluate_for_user(
                progress.user_id, now.date()
            )
            unlocked_titles = TitleService(self.db, self.ledger).sync_unlocked_titles(progress.user_id)
            leveled_up = progress.level > starting_level

            claimed = replace(challenge, claimed_at=now)
            challenges[index] = claimed
            self._store(row, challenges)

        logger.info(
            "Challenge reward claimed",
            user_id=str(progress.user_id),
            challenge_id=challenge_id,
            xp=reward.xp,
            coins=reward.coins,
            title=title_unlocked,
        )
        return ChallengeClaim(
            success=True,
            challenge=claimed,
            xp=reward.xp,
            coins=reward.coins,
            title_unlocked=title_unlocked,
            leveled_up=leveled_up,
            achievements=unlocked_achievements,
            titles=unlocked_titles,
        )


__all__ = [
    "ChallengeClaim",
    "ChallengeService",
    "WeeklyChallengeSet",
    "challenge_ledger_id",
]
