"""Achievement evaluation against user statistics."""
from __future__ import annotations

from datetime import date
from uuid import UUID

from loguru import logger
from sqlalchemy.orm import Session

from questboard.core.catalog import ACHIEVEMENTS, UserStats, evaluate_condition
from questboard.services.activity import ActivityRecorder
from questboard.services.ledger import ProgressLedger


class AchievementEvaluator:
    """Unlock every catalog achievement whose condition ``stats`` satisfies."""

    def __init__(self, db: Session, ledger: ProgressLedger | None = None):
        self.db = db
        self.ledger = ledger or ProgressLedger(db)

    def check_achievements(self, user_id: UUID | str, stats: UserStats) -> list[str]:
        """
        Evaluate the catalog in declared order and unlock what qualifies.

        Returns the ids unlocked by this call. Calling it again with the same
        stats returns an empty list and grants nothing.
        """
        unlocked: list[str] = []
        with self.ledger.transaction(user_id) as progress:
            for achievement in ACHIEVEMENTS:
                if achievement.id in (progress.achievements or []):
                    continue
                if not evaluate_condition(achievement.condition, stats):
                    continue
                if self.ledger.unlock_achievement(progress.user_id, achievement.id):
                    unlocked.append(achievement.id)

        if unlocked:
            logger.info(
                "Achievements evaluated",
                user_id=str(progress.user_id),
                unlocked=unlocked,
            )
        return unlocked

    def evaluate_for_user(self, user_id: UUID | str, today: date | None = None) -> list[str]:
        """Check achievements against stats from the year of activity ending ``today``."""

        with self.ledger.transaction(user_id) as progress:
            stats = ActivityRecorder(self.db, self.ledger).compute_user_stats(progress.user_id, today)
            return self.check_achievements(progress.user_id, stats)


__all__ = ["AchievementEvaluator"]
