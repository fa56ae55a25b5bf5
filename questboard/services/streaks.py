"""Daily check-in streak tracking."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from questboard.db.models.streak import Streak
from questboard.services.ledger import ProgressLedger, as_user_id
from questboard.utils.clock import local_today
from questboard.utils.exceptions import ValidationError

STREAK_MILESTONES = (7, 30, 60, 100, 365)


@dataclass(frozen=True, slots=True)
class StreakCheckin:
    current_streak: int
    longest_streak: int
    is_new_day: bool
    milestone_reached: int | None = None
    previous_streak: int = 0

    @property
    def growth(self) -> int:
        return max(0, self.current_streak - self.previous_streak)


class StreakService:
    """Maintain consecutive-day streaks consumed as achievement and title stats."""

    def __init__(self, db: Session, ledger: ProgressLedger | None = None):
        self.db = db
        self.ledger = ledger or ProgressLedger(db)

    def get_streak(self, user_id: UUID | str) -> Streak | None:
        return self.db.execute(
            select(Streak).where(Streak.user_id == as_user_id(user_id))
        ).scalar_one_or_none()

    def _get_or_create(self, user_id: UUID) -> Streak:
        streak = self.get_streak(user_id)
        if streak is None:
            streak = Streak(user_id=user_id, current_streak=0, longest_streak=0)
            self.db.add(streak)
            self.db.flush()
        return streak

    def register_checkin(self, user_id: UUID | str, day: date | None = None) -> StreakCheckin:
        """
        Record activity on ``day`` (default: today).

        A second check-in on the same day changes nothing; the day after the
        last check-in extends the streak; any longer gap restarts it at 1.
        """
        day = day or local_today()

        with self.ledger.transaction(user_id) as progress:
            streak = self._get_or_create(progress.user_id)
            last = streak.last_checkin_date

            if last is not None and last >= day:
                return StreakCheckin(
                    current_streak=streak.current_streak,
                    longest_streak=streak.longest_streak,
                    is_new_day=False,
                    previous_streak=streak.current_streak,
                )

            previous = streak.current_streak or 0
            if last is not None and (day - last).days == 1:
                new_streak = previous + 1
            else:
                new_streak = 1

            streak.current_streak = new_streak
            streak.last_checkin_date = day
            if new_streak > (streak.longest_streak or 0):
                streak.longest_streak = new_streak

            milestone = new_streak if new_streak in STREAK_MILESTONES else None
            result = StreakCheckin(
                current_streak=new_streak,
                longest_streak=streak.longest_streak,
                is_new_day=True,
                milestone_reached=milestone,
                previous_streak=previous,
            )

        if milestone:
            logger.info("Streak milestone reached", user_id=str(progress.user_id), streak=milestone)
        return result

    def update_streak(self, user_id: UUID | str, current: int, longest: int | None = None) -> Streak:
        """Overwrite the streak counters, keeping ``longest >= current``."""

        if current < 0 or (longest is not None and longest < 0):
            raise ValidationError(
                "Streak values must be non-negative", {"current": current, "longest": longest}
            )

        with self.ledger.transaction(user_id) as progress:
            streak = self._get_or_create(progress.user_id)
            streak.current_streak = current
            streak.longest_streak = max(current, longest if longest is not None else streak.longest_streak or 0)
            return streak


__all__ = ["STREAK_MILESTONES", "StreakCheckin", "StreakService"]
