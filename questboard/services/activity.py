"""Daily activity aggregation, calendar series and activity statistics."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Literal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from questboard.core.catalog import UserStats
from questboard.db.models.activity import DailyActivity
from questboard.services.ledger import ProgressLedger, as_user_id
from questboard.services.streaks import StreakService
from questboard.utils.cache import build_cache_key, cache_backend
from questboard.utils.clock import local_today
from questboard.utils.exceptions import ValidationError

ActivityType = Literal["task", "goal", "event"]

CALENDAR_CACHE_NAMESPACE = "activity_calendar"
DEFAULT_CALENDAR_DAYS = 84
STATS_WINDOW_DAYS = 365
ACHIEVEMENT_WINDOW_DAYS = 364

_COUNT_COLUMNS: dict[str, str] = {
    "task": "tasks_completed",
    "goal": "goals_completed",
    "event": "events_created",
}


@dataclass(frozen=True, slots=True)
class CalendarDay:
    date: date
    count: int


@dataclass(frozen=True, slots=True)
class ActivityStats:
    total_days_active: int = 0
    total_tasks: int = 0
    total_goals: int = 0
    total_events: int = 0
    total_xp: int = 0
    total_coins: int = 0
    average_per_day: float = 0.0


def format_activity_for_calendar(
    activities: Iterable[DailyActivity], days: int = DEFAULT_CALENDAR_DAYS, today: date | None = None
) -> list[CalendarDay]:
    """Return a dense oldest-to-newest series of ``days`` entries ending ``today``."""

    today = today or local_today()
    counts = {activity.date: activity.total_actions for activity in activities}
    return [
        CalendarDay(date=day, count=counts.get(day, 0))
        for day in (today - timedelta(days=offset) for offset in range(days - 1, -1, -1))
    ]


class ActivityRecorder:
    """Maintain one ``daily_activity`` row per user and day."""

    def __init__(self, db: Session, ledger: ProgressLedger | None = None):
        self.db = db
        self.ledger = ledger or ProgressLedger(db)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _get_or_create_day(self, user_id: UUID, day: date) -> DailyActivity:
        activity = self.db.execute(
            select(DailyActivity).where(DailyActivity.user_id == user_id, DailyActivity.date == day)
        ).scalar_one_or_none()
        if activity is None:
            activity = DailyActivity(
                user_id=user_id,
                date=day,
                tasks_completed=0,
                goals_completed=0,
                events_created=0,
                xp_earned=0,
                coins_earned=0,
            )
            self.db.add(activity)
            self.db.flush()
        return activity

    def record_daily_activity(
        self,
        user_id: UUID | str,
        type: ActivityType,
        xp_earned: int = 0,
        coins_earned: int = 0,
        day: date | None = None,
    ) -> DailyActivity:
        """Increment the ``type`` counter for ``day`` and add the earned rewards."""

        column = _COUNT_COLUMNS.get(type)
        if column is None:
            raise ValidationError("Unknown activity type", {"type": type})
        if xp_earned < 0 or coins_earned < 0:
            raise ValidationError(
                "Activity rewards must be non-negative",
                {"xp_earned": xp_earned, "coins_earned": coins_earned},
            )

        day = day or local_today()
        with self.ledger.transaction(user_id) as progress:
            activity = self._get_or_create_day(progress.user_id, day)
            setattr(activity, column, (getattr(activity, column) or 0) + 1)
            activity.xp_earned = (activity.xp_earned or 0) + xp_earned
            activity.coins_earned = (activity.coins_earned or 0) + coins_earned
        self._invalidate_calendar(progress.user_id)
        return activity

    def add_daily_rewards(
        self, user_id: UUID | str, xp: int = 0, coins: int = 0, day: date | None = None
    ) -> DailyActivity:
        """Add reward totals to ``day`` without touching the action counters."""

        xp, coins = max(0, int(xp)), max(0, int(coins))
        day = day or local_today()
        with self.ledger.transaction(user_id) as progress:
            activity = self._get_or_create_day(progress.user_id, day)
            activity.xp_earned = (activity.xp_earned or 0) + xp
            activity.coins_earned = (activity.coins_earned or 0) + coins
        self._invalidate_calendar(progress.user_id)
        return activity

    def _invalidate_calendar(self, user_id: UUID) -> None:
        cache_backend.invalidate(CALENDAR_CACHE_NAMESPACE, prefix=f"{user_id}:")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_activity_for_day(self, user_id: UUID | str, day: date | None = None) -> DailyActivity | None:
        return self.db.execute(
            select(DailyActivity).where(
                DailyActivity.user_id == as_user_id(user_id),
                DailyActivity.date == (day or local_today()),
            )
        ).scalar_one_or_none()

    def get_user_activity(self, user_id: UUID | str, days: int = DEFAULT_CALENDAR_DAYS) -> list[DailyActivity]:
        """Return the ``days`` most recent activity rows, newest first."""

        if days <= 0:
            return []
        return list(
            self.db.execute(
                select(DailyActivity)
                .where(DailyActivity.user_id == as_user_id(user_id))
                .order_by(DailyActivity.date.desc())
                .limit(days)
            ).scalars()
        )

    def get_calendar(
        self, user_id: UUID | str, days: int = DEFAULT_CALENDAR_DAYS, today: date | None = None
    ) -> list[CalendarDay]:
        user_id = as_user_id(user_id)
        today = today or local_today()
        key = f"{user_id}:{build_cache_key(days=days, today=today)}"
        cached = cache_backend.get(CALENDAR_CACHE_NAMESPACE, key)
        if cached is not None:
            return [CalendarDay(date=date.fromisoformat(item["date"]), count=item["count"]) for item in cached]

        calendar = format_activity_for_calendar(self.get_user_activity(user_id, days), days, today)
        cache_backend.set(
            CALENDAR_CACHE_NAMESPACE,
            key,
            [{"date": item.date, "count": item.count} for item in calendar],
            ttl_seconds=300,
        )
        return calendar

    def _activity_since(self, user_id: UUID, since: date) -> list[DailyActivity]:
        return list(
            self.db.execute(
                select(DailyActivity)
                .where(DailyActivity.user_id == user_id, DailyActivity.date >= since)
                .order_by(DailyActivity.date.desc())
            ).scalars()
        )

    def get_activity_stats(self, user_id: UUID | str, today: date | None = None) -> ActivityStats:
        """Totals over the activity rows dated within the last 365 days."""

        since = (today or local_today()) - timedelta(days=STATS_WINDOW_DAYS - 1)
        activities = self._activity_since(as_user_id(user_id), since)
        if not activities:
            return ActivityStats()

        total_tasks = sum(activity.tasks_completed or 0 for activity in activities)
        total_goals = sum(activity.goals_completed or 0 for activity in activities)
        total_events = sum(activity.events_created or 0 for activity in activities)
        return ActivityStats(
            total_days_active=len(activities),
            total_tasks=total_tasks,
            total_goals=total_goals,
            total_events=total_events,
            total_xp=sum(activity.xp_earned or 0 for activity in activities),
            total_coins=sum(activity.coins_earned or 0 for activity in activities),
            average_per_day=(total_tasks + total_goals + total_events) / len(activities),
        )

    def compute_user_stats(self, user_id: UUID | str, today: date | None = None) -> UserStats:
        """Achievement stats: activity dated within the last year, the streak and the progress record."""

        user_id = as_user_id(user_id)
        since = (today or local_today()) - timedelta(days=ACHIEVEMENT_WINDOW_DAYS)
        activities = self._activity_since(user_id, since)
        streak = StreakService(self.db, self.ledger).get_streak(user_id)
        progress = self.ledger.get(user_id)

        return UserStats(
            total_goals_completed=sum(activity.goals_completed or 0 for activity in activities),
            total_tasks_completed=sum(activity.tasks_completed or 0 for activity in activities),
            current_streak=streak.current_streak if streak else 0,
            longest_streak=streak.longest_streak if streak else 0,
            total_events_created=sum(activity.events_created or 0 for activity in activities),
            days_active=sum(1 for activity in activities if activity.total_actions > 0),
            level=progress.level if progress else 1,
            xp=progress.xp if progress else 0,
            achievements_count=len(progress.achievements or []) if progress else 0,
        )

    def compute_title_stats(self, user_id: UUID | str) -> UserStats:
        """Title stats: lifetime activity totals, the longest streak and the progress record."""

        user_id = as_user_id(user_id)
        tasks, goals, events = self.db.execute(
            select(
                func.coalesce(func.sum(DailyActivity.tasks_completed), 0),
                func.coalesce(func.sum(DailyActivity.goals_completed), 0),
                func.coalesce(func.sum(DailyActivity.events_created), 0),
            ).where(DailyActivity.user_id == user_id)
        ).one()
        streak = StreakService(self.db, self.ledger).get_streak(user_id)
        progress = self.ledger.get(user_id)

        return UserStats(
            total_goals_completed=int(goals),
            total_tasks_completed=int(tasks),
            current_streak=streak.current_streak if streak else 0,
            longest_streak=streak.longest_streak if streak else 0,
            total_events_created=int(events),
            level=progress.level if progress else 1,
            xp=progress.xp if progress else 0,
            achievements_count=len(progress.achievements or []) if progress else 0,
        )


__all__ = [
    "ActivityRecorder",
    "ActivityStats",
    "ActivityType",
    "CalendarDay",
    "format_activity_for_calendar",
]
