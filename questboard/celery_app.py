"""Celery application instance and configuration."""
from __future__ import annotations

from celery import Celery
from celery.schedules import crontab

from questboard.config import settings


def _resolve_broker_url() -> str:
    if settings.CELERY_BROKER_URL is not None:
        return str(settings.CELERY_BROKER_URL)
    return str(settings.REDIS_URL)


def _resolve_result_backend() -> str:
    if settings.CELERY_RESULT_BACKEND is not None:
        return str(settings.CELERY_RESULT_BACKEND)
    return str(settings.REDIS_URL)


def crontab_from_expression(expression: str) -> crontab:
    """Build a ``crontab`` from a five-field ``minute hour day month weekday`` string."""

    minute, hour, day_of_month, month_of_year, day_of_week = expression.split()
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
    )


celery_app = Celery(
    "questboard",
    broker=_resolve_broker_url(),
    backend=_resolve_result_backend(),
    include=[
        "questboard.tasks.progress",
        "questboard.tasks.achievements",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,
    task_soft_time_limit=25 * 60,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)

celery_app.conf.beat_schedule = {
    "reset-weekly-xp": {
        "task": "questboard.tasks.progress.reset_weekly_xp",
        "schedule": crontab_from_expression(settings.CRON_WEEKLY_RESET),
    },
    "reset-monthly-xp": {
        "task": "questboard.tasks.progress.reset_monthly_xp",
        "schedule": crontab_from_expression(settings.CRON_MONTHLY_RESET),
    },
    "check-all-achievements": {
        "task": "questboard.tasks.achievements.check_all_achievements",
        "schedule": crontab(hour=3, minute=0),
    },
}

__all__ = ["celery_app", "crontab_from_expression"]
