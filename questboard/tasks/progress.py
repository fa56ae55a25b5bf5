"""Scheduled resets of the weekly and monthly XP counters."""
from __future__ import annotations

from loguru import logger

from questboard.celery_app import celery_app
from questboard.db.session import SessionLocal
from questboard.services.ledger import ProgressLedger


@celery_app.task(name="questboard.tasks.progress.reset_weekly_xp")
def reset_weekly_xp() -> dict[str, int]:
    """Zero ``weekly_xp`` for every user."""

    db = SessionLocal()
    try:
        rows = ProgressLedger(db).reset_weekly_xp_for_all()
        logger.info("Weekly XP reset completed", rows_updated=rows)
        return {"rows_updated": rows}
    except Exception as exc:
        logger.error("Weekly XP reset failed", error=str(exc))
        raise
    finally:
        db.close()


@celery_app.task(name="questboard.tasks.progress.reset_monthly_xp")
def reset_monthly_xp() -> dict[str, int]:
    """Zero ``monthly_xp`` for every user."""

    db = SessionLocal()
    try:
        rows = ProgressLedger(db).reset_monthly_xp_for_all()
        logger.info("Monthly XP reset completed", rows_updated=rows)
        return {"rows_updated": rows}
    except Exception as exc:
        logger.error("Monthly XP reset failed", error=str(exc))
        raise
    finally:
        db.close()
