"""Celery tasks for achievement processing."""
from __future__ import annotations

from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from questboard.celery_app import celery_app
from questboard.db.models.user import User
from questboard.db.session import SessionLocal
from questboard.services.achievement import AchievementEvaluator
from questboard.services.ledger import ProgressLedger
from questboard.services.titles import TitleService


@celery_app.task(name="questboard.tasks.achievements.check_user_achievements")
def check_user_achievements(user_id: str) -> dict[str, int | list[str] | str]:
    """Check and unlock achievements and titles for a specific user."""

    db = SessionLocal()
    try:
        try:
            user_uuid = UUID(user_id)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid user ID: {user_id}") from exc

        user = db.get(User, user_uuid)
        if not user:
            raise ValueError(f"User {user_id} not found")

        ledger = ProgressLedger(db)
        newly_unlocked = AchievementEvaluator(db, ledger).evaluate_for_user(user.id)
        new_titles = TitleService(db, ledger).sync_unlocked_titles(user.id)

        logger.info(
            "User achievement check completed",
            user_id=user_id,
            unlocked_count=len(newly_unlocked),
            titles_unlocked=len(new_titles),
        )

        return {
            "user_id": user_id,
            "newly_unlocked": len(newly_unlocked),
            "achievement_ids": newly_unlocked,
            "title_ids": new_titles,
        }

    except Exception as exc:
        logger.error("Achievement check failed", user_id=user_id, error=str(exc))
        raise
    finally:
        db.close()


@celery_app.task(name="questboard.tasks.achievements.check_all_achievements")
def check_all_achievements() -> dict[str, int]:
    """Check achievements for all active users (periodic task)."""

    db = SessionLocal()
    try:
        user_ids = db.scalars(select(User.id).where(User.is_active.is_(True))).all()

        total_checked = 0
        total_unlocked = 0
        failures = 0
        ledger = ProgressLedger(db)

        for user_id in user_ids:
            try:
                newly_unlocked = AchievementEvaluator(db, ledger).evaluate_for_user(user_id)
                TitleService(db, ledger).sync_unlocked_titles(user_id)
            except SQLAlchemyError as exc:
                # The ledger rolled back this user's transaction; move on to the next user.
                failures += 1
                logger.error(
                    "Achievement check failed for user",
                    user_id=str(user_id),
                    error=str(exc),
                )
                continue

            total_checked += 1
            total_unlocked += len(newly_unlocked)
            if total_checked % 100 == 0:
                logger.info(
                    "Achievement check progress",
                    checked=total_checked,
                    total=len(user_ids),
                )

        logger.info(
            "Bulk achievement check completed",
            users_checked=total_checked,
            total_unlocked=total_unlocked,
            failures=failures,
        )

        return {
            "users_checked": total_checked,
            "total_unlocked": total_unlocked,
            "failures": failures,
        }

    except Exception as exc:
        logger.error("Bulk achievement check failed", error=str(exc))
        raise
    finally:
        db.close()
