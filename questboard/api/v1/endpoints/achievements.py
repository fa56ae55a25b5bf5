"""Achievement catalog and unlock endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from questboard.api.deps import get_current_user, get_db
from questboard.core.catalog import ACHIEVEMENTS, AchievementDefinition, get_achievement
from questboard.db.models.user import User
from questboard.schemas.achievement import (
    AchievementCheckResponse,
    AchievementRead,
    AchievementStatusRead,
)
from questboard.services.achievement import AchievementEvaluator
from questboard.services.ledger import ProgressLedger

router = APIRouter(prefix="/achievements", tags=["achievements"])


def _to_read(achievement: AchievementDefinition) -> dict:
    return {
        "id": achievement.id,
        "name": achievement.name,
        "description": achievement.description,
        "icon": achievement.icon,
        "rarity": achievement.rarity,
        "xp_reward": achievement.xp_reward,
        "condition": achievement.condition.kind.value,
        "threshold": achievement.condition.threshold,
    }


@router.get("", response_model=list[AchievementRead])
def list_achievements(
    *,
    _: User = Depends(get_current_user),
) -> list[AchievementRead]:
    """Return all achievement definitions in catalog order."""

    return [AchievementRead(**_to_read(achievement)) for achievement in ACHIEVEMENTS]


@router.get("/my", response_model=list[AchievementStatusRead])
def get_my_achievements(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[AchievementStatusRead]:
    """Return every achievement with the caller's unlock state."""

    unlocked = set(ProgressLedger(db).snapshot(current_user.id).achievements)
    return [
        AchievementStatusRead(**_to_read(achievement), unlocked=achievement.id in unlocked)
        for achievement in ACHIEVEMENTS
    ]


@router.post("/check", response_model=AchievementCheckResponse)
def check_achievements(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AchievementCheckResponse:
    """Re-evaluate achievements against fresh statistics for the caller."""

    ledger = ProgressLedger(db)
    newly_unlocked = AchievementEvaluator(db, ledger).evaluate_for_user(current_user.id)
    snapshot = ledger.snapshot(current_user.id)
    return AchievementCheckResponse(
        newly_unlocked=[AchievementRead(**_to_read(get_achievement(item))) for item in newly_unlocked],
        total_unlocked=len(snapshot.achievements),
    )
