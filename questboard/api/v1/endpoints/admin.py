"""Admin adjustments to user progress."""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from questboard.api.deps import get_db, require_admin
from questboard.api.v1.endpoints.progress import build_progress_read
from questboard.db.models.user import User
from questboard.schemas import ProgressRead
from questboard.schemas.admin import (
    BulkResetResponse,
    GrantTitleRequest,
    GrantTitleResponse,
    SetCoinsRequest,
    SetLevelRequest,
    SetPremiumRequest,
    SetStreakRequest,
    SetXPRequest,
    StreakRead,
)
from questboard.services.ledger import ProgressLedger
from questboard.services.streaks import StreakService
from questboard.utils.exceptions import NotFoundError

router = APIRouter(prefix="/admin", tags=["admin"])


def _target_user(user_id: uuid.UUID, db: Session) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", {"user_id": str(user_id)})
    return user


@router.post("/users/{user_id}/reset", response_model=ProgressRead)
def reset_user_progress(
    user_id: uuid.UUID,
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ProgressRead:
    """Zero XP, coins and unlocks for a user; premium state is kept."""

    user = _target_user(user_id, db)
    snapshot = ProgressLedger(db).reset_progress(user.id)
    logger.warning("Admin reset user progress", admin_id=str(admin.id), user_id=str(user.id))
    return build_progress_read(snapshot)


@router.put("/users/{user_id}/xp", response_model=ProgressRead)
def set_user_xp(
    user_id: uuid.UUID,
    payload: SetXPRequest,
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ProgressRead:
    user = _target_user(user_id, db)
    return build_progress_read(ProgressLedger(db).set_xp(user.id, payload.xp))


@router.put("/users/{user_id}/level", response_model=ProgressRead)
def set_user_level(
    user_id: uuid.UUID,
    payload: SetLevelRequest,
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ProgressRead:
    """Set the level; XP becomes the minimum cumulative XP for that level."""

    user = _target_user(user_id, db)
    return build_progress_read(ProgressLedger(db).set_level(user.id, payload.level))


@router.put("/users/{user_id}/coins", response_model=ProgressRead)
def set_user_coins(
    user_id: uuid.UUID,
    payload: SetCoinsRequest,
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ProgressRead:
    user = _target_user(user_id, db)
    return build_progress_read(ProgressLedger(db).set_coins(user.id, payload.coins))


@router.put("/users/{user_id}/premium", response_model=ProgressRead)
def set_user_premium(
    user_id: uuid.UUID,
    payload: SetPremiumRequest,
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> ProgressRead:
    user = _target_user(user_id, db)
    snapshot = ProgressLedger(db).set_premium(user.id, payload.is_premium, payload.expires_at)
    return build_progress_read(snapshot)


@router.post("/users/{user_id}/titles", response_model=GrantTitleResponse)
def grant_user_title(
    user_id: uuid.UUID,
    payload: GrantTitleRequest,
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> GrantTitleResponse:
    """Grant any catalog title, including special ones."""

    user = _target_user(user_id, db)
    ledger = ProgressLedger(db)
    granted = ledger.unlock_title(user.id, payload.title_id)
    return GrantTitleResponse(granted=granted, unlocked_titles=ledger.snapshot(user.id).unlocked_titles)


@router.put("/users/{user_id}/streak", response_model=StreakRead)
def set_user_streak(
    user_id: uuid.UUID,
    payload: SetStreakRequest,
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> StreakRead:
    user = _target_user(user_id, db)
    streak = StreakService(db).update_streak(user.id, payload.current_streak, payload.longest_streak)
    return StreakRead(current_streak=streak.current_streak, longest_streak=streak.longest_streak)


@router.post("/progress/reset-weekly", response_model=BulkResetResponse)
def reset_weekly_xp(
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> BulkResetResponse:
    return BulkResetResponse(rows_updated=ProgressLedger(db).reset_weekly_xp_for_all())


@router.post("/progress/reset-monthly", response_model=BulkResetResponse)
def reset_monthly_xp(
    *,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> BulkResetResponse:
    return BulkResetResponse(rows_updated=ProgressLedger(db).reset_monthly_xp_for_all())
