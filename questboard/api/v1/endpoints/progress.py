"""Endpoints for the authenticated user's XP, level and coins."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from questboard.api.deps import get_current_user, get_ledger
from questboard.db.models.user import User
from questboard.schemas import (
    CoinSpendRequest,
    CoinSpendResponse,
    CoinsRequest,
    CoinsResponse,
    LevelProgressRead,
    ProgressRead,
    XPGrantRequest,
    XPGrantResponse,
)
from questboard.services.ledger import ProgressLedger, ProgressSnapshot


router = APIRouter(prefix="/progress", tags=["progress"])


def _level_progress(snapshot: ProgressSnapshot) -> LevelProgressRead:
    level_progress = snapshot.level_progress
    return LevelProgressRead(
        level=snapshot.level,
        xp=snapshot.xp,
        current=level_progress.current,
        needed=level_progress.needed,
        percentage=level_progress.percentage,
    )


def build_progress_read(snapshot: ProgressSnapshot) -> ProgressRead:
    return ProgressRead(
        user_id=snapshot.user_id,
        xp=snapshot.xp,
        level=snapshot.level,
        coins=snapshot.coins,
        weekly_xp=snapshot.weekly_xp,
        monthly_xp=snapshot.monthly_xp,
        achievements=snapshot.achievements,
        unlocked_titles=snapshot.unlocked_titles,
        active_title=snapshot.active_title,
        is_premium=snapshot.is_premium,
        premium_expires_at=snapshot.premium_expires_at,
        level_progress=_level_progress(snapshot),
    )


@router.get("/me", response_model=ProgressRead)
def read_my_progress(
    *,
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> ProgressRead:
    """Return the caller's progress record, creating it on first access."""

    return build_progress_read(ledger.snapshot(current_user.id))


@router.get("/me/level", response_model=LevelProgressRead)
def read_my_level(
    *,
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> LevelProgressRead:
    return _level_progress(ledger.snapshot(current_user.id))


@router.post("/xp", response_model=XPGrantResponse)
def grant_xp(
    payload: XPGrantRequest,
    *,
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> XPGrantResponse:
    """Grant XP earned outside the action pipeline, e.g. from the streaming platform."""

    grant = ledger.grant_xp(current_user.id, payload.amount)
    return XPGrantResponse(new_xp=grant.new_xp, new_level=grant.new_level, leveled_up=grant.leveled_up)


@router.post("/coins", response_model=CoinsResponse)
def add_coins(
    payload: CoinsRequest,
    *,
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> CoinsResponse:
    return CoinsResponse(coins=ledger.add_coins(current_user.id, payload.amount))


@router.post("/coins/spend", response_model=CoinSpendResponse)
def spend_coins(
    payload: CoinSpendRequest,
    *,
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> CoinSpendResponse:
    """Deduct coins; an uncovered spend reports ``insufficient_funds`` and changes nothing."""

    result = ledger.spend_coins(current_user.id, payload.amount)
    return CoinSpendResponse(success=result.success, new_balance=result.new_balance, reason=result.reason)
