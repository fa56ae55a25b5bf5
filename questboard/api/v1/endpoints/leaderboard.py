"""Weekly, monthly and all-time XP leaderboards."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from questboard.api.deps import get_current_user, get_ledger
from questboard.db.models.user import User
from questboard.schemas.leaderboard import LeaderboardEntryRead, LeaderboardPeriodParam, LeaderboardRankRead
from questboard.services.ledger import MAX_LEADERBOARD_SIZE, ProgressLedger

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=list[LeaderboardEntryRead])
def read_leaderboard(
    *,
    period: LeaderboardPeriodParam = Query("weekly"),
    limit: int = Query(100, ge=1, le=MAX_LEADERBOARD_SIZE),
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> list[LeaderboardEntryRead]:
    entries = ledger.leaderboard(period, limit)
    return [LeaderboardEntryRead.model_validate(entry) for entry in entries]


@router.get("/me", response_model=LeaderboardRankRead)
def read_my_rank(
    *,
    period: LeaderboardPeriodParam = Query("weekly"),
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> LeaderboardRankRead:
    """Return the caller's position; ``rank`` is ``null`` before any progress exists."""

    return LeaderboardRankRead(period=period, rank=ledger.rank(current_user.id, period))
