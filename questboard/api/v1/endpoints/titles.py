"""Title catalog and active title selection."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from questboard.api.deps import get_current_user, get_ledger
from questboard.core.catalog import TITLES, TitleDefinition
from questboard.db.models.user import User
from questboard.schemas.title import ActiveTitleRequest, ActiveTitleResponse, TitleRead
from questboard.services.ledger import ProgressLedger, ProgressSnapshot
from questboard.services.titles import TitleService

router = APIRouter(prefix="/titles", tags=["titles"])


def _to_read(title: TitleDefinition, snapshot: ProgressSnapshot) -> TitleRead:
    return TitleRead(
        id=title.id,
        name=title.name,
        description=title.description,
        icon=title.icon,
        color=title.color,
        rarity=title.rarity,
        requirement_type=title.requirement.kind.value,
        requirement_value=title.requirement.value,
        requirement=title.requirement.description,
        unlocked=title.id in snapshot.unlocked_titles,
        active=title.id == snapshot.active_title,
    )


@router.get("", response_model=list[TitleRead])
def list_titles(
    *,
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> list[TitleRead]:
    """Return the title catalog with the caller's unlocked and active flags."""

    snapshot = ledger.snapshot(current_user.id)
    return [_to_read(title, snapshot) for title in TITLES]


@router.get("/highest", response_model=TitleRead | None)
def read_highest_title(
    *,
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> TitleRead | None:
    """Return the caller's rarest unlocked title, or ``null`` before any unlock."""

    snapshot = ledger.snapshot(current_user.id)
    title = TitleService(ledger.db, ledger).highest_unlocked(current_user.id)
    return _to_read(title, snapshot) if title else None


@router.put("/active", response_model=ActiveTitleResponse)
def set_active_title(
    payload: ActiveTitleRequest,
    *,
    ledger: ProgressLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
) -> ActiveTitleResponse:
    if not ledger.set_active_title(current_user.id, payload.title_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is not unlocked")
    return ActiveTitleResponse(success=True, active_title=payload.title_id)
