"""Daily activity, calendar heatmap and activity statistics."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from questboard.api.deps import get_current_user, get_db
from questboard.db.models.user import User
from questboard.schemas.activity import ActivityStatsRead, CalendarDayRead, DailyActivityRead
from questboard.services.activity import DEFAULT_CALENDAR_DAYS, ActivityRecorder

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=list[DailyActivityRead])
def list_activity(
    *,
    days: int = Query(DEFAULT_CALENDAR_DAYS, ge=1, le=365),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[DailyActivityRead]:
    activities = ActivityRecorder(db).get_user_activity(current_user.id, days)
    return [DailyActivityRead.model_validate(activity) for activity in activities]


@router.get("/calendar", response_model=list[CalendarDayRead])
def activity_calendar(
    *,
    days: int = Query(DEFAULT_CALENDAR_DAYS, ge=1, le=365),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[CalendarDayRead]:
    """Return a dense oldest-to-newest series ending today, zero-filled."""

    calendar = ActivityRecorder(db).get_calendar(current_user.id, days)
    return [CalendarDayRead.model_validate(day) for day in calendar]


@router.get("/stats", response_model=ActivityStatsRead)
def activity_stats(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ActivityStatsRead:
    return ActivityStatsRead.model_validate(ActivityRecorder(db).get_activity_stats(current_user.id))
