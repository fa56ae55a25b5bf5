"""Pydantic schemas for activity endpoints."""
from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict


class DailyActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date
    tasks_completed: int
    goals_completed: int
    events_created: int
    xp_earned: int
    coins_earned: int


class CalendarDayRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date
    count: int


class ActivityStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_days_active: int
    total_tasks: int
    total_goals: int
    total_events: int
    total_xp: int
    total_coins: int
    average_per_day: float


__all__ = ["ActivityStatsRead", "CalendarDayRead", "DailyActivityRead"]
