"""Pydantic schemas for leaderboard endpoints."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

LeaderboardPeriodParam = Literal["weekly", "monthly", "alltime"]


class LeaderboardEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rank: int
    user_id: str
    display_name: str | None = None
    avatar_url: str | None = None
    level: int
    xp: int
    weekly_xp: int
    monthly_xp: int
    active_title: str | None = None
    is_premium: bool = False


class LeaderboardRankRead(BaseModel):
    period: LeaderboardPeriodParam
    rank: int | None = None


__all__ = ["LeaderboardEntryRead", "LeaderboardPeriodParam", "LeaderboardRankRead"]
