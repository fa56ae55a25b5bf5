"""Pydantic schemas for admin adjustment endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SetXPRequest(BaseModel):
    xp: int = Field(..., ge=0)


class SetLevelRequest(BaseModel):
    level: int = Field(..., ge=1)


class SetCoinsRequest(BaseModel):
    coins: int = Field(..., ge=0)


class SetPremiumRequest(BaseModel):
    is_premium: bool
    expires_at: datetime | None = None


class GrantTitleRequest(BaseModel):
    title_id: str = Field(..., min_length=1)


class GrantTitleResponse(BaseModel):
    granted: bool
    unlocked_titles: list[str]


class SetStreakRequest(BaseModel):
    current_streak: int = Field(..., ge=0)
    longest_streak: int | None = Field(None, ge=0)


class StreakRead(BaseModel):
    current_streak: int
    longest_streak: int


class BulkResetResponse(BaseModel):
    rows_updated: int


__all__ = [
    "BulkResetResponse",
    "GrantTitleRequest",
    "GrantTitleResponse",
    "SetCoinsRequest",
    "SetLevelRequest",
    "SetPremiumRequest",
    "SetStreakRequest",
    "SetXPRequest",
    "StreakRead",
]
