"""Pydantic models for progress ledger endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class LevelProgressRead(BaseModel):
    """Position inside the current level."""

    level: int
    xp: int
    current: int
    needed: int
    percentage: float


class ProgressRead(BaseModel):
    """Full progress record of the authenticated user."""

    user_id: str
    xp: int
    level: int
    coins: int
    weekly_xp: int
    monthly_xp: int
    achievements: list[str] = Field(default_factory=list)
    unlocked_titles: list[str] = Field(default_factory=list)
    active_title: str | None = None
    is_premium: bool = False
    premium_expires_at: datetime | None = None
    level_progress: LevelProgressRead


class XPGrantRequest(BaseModel):
    amount: int = Field(..., ge=0, description="Experience points to add")


class XPGrantResponse(BaseModel):
    new_xp: int
    new_level: int
    leveled_up: bool


class CoinsRequest(BaseModel):
    amount: int = Field(..., ge=0)


class CoinsResponse(BaseModel):
    coins: int


class CoinSpendRequest(BaseModel):
    amount: int = Field(..., description="Coins to deduct; must be positive")


class CoinSpendResponse(BaseModel):
    success: bool
    new_balance: int
    reason: str | None = None


__all__ = [
    "CoinSpendRequest",
    "CoinSpendResponse",
    "CoinsRequest",
    "CoinsResponse",
    "LevelProgressRead",
    "ProgressRead",
    "XPGrantRequest",
    "XPGrantResponse",
]
