"""Pydantic schemas for achievement endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field


class AchievementRead(BaseModel):
    """Achievement catalog entry."""

    id: str
    name: str
    description: str
    icon: str
    rarity: str
    xp_reward: int
    condition: str
    threshold: int


class AchievementStatusRead(AchievementRead):
    """Catalog entry with the user's unlock state."""

    unlocked: bool


class AchievementCheckResponse(BaseModel):
    """Response after checking for achievement unlocks."""

    newly_unlocked: list[AchievementRead] = Field(default_factory=list)
    total_unlocked: int


__all__ = [
    "AchievementCheckResponse",
    "AchievementRead",
    "AchievementStatusRead",
]
