"""Pydantic schemas for weekly challenge endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ChallengeRewardRead(BaseModel):
    xp: int
    coins: int
    title: str | None = None


class ChallengeRead(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    type: str
    difficulty: str
    target: int
    current: int
    completed: bool
    claimed_at: datetime | None = None
    reward: ChallengeRewardRead
    start_date: datetime
    end_date: datetime


class RewardTotalsRead(BaseModel):
    xp: int = 0
    coins: int = 0


class WeeklyChallengesResponse(BaseModel):
    week_key: str
    start_date: datetime
    end_date: datetime
    time_remaining: str
    completed_count: int
    total_rewards: RewardTotalsRead
    earned_rewards: RewardTotalsRead
    challenges: list[ChallengeRead] = Field(default_factory=list)


class ChallengeClaimResponse(BaseModel):
    success: bool
    reason: str | None = None
    xp: int = 0
    coins: int = 0
    title_unlocked: str | None = None
    leveled_up: bool = False
    achievements: list[str] = Field(default_factory=list)
    titles: list[str] = Field(default_factory=list)
    challenge: ChallengeRead | None = None


__all__ = [
    "ChallengeClaimResponse",
    "ChallengeRead",
    "ChallengeRewardRead",
    "RewardTotalsRead",
    "WeeklyChallengesResponse",
]
