"""Pydantic schemas for the action reward endpoint."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ActionRewardRequest(BaseModel):
    source_type: Literal["task", "goal", "event"]
    source_id: str = Field(..., min_length=1, max_length=160)


class ActionRewardResponse(BaseModel):
    awarded: bool
    reason: str | None = None
    xp: int = 0
    coins: int = 0
    leveled_up: bool = False
    new_level: int | None = None
    achievements: list[str] = Field(default_factory=list)
    titles: list[str] = Field(default_factory=list)
    completed_challenges: list[str] = Field(default_factory=list)


__all__ = ["ActionRewardRequest", "ActionRewardResponse"]
