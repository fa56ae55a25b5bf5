"""Pydantic schemas for title endpoints."""
from __future__ import annotations

from pydantic import BaseModel


class TitleRead(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    color: str
    rarity: str
    requirement_type: str
    requirement_value: int
    requirement: str
    unlocked: bool = False
    active: bool = False


class ActiveTitleRequest(BaseModel):
    title_id: str | None = None


class ActiveTitleResponse(BaseModel):
    success: bool
    active_title: str | None = None


__all__ = ["ActiveTitleRequest", "ActiveTitleResponse", "TitleRead"]
