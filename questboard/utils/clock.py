"""Timezone-aware clock helpers for calendar days and challenge weeks."""
from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from questboard.config import settings


def local_now(tz_name: str | None = None) -> datetime:
    """Current time in the configured timezone."""

    return datetime.now(ZoneInfo(tz_name or settings.TIMEZONE))


def local_today(tz_name: str | None = None) -> date:
    """Current calendar day in the configured timezone."""

    return local_now(tz_name).date()


__all__ = ["local_now", "local_today"]
