"""Per-user progression record."""
from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from questboard.db.base import Base
from questboard.db.types import StringList


class UserProgress(Base):
    """XP, level, coins and unlocks owned by the progress ledger."""

    __tablename__ = "user_progress"

    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    xp = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    coins = Column(Integer, nullable=False, default=0)

    achievements = Column(StringList(), nullable=False, default=list)
    unlocked_titles = Column(StringList(), nullable=False, default=list)
    active_title = Column(String(120))

    weekly_xp = Column(Integer, nullable=False, default=0)
    monthly_xp = Column(Integer, nullable=False, default=0)

    # Owned by billing; only the admin premium toggle writes these.
    is_premium = Column(Boolean, nullable=False, default=False)
    premium_expires_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", backref="progress")
