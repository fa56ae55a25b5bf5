"""Daily activity aggregation model."""
import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from questboard.db.base import Base


class DailyActivity(Base):
    """One row per user and calendar day."""

    __tablename__ = "daily_activity"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_daily_activity_user_date"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False, index=True)

    tasks_completed = Column(Integer, nullable=False, default=0)
    goals_completed = Column(Integer, nullable=False, default=0)
    events_created = Column(Integer, nullable=False, default=0)
    xp_earned = Column(Integer, nullable=False, default=0)
    coins_earned = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def total_actions(self) -> int:
        return (self.tasks_completed or 0) + (self.goals_completed or 0) + (self.events_created or 0)
