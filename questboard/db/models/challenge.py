"""Weekly challenge sets and the reward payout ledger."""
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from questboard.db.base import Base


class UserWeeklyChallenges(Base):
    """The four challenges generated for a user in one week."""

    __tablename__ = "user_challenges"
    __table_args__ = (UniqueConstraint("user_id", "week_key", name="uq_user_challenges_user_week"),)

    id = Column(String(80), primary_key=True)  # "{user_id}_{week_key}"
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    week_key = Column(String(10), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    challenges = Column(JSONB().with_variant(JSON(), "sqlite"), nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class RewardLedgerEntry(Base):
    """Marks a reward source as paid out; the primary key makes payouts exactly-once."""

    __tablename__ = "reward_ledger"

    id = Column(String(255), primary_key=True)
    user_id = Column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_type = Column(String(20), nullable=False)
    source_id = Column(String(160), nullable=False)
    xp = Column(Integer, nullable=False, default=0)
    coins = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
