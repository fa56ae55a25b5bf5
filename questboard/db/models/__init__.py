"""Database models package."""
from questboard.db.models.user import User
from questboard.db.models.progress import UserProgress
from questboard.db.models.activity import DailyActivity
from questboard.db.models.streak import Streak
from questboard.db.models.challenge import RewardLedgerEntry, UserWeeklyChallenges

__all__ = [
    "User",
    "UserProgress",
    "DailyActivity",
    "Streak",
    "RewardLedgerEntry",
    "UserWeeklyChallenges",
]
