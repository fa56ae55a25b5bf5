"""Service layer package."""

from questboard.services.achievement import AchievementEvaluator
from questboard.services.activity import ActivityRecorder
from questboard.services.challenges import ChallengeService
from questboard.services.ledger import ProgressLedger
from questboard.services.rewards import RewardService
from questboard.services.streaks import StreakService
from questboard.services.titles import TitleService

__all__ = [
    "AchievementEvaluator",
    "ActivityRecorder",
    "ChallengeService",
    "ProgressLedger",
    "RewardService",
    "StreakService",
    "TitleService",
]
