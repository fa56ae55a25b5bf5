"""Weekly challenge endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from questboard.api.deps import get_current_user, get_db
from questboard.core.challenges import Challenge
from questboard.db.models.user import User
from questboard.schemas.challenge import (
    ChallengeClaimResponse,
    ChallengeRead,
    ChallengeRewardRead,
    RewardTotalsRead,
    WeeklyChallengesResponse,
)
from questboard.services.challenges import ChallengeService

router = APIRouter(prefix="/challenges", tags=["challenges"])


def _to_read(challenge: Challenge) -> ChallengeRead:
    return ChallengeRead(
        id=challenge.id,
        title=challenge.title,
        description=challenge.description,
        icon=challenge.icon,
        type=challenge.type,
        difficulty=challenge.difficulty,
        target=challenge.target,
        current=challenge.current,
        completed=challenge.completed,
        claimed_at=challenge.claimed_at,
        reward=ChallengeRewardRead(
            xp=challenge.reward.xp, coins=challenge.reward.coins, title=challenge.reward.title
        ),
        start_date=challenge.start_date,
        end_date=challenge.end_date,
    )


@router.get("/weekly", response_model=WeeklyChallengesResponse)
def get_weekly_challenges(
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> WeeklyChallengesResponse:
    """Return this week's challenges, generating them on the first request of the week."""

    weekly = ChallengeService(db).get_weekly_challenges(current_user.id)
    total, earned = weekly.total_rewards, weekly.earned_rewards
    return WeeklyChallengesResponse(
        week_key=weekly.week_key,
        start_date=weekly.start_date,
        end_date=weekly.end_date,
        time_remaining=weekly.time_remaining,
        completed_count=weekly.completed_count,
        total_rewards=RewardTotalsRead(xp=total.xp, coins=total.coins),
        earned_rewards=RewardTotalsRead(xp=earned.xp, coins=earned.coins),
        challenges=[_to_read(challenge) for challenge in weekly.challenges],
    )


@router.post("/{challenge_id}/claim", response_model=ChallengeClaimResponse)
def claim_challenge_reward(
    challenge_id: str,
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ChallengeClaimResponse:
    """Claim a completed challenge; refusals come back as ``success=false`` with a reason."""

    claim = ChallengeService(db).claim_reward(current_user.id, challenge_id)
    return ChallengeClaimResponse(
        success=claim.success,
        reason=claim.reason,
        xp=claim.xp,
        coins=claim.coins,
        title_unlocked=claim.title_unlocked,
        leveled_up=claim.leveled_up,
        achievements=claim.achievements,
        titles=claim.titles,
        challenge=_to_read(claim.challenge) if claim.challenge else None,
    )
