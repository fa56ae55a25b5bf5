"""Reward endpoint for completed tasks, goals and created events."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from questboard.api.deps import get_current_user, get_db
from questboard.db.models.user import User
from questboard.schemas.reward import ActionRewardRequest, ActionRewardResponse
from questboard.services.rewards import RewardService

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.post("/actions", response_model=ActionRewardResponse)
def reward_action(
    payload: ActionRewardRequest,
    *,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ActionRewardResponse:
    """Apply the reward for one action; retries with the same ``source_id`` pay nothing."""

    result = RewardService(db).apply_action_reward(current_user.id, payload.source_type, payload.source_id)
    return ActionRewardResponse(
        awarded=result.awarded,
        reason=result.reason,
        xp=result.xp,
        coins=result.coins,
        leveled_up=result.leveled_up,
        new_level=result.new_level,
        achievements=result.achievements,
        titles=result.titles,
        completed_challenges=result.completed_challenges,
    )
