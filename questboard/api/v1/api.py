"""API router for version 1."""
from fastapi import APIRouter

from questboard.api.v1.endpoints import (
    achievements,
    activity,
    admin,
    challenges,
    leaderboard,
    progress,
    rewards,
    titles,
)


api_router = APIRouter()
api_router.include_router(progress.router)
api_router.include_router(achievements.router)
api_router.include_router(titles.router)
api_router.include_router(challenges.router)
api_router.include_router(activity.router)
api_router.include_router(rewards.router)
api_router.include_router(leaderboard.router)
api_router.include_router(admin.router)
