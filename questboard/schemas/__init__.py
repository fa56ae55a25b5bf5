"""Pydantic schemas package."""

from questboard.schemas.auth import TokenPayload
from questboard.schemas.progress import (
    CoinSpendRequest,
    CoinSpendResponse,
    CoinsRequest,
    CoinsResponse,
    LevelProgressRead,
    ProgressRead,
    XPGrantRequest,
    XPGrantResponse,
)

__all__ = [
    "TokenPayload",
    "CoinSpendRequest",
    "CoinSpendResponse",
    "CoinsRequest",
    "CoinsResponse",
    "LevelProgressRead",
    "ProgressRead",
    "XPGrantRequest",
    "XPGrantResponse",
]
