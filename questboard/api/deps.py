"""Shared API dependencies."""
from __future__ import annotations

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from questboard.config import settings
from questboard.core.security import InvalidTokenError, decode_token
from questboard.db.models.user import User
from questboard.db.session import get_db
from questboard.schemas import TokenPayload
from questboard.services.ledger import ProgressLedger
from questboard.utils.exceptions import AuthenticationError, AuthorizationError

# Tokens are issued by the identity provider; tokenUrl only feeds the OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token")


def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> User:
    """Resolve the authenticated user from the Authorization header."""

    if not token:
        raise AuthenticationError("Could not validate credentials")

    try:
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise InvalidTokenError("Token must be an access token")
        token_data = TokenPayload.model_validate(payload)
    except (InvalidTokenError, ValidationError, ValueError, KeyError) as exc:
        raise AuthenticationError("Could not validate credentials") from exc

    user = db.get(User, token_data.sub)
    if not user or not user.is_active:
        raise AuthenticationError("Could not validate credentials", {"user_id": str(token_data.sub)})
    return user


def is_admin(user: User) -> bool:
    return bool(user.is_admin) or str(user.id) in set(settings.ADMIN_USER_IDS)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Allow only admins, flagged on the user row or listed in ``ADMIN_USER_IDS``."""

    if not is_admin(current_user):
        raise AuthorizationError("Admin access required", {"user_id": str(current_user.id)})
    return current_user


def get_ledger(db: Session = Depends(get_db)) -> ProgressLedger:
    return ProgressLedger(db)


__all__ = ["get_current_user", "get_db", "get_ledger", "is_admin", "require_admin"]
