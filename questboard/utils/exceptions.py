"""Domain exceptions and their HTTP translations."""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from loguru import logger


class QuestboardException(Exception):
    """Base exception for the application."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(QuestboardException):
    """Input the progression rules reject (negative amounts, unknown types)."""
    pass


class AuthenticationError(QuestboardException):
    """Missing, invalid or expired identity token, or an inactive user."""
    pass


class AuthorizationError(QuestboardException):
    """Caller is authenticated but not allowed to perform the operation."""
    pass


class NotFoundError(QuestboardException):
    """Referenced user or record does not exist."""
    pass


def handle_database_error(error: Exception) -> HTTPException:
    """Translate an unexpected SQLAlchemy failure into a 500."""
    logger.error(f"Database error: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database operation failed. Please try again later."
    )


def handle_validation_error(error: ValidationError) -> HTTPException:
    logger.warning(f"Validation error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": error.message, "details": error.details},
    )


def handle_authentication_error(error: AuthenticationError) -> HTTPException:
    logger.warning(f"Authentication error: {error.message}")
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=error.message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def handle_authorization_error(error: AuthorizationError) -> HTTPException:
    logger.warning(f"Authorization error: {error.message}")
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=error.message)


def handle_not_found_error(error: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
