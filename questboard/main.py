"""FastAPI application factory."""
from __future__ import annotations

from typing import List

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from questboard.api.v1 import api_router
from questboard.config import settings
from questboard.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
    handle_authentication_error,
    handle_authorization_error,
    handle_database_error,
    handle_not_found_error,
    handle_validation_error,
)


tags_metadata: List[dict[str, str]] = [
    {"name": "progress", "description": "XP, level and coin balance of the caller."},
    {"name": "achievements", "description": "Achievement catalog and unlock checks."},
    {"name": "titles", "description": "Title catalog and active title selection."},
    {"name": "challenges", "description": "Weekly challenges and reward claims."},
    {"name": "activity", "description": "Daily activity, calendar heatmap and statistics."},
    {"name": "rewards", "description": "Rewards for completed tasks, goals and events."},
    {"name": "leaderboard", "description": "Weekly, monthly and all-time XP rankings."},
    {"name": "admin", "description": "Administrative progress adjustments."},
]


def _as_response(exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Progression engine for streamer gamification: XP, levels, achievements and challenges.",
        version="0.1.0",
        openapi_tags=tags_metadata,
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors(), "message": "Validation failed"},
        )

    @app.exception_handler(ValidationError)
    async def domain_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _as_response(handle_validation_error(exc))

    @app.exception_handler(AuthenticationError)
    async def authentication_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        return _as_response(handle_authentication_error(exc))

    @app.exception_handler(AuthorizationError)
    async def authorization_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
        return _as_response(handle_authorization_error(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return _as_response(handle_not_found_error(exc))

    @app.exception_handler(SQLAlchemyError)
    async def database_handler(request: Request, exc: Exception) -> JSONResponse:
        return _as_response(handle_database_error(exc))

    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app


app = create_app()
