"""Pytest fixtures for service and API tests."""

import os
import uuid
from collections.abc import Callable, Generator
from datetime import datetime, timezone

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("TIMEZONE", "UTC")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from questboard.api.deps import get_db
from questboard.core.security import create_access_token
from questboard.db import models  # noqa: F401  # Imported for side effects
from questboard.db.base import Base
from questboard.db.models import User
from questboard.main import create_app
from questboard.services.ledger import ProgressLedger
from questboard.utils.cache import cache_backend

@pytest.fixture(scope="session")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine, expire_on_commit=False
    )
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()


@pytest.fixture(autouse=True)
def clear_cache() -> Generator[None, None, None]:
    cache_backend.clear(include_redis=True)
    try:
        yield
    finally:
        cache_backend.clear(include_redis=True)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    def _make_user(*, is_admin: bool = False, is_active: bool = True) -> User:
        user = User(
            id=uuid.uuid4(),
            email=f"{uuid.uuid4().hex[:12]}@example.com",
            display_name="Streamer",
            is_admin=is_admin,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def user(make_user) -> User:
    return make_user()


@pytest.fixture()
def admin_user(make_user) -> User:
    return make_user(is_admin=True)


@pytest.fixture()
def fixed_now() -> datetime:
    """A Wednesday; its week runs Sunday 2026-10-18 to Saturday 2026-10-24."""

    return datetime(2026, 10, 21, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def ledger(db_session: Session) -> ProgressLedger:
    return ProgressLedger(db_session)


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}

    return _headers
