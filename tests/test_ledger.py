"""Tests for the progress ledger."""
from __future__ import annotations

import threading
import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from questboard.db.base import Base
from questboard.db.models import User
from questboard.db.models.progress import UserProgress
from questboard.services.ledger import CACHE_NAMESPACE, ProgressLedger
from questboard.utils.cache import cache_backend
from questboard.utils.exceptions import ValidationError


def test_get_does_not_create(ledger: ProgressLedger, user) -> None:
    assert ledger.get(user.id) is None


def test_get_or_create_defaults(ledger: ProgressLedger, user) -> None:
    progress = ledger.get_or_create(user.id)

    assert progress.xp == 0
    assert progress.level == 1
    assert progress.coins == 0
    assert progress.achievements == []
    assert progress.unlocked_titles == ["novice"]
    assert progress.active_title == "novice"
    assert ledger.get_or_create(str(user.id)) is progress


def test_grant_xp_levels_up_at_threshold(ledger: ProgressLedger, user) -> None:
    first = ledger.grant_xp(user.id, 99)
    assert (first.new_xp, first.new_level, first.leveled_up) == (99, 1, False)

    second = ledger.grant_xp(user.id, 1)
    assert (second.new_xp, second.new_level, second.leveled_up) == (100, 2, True)

    progress = ledger.get(user.id)
    assert progress.weekly_xp == 100
    assert progress.monthly_xp == 100


def test_grant_xp_is_additive(ledger: ProgressLedger, user) -> None:
    ledger.grant_xp(user.id, 40)
    ledger.grant_xp(user.id, 60)

    assert ledger.get(user.id).xp == 100
    assert ledger.get(user.id).level == 2


def test_negative_grant_is_rejected(ledger: ProgressLedger, user) -> None:
    ledger.grant_xp(user.id, 10)

    with pytest.raises(ValidationError):
        ledger.grant_xp(user.id, -5)

    assert ledger.get(user.id).xp == 10


def test_spend_coins_never_goes_negative(ledger: ProgressLedger, user) -> None:
    ledger.add_coins(user.id, 30)

    rejected = ledger.spend_coins(user.id, 50)
    assert not rejected.success
    assert rejected.reason == "insufficient_funds"
    assert rejected.new_balance == 30

    spent = ledger.spend_coins(user.id, 30)
    assert spent.success
    assert spent.new_balance == 0


def test_spend_coins_requires_positive_amount(ledger: ProgressLedger, user) -> None:
    ledger.add_coins(user.id, 5)

    result = ledger.spend_coins(user.id, 0)

    assert not result.success
    assert result.reason == "invalid_amount"
    assert ledger.get(user.id).coins == 5


def test_unlock_achievement_is_idempotent(ledger: ProgressLedger, user) -> None:
    assert ledger.unlock_achievement(user.id, "first_goal") is True
    assert ledger.get(user.id).xp == 50

    assert ledger.unlock_achievement(user.id, "first_goal") is False
    progress = ledger.get(user.id)
    assert progress.xp == 50
    assert progress.achievements == ["first_goal"]


def test_unknown_achievement_is_not_unlocked(ledger: ProgressLedger, user) -> None:
    assert ledger.unlock_achievement(user.id, "does_not_exist") is False
    assert ledger.get(user.id) is None


def test_set_active_title_requires_unlock(ledger: ProgressLedger, user) -> None:
    ledger.get_or_create(user.id)

    assert ledger.set_active_title(user.id, "legend") is False
    assert ledger.get(user.id).active_title == "novice"

    assert ledger.unlock_title(user.id, "legend") is True
    assert ledger.unlock_title(user.id, "legend") is False
    assert ledger.set_active_title(user.id, "legend") is True
    assert ledger.get(user.id).active_title == "legend"

    assert ledger.set_active_title(user.id, None) is True
    assert ledger.get(user.id).active_title is None


def test_reset_progress_keeps_premium(ledger: ProgressLedger, user) -> None:
    ledger.grant_xp(user.id, 500)
    ledger.add_coins(user.id, 40)
    ledger.unlock_achievement(user.id, "first_task")
    ledger.unlock_title(user.id, "pro")
    ledger.set_premium(user.id, True)

    snapshot = ledger.reset_progress(user.id)

    assert (snapshot.xp, snapshot.level, snapshot.coins) == (0, 1, 0)
    assert snapshot.achievements == []
    assert snapshot.unlocked_titles == ["novice"]
    assert snapshot.active_title == "novice"
    assert snapshot.weekly_xp == 0 and snapshot.monthly_xp == 0
    assert snapshot.is_premium is True
    assert user.is_premium is True


def test_set_level_back_solves_xp(ledger: ProgressLedger, user) -> None:
    snapshot = ledger.set_level(user.id, 3)

    assert snapshot.xp == 250
    assert snapshot.level == 3

    with pytest.raises(ValidationError):
        ledger.set_level(user.id, 0)


def test_set_xp_and_coins(ledger: ProgressLedger, user) -> None:
    assert ledger.set_xp(user.id, 475).level == 4
    assert ledger.set_coins(user.id, 12).coins == 12


def test_bulk_resets_only_touch_their_counter(ledger: ProgressLedger, make_user) -> None:
    first, second = make_user(), make_user()
    ledger.grant_xp(first.id, 30)
    ledger.grant_xp(second.id, 70)

    assert ledger.reset_weekly_xp_for_all() == 2
    assert ledger.get(first.id).weekly_xp == 0
    assert ledger.get(first.id).monthly_xp == 30
    assert ledger.get(second.id).xp == 70

    assert ledger.reset_monthly_xp_for_all() == 2
    assert ledger.get(second.id).monthly_xp == 0


def test_transaction_rolls_back_on_error(ledger: ProgressLedger, user, db_session) -> None:
    ledger.add_coins(user.id, 10)

    with pytest.raises(RuntimeError):
        with ledger.transaction(user.id) as progress:
            progress.coins = 999
            raise RuntimeError("boom")

    db_session.expire_all()
    assert db_session.get(UserProgress, user.id).coins == 10


def test_nested_operations_share_one_commit(ledger: ProgressLedger, user, db_session) -> None:
    ledger.get_or_create(user.id)

    with pytest.raises(RuntimeError):
        with ledger.transaction(user.id):
            assert ledger.unlock_achievement(user.id, "first_goal") is True
            raise RuntimeError("abort after unlock")

    db_session.expire_all()
    progress = db_session.get(UserProgress, user.id)
    assert progress.achievements == []
    assert progress.xp == 0


def test_snapshot_cache_is_invalidated_on_commit(ledger: ProgressLedger, user) -> None:
    assert ledger.snapshot(user.id).xp == 0
    assert cache_backend.get(CACHE_NAMESPACE, str(user.id)) is not None

    ledger.grant_xp(user.id, 120)

    assert cache_backend.get(CACHE_NAMESPACE, str(user.id)) is None
    snapshot = ledger.snapshot(user.id)
    assert snapshot.xp == 120
    assert snapshot.level_progress.current == 20


@pytest.fixture()
def file_engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'ledger.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


def test_concurrent_grants_from_separate_sessions_are_serialized(file_engine) -> None:
    threads_count, grants_per_thread = 4, 25
    factory = sessionmaker(autocommit=False, autoflush=False, bind=file_engine, expire_on_commit=False)
    with factory() as setup:
        user = User(id=uuid.uuid4(), email="parallel@example.com")
        setup.add(user)
        setup.commit()
        user_id = user.id

    start = threading.Barrier(threads_count)
    errors: list[BaseException] = []

    def worker() -> None:
        with factory() as session:
            ledger = ProgressLedger(session)
            start.wait()
            try:
                for _ in range(grants_per_thread):
                    ledger.grant_xp(user_id, 1)
            except Exception as exc:  # surfaced through ``errors`` below
                errors.append(exc)

    workers = [threading.Thread(target=worker) for _ in range(threads_count)]
    for thread in workers:
        thread.start()
    for thread in workers:
        thread.join()

    assert errors == []
    with factory() as check:
        progress = check.get(UserProgress, user_id)
        assert progress.xp == threads_count * grants_per_thread
        assert progress.weekly_xp == threads_count * grants_per_thread
