"""Tests for XP leaderboards and rank lookups."""
from __future__ import annotations

import pytest

from questboard.services.ledger import ProgressLedger
from questboard.utils.exceptions import ValidationError


@pytest.fixture()
def ranked_users(make_user, ledger: ProgressLedger):
    veteran, regular, newcomer = make_user(), make_user(), make_user()
    ledger.grant_xp(veteran.id, 500)
    ledger.grant_xp(regular.id, 200)
    ledger.reset_weekly_xp_for_all()
    ledger.grant_xp(regular.id, 100)
    ledger.grant_xp(newcomer.id, 100)
    return veteran, regular, newcomer


def test_alltime_orders_by_total_xp(ledger: ProgressLedger, ranked_users) -> None:
    veteran, regular, newcomer = ranked_users

    entries = ledger.leaderboard("alltime")

    assert [entry.user_id for entry in entries] == [str(veteran.id), str(regular.id), str(newcomer.id)]
    assert [entry.rank for entry in entries] == [1, 2, 3]
    assert entries[0].xp == 500
    assert entries[0].active_title == "novice"


def test_weekly_orders_by_weekly_xp_with_stable_ties(ledger: ProgressLedger, ranked_users) -> None:
    veteran, regular, newcomer = ranked_users
    tied = [str(user_id) for user_id in sorted([regular.id, newcomer.id])]

    entries = ledger.leaderboard("weekly")

    assert [entry.user_id for entry in entries] == [*tied, str(veteran.id)]
    assert entries[-1].weekly_xp == 0
    for entry in entries:
        assert ledger.rank(entry.user_id, "weekly") == entry.rank


def test_monthly_keeps_counting_after_weekly_reset(ledger: ProgressLedger, ranked_users) -> None:
    veteran, regular, _ = ranked_users

    assert ledger.rank(veteran.id, "monthly") == 1
    assert ledger.rank(regular.id, "monthly") == 2


def test_limit_and_inactive_users(ledger: ProgressLedger, ranked_users, make_user) -> None:
    hidden = make_user(is_active=False)
    ledger.grant_xp(hidden.id, 10_000)

    top = ledger.leaderboard("alltime", limit=2)

    assert len(top) == 2
    assert str(hidden.id) not in {entry.user_id for entry in top}
    assert ledger.rank(hidden.id, "alltime") is None


def test_rank_without_progress_record(ledger: ProgressLedger, user) -> None:
    assert ledger.rank(user.id) is None


def test_invalid_arguments(ledger: ProgressLedger) -> None:
    with pytest.raises(ValidationError):
        ledger.leaderboard("daily")
    with pytest.raises(ValidationError):
        ledger.leaderboard("weekly", limit=0)


def test_leaderboard_endpoints(client, ranked_users, auth_headers) -> None:
    veteran, regular, _ = ranked_users
    headers = auth_headers(regular)

    response = client.get("/api/v1/leaderboard", params={"period": "alltime", "limit": 2}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert [entry["user_id"] for entry in body] == [str(veteran.id), str(regular.id)]
    assert body[1]["rank"] == 2

    mine = client.get("/api/v1/leaderboard/me", params={"period": "alltime"}, headers=headers)
    assert mine.json() == {"period": "alltime", "rank": 2}

    invalid = client.get("/api/v1/leaderboard", params={"period": "daily"}, headers=headers)
    assert invalid.status_code == 422
