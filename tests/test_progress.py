"""Tests for the progress, title, activity and challenge endpoints."""
from __future__ import annotations

from fastapi.testclient import TestClient

from questboard.core.security import create_access_token


def test_requires_authentication(client: TestClient, make_user) -> None:
    assert client.get("/api/v1/progress/me").status_code == 401

    inactive = make_user(is_active=False)
    token = create_access_token(str(inactive.id))
    response = client.get("/api/v1/progress/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401

    garbage = client.get("/api/v1/progress/me", headers={"Authorization": "Bearer not-a-token"})
    assert garbage.status_code == 401
    assert garbage.headers["WWW-Authenticate"] == "Bearer"
    assert garbage.json() == {"detail": "Could not validate credentials"}


def test_progress_defaults(client: TestClient, user, auth_headers) -> None:
    response = client.get("/api/v1/progress/me", headers=auth_headers(user))

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == str(user.id)
    assert (body["xp"], body["level"], body["coins"]) == (0, 1, 0)
    assert body["unlocked_titles"] == ["novice"]
    assert body["active_title"] == "novice"
    assert body["level_progress"] == {"level": 1, "xp": 0, "current": 0, "needed": 100, "percentage": 0.0}


def test_grant_xp_levels_up(client: TestClient, user, auth_headers) -> None:
    headers = auth_headers(user)

    response = client.post("/api/v1/progress/xp", json={"amount": 100}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"new_xp": 100, "new_level": 2, "leveled_up": True}

    level = client.get("/api/v1/progress/me/level", headers=headers).json()
    assert level["level"] == 2
    assert level["needed"] == 150

    negative = client.post("/api/v1/progress/xp", json={"amount": -5}, headers=headers)
    assert negative.status_code == 422


def test_coin_balance_and_spending(client: TestClient, user, auth_headers) -> None:
    headers = auth_headers(user)

    added = client.post("/api/v1/progress/coins", json={"amount": 30}, headers=headers)
    assert added.json() == {"coins": 30}

    too_much = client.post("/api/v1/progress/coins/spend", json={"amount": 50}, headers=headers)
    assert too_much.status_code == 200
    assert too_much.json() == {"success": False, "new_balance": 30, "reason": "insufficient_funds"}

    spent = client.post("/api/v1/progress/coins/spend", json={"amount": 20}, headers=headers)
    assert spent.json() == {"success": True, "new_balance": 10, "reason": None}


def test_active_title_must_be_unlocked(client: TestClient, user, auth_headers) -> None:
    headers = auth_headers(user)

    locked = client.put("/api/v1/titles/active", json={"title_id": "legend"}, headers=headers)
    assert locked.status_code == 400

    cleared = client.put("/api/v1/titles/active", json={"title_id": None}, headers=headers)
    assert cleared.status_code == 200
    assert cleared.json()["active_title"] is None

    titles = client.get("/api/v1/titles", headers=headers).json()
    novice = next(title for title in titles if title["id"] == "novice")
    assert novice["unlocked"] is True
    assert novice["active"] is False


def test_activity_calendar_reflects_rewards(client: TestClient, user, auth_headers) -> None:
    headers = auth_headers(user)
    client.post("/api/v1/rewards/actions", json={"source_type": "task", "source_id": "t-1"}, headers=headers)
    client.post("/api/v1/rewards/actions", json={"source_type": "event", "source_id": "e-1"}, headers=headers)

    calendar = client.get("/api/v1/activity/calendar", params={"days": 7}, headers=headers)
    assert calendar.status_code == 200
    days = calendar.json()
    assert len(days) == 7
    assert days[-1]["count"] == 2
    assert sum(day["count"] for day in days) == 2

    stats = client.get("/api/v1/activity/stats", headers=headers).json()
    assert stats["total_tasks"] == 1
    assert stats["total_events"] == 1
    assert stats["total_xp"] == 15

    rows = client.get("/api/v1/activity", headers=headers).json()
    assert len(rows) == 1


def test_weekly_challenges_endpoint(client: TestClient, user, auth_headers) -> None:
    headers = auth_headers(user)

    weekly = client.get("/api/v1/challenges/weekly", headers=headers)
    assert weekly.status_code == 200
    body = weekly.json()
    assert len(body["challenges"]) == 4
    assert [item["difficulty"] for item in body["challenges"]] == ["easy", "medium", "medium", "hard"]
    assert body["completed_count"] == 0
    assert body["earned_rewards"] == {"xp": 0, "coins": 0}

    again = client.get("/api/v1/challenges/weekly", headers=headers).json()
    assert [item["id"] for item in again["challenges"]] == [item["id"] for item in body["challenges"]]

    missing = client.post("/api/v1/challenges/challenge_0_0/claim", headers=headers)
    assert missing.status_code == 200
    assert missing.json()["success"] is False
    assert missing.json()["reason"] == "not_found"
