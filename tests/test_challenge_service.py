"""Tests for persisted weekly challenges and reward claims."""
from __future__ import annotations

from dataclasses import replace

import pytest

from questboard.core.challenges import Challenge
from questboard.db.models.activity import DailyActivity
from questboard.db.models.challenge import RewardLedgerEntry, UserWeeklyChallenges
from questboard.services.challenges import ChallengeService, challenge_ledger_id
from questboard.utils.exceptions import ValidationError


@pytest.fixture()
def service(db_session, ledger) -> ChallengeService:
    return ChallengeService(db_session, ledger)


def _complete(db_session, user, challenge_id: str) -> None:
    row = db_session.query(UserWeeklyChallenges).filter_by(user_id=user.id).one()
    challenges = [Challenge.from_dict(raw) for raw in row.challenges]
    row.challenges = [
        replace(item, current=item.target, completed=True).to_dict() if item.id == challenge_id else item.to_dict()
        for item in challenges
    ]
    db_session.commit()


def test_weekly_set_is_generated_once(service: ChallengeService, user, fixed_now, db_session) -> None:
    first = service.get_weekly_challenges(user.id, fixed_now)
    second = service.get_weekly_challenges(user.id, fixed_now)

    assert first.week_key == "2026-10-18"
    assert first.time_remaining == "3d 11h"
    assert [item.id for item in first.challenges] == [item.id for item in second.challenges]
    assert db_session.query(UserWeeklyChallenges).filter_by(user_id=user.id).count() == 1
    assert first.completed_count == 0


def test_record_progress_updates_matching_type(service: ChallengeService, user, fixed_now) -> None:
    weekly = service.get_weekly_challenges(user.id, fixed_now)
    task_challenges = [item for item in weekly.challenges if item.type == "tasks"]

    service.record_progress(user.id, "tasks", 2, fixed_now)

    updated = {item.id: item for item in service.get_weekly_challenges(user.id, fixed_now).challenges}
    for challenge in weekly.challenges:
        expected = min(2, challenge.target) if challenge in task_challenges else 0
        assert updated[challenge.id].current == expected


def test_record_progress_rejects_unknown_type(service: ChallengeService, user, fixed_now) -> None:
    with pytest.raises(ValidationError):
        service.record_progress(user.id, "streams", 1, fixed_now)


def test_claim_reasons(service: ChallengeService, user, fixed_now) -> None:
    weekly = service.get_weekly_challenges(user.id, fixed_now)

    missing = service.claim_reward(user.id, "challenge_0_0", fixed_now)
    assert (missing.success, missing.reason) == (False, "not_found")

    open_challenge = service.claim_reward(user.id, weekly.challenges[0].id, fixed_now)
    assert (open_challenge.success, open_challenge.reason) == (False, "not_completed")


def test_claim_pays_out_exactly_once(service: ChallengeService, user, fixed_now, db_session, ledger) -> None:
    weekly = service.get_weekly_challenges(user.id, fixed_now)
    target = weekly.challenges[0]
    _complete(db_session, user, target.id)

    claim = service.claim_reward(user.id, target.id, fixed_now)

    assert claim.success
    assert claim.xp == target.reward.xp
    assert claim.coins == target.reward.coins
    assert claim.challenge.claimed_at == fixed_now
    progress = ledger.get(user.id)
    assert progress.xp == target.reward.xp
    assert progress.coins == target.reward.coins
    assert db_session.get(
        RewardLedgerEntry, challenge_ledger_id(user.id, weekly.week_key, target.id)
    ) is not None
    activity = db_session.query(DailyActivity).filter_by(user_id=user.id).one()
    assert activity.xp_earned == target.reward.xp
    assert activity.total_actions == 0

    again = service.claim_reward(user.id, target.id, fixed_now)
    assert (again.success, again.reason) == (False, "already_claimed")
    assert ledger.get(user.id).xp == target.reward.xp


def test_claim_unlocks_reward_title(service: ChallengeService, user, fixed_now, db_session, ledger) -> None:
    weekly = service.get_weekly_challenges(user.id, fixed_now)
    hard = weekly.challenges[3]
    row = db_session.query(UserWeeklyChallenges).filter_by(user_id=user.id).one()
    with_title = replace(hard, reward=replace(hard.reward, title="consistent"), current=hard.target, completed=True)
    row.challenges = [*row.challenges[:3], with_title.to_dict()]
    db_session.commit()

    claim = service.claim_reward(user.id, hard.id, fixed_now)

    assert claim.success
    assert claim.title_unlocked == "consistent"
    assert "consistent" in ledger.get(user.id).unlocked_titles


def test_claim_unlocks_level_titles_in_same_commit(
    service: ChallengeService, user, fixed_now, db_session, ledger
) -> None:
    ledger.set_xp(user.id, 700)
    weekly = service.get_weekly_challenges(user.id, fixed_now)
    hard = weekly.challenges[3]
    _complete(db_session, user, hard.id)

    claim = service.claim_reward(user.id, hard.id, fixed_now)

    assert claim.success
    assert claim.leveled_up
    assert "streamer" in claim.titles
    progress = ledger.get(user.id)
    assert progress.level >= 5
    assert "streamer" in progress.unlocked_titles
