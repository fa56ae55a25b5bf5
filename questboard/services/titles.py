"""Requirement-based title unlocks."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from questboard.core.catalog import TitleDefinition, UserStats, highest_title, qualifying_titles
from questboard.services.activity import ActivityRecorder
from questboard.services.ledger import ProgressLedger


class TitleService:
    """Unlock titles whose requirements the user now meets."""

    def __init__(self, db: Session, ledger: ProgressLedger | None = None):
        self.db = db
        self.ledger = ledger or ProgressLedger(db)

    def sync_unlocked_titles(self, user_id: UUID | str, stats: UserStats | None = None) -> list[str]:
        """Unlock every non-special title the user qualifies for; return the new ids."""

        unlocked: list[str] = []
        with self.ledger.transaction(user_id) as progress:
            if stats is None:
                stats = ActivityRecorder(self.db, self.ledger).compute_title_stats(progress.user_id)
            for title_id in qualifying_titles(stats):
                if title_id in (progress.unlocked_titles or []):
                    continue
                if self.ledger.unlock_title(progress.user_id, title_id):
                    unlocked.append(title_id)
        return unlocked

    def highest_unlocked(self, user_id: UUID | str) -> TitleDefinition | None:
        progress = self.ledger.get(user_id)
        if progress is None:
            return None
        return highest_title(progress.unlocked_titles or [])


__all__ = ["TitleService"]
