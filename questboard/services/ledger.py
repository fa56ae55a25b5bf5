"""Progress ledger: XP, level, coins and unlocks per user."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Iterator, Literal
from uuid import UUID

from loguru import logger
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from questboard.config import settings
from questboard.core.catalog import get_achievement, get_title
from questboard.core.leveling import (
    LevelProgress,
    clamp_progress_int,
    level_from_xp,
    progress_within_level,
    total_xp_for_level,
)
from questboard.db.models.progress import UserProgress
from questboard.db.models.user import User
from questboard.utils.cache import CacheBackend, cache_backend
from questboard.utils.exceptions import ValidationError
from questboard.utils.locks import user_locks

CACHE_NAMESPACE = "progress"
MAX_LEADERBOARD_SIZE = 1000
_DEPTH_KEY = "questboard_ledger_depth"

LeaderboardPeriod = Literal["weekly", "monthly", "alltime"]
_LEADERBOARD_COLUMNS = {
    "weekly": UserProgress.weekly_xp,
    "monthly": UserProgress.monthly_xp,
    "alltime": UserProgress.xp,
}


@dataclass(frozen=True, slots=True)
class XPGrant:
    new_xp: int
    new_level: int
    leveled_up: bool


@dataclass(frozen=True, slots=True)
class CoinSpend:
    success: bool
    new_balance: int
    reason: Literal["insufficient_funds", "invalid_amount"] | None = None


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    rank: int
    user_id: str
    display_name: str | None
    avatar_url: str | None
    level: int
    xp: int
    weekly_xp: int
    monthly_xp: int
    active_title: str | None
    is_premium: bool


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """Read-only copy of a progress record, safe to cache."""

    user_id: str
    xp: int
    level: int
    coins: int
    weekly_xp: int
    monthly_xp: int
    active_title: str | None
    is_premium: bool
    premium_expires_at: datetime | None
    achievements: list[str] = field(default_factory=list)
    unlocked_titles: list[str] = field(default_factory=list)

    @property
    def level_progress(self) -> LevelProgress:
        return progress_within_level(self.xp, self.level)

    @classmethod
    def from_record(cls, progress: UserProgress) -> "ProgressSnapshot":
        return cls(
            user_id=str(progress.user_id),
            xp=progress.xp,
            level=progress.level,
            coins=progress.coins,
            weekly_xp=progress.weekly_xp,
            monthly_xp=progress.monthly_xp,
            active_title=progress.active_title,
            is_premium=bool(progress.is_premium),
            premium_expires_at=progress.premium_expires_at,
            achievements=list(progress.achievements or []),
            unlocked_titles=list(progress.unlocked_titles or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ProgressSnapshot":
        expires = raw.get("premium_expires_at")
        return cls(**{**raw, "premium_expires_at": datetime.fromisoformat(expires) if expires else None})


def as_user_id(value: UUID | str) -> UUID:
    """Normalize a user id to ``UUID``, raising ``ValidationError`` when malformed."""

    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise ValidationError("Invalid user id", {"user_id": str(value)}) from exc


class ProgressLedger:
    """Owns every write to ``user_progress``.

    Mutations run inside :meth:`transaction`, which serializes callers per user
    (process-local lock plus ``SELECT ... FOR UPDATE``) and commits once at the
    outermost level. Compound operations nest freely inside one another.
    """

    def __init__(self, db: Session, cache: CacheBackend | None = None):
        self.db = db
        self.cache = cache or cache_backend

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    @contextmanager
    def transaction(self, user_id: UUID | str) -> Iterator[UserProgress]:
        """Yield the locked progress record for ``user_id``.

        Commits when the outermost block exits cleanly and rolls back on any
        exception. Nested blocks share the outer commit.
        """
        user_id = as_user_id(user_id)
        with user_locks.hold(user_id):
            depth = self.db.info.get(_DEPTH_KEY, 0)
            self.db.info[_DEPTH_KEY] = depth + 1
            try:
                progress = self._load_for_update(user_id, refresh=depth == 0)
                yield progress
                if depth == 0:
                    self.db.commit()
            except Exception:
                if depth == 0:
                    self.db.rollback()
                raise
            finally:
                self.db.info[_DEPTH_KEY] = depth
            if depth == 0:
                self.cache.invalidate(CACHE_NAMESPACE, key=str(user_id))

    def _select_for_update(self, user_id: UUID, *, refresh: bool):
        stmt = select(UserProgress).where(UserProgress.user_id == user_id).with_for_update()
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def _load_for_update(self, user_id: UUID, *, refresh: bool) -> UserProgress:
        progress = self._select_for_update(user_id, refresh=refresh)
        if progress is not None:
            return progress

        progress = self._new_record(user_id)
        self.db.add(progress)
        try:
            self.db.flush()
        except IntegrityError:
            # Another process created the row first.
            self.db.rollback()
            logger.info("Progress record created concurrently", user_id=str(user_id))
            progress = self._select_for_update(user_id, refresh=True)
            if progress is None:
                raise
            return progress
        logger.info("Created progress record", user_id=str(user_id))
        return progress

    @staticmethod
    def _new_record(user_id: UUID) -> UserProgress:
        starter = settings.STARTER_TITLE_ID
        return UserProgress(
            user_id=user_id,
            xp=0,
            level=1,
            coins=0,
            achievements=[],
            unlocked_titles=[starter],
            active_title=starter,
            weekly_xp=0,
            monthly_xp=0,
            is_premium=False,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get(self, user_id: UUID | str) -> UserProgress | None:
        """Return the progress record without creating it."""

        return self.db.execute(
            select(UserProgress).where(UserProgress.user_id == as_user_id(user_id))
        ).scalar_one_or_none()

    def get_or_create(self, user_id: UUID | str) -> UserProgress:
        with self.transaction(user_id) as progress:
            return progress

    def snapshot(self, user_id: UUID | str) -> ProgressSnapshot:
        """Return the cached snapshot, loading (and creating) the record on a miss."""

        user_id = as_user_id(user_id)
        cached = self.cache.get(CACHE_NAMESPACE, str(user_id))
        if cached is not None:
            return ProgressSnapshot.from_dict(cached)

        progress = self.get(user_id) or self.get_or_create(user_id)
        snapshot = ProgressSnapshot.from_record(progress)
        self.cache.set(
            CACHE_NAMESPACE, str(user_id), snapshot.to_dict(), settings.PROGRESS_CACHE_TTL_SECONDS
        )
        return snapshot

    # ------------------------------------------------------------------
    # XP and coins
    # ------------------------------------------------------------------
    def grant_xp(self, user_id: UUID | str, amount: int) -> XPGrant:
        """Add ``amount`` XP, recompute the level and bump the weekly and monthly counters."""

        if amount < 0:
            raise ValidationError("XP amount must be non-negative", {"amount": amount})

        with self.transaction(user_id) as progress:
            previous_level = progress.level
            progress.xp = clamp_progress_int(progress.xp + amount)
            progress.level = level_from_xp(progress.xp)
            progress.weekly_xp = clamp_progress_int(progress.weekly_xp + amount)
            progress.monthly_xp = clamp_progress_int(progress.monthly_xp + amount)
            result = XPGrant(
                new_xp=progress.xp,
                new_level=progress.level,
                leveled_up=progress.level > previous_level,
            )

        if result.leveled_up:
            logger.info(
                "User leveled up",
                user_id=str(progress.user_id),
                level=result.new_level,
                xp=result.new_xp,
            )
        return result

    def add_coins(self, user_id: UUID | str, amount: int) -> int:
        if amount < 0:
            raise ValidationError("Coin amount must be non-negative", {"amount": amount})

        with self.transaction(user_id) as progress:
            progress.coins = clamp_progress_int(progress.coins + amount)
            return progress.coins

    def spend_coins(self, user_id: UUID | str, amount: int) -> CoinSpend:
        """Deduct ``amount`` coins only when the balance covers it."""

        with self.transaction(user_id) as progress:
            if amount <= 0:
                return CoinSpend(success=False, new_balance=progress.coins, reason="invalid_amount")
            if progress.coins < amount:
                logger.info(
                    "Coin spend rejected",
                    user_id=str(progress.user_id),
                    amount=amount,
                    balance=progress.coins,
                )
                return CoinSpend(success=False, new_balance=progress.coins, reason="insufficient_funds")
            progress.coins -= amount
            return CoinSpend(success=True, new_balance=progress.coins)

    # ------------------------------------------------------------------
    # Achievements and titles
    # ------------------------------------------------------------------
    def unlock_achievement(self, user_id: UUID | str, achievement_id: str) -> bool:
        """Append ``achievement_id`` and grant its XP reward in the same commit.

        Returns ``False`` when the achievement is unknown or already unlocked.
        """
        achievement = get_achievement(achievement_id)
        if achievement is None:
            return False

        with self.transaction(user_id) as progress:
            if achievement_id in (progress.achievements or []):
                return False
            progress.achievements = [*(progress.achievements or []), achievement_id]
            self.grant_xp(progress.user_id, achievement.xp_reward)

        logger.info(
            "Achievement unlocked",
            user_id=str(progress.user_id),
            achievement_id=achievement_id,
            xp_reward=achievement.xp_reward,
        )
        return True

    def unlock_title(self, user_id: UUID | str, title_id: str) -> bool:
        if get_title(title_id) is None:
            return False

        with self.transaction(user_id) as progress:
            if title_id in (progress.unlocked_titles or []):
                return False
            progress.unlocked_titles = [*(progress.unlocked_titles or []), title_id]

        logger.info("Title unlocked", user_id=str(progress.user_id), title_id=title_id)
        return True

    def set_active_title(self, user_id: UUID | str, title_id: str | None) -> bool:
        """Select the displayed title; ``None`` clears it. Locked titles are refused."""

        with self.transaction(user_id) as progress:
            if title_id is not None and title_id not in (progress.unlocked_titles or []):
                return False
            progress.active_title = title_id
            return True

    # ------------------------------------------------------------------
    # Admin adjustments
    # ------------------------------------------------------------------
    def reset_progress(self, user_id: UUID | str) -> ProgressSnapshot:
        """Zero XP, coins and unlocks; premium state and identity are kept."""

        starter = settings.STARTER_TITLE_ID
        with self.transaction(user_id) as progress:
            progress.xp = 0
            progress.level = 1
            progress.coins = 0
            progress.achievements = []
            progress.unlocked_titles = [starter]
            progress.active_title = starter
            progress.weekly_xp = 0
            progress.monthly_xp = 0

        logger.warning("Progress reset", user_id=str(progress.user_id))
        return ProgressSnapshot.from_record(progress)

    def set_xp(self, user_id: UUID | str, amount: int) -> ProgressSnapshot:
        if amount < 0:
            raise ValidationError("XP must be non-negative", {"xp": amount})

        with self.transaction(user_id) as progress:
            progress.xp = clamp_progress_int(amount)
            progress.level = level_from_xp(progress.xp)

        logger.info("XP set", user_id=str(progress.user_id), xp=progress.xp, level=progress.level)
        return ProgressSnapshot.from_record(progress)

    def set_level(self, user_id: UUID | str, level: int) -> ProgressSnapshot:
        """Set the level by back-solving the minimum XP that reaches it."""

        if level < 1:
            raise ValidationError("Level must be at least 1", {"level": level})
        xp = total_xp_for_level(level)
        if xp != clamp_progress_int(xp):
            raise ValidationError("Level is out of range", {"level": level})
        return self.set_xp(user_id, xp)

    def set_coins(self, user_id: UUID | str, amount: int) -> ProgressSnapshot:
        if amount < 0:
            raise ValidationError("Coins must be non-negative", {"coins": amount})

        with self.transaction(user_id) as progress:
            progress.coins = clamp_progress_int(amount)

        logger.info("Coins set", user_id=str(progress.user_id), coins=progress.coins)
        return ProgressSnapshot.from_record(progress)

    def set_premium(
        self, user_id: UUID | str, is_premium: bool, expires_at: datetime | None = None
    ) -> ProgressSnapshot:
        with self.transaction(user_id) as progress:
            progress.is_premium = is_premium
            progress.premium_expires_at = expires_at if is_premium else None
            user = self.db.get(User, progress.user_id)
            if user is not None:
                user.is_premium = is_premium

        logger.info("Premium updated", user_id=str(progress.user_id), is_premium=is_premium)
        return ProgressSnapshot.from_record(progress)

    # ------------------------------------------------------------------
    # Leaderboards
    # ------------------------------------------------------------------
    @staticmethod
    def _ranking_column(period: LeaderboardPeriod):
        column = _LEADERBOARD_COLUMNS.get(period)
        if column is None:
            raise ValidationError("Unknown leaderboard period", {"period": period})
        return column

    def leaderboard(self, period: LeaderboardPeriod = "weekly", limit: int = 100) -> list[LeaderboardEntry]:
        """Active users ordered by the XP counter of ``period``, highest first.

        Ties are broken by user id so that ranks are stable between calls.
        """
        column = self._ranking_column(period)
        if not 1 <= limit <= MAX_LEADERBOARD_SIZE:
            raise ValidationError("Leaderboard limit out of range", {"limit": limit})

        rows = self.db.execute(
            select(UserProgress, User)
            .join(User, User.id == UserProgress.user_id)
            .where(User.is_active.is_(True))
            .order_by(column.desc(), UserProgress.user_id)
            .limit(limit)
        ).all()
        return [
            LeaderboardEntry(
                rank=position,
                user_id=str(progress.user_id),
                display_name=user.display_name,
                avatar_url=user.avatar_url,
                level=progress.level,
                xp=progress.xp,
                weekly_xp=progress.weekly_xp,
                monthly_xp=progress.monthly_xp,
                active_title=progress.active_title,
                is_premium=bool(progress.is_premium),
            )
            for position, (progress, user) in enumerate(rows, start=1)
        ]

    def rank(self, user_id: UUID | str, period: LeaderboardPeriod = "weekly") -> int | None:
        """Position of ``user_id`` in :meth:`leaderboard` order; ``None`` without a record."""

        column = self._ranking_column(period)
        user_id = as_user_id(user_id)
        score = self.db.execute(
            select(column)
            .join(User, User.id == UserProgress.user_id)
            .where(UserProgress.user_id == user_id, User.is_active.is_(True))
        ).scalar_one_or_none()
        if score is None:
            return None

        ahead = self.db.execute(
            select(func.count())
            .select_from(UserProgress)
            .join(User, User.id == UserProgress.user_id)
            .where(
                User.is_active.is_(True),
                or_(column > score, and_(column == score, UserProgress.user_id < user_id)),
            )
        ).scalar_one()
        return ahead + 1

    # ------------------------------------------------------------------
    # Scheduled resets
    # ------------------------------------------------------------------
    def reset_weekly_xp_for_all(self) -> int:
        return self._bulk_reset(UserProgress.weekly_xp, "weekly_xp")

    def reset_monthly_xp_for_all(self) -> int:
        return self._bulk_reset(UserProgress.monthly_xp, "monthly_xp")

    def _bulk_reset(self, column, name: str) -> int:
        """Zero ``name`` on every row in one UPDATE.

        The per-user process locks are not taken here. Serialization against
        concurrent ledger transactions relies on the row locks the UPDATE
        acquires: a transaction holding ``SELECT ... FOR UPDATE`` on a row
        delays the reset of that row until it commits, and vice versa.
        """
        try:
            result = self.db.execute(
                update(UserProgress).where(column != 0).values({name: 0})
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.cache.invalidate(CACHE_NAMESPACE, prefix="")
        logger.info("Bulk XP counter reset", counter=name, rows=result.rowcount)
        return result.rowcount


__all__ = [
    "CoinSpend",
    "LeaderboardEntry",
    "LeaderboardPeriod",
    "MAX_LEADERBOARD_SIZE",
    "ProgressLedger",
    "ProgressSnapshot",
    "XPGrant",
    "as_user_id",
]
