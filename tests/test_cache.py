"""Tests for the snapshot and calendar cache."""
from __future__ import annotations

import fnmatch

import redis

from questboard.utils.cache import CacheBackend, build_cache_key


class SharedRedis:
    """Minimal in-memory stand-in for the Redis commands the cache issues."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, name: str) -> str | None:
        return self.data.get(name)

    def set(self, name: str, value: str, ex: int | None = None) -> None:
        self.data[name] = value

    def delete(self, name: str) -> None:
        self.data.pop(name, None)

    def scan_iter(self, pattern: str):
        return [name for name in list(self.data) if fnmatch.fnmatch(name, pattern)]

    def flushdb(self) -> None:
        self.data.clear()


class BrokenRedis(SharedRedis):
    def get(self, name: str) -> str | None:
        raise redis.ConnectionError("connection refused")

    def set(self, name: str, value: str, ex: int | None = None) -> None:
        raise redis.ConnectionError("connection refused")


def test_invalidation_is_visible_to_other_workers() -> None:
    shared = SharedRedis()
    worker_a = CacheBackend(client=shared)
    worker_b = CacheBackend(client=shared)

    worker_b.set("progress", "user-1", {"coins": 50}, ttl_seconds=60)
    assert worker_a.get("progress", "user-1") == {"coins": 50}

    worker_a.invalidate("progress", key="user-1")

    assert worker_b.get("progress", "user-1") is None


def test_prefix_invalidation_spans_workers() -> None:
    shared = SharedRedis()
    worker_a = CacheBackend(client=shared)
    worker_b = CacheBackend(client=shared)
    worker_b.set("activity_calendar", "u1:abc", [1], ttl_seconds=60)
    worker_b.set("activity_calendar", "u2:abc", [2], ttl_seconds=60)

    worker_a.invalidate("activity_calendar", prefix="u1:")

    assert worker_b.get("activity_calendar", "u1:abc") is None
    assert worker_b.get("activity_calendar", "u2:abc") == [2]


def test_redis_failure_falls_back_to_local_store() -> None:
    cache = CacheBackend(client=BrokenRedis())

    assert cache.get("progress", "user-1") is None
    assert not cache.uses_redis

    cache.set("progress", "user-1", {"xp": 10}, ttl_seconds=60)
    assert cache.get("progress", "user-1") == {"xp": 10}
    assert len(cache.local) == 1


def test_non_positive_ttl_is_not_stored() -> None:
    cache = CacheBackend()

    cache.set("progress", "user-1", {"xp": 10}, ttl_seconds=0)

    assert cache.get("progress", "user-1") is None


def test_build_cache_key_ignores_argument_order() -> None:
    assert build_cache_key(days=7, today="2026-10-21") == build_cache_key(today="2026-10-21", days=7)
    assert build_cache_key(days=7) != build_cache_key(days=8)
