"""Read-through cache for progress snapshots and activity calendars.

Redis is the shared store while it answers. The in-process store only takes
over once Redis is unconfigured or has failed, so one worker's invalidation is
never shadowed by another worker's private copy.
"""

from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any

import redis
from loguru import logger

from questboard.config import settings


def _json_default(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, set):
        return sorted(value)
    if hasattr(value, "hex") and callable(getattr(value, "hex")):
        return value.hex()
    raise TypeError(f"Object of type {type(value)!r} is not JSON serializable")


def build_cache_key(**components: Any) -> str:
    """Hash keyword components into a key that ignores argument order."""

    payload = json.dumps(components, sort_keys=True, default=_json_default)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


class LocalStore:
    """Thread-safe in-process store of JSON payloads with per-entry expiry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[float, str]] = {}

    def get(self, name: str) -> str | None:
        with self._lock:
            entry = self._entries.get(name)
            if entry is None:
                return None
            expires_at, payload = entry
            if expires_at < time.monotonic():
                del self._entries[name]
                return None
            return payload

    def set(self, name: str, payload: str, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[name] = (time.monotonic() + ttl_seconds, payload)

    def delete(self, name: str) -> None:
        with self._lock:
            self._entries.pop(name, None)

    def delete_prefix(self, prefix: str) -> None:
        with self._lock:
            for name in [name for name in self._entries if name.startswith(prefix)]:
                del self._entries[name]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class CacheBackend:
    """Namespaced JSON cache backed by Redis, or by :class:`LocalStore` without it.

    The first ``redis.RedisError`` switches the process to the local store for
    good; callers never see cache failures.
    """

    def __init__(self, redis_url: str | None = None, *, client: redis.Redis | None = None) -> None:
        self.local = LocalStore()
        if client is None and redis_url:
            client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._redis: redis.Redis | None = client

    @property
    def uses_redis(self) -> bool:
        return self._redis is not None

    @staticmethod
    def _name(namespace: str, key: str) -> str:
        return f"{namespace}:{key}"

    def _disable_redis(self, error: redis.RedisError) -> None:
        logger.warning("Redis cache unavailable, falling back to the local store", error=str(error))
        self._redis = None

    def get(self, namespace: str, key: str) -> Any | None:
        name = self._name(namespace, key)
        if self._redis is not None:
            try:
                payload = self._redis.get(name)
            except redis.RedisError as exc:
                self._disable_redis(exc)
            else:
                return None if payload is None else json.loads(payload)
        payload = self.local.get(name)
        return None if payload is None else json.loads(payload)

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        name = self._name(namespace, key)
        payload = json.dumps(value, default=_json_default)
        if self._redis is not None:
            try:
                self._redis.set(name, payload, ex=ttl_seconds)
                return
            except redis.RedisError as exc:
                self._disable_redis(exc)
        self.local.set(name, payload, ttl_seconds)

    def invalidate(self, namespace: str, *, key: str | None = None, prefix: str | None = None) -> None:
        """Drop one ``key`` or every key starting with ``prefix`` in ``namespace``."""

        if key is None and prefix is None:
            return
        if key is not None:
            name = self._name(namespace, key)
            if self._redis is not None:
                try:
                    self._redis.delete(name)
                except redis.RedisError as exc:
                    self._disable_redis(exc)
            self.local.delete(name)
            return

        pattern = self._name(namespace, prefix)
        if self._redis is not None:
            try:
                for name in self._redis.scan_iter(f"{pattern}*"):
                    self._redis.delete(name)
            except redis.RedisError as exc:
                self._disable_redis(exc)
        self.local.delete_prefix(pattern)

    def clear(self, *, include_redis: bool = False) -> None:
        """Empty the local store and, with ``include_redis``, the Redis database."""

        self.local.clear()
        if include_redis and self._redis is not None:
            try:
                self._redis.flushdb()
            except redis.RedisError as exc:
                self._disable_redis(exc)


cache_backend = CacheBackend(str(settings.REDIS_URL) if settings.REDIS_URL else None)


__all__ = ["CacheBackend", "LocalStore", "build_cache_key", "cache_backend"]
