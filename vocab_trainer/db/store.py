"""Key-value store backends for learner progress, ledgers and settings."""

from __future__ import annotations

import json
import threading
from functools import lru_cache
from typing import Any, Iterable, Protocol

import redis
from loguru import logger

from vocab_trainer.config import settings
from vocab_trainer.utils.exceptions import UpstreamUnavailable


def _json_default(value: Any) -> Any:
    """Serialize values not supported by ``json`` out of the box."""

    if hasattr(value, "isoformat"):
        return value.isoformat()  # datetime and date objects
    if isinstance(value, set):
        return sorted(value)
    raise TypeError(f"Object of type {type(value)!r} is not JSON serializable")


def word_key(learner_id: str, item_key: str) -> str:
    return f"user:{learner_id}:word:{item_key}"


def word_prefix(learner_id: str) -> str:
    return f"user:{learner_id}:word:"


def ledger_key(learner_id: str) -> str:
    return f"user:{learner_id}:daily_ledger"


def settings_key(learner_id: str) -> str:
    return f"user:{learner_id}:settings"


class KeyValueStore(Protocol):
    """Durable mapping of string keys to JSON documents."""

    def get(self, key: str) -> dict[str, Any] | None:  # pragma: no cover - interface definition
        ...

    def set(self, key: str, value: dict[str, Any]) -> None:  # pragma: no cover - interface definition
        ...

    def mget(self, keys: Iterable[str]) -> list[dict[str, Any] | None]:  # pragma: no cover - interface definition
        ...

    def keys(self, prefix: str) -> list[str]:  # pragma: no cover - interface definition
        ...


class MemoryStore:
    """In-process store used for development and tests.

    Values are kept JSON-encoded so callers never share mutable state with
    the store, matching what a round-trip through Redis would give them.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, str] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            payload = self._data.get(key)
        return json.loads(payload) if payload is not None else None

    def set(self, key: str, value: dict[str, Any]) -> None:
        payload = json.dumps(value, default=_json_default)
        with self._lock:
            self._data[key] = payload

    def mget(self, keys: Iterable[str]) -> list[dict[str, Any] | None]:
        return [self.get(key) for key in keys]

    def keys(self, prefix: str) -> list[str]:
        with self._lock:
            return sorted(key for key in self._data if key.startswith(prefix))

    def clear(self) -> None:
        """Reset the store for test environments."""

        with self._lock:
            self._data.clear()


class RedisStore:
    """Store writing JSON documents to Redis."""

    def __init__(self, redis_url: str, *, client: Any | None = None) -> None:
        self._redis = client or redis.Redis.from_url(redis_url, decode_responses=True)

    def get(self, key: str) -> dict[str, Any] | None:
        try:
            value = self._redis.get(key)
        except redis.RedisError as exc:
            raise UpstreamUnavailable("Progress store read failed", {"key": key}) from exc
        return json.loads(value) if value is not None else None

    def set(self, key: str, value: dict[str, Any]) -> None:
        payload = json.dumps(value, default=_json_default)
        try:
            self._redis.set(key, payload)
        except redis.RedisError as exc:
            raise UpstreamUnavailable("Progress store write failed", {"key": key}) from exc

    def mget(self, keys: Iterable[str]) -> list[dict[str, Any] | None]:
        keys = list(keys)
        if not keys:
            return []
        try:
            values = self._redis.mget(keys)
        except redis.RedisError as exc:
            raise UpstreamUnavailable("Progress store read failed", {"keys": len(keys)}) from exc
        return [json.loads(value) if value is not None else None for value in values]

    def keys(self, prefix: str) -> list[str]:
        try:
            return sorted(self._redis.scan_iter(match=f"{prefix}*"))
        except redis.RedisError as exc:
            raise UpstreamUnavailable("Progress store scan failed", {"prefix": prefix}) from exc


def build_store(redis_url: str | None) -> KeyValueStore:
    """Return a Redis store when a URL is configured, an in-memory one otherwise."""

    if redis_url:
        return RedisStore(redis_url)
    logger.warning("REDIS_URL not configured, progress is kept in memory only")
    return MemoryStore()


@lru_cache()
def get_store() -> KeyValueStore:
    """Return the process-wide store instance."""

    return build_store(str(settings.REDIS_URL) if settings.REDIS_URL else None)


__all__ = [
    "KeyValueStore",
    "MemoryStore",
    "RedisStore",
    "build_store",
    "get_store",
    "ledger_key",
    "settings_key",
    "word_key",
    "word_prefix",
]
