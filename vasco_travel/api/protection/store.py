# vasco_travel/api/protection/store.py
"""Key-value stores backing the rate limiter and the idempotency cache.

Values are JSON-serializable dicts so the same components can run against a
process-local dict or a shared Redis instance.
"""

from __future__ import annotations

import json
import logging
import math
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

import redis

from vasco_travel.api.config import get_store_config

logger = logging.getLogger(__name__)

ExpiryCheck = Callable[[Dict[str, Any]], bool]


class KeyValueStore(ABC):
    """Minimal store interface the protection components depend on."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def set(self, key: str, value: Dict[str, Any], ttl: Optional[float] = None) -> None:
        """Insert or overwrite ``key``.

        ``ttl`` is a hint in seconds; stores that cannot expire keys on their
        own rely on :meth:`sweep`.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def sweep(self, is_expired: ExpiryCheck) -> int:
        """Delete every entry for which ``is_expired(value)`` is true.

        Returns the number of deleted entries.
        """

    @abstractmethod
    def size(self) -> int:
        ...


class InMemoryStore(KeyValueStore):
    """Thread-safe dict store for a single process."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}
        self.lock = threading.Lock()

    def get(self, key):
        with self.lock:
            value = self._data.get(key)
            return dict(value) if value is not None else None

    def set(self, key, value, ttl=None):
        with self.lock:
            self._data[key] = dict(value)

    def delete(self, key):
        with self.lock:
            self._data.pop(key, None)

    def sweep(self, is_expired):
        with self.lock:
            keys = list(self._data.keys())

        removed = 0
        for key in keys:
            # Entry may have been rewritten since the snapshot; re-check under lock
            with self.lock:
                value = self._data.get(key)
                if value is not None and is_expired(value):
                    del self._data[key]
                    removed += 1
        return removed

    def size(self):
        with self.lock:
            return len(self._data)


class RedisStore(KeyValueStore):
    """Store shared across app instances, backed by Redis."""

    def __init__(self, client: "redis.Redis", prefix: str):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str) -> "RedisStore":
        return cls(redis.from_url(url, decode_responses=True), prefix)

    def _key(self, key):
        return f"{self.prefix}:{key}"

    def get(self, key):
        data = self.client.get(self._key(key))
        if not data:
            return None
        return json.loads(data)

    def set(self, key, value, ttl=None):
        expires = math.ceil(ttl) if ttl and ttl > 0 else None
        self.client.set(self._key(key), json.dumps(value), ex=expires)

    def delete(self, key):
        self.client.delete(self._key(key))

    def sweep(self, is_expired):
        removed = 0
        for full_key in self.client.scan_iter(match=f"{self.prefix}:*"):
            data = self.client.get(full_key)
            if data and is_expired(json.loads(data)):
                self.client.delete(full_key)
                removed += 1
        return removed

    def size(self):
        return sum(1 for _ in self.client.scan_iter(match=f"{self.prefix}:*"))


def create_store(namespace: str) -> KeyValueStore:
    """Build the configured store for ``namespace`` (Redis if REDIS_URL is set)."""
    redis_url = get_store_config()["redis_url"]
    if redis_url:
        logger.info(f"Using Redis store for '{namespace}'")
        return RedisStore.from_url(redis_url, prefix=f"vasco:{namespace}")

    logger.info(f"Using in-memory store for '{namespace}'")
    return InMemoryStore()
