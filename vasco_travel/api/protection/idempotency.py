# vasco_travel/api/protection/idempotency.py
"""Idempotency cache for itinerary generation.

Identical generation requests within the TTL return the stored itinerary
instead of calling (and paying for) the model again.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel

from vasco_travel.api.config import get_idempotency_config
from vasco_travel.api.protection.store import KeyValueStore

logger = logging.getLogger(__name__)


def fingerprint(request: Any) -> str:
    """Deterministic key for a normalized request.

    SHA-256 over canonical JSON (sorted keys, compact separators), so key
    insertion order in the source never changes the result.
    """
    if isinstance(request, BaseModel):
        request = request.model_dump(by_alias=True, exclude_none=True)
    canonical = json.dumps(request, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass
class IdempotencyCheck:
    exists: bool
    result: Optional[Any] = None


class IdempotencyCache:
    """Maps request fingerprints to previously generated results."""

    def __init__(self, store: KeyValueStore, ttl_seconds: float = 24 * 60 * 60,
                 clock: Callable[[], float] = time.time):
        self.backend = store
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    @classmethod
    def from_config(cls, store: KeyValueStore, clock: Callable[[], float] = time.time) -> "IdempotencyCache":
        return cls(store, ttl_seconds=get_idempotency_config()["ttl_seconds"], clock=clock)

    def check(self, key: str) -> IdempotencyCheck:
        entry = self.backend.get(key)
        if entry is None:
            return IdempotencyCheck(exists=False)

        if self.clock() > entry["expires_at"]:
            self.backend.delete(key)
            return IdempotencyCheck(exists=False)

        return IdempotencyCheck(exists=True, result=entry["result"])

    def store(self, key: str, result: Any) -> None:
        now = self.clock()
        self.backend.set(
            key,
            {"result": result, "created_at": now, "expires_at": now + self.ttl_seconds},
            ttl=self.ttl_seconds,
        )
        logger.debug(f"Cached result for key {key[:12]}...")

    def sweep(self) -> int:
        now = self.clock()
        removed = self.backend.sweep(lambda entry: now > entry["expires_at"])
        if removed:
            logger.info(f"Cleaned up {removed} expired idempotency entries")
        return removed
