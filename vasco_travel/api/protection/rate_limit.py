# vasco_travel/api/protection/rate_limit.py
"""Per-identifier rate limiting for itinerary generation.

Two independent ceilings apply to every identifier (IP address or user id):

* a daily quota over a fixed window (guest: 3, authenticated: 10 per 24h)
* a cooldown between two consecutive requests (30s)

The guest/authenticated tier is a parameter of :meth:`RateLimiter.check`, not
part of the stored key.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from vasco_travel.api.config import get_rate_limit_config
from vasco_travel.api.protection.store import KeyValueStore

logger = logging.getLogger(__name__)


def to_iso(timestamp: float) -> str:
    """Epoch seconds -> ISO-8601 UTC with milliseconds, e.g. 2026-10-18T09:00:00.000Z"""
    dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class RateLimitTier:
    max_requests: int
    window_seconds: int


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float
    last_request: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RateLimitEntry":
        return cls(
            count=int(data["count"]),
            reset_at=float(data["reset_at"]),
            last_request=float(data["last_request"]),
        )


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float
    limit: int
    retry_after: Optional[int] = None

    @property
    def reset_at_iso(self) -> str:
        return to_iso(self.reset_at)


class RateLimiter:
    """Fixed-window limiter with a per-identifier cooldown."""

    def __init__(self, store: KeyValueStore,
                 guest_tier: RateLimitTier,
                 authenticated_tier: RateLimitTier,
                 cooldown_seconds: float = 30,
                 clock: Callable[[], float] = time.time):
        self.store = store
        self.guest_tier = guest_tier
        self.authenticated_tier = authenticated_tier
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock

    @classmethod
    def from_config(cls, store: KeyValueStore, clock: Callable[[], float] = time.time) -> "RateLimiter":
        config = get_rate_limit_config()
        window = config["window_seconds"]
        return cls(
            store,
            guest_tier=RateLimitTier(config["guest_max_requests"], window),
            authenticated_tier=RateLimitTier(config["authenticated_max_requests"], window),
            cooldown_seconds=config["cooldown_seconds"],
            clock=clock,
        )

    def tier_for(self, is_authenticated: bool) -> RateLimitTier:
        return self.authenticated_tier if is_authenticated else self.guest_tier

    def check(self, identifier: str, is_authenticated: bool = False) -> RateLimitResult:
        """Check and, if allowed, consume one request for ``identifier``.

        Args:
            identifier: IP address or user id
            is_authenticated: Selects the authenticated tier

        Returns:
            RateLimitResult; ``retry_after`` is set on denial
        """
        now = self.clock()
        tier = self.tier_for(is_authenticated)

        raw = self.store.get(identifier)
        entry = RateLimitEntry.from_dict(raw) if raw else None

        # Fixed window: start a fresh one when absent or expired
        if entry is None or now > entry.reset_at:
            entry = RateLimitEntry(count=0, reset_at=now + tier.window_seconds, last_request=0)
            self._save(identifier, entry, now)

        elapsed = now - entry.last_request
        if entry.last_request > 0 and elapsed < self.cooldown_seconds:
            retry_after = math.ceil(self.cooldown_seconds - elapsed)
            logger.warning(f"Cooldown active for {identifier}, retry in {retry_after}s")
            return RateLimitResult(
                allowed=False,
                remaining=max(0, tier.max_requests - entry.count),
                reset_at=entry.reset_at,
                limit=tier.max_requests,
                retry_after=retry_after,
            )

        if entry.count >= tier.max_requests:
            logger.warning(f"Rate limit exceeded for {identifier} ({entry.count}/{tier.max_requests})")
            return RateLimitResult(
                allowed=False,
                remaining=0,
                reset_at=entry.reset_at,
                limit=tier.max_requests,
                retry_after=max(1, math.ceil(entry.reset_at - now)),
            )

        entry.count += 1
        entry.last_request = now
        self._save(identifier, entry, now)

        return RateLimitResult(
            allowed=True,
            remaining=tier.max_requests - entry.count,
            reset_at=entry.reset_at,
            limit=tier.max_requests,
        )

    def refund(self, identifier: str) -> None:
        """Give back one consumed request in the current window."""
        now = self.clock()
        raw = self.store.get(identifier)
        if not raw:
            return
        entry = RateLimitEntry.from_dict(raw)
        if now > entry.reset_at or entry.count == 0:
            return
        entry.count -= 1
        self._save(identifier, entry, now)
        logger.info(f"Refunded one request to {identifier} ({entry.count} used)")

    def _save(self, identifier: str, entry: RateLimitEntry, now: float) -> None:
        self.store.set(identifier, entry.to_dict(), ttl=entry.reset_at - now)

    def sweep(self) -> int:
        """Remove entries whose window has expired."""
        now = self.clock()
        removed = self.store.sweep(lambda value: now > float(value["reset_at"]))
        if removed:
            logger.info(f"Cleaned up {removed} expired rate limit entries")
        return removed

    def get_stats(self) -> Dict[str, Any]:
        return {
            "tracked_identifiers": self.store.size(),
            "config": {
                "guest_max_requests": self.guest_tier.max_requests,
                "authenticated_max_requests": self.authenticated_tier.max_requests,
                "window_seconds": self.guest_tier.window_seconds,
                "cooldown_seconds": self.cooldown_seconds,
            },
        }


def get_client_ip(headers) -> str:
    """Resolve the caller's address from proxy headers.

    Tries ``X-Forwarded-For`` (first hop), ``X-Real-IP`` and Cloudflare's
    ``CF-Connecting-IP`` in that order, falling back to ``"unknown"``.
    """
    forwarded = headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    cf_ip = headers.get("CF-Connecting-IP")
    if cf_ip:
        return cf_ip

    return "unknown"
