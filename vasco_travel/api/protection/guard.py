# vasco_travel/api/protection/guard.py
"""Route protection combining idempotency and rate limiting."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from vasco_travel.api.errors import AuthRequiredError, RateLimitExceededError
from vasco_travel.api.protection.idempotency import IdempotencyCache, fingerprint
from vasco_travel.api.protection.rate_limit import RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    """Who is calling: a user id when logged in, otherwise a network address."""

    identifier: str
    is_authenticated: bool = False


@dataclass
class ProtectionOptions:
    require_auth: bool = False
    skip_rate_limit: bool = False
    skip_idempotency: bool = False


@dataclass
class ProtectionResult:
    idempotency_key: str
    cached_result: Optional[Any] = None
    rate_limit: Optional[RateLimitResult] = None

    @property
    def cached(self) -> bool:
        return self.cached_result is not None


def rate_limit_message(result: RateLimitResult, now: float) -> str:
    """User-facing explanation of a rate-limit denial."""
    if result.remaining == 0:
        hours = max(1, math.ceil((result.reset_at - now) / 3600))
        return f"Daily generation limit reached. Try again in {hours} hour{'s' if hours > 1 else ''}."
    seconds = result.retry_after or 0
    return f"Please wait {seconds} second{'s' if seconds != 1 else ''} between requests."


class RequestGuard:
    """Runs the idempotency lookup, then the rate limit, for one request.

    An idempotency hit short-circuits before the rate limiter so a repeated
    identical request never costs quota.
    """

    def __init__(self, rate_limiter: RateLimiter, idempotency_cache: IdempotencyCache,
                 refund_on_failure: bool = False):
        self.rate_limiter = rate_limiter
        self.idempotency_cache = idempotency_cache
        self.refund_on_failure = refund_on_failure

    def protect(self, caller: CallerIdentity, request_data: Any,
                options: Optional[ProtectionOptions] = None) -> ProtectionResult:
        """Check a validated request.

        Raises:
            AuthRequiredError: ``require_auth`` set and caller is a guest
            RateLimitExceededError: quota or cooldown exhausted
        """
        options = options or ProtectionOptions()

        if options.require_auth and not caller.is_authenticated:
            raise AuthRequiredError()

        key = fingerprint(request_data)

        if not options.skip_idempotency:
            hit = self.idempotency_cache.check(key)
            if hit.exists:
                logger.info(f"✅ Returning cached result (idempotency key {key[:12]}...)")
                return ProtectionResult(idempotency_key=key, cached_result=hit.result)

        rate_limit = None
        if not options.skip_rate_limit:
            rate_limit = self.rate_limiter.check(caller.identifier, caller.is_authenticated)
            if not rate_limit.allowed:
                message = rate_limit_message(rate_limit, self.rate_limiter.clock())
                raise RateLimitExceededError(rate_limit, message=message)

        return ProtectionResult(idempotency_key=key, rate_limit=rate_limit)

    def cache_result(self, key: str, result: Any) -> None:
        self.idempotency_cache.store(key, result)

    def release(self, caller: CallerIdentity, protection: ProtectionResult) -> None:
        """Called after a terminal generation failure.

        Quota stays consumed unless refunds are enabled.
        """
        if self.refund_on_failure and protection.rate_limit is not None:
            self.rate_limiter.refund(caller.identifier)
