"""Request protection for the itinerary generation endpoint."""

from .store import KeyValueStore, InMemoryStore, RedisStore, create_store
from .rate_limit import RateLimiter, RateLimitResult, RateLimitTier, get_client_ip
from .idempotency import IdempotencyCache, fingerprint
from .guard import CallerIdentity, ProtectionOptions, RequestGuard
from .sweeper import StoreSweeper

__all__ = [
    'KeyValueStore', 'InMemoryStore', 'RedisStore', 'create_store',
    'RateLimiter', 'RateLimitResult', 'RateLimitTier', 'get_client_ip',
    'IdempotencyCache', 'fingerprint',
    'CallerIdentity', 'ProtectionOptions', 'RequestGuard',
    'StoreSweeper',
]
