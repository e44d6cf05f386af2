import json

import pytest

from main import create_app
from vasco_travel.api.protection import (
    IdempotencyCache,
    InMemoryStore,
    ProtectionOptions,
    RateLimiter,
    RateLimitTier,
)
from vasco_travel.api.services.itinerary_service import ItineraryService

DAY = 24 * 60 * 60


class FakeClock:
    """Controllable replacement for time.time()."""

    def __init__(self, start=1_790_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeLLM:
    """Scripted stand-in for ItineraryLLM: returns or raises queued items in order."""

    model = "fake-model"
    max_tokens = 4096

    def __init__(self, responses=None, configured=True):
        self.responses = list(responses or [])
        self.calls = []
        self.configured = configured

    @property
    def is_configured(self):
        return self.configured

    def queue(self, *items):
        self.responses.extend(items)

    def complete(self, system_prompt, user_prompt, max_tokens=None):
        self.calls.append((system_prompt, user_prompt))
        if not self.responses:
            raise AssertionError("Unexpected call to the generation service")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def make_activity(n=1):
    return {
        "time": f"{8 + n:02d}:00",
        "title": f"Activity {n}",
        "description": "A walk through the old town",
        "location": "Alfama",
        "duration": "2h",
        "costEstimate": "10-15€",
    }


def make_itinerary(days=3, destination="Lisbonne, Portugal", activities_per_day=2):
    return {
        "destination": destination,
        "days": [
            {
                "day": d,
                "theme": f"Day {d} discoveries",
                "activities": [make_activity(n) for n in range(1, activities_per_day + 1)],
                "meals": {
                    "lunch": {"name": "Time Out Market", "type": "Food hall", "costEstimate": "15-20€"},
                },
                "accommodation": {
                    "name": "Casa do Bairro",
                    "type": "Guesthouse",
                    "priceRange": "80-120€/night",
                },
                "transportTip": "Take tram 28 early",
            }
            for d in range(1, days + 1)
        ],
        "budgetSummary": {
            "accommodation": "240-360€",
            "food": "90-150€",
            "activities": "50-80€",
            "transport": "30-50€",
            "total": "410-640€",
        },
        "tips": ["Wear comfortable shoes", "Try pastéis de nata"],
    }


def itinerary_text(**kwargs):
    return json.dumps(make_itinerary(**kwargs))


def make_trip(**overrides):
    trip = {
        "destination": "Lisbonne",
        "days": 3,
        "budget": "balanced",
        "interests": ["culture", "gastronomie"],
        "pace": "balanced",
    }
    trip.update(overrides)
    return trip


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def itinerary_service(fake_llm, sleeps):
    return ItineraryService(fake_llm, max_attempts=2, retry_delay_seconds=2.0, sleep=sleeps.append)


@pytest.fixture
def rate_limit_store():
    return InMemoryStore()


@pytest.fixture
def rate_limiter(rate_limit_store, clock):
    return RateLimiter(
        rate_limit_store,
        guest_tier=RateLimitTier(3, DAY),
        authenticated_tier=RateLimitTier(10, DAY),
        cooldown_seconds=30,
        clock=clock,
    )


@pytest.fixture
def idempotency_cache(clock):
    return IdempotencyCache(InMemoryStore(), ttl_seconds=DAY, clock=clock)


@pytest.fixture
def make_app(itinerary_service, rate_limiter, idempotency_cache):
    def _make(options=None, service=None):
        app = create_app(
            itinerary_service=service or itinerary_service,
            rate_limiter=rate_limiter,
            idempotency_cache=idempotency_cache,
            protection_options=options or ProtectionOptions(),
            start_sweeper=False,
        )
        app.config["TESTING"] = True
        return app
    return _make


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()
