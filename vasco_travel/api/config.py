# api/config.py
"""Configuration management for the travel planner API."""
import os
from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def _get_int(name, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _get_float(name, default):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _get_bool(name, default=False):
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUTHY


def get_openai_api_key():
    """Get OpenAI API key from environment."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise ValueError("OPENAI_API_KEY not set")
    return api_key


def has_openai_api_key():
    """Whether the generation service is configured."""
    return bool(os.getenv("OPENAI_API_KEY"))


def get_port():
    """Get port configuration."""
    return _get_int("PORT", 5000)


def get_generation_config():
    """Get itinerary generation configuration."""
    return {
        # Model configuration
        "model": os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1"),
        "max_tokens": _get_int("OPENAI_MAX_TOKENS", 4096),
        "temperature": _get_float("OPENAI_TEMPERATURE", 0.7),
        "timeout_seconds": _get_float("OPENAI_TIMEOUT_SECONDS", 60.0),

        # Retry policy: 1 attempt + 1 retry, fixed backoff
        "max_attempts": _get_int("GENERATION_MAX_ATTEMPTS", 2),
        "retry_delay_seconds": _get_float("GENERATION_RETRY_DELAY_SECONDS", 2.0),

        # Output
        "language": os.getenv("ITINERARY_LANGUAGE", "French"),
        "currency": os.getenv("ITINERARY_CURRENCY", "euros (€)"),

        "require_auth": _get_bool("GENERATION_REQUIRE_AUTH"),
    }


def get_rate_limit_config():
    """Get rate limiting configuration."""
    return {
        "guest_max_requests": _get_int("RATE_LIMIT_GUEST_MAX", 3),
        "authenticated_max_requests": _get_int("RATE_LIMIT_AUTH_MAX", 10),
        "window_seconds": _get_int("RATE_LIMIT_WINDOW_SECONDS", 24 * 60 * 60),
        "cooldown_seconds": _get_int("RATE_LIMIT_COOLDOWN_SECONDS", 30),
        "refund_on_failure": _get_bool("RATE_LIMIT_REFUND_ON_FAILURE"),
    }


def get_idempotency_config():
    """Get idempotency cache configuration."""
    return {
        "ttl_seconds": _get_int("IDEMPOTENCY_TTL_SECONDS", 24 * 60 * 60),
    }


def get_store_config():
    """Get shared store configuration."""
    return {
        "redis_url": os.getenv("REDIS_URL", ""),
        "sweep_interval_seconds": _get_int("STORE_SWEEP_INTERVAL_SECONDS", 60 * 60),
    }


def validate_config():
    """Validate numeric settings so misconfiguration fails at startup."""
    generation = get_generation_config()
    rate_limits = get_rate_limit_config()

    if generation["max_attempts"] < 1:
        raise ValueError("GENERATION_MAX_ATTEMPTS must be at least 1")
    if generation["retry_delay_seconds"] < 0:
        raise ValueError("GENERATION_RETRY_DELAY_SECONDS cannot be negative")
    if generation["timeout_seconds"] <= 0:
        raise ValueError("OPENAI_TIMEOUT_SECONDS must be positive")

    for key in ("guest_max_requests", "authenticated_max_requests", "window_seconds"):
        if rate_limits[key] < 1:
            raise ValueError(f"Rate limit setting '{key}' must be at least 1")
    if rate_limits["cooldown_seconds"] < 0:
        raise ValueError("RATE_LIMIT_COOLDOWN_SECONDS cannot be negative")

    if get_idempotency_config()["ttl_seconds"] < 1:
        raise ValueError("IDEMPOTENCY_TTL_SECONDS must be at least 1")
    if get_store_config()["sweep_interval_seconds"] < 1:
        raise ValueError("STORE_SWEEP_INTERVAL_SECONDS must be at least 1")

    return True
