# vasco_travel/api/errors.py
"""Error taxonomy for the itinerary generation API.

``ApiError`` subclasses are rendered to JSON by the travel blueprint. The
upstream errors are raised by the LLM client and consumed by the generation
retry loop; they never reach the caller directly.
"""

from typing import Any, Dict, List, Optional


class ApiError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None,
                 headers: Optional[Dict[str, str]] = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details
        self.headers = headers or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class RequestValidationError(ApiError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Invalid data"

    def __init__(self, violations: Optional[List] = None, message: Optional[str] = None,
                 details: Optional[str] = None):
        self.violations = list(violations or [])
        if details is None and self.violations:
            details = ", ".join(str(v) for v in self.violations)
        super().__init__(message, details=details)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["violations"] = [v.to_dict() for v in self.violations]
        return payload


class AuthRequiredError(ApiError):
    status_code = 401
    code = "AUTH_REQUIRED"
    message = "Authentication required"


class RateLimitExceededError(ApiError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"
    message = "Too many requests"

    def __init__(self, result, message: Optional[str] = None):
        headers = {
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": result.reset_at_iso,
        }
        if result.retry_after:
            headers["Retry-After"] = str(result.retry_after)
        super().__init__(message, headers=headers)
        self.result = result

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload.update({
            "remaining": self.result.remaining,
            "resetAt": self.result.reset_at_iso,
            "retryAfter": self.result.retry_after,
        })
        return payload


class GenerationFailedError(ApiError):
    status_code = 500
    code = "GENERATION_FAILED"
    message = "Could not generate the itinerary. Please try again in a few minutes."


class ServiceUnavailableError(ApiError):
    status_code = 503
    code = "API_KEY_MISSING"
    message = "Service temporarily unavailable"


class InternalError(ApiError):
    pass


# ---------------------------------------------------------------------------
# Upstream (generation service) errors
# ---------------------------------------------------------------------------

class UpstreamError(Exception):
    """Base class for failures of the external generation service."""


class UpstreamServiceError(UpstreamError):
    """Transport, timeout or provider-side failure worth retrying."""


class UpstreamThrottleError(UpstreamError):
    """The provider reports it is overloaded; retrying would make it worse."""
