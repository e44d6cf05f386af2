# vasco_travel/routes/travel.py
"""Travel routes and blueprint configuration."""

import logging

from flask import Blueprint, jsonify, request, session
from werkzeug.exceptions import HTTPException

from vasco_travel.api.errors import (
    ApiError,
    GenerationFailedError,
    InternalError,
    RequestValidationError,
    ServiceUnavailableError,
    UpstreamError,
)
from vasco_travel.api.protection import CallerIdentity, ProtectionOptions, get_client_ip
from vasco_travel.api.validators import validate_trip_request

logger = logging.getLogger(__name__)


def resolve_caller():
    """Authenticated user id from the session, else the client's address."""
    user_id = session.get("user_id")
    if user_id:
        return CallerIdentity(identifier=str(user_id), is_authenticated=True)
    return CallerIdentity(identifier=get_client_ip(request.headers))


def create_travel_blueprint(itinerary_service, guard, options=None):
    """Create and configure the travel blueprint.

    Args:
        itinerary_service: ItineraryService used for generation
        guard: RequestGuard combining idempotency and rate limiting
        options: ProtectionOptions for the generation route

    Returns:
        Configured Flask Blueprint
    """
    options = options or ProtectionOptions()

    travel_bp = Blueprint("travel", __name__, url_prefix="/api")

    @travel_bp.errorhandler(ApiError)
    def handle_api_error(error):
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        for header, value in error.headers.items():
            response.headers[header] = value
        return response

    @travel_bp.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return error
        logger.exception(f"❌ Unexpected error: {error}")
        return handle_api_error(InternalError())

    @travel_bp.route("/generate-itinerary", methods=["POST"])
    def generate_itinerary():
        """Validate, protect, generate, cache."""
        if not itinerary_service.is_configured:
            raise ServiceUnavailableError()

        body = request.get_json(silent=True)
        if body is None:
            raise RequestValidationError(
                message="Malformed request body",
                details="Request body must be valid JSON",
            )

        validation = validate_trip_request(body)
        if not validation.success:
            raise RequestValidationError(validation.violations)
        trip = validation.data

        caller = resolve_caller()
        protection = guard.protect(caller, trip, options)

        if protection.cached:
            return jsonify({
                "success": True,
                "itinerary": protection.cached_result,
                "cached": True,
            })

        result = itinerary_service.generate(trip)
        if not result.success:
            guard.release(caller, protection)
            raise GenerationFailedError(details=result.error)

        guard.cache_result(protection.idempotency_key, result.itinerary)

        response = jsonify({
            "success": True,
            "itinerary": result.itinerary,
            "cached": False,
        })
        if protection.rate_limit is not None:
            response.headers["X-RateLimit-Remaining"] = str(protection.rate_limit.remaining)
            response.headers["X-RateLimit-Reset"] = protection.rate_limit.reset_at_iso
        return response

    @travel_bp.route("/generate-itinerary", methods=["GET"])
    def generation_status():
        """Report whether the generation service is configured."""
        llm = itinerary_service.llm
        return jsonify({
            "status": "ok" if itinerary_service.is_configured else "missing_api_key",
            "model": llm.model,
            "maxTokens": llm.max_tokens,
        })

    @travel_bp.route("/test-llm")
    def test_llm():
        """Send a one-line prompt to check connectivity with the model."""
        if not itinerary_service.is_configured:
            raise ServiceUnavailableError()
        try:
            text = itinerary_service.llm.complete(
                "You are a connectivity check.",
                'Reply only with "Vasco is working!" in one short sentence.',
                max_tokens=100,
            )
        except UpstreamError as e:
            logger.error(f"LLM connectivity check failed: {e}")
            return jsonify({"success": False, "error": "Generation service unreachable"}), 500
        return jsonify({"success": True, "response": text})

    @travel_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "travel"})

    return travel_bp


__all__ = ['create_travel_blueprint', 'resolve_caller']
