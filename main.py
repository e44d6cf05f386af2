"""
Vasco Travel – main application entry point

* Flask app exposing the itinerary generation API under `/api`.
* Rate limiting and idempotency state live in injected stores: in-memory by
  default, Redis when `REDIS_URL` is set.
* A daemon thread sweeps expired rate-limit and idempotency entries.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from vasco_travel.api.config import (  # noqa: E402
    get_generation_config,
    get_port,
    get_rate_limit_config,
    get_store_config,
    validate_config,
)
from vasco_travel.api.protection import (  # noqa: E402
    IdempotencyCache,
    ProtectionOptions,
    RateLimiter,
    RequestGuard,
    StoreSweeper,
    create_store,
)
from vasco_travel.api.services.itinerary_service import ItineraryService  # noqa: E402
from vasco_travel.routes import create_travel_blueprint  # noqa: E402


def create_app(itinerary_service=None, rate_limiter=None, idempotency_cache=None,
               protection_options=None, start_sweeper=True):
    """Build the Flask app; every collaborator can be injected for tests."""
    validate_config()

    app = Flask(__name__)

    flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
    if "FLASK_SECRET_KEY" not in os.environ:
        logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
    app.secret_key = flask_secret_key

    app.config.update(
        SESSION_COOKIE_SECURE=False,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=86400,
    )

    # CORS for local dev / cross‑origin front‑end requests
    CORS(app, origins="*", supports_credentials=True)

    # ----------------------------------------------------------------------- #
    # Protection layer & generation
    # ----------------------------------------------------------------------- #
    itinerary_service = itinerary_service or ItineraryService.from_config()
    rate_limiter = rate_limiter or RateLimiter.from_config(create_store("rate_limit"))
    idempotency_cache = idempotency_cache or IdempotencyCache.from_config(create_store("idempotency"))

    guard = RequestGuard(
        rate_limiter,
        idempotency_cache,
        refund_on_failure=get_rate_limit_config()["refund_on_failure"],
    )
    if protection_options is None:
        protection_options = ProtectionOptions(require_auth=get_generation_config()["require_auth"])

    app.register_blueprint(create_travel_blueprint(itinerary_service, guard, protection_options))

    sweeper = StoreSweeper(
        [rate_limiter, idempotency_cache],
        interval_seconds=get_store_config()["sweep_interval_seconds"],
    )
    if start_sweeper:
        sweeper.start()
    app.extensions["store_sweeper"] = sweeper

    if not itinerary_service.is_configured:
        logger.warning("⚠️ OPENAI_API_KEY is not set - itinerary generation will return 503")

    # ----------------------------------------------------------------------- #
    # Diagnostic routes (optional)
    # ----------------------------------------------------------------------- #
    @app.route("/debug")
    def debug():
        """Simple JSON diagnostics endpoint."""
        return {
            "status": "ok",
            "generation_configured": itinerary_service.is_configured,
            "rate_limiter": rate_limiter.get_stats(),
            "endpoints": {
                "generate": "/api/generate-itinerary",
                "llm_check": "/api/test-llm",
                "health": "/api/health",
            },
        }

    return app


# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    app = create_app()
    port = get_port()
    logger.info("Starting travel app on http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=False)
