# vasco_travel/api/services/itinerary_service.py
"""Service layer for itinerary generation."""

import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from tenacity import Retrying, retry_if_result, stop_after_attempt, wait_fixed

from vasco_travel.api.config import get_generation_config
from vasco_travel.api.errors import UpstreamServiceError, UpstreamThrottleError
from vasco_travel.api.llm import ItineraryLLM, parse_model_response
from vasco_travel.api.models import TripRequest
from vasco_travel.api.prompts import build_itinerary_prompt
from vasco_travel.api.validators import format_violations, validate_itinerary

logger = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    OK = "ok"
    RETRYABLE = "retryable"
    FATAL = "fatal"


@dataclass
class AttemptOutcome:
    """Result of a single generation attempt."""

    kind: OutcomeKind
    itinerary: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.kind is OutcomeKind.RETRYABLE


@dataclass
class GenerationResult:
    success: bool
    attempts: int
    itinerary: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class ItineraryService:
    """Handles itinerary generation with a bounded retry policy."""

    def __init__(self, llm: ItineraryLLM, max_attempts: int = 2,
                 retry_delay_seconds: float = 2.0,
                 language: str = "French", currency: str = "euros (€)",
                 sleep: Callable[[float], None] = time.sleep):
        self.llm = llm
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.language = language
        self.currency = currency
        self._sleep = sleep

    @classmethod
    def from_config(cls, llm: Optional[ItineraryLLM] = None) -> "ItineraryService":
        config = get_generation_config()
        return cls(
            llm or ItineraryLLM.from_config(),
            max_attempts=config["max_attempts"],
            retry_delay_seconds=config["retry_delay_seconds"],
            language=config["language"],
            currency=config["currency"],
        )

    @property
    def is_configured(self) -> bool:
        return self.llm.is_configured

    def generate(self, trip: TripRequest) -> GenerationResult:
        """Generate a validated itinerary for the given request.

        Args:
            trip: Validated trip request

        Returns:
            GenerationResult with the itinerary payload on success, or the
            last diagnostic message once attempts are exhausted
        """
        system_prompt, user_prompt = build_itinerary_prompt(trip, self.language, self.currency)

        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.retry_delay_seconds),
            retry=retry_if_result(lambda outcome: outcome.retryable),
            retry_error_callback=lambda state: state.outcome.result(),
            sleep=self._sleep,
        )

        logger.info(f"Generating itinerary for {trip.destination}, {trip.days} days")
        outcome = retrying(self._attempt, system_prompt, user_prompt)
        attempts = retrying.statistics.get("attempt_number", 1)

        if outcome.kind is OutcomeKind.OK:
            logger.info(f"✅ Itinerary generated after {attempts} attempt(s)")
            return GenerationResult(success=True, attempts=attempts, itinerary=outcome.itinerary)

        logger.error(f"❌ Itinerary generation failed after {attempts} attempt(s): {outcome.error}")
        return GenerationResult(success=False, attempts=attempts, error=outcome.error)

    def _attempt(self, system_prompt: str, user_prompt: str) -> AttemptOutcome:
        try:
            raw_content = self.llm.complete(system_prompt, user_prompt)
        except UpstreamThrottleError as e:
            return AttemptOutcome(OutcomeKind.FATAL, error=str(e))
        except UpstreamServiceError as e:
            logger.error(f"Generation service error: {e}")
            return AttemptOutcome(OutcomeKind.RETRYABLE, error=str(e))

        parsed = parse_model_response(raw_content)
        if not parsed.success:
            logger.error(f"Parsing failed: {parsed.error}")
            return AttemptOutcome(OutcomeKind.RETRYABLE, error=parsed.error)

        validation = validate_itinerary(parsed.data)
        if not validation.success:
            error = ", ".join(format_violations(validation.violations))
            logger.error(f"Itinerary validation failed: {error}")
            return AttemptOutcome(OutcomeKind.RETRYABLE, error=error)

        return AttemptOutcome(OutcomeKind.OK, itinerary=validation.data.to_payload())
