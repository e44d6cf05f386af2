"""LLM helper functions for Vasco Travel.

Wraps the OpenAI Chat Completions API behind a tiny ``complete()`` call and
turns provider exceptions into the upstream error types the generation retry
loop understands. Response parsing lives here too, as two isolated
strategies: strict JSON, then the largest ``{...}`` block.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import openai
from openai import OpenAI

from vasco_travel.api.config import get_generation_config, get_openai_api_key, has_openai_api_key
from vasco_travel.api.errors import UpstreamServiceError, UpstreamThrottleError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# OpenAI client
# ---------------------------------------------------------------------------

class ItineraryLLM:
    """Text-completion client for itinerary generation."""

    def __init__(self, model: str = "gpt-4.1", max_tokens: int = 4096,
                 temperature: float = 0.7, timeout_seconds: float = 60.0,
                 client: Optional[OpenAI] = None):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self._client = client

    @classmethod
    def from_config(cls) -> "ItineraryLLM":
        config = get_generation_config()
        return cls(
            model=config["model"],
            max_tokens=config["max_tokens"],
            temperature=config["temperature"],
            timeout_seconds=config["timeout_seconds"],
        )

    @property
    def is_configured(self) -> bool:
        return self._client is not None or has_openai_api_key()

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            # SDK retries are disabled: the attempt budget is enforced by ItineraryService
            self._client = OpenAI(
                api_key=get_openai_api_key(),
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        return self._client

    def complete(self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None) -> str:
        """Return the text of a single chat completion.

        Raises:
            UpstreamThrottleError: the provider rate-limited us
            UpstreamServiceError: timeout, connection or provider failure
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        logger.debug(f"Calling OpenAI ChatCompletion: model={self.model}")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=max_tokens or self.max_tokens,
            )
        except openai.RateLimitError as exc:
            logger.error("❌ OpenAI rate limit reached")
            raise UpstreamThrottleError("Service overloaded, please try again in a few minutes") from exc
        except openai.APITimeoutError as exc:
            raise UpstreamServiceError(
                f"Generation service timed out after {self.timeout_seconds:.0f}s"
            ) from exc
        except openai.APIConnectionError as exc:
            raise UpstreamServiceError("Could not reach the generation service") from exc
        except openai.APIStatusError as exc:
            # Status only: provider error bodies may echo request internals
            raise UpstreamServiceError(f"Generation service error (HTTP {exc.status_code})") from exc
        except openai.OpenAIError as exc:
            logger.error(f"Unexpected OpenAI error: {type(exc).__name__}")
            raise UpstreamServiceError("Generation service error") from exc

        if not response.choices:
            raise UpstreamServiceError("Generation service returned no choices")
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------

@dataclass
class ParseResult:
    success: bool
    data: Any = None
    error: Optional[str] = None


def _parse_strict(content: str) -> Any:
    return json.loads(content)


def _parse_largest_object(content: str) -> Any:
    """Parse the span from the first ``{`` to the last ``}``.

    Tolerates chatty answers ("Here is your itinerary: {...}") and code fences.
    """
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end <= start:
        raise LookupError("No JSON object found in the response")
    return json.loads(content[start:end + 1])


def parse_model_response(content: str) -> ParseResult:
    """Extract the JSON payload from the model's raw text."""
    try:
        return ParseResult(success=True, data=_parse_strict(content))
    except json.JSONDecodeError:
        pass

    try:
        return ParseResult(success=True, data=_parse_largest_object(content))
    except LookupError as exc:
        return ParseResult(success=False, error=str(exc))
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse LLM response: %s", exc)
        return ParseResult(success=False, error=f"Invalid JSON: {exc.msg}")
