# vasco_travel/api/validators.py
"""Validation of trip requests and generated itineraries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from vasco_travel.api.models import Itinerary, TripRequest

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class Violation:
    """A single field-level constraint failure."""

    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


@dataclass
class ValidationResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    violations: List[Violation] = field(default_factory=list)


def _violations_from(exc: PydanticValidationError) -> List[Violation]:
    violations = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "Invalid value")
        # Custom ValueErrors come through as "Value error, <text>"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        violations.append(Violation(field=location, message=message))
    return violations


def _validate(model: type[T], data: Any) -> ValidationResult[T]:
    if not isinstance(data, dict):
        return ValidationResult(
            success=False,
            violations=[Violation(field="", message="Expected a JSON object")],
        )
    try:
        return ValidationResult(success=True, data=model.model_validate(data))
    except PydanticValidationError as exc:
        return ValidationResult(success=False, violations=_violations_from(exc))


def validate_trip_request(data: Any) -> ValidationResult[TripRequest]:
    """Validate and normalize an inbound trip-generation request.

    Pure and total: never raises for bad input, never performs I/O. Unknown
    keys are ignored.
    """
    return _validate(TripRequest, data)


def validate_itinerary(data: Any) -> ValidationResult[Itinerary]:
    """Validate a parsed model response against the itinerary schema.

    Partial payloads, unknown keys and wrong types are rejected, never coerced.
    """
    result = _validate(Itinerary, data)
    if not result.success:
        logger.debug(f"Itinerary rejected with {len(result.violations)} violation(s)")
    return result


def format_violations(violations: List[Violation]) -> List[str]:
    """Render violations as ``"field: message"`` lines for display."""
    return [str(v) for v in violations]
