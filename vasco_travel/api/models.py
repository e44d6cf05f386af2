"""Shared data structures for itinerary planning.

``TripRequest`` is what a caller sends to the generation endpoint and
``Itinerary`` is the only shape of model output the rest of the app trusts.
Both are pydantic models so the same definitions drive validation and
serialization.
"""

from __future__ import annotations

import re
import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

Budget = Literal["economic", "balanced", "comfort"]
Pace = Literal["relaxed", "balanced", "intense"]
Interest = Literal[
    "culture",
    "nature",
    "gastronomie",
    "histoire",
    "plage",
    "aventure",
    "shopping",
    "relaxation",
    "insolite",
    "sport",
    "vie_nocturne",
    "famille",
]

DESTINATION_RE = re.compile(r"^[a-zA-ZÀ-ÿ\s\-',]+$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ---------------------------------------------------------------------------
# Trip request (what the user sends)
# ---------------------------------------------------------------------------

class TripRequest(BaseModel):
    """Validated trip-generation input."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    destination: str = Field(min_length=2, max_length=100)
    days: StrictInt = Field(ge=1, le=30)
    budget: Budget
    interests: List[Interest] = Field(min_length=1, max_length=5)
    pace: Pace
    travelers: Optional[StrictInt] = Field(default=None, ge=1, le=20)
    start_date: Optional[str] = Field(default=None, alias="startDate")

    @field_validator("destination")
    @classmethod
    def _check_destination(cls, value: str) -> str:
        if not DESTINATION_RE.match(value):
            raise ValueError(
                "Destination may only contain letters, spaces, hyphens, apostrophes and commas"
            )
        return value

    @field_validator("interests", mode="before")
    @classmethod
    def _fold_interest_case(cls, value):
        # Case and surrounding whitespace only; the label itself must match exactly.
        if isinstance(value, list):
            return [v.strip().lower() if isinstance(v, str) else v for v in value]
        return value

    @field_validator("start_date")
    @classmethod
    def _check_start_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not DATE_RE.match(value):
            raise ValueError("Invalid date format (YYYY-MM-DD)")
        try:
            datetime.date.fromisoformat(value)
        except ValueError:
            raise ValueError(f"{value} is not a valid calendar date")
        return value

    def to_payload(self) -> dict:
        """Wire representation with absent optional fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Itinerary (what the model generates)
# ---------------------------------------------------------------------------

class _StrictModel(BaseModel):
    # Model output is untrusted: unknown keys are rejected.
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _reject_null(cls, value):
        # Optional fields may be omitted, never sent as null.
        if value is None:
            raise ValueError("must not be null")
        return value


class Activity(_StrictModel):
    time: str
    title: str
    description: str
    location: str
    duration: Optional[str] = None
    cost_estimate: str = Field(alias="costEstimate")
    tips: Optional[str] = None


class Meal(_StrictModel):
    name: str
    type: str
    cost_estimate: str = Field(alias="costEstimate")
    description: Optional[str] = None


class Meals(_StrictModel):
    breakfast: Optional[Meal] = None
    lunch: Optional[Meal] = None
    dinner: Optional[Meal] = None


class Accommodation(_StrictModel):
    name: str
    type: str
    price_range: str = Field(alias="priceRange")
    neighborhood: Optional[str] = None


class Day(_StrictModel):
    day: StrictInt = Field(ge=1)
    date: Optional[str] = None
    theme: str
    activities: List[Activity] = Field(min_length=1, max_length=8)
    meals: Meals
    accommodation: Optional[Accommodation] = None
    transport_tip: Optional[str] = Field(default=None, alias="transportTip")


class BudgetSummary(_StrictModel):
    accommodation: str
    food: str
    activities: str
    transport: str
    total: str


class Itinerary(_StrictModel):
    destination: str
    days: List[Day] = Field(min_length=1)
    budget_summary: BudgetSummary = Field(alias="budgetSummary")
    tips: List[str]
    best_time_to_visit: Optional[str] = Field(default=None, alias="bestTimeToVisit")
    packing_essentials: Optional[List[str]] = Field(default=None, alias="packingEssentials")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
