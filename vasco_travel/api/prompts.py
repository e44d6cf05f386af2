"""Prompt construction for itinerary generation."""

from __future__ import annotations

from typing import Tuple

from vasco_travel.api.models import TripRequest

BUDGET_LABELS = {
    "economic": "economic (small budget, hostels, street food)",
    "balanced": "balanced (good value for money)",
    "comfort": "comfort (4-star hotels, good restaurants)",
}

BUDGET_PRICING = {
    "economic": "a small budget",
    "balanced": "a mid-range budget",
    "comfort": "a comfortable budget",
}

PACE_LABELS = {
    "relaxed": "relaxed (2-3 activities per day, free time)",
    "balanced": "balanced (4-5 activities per day)",
    "intense": "intense (packed days, as many discoveries as possible)",
}

INTEREST_LABELS = {
    "culture": "culture and museums",
    "nature": "nature and hiking",
    "gastronomie": "gastronomy and local cuisine",
    "histoire": "historic sites and heritage",
    "plage": "beaches and water activities",
    "aventure": "adventure and adrenaline",
    "shopping": "shopping and markets",
    "relaxation": "spa and relaxation",
    "insolite": "unusual, off-the-beaten-path experiences",
    "sport": "sports and physical activities",
    "vie_nocturne": "nightlife and bars",
    "famille": "family activities",
}

# ---------------------------------------------------------------------------
# Output schema shown to the model
# ---------------------------------------------------------------------------

_SCHEMA = """{
  "destination": "City, Country",
  "days": [
    {
      "day": 1,
      "theme": "Title of the day",
      "activities": [
        {
          "time": "09:00",
          "title": "Activity name",
          "description": "Detailed description",
          "location": "Address or neighborhood",
          "duration": "2h",
          "costEstimate": "10-15",
          "tips": "Practical tip (optional)"
        }
      ],
      "meals": {
        "breakfast": {"name": "Place name", "type": "Cuisine type", "costEstimate": "5-10"},
        "lunch": {"name": "...", "type": "...", "costEstimate": "..."},
        "dinner": {"name": "...", "type": "...", "costEstimate": "..."}
      },
      "accommodation": {
        "name": "Accommodation name",
        "type": "Hotel, hostel, ...",
        "priceRange": "50-80 per night",
        "neighborhood": "Neighborhood"
      },
      "transportTip": "Transport tip for the day"
    }
  ],
  "budgetSummary": {
    "accommodation": "XXX-XXX",
    "food": "XXX-XXX",
    "activities": "XXX-XXX",
    "transport": "XXX-XXX",
    "total": "XXX-XXX"
  },
  "tips": ["General tip 1", "General tip 2", "General tip 3"],
  "bestTimeToVisit": "Best period to visit",
  "packingEssentials": ["Item 1", "Item 2"]
}"""


def get_system_prompt(language: str = "French", currency: str = "euros (€)") -> str:
    return (
        "You are Vasco, an expert travel planner. You create personalized, "
        "detailed and realistic travel itineraries.\n\n"
        "IMPORTANT RULES:\n"
        "1. Reply ONLY with valid JSON, no text before or after it\n"
        f"2. All text must be written in {language}\n"
        f"3. Price estimates are in {currency}\n"
        '4. Times use the "HH:MM" format or a descriptive label ("Morning", "Afternoon")\n'
        "5. Be realistic about travel times and opening hours\n"
        "6. Suggest authentic local alternatives, not only tourist spots\n"
        "7. Match activities to the requested budget and pace\n"
        "8. Include practical recommendations and local tips\n"
        "9. Never put more than 8 activities in a day\n\n"
        "RESPONSE FORMAT (strict JSON):\n"
        f"{_SCHEMA}"
    )


def get_user_prompt(trip: TripRequest) -> str:
    interests = ", ".join(INTEREST_LABELS.get(i, i) for i in trip.interests)
    travelers = trip.travelers or 1

    lines = [
        "Create a complete travel itinerary for:",
        "",
        f"DESTINATION: {trip.destination}",
        f"DURATION: {trip.days} day{'s' if trip.days > 1 else ''}",
        f"TRAVELERS: {travelers} person{'s' if travelers > 1 else ''}",
        f"BUDGET: {BUDGET_LABELS[trip.budget]}",
        f"PACE: {PACE_LABELS[trip.pace]}",
        f"INTERESTS: {interests}",
    ]
    if trip.start_date:
        lines.append(f"START DATE: {trip.start_date}")

    lines += [
        "",
        "SPECIFIC INSTRUCTIONS:",
        "- Suggest varied activities matching the listed interests",
        "- Include a recommended accommodation for each night",
        "- Suggest local restaurants for each meal",
        "- Adapt the number of activities to the requested pace",
        f"- Give realistic price estimates for {BUDGET_PRICING[trip.budget]}",
        "- Add practical, local tips",
        "- The total budget must cover accommodation, meals, activities and local transport",
        f"- Produce exactly {trip.days} entries in \"days\"",
        "",
        "Generate the JSON for the complete itinerary.",
    ]
    return "\n".join(lines)


def build_itinerary_prompt(trip: TripRequest, language: str = "French",
                           currency: str = "euros (€)") -> Tuple[str, str]:
    """Return ``(system_prompt, user_prompt)`` for a validated request."""
    return get_system_prompt(language, currency), get_user_prompt(trip)
