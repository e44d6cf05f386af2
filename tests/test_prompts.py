from vasco_travel.api.prompts import build_itinerary_prompt, get_system_prompt, get_user_prompt
from vasco_travel.api.validators import validate_trip_request

from conftest import make_trip


def _trip(**overrides):
    return validate_trip_request(make_trip(**overrides)).data


def test_system_prompt_sets_language_currency_and_schema():
    prompt = get_system_prompt("English", "US dollars ($)")

    assert "valid JSON" in prompt
    assert "written in English" in prompt
    assert "in US dollars ($)" in prompt
    for key in ("budgetSummary", "activities", "costEstimate", "packingEssentials"):
        assert key in prompt


def test_user_prompt_defaults():
    prompt = get_user_prompt(_trip())

    assert "DESTINATION: Lisbonne" in prompt
    assert "DURATION: 3 days" in prompt
    assert "TRAVELERS: 1 person\n" in prompt
    assert "BUDGET: balanced (good value for money)" in prompt
    assert "PACE: balanced (4-5 activities per day)" in prompt
    assert "INTERESTS: culture and museums, gastronomy and local cuisine" in prompt
    assert "START DATE" not in prompt
    assert "a mid-range budget" in prompt


def test_user_prompt_optional_fields():
    prompt = get_user_prompt(_trip(days=1, travelers=4, startDate="2026-02-15", budget="comfort"))

    assert "DURATION: 1 day\n" in prompt
    assert "TRAVELERS: 4 persons" in prompt
    assert "START DATE: 2026-02-15" in prompt
    assert "a comfortable budget" in prompt


def test_build_itinerary_prompt_pair():
    system_prompt, user_prompt = build_itinerary_prompt(_trip(), "French", "euros (€)")
    assert "written in French" in system_prompt
    assert user_prompt.startswith("Create a complete travel itinerary")
