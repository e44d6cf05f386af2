import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from vasco_travel.api.errors import UpstreamServiceError, UpstreamThrottleError
from vasco_travel.api.llm import ItineraryLLM, parse_model_response

URL = "https://api.openai.com/v1/chat/completions"


def _request():
    return httpx.Request("POST", URL)


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def openai_client():
    return MagicMock()


@pytest.fixture
def llm(openai_client):
    return ItineraryLLM(model="gpt-test", max_tokens=1000, client=openai_client)


# --------------------------------------------------------------------------- #
# Parsing strategies
# --------------------------------------------------------------------------- #

def test_parse_strict_json():
    result = parse_model_response('{"destination": "Lisbonne"}')
    assert result.success
    assert result.data == {"destination": "Lisbonne"}


def test_parse_chatty_response():
    text = 'Here is your itinerary:\n{"destination": "Lisbonne", "days": [{"day": 1}]}\nEnjoy!'
    result = parse_model_response(text)
    assert result.success
    assert result.data == {"destination": "Lisbonne", "days": [{"day": 1}]}


def test_parse_code_fenced_response():
    text = '```json\n{"tips": ["a", "b"]}\n```'
    assert parse_model_response(text).data == {"tips": ["a", "b"]}


def test_parse_without_json_object():
    result = parse_model_response("Sorry, I cannot help with that.")
    assert not result.success
    assert result.error == "No JSON object found in the response"


def test_parse_broken_json_block():
    result = parse_model_response('Sure! {"destination": "Lisbonne",, } thanks')
    assert not result.success
    assert result.error.startswith("Invalid JSON")


# --------------------------------------------------------------------------- #
# OpenAI client wrapper
# --------------------------------------------------------------------------- #

def test_complete_returns_message_text(llm, openai_client):
    openai_client.chat.completions.create.return_value = _completion('{"ok": true}')

    assert llm.complete("system", "user") == '{"ok": true}'

    kwargs = openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["max_tokens"] == 1000
    assert kwargs["messages"] == [
        {"role": "system", "content": "system"},
        {"role": "user", "content": "user"},
    ]


def test_complete_max_tokens_override(llm, openai_client):
    openai_client.chat.completions.create.return_value = _completion("hi")
    llm.complete("system", "user", max_tokens=100)
    assert openai_client.chat.completions.create.call_args.kwargs["max_tokens"] == 100


def test_empty_content_becomes_empty_string(llm, openai_client):
    openai_client.chat.completions.create.return_value = _completion(None)
    assert llm.complete("system", "user") == ""


def test_rate_limit_becomes_throttle(llm, openai_client):
    openai_client.chat.completions.create.side_effect = openai.RateLimitError(
        "Rate limit reached", response=httpx.Response(429, request=_request()), body=None
    )
    with pytest.raises(UpstreamThrottleError):
        llm.complete("system", "user")


def test_timeout_is_retryable_service_error(llm, openai_client):
    openai_client.chat.completions.create.side_effect = openai.APITimeoutError(request=_request())
    with pytest.raises(UpstreamServiceError, match="timed out"):
        llm.complete("system", "user")


def test_connection_error_is_retryable(llm, openai_client):
    openai_client.chat.completions.create.side_effect = openai.APIConnectionError(request=_request())
    with pytest.raises(UpstreamServiceError, match="Could not reach"):
        llm.complete("system", "user")


def test_status_error_hides_provider_body(llm, openai_client):
    openai_client.chat.completions.create.side_effect = openai.InternalServerError(
        "key sk-secret leaked",
        response=httpx.Response(500, request=_request()),
        body={"error": {"message": "key sk-secret leaked"}},
    )
    with pytest.raises(UpstreamServiceError) as excinfo:
        llm.complete("system", "user")

    assert str(excinfo.value) == "Generation service error (HTTP 500)"
    assert "sk-secret" not in json.dumps(str(excinfo.value))


def test_other_provider_errors_are_service_errors(llm, openai_client):
    openai_client.chat.completions.create.side_effect = openai.APIError("boom", _request(), body=None)
    with pytest.raises(UpstreamServiceError, match="^Generation service error$"):
        llm.complete("system", "user")


def test_is_configured_follows_environment(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert not ItineraryLLM().is_configured

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert ItineraryLLM().is_configured


def test_from_config(monkeypatch):
    monkeypatch.setenv("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("OPENAI_MAX_TOKENS", "2048")
    monkeypatch.setenv("OPENAI_TIMEOUT_SECONDS", "30")

    llm = ItineraryLLM.from_config()

    assert llm.model == "gpt-4o-mini"
    assert llm.max_tokens == 2048
    assert llm.timeout_seconds == 30.0
