"""Tests for the OpenRouter provider's retry policy, classification and catalogue."""

import asyncio
import json

import httpx
import pytest

from debate_arena.config.settings import OpenRouterConfig, RateLimitConfig
from debate_arena.models.openrouter_types import FALLBACK_MODELS, ModelTier
from debate_arena.models.providers import (
    EmptyResponse,
    ErrorKind,
    InferenceError,
    InsufficientCredits,
    InvalidApiKey,
    OpenRouterProvider,
    RateLimitExceeded,
    RequestGate,
    ServerError,
)

MESSAGES = [{"role": "user", "content": "Argue for tea."}]


def completion(content: str | None) -> dict:
    return {"id": "gen-1", "choices": [{"message": {"role": "assistant", "content": content}}]}


class ScriptedUpstream:
    """MockTransport handler that replays a fixed list of responses."""

    def __init__(self, *responses: httpx.Response | Exception):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def backoff_gate(fake_clock) -> RequestGate:
    """No interval or window limits, default backoff delays."""
    limits = RateLimitConfig(
        min_interval=0,
        free_min_interval=0,
        max_requests_per_minute=100,
        free_max_requests_per_minute=100,
    )
    return RequestGate(limits, clock=fake_clock, sleep=fake_clock.sleep)


def make_provider(openrouter_config, gate, upstream: ScriptedUpstream, **kwargs):
    return OpenRouterProvider(openrouter_config, gate, transport=upstream.transport, **kwargs)


@pytest.mark.unit
def test_successful_completion_returns_trimmed_content(openrouter_config, backoff_gate):
    upstream = ScriptedUpstream(httpx.Response(200, json=completion("  Tea is great.\n")))
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    result = asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES))

    assert result == "Tea is great."
    request = upstream.requests[0]
    assert request.url == "https://openrouter.test/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-or-test"
    assert request.headers["X-Title"] == "AI Debate Arena"
    body = json.loads(request.content)
    assert body["model"] == "openai/gpt-4o"
    assert body["messages"] == MESSAGES
    assert body["max_tokens"] == 500
    assert body["temperature"] == pytest.approx(0.7)


@pytest.mark.unit
def test_rate_limited_three_times_raises_after_exponential_backoff(
    openrouter_config, backoff_gate, fake_clock
):
    upstream = ScriptedUpstream(*(httpx.Response(429, json={}) for _ in range(3)))
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    with pytest.raises(RateLimitExceeded) as exc_info:
        asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES))

    assert exc_info.value.kind is ErrorKind.RATE_LIMIT_EXCEEDED
    assert exc_info.value.status_code == 429
    assert len(upstream.requests) == 3
    assert fake_clock.sleeps == [5, 10]


@pytest.mark.unit
def test_rate_limit_backoff_is_capped(openrouter_config, backoff_gate, fake_clock):
    upstream = ScriptedUpstream(
        *(httpx.Response(429) for _ in range(5)), httpx.Response(200, json=completion("ok"))
    )
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    result = asyncio.run(
        provider.generate_response("openai/gpt-4o", MESSAGES, max_retries=6)
    )

    assert result == "ok"
    assert fake_clock.sleeps == [5, 10, 20, 30, 30]


@pytest.mark.unit
@pytest.mark.parametrize(
    "status, exc_type", [(401, InvalidApiKey), (402, InsufficientCredits)]
)
def test_auth_and_credit_errors_are_not_retried(
    openrouter_config, backoff_gate, fake_clock, status, exc_type
):
    upstream = ScriptedUpstream(
        httpx.Response(status, json={"error": {"message": "nope", "code": status}})
    )
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    with pytest.raises(exc_type) as exc_info:
        asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES))

    assert len(upstream.requests) == 1
    assert fake_clock.sleeps == []
    assert exc_info.value.status_code == status
    assert "nope" in str(exc_info.value)


@pytest.mark.unit
def test_server_errors_back_off_linearly(openrouter_config, backoff_gate, fake_clock):
    upstream = ScriptedUpstream(*(httpx.Response(503, text="unavailable") for _ in range(3)))
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    with pytest.raises(ServerError):
        asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES))

    assert len(upstream.requests) == 3
    assert fake_clock.sleeps == [2, 4]


@pytest.mark.unit
def test_server_error_then_success(openrouter_config, backoff_gate):
    upstream = ScriptedUpstream(
        httpx.Response(500, text="boom"), httpx.Response(200, json=completion("Recovered."))
    )
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    assert asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES)) == "Recovered."
    assert len(upstream.requests) == 2


@pytest.mark.unit
def test_other_client_errors_fail_immediately(openrouter_config, backoff_gate):
    upstream = ScriptedUpstream(
        httpx.Response(400, json={"error": {"message": "bad model"}})
    )
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    with pytest.raises(InferenceError) as exc_info:
        asyncio.run(provider.generate_response("nobody/none", MESSAGES))

    assert type(exc_info.value) is InferenceError
    assert exc_info.value.kind is ErrorKind.INFERENCE_ERROR
    assert "bad model" in exc_info.value.message
    assert len(upstream.requests) == 1


@pytest.mark.unit
@pytest.mark.parametrize(
    "body",
    [completion(""), completion("   \n"), completion(None), {"id": "gen-1", "choices": []}],
)
def test_missing_content_is_empty_response(openrouter_config, backoff_gate, body):
    upstream = ScriptedUpstream(httpx.Response(200, json=body))
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    with pytest.raises(EmptyResponse):
        asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES))


@pytest.mark.unit
def test_error_body_with_success_status(openrouter_config, backoff_gate):
    upstream = ScriptedUpstream(
        httpx.Response(200, json={"error": {"message": "Provider returned error"}})
    )
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    with pytest.raises(InferenceError, match="Provider returned error"):
        asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES))


@pytest.mark.unit
def test_connection_failures_are_retried(openrouter_config, backoff_gate, fake_clock):
    upstream = ScriptedUpstream(
        httpx.ConnectError("connection refused"),
        httpx.Response(200, json=completion("Made it.")),
    )
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    assert asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES)) == "Made it."
    assert fake_clock.sleeps == [1]


@pytest.mark.unit
def test_missing_api_key_fails_without_request(backoff_gate, monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    upstream = ScriptedUpstream()
    provider = make_provider(OpenRouterConfig(), backoff_gate, upstream)

    with pytest.raises(InvalidApiKey):
        asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES))
    assert upstream.requests == []


@pytest.mark.unit
def test_per_debate_key_overrides_configured_key(openrouter_config, backoff_gate):
    upstream = ScriptedUpstream(httpx.Response(200, json=completion("Hi.")))
    provider = make_provider(openrouter_config, backoff_gate, upstream, api_key="sk-or-user")

    asyncio.run(provider.generate_response("openai/gpt-4o", MESSAGES))

    assert upstream.requests[0].headers["Authorization"] == "Bearer sk-or-user"


@pytest.mark.unit
def test_empty_model_or_messages_rejected(openrouter_config, backoff_gate):
    provider = make_provider(openrouter_config, backoff_gate, ScriptedUpstream())

    with pytest.raises(ValueError):
        asyncio.run(provider.generate_response("", MESSAGES))
    with pytest.raises(ValueError):
        asyncio.run(provider.generate_response("openai/gpt-4o", []))


@pytest.mark.unit
def test_rate_limit_spacing_applies_between_requests(openrouter_config, gate, fake_clock):
    """Two completions through the production gate are at least 10s apart."""
    upstream = ScriptedUpstream(
        httpx.Response(200, json=completion("One.")),
        httpx.Response(200, json=completion("Two.")),
    )
    provider = make_provider(openrouter_config, gate, upstream)

    async def scenario():
        await provider.generate_response("openai/gpt-4o", MESSAGES)
        await provider.generate_response("openai/gpt-4o", MESSAGES)

    asyncio.run(scenario())

    assert fake_clock.sleeps == [10]


@pytest.mark.unit
def test_validate_key_accepts_working_key(openrouter_config, backoff_gate):
    upstream = ScriptedUpstream(httpx.Response(200, json={"object": "list", "data": []}))
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    assert asyncio.run(provider.validate_key()) is True
    request = upstream.requests[0]
    assert request.url.path.endswith("/models")
    assert request.headers["Authorization"] == "Bearer sk-or-test"
    # Validation never takes a slot from the gate
    assert backoff_gate.state.request_count == 0


@pytest.mark.unit
def test_validate_key_rejects_bad_key(openrouter_config, backoff_gate):
    upstream = ScriptedUpstream(
        httpx.Response(401, json={"error": {"message": "No auth credentials found"}})
    )
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    assert asyncio.run(provider.validate_key()) is False


@pytest.mark.unit
def test_validate_key_without_key(backoff_gate, monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    upstream = ScriptedUpstream()
    provider = make_provider(OpenRouterConfig(), backoff_gate, upstream)

    assert asyncio.run(provider.validate_key()) is False
    assert upstream.requests == []


def catalogue_model(model_id: str, prompt: str, completion_price: str, **extra) -> dict:
    return {
        "id": model_id,
        "name": model_id.split("/")[-1],
        "context_length": extra.pop("context_length", 32000),
        "pricing": {"prompt": prompt, "completion": completion_price},
        "architecture": {"modality": "text->text", "output_modalities": ["text"]},
        **extra,
    }


@pytest.mark.unit
def test_models_are_filtered_classified_and_cached(openrouter_config, backoff_gate):
    payload = {
        "data": [
            catalogue_model("openai/gpt-4o", "0.0000025", "0.00001"),
            catalogue_model("anthropic/claude-3-haiku", "0.00000025", "0.00000125"),
            catalogue_model("meta-llama/llama-3.1-8b-instruct:free", "0", "0"),
            catalogue_model("tiny/model", "0", "0", context_length=2048),
            catalogue_model("luxury/model", "0.0002", "0.0002"),
        ]
    }
    upstream = ScriptedUpstream(httpx.Response(200, json=payload))
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    async def scenario():
        first = await provider.get_available_models()
        second = await provider.get_available_models()
        return first, second

    models, cached = asyncio.run(scenario())

    assert [m.id for m in models] == [
        "meta-llama/llama-3.1-8b-instruct:free",
        "anthropic/claude-3-haiku",
        "openai/gpt-4o",
    ]
    assert [m.tier for m in models] == [ModelTier.FREE, ModelTier.STANDARD, ModelTier.PREMIUM]
    assert models[0].provider == "Meta"
    assert cached is models
    assert len(upstream.requests) == 1


@pytest.mark.unit
def test_models_fall_back_when_catalogue_unavailable(openrouter_config, backoff_gate):
    upstream = ScriptedUpstream(httpx.Response(503, text="down"))
    provider = make_provider(openrouter_config, backoff_gate, upstream)

    models = asyncio.run(provider.get_available_models())

    assert [m.id for m in models] == [m.id for m in FALLBACK_MODELS]
