"""Unit tests for the OpenRouterClient."""

import json

import httpx
import pytest

from onboard.infrastructure.openrouter.openrouter_client import OpenRouterClient
from onboard.domain.entities import ChatMessage
from onboard.domain.exceptions import ChatProviderError


# ── Helpers ──


def _mock_openrouter_response(
    content: str = "Hello!",
    model: str = "openai/gpt-4o-mini",
    prompt_tokens: int = 10,
    completion_tokens: int = 5,
    total_tokens: int = 15,
    cost: float | None = 0.00014,
) -> dict:
    """Build a mock OpenRouter JSON response."""
    return {
        "id": "chatcmpl-test123",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "model": model,
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": total_tokens,
            **({"cost": cost} if cost is not None else {}),
        },
    }


def _make_mock_transport(
    response_data: dict | None = None,
    status_code: int = 200,
    captured: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Create a mock transport that returns a fixed response."""

    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        return httpx.Response(status_code, json=response_data or {})

    return httpx.MockTransport(handler)


def _client(transport: httpx.MockTransport) -> OpenRouterClient:
    return OpenRouterClient(api_key="test-key", http_client=httpx.AsyncClient(transport=transport))


# ── Tests ──


@pytest.mark.asyncio
async def test_complete_parses_response():
    """Non-streaming call correctly parses OpenRouter JSON response."""
    client = _client(_make_mock_transport(_mock_openrouter_response(content="The answer is 42.")))

    result = await client.complete(
        messages=[ChatMessage(role="user", content="What is 42?")],
        model="openai/gpt-4o-mini",
    )

    assert result.content == "The answer is 42."
    assert result.model == "openai/gpt-4o-mini"
    assert result.usage.prompt_tokens == 10
    assert result.usage.total_tokens == 15
    assert result.usage.cost == 0.00014
    assert result.provider == "openrouter"


@pytest.mark.asyncio
async def test_complete_sends_messages_and_sampling_options():
    captured: list[httpx.Request] = []
    client = _client(_make_mock_transport(_mock_openrouter_response(), captured=captured))

    await client.complete(
        messages=[
            ChatMessage(role="system", content="Be brief."),
            ChatMessage(role="user", content="Hi"),
        ],
        model="openai/gpt-4o-mini",
        temperature=0.3,
        max_tokens=1000,
    )

    request = captured[0]
    assert request.url.path.endswith("/chat/completions")
    assert request.headers["Authorization"] == "Bearer test-key"
    body = json.loads(request.content)
    assert body["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Hi"},
    ]
    assert body["temperature"] == 0.3
    assert body["max_tokens"] == 1000


@pytest.mark.asyncio
async def test_complete_error_handling():
    """Non-streaming call raises ChatProviderError on 4xx/5xx."""
    error_data = {"error": {"code": 429, "message": "Rate limit exceeded"}}
    client = _client(_make_mock_transport(error_data, status_code=429))

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(messages=[ChatMessage(role="user", content="Hi")], model="m")

    assert exc_info.value.status_code == 429
    assert "Rate limit" in exc_info.value.message


@pytest.mark.asyncio
async def test_error_inside_200_body_is_raised():
    client = _client(_make_mock_transport({"error": {"code": 502, "message": "Upstream down"}}))

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(messages=[ChatMessage(role="user", content="Hi")], model="m")

    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_missing_choices_is_an_error():
    client = _client(_make_mock_transport({"choices": []}))

    with pytest.raises(ChatProviderError):
        await client.complete(messages=[ChatMessage(role="user", content="Hi")], model="m")


@pytest.mark.asyncio
async def test_transport_failure_is_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = OpenRouterClient(api_key="test-key", http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(ChatProviderError) as exc_info:
        await client.complete(messages=[ChatMessage(role="user", content="Hi")], model="m")

    assert exc_info.value.status_code == 503
