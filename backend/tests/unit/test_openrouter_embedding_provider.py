"""Unit tests for the OpenRouterEmbeddingProvider."""

import json

import httpx
import pytest

from onboard.infrastructure.openrouter.openrouter_embedding_provider import OpenRouterEmbeddingProvider
from onboard.domain.exceptions import ChatProviderError, EmbeddingAlignmentError


def _provider(handler) -> OpenRouterEmbeddingProvider:
    return OpenRouterEmbeddingProvider(
        api_key="test-key",
        model_dimensions=2,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_embeddings_are_returned_in_input_order():
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={"data": [
            {"index": 1, "embedding": [0.0, 1.0]},
            {"index": 0, "embedding": [1.0, 0.0]},
        ]})

    vectors = await _provider(handler).generate_embeddings(["first", "second"])

    assert vectors == [[1.0, 0.0], [0.0, 1.0]]
    assert captured[0] == {
        "model": "openai/text-embedding-3-small",
        "input": ["first", "second"],
        "dimensions": 2,
    }


@pytest.mark.asyncio
async def test_count_mismatch_raises_alignment_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"index": 0, "embedding": [1.0, 0.0]}]})

    with pytest.raises(EmbeddingAlignmentError):
        await _provider(handler).generate_embeddings(["first", "second"])


@pytest.mark.asyncio
@pytest.mark.parametrize("indices", [[0, 0], [1, 2], [0, None]])
async def test_duplicate_or_missing_indices_raise_alignment_error(indices):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [
            {"index": index, "embedding": [float(n), 1.0]} for n, index in enumerate(indices)
        ]})

    with pytest.raises(EmbeddingAlignmentError):
        await _provider(handler).generate_embeddings(["first", "second"])


@pytest.mark.asyncio
async def test_http_error_raises_provider_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="invalid key")

    with pytest.raises(ChatProviderError) as exc_info:
        await _provider(handler).generate_embeddings(["first"])

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_empty_input_makes_no_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    assert await _provider(handler).generate_embeddings([]) == []
