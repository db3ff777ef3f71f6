"""OpenRouter-based embedding provider — calls the /embeddings endpoint.

Default model: openai/text-embedding-3-small, requested at the configured
dimensionality so vectors always match the index column.
"""

import logging
from typing import Any

import httpx

from onboard.application.interfaces.embedding_provider import EmbeddingProvider
from onboard.domain.exceptions import ChatProviderError, EmbeddingAlignmentError
from onboard.infrastructure.openrouter.openrouter_client import PROVIDER_NAME

logger = logging.getLogger(__name__)


class OpenRouterEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter that embeds text batches via the OpenRouter /embeddings API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "Onboard AI",
        model: str = "openai/text-embedding-3-small",
        model_dimensions: int = 1536,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/embeddings"
        self._app_name = app_name
        self._model = model
        self._dimensions = model_dimensions
        self._http_client = http_client
        self._timeout = timeout

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts, returned in input order."""
        if not texts:
            return []

        payload: dict[str, Any] = {
            "model": self._model,
            "input": texts,
            "dimensions": self._dimensions,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }

        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        try:
            response = await client.post(self._url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise ChatProviderError(PROVIDER_NAME, 503, f"Embedding request failed: {e}") from e
        finally:
            if self._http_client is None:
                await client.aclose()

        if response.status_code != 200:
            error_text = response.text[:500]
            logger.error("Embedding API error %d: %s", response.status_code, error_text)
            raise ChatProviderError(
                PROVIDER_NAME,
                response.status_code,
                f"Embedding request failed: {error_text}",
            )

        # The API may return items out of order; "index" maps them back to inputs
        items = sorted(response.json().get("data", []), key=lambda item: item.get("index") or 0)
        vectors = [item["embedding"] for item in items]
        if len(vectors) != len(texts):
            raise EmbeddingAlignmentError(expected=len(texts), received=len(vectors))
        indices = [item.get("index") for item in items]
        if indices != list(range(len(texts))):
            raise EmbeddingAlignmentError(
                expected=len(texts),
                received=len(vectors),
                detail=f"response indices {indices} do not cover the inputs one to one",
            )

        logger.info("Generated %d embeddings (model=%s, dims=%d)", len(vectors), self._model, len(vectors[0]))
        return vectors
