"""OpenRouter API client — implements the ChatProvider interface.

Communicates with the OpenRouter API (https://openrouter.ai/api/v1)
using httpx for non-streaming chat completions. Transport failures and
error bodies both surface as ``ChatProviderError``.
"""

import logging

import httpx

from onboard.application.interfaces.chat_provider import ChatProvider
from onboard.domain.entities import ChatMessage, ChatCompletionResult, TokenUsage
from onboard.domain.exceptions import ChatProviderError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "openrouter"
_TRANSPORT_ERROR_STATUS = 503


class OpenRouterClient(ChatProvider):
    """Infrastructure adapter for the OpenRouter chat completions API.

    Reuses an injected ``httpx.AsyncClient`` (the app-wide connection pool)
    when given; otherwise opens and closes a client per request.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        app_name: str = "Onboard AI",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._app_name = app_name
        self._http_client = http_client
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return PROVIDER_NAME

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "X-Title": self._app_name,
        }

    async def complete(
        self,
        messages: list[ChatMessage],
        model: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> ChatCompletionResult:
        """Send one non-streaming completion request and parse the first choice."""
        payload: dict = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        client = self._http_client or httpx.AsyncClient(timeout=self._timeout)
        try:
            response = await client.post(
                f"{self._base_url}/chat/completions", headers=self._headers(), json=payload
            )
        except httpx.HTTPError as e:
            logger.error("OpenRouter request failed: %s", e)
            raise ChatProviderError(PROVIDER_NAME, _TRANSPORT_ERROR_STATUS, f"request failed: {e}") from e
        finally:
            if self._http_client is None:
                await client.aclose()

        if response.status_code != 200:
            raise self._error_from_response(response)
        return self._parse_completion(response.json())

    def _parse_completion(self, data: dict) -> ChatCompletionResult:
        # OpenRouter can report upstream errors inside a 200 body
        if "error" in data:
            error = data["error"]
            raise ChatProviderError(
                PROVIDER_NAME,
                error.get("code", 500),
                error.get("message", "Unknown error"),
            )

        choices = data.get("choices") or []
        if not choices:
            raise ChatProviderError(PROVIDER_NAME, 500, "No choices in response")

        choice = choices[0]
        return ChatCompletionResult(
            model=data.get("model", ""),
            content=(choice.get("message") or {}).get("content") or "",
            finish_reason=choice.get("finish_reason") or "stop",
            usage=_parse_usage(data.get("usage") or {}),
            provider=PROVIDER_NAME,
        )

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ChatProviderError:
        try:
            message = response.json().get("error", {}).get("message", response.text)
        except ValueError:
            message = response.text
        logger.error("OpenRouter error %d: %s", response.status_code, message[:500])
        return ChatProviderError(PROVIDER_NAME, response.status_code, message)


def _parse_usage(usage: dict) -> TokenUsage:
    return TokenUsage(
        prompt_tokens=usage.get("prompt_tokens", 0),
        completion_tokens=usage.get("completion_tokens", 0),
        total_tokens=usage.get("total_tokens", 0),
        cost=usage.get("cost"),
    )
