# src/provider/deepl_adapter.py - v1
"""DeepL adapter implementing BaseTranslationProvider.

Talks to the DeepL REST API over httpx. Free-plan keys (suffix `:fx`) use
the free endpoint.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tabilingo.core.models import ProviderUsage
from tabilingo.provider.base_provider import (
    BaseTranslationProvider,
    ProviderAuthError,
    ProviderError,
    ProviderQuotaExhaustedError,
    ProviderRateLimitError,
)

logger = logging.getLogger(__name__)

DEEPL_PRO_URL = "https://api.deepl.com"
DEEPL_FREE_URL = "https://api-free.deepl.com"
DEFAULT_CHARACTER_LIMIT = 500_000


def default_server_url(api_key: str) -> str:
    return DEEPL_FREE_URL if api_key.endswith(":fx") else DEEPL_PRO_URL


class DeepLProvider(BaseTranslationProvider):
    """DeepL REST adapter."""

    def __init__(
        self,
        api_key: str,
        server_url: str = "",
        timeout_s: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._server_url = server_url or default_server_url(api_key)
        self._timeout = timeout_s
        self._client = client

    @property
    def provider_name(self) -> str:
        return "deepl"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._server_url,
                timeout=httpx.Timeout(self._timeout),
                headers={"Authorization": f"DeepL-Auth-Key {self._api_key}"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ProviderError(f"DeepL request timeout: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"DeepL connection error: {e}") from e

        status = response.status_code
        if status == 429:
            raise ProviderRateLimitError("DeepL rate limit: too many requests", status)
        if status == 456:
            raise ProviderQuotaExhaustedError("DeepL quota exceeded", status)
        if status in (401, 403):
            raise ProviderAuthError("DeepL authorization failed", status)
        if status >= 400:
            raise ProviderError(f"DeepL error {status}: {response.text[:200]}", status)
        return response.json()

    async def translate(self, text: str, source_code: str, target_code: str) -> str:
        data = await self._request(
            "POST",
            "/v2/translate",
            json={
                "text": [text],
                "source_lang": source_code.upper(),
                "target_lang": target_code,
            },
        )
        try:
            return data["translations"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected DeepL response: {data!r}") from e

    async def get_usage(self) -> ProviderUsage:
        data = await self._request("GET", "/v2/usage")
        return ProviderUsage(
            character_count=int(data.get("character_count") or 0),
            character_limit=int(data.get("character_limit") or DEFAULT_CHARACTER_LIMIT),
        )
