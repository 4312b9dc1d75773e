# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides a scripted translation provider, client factory, sample articles
and stores. No network: every provider and CMS call is faked or mocked.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from tabilingo.cache.translation_cache import TranslationCache
from tabilingo.config.settings import Settings
from tabilingo.core.models import Article, ProviderUsage
from tabilingo.logging.context import clear_context
from tabilingo.provider.base_provider import BaseTranslationProvider, ProviderError
from tabilingo.provider.rate_limiter import RateLimiter
from tabilingo.provider.retry import RetryPolicy
from tabilingo.provider.translation_client import TranslationClient
from tabilingo.store.memory_store import InMemoryDocumentStore


class FakeProvider(BaseTranslationProvider):
    """Prefixes each text with its target code; fails for chosen target codes."""

    def __init__(
        self,
        usage: ProviderUsage | None = None,
        fail_targets: Iterable[str] = (),
        usage_error: Exception | None = None,
    ):
        self.calls: list[tuple[str, str, str]] = []
        self.usage = usage or ProviderUsage(character_count=0, character_limit=500_000)
        self.fail_targets = set(fail_targets)
        self.usage_error = usage_error

    @property
    def provider_name(self) -> str:
        return "fake"

    async def translate(self, text: str, source_code: str, target_code: str) -> str:
        self.calls.append((text, source_code, target_code))
        if target_code in self.fail_targets:
            raise ProviderError("Service unavailable (503)", 503)
        return f"[{target_code}] {text}"

    async def get_usage(self) -> ProviderUsage:
        if self.usage_error is not None:
            raise self.usage_error
        return self.usage


# === FIXTURES: Isolation ===


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


# === FIXTURES: Provider and client ===


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def provider_factory():
    """Build a FakeProvider with custom usage or failing targets."""
    return FakeProvider


@pytest.fixture
def make_client(fake_provider: FakeProvider):
    """Factory for a TranslationClient with no waits and no retries by default."""

    def _make(
        provider: BaseTranslationProvider | None = None,
        cache: TranslationCache | None = None,
        max_retries: int = 0,
        max_chunk_chars: int = 2000,
    ) -> TranslationClient:
        return TranslationClient(
            provider=provider or fake_provider,
            max_chunk_chars=max_chunk_chars,
            rate_limiter=RateLimiter(0.0, sleep=AsyncMock()),
            retry_policy=RetryPolicy(max_retries=max_retries, initial_delay_s=0.0),
            cache=cache,
            sleep=AsyncMock(),
        )

    return _make


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_content() -> list[dict[str, Any]]:
    """Body with two text blocks, an image and a code block."""
    return [
        {
            "_type": "block",
            "_key": "b1",
            "style": "h2",
            "children": [
                {"_type": "span", "_key": "s1", "text": "京都の寺", "marks": []},
            ],
            "markDefs": [],
        },
        {
            "_type": "block",
            "_key": "b2",
            "style": "normal",
            "children": [
                {"_type": "span", "_key": "s2", "text": "金閣寺は美しい。", "marks": []},
                {"_type": "span", "_key": "s3", "text": "  ", "marks": []},
                {"_type": "span", "_key": "s4", "text": "秋がおすすめ。", "marks": ["strong"]},
            ],
            "markDefs": [],
        },
        {
            "_type": "image",
            "_key": "i1",
            "asset": {"_type": "reference", "_ref": "image-abc-800x600-jpg"},
            "alt": "金閣寺",
        },
        {"_type": "code", "_key": "c1", "language": "bash", "code": "echo hi"},
    ]


@pytest.fixture
def sample_article_data(sample_content: list[dict[str, Any]]) -> dict[str, Any]:
    """Raw CMS document for a Japanese source article."""
    return {
        "_id": "article-123",
        "_type": "article",
        "_rev": "rev-1",
        "_createdAt": "2026-01-10T09:00:00Z",
        "_updatedAt": "2026-01-11T09:00:00Z",
        "title": "京都の寺",
        "slug": {"_type": "slug", "current": "kyoto-temples-ja"},
        "excerpt": "京都のおすすめの寺",
        "content": sample_content,
        "lang": "ja",
        "tags": ["寺", "京都"],
        "type": "spot",
        "placeName": "金閣寺",
        "prefecture": "kyoto",
        "publishedAt": "2026-01-10T09:00:00Z",
        "coverImage": {"asset": {"_ref": "image-cover-jpg"}},
        "seo": {"noindex": False},
    }


@pytest.fixture
def sample_article(sample_article_data: dict[str, Any]) -> Article:
    return Article.model_validate(sample_article_data)


@pytest.fixture
def memory_store(sample_article: Article) -> InMemoryDocumentStore:
    return InMemoryDocumentStore([sample_article])
