# tests/integration/engine/test_int_engine.py - v2
"""Integration tests for the translation engine with a persisted cache.

Covers: engine, translation client, TranslationCache with JSON and SQLite
stores, in-memory document store. No network.
"""

from __future__ import annotations

import pytest

from tabilingo.cache.cache_factory import create_cache_store
from tabilingo.cache.translation_cache import TranslationCache
from tabilingo.core.models import TranslationOptions
from tabilingo.engine.translation_engine import TranslationEngine
from tabilingo.store.memory_store import InMemoryDocumentStore


async def _open_cache(settings) -> TranslationCache:
    cache = TranslationCache(create_cache_store(settings), ttl_days=settings.cache_ttl_days)
    await cache.load()
    return cache


@pytest.mark.parametrize("backend", ["json", "sqlite"])
class TestCachedRuns:
    @pytest.mark.asyncio
    async def test_second_process_served_from_disk(
        self, backend, tmp_path, settings, sample_article, make_client, provider_factory
    ):
        s = settings.model_copy(update={"cache_backend": backend, "cache_dir": tmp_path / "cache"})

        # --- first process: translate and persist ---
        first_provider = provider_factory()
        store = InMemoryDocumentStore([sample_article])
        engine = TranslationEngine(
            make_client(provider=first_provider, cache=await _open_cache(s)), store, s
        )
        first = await engine.translate_document("article-123", TranslationOptions(languages=["en", "fr"]))
        assert first.success is True
        assert first.persistence.successful == 2
        # the first body span repeats the title, so it is served from the cache
        assert first.total_characters_used == 76
        assert first_provider.calls

        # --- second process: fresh objects, same cache directory ---
        second_provider = provider_factory()
        fresh_store = InMemoryDocumentStore([sample_article])
        engine = TranslationEngine(
            make_client(provider=second_provider, cache=await _open_cache(s)), fresh_store, s
        )
        second = await engine.translate_document("article-123", TranslationOptions(languages=["en", "fr"]))

        assert second.success is True
        assert second_provider.calls == []
        assert all(o.used_cache for o in second.results)
        assert second.total_characters_used == 0
        assert fresh_store.documents["article-123-fr"].title == "[FR] 京都の寺"


class TestEditedSource:
    @pytest.mark.asyncio
    async def test_only_changed_spans_are_sent(self, settings, sample_article, make_client, fake_provider):
        cache = TranslationCache()
        client = make_client(cache=cache)
        store = InMemoryDocumentStore([sample_article])
        engine = TranslationEngine(client, store, settings)
        await engine.translate_document("article-123", TranslationOptions(languages=["en"], dry_run=True))

        content = [dict(block) for block in sample_article.content]
        content[1] = {
            **content[1],
            "children": [{"_type": "span", "_key": "s9", "text": "銀閣寺も美しい。", "marks": []}],
        }
        store.add(sample_article.model_copy(update={"content": content}))
        fake_provider.calls.clear()

        result = await engine.translate_document(
            "article-123", TranslationOptions(languages=["en"], dry_run=True)
        )
        assert [call[0] for call in fake_provider.calls] == ["銀閣寺も美しい。"]
        assert result.results[0].used_cache is False
        assert result.results[0].character_count == 8
