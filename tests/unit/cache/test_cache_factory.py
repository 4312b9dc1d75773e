# tests/unit/cache/test_cache_factory.py - v1
"""Tests for cache/cache_factory.py."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from tabilingo.cache.cache_factory import create_cache_store
from tabilingo.cache.json_store import JsonCacheStore
from tabilingo.cache.sqlite_store import SqliteCacheStore


class TestCreateCacheStore:
    def test_default_is_json(self):
        store = create_cache_store()
        assert isinstance(store, JsonCacheStore)
        assert store.path.name == "translations.json"

    def test_json_uses_cache_dir(self, settings, tmp_path):
        s = settings.model_copy(update={"cache_dir": tmp_path / "c"})
        store = create_cache_store(s)
        assert store.path == tmp_path / "c" / "translations.json"

    def test_sqlite(self, settings, tmp_path):
        s = settings.model_copy(update={"cache_backend": "sqlite", "cache_dir": tmp_path})
        store = create_cache_store(s)
        assert isinstance(store, SqliteCacheStore)
        assert (tmp_path / "translations.db").exists()
        store.close()

    def test_redis_requires_url(self, settings):
        s = settings.model_copy(update={"cache_backend": "redis", "cache_redis_url": ""})
        with pytest.raises(ValueError, match="CACHE_REDIS_URL"):
            create_cache_store(s)

    @pytest.mark.redis
    def test_redis(self, settings, monkeypatch):
        redis = pytest.importorskip("redis")
        from tabilingo.cache.redis_store import RedisCacheStore

        monkeypatch.setattr(redis.Redis, "from_url", MagicMock())
        s = settings.model_copy(
            update={"cache_backend": "redis", "cache_redis_url": "redis://localhost:6379/0"}
        )
        assert isinstance(create_cache_store(s), RedisCacheStore)

    def test_unknown_backend(self, settings):
        s = settings.model_copy(update={"cache_backend": "memcached"})
        with pytest.raises(ValueError, match="Unsupported cache backend"):
            create_cache_store(s)
