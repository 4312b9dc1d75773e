# tests/unit/cache/test_cache_stores.py - v1
"""Tests for the JSON, SQLite and Redis cache stores."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from tabilingo.cache.models import CacheRecord, TranslationPayload
from tabilingo.cache.json_store import JsonCacheStore
from tabilingo.cache.sqlite_store import SqliteCacheStore
from tabilingo.core.errors import CacheIOFailed

CREATED = datetime(2026, 2, 16, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def records() -> list[CacheRecord]:
    return [
        CacheRecord(
            fingerprint="f" * 64,
            language="en",
            payload=TranslationPayload(body="Golden Pavilion"),
            created_at=CREATED,
        ),
        CacheRecord(
            fingerprint="a" * 64,
            language="fr",
            payload=TranslationPayload(
                title="Temples", excerpt="Meilleurs", tags=["temple"], body="Corps"
            ),
            created_at=CREATED,
        ),
    ]


class TestJsonCacheStore:
    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonCacheStore(tmp_path / "cache")
        assert await store.load_records() == []

    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path, records):
        store = JsonCacheStore(tmp_path / "cache")
        await store.save_records(records)
        assert store.path.exists()
        assert await store.load_records() == records

    @pytest.mark.asyncio
    async def test_file_format(self, tmp_path, records):
        store = JsonCacheStore(tmp_path)
        await store.save_records(records[:1])
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert data["records"][0]["language"] == "en"
        assert not store.path.with_suffix(".json.tmp").exists()

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        store = JsonCacheStore(tmp_path)
        store.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CacheIOFailed):
            await store.load_records()


class TestSqliteCacheStore:
    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path, records):
        store = SqliteCacheStore(tmp_path / "cache" / "translations.db")
        await store.save_records(records)
        loaded = await store.load_records()
        store.close()
        assert sorted(loaded, key=lambda r: r.language) == records

    @pytest.mark.asyncio
    async def test_save_replaces(self, tmp_path, records):
        store = SqliteCacheStore(tmp_path / "translations.db")
        await store.save_records(records)
        await store.save_records(records[:1])
        assert len(await store.load_records()) == 1
        store.close()

    @pytest.mark.asyncio
    async def test_persists_across_connections(self, tmp_path, records):
        path = tmp_path / "translations.db"
        first = SqliteCacheStore(path)
        await first.save_records(records)
        first.close()
        second = SqliteCacheStore(path)
        assert len(await second.load_records()) == 2
        second.close()

    @pytest.mark.asyncio
    async def test_unreadable_row_skipped(self, tmp_path, records):
        store = SqliteCacheStore(tmp_path / "translations.db")
        await store.save_records(records[:1])
        store._conn.execute(
            "INSERT INTO translations VALUES (?, ?, ?, ?)",
            ("bad", "en", "{broken", CREATED.isoformat()),
        )
        loaded = await store.load_records()
        store.close()
        assert [r.fingerprint for r in loaded] == ["f" * 64]


@pytest.mark.redis
class TestRedisCacheStore:
    @pytest.fixture
    def redis_store(self):
        pytest.importorskip("redis")
        from tabilingo.cache.redis_store import RedisCacheStore

        client = MagicMock()
        return RedisCacheStore(redis_url="redis://localhost:6379/0", client=client), client

    @pytest.mark.asyncio
    async def test_load(self, redis_store, records):
        store, client = redis_store
        client.hgetall.return_value = {
            f"{r.fingerprint}:{r.language}": r.model_dump_json() for r in records
        }
        assert await store.load_records() == records
        client.hgetall.assert_called_once_with("tabilingo:translations")

    @pytest.mark.asyncio
    async def test_save_uses_transaction(self, redis_store, records):
        store, client = redis_store
        pipe = client.pipeline.return_value
        await store.save_records(records)
        client.pipeline.assert_called_once_with(transaction=True)
        pipe.delete.assert_called_once_with("tabilingo:translations")
        mapping = pipe.hset.call_args.kwargs["mapping"]
        assert set(mapping) == {f"{r.fingerprint}:{r.language}" for r in records}
        pipe.execute.assert_called_once()

    @pytest.mark.asyncio
    async def test_error_wrapped(self, redis_store):
        import redis

        store, client = redis_store
        client.hgetall.side_effect = redis.ConnectionError("down")
        with pytest.raises(CacheIOFailed):
            await store.load_records()

    @pytest.mark.asyncio
    async def test_bad_field_skipped(self, redis_store, records):
        store, client = redis_store
        client.hgetall.return_value = {
            "x:en": "not json",
            "y:en": records[0].model_dump_json(),
        }
        assert await store.load_records() == records[:1]
