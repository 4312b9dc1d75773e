# src/cache/redis_store.py - v2
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install tabilingo[redis].
Records are fields of one hash so a save replaces the whole cache atomically.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from tabilingo.cache.base_cache_store import BaseCacheStore
from tabilingo.cache.models import CacheRecord
from tabilingo.core.errors import CacheIOFailed

logger = logging.getLogger(__name__)

_HASH_KEY = "tabilingo:translations"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store for shared/multi-runner deployments."""

    def __init__(self, redis_url: str, client: Any = None) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install tabilingo[redis]"
            ) from e

        self._errors: tuple[type[Exception], ...] = (redis.RedisError,)
        self._client = client or redis.Redis.from_url(redis_url, decode_responses=True)

    async def load_records(self) -> list[CacheRecord]:
        try:
            fields = self._client.hgetall(_HASH_KEY)
        except self._errors as e:
            raise CacheIOFailed(f"Failed to read cache from Redis: {e}") from e

        records: list[CacheRecord] = []
        for field, value in fields.items():
            try:
                records.append(CacheRecord.model_validate(json.loads(value)))
            except (json.JSONDecodeError, ValidationError) as e:
                logger.warning("Skipping unreadable cache field %s: %s", field, e)
        return records

    async def save_records(self, records: list[CacheRecord]) -> None:
        mapping = {
            f"{r.fingerprint}:{r.language}": r.model_dump_json() for r in records
        }
        try:
            pipe = self._client.pipeline(transaction=True)
            pipe.delete(_HASH_KEY)
            if mapping:
                pipe.hset(_HASH_KEY, mapping=mapping)
            pipe.execute()
        except self._errors as e:
            raise CacheIOFailed(f"Failed to write cache to Redis: {e}") from e

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
