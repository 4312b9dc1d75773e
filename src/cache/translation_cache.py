# src/cache/translation_cache.py - v1
"""In-memory translation cache with TTL expiry, persisted through a store.

Keys are `(fingerprint, language)`. Expired entries are logical misses until
`cleanup()` removes them. Storage failures are logged and never propagate:
a broken cache behaves like an empty one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from tabilingo.cache.base_cache_store import BaseCacheStore
from tabilingo.cache.models import CacheRecord, TranslationPayload
from tabilingo.core.errors import CacheIOFailed
from tabilingo.core.models import CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL_DAYS = 30


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TranslationCache:
    """Content-hash keyed cache of translated payloads."""

    def __init__(
        self,
        store: BaseCacheStore | None = None,
        ttl_days: int = DEFAULT_TTL_DAYS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._ttl = timedelta(days=ttl_days)
        self._clock = clock
        self._records: dict[tuple[str, str], CacheRecord] = {}

    async def load(self) -> None:
        """Replace in-memory state with persisted records; starts empty on failure."""
        self._records.clear()
        if self._store is None:
            return
        try:
            records = await self._store.load_records()
        except CacheIOFailed as e:
            logger.warning("Cache unavailable, starting empty: %s", e)
            return
        for record in records:
            self._records[(record.fingerprint, record.language)] = record
        logger.debug("Cache loaded", extra={"data": {"translations": len(self._records)}})

    def _is_expired(self, record: CacheRecord) -> bool:
        return self._clock() - record.created_at > self._ttl

    def get(self, fingerprint: str, language: str) -> TranslationPayload | None:
        record = self._records.get((fingerprint, language))
        if record is None or self._is_expired(record):
            return None
        return record.payload

    def set(self, fingerprint: str, language: str, payload: TranslationPayload) -> None:
        self._records[(fingerprint, language)] = CacheRecord(
            fingerprint=fingerprint,
            language=language,
            payload=payload,
            created_at=self._clock(),
        )

    def has(self, fingerprint: str, language: str) -> bool:
        return self.get(fingerprint, language) is not None

    async def save(self) -> bool:
        """Persist the full in-memory state. Returns False if the store failed."""
        if self._store is None:
            return True
        try:
            await self._store.save_records(list(self._records.values()))
        except CacheIOFailed as e:
            logger.error("Cache save failed: %s", e)
            return False
        return True

    def cleanup(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        expired = [key for key, record in self._records.items() if self._is_expired(record)]
        for key in expired:
            del self._records[key]
        if expired:
            logger.info("Removed expired cache entries", extra={"data": {"removed": len(expired)}})
        return len(expired)

    def clear(self) -> None:
        self._records.clear()

    def stats(self) -> CacheStats:
        fingerprints = {fingerprint for fingerprint, _ in self._records}
        oldest = min((r.created_at for r in self._records.values()), default=None)
        return CacheStats(
            total_entries=len(fingerprints),
            total_translations=len(self._records),
            oldest_entry=oldest,
        )

    def __len__(self) -> int:
        return len(self._records)
