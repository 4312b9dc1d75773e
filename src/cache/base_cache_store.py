# src/cache/base_cache_store.py - v2
"""Abstract cache storage interface.

Backends persist the full record list; expiry and lookup live in
TranslationCache, not in the stores.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tabilingo.cache.models import CacheRecord


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def load_records(self) -> list[CacheRecord]:
        """Return every persisted record. Missing storage yields [].

        Raises:
            CacheIOFailed: If storage exists but cannot be read or decoded.
        """

    @abstractmethod
    async def save_records(self, records: list[CacheRecord]) -> None:
        """Replace persisted contents with `records`.

        Raises:
            CacheIOFailed: If storage cannot be written.
        """

    def close(self) -> None:
        """Release backend resources. No-op by default."""
