# src/cache/cache_factory.py - v3
"""Factory for cache store instantiation."""

from __future__ import annotations

from tabilingo.cache.base_cache_store import BaseCacheStore
from tabilingo.config.settings import Settings

DEFAULT_CACHE_DIR = ".deepl-cache"


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to JSON backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_dir = DEFAULT_CACHE_DIR if settings is None else str(settings.cache_dir)

    if backend == "json":
        from tabilingo.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_dir=cache_dir)

    if backend == "sqlite":
        from tabilingo.cache.sqlite_store import SqliteCacheStore
        return SqliteCacheStore(db_path=f"{cache_dir}/translations.db")

    if backend == "redis":
        from tabilingo.cache.redis_store import RedisCacheStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisCacheStore(redis_url=settings.cache_redis_url)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
