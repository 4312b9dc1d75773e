# src/cache/json_store.py - v2
"""JSON file cache store (default CACHE_BACKEND=json).

All records live in a single `translations.json` under the cache directory,
written atomically through a temporary file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from tabilingo.cache.base_cache_store import BaseCacheStore
from tabilingo.cache.models import CacheRecord
from tabilingo.core.errors import CacheIOFailed

logger = logging.getLogger(__name__)

CACHE_FILENAME = "translations.json"


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using one JSON document."""

    def __init__(self, cache_dir: Path | str) -> None:
        self._path = Path(cache_dir).expanduser() / CACHE_FILENAME

    @property
    def path(self) -> Path:
        return self._path

    async def load_records(self) -> list[CacheRecord]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            return [CacheRecord.model_validate(item) for item in data["records"]]
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
            raise CacheIOFailed(f"Failed to read cache file {self._path}: {e}") from e

    async def save_records(self, records: list[CacheRecord]) -> None:
        document = {
            "version": 1,
            "records": [record.model_dump(mode="json") for record in records],
        }
        tmp_path = self._path.with_suffix(".json.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8"
            )
            tmp_path.replace(self._path)
        except OSError as e:
            raise CacheIOFailed(f"Failed to save cache file {self._path}: {e}") from e
        logger.debug("Cache saved", extra={"data": {"path": str(self._path), "records": len(records)}})
