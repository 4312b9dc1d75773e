# src/cache/sqlite_store.py - v2
"""SQLite-based cache store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. One row per
(fingerprint, language) pair.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from tabilingo.cache.base_cache_store import BaseCacheStore
from tabilingo.cache.models import CacheRecord, TranslationPayload
from tabilingo.core.errors import CacheIOFailed

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS translations (
    fingerprint TEXT NOT NULL,
    language TEXT NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL,
    PRIMARY KEY (fingerprint, language)
);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def load_records(self) -> list[CacheRecord]:
        try:
            rows = self._conn.execute(
                "SELECT fingerprint, language, payload, created_at FROM translations"
            ).fetchall()
        except sqlite3.Error as e:
            raise CacheIOFailed(f"Failed to read cache database: {e}") from e

        records: list[CacheRecord] = []
        for fingerprint, language, payload, created_at in rows:
            try:
                records.append(
                    CacheRecord(
                        fingerprint=fingerprint,
                        language=language,
                        payload=TranslationPayload.model_validate(json.loads(payload)),
                        created_at=datetime.fromisoformat(created_at),
                    )
                )
            except (json.JSONDecodeError, ValueError, ValidationError) as e:
                logger.warning("Skipping unreadable cache row %s/%s: %s", fingerprint, language, e)
        return records

    async def save_records(self, records: list[CacheRecord]) -> None:
        rows = [
            (
                r.fingerprint,
                r.language,
                r.payload.model_dump_json(),
                r.created_at.isoformat(),
            )
            for r in records
        ]
        try:
            with self._conn:
                self._conn.execute("DELETE FROM translations")
                self._conn.executemany(
                    "INSERT INTO translations (fingerprint, language, payload, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    rows,
                )
        except sqlite3.Error as e:
            raise CacheIOFailed(f"Failed to write cache database: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
