# src/cache/models.py - v3
"""Cache domain models: TranslationPayload, CacheRecord."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, field_validator


class TranslationPayload(BaseModel):
    """Translated fields stored for one (fingerprint, language) pair.

    The text-level cache only fills `body`; document-level entries (Markdown
    files) also carry title, excerpt and tags.
    """

    title: str | None = None
    excerpt: str | None = None
    tags: list[str] | None = None
    body: str | list[str] | None = None


class CacheRecord(BaseModel):
    """Persisted cache row. `created_at` is always timezone-aware UTC."""

    fingerprint: str
    language: str
    payload: TranslationPayload
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        # naive timestamps (hand-edited files, other writers) are read as UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)
