# src/core/models.py - v2
"""Shared Pydantic domain models used across modules.

Articles mirror the CMS document shape; Sanity system fields carry a leading
underscore on the wire and are exposed through aliases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# === CMS DOCUMENT ===


class Slug(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(default="slug", alias="_type")
    current: str


class Reference(BaseModel):
    """Reference to another CMS document."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(default="reference", alias="_type")
    ref: str = Field(alias="_ref")


class Article(BaseModel):
    """Travel-blog article as stored in the CMS.

    `content` is kept as raw Portable Text JSON; use
    `tabilingo.document.portable_text.parse_blocks` to get typed blocks.
    Unknown CMS fields are preserved so a fetched article dumps back unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # --- System fields ---
    id: str = Field(alias="_id")
    document_type: str = Field(default="article", alias="_type")
    rev: str | None = Field(default=None, alias="_rev")
    created_at: str | None = Field(default=None, alias="_createdAt")
    updated_at: str | None = Field(default=None, alias="_updatedAt")

    # --- Content ---
    title: str = ""
    slug: Slug | None = None
    excerpt: str | None = None
    content: list[Any] = Field(default_factory=list)
    lang: str | None = None
    translation_of: Reference | None = Field(default=None, alias="translationOf")

    # --- Metadata ---
    published_at: str | None = Field(default=None, alias="publishedAt")
    author: Any = None
    tags: list[str] | None = None
    featured: bool | None = None
    article_type: str | None = Field(default=None, alias="type")
    place_name: str | None = Field(default=None, alias="placeName")
    prefecture: str | None = None
    cover_image: Any = Field(default=None, alias="coverImage")
    main_image: Any = Field(default=None, alias="mainImage")
    image: Any = None
    gallery: Any = None

    def to_document(self) -> dict[str, Any]:
        """Dump to the CMS wire shape, omitting unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


# === ENGINE INPUT / OUTPUT ===


class TranslationOptions(BaseModel):
    """Per-run options for the translation engine."""

    languages: list[str] | None = None
    force: bool = False
    dry_run: bool = False


class TranslationOutcome(BaseModel):
    """Result for one target language."""

    language: str
    document: Article
    used_cache: bool = False
    character_count: int = 0


class QuotaState(BaseModel):
    """Provider-reported usage snapshot (read-only view)."""

    character_count: int
    character_limit: int
    remaining: int
    percentage: float


class BatchCreateResult(BaseModel):
    """Outcome of `batch_create_or_skip` on the document store."""

    successful: int = 0
    failed: int = 0
    skipped: int = 0
    results: list[dict[str, Any]] = Field(default_factory=list)


class TranslationRunResult(BaseModel):
    """Aggregated result of one `translate_document` run."""

    success: bool
    results: list[TranslationOutcome] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    total_characters_used: int = 0
    api_quota_status: QuotaState | None = None
    error_code: str | None = None
    persistence: BatchCreateResult | None = None


class LanguageStatus(BaseModel):
    language: str
    exists: bool
    document_id: str | None = None


class TranslationStats(BaseModel):
    """Read-only report for one source document."""

    source_document: Article
    translation_status: list[LanguageStatus]
    total_characters: int
    estimated_cost: float


# === CLIENT RESULTS ===


class ProviderUsage(BaseModel):
    """Raw usage counters as returned by a provider adapter."""

    character_count: int
    character_limit: int


class TextTranslation(BaseModel):
    translation: str
    used_cache: bool = False
    character_count: int = 0


class BatchTranslation(BaseModel):
    """Order-preserving batch result; `used_cache` is per text."""

    translations: list[str]
    used_cache: list[bool] = Field(default_factory=list)
    total_character_count: int = 0

    @property
    def fully_cached(self) -> bool:
        return bool(self.used_cache) and all(self.used_cache)


class CacheStats(BaseModel):
    """Summary of the translation cache contents."""

    total_entries: int
    total_translations: int
    oldest_entry: datetime | None = None
