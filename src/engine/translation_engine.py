# src/engine/translation_engine.py - v1
"""Translation engine: one source article into N target languages.

Usage:
    engine = TranslationEngine(client, store, settings)
    result = await engine.translate_document("article-123", TranslationOptions(languages=["en"]))

Run order:
  1. Validate target languages (before any I/O)
  2. Load the source and check it is an untranslated source-language article
  3. Validate and sanitize the body
  4. Estimate characters; check the monthly ceiling, then the live quota
  5. Drop languages that already have a translation (unless force)
  6. Translate each remaining language; one failure never stops the others
  7. Persist all successes in one batch, save the cache, report
"""

from __future__ import annotations

import logging
import re
import uuid

from tabilingo.config.languages import TARGET_LANGUAGES, resolve_prefecture
from tabilingo.config.settings import Settings
from tabilingo.core.errors import (
    AlreadyATranslationError,
    DocumentFetchFailedError,
    DocumentNotFoundError,
    InvalidStructureError,
    InvalidTargetLanguageError,
    MonthlyLimitExceededError,
    PersistenceFailed,
    QuotaWouldBeExceededError,
    TranslationError,
    UsageUnavailableError,
    WrongSourceLanguageError,
)
from tabilingo.core.models import (
    Article,
    BatchCreateResult,
    QuotaState,
    Reference,
    Slug,
    TranslationOptions,
    TranslationOutcome,
    TranslationRunResult,
    TranslationStats,
)
from tabilingo.document.models import Block, dump_blocks, parse_blocks
from tabilingo.document.portable_text import (
    count_characters,
    extract_texts,
    inject_texts,
    sanitize_blocks,
    summarize_content,
    validate_structure,
)
from tabilingo.document.slug import slugify, strip_language_suffix
from tabilingo.logging.context import clear_context, set_document_context, set_language_context
from tabilingo.provider.translation_client import TranslationClient
from tabilingo.store.base_document_store import BaseDocumentStore, DocumentStoreError
from tabilingo.tracking.cost_calculator import (
    document_character_count,
    estimate_cost,
    estimate_run_characters,
    format_character_count,
)

logger = logging.getLogger(__name__)


def derive_slug(
    translated_title: str,
    translated_slug_text: str,
    source: Article,
    language: str,
    source_language: str = "ja",
) -> str:
    """Pick the first usable slug base and suffix it with `-<language>`.

    Priority: translated title, translated slug text, source slug without its
    source-language suffix, source title, then `article-<id>`.
    """
    candidates = [slugify(translated_title), slugify(translated_slug_text)]
    if source.slug and source.slug.current:
        candidates.append(strip_language_suffix(source.slug.current, source_language))
    candidates.append(slugify(source.title))
    for base in candidates:
        if base:
            return f"{base}-{language}"
    clean_id = re.sub(r"[^a-z0-9]", "", source.id, flags=re.I).lower()
    return f"article-{clean_id}-{language}"


def slug_source_text(source: Article, source_language: str = "ja") -> str:
    """Readable text behind the source slug: `kyoto-temples-ja` gives `kyoto temples`."""
    if not source.slug or not source.slug.current:
        return ""
    return strip_language_suffix(source.slug.current, source_language).replace("-", " ")


class TranslationEngine:
    """Orchestrates client, cache and document store for whole-article translation."""

    def __init__(
        self,
        client: TranslationClient,
        store: BaseDocumentStore,
        settings: Settings | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._settings = settings or Settings()

    async def translate_document(
        self,
        document_id: str,
        options: TranslationOptions | None = None,
    ) -> TranslationRunResult:
        """Translate one source article. Never raises for expected failures.

        Pre-flight failures give `success=False` with a single error and its
        `error_code`. Per-language failures are listed in `errors`.
        """
        options = options or TranslationOptions()
        languages = list(options.languages or self._settings.target_languages_list)
        set_document_context(document_id, _generate_run_id(document_id))
        try:
            return await self._run(document_id, languages, options)
        except TranslationError as e:
            logger.error("Translation failed: %s", e, extra={"data": {"code": e.code}})
            return TranslationRunResult(
                success=False,
                errors=[str(e)],
                error_code=e.code,
                api_quota_status=await self._final_usage(),
            )
        finally:
            clear_context()

    async def _run(
        self, document_id: str, languages: list[str], options: TranslationOptions
    ) -> TranslationRunResult:
        # --- 1. Languages ---
        invalid = [lang for lang in languages if lang not in TARGET_LANGUAGES]
        if invalid:
            raise InvalidTargetLanguageError(invalid)

        logger.info(
            "Starting document translation",
            extra={"data": {"target_languages": len(languages), "force": options.force}},
        )

        # --- 2. Source ---
        source = await self._load_source(document_id)

        # --- 3. Structure ---
        blocks = self._validated_blocks(source)
        summary = summarize_content(blocks, self._settings.price_per_million_chars)
        logger.info("Content analysis", extra={"data": summary.__dict__})

        # --- 4. Cost pre-flight ---
        per_document = document_character_count(
            source.title, source.tags, summary.total_characters
        )
        estimated = estimate_run_characters(per_document, len(languages))
        logger.info(
            "Character count analysis",
            extra={"data": {
                "per_document": format_character_count(per_document),
                "estimated_total": format_character_count(estimated),
            }},
        )
        await self._check_limits(estimated)

        # --- 5. Work set ---
        work_set = await self._work_set(document_id, languages, options.force)
        if not work_set:
            logger.info("All translations already exist")
            return TranslationRunResult(
                success=True, api_quota_status=await self._final_usage()
            )

        # --- 6. Per-language loop ---
        outcomes: list[TranslationOutcome] = []
        errors: list[str] = []
        total_characters = 0
        for language in work_set:
            set_language_context(language, step="translate")
            try:
                outcome = await self.translate_to_language(source, blocks, language)
            except Exception as e:
                message = f"Translation failed for {language}: {e}"
                errors.append(message)
                logger.error(message)
                continue
            outcomes.append(outcome)
            total_characters += outcome.character_count
            logger.info(
                "Translation completed",
                extra={"data": {
                    "used_cache": outcome.used_cache,
                    "characters": outcome.character_count,
                }},
            )
        set_language_context(None)

        # --- 7. Persist, save cache, report ---
        persistence = await self._persist(source, outcomes, options.dry_run)
        if self._client.cache is not None:
            await self._client.cache.save()

        quota = await self._final_usage()
        logger.info(
            "Translation run finished",
            extra={"data": {
                "successful": len(outcomes),
                "failed": len(errors),
                "total_characters": format_character_count(total_characters),
                "quota_percent": round(quota.percentage, 1) if quota else None,
            }},
        )
        return TranslationRunResult(
            success=not errors,
            results=outcomes,
            errors=errors,
            total_characters_used=total_characters,
            api_quota_status=quota,
            persistence=persistence,
        )

    async def translate_to_language(
        self, source: Article, blocks: list[Block], language: str
    ) -> TranslationOutcome:
        """Translate title, slug text, place name, tags and body into `language`."""
        extracted = extract_texts(blocks)
        tags = source.tags or []
        texts = [source.title, slug_source_text(source, self._settings.source_language)]
        if source.place_name:
            texts.append(source.place_name)
        texts.extend(tags)
        texts.extend(item.text for item in extracted)

        batch = await self._client.translate_batch(texts, language)
        translations = iter(batch.translations)
        title = next(translations)
        slug_text = next(translations)
        place_name = next(translations) if source.place_name else None
        translated_tags = [next(translations) for _ in tags]
        body = list(translations)

        content = inject_texts(blocks, extracted, body)
        translated = source.model_copy(
            update={
                "id": self._store.derive_translated_id(source.id, language),
                "rev": None,
                "created_at": None,
                "updated_at": None,
                "title": title,
                "slug": Slug(
                    current=derive_slug(
                        title, slug_text, source, language, self._settings.source_language
                    )
                ),
                "excerpt": None,
                "content": dump_blocks(content),
                "lang": language,
                "translation_of": Reference(ref=source.id),
                "tags": translated_tags if source.tags is not None else None,
                "place_name": place_name or None,
                "prefecture": resolve_prefecture(
                    source.prefecture, self._settings.prefecture_policy
                ),
            },
            deep=True,
        )
        return TranslationOutcome(
            language=language,
            document=translated,
            used_cache=batch.fully_cached,
            character_count=batch.total_character_count,
        )

    async def get_stats(self, document_id: str) -> TranslationStats:
        """Report source metadata, translation status and estimated cost. No translation."""
        source = await self._fetch(document_id)
        if source is None:
            raise DocumentNotFoundError(document_id)
        languages = list(TARGET_LANGUAGES)
        try:
            status = await self._store.get_translation_status(document_id, languages)
        except DocumentStoreError as e:
            raise DocumentFetchFailedError(document_id, e) from e
        characters = document_character_count(
            source.title, source.tags, count_characters(parse_blocks(source.content))
        )
        return TranslationStats(
            source_document=source,
            translation_status=status,
            total_characters=characters,
            estimated_cost=estimate_cost(
                characters * len(languages), self._settings.price_per_million_chars
            ),
        )

    # --- Helpers ---

    async def _fetch(self, document_id: str) -> Article | None:
        try:
            return await self._store.get_document(document_id)
        except DocumentStoreError as e:
            raise DocumentFetchFailedError(document_id, e) from e

    async def _load_source(self, document_id: str) -> Article:
        source = await self._fetch(document_id)
        if source is None:
            raise DocumentNotFoundError(document_id)
        expected = self._settings.source_language
        if source.lang != expected:
            raise WrongSourceLanguageError(document_id, source.lang, expected)
        if source.translation_of is not None:
            raise AlreadyATranslationError(document_id, source.translation_of.ref)
        logger.info(
            "Source document loaded",
            extra={"data": {"title": source.title, "content_blocks": len(source.content)}},
        )
        return source

    def _validated_blocks(self, source: Article) -> list[Block]:
        blocks = parse_blocks(source.content)
        validation = validate_structure(blocks, self._settings.large_content_threshold)
        if not validation.is_valid:
            raise InvalidStructureError(validation.errors)
        for warning in validation.warnings:
            logger.warning("Content warning: %s", warning)
        return sanitize_blocks(blocks)

    async def _check_limits(self, estimated: int) -> None:
        ceiling = self._settings.max_characters_per_month
        if estimated > ceiling:
            raise MonthlyLimitExceededError(estimated, ceiling)
        if not await self._client.check_quota(estimated, self._settings.quota_max_percent):
            usage = await self._final_usage()
            raise QuotaWouldBeExceededError(
                estimated,
                used=usage.character_count if usage else None,
                limit=usage.character_limit if usage else None,
            )

    async def _work_set(self, document_id: str, languages: list[str], force: bool) -> list[str]:
        if force:
            return languages
        try:
            status = await self._store.get_translation_status(document_id, languages)
        except DocumentStoreError as e:
            raise DocumentFetchFailedError(document_id, e) from e
        existing = {s.language for s in status if s.exists}
        work_set = [lang for lang in languages if lang not in existing]
        if existing:
            logger.info(
                "Skipping existing translations",
                extra={"data": {"skipped": sorted(existing), "remaining": work_set}},
            )
        return work_set

    async def _persist(
        self, source: Article, outcomes: list[TranslationOutcome], dry_run: bool
    ) -> BatchCreateResult | None:
        if not outcomes:
            return None
        try:
            result = await self._store.batch_create_or_skip(
                source, [o.document for o in outcomes], dry_run=dry_run
            )
        except DocumentStoreError as e:
            error = PersistenceFailed(f"Batch create translations failed: {e}")
            logger.error(str(error), extra={"data": {"code": error.code}})
            return None
        if result.failed:
            logger.error(
                "Some translations could not be persisted",
                extra={"data": {"code": PersistenceFailed.code, "failed": result.failed}},
            )
        return result

    async def _final_usage(self) -> QuotaState | None:
        try:
            return await self._client.get_usage()
        except UsageUnavailableError as e:
            logger.warning("Quota status unavailable: %s", e)
            return None


def _generate_run_id(document_id: str) -> str:
    return f"{document_id}-{uuid.uuid4().hex[:8]}"
