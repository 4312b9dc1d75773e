# src/engine/markdown_translator.py - v1
"""File-based translation of Markdown articles with YAML front matter.

Each source file `<dir>/<slug>.md` (lang = source language) produces one
file per target language at `<dir>/<lang>/<slug-without-suffix>-<lang>.md`.
Results are cached per document fingerprint, so an unchanged file is never
sent to the provider twice.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from tabilingo.cache.fingerprint import compute_content_fingerprint
from tabilingo.cache.models import TranslationPayload
from tabilingo.cache.translation_cache import TranslationCache
from tabilingo.config.settings import Settings
from tabilingo.core.errors import FrontMatterError
from tabilingo.document.markdown import MarkdownArticle, read_markdown, write_markdown
from tabilingo.document.slug import normalize_tag, slug_with_language
from tabilingo.provider.translation_client import TranslationClient

logger = logging.getLogger(__name__)


@dataclass
class FileProcessingResult:
    """Per-file (or aggregated) counters."""

    translated: int = 0
    skipped: int = 0
    errors: int = 0

    def __add__(self, other: FileProcessingResult) -> FileProcessingResult:
        return FileProcessingResult(
            translated=self.translated + other.translated,
            skipped=self.skipped + other.skipped,
            errors=self.errors + other.errors,
        )


@dataclass
class _LanguageOutput:
    front_matter: dict
    content: str
    path: Path
    cached: bool


def output_path_for(source: Path, slug: str, language: str) -> Path:
    return source.parent / language / f"{slug_with_language(slug, language)}.md"


class MarkdownTranslator:
    """Translate Markdown files through the shared client and cache."""

    def __init__(
        self,
        client: TranslationClient,
        cache: TranslationCache,
        settings: Settings | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._settings = settings or Settings()

    async def process_file(
        self,
        path: Path,
        languages: Sequence[str],
        dry_run: bool = False,
        force: bool = False,
    ) -> FileProcessingResult:
        """Translate one file into every language in `languages`.

        Raises:
            FrontMatterError: If the front matter is missing or incomplete.
            OSError: If the file cannot be read.
        """
        article = read_markdown(path)
        name = path.name
        logger.info("Processing file", extra={"data": {"file": name}})

        if article.lang != self._settings.source_language:
            logger.warning(
                "Skipping file not in source language",
                extra={"data": {"file": name, "lang": article.lang}},
            )
            return FileProcessingResult(skipped=1)

        length = len(article.content) + len(article.title) + len(article.excerpt or "")
        limit = self._settings.markdown_max_characters
        if length > limit:
            logger.error(
                "Content exceeds character limit",
                extra={"data": {"file": name, "length": length, "limit": limit}},
            )
            return FileProcessingResult(errors=1)

        estimated = length * len(languages)
        if not await self._client.check_quota(estimated, self._settings.quota_max_percent):
            logger.error(
                "Provider character limit would be exceeded",
                extra={"data": {"file": name, "estimated_chars": estimated}},
            )
            return FileProcessingResult(errors=1)

        fingerprint = compute_content_fingerprint(
            article.content,
            title=article.title,
            excerpt=article.excerpt,
            tags=article.tags or None,
        )

        result = FileProcessingResult()
        for language in languages:
            try:
                output = await self._translate_to_language(article, path, language, fingerprint, force)
                if output is None:
                    result.skipped += 1
                    continue
                if output.cached:
                    result.skipped += 1
                else:
                    result.translated += 1
                logger.info(
                    "Used cached translation" if output.cached else "Created new translation",
                    extra={"data": {"file": name, "language": language, "output": output.path.name}},
                )
                if not dry_run:
                    write_markdown(output.path, output.front_matter, output.content)
            except Exception as e:
                logger.error(
                    "Translation failed",
                    extra={"data": {"file": name, "language": language, "error": str(e)}},
                )
                result.errors += 1

        if not dry_run:
            await self._cache.save()
        return result

    async def process_files(
        self,
        paths: Iterable[Path],
        languages: Sequence[str],
        dry_run: bool = False,
        force: bool = False,
    ) -> FileProcessingResult:
        """Process several files; an unreadable file counts as one error."""
        total = FileProcessingResult()
        for path in paths:
            try:
                total += await self.process_file(path, languages, dry_run=dry_run, force=force)
            except (FrontMatterError, OSError) as e:
                logger.error(
                    "Failed to process file",
                    extra={"data": {"file": path.name, "error": str(e)}},
                )
                total.errors += 1
        logger.info("Markdown translation finished", extra={"data": total.__dict__})
        return total

    async def _translate_to_language(
        self,
        article: MarkdownArticle,
        path: Path,
        language: str,
        fingerprint: str,
        force: bool,
    ) -> _LanguageOutput | None:
        output_path = output_path_for(path, article.slug, language)
        if not force and output_path.exists():
            return None

        base = {**article.front_matter, "lang": language, "slug": slug_with_language(article.slug, language)}

        if not force:
            cached = self._cache.get(fingerprint, language)
            if cached is not None and isinstance(cached.body, str):
                front_matter = {
                    **base,
                    "title": cached.title,
                    "excerpt": cached.excerpt,
                    "tags": cached.tags,
                }
                return _LanguageOutput(front_matter, cached.body, output_path, cached=True)

        texts = [article.title, article.content]
        if article.excerpt:
            texts.append(article.excerpt)
        texts.extend(article.tags)

        batch = await self._client.translate_batch(texts, language)
        translations = iter(batch.translations)
        title = next(translations)
        content = next(translations)
        excerpt = next(translations) if article.excerpt else None
        tags = [normalize_tag(tag) for tag in translations] if article.tags else None

        self._cache.set(
            fingerprint,
            language,
            TranslationPayload(title=title, excerpt=excerpt, tags=tags, body=content),
        )
        front_matter = {**base, "title": title, "excerpt": excerpt, "tags": tags}
        return _LanguageOutput(front_matter, content, output_path, cached=False)
