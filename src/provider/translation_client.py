# src/provider/translation_client.py - v2
"""Rate-limited, retrying, caching translation client.

The only component that calls the translation provider. Each text is looked
up in the cache by content fingerprint, otherwise chunked, rate-limited and
sent chunk by chunk under the retry policy.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping

from tabilingo.cache.fingerprint import compute_text_fingerprint
from tabilingo.cache.models import TranslationPayload
from tabilingo.cache.translation_cache import TranslationCache
from tabilingo.config.languages import DEEPL_LANGUAGE_MAP
from tabilingo.config.settings import Settings
from tabilingo.core.errors import UnsupportedLanguageError, UsageUnavailableError
from tabilingo.core.models import BatchTranslation, QuotaState, TextTranslation
from tabilingo.provider.base_provider import BaseTranslationProvider
from tabilingo.provider.chunking import split_text
from tabilingo.provider.rate_limiter import RateLimiter
from tabilingo.provider.retry import RetryPolicy, proportional_jitter, with_retry

logger = logging.getLogger(__name__)


class TranslationClient:
    """Translate texts through one provider account."""

    def __init__(
        self,
        provider: BaseTranslationProvider,
        language_codes: Mapping[str, str] | None = None,
        source_language: str = "JA",
        max_chunk_chars: int = 2000,
        rate_limiter: RateLimiter | None = None,
        retry_policy: RetryPolicy | None = None,
        cache: TranslationCache | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._codes = dict(language_codes or DEEPL_LANGUAGE_MAP)
        self._source = source_language
        self._max_chunk = max_chunk_chars
        self._limiter = rate_limiter or RateLimiter(0.1)
        self._policy = retry_policy or RetryPolicy()
        self._cache = cache
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: BaseTranslationProvider,
        cache: TranslationCache | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> TranslationClient:
        policy = RetryPolicy(
            max_retries=settings.max_retries,
            initial_delay_s=settings.initial_backoff_ms / 1000.0,
            max_delay_s=settings.max_backoff_ms / 1000.0,
            backoff_factor=settings.backoff_factor,
            rate_limit_backoff_factor=settings.rate_limit_backoff_factor,
            jitter=proportional_jitter(settings.backoff_jitter_ratio),
        )
        return cls(
            provider=provider,
            source_language=settings.source_language_code,
            max_chunk_chars=settings.provider_max_chars_per_request,
            rate_limiter=rate_limiter or RateLimiter(settings.min_request_interval_s),
            retry_policy=policy,
            cache=cache,
        )

    @property
    def cache(self) -> TranslationCache | None:
        return self._cache

    @property
    def provider(self) -> BaseTranslationProvider:
        return self._provider

    def _log_retry(self, attempt: int, error_type: str, delay: float, error: Exception) -> None:
        logger.warning(
            "Provider call failed (%s, attempt %d/%d), retrying in %.1fs: %s",
            error_type, attempt, self._policy.max_retries + 1, delay, error,
        )

    async def translate_one(self, text: str, language: str) -> TextTranslation:
        """Translate one text, serving from cache when possible."""
        if not text.strip():
            return TextTranslation(translation="", used_cache=False, character_count=0)

        fingerprint = compute_text_fingerprint(text)
        if self._cache is not None:
            cached = self._cache.get(fingerprint, language)
            if cached is not None and isinstance(cached.body, str) and cached.body:
                return TextTranslation(translation=cached.body, used_cache=True)

        target_code = self._codes.get(language)
        if not target_code:
            raise UnsupportedLanguageError(language)

        translations: list[str] = []
        characters = 0
        for chunk in split_text(text, self._max_chunk):
            if not chunk.strip():
                continue
            await self._limiter.acquire()
            translated = await with_retry(
                lambda chunk=chunk: self._provider.translate(chunk, self._source, target_code),
                self._policy,
                on_retry=self._log_retry,
                sleep=self._sleep,
            )
            translations.append(translated)
            characters += len(chunk)

        # chunk seams get exactly one space; a single chunk is kept verbatim
        result = (
            translations[0]
            if len(translations) == 1
            else " ".join(t.strip() for t in translations)
        )
        if self._cache is not None:
            self._cache.set(fingerprint, language, TranslationPayload(body=result))
        return TextTranslation(translation=result, used_cache=False, character_count=characters)

    async def translate_batch(self, texts: list[str], language: str) -> BatchTranslation:
        """Translate texts sequentially, preserving order."""
        translations: list[str] = []
        cache_flags: list[bool] = []
        total = 0
        for text in texts:
            result = await self.translate_one(text, language)
            translations.append(result.translation)
            cache_flags.append(result.used_cache)
            total += result.character_count
        return BatchTranslation(
            translations=translations,
            used_cache=cache_flags,
            total_character_count=total,
        )

    async def get_usage(self) -> QuotaState:
        """Fetch provider usage.

        Raises:
            UsageUnavailableError: If the provider call fails.
        """
        try:
            usage = await self._provider.get_usage()
        except Exception as e:
            raise UsageUnavailableError(e) from e
        limit = usage.character_limit
        return QuotaState(
            character_count=usage.character_count,
            character_limit=limit,
            remaining=limit - usage.character_count,
            percentage=usage.character_count / limit * 100 if limit else 0.0,
        )

    async def check_quota(self, estimated_chars: int, max_percent: float = 90.0) -> bool:
        """Whether `estimated_chars` more keeps usage within `max_percent` of the limit.

        Permissive when usage cannot be fetched.
        """
        try:
            usage = await self.get_usage()
        except UsageUnavailableError as e:
            logger.warning("Usage unavailable, skipping quota check: %s", e)
            return True
        return usage.character_count + estimated_chars <= usage.character_limit * max_percent / 100
