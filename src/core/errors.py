# src/core/errors.py - v1
"""Error taxonomy for the translation core.

Every error carries a stable `code` so callers (the CLI, webhook handlers) can
map failures to exit codes or HTTP statuses without matching message text.
"""

from __future__ import annotations

from collections.abc import Sequence


class TranslationError(Exception):
    """Base class for all translation-pipeline errors."""

    code = "translation_error"


class InvalidTargetLanguageError(TranslationError):
    """A requested target language is not in the supported set."""

    code = "invalid_target_language"

    def __init__(self, languages: Sequence[str]):
        self.languages = list(languages)
        super().__init__(f"Invalid target language: {', '.join(self.languages)}")


class DocumentNotFoundError(TranslationError):
    code = "document_not_found"

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document {document_id} not found")


class DocumentFetchFailedError(TranslationError):
    """The document store could not be reached or returned garbage."""

    code = "document_fetch_failed"

    def __init__(self, document_id: str, cause: Exception):
        self.document_id = document_id
        self.cause = cause
        super().__init__(f"Failed to fetch document {document_id}: {cause}")


class WrongSourceLanguageError(TranslationError):
    code = "wrong_source_language"

    def __init__(self, document_id: str, language: str | None, expected: str):
        self.document_id = document_id
        self.language = language
        self.expected = expected
        super().__init__(
            f"Document {document_id} is not in the source language "
            f"(lang: {language}, expected: {expected})"
        )


class AlreadyATranslationError(TranslationError):
    """The document carries a translationOf reference; translations are not re-translated."""

    code = "already_a_translation"

    def __init__(self, document_id: str, source_id: str):
        self.document_id = document_id
        self.source_id = source_id
        super().__init__(
            f"Document {document_id} is already a translation of {source_id}, "
            "not a master document"
        )


class InvalidStructureError(TranslationError):
    code = "invalid_structure"

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__(f"Invalid Portable Text structure: {', '.join(self.errors)}")


class QuotaWouldBeExceededError(TranslationError):
    code = "quota_would_be_exceeded"

    def __init__(self, estimated: int, used: int | None = None, limit: int | None = None):
        self.estimated = estimated
        self.used = used
        self.limit = limit
        super().__init__(
            f"Translation would exceed API limits. Current: {used}, "
            f"Limit: {limit}, Estimated usage: {estimated}"
        )


class MonthlyLimitExceededError(TranslationError):
    code = "monthly_limit_exceeded"

    def __init__(self, estimated: int, ceiling: int):
        self.estimated = estimated
        self.ceiling = ceiling
        super().__init__(
            f"Translation exceeds monthly character limit: {estimated} > {ceiling}"
        )


class UnsupportedLanguageError(TranslationError):
    """No provider code is mapped for a language."""

    code = "unsupported_language"

    def __init__(self, language: str):
        self.language = language
        super().__init__(f"Unsupported target language: {language}")


class ProviderCallFailed(TranslationError):
    """The provider call failed after all retries (or with a non-retryable error)."""

    code = "provider_call_failed"

    def __init__(self, attempts: int, error_type: str, last_error: Exception):
        self.attempts = attempts
        self.error_type = error_type
        self.last_error = last_error
        super().__init__(
            f"Provider call failed after {attempts} attempt(s) ({error_type}): {last_error}"
        )


class UsageUnavailableError(TranslationError):
    code = "usage_unavailable"

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Failed to get provider usage: {cause}")


class PersistenceFailed(TranslationError):
    code = "persistence_failed"


class CacheIOFailed(TranslationError):
    code = "cache_io_failed"


class FrontMatterError(TranslationError):
    """A Markdown file has no parseable front matter or lacks a required field."""

    code = "invalid_front_matter"
