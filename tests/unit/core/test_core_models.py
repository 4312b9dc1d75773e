# tests/unit/core/test_core_models.py - v1
"""Tests for core/models.py and core/errors.py."""

from __future__ import annotations

import pytest

from tabilingo.core import errors
from tabilingo.core.models import Article, BatchTranslation, Reference, Slug


class TestArticle:
    def test_aliases(self, sample_article):
        assert sample_article.id == "article-123"
        assert sample_article.document_type == "article"
        assert sample_article.article_type == "spot"
        assert sample_article.place_name == "金閣寺"
        assert sample_article.slug.current == "kyoto-temples-ja"
        assert sample_article.translation_of is None

    def test_round_trip_preserves_unknown_fields(self, sample_article_data):
        article = Article.model_validate(sample_article_data)
        assert article.to_document() == sample_article_data

    def test_translation_reference(self):
        article = Article(
            id="a-en",
            lang="en",
            translation_of=Reference(ref="a"),
            slug=Slug(current="a-en"),
        )
        doc = article.to_document()
        assert doc["translationOf"] == {"_type": "reference", "_ref": "a"}
        assert doc["slug"] == {"_type": "slug", "current": "a-en"}
        assert "excerpt" not in doc

    def test_minimal(self):
        article = Article.model_validate({"_id": "x"})
        assert article.title == ""
        assert article.content == []


class TestBatchTranslation:
    def test_fully_cached(self):
        assert BatchTranslation(translations=["a"], used_cache=[True]).fully_cached is True
        assert BatchTranslation(translations=["a", "b"], used_cache=[True, False]).fully_cached is False
        assert BatchTranslation(translations=[]).fully_cached is False


class TestErrors:
    @pytest.mark.parametrize("error,code", [
        (errors.InvalidTargetLanguageError(["xx"]), "invalid_target_language"),
        (errors.DocumentNotFoundError("a"), "document_not_found"),
        (errors.DocumentFetchFailedError("a", RuntimeError("x")), "document_fetch_failed"),
        (errors.WrongSourceLanguageError("a", "en", "ja"), "wrong_source_language"),
        (errors.AlreadyATranslationError("a-en", "a"), "already_a_translation"),
        (errors.InvalidStructureError(["bad"]), "invalid_structure"),
        (errors.QuotaWouldBeExceededError(10, 1, 2), "quota_would_be_exceeded"),
        (errors.MonthlyLimitExceededError(10, 5), "monthly_limit_exceeded"),
        (errors.UnsupportedLanguageError("xx"), "unsupported_language"),
        (errors.ProviderCallFailed(4, "transient", RuntimeError("x")), "provider_call_failed"),
        (errors.UsageUnavailableError(RuntimeError("x")), "usage_unavailable"),
        (errors.PersistenceFailed("x"), "persistence_failed"),
        (errors.CacheIOFailed("x"), "cache_io_failed"),
    ])
    def test_codes(self, error, code):
        assert isinstance(error, errors.TranslationError)
        assert error.code == code

    def test_messages(self):
        assert str(errors.DocumentNotFoundError("a")) == "Document a not found"
        assert str(errors.UnsupportedLanguageError("xx")) == "Unsupported target language: xx"
        assert "b1, b2" in str(errors.InvalidStructureError(["b1", "b2"]))
