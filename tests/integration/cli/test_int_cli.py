# tests/integration/cli/test_int_cli.py - v1
"""End-to-end CLI runs with the provider and CMS replaced by in-process fakes."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

from tabilingo import main as cli_main
from tabilingo.config.settings import Settings
from tabilingo.core.models import ProviderUsage
from tabilingo.main import EXIT_OK, EXIT_TRANSLATION, EXIT_VALIDATION, main

SOURCE = """---
title: 奈良の鹿
lang: ja
slug: nara-deer-ja
---
奈良公園には鹿がいます。
"""


@pytest.fixture
def cli_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        cache_dir=tmp_path / "cache",
        min_request_interval_ms=0,
        max_retries=0,
        log_format="text",
    )


@pytest.fixture
def provider(provider_factory):
    return provider_factory()


@pytest.fixture(autouse=True)
def _wire(monkeypatch, cli_settings, provider, memory_store):
    monkeypatch.setattr(cli_main, "load_settings", lambda: cli_settings)
    monkeypatch.setattr(cli_main, "DeepLProvider", lambda **kwargs: provider)
    monkeypatch.setattr(
        cli_main, "SanityDocumentStore", MagicMock(from_settings=MagicMock(return_value=memory_store))
    )
    yield
    logging.getLogger("tabilingo").handlers.clear()


class TestTranslateCommand:
    def test_success(self, memory_store, capsys):
        assert main(["translate", "article-123", "--lang", "en,de"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Translation complete" in out
        assert "Languages:    en, de" in out
        assert "article-123-de" in memory_store.documents

    def test_dry_run(self, memory_store, capsys):
        assert main(["translate", "article-123", "--lang", "en", "--dry-run"]) == EXIT_OK
        assert "Dry run complete" in capsys.readouterr().out
        assert "article-123-en" not in memory_store.documents

    def test_invalid_language(self):
        assert main(["translate", "article-123", "--lang", "xx"]) == EXIT_VALIDATION

    def test_not_found(self):
        assert main(["translate", "nope", "--lang", "en"]) == EXIT_VALIDATION

    def test_quota(self, provider):
        provider.usage = ProviderUsage(character_count=499_000, character_limit=500_000)
        assert main(["translate", "article-123", "--lang", "en"]) == EXIT_TRANSLATION

    def test_partial_failure(self, provider, capsys):
        provider.fail_targets = {"IT"}
        assert main(["translate", "article-123", "--lang", "en,it"]) == EXIT_TRANSLATION
        assert "Translation failed for it" in capsys.readouterr().out


class TestStatsCommand:
    def test_stats(self, capsys):
        assert main(["stats", "article-123"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Translated:   0/19" in out
        assert "Title:        京都の寺" in out

    def test_missing_document(self):
        assert main(["stats", "nope"]) == EXIT_VALIDATION


class TestMarkdownAndCacheCommands:
    def test_markdown_then_cache(self, tmp_path, provider, capsys):
        posts = tmp_path / "posts"
        posts.mkdir()
        (posts / "nara-deer-ja.md").write_text(SOURCE, encoding="utf-8")

        assert main(["markdown", str(posts), "--lang", "en,fr"]) == EXIT_OK
        assert (posts / "en" / "nara-deer-en.md").exists()
        assert (posts / "fr" / "nara-deer-fr.md").exists()
        assert (tmp_path / "cache" / "translations.json").exists()

        # translated files under <lang>/ are not picked up again
        provider.calls.clear()
        assert main(["markdown", str(posts), "--lang", "en,fr"]) == EXIT_OK
        assert provider.calls == []
        capsys.readouterr()

        assert main(["cache", "stats"]) == EXIT_OK
        assert "Entries:" in capsys.readouterr().out

        assert main(["cache", "clear"]) == EXIT_OK
        assert "Cleared" in capsys.readouterr().out

        assert main(["cache", "cleanup"]) == EXIT_OK
        assert "Removed 0 expired translations" in capsys.readouterr().out

    def test_markdown_errors_exit_translation(self, tmp_path, provider):
        (tmp_path / "a-ja.md").write_text(SOURCE, encoding="utf-8")
        provider.fail_targets = {"EN-US"}
        assert main(["markdown", str(tmp_path / "a-ja.md"), "--lang", "en"]) == EXIT_TRANSLATION
