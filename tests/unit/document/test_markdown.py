# tests/unit/document/test_markdown.py - v1
"""Tests for document/markdown.py - YAML front matter parsing and rendering."""

from __future__ import annotations

import pytest

from tabilingo.core.errors import FrontMatterError
from tabilingo.document.markdown import (
    parse_markdown,
    read_markdown,
    render_markdown,
    write_markdown,
)

SOURCE = """---
title: 京都の寺
lang: ja
slug: kyoto-temples-ja
excerpt: おすすめの寺
tags:
  - 寺
  - 京都
---
金閣寺は美しい。
"""


class TestParseMarkdown:
    def test_fields(self):
        article = parse_markdown(SOURCE)
        assert article.title == "京都の寺"
        assert article.lang == "ja"
        assert article.slug == "kyoto-temples-ja"
        assert article.excerpt == "おすすめの寺"
        assert article.tags == ["寺", "京都"]
        assert article.content == "金閣寺は美しい。\n"

    @pytest.mark.parametrize("missing", ["title", "lang", "slug"])
    def test_missing_required_field(self, missing):
        lines = [line for line in SOURCE.splitlines() if not line.startswith(f"{missing}:")]
        with pytest.raises(FrontMatterError, match=f"Missing required field: {missing}"):
            parse_markdown("\n".join(lines))

    def test_no_front_matter(self):
        with pytest.raises(FrontMatterError, match="Failed to parse markdown file"):
            parse_markdown("# Just a heading\n")

    def test_invalid_yaml(self):
        with pytest.raises(FrontMatterError):
            parse_markdown("---\ntitle: [unclosed\n---\nbody\n")

    def test_optional_fields_absent(self):
        article = parse_markdown("---\ntitle: T\nlang: ja\nslug: t-ja\n---\nbody")
        assert article.excerpt is None
        assert article.tags == []


class TestRenderMarkdown:
    def test_drops_none_and_keeps_order(self):
        text = render_markdown({"title": "Kyoto", "excerpt": None, "lang": "en"}, "Body")
        assert text == "---\ntitle: Kyoto\nlang: en\n---\nBody\n"

    def test_unicode_kept_literal(self):
        text = render_markdown({"title": "京都"}, "本文\n")
        assert "title: 京都" in text
        assert text.endswith("本文\n")

    def test_write_then_read(self, tmp_path):
        path = tmp_path / "en" / "kyoto-en.md"
        write_markdown(path, {"title": "Kyoto", "lang": "en", "slug": "kyoto-en", "tags": ["temple"]}, "Body\n")
        article = read_markdown(path)
        assert article.path == path
        assert article.slug == "kyoto-en"
        assert article.tags == ["temple"]
        assert article.content == "Body\n"
