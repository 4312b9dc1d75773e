# src/document/markdown.py - v1
"""Markdown articles with YAML front matter.

Layout:

    ---
    title: ...
    lang: ja
    slug: ...
    ---
    body
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from tabilingo.core.errors import FrontMatterError

REQUIRED_FIELDS = ("title", "lang", "slug")

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.S)


class MarkdownArticle(BaseModel):
    """Parsed Markdown file: front matter mapping plus raw body."""

    front_matter: dict[str, Any] = Field(default_factory=dict)
    content: str = ""
    path: Path | None = None

    @property
    def title(self) -> str:
        return str(self.front_matter.get("title") or "")

    @property
    def lang(self) -> str:
        return str(self.front_matter.get("lang") or "")

    @property
    def slug(self) -> str:
        return str(self.front_matter.get("slug") or "")

    @property
    def excerpt(self) -> str | None:
        value = self.front_matter.get("excerpt")
        return str(value) if value else None

    @property
    def tags(self) -> list[str]:
        value = self.front_matter.get("tags") or []
        return [str(tag) for tag in value] if isinstance(value, list) else []


def parse_markdown(text: str, path: Path | None = None) -> MarkdownArticle:
    """Split front matter from body and check the required fields.

    Raises:
        FrontMatterError: On missing/invalid front matter or required fields.
    """
    match = _FRONT_MATTER.match(text)
    if not match:
        raise FrontMatterError("Failed to parse markdown file: no front matter block")
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise FrontMatterError(f"Failed to parse markdown file: {e}") from e
    if not isinstance(data, dict):
        raise FrontMatterError("Failed to parse markdown file: front matter is not a mapping")

    for name in REQUIRED_FIELDS:
        if not data.get(name):
            raise FrontMatterError(
                f"Failed to parse markdown file: Missing required field: {name}"
            )

    return MarkdownArticle(front_matter=data, content=text[match.end():], path=path)


def read_markdown(path: Path) -> MarkdownArticle:
    return parse_markdown(path.read_text(encoding="utf-8"), path=path)


def render_markdown(front_matter: dict[str, Any], content: str) -> str:
    """Serialize front matter and body back to Markdown. None values are omitted."""
    data = {key: value for key, value in front_matter.items() if value is not None}
    header = yaml.safe_dump(
        data, allow_unicode=True, sort_keys=False, default_flow_style=False
    )
    body = content if content.endswith("\n") else content + "\n"
    return f"---\n{header}---\n{body}"


def write_markdown(path: Path, front_matter: dict[str, Any], content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_markdown(front_matter, content), encoding="utf-8")
