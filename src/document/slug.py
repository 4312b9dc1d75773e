# src/document/slug.py - v1
"""URL slug and tag normalisation helpers."""

from __future__ import annotations

import re
import unicodedata

MAX_SLUG_LENGTH = 50

_SEPARATORS = re.compile(r"[\s\-_]+")
_BRACKETS = re.compile(r"[【】\[\]()（）]")
_COMBINING_MARKS = re.compile(r"[̀-ͯ]")
# ASCII letters/digits, hyphen, hiragana, katakana, CJK unified ideographs (+ ext. A)
_DISALLOWED = re.compile(r"[^a-z0-9\-぀-ゟ゠-ヿ一-龯㐀-䶿]")
_HYPHEN_RUNS = re.compile(r"-+")
_LANGUAGE_SUFFIX = re.compile(r"-[a-z]{2}(?:-[a-z]{2})?$")


def slugify(text: str) -> str:
    """Convert a title to a URL-friendly slug of at most 50 characters.

    Accents are stripped, Japanese scripts are kept, anything else outside
    `[a-z0-9-]` is removed. May return an empty string.
    """
    slug = _SEPARATORS.sub("-", text.lower().strip())
    slug = _BRACKETS.sub("", slug)
    slug = _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", slug))
    slug = _DISALLOWED.sub("", slug)
    slug = _HYPHEN_RUNS.sub("-", slug).strip("-")
    slug = slug[:MAX_SLUG_LENGTH].rstrip("-")
    return unicodedata.normalize("NFC", slug)


def strip_language_suffix(slug: str, language: str) -> str:
    """Remove a trailing `-<language>` from `slug` if present."""
    suffix = f"-{language}"
    return slug[: -len(suffix)] if slug.endswith(suffix) else slug


def slug_with_language(slug: str, language: str) -> str:
    """Replace any trailing language suffix (`-ja`, `-zh-cn`) with `-<language>`."""
    return f"{_LANGUAGE_SUFFIX.sub('', slug)}-{language}"


def normalize_tag(tag: str) -> str:
    """Kebab-case a translated tag: `Hot Springs!` becomes `hot-springs`."""
    tag = re.sub(r"[^a-z0-9\s-]", "", tag.lower())
    tag = re.sub(r"\s+", "-", tag)
    return _HYPHEN_RUNS.sub("-", tag).strip("-")
