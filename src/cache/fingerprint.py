# src/cache/fingerprint.py - v4
"""Fingerprints used as translation cache keys.

Documents: SHA-256 over compact JSON of `{content, title, excerpt, tags}` (keys
in that order, absent fields omitted, body trimmed). Identical translatable
fields give identical digests whatever the surrounding metadata.

Single texts: SHA-256 of the exact text.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence


def compute_content_fingerprint(
    body: str,
    title: str | None = None,
    excerpt: str | None = None,
    tags: Sequence[str] | None = None,
) -> str:
    """Return the 64-char hex fingerprint of a document's translatable fields."""
    canonical: dict[str, object] = {"content": body.strip()}
    if title is not None:
        canonical["title"] = title
    if excerpt is not None:
        canonical["excerpt"] = excerpt
    if tags is not None:
        canonical["tags"] = list(tags)
    serialized = json.dumps(canonical, ensure_ascii=False, separators=(",", ":"))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def compute_text_fingerprint(text: str) -> str:
    """Fingerprint of one text exactly as given, edge whitespace included.

    Used for span-level cache entries, where `" Hello"` and `"Hello"` must
    not share a translation.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
