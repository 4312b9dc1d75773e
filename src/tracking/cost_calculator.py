# src/tracking/cost_calculator.py - v2
"""Character-based cost estimation for translation runs.

Providers bill per source character; prices are per 1M characters.
"""

from __future__ import annotations

from collections.abc import Sequence

DEFAULT_PRICE_PER_MILLION = 20.0


def document_character_count(
    title: str,
    tags: Sequence[str] | None,
    body_characters: int,
) -> int:
    """Characters billed for one language: title + space-joined tags + body spans."""
    return len(title) + len(" ".join(tags or [])) + body_characters


def estimate_run_characters(per_document: int, language_count: int) -> int:
    return per_document * language_count


def estimate_cost(
    characters: int,
    price_per_million: float = DEFAULT_PRICE_PER_MILLION,
) -> float:
    """Estimated USD cost for `characters` billed characters."""
    return characters / 1_000_000 * price_per_million


def format_character_count(count: int) -> str:
    """Human-readable count: `950 chars`, `12.3K chars`, `1.25M chars`."""
    if count < 1_000:
        return f"{count} chars"
    if count < 1_000_000:
        return f"{count / 1_000:.1f}K chars"
    return f"{count / 1_000_000:.2f}M chars"
