# tests/unit/tracking/test_cost_calculator.py - v2
"""Tests for tracking/cost_calculator.py."""

from __future__ import annotations

import pytest

from tabilingo.tracking.cost_calculator import (
    document_character_count,
    estimate_cost,
    estimate_run_characters,
    format_character_count,
)


class TestCharacterCounts:
    def test_document_count(self):
        # 4 (title) + 4 ("寺 京都") + 19 (body)
        assert document_character_count("京都の寺", ["寺", "京都"], 19) == 27

    def test_no_tags(self):
        assert document_character_count("abc", None, 10) == 13
        assert document_character_count("abc", [], 10) == 13

    def test_run_estimate(self):
        assert estimate_run_characters(28, 19) == 532


class TestCost:
    def test_estimate_cost(self):
        assert estimate_cost(1_000_000) == pytest.approx(20.0)
        assert estimate_cost(50_000, price_per_million=25.0) == pytest.approx(1.25)

    @pytest.mark.parametrize("count,expected", [
        (950, "950 chars"),
        (12_340, "12.3K chars"),
        (1_250_000, "1.25M chars"),
    ])
    def test_format(self, count, expected):
        assert format_character_count(count) == expected
