"""
Unit tests for services.strategy_selector module.

Tests for choosing the initial strategy and the recommended question count.
"""

import pytest

from quizgen.models.generation import Strategy
from quizgen.services.strategy_selector import recommended_question_count, select_strategy


class TestSelectStrategy:
    """Tests for select_strategy()."""

    @pytest.mark.parametrize(
        "count, expected",
        [
            (1, Strategy.QUICK),
            (15, Strategy.QUICK),
            (16, Strategy.OPTIMIZED),
            (30, Strategy.OPTIMIZED),
            (31, Strategy.BATCH),
        ],
    )
    def test_select_strategy_at_threshold_boundaries(self, count, expected):
        """Boundaries 15/16 and 30/31 switch strategy."""
        assert select_strategy(count) == expected

    @pytest.mark.parametrize("count", [0, -1, -100])
    def test_select_strategy_when_non_positive_then_quick(self, count):
        """Zero and negative counts clamp to the cheapest strategy."""
        assert select_strategy(count) == Strategy.QUICK

    def test_select_strategy_is_monotonic(self):
        """Strategy never steps back down as the count grows."""
        order = [Strategy.QUICK, Strategy.OPTIMIZED, Strategy.BATCH]
        ranks = [order.index(select_strategy(n)) for n in range(0, 60)]
        assert ranks == sorted(ranks)


class TestRecommendedQuestionCount:
    """Tests for recommended_question_count()."""

    @pytest.mark.parametrize(
        "length, expected",
        [(0, 15), (999, 15), (1000, 25), (4999, 25), (5000, 35), (9999, 35), (10000, 50)],
    )
    def test_recommended_question_count_by_material_length(self, length, expected):
        assert recommended_question_count(length) == expected
