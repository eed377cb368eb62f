"""Tests for additive scoring rubrics and the numeric helpers."""
import pytest

from selection_engine.core.exceptions import ScoringRuleError
from selection_engine.flattening.rubric import (
    ScoringRubric,
    ScoringRule,
    always,
    clamp_score,
    percentage,
    round_half_up,
    round_to,
)


class TestRounding:
    """Test half-up rounding and percentage helpers."""

    @pytest.mark.parametrize(
        "value, expected",
        [(0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (-0.5, 0), (77.78, 78)],
    )
    def test_round_half_up(self, value, expected):
        """Test halves round up rather than to even."""
        assert round_half_up(value) == expected

    def test_round_to(self):
        """Test rounding to decimal places."""
        assert round_to(2.25, 1) == 2.3
        assert round_to(10 / 35, 2) == 0.29
        assert round_to(3.0, 1) == 3.0

    def test_percentage_zero_total(self):
        """Test a zero total yields 0 instead of dividing by zero."""
        assert percentage(5, 0) == 0
        assert percentage(35, 45) == 78

    def test_clamp_score(self):
        """Test scores clamp to 0-100."""
        assert clamp_score(-15) == 0
        assert clamp_score(140) == 100
        assert clamp_score(79.5) == 80


class TestScoringRubric:
    """Test rule evaluation and score aggregation."""

    def test_rules_sum_and_clamp(self):
        """Test contributions add up and the total is clamped."""
        rubric = ScoringRubric(
            "test",
            (
                ScoringRule("big", always, 80),
                ScoringRule("bigger", always, 40),
                ScoringRule("never", lambda ctx: False, 1000),
            ),
        )
        result = rubric.evaluate({})
        assert result.raw_score == 120
        assert result.score == 100
        assert result.contributions == {"big": 80.0, "bigger": 40.0}

    def test_negative_rules(self):
        """Test penalties reduce the score but never below zero."""
        rubric = ScoringRubric(
            "test",
            (
                ScoringRule("bonus", always, 10),
                ScoringRule("penalty", always, -20),
            ),
        )
        assert rubric.score({}) == 0

    def test_multiplier(self):
        """Test multipliers scale the rule's points."""
        rubric = ScoringRubric(
            "test",
            (ScoringRule("per_item", always, 5, multiplier=lambda ctx: ctx["items"]),),
        )
        assert rubric.score({"items": 3}) == 15

    def test_to_dict(self):
        """Test the breakdown serializes to a plain dict."""
        rubric = ScoringRubric("test", (ScoringRule("one", always, 1),))
        assert rubric.evaluate({}).to_dict() == {
            "score": 1,
            "raw_score": 1.0,
            "contributions": {"one": 1.0},
        }

    def test_broken_predicate_raises_scoring_rule_error(self):
        """Test predicate failures are wrapped with the rule name."""
        rubric = ScoringRubric(
            "test",
            (ScoringRule("broken", lambda ctx: ctx["missing"], 10),),
        )
        with pytest.raises(ScoringRuleError) as exc_info:
            rubric.score({})
        assert exc_info.value.details == {"rule": "broken"}
        assert isinstance(exc_info.value.__cause__, KeyError)
