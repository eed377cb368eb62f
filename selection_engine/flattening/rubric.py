"""Additive scoring rubrics.

A rubric is an ordered list of ``(condition, points)`` rules. Every rule whose
condition holds contributes its points (optionally scaled by a multiplier);
the sum is rounded half-up and clamped to [0, 100]. All five domain scores
share this shape.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from selection_engine.core.exceptions import ScoringRuleError
from selection_engine.flattening.constants import ScoreBounds


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from -inf (like JS Math.round)."""
    return math.floor(value + 0.5)


def round_to(value: float, places: int) -> float:
    """Round half-up to a number of decimal places."""
    factor = 10**places
    return round_half_up(value * factor) / factor


def clamp_score(value: float) -> int:
    """Round half-up and clamp to the score range."""
    return max(ScoreBounds.MIN, min(ScoreBounds.MAX, round_half_up(value)))


def percentage(part: float, total: float) -> int:
    """Rounded percentage of part in total; 0 when total is 0."""
    if not total:
        return 0
    return round_half_up(part / total * 100)


def always(_ctx: Any) -> bool:
    return True


@dataclass(frozen=True)
class ScoringRule:
    """Single additive rule.

    Attributes:
        name: Identifier reported in contributions and errors
        condition: Predicate over the rubric context
        points: Points contributed when the condition holds
        multiplier: Optional scale for the points (e.g. a count or mean)
        description: Human-readable description of the rule
    """

    name: str
    condition: Callable[[Any], bool]
    points: float
    multiplier: Callable[[Any], float] | None = None
    description: str = ""

    def evaluate(self, context: Any) -> float:
        """Points this rule contributes for the context (0 if it does not apply).

        Raises:
            ScoringRuleError: If the condition or multiplier raises
        """
        try:
            if not self.condition(context):
                return 0.0
            if self.multiplier is None:
                return float(self.points)
            return float(self.points) * float(self.multiplier(context))
        except Exception as e:
            raise ScoringRuleError(
                f"Rule '{self.name}' evaluation failed: {e}",
                details={"rule": self.name},
            ) from e


@dataclass(frozen=True)
class RubricResult:
    """Score breakdown for one rubric.

    Attributes:
        score: Clamped integer score in [0, 100]
        raw_score: Unrounded, unclamped sum of contributions
        contributions: Points per rule that applied
    """

    score: int
    raw_score: float
    contributions: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "raw_score": self.raw_score,
            "contributions": dict(self.contributions),
        }


@dataclass(frozen=True)
class ScoringRubric:
    """Named, ordered rule list."""

    name: str
    rules: Sequence[ScoringRule]

    def evaluate(self, context: Any) -> RubricResult:
        contributions: dict[str, float] = {}
        for rule in self.rules:
            points = rule.evaluate(context)
            if points:
                contributions[rule.name] = contributions.get(rule.name, 0.0) + points
        raw_score = sum(contributions.values())
        return RubricResult(
            score=clamp_score(raw_score),
            raw_score=raw_score,
            contributions=contributions,
        )

    def score(self, context: Any) -> int:
        return self.evaluate(context).score
