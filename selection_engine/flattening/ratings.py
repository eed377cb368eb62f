"""Shared base for category + 1..5 rating domains (soreness, stress)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

from selection_engine.flattening.base import BaseFlattener, selected_entries
from selection_engine.flattening.constants import RatingScale
from selection_engine.flattening.mapping import FlagMapping
from selection_engine.flattening.record import flags
from selection_engine.flattening.rubric import ScoringRubric, ScoringRule, round_to
from selection_engine.normalization.models import Number
from selection_engine.selection.models import Selection


def presence_table(categories: Sequence[str]) -> dict[str, str]:
    return {category: f"has_{category}" for category in categories}


def level_table(categories: Sequence[str]) -> dict[str, tuple[str, ...]]:
    return {
        category: tuple(f"{category}_{suffix}" for suffix in RatingScale.SUFFIXES)
        for category in categories
    }


@dataclass(frozen=True)
class RatingSummary:
    """Selected categories and their ratings for one flatten call.

    ``categories`` holds every selected, mapped category (rated or not);
    ``ratings`` only the truthy ratings, in selection order.
    """

    categories: tuple[str, ...] = ()
    ratings: tuple[Number, ...] = ()
    by_category: dict[str, Number] = field(default_factory=dict)

    def rating_of(self, category: str) -> Number:
        return self.by_category.get(category, 0)

    @property
    def mild_count(self) -> int:
        return sum(1 for r in self.ratings if r == RatingScale.MILD)

    @property
    def moderate_count(self) -> int:
        low, high = RatingScale.MODERATE_RANGE
        return sum(1 for r in self.ratings if low <= r <= high)

    @property
    def high_count(self) -> int:
        low, high = RatingScale.HIGH_RANGE
        return sum(1 for r in self.ratings if low <= r <= high)

    @property
    def severe_count(self) -> int:
        return sum(1 for r in self.ratings if r == RatingScale.SEVERE)

    def count_at_least(self, threshold: int) -> int:
        return sum(1 for r in self.ratings if r >= threshold)

    def any_at_least(self, threshold: int) -> bool:
        return self.count_at_least(threshold) > 0

    @property
    def mild_only(self) -> bool:
        return bool(self.ratings) and all(r == RatingScale.MILD for r in self.ratings)

    @property
    def mixed(self) -> bool:
        return len(set(self.ratings)) > 1

    @property
    def mean(self) -> float:
        return sum(self.ratings) / len(self.ratings) if self.ratings else 0.0

    @property
    def maximum(self) -> Number:
        return max(self.ratings, default=0)

    @property
    def average_level(self) -> float:
        return round_to(self.mean, 1)


# 20 points per rating level, averaged: 1 -> 20 ... 5 -> 100
MEAN_LOAD = ScoringRubric(
    "mean_rating_load",
    (
        ScoringRule(
            "mean_rating",
            lambda s: bool(s.ratings),
            RatingScale.POINTS_PER_LEVEL,
            multiplier=lambda s: s.mean,
        ),
    ),
)


class CategoryRatingFlattener(BaseFlattener):
    """Presence and per-level flags for a fixed category list.

    Subclasses set ``categories`` and add their own analysis fields on top of
    ``rating_fields()``.
    """

    categories: ClassVar[tuple[str, ...]]

    def rating_fields(self) -> dict[str, Any]:
        levels = [concept for row in level_table(self.categories).values() for concept in row]
        return {**flags(*presence_table(self.categories).values()), **flags(*levels)}

    def _check_mappings(self) -> None:
        self.presence = FlagMapping(self.domain.value, presence_table(self.categories))
        self.levels = FlagMapping(self.domain.value, level_table(self.categories))
        self._check_mapping(self.presence)
        self._check_mapping(self.levels, targets_of=lambda row: row)

    def collect(self, values: dict[str, Any], selection: Selection) -> RatingSummary:
        """Set presence and level flags, and gather the ratings."""
        mapped, unmapped = self.presence.split(selected_entries(selection))
        self._record_unmapped(values, unmapped)

        ratings: list[Number] = []
        by_category: dict[str, Number] = {}
        for category in mapped:
            values[self.presence[category]] = True
            rating = selection[category].rating
            if not rating:
                continue
            ratings.append(rating)
            by_category[category] = rating
            if RatingScale.suffix_for(rating) is not None:
                values[self.levels[category][int(rating) - 1]] = True

        return RatingSummary(tuple(mapped), tuple(ratings), by_category)

    @staticmethod
    def fill_counts(values: dict[str, Any], summary: RatingSummary) -> None:
        values["mild_count"] = summary.mild_count
        values["moderate_count"] = summary.moderate_count
        values["high_count"] = summary.high_count
        values["average_level"] = summary.average_level

    @staticmethod
    def fill_severity(values: dict[str, Any], summary: RatingSummary) -> None:
        values["has_mild_only"] = summary.mild_only
        values["has_moderate_levels"] = summary.moderate_count > 0
        values["has_high_levels"] = summary.high_count > 0
        values["has_severe_levels"] = summary.severe_count > 0
