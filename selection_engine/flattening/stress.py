"""Stress level flattener (``stress_`` prefix).

Four stress sources rated 1-5. Beyond presence and level flags the record
carries pattern analysis, training impact, modifications, coping
recommendations, exercise suitability, timing preferences, two load scores and
a recovery-capacity band derived from the allostatic load.
"""

from __future__ import annotations

from typing import Any

from selection_engine.domains import Domain
from selection_engine.flattening.ratings import MEAN_LOAD, CategoryRatingFlattener, RatingSummary
from selection_engine.flattening.record import UNMAPPED_KEY_COUNT, FlattenedRecord, counts, flags
from selection_engine.flattening.rubric import ScoringRubric, ScoringRule, always
from selection_engine.selection.models import Selection

PHYSICAL = "physical"
MENTAL = "mental_emotional"
ENVIRONMENTAL = "environmental"
SYSTEMIC = "systemic"
STRESS_CATEGORIES = (PHYSICAL, MENTAL, ENVIRONMENTAL, SYSTEMIC)

PATTERN_FLAGS = (
    "single_category",
    "multiple_categories",
    "all_categories",
    "primarily_physical",
    "primarily_mental",
    "mixed_sources",
)
SEVERITY_FLAGS = (
    "has_mild_only",
    "has_moderate_levels",
    "has_high_levels",
    "has_severe_levels",
    "escalating_pattern",
)
IMPACT_FLAGS = (
    "affects_physical_performance",
    "affects_mental_focus",
    "affects_consistency",
    "affects_recovery",
    "affects_motivation",
    "affects_exercise_selection",
)
MODIFICATION_FLAGS = (
    "needs_intensity_reduction",
    "needs_duration_reduction",
    "needs_complexity_reduction",
    "needs_flexibility_increase",
    "needs_recovery_emphasis",
    "contraindicated_high_intensity",
)
COPING_FLAGS = (
    "recommend_mindful_movement",
    "recommend_gentle_exercise",
    "recommend_routine_structure",
    "recommend_rest_prioritization",
    "recommend_stress_management",
    "recommend_professional_support",
)
SUITABILITY_FLAGS = (
    "suitable_strength_training",
    "suitable_cardio_moderate",
    "suitable_cardio_intense",
    "suitable_yoga_meditation",
    "suitable_walking_light",
    "suitable_flexibility_work",
    "suitable_skill_practice",
)
TIMING_FLAGS = (
    "prefer_morning_workouts",
    "prefer_shorter_sessions",
    "prefer_familiar_routines",
    "prefer_social_support",
    "prefer_solo_activities",
)
RECOVERY_BANDS = (
    ("recovery_capacity_high", 25),
    ("recovery_capacity_moderate", 50),
    ("recovery_capacity_low", 75),
    ("recovery_capacity_critical", None),
)
ADAPTIVE_FLAGS = (
    "adaptive_training_needed",
    "periodization_adjustment",
    "autoregulation_recommended",
    "external_support_needed",
)

# Cumulative burden, weighted per source
ALLOSTATIC_LOAD = ScoringRubric(
    "stress_allostatic_load",
    tuple(
        ScoringRule(
            category,
            always,
            weight,
            multiplier=lambda s, category=category: s.rating_of(category),
        )
        for category, weight in (
            (PHYSICAL, 25),
            (MENTAL, 25),
            (ENVIRONMENTAL, 20),
            (SYSTEMIC, 30),
        )
    ),
)


def recovery_band(allostatic_load: int) -> str:
    for band, upper in RECOVERY_BANDS[:-1]:
        if allostatic_load <= upper:
            return band
    return RECOVERY_BANDS[-1][0]


class StressFlattener(CategoryRatingFlattener):
    domain = Domain.STRESS
    categories = STRESS_CATEGORIES

    def build_fields(self) -> dict[str, Any]:
        return {
            **self.rating_fields(),
            **flags(*PATTERN_FLAGS),
            **flags(*SEVERITY_FLAGS),
            **flags(*IMPACT_FLAGS),
            **flags(*MODIFICATION_FLAGS),
            **flags(*COPING_FLAGS),
            **flags(*SUITABILITY_FLAGS),
            **flags(*TIMING_FLAGS),
            **counts("total_categories", "mild_count", "moderate_count", "high_count"),
            "average_level": 0,
            **counts("overall_load_score", "allostatic_load"),
            **flags(*(band for band, _ in RECOVERY_BANDS)),
            **flags(*ADAPTIVE_FLAGS),
            **counts(UNMAPPED_KEY_COUNT),
        }

    def _populate(self, values: dict[str, Any], value: Selection) -> None:
        s = self.collect(values, value)
        v = values

        phys = s.rating_of(PHYSICAL)
        mental = s.rating_of(MENTAL)
        env = s.rating_of(ENVIRONMENTAL)
        systemic = s.rating_of(SYSTEMIC)
        category_count = len(s.categories)
        high_plus = s.count_at_least(4)

        # Pattern
        v["single_category"] = category_count == 1
        v["multiple_categories"] = category_count > 1
        v["all_categories"] = category_count == len(STRESS_CATEGORIES)
        v["primarily_physical"] = phys > 0 and phys >= max(mental, env, systemic)
        v["primarily_mental"] = mental > 0 and mental >= max(phys, env, systemic)
        v["mixed_sources"] = (
            category_count >= 2 and not v["primarily_physical"] and not v["primarily_mental"]
        )

        # Severity
        self.fill_severity(v, s)
        v["escalating_pattern"] = category_count >= 2 and high_plus > 0

        # Training impact
        v["affects_physical_performance"] = phys >= 3
        v["affects_mental_focus"] = mental >= 3
        v["affects_consistency"] = env >= 3
        v["affects_recovery"] = systemic >= 3
        v["affects_motivation"] = (mental >= 3 and systemic >= 2) or mental >= 4 or systemic >= 4
        v["affects_exercise_selection"] = (env >= 3 and phys >= 2) or env >= 4

        # Modifications
        v["needs_intensity_reduction"] = phys >= 4 or systemic >= 4 or s.severe_count > 0
        v["needs_duration_reduction"] = high_plus >= 2
        v["needs_complexity_reduction"] = mental >= 4 or (mental >= 3 and systemic >= 3)
        v["needs_flexibility_increase"] = env >= 3
        v["needs_recovery_emphasis"] = systemic >= 3 or high_plus >= 2
        v["contraindicated_high_intensity"] = s.severe_count > 0 or high_plus >= 3

        # Coping
        v["recommend_mindful_movement"] = mental >= 3
        v["recommend_gentle_exercise"] = phys >= 4
        v["recommend_routine_structure"] = env >= 3
        v["recommend_rest_prioritization"] = systemic >= 4
        v["recommend_stress_management"] = high_plus >= 2
        v["recommend_professional_support"] = systemic == 5 or s.severe_count >= 2

        self._fill_suitability(v, s, mental)

        # Timing
        v["prefer_morning_workouts"] = mental >= 3 or systemic >= 3
        v["prefer_shorter_sessions"] = s.maximum >= 4 or s.mean >= 3
        v["prefer_familiar_routines"] = mental >= 3 or env >= 3
        v["prefer_social_support"] = 3 <= mental <= 4
        v["prefer_solo_activities"] = mental == 5 or systemic == 5

        v["total_categories"] = category_count
        self.fill_counts(v, s)
        v["overall_load_score"] = MEAN_LOAD.score(s)
        v["allostatic_load"] = ALLOSTATIC_LOAD.score(s)
        if s.categories:
            v[recovery_band(v["allostatic_load"])] = True

        # Adaptive
        v["adaptive_training_needed"] = s.maximum >= 3 or s.mean >= 2.5
        v["periodization_adjustment"] = systemic >= 4 or high_plus >= 2
        v["autoregulation_recommended"] = v["multiple_categories"] and s.maximum >= 3
        v["external_support_needed"] = v["recommend_professional_support"]

    @staticmethod
    def _fill_suitability(v: dict[str, Any], s: RatingSummary, mental: int) -> None:
        overall = s.maximum
        v["suitable_strength_training"] = overall <= 3 and s.mean <= 2.5
        v["suitable_cardio_moderate"] = overall <= 4 and not v["contraindicated_high_intensity"]
        v["suitable_cardio_intense"] = overall <= 2 and s.mean <= 2
        v["suitable_yoga_meditation"] = mental >= 2 or overall >= 3
        v["suitable_walking_light"] = True
        v["suitable_flexibility_work"] = True
        v["suitable_skill_practice"] = mental <= 2

    def summarize(self, record: FlattenedRecord) -> str:
        c = record.concept
        parts = []

        if c("total_categories") > 0:
            parts.append(f"{c('total_categories')} stress categories")

        for concept, text in (
            ("has_severe_levels", "Severe stress"),
            ("has_high_levels", "High stress"),
            ("has_moderate_levels", "Moderate stress"),
            ("has_mild_only", "Mild stress"),
        ):
            if c(concept):
                parts.append(text)
                break

        for concept, text in (
            ("all_categories", "All domains affected"),
            ("primarily_physical", "Physical stress dominant"),
            ("primarily_mental", "Mental stress dominant"),
            ("mixed_sources", "Mixed stress sources"),
        ):
            if c(concept):
                parts.append(text)
                break

        for concept, text in (
            ("recovery_capacity_critical", "Critical recovery impairment"),
            ("recovery_capacity_low", "Low recovery capacity"),
            ("recovery_capacity_moderate", "Moderate recovery capacity"),
            ("recovery_capacity_high", "Good recovery capacity"),
        ):
            if c(concept):
                parts.append(text)
                break

        for concept, text in (
            ("recommend_professional_support", "Professional support needed"),
            ("recommend_rest_prioritization", "Rest prioritization"),
            ("recommend_stress_management", "Stress management needed"),
        ):
            if c(concept):
                parts.append(text)
                break

        if c("contraindicated_high_intensity"):
            parts.append("Avoid high intensity")
        elif c("needs_intensity_reduction"):
            parts.append("Reduce intensity")

        return " • ".join(parts) or "No stress reported"
