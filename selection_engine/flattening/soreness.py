"""Soreness flattener (``soreness_`` prefix)."""

from __future__ import annotations

from typing import Any

from selection_engine.domains import Domain
from selection_engine.flattening.ratings import MEAN_LOAD, CategoryRatingFlattener
from selection_engine.flattening.record import UNMAPPED_KEY_COUNT, FlattenedRecord, counts, flags
from selection_engine.selection.models import Selection

BODY_PARTS = (
    "neck",
    "shoulders",
    "upper_back",
    "lower_back",
    "chest",
    "arms",
    "wrists",
    "elbows",
    "abs_core",
    "hips",
    "glutes",
    "thighs",
    "hamstrings",
    "knees",
    "calves",
    "ankles",
)

REGIONS: dict[str, tuple[str, ...]] = {
    "has_upper_body": ("neck", "shoulders", "upper_back", "chest", "arms", "wrists", "elbows"),
    "has_core": ("abs_core", "lower_back"),
    "has_lower_body": ("hips", "glutes", "thighs", "hamstrings", "knees", "calves", "ankles"),
    "has_back_issues": ("upper_back", "lower_back"),
    "has_joint_issues": ("wrists", "elbows", "knees", "ankles"),
}

SEVERITY_FLAGS = (
    "has_mild_only",
    "has_moderate_levels",
    "has_high_levels",
    "has_severe_levels",
    "mixed_severity",
)
IMPACT_FLAGS = (
    "affects_upper_workouts",
    "affects_lower_workouts",
    "affects_core_workouts",
    "affects_cardio",
    "affects_flexibility",
)
MODIFICATION_FLAGS = (
    "needs_upper_modification",
    "needs_lower_modification",
    "needs_core_modification",
    "needs_intensity_reduction",
    "needs_recovery_focus",
    "contraindicated_high_impact",
)
RECOMMENDATION_FLAGS = (
    "recommend_rest",
    "recommend_active_recovery",
    "recommend_mobility_work",
    "recommend_massage",
    "recommend_ice_heat",
)

REST_SCORE = 80
ACTIVE_RECOVERY_SCORE = 40


class SorenessFlattener(CategoryRatingFlattener):
    domain = Domain.SORENESS
    categories = BODY_PARTS

    def build_fields(self) -> dict[str, Any]:
        return {
            **self.rating_fields(),
            **flags(*REGIONS),
            **flags(*SEVERITY_FLAGS),
            **flags(*IMPACT_FLAGS),
            **flags(*MODIFICATION_FLAGS),
            **counts("total_areas", "mild_count", "moderate_count", "high_count"),
            "average_level": 0,
            "severity_score": 0,
            **flags(*RECOMMENDATION_FLAGS),
            **counts(UNMAPPED_KEY_COUNT),
        }

    def _populate(self, values: dict[str, Any], value: Selection) -> None:
        summary = self.collect(values, value)
        v = values

        for region, parts in REGIONS.items():
            v[region] = any(v[self.presence[p]] for p in parts)

        self.fill_severity(v, summary)
        v["mixed_severity"] = summary.mixed
        moderate_plus = summary.any_at_least(3)
        high_plus = summary.any_at_least(4)

        v["affects_upper_workouts"] = v["has_upper_body"]
        v["affects_lower_workouts"] = v["has_lower_body"]
        v["affects_core_workouts"] = v["has_core"]
        v["affects_cardio"] = v["has_lower_body"] or v["has_joint_issues"]
        v["affects_flexibility"] = moderate_plus

        v["needs_upper_modification"] = v["has_upper_body"] and moderate_plus
        v["needs_lower_modification"] = v["has_lower_body"] and moderate_plus
        v["needs_core_modification"] = v["has_core"] and moderate_plus
        v["needs_intensity_reduction"] = high_plus
        v["needs_recovery_focus"] = moderate_plus
        v["contraindicated_high_impact"] = v["has_joint_issues"] and high_plus

        v["total_areas"] = len(summary.categories)
        self.fill_counts(v, summary)
        score = MEAN_LOAD.score(summary)
        v["severity_score"] = score

        v["recommend_rest"] = score >= REST_SCORE or summary.severe_count > 0
        v["recommend_active_recovery"] = ACTIVE_RECOVERY_SCORE <= score < REST_SCORE
        v["recommend_mobility_work"] = v["has_joint_issues"] or v["has_back_issues"]
        v["recommend_massage"] = v["has_upper_body"] or v["has_lower_body"]
        v["recommend_ice_heat"] = high_plus

    def summarize(self, record: FlattenedRecord) -> str:
        c = record.concept
        parts = []

        if c("total_areas") > 0:
            parts.append(f"{c('total_areas')} sore areas")

        if c("has_severe_levels"):
            parts.append("Severe soreness")
        elif c("has_high_levels"):
            parts.append("High soreness")
        elif c("has_moderate_levels"):
            parts.append("Moderate soreness")
        elif c("has_mild_only"):
            parts.append("Mild soreness")

        regions = [
            label
            for concept, label in (
                ("has_upper_body", "Upper Body"),
                ("has_core", "Core"),
                ("has_lower_body", "Lower Body"),
            )
            if c(concept)
        ]
        if regions:
            parts.append(" + ".join(regions))

        if c("has_back_issues"):
            parts.append("Back Issues")
        if c("has_joint_issues"):
            parts.append("Joint Issues")

        if c("recommend_rest"):
            parts.append("Needs Rest")
        elif c("recommend_active_recovery"):
            parts.append("Active Recovery")

        return " • ".join(parts) or "No soreness reported"
