"""Focus area flattener (``focus_`` prefix).

Turns a 3-tier focus selection (regions -> muscle groups / modalities ->
specific areas) into one flag per taxonomy node plus region aggregates,
workout suitability, split compatibility and four capacity scores.
"""

from __future__ import annotations

from typing import Any

from selection_engine.domains import Domain
from selection_engine.flattening.base import BaseFlattener, selected_entries
from selection_engine.flattening.constants import FocusSelection
from selection_engine.flattening.mapping import FlagMapping
from selection_engine.flattening.record import UNMAPPED_KEY_COUNT, FlattenedRecord, counts, flags
from selection_engine.flattening.rubric import ScoringRubric, ScoringRule, always
from selection_engine.selection.models import Selection
from selection_engine.taxonomy.catalog import HIERARCHY_LEVELS, NodeLevel, coerce_level

# Taxonomy node id -> flag concept
FOCUS_FLAGS: dict[str, str] = {
    # Primary regions
    "upper_body": "region_upper_body",
    "lower_body": "region_lower_body",
    "core": "region_core",
    "full_body": "region_full_body",
    "mobility": "region_mobility",
    "recovery": "region_recovery",
    # Upper body muscles
    "chest": "upper_chest",
    "back": "upper_back",
    "shoulders": "upper_shoulders",
    "biceps": "upper_biceps",
    "triceps": "upper_triceps",
    # Lower body muscles
    "quads": "lower_quads",
    "hamstrings": "lower_hamstrings",
    "glutes": "lower_glutes",
    "calves": "lower_calves",
    # Core muscles
    "abs": "core_abs",
    "obliques": "core_obliques",
    "lower_back": "core_lower_back",
    # Full body types
    "olympic_lifts": "fullbody_olympic_lifts",
    "bodyweight_circuits": "fullbody_bodyweight_circuits",
    "athletic_conditioning": "fullbody_athletic_conditioning",
    # Mobility areas
    "hips": "mobility_hips",
    "ankles": "mobility_ankles",
    "mobility_shoulders": "mobility_shoulders",
    "thoracic_spine": "mobility_thoracic_spine",
    # Recovery types
    "foam_rolling": "recovery_foam_rolling",
    "static_stretching": "recovery_static_stretching",
    "pnf": "recovery_pnf",
    "breathing_meditation": "recovery_breathing_meditation",
    # Chest
    "upper_chest": "chest_upper",
    "lower_chest": "chest_lower",
    # Back
    "lats": "back_lats",
    "traps": "back_traps",
    "rhomboids": "back_rhomboids",
    "erector_spinae": "back_erector_spinae",
    # Shoulders
    "anterior_delt": "shoulder_anterior_delt",
    "lateral_delt": "shoulder_lateral_delt",
    "rear_delt": "shoulder_rear_delt",
    # Arms
    "biceps_short_head": "biceps_short_head",
    "biceps_long_head": "biceps_long_head",
    "brachialis": "biceps_brachialis",
    "triceps_long_head": "triceps_long_head",
    "triceps_lateral_head": "triceps_lateral_head",
    "triceps_medial_head": "triceps_medial_head",
    # Legs
    "rectus_femoris": "quad_rectus_femoris",
    "vastus_lateralis": "quad_vastus_lateralis",
    "vastus_medialis": "quad_vastus_medialis",
    "vastus_intermedius": "quad_vastus_intermedius",
    "biceps_femoris": "hamstring_biceps_femoris",
    "semitendinosus": "hamstring_semitendinosus",
    "semimembranosus": "hamstring_semimembranosus",
    "glute_max": "glute_max",
    "glute_med": "glute_med",
    "glute_min": "glute_min",
    "gastrocnemius_medial": "calf_gastrocnemius_medial",
    "gastrocnemius_lateral": "calf_gastrocnemius_lateral",
    "soleus": "calf_soleus",
    # Core
    "upper_abs": "abs_upper",
    "lower_abs": "abs_lower",
    "tva": "abs_tva",
    "pelvic_floor": "abs_pelvic_floor",
    "internal_obliques": "oblique_internal",
    "external_obliques": "oblique_external",
    "lower_erector_spinae": "lowerback_erector_spinae",
    "multifidus": "lowerback_multifidus",
    "quadratus_lumborum": "lowerback_quadratus_lumborum",
    # Mobility
    "hip_flexors": "hip_flexors",
    "hip_glute_med": "hip_glute_med",
    "tfl": "hip_tfl",
    "piriformis": "hip_piriformis",
    "dorsiflexors": "ankle_dorsiflexors",
    "plantarflexors": "ankle_plantarflexors",
    "inverters": "ankle_inverters",
    "everters": "ankle_everters",
    "subscapularis": "shoulder_subscapularis",
    "supraspinatus": "shoulder_supraspinatus",
    "infraspinatus": "shoulder_infraspinatus",
    "teres_minor": "shoulder_teres_minor",
}

# Aggregate -> region flag plus that region's muscle group / modality flags
REGION_AGGREGATES: dict[str, tuple[str, ...]] = {
    "has_upper_body": (
        "region_upper_body",
        "upper_chest",
        "upper_back",
        "upper_shoulders",
        "upper_biceps",
        "upper_triceps",
    ),
    "has_lower_body": (
        "region_lower_body",
        "lower_quads",
        "lower_hamstrings",
        "lower_glutes",
        "lower_calves",
    ),
    "has_core": ("region_core", "core_abs", "core_obliques", "core_lower_back"),
    "has_full_body": (
        "region_full_body",
        "fullbody_olympic_lifts",
        "fullbody_bodyweight_circuits",
        "fullbody_athletic_conditioning",
    ),
    "has_mobility": (
        "region_mobility",
        "mobility_hips",
        "mobility_ankles",
        "mobility_shoulders",
        "mobility_thoracic_spine",
    ),
    "has_recovery": (
        "region_recovery",
        "recovery_foam_rolling",
        "recovery_static_stretching",
        "recovery_pnf",
        "recovery_breathing_meditation",
    ),
}

LEVEL_COUNTS: dict[NodeLevel, str] = {
    NodeLevel.PRIMARY: "primary_count",
    NodeLevel.SECONDARY: "secondary_count",
    NodeLevel.TERTIARY: "tertiary_count",
}

SHAPE_FLAGS = ("is_balanced_selection", "is_complex_selection", "is_targeted_selection")
SUITABILITY_FLAGS = (
    "suitable_strength",
    "suitable_hypertrophy",
    "suitable_endurance",
    "suitable_power",
    "suitable_rehabilitation",
    "suitable_flexibility",
    "suitable_athletic",
)
SPLIT_FLAGS = (
    "compatible_push_pull",
    "compatible_upper_lower",
    "compatible_body_part_split",
    "compatible_full_body",
    "compatible_functional",
)
SCORES = ("intensity_capacity", "volume_capacity", "recovery_demand", "technical_complexity")


def _any(*concepts: str):
    return lambda v: any(v[c] for c in concepts)


def _all(*concepts: str):
    return lambda v: all(v[c] for c in concepts)


INTENSITY_CAPACITY = ScoringRubric(
    "focus_intensity_capacity",
    (
        ScoringRule("olympic_lifts", _any("fullbody_olympic_lifts"), 40),
        ScoringRule("athletic_conditioning", _any("fullbody_athletic_conditioning"), 35),
        ScoringRule("bodyweight_circuits", _any("fullbody_bodyweight_circuits"), 30),
        ScoringRule(
            "large_lower_muscles",
            _any("lower_quads", "lower_glutes", "lower_hamstrings"),
            25,
        ),
        ScoringRule("large_upper_muscles", _any("upper_back", "upper_chest"), 20),
        ScoringRule("balanced", _any("is_balanced_selection"), 15),
        ScoringRule("recovery_focus", _any("has_recovery"), -20),
        ScoringRule(
            "mobility_only",
            lambda v: v["has_mobility"] and not v["has_upper_body"] and not v["has_lower_body"],
            -15,
        ),
    ),
)

VOLUME_CAPACITY = ScoringRubric(
    "focus_volume_capacity",
    (
        ScoringRule("upper_body", _any("has_upper_body"), 20),
        ScoringRule("lower_body", _any("has_lower_body"), 20),
        ScoringRule("core", _any("has_core"), 20),
        ScoringRule("full_body", _any("has_full_body"), 20),
        ScoringRule("balanced", _any("is_balanced_selection"), 20),
        ScoringRule("complex", _any("is_complex_selection"), 15),
        ScoringRule("recovery_focus", _any("has_recovery"), -10),
    ),
)

RECOVERY_DEMAND = ScoringRubric(
    "focus_recovery_demand",
    (
        ScoringRule("complex", _any("is_complex_selection"), 30),
        ScoringRule("olympic_lifts", _any("fullbody_olympic_lifts"), 25),
        ScoringRule(
            "full_leg_day",
            _all("lower_quads", "lower_glutes", "lower_hamstrings"),
            20,
        ),
        ScoringRule("balanced", _any("is_balanced_selection"), 15),
        ScoringRule("recovery_focus", _any("has_recovery"), -15),
    ),
)

TECHNICAL_COMPLEXITY = ScoringRubric(
    "focus_technical_complexity",
    (
        ScoringRule("olympic_lifts", _any("fullbody_olympic_lifts"), 40),
        ScoringRule("athletic_conditioning", _any("fullbody_athletic_conditioning"), 30),
        ScoringRule(
            "specific_areas",
            always,
            FocusSelection.TERTIARY_POINTS,
            multiplier=lambda v: v["tertiary_count"],
        ),
        ScoringRule("mobility", _any("has_mobility"), 20),
        ScoringRule(
            "simple_targeting",
            lambda v: v["is_targeted_selection"] and not v["has_full_body"],
            -10,
        ),
    ),
)

RUBRICS = {
    "intensity_capacity": INTENSITY_CAPACITY,
    "volume_capacity": VOLUME_CAPACITY,
    "recovery_demand": RECOVERY_DEMAND,
    "technical_complexity": TECHNICAL_COMPLEXITY,
}


class FocusAreaFlattener(BaseFlattener):
    domain = Domain.FOCUS_AREA

    def build_fields(self) -> dict[str, Any]:
        return {
            **flags(*FOCUS_FLAGS.values()),
            **counts("selection_count", *LEVEL_COUNTS.values()),
            **flags(*REGION_AGGREGATES),
            **flags(*SHAPE_FLAGS),
            **flags(*SUITABILITY_FLAGS),
            **flags(*SPLIT_FLAGS),
            **counts(*SCORES),
            **counts(UNMAPPED_KEY_COUNT),
        }

    def _check_mappings(self) -> None:
        self.mapping = FlagMapping(self.domain.value, FOCUS_FLAGS)
        self._check_mapping(self.mapping)

    def _level_of(self, key: str, declared: str | None) -> NodeLevel | None:
        level = self.catalog.level_of(key) if self.catalog else None
        if level is None:
            level = coerce_level(declared)
        return level if level in HIERARCHY_LEVELS else None

    def _populate(self, values: dict[str, Any], value: Selection) -> None:
        selected = selected_entries(value)
        unmapped: list[str] = []

        for key, entry in selected.items():
            concept = self.mapping.get(key)
            level = self._level_of(key, entry.level)
            if concept is None or level is None:
                unmapped.append(key)
                continue
            values[concept] = True
            values[LEVEL_COUNTS[level]] += 1

        self._record_unmapped(values, unmapped)
        values["selection_count"] = sum(values[c] for c in LEVEL_COUNTS.values())

        for aggregate, members in REGION_AGGREGATES.items():
            values[aggregate] = any(values[m] for m in members)

        count = values["selection_count"]
        v = values
        v["is_balanced_selection"] = (v["has_upper_body"] and v["has_lower_body"]) or v["has_full_body"]
        v["is_complex_selection"] = count > FocusSelection.COMPLEX_ABOVE
        v["is_targeted_selection"] = 1 <= count <= FocusSelection.TARGETED_MAX

        # Workout type suitability
        v["suitable_strength"] = v["has_upper_body"] or v["has_lower_body"] or v["has_full_body"]
        v["suitable_hypertrophy"] = v["has_upper_body"] or v["has_lower_body"]
        v["suitable_endurance"] = v["has_full_body"] or v["fullbody_bodyweight_circuits"]
        v["suitable_power"] = v["fullbody_olympic_lifts"] or v["fullbody_athletic_conditioning"]
        v["suitable_rehabilitation"] = v["has_mobility"] or v["has_recovery"]
        v["suitable_flexibility"] = v["has_mobility"] or v["has_recovery"]
        v["suitable_athletic"] = v["has_full_body"] or v["fullbody_athletic_conditioning"]

        # Training split compatibility
        v["compatible_push_pull"] = v["has_upper_body"] and any(
            v[c]
            for c in ("upper_chest", "upper_shoulders", "upper_triceps", "upper_back", "upper_biceps")
        )
        v["compatible_upper_lower"] = v["has_upper_body"] and v["has_lower_body"]
        v["compatible_body_part_split"] = v["is_targeted_selection"] and not v["has_full_body"]
        v["compatible_full_body"] = v["has_full_body"] or v["is_balanced_selection"]
        v["compatible_functional"] = (
            v["has_full_body"] or v["has_mobility"] or v["fullbody_athletic_conditioning"]
        )

        for concept, rubric in RUBRICS.items():
            values[concept] = rubric.score(values)

    def summarize(self, record: FlattenedRecord) -> str:
        c = record.concept
        parts = []

        regions = [
            label
            for aggregate, label in (
                ("has_upper_body", "Upper Body"),
                ("has_lower_body", "Lower Body"),
                ("has_core", "Core"),
                ("has_full_body", "Full Body"),
                ("has_mobility", "Mobility"),
                ("has_recovery", "Recovery"),
            )
            if c(aggregate)
        ]
        if regions:
            parts.append(" + ".join(regions))

        if c("is_targeted_selection"):
            parts.append("Targeted")
        elif c("is_complex_selection"):
            parts.append("Complex")
        elif c("is_balanced_selection"):
            parts.append("Balanced")

        if c("intensity_capacity") >= 80:
            parts.append("High Intensity")
        if c("volume_capacity") >= 80:
            parts.append("High Volume")
        if c("technical_complexity") >= 70:
            parts.append("Technical")

        return " • ".join(parts) or "No focus areas selected"
