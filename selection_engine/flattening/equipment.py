"""Equipment flattener (``equipment_`` prefix).

Four tiers: location, equipment contexts (display labels), specific equipment
ids, and available weights per implement.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from selection_engine.domains import Domain
from selection_engine.flattening.base import BaseFlattener
from selection_engine.flattening.constants import Versatility, WeightBands
from selection_engine.flattening.mapping import FlagMapping
from selection_engine.flattening.record import (
    UNMAPPED_KEY_COUNT,
    FlattenedRecord,
    counts,
    flags,
    nullable,
)
from selection_engine.flattening.rubric import ScoringRubric, ScoringRule, always
from selection_engine.normalization.models import EquipmentSelection, Number

LOCATIONS = ("home", "home_gym", "gym", "hotel", "park", "corporate_gym", "athletic_club")

CONTEXT_FLAGS: dict[str, str] = {
    "Free Weights": "has_free_weights",
    "Resistance Machines": "has_resistance_machines",
    "Cable Systems": "has_cable_systems",
    "Smith Machine": "has_smith_machine",
    "Racks & Rigs": "has_racks_rigs",
    "Bodyweight": "has_bodyweight",
    "Resistance Bands": "has_resistance_bands",
    "Basic Cardio": "has_basic_cardio",
    "Advanced Cardio": "has_advanced_cardio",
    "Minimal Cardio": "has_minimal_cardio",
    "Cardio Machines": "has_cardio_machines",
    "Mobility & Recovery": "has_mobility_recovery",
    "Mobility & Stretching": "has_mobility_stretching",
    "Functional Equipment": "has_functional_equipment",
    "Functional Tools": "has_functional_tools",
    "Light Weights": "has_light_weights",
    "Adjustable Dumbbells": "has_adjustable_dumbbells",
    "Mat Work": "has_mat_work",
    "Mat-Based Work": "has_mat_based_work",
    "Resistance Tubes": "has_resistance_tubes",
    "Suspension Trainers": "has_suspension_trainers",
    "Sandbags": "has_sandbags",
    "Jump Rope": "has_jump_rope",
    "Machines": "has_machines",
    "Cable Stations": "has_cable_stations",
    "Dumbbells": "has_dumbbells",
    "Stretch Area": "has_stretch_area",
    "Cardio": "has_cardio",
    "Olympic Lifting": "has_olympic_lifting",
    "Conditioning Tools": "has_conditioning_tools",
    "Athletic Accessories": "has_athletic_accessories",
    "Sport-Specific": "has_sport_specific",
}

# Context and specific-id flags share a namespace; these ids take a suffix
_SPECIFIC_SUFFIXED = frozenset(
    {"dumbbells", "adjustable_dumbbells", "smith_machine", "resistance_tubes", "jump_rope"}
)

SPECIFIC_EQUIPMENT = (
    # Free weights
    "dumbbells",
    "barbells",
    "kettlebells",
    "plates",
    "ez_curl_bar",
    "trap_bar",
    "adjustable_dumbbells",
    # Racks & rigs
    "squat_rack",
    "smith_machine",
    "pull_up_bar",
    "dip_station",
    "safety_arms",
    "landmine",
    # Cables
    "functional_trainer",
    "lat_pulldown",
    "low_row",
    "cable_column",
    "cable_attachments",
    # Bands
    "mini_bands",
    "loop_bands",
    "resistance_tubes",
    "figure_8_bands",
    "door_anchor",
    # Machines
    "chest_press",
    "leg_press",
    "leg_curl",
    "pec_deck",
    "seated_row",
    "shoulder_press",
    # Cardio
    "treadmill",
    "stationary_bike",
    "elliptical",
    "rowing_machine",
    "stair_climber",
    "assault_bike",
    "jump_rope",
    "step_stool",
    # Mobility
    "yoga_mat",
    "foam_roller",
    "massage_ball",
    "stability_ball",
    "stretching_strap",
    # Functional
    "medicine_ball",
    "battle_ropes",
    "plyo_box",
    "parallettes",
    "weighted_vest",
    "agility_ladder",
    "sandbag",
    "bulgarian_bag",
    "trx",
    "suspension_trainer",
    # Specialized
    "olympic_barbell",
    "bumper_plates",
    "lifting_platform",
    "jerk_blocks",
    "sled",
    "tire",
    "cones",
    "hurdles",
    "parachute",
)

SPECIFIC_FLAGS: dict[str, str] = {
    item: f"has_{item}_specific" if item in _SPECIFIC_SUFFIXED else f"has_{item}"
    for item in SPECIFIC_EQUIPMENT
}

WEIGHT_TYPES = ("dumbbells", "barbells", "kettlebells", "plates", "adjustable_dumbbells")

MAJOR_CONTEXTS = (
    "has_free_weights",
    "has_resistance_machines",
    "has_cable_systems",
    "has_bodyweight",
    "has_basic_cardio",
    "has_advanced_cardio",
    "has_functional_equipment",
    "has_mobility_recovery",
)


def _has(*concepts: str):
    return lambda v: any(v[c] for c in concepts)


VERSATILITY = ScoringRubric(
    "equipment_versatility",
    (
        ScoringRule("location", lambda v: bool(v["location"]), Versatility.LOCATION_POINTS),
        ScoringRule(
            "major_contexts",
            always,
            Versatility.CONTEXT_POINTS,
            multiplier=lambda v: sum(1 for c in MAJOR_CONTEXTS if v[c]),
        ),
        ScoringRule(
            "equipment_variety",
            always,
            1,
            multiplier=lambda v: min(
                v["subtypes_count"] * Versatility.SUBTYPE_POINTS, Versatility.SUBTYPE_CAP
            ),
        ),
        ScoringRule(
            "weight_variety",
            always,
            1,
            multiplier=lambda v: min(
                v["total_weight_types"] * Versatility.WEIGHT_TYPE_POINTS,
                Versatility.WEIGHT_TYPE_CAP,
            ),
        ),
    ),
)

STRENGTH_CAPABILITY = ScoringRubric(
    "equipment_strength_capability",
    (
        ScoringRule("dumbbells", _has("has_dumbbells_specific"), 15),
        ScoringRule("barbells", _has("has_barbells"), 20),
        ScoringRule("kettlebells", _has("has_kettlebells"), 15),
        ScoringRule("light_dumbbells", _has("dumbbells_has_light"), 5),
        ScoringRule("medium_dumbbells", _has("dumbbells_has_medium"), 10),
        ScoringRule("heavy_dumbbells", _has("dumbbells_has_heavy"), 10),
        ScoringRule("loaded_barbell", _has("barbells_has_loaded"), 5),
        ScoringRule("resistance_machines", _has("has_resistance_machines"), 10),
        ScoringRule("cable_systems", _has("has_cable_systems"), 10),
    ),
)

CARDIO_CAPABILITY = ScoringRubric(
    "equipment_cardio_capability",
    (
        ScoringRule("treadmill", _has("has_treadmill"), 20),
        ScoringRule("elliptical", _has("has_elliptical"), 15),
        ScoringRule("stationary_bike", _has("has_stationary_bike"), 15),
        ScoringRule("rowing_machine", _has("has_rowing_machine"), 10),
        ScoringRule("stair_climber", _has("has_stair_climber"), 10),
        ScoringRule("assault_bike", _has("has_assault_bike"), 15),
        ScoringRule("jump_rope", _has("has_jump_rope_specific"), 10),
        ScoringRule("battle_ropes", _has("has_battle_ropes"), 5),
    ),
)

FUNCTIONAL_CAPABILITY = ScoringRubric(
    "equipment_functional_capability",
    (
        ScoringRule("medicine_ball", _has("has_medicine_ball"), 10),
        ScoringRule("battle_ropes", _has("has_battle_ropes"), 10),
        ScoringRule("plyo_box", _has("has_plyo_box"), 10),
        ScoringRule("kettlebells", _has("has_kettlebells"), 10),
        ScoringRule("sandbag", _has("has_sandbag"), 10),
        ScoringRule("pull_up_bar", _has("has_pull_up_bar"), 10),
        ScoringRule("trx", _has("has_trx"), 15),
        ScoringRule("agility_ladder", _has("has_agility_ladder"), 5),
        ScoringRule("cones", _has("has_cones"), 5),
        ScoringRule("hurdles", _has("has_hurdles"), 5),
        ScoringRule("weighted_vest", _has("has_weighted_vest"), 10),
    ),
)

SCORES = {
    "versatility_score": VERSATILITY,
    "strength_capability": STRENGTH_CAPABILITY,
    "cardio_capability": CARDIO_CAPABILITY,
    "functional_capability": FUNCTIONAL_CAPABILITY,
}


def _weight_fields() -> dict[str, Any]:
    fields: dict[str, Any] = {
        **counts("total_weight_types", "total_weight_count"),
        **nullable("overall_min_weight", "overall_max_weight"),
    }
    for kind in WEIGHT_TYPES:
        fields.update(nullable(f"{kind}_min_weight", f"{kind}_max_weight"))
        fields.update(counts(f"{kind}_weight_count"))
        if kind in ("dumbbells", "kettlebells"):
            fields.update(flags(f"{kind}_has_light", f"{kind}_has_medium", f"{kind}_has_heavy"))
        elif kind == "barbells":
            fields.update(flags(f"{kind}_has_standard", f"{kind}_has_loaded", f"{kind}_has_heavy"))
    return fields


def _weight_bands(kind: str, weights: Sequence[Number]) -> dict[str, bool]:
    if kind == "dumbbells":
        light, heavy = WeightBands.DUMBBELL_LIGHT_BELOW, WeightBands.DUMBBELL_HEAVY_ABOVE
    elif kind == "kettlebells":
        light, heavy = WeightBands.KETTLEBELL_LIGHT_BELOW, WeightBands.KETTLEBELL_HEAVY_ABOVE
    elif kind == "barbells":
        return {
            f"{kind}_has_standard": WeightBands.BARBELL_STANDARD in weights,
            f"{kind}_has_loaded": any(w > WeightBands.BARBELL_LOADED_ABOVE for w in weights),
            f"{kind}_has_heavy": any(w > WeightBands.BARBELL_HEAVY_ABOVE for w in weights),
        }
    else:
        return {}
    return {
        f"{kind}_has_light": any(w < light for w in weights),
        f"{kind}_has_medium": any(light <= w <= heavy for w in weights),
        f"{kind}_has_heavy": any(w > heavy for w in weights),
    }


class EquipmentFlattener(BaseFlattener):
    domain = Domain.EQUIPMENT

    def build_fields(self) -> dict[str, Any]:
        return {
            **nullable("location"),
            **flags(*(f"location_{loc}" for loc in LOCATIONS)),
            **flags(*CONTEXT_FLAGS.values()),
            **counts("contexts_count"),
            **flags(*SPECIFIC_FLAGS.values()),
            **counts("subtypes_count"),
            **_weight_fields(),
            **counts(*SCORES),
            **counts(UNMAPPED_KEY_COUNT),
        }

    def _check_mappings(self) -> None:
        self.locations = FlagMapping(self.domain.value, {loc: f"location_{loc}" for loc in LOCATIONS})
        self.contexts = FlagMapping(self.domain.value, CONTEXT_FLAGS)
        self.specific = FlagMapping(self.domain.value, SPECIFIC_FLAGS)
        for mapping in (self.locations, self.contexts, self.specific):
            self._check_mapping(mapping)

    def _populate(self, values: dict[str, Any], value: EquipmentSelection) -> None:
        v = values

        # Unknown locations are kept verbatim with no location flag
        if value.location:
            v["location"] = value.location
            concept = self.locations.get(value.location)
            if concept is not None:
                v[concept] = True

        contexts, unknown_contexts = self.contexts.split(dict.fromkeys(value.contexts))
        for context in contexts:
            v[self.contexts[context]] = True
        v["contexts_count"] = len(contexts)

        items, unknown_items = self.specific.split(dict.fromkeys(value.specific_equipment))
        for item in items:
            v[self.specific[item]] = True
        v["subtypes_count"] = len(items)

        self._record_unmapped(v, [*unknown_contexts, *unknown_items])
        self._fill_weights(v, value.weights)

        for concept, rubric in SCORES.items():
            v[concept] = rubric.score(v)

    @staticmethod
    def _fill_weights(v: dict[str, Any], weights: dict[str, tuple[Number, ...]]) -> None:
        v["total_weight_types"] = len(weights)
        every: list[Number] = []
        for kind, listed in weights.items():
            every.extend(listed)
            if kind not in WEIGHT_TYPES:
                continue
            v[f"{kind}_min_weight"] = min(listed, default=None)
            v[f"{kind}_max_weight"] = max(listed, default=None)
            v[f"{kind}_weight_count"] = len(listed)
            v.update(_weight_bands(kind, listed))

        v["total_weight_count"] = len(every)
        v["overall_min_weight"] = min(every, default=None)
        v["overall_max_weight"] = max(every, default=None)

    def summarize(self, record: FlattenedRecord) -> str:
        c = record.concept
        if record.data_json == "null":
            return "No equipment selected"

        parts = []
        if c("location"):
            parts.append(f"Location: {c('location').replace('_', ' ', 1)}")

        low, high = c("overall_min_weight"), c("overall_max_weight")
        if low and high:
            parts.append(f"Weights: {low}-{high} lbs")

        if c("has_free_weights"):
            parts.append("Free Weights")
        if c("has_basic_cardio") or c("has_advanced_cardio"):
            parts.append("Cardio")
        if c("has_bodyweight"):
            parts.append("Bodyweight")
        if c("has_functional_equipment"):
            parts.append("Functional")

        parts.append(f"Versatility: {c('versatility_score')}%")
        return " • ".join(parts)
