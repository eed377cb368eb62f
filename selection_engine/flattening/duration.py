"""Session duration flattener (``duration_`` prefix).

Legacy bare totals are normalized to a duration-only configuration before they
get here, so both input shapes go through the same rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from selection_engine.domains import Domain
from selection_engine.flattening.base import BaseFlattener
from selection_engine.flattening.constants import Efficiency, PhaseLength, SessionLength
from selection_engine.flattening.record import FlattenedRecord, counts, flags
from selection_engine.flattening.rubric import (
    ScoringRubric,
    ScoringRule,
    always,
    percentage,
    round_to,
)
from selection_engine.normalization.models import DurationConfiguration, Number

CONFIGURATION_FLAGS = {
    "duration-only": "config_duration_only",
    "with-warmup": "config_with_warmup",
    "with-cooldown": "config_with_cooldown",
    "full-structure": "config_full_structure",
}


@dataclass(frozen=True)
class SessionMetrics:
    """Minutes and ratios of one session, as seen by the rubrics."""

    total: Number
    working: Number
    warmup_included: bool
    warmup: Number
    cooldown_included: bool
    cooldown: Number

    @classmethod
    def of(cls, config: DurationConfiguration) -> SessionMetrics:
        return cls(
            total=config.total_duration,
            working=config.working_minutes,
            warmup_included=config.warm_up.included,
            warmup=config.warm_up.duration,
            cooldown_included=config.cool_down.included,
            cooldown=config.cool_down.duration,
        )

    @property
    def structure(self) -> Number:
        """Minutes of included warm-up and cool-down."""
        return (self.warmup if self.warmup_included else 0) + (
            self.cooldown if self.cooldown_included else 0
        )

    @property
    def working_ratio(self) -> float:
        """Unrounded working percentage."""
        return self.working / self.total * 100 if self.total else 0.0

    @property
    def structure_ratio(self) -> float:
        return self.structure / self.total * 100 if self.total else 0.0


INTENSITY_CAPACITY = ScoringRubric(
    "duration_intensity_capacity",
    (
        ScoringRule(
            "working_time", always, 1, multiplier=lambda m: min(m.working_ratio * 0.4, 40)
        ),
        ScoringRule("warmup_thorough", lambda m: m.warmup_included and m.warmup >= 5, 30),
        ScoringRule("warmup_adequate", lambda m: m.warmup_included and 3 <= m.warmup < 5, 20),
        ScoringRule("warmup_brief", lambda m: m.warmup_included and m.warmup < 3, 10),
        ScoringRule("short_unwarmed", lambda m: not m.warmup_included and m.total <= 20, 15),
        ScoringRule("optimal_length", lambda m: 20 <= m.total <= 60, 20),
        ScoringRule("short_session", lambda m: m.total < 20, 15),
        ScoringRule("long_session", lambda m: m.total > 60, 10),
        ScoringRule("cooldown_planned", lambda m: m.cooldown_included and m.cooldown >= 5, 10),
        ScoringRule("cooldown_brief", lambda m: m.cooldown_included and m.cooldown < 5, 5),
    ),
)

RECOVERY_CAPACITY = ScoringRubric(
    "duration_recovery_capacity",
    (
        ScoringRule("cooldown_long", lambda m: m.cooldown_included and m.cooldown >= 10, 50),
        ScoringRule(
            "cooldown_extended", lambda m: m.cooldown_included and 7 <= m.cooldown < 10, 40
        ),
        ScoringRule("cooldown_standard", lambda m: m.cooldown_included and 5 <= m.cooldown < 7, 30),
        ScoringRule("cooldown_short", lambda m: m.cooldown_included and m.cooldown < 5, 20),
        ScoringRule("session_long", lambda m: m.total >= 45, 25),
        ScoringRule("session_medium", lambda m: 30 <= m.total < 45, 15),
        ScoringRule("session_short", lambda m: m.total < 30, 5),
        # structure_ratio counts included phases only
        ScoringRule("structure_balanced", lambda m: 20 <= m.structure_ratio <= 40, 15),
        ScoringRule(
            "structure_present",
            lambda m: m.structure_ratio >= 15 and not 20 <= m.structure_ratio <= 40,
            10,
        ),
        ScoringRule("working_sufficient", lambda m: m.working >= 15, 10),
        ScoringRule("working_minimal", lambda m: 10 <= m.working < 15, 5),
    ),
)


class DurationFlattener(BaseFlattener):
    domain = Domain.DURATION

    def build_fields(self) -> dict[str, Any]:
        return {
            **counts("total_minutes", "working_minutes", "structure_minutes"),
            # Warm-up
            **flags("warmup_included"),
            **counts("warmup_minutes", "warmup_percentage"),
            **flags("warmup_minimal", "warmup_standard", "warmup_extended"),
            # Cool-down
            **flags("cooldown_included"),
            **counts("cooldown_minutes", "cooldown_percentage"),
            **flags("cooldown_brief", "cooldown_standard", "cooldown_extended"),
            **flags(
                "category_micro",
                "category_short",
                "category_standard",
                "category_extended",
                "category_long",
            ),
            **flags(*CONFIGURATION_FLAGS.values()),
            **counts("working_percentage", "structure_percentage"),
            **flags(
                "efficiency_excellent",
                "efficiency_good",
                "efficiency_moderate",
                "efficiency_poor",
            ),
            **flags(
                "balanced_structure",
                "warmup_heavy",
                "cooldown_heavy",
                "minimal_prep",
                "heavy_prep",
            ),
            **flags("validation_valid", "validation_has_warnings", "validation_has_errors"),
            **counts("validation_warning_count", "validation_error_count"),
            **flags(
                "recommended_for_beginners",
                "recommended_for_intermediate",
                "recommended_for_advanced",
                "injury_prevention_optimized",
                "time_efficient",
            ),
            **flags(
                "suitable_strength",
                "suitable_cardio",
                "suitable_hiit",
                "suitable_flexibility",
                "suitable_recovery",
            ),
            **flags(
                "optimal_for_location_home",
                "optimal_for_location_gym",
                "optimal_for_location_quick",
            ),
            **counts("prep_to_work_ratio", "intensity_capacity", "recovery_capacity"),
        }

    def _populate(self, values: dict[str, Any], value: DurationConfiguration) -> None:
        m = SessionMetrics.of(value)
        v = values
        total = m.total

        v["total_minutes"] = total
        v["working_minutes"] = m.working
        v["structure_minutes"] = m.structure

        warm, cool = value.warm_up, value.cool_down
        v["warmup_included"] = warm.included
        v["warmup_minutes"] = warm.duration
        v["warmup_percentage"] = warm.percentage or 0
        if warm.included:
            low, high = PhaseLength.WARMUP_STANDARD
            v["warmup_minimal"] = warm.duration <= PhaseLength.WARMUP_MINIMAL_MAX
            v["warmup_standard"] = low <= warm.duration <= high
            v["warmup_extended"] = warm.duration >= PhaseLength.WARMUP_EXTENDED_MIN

        v["cooldown_included"] = cool.included
        v["cooldown_minutes"] = cool.duration
        v["cooldown_percentage"] = cool.percentage or 0
        if cool.included:
            low, high = PhaseLength.COOLDOWN_STANDARD
            v["cooldown_brief"] = cool.duration <= PhaseLength.COOLDOWN_BRIEF_MAX
            v["cooldown_standard"] = low <= cool.duration <= high
            v["cooldown_extended"] = cool.duration >= PhaseLength.COOLDOWN_EXTENDED_MIN

        v["category_micro"] = total <= SessionLength.MICRO_MAX
        v["category_short"] = SessionLength.MICRO_MAX < total <= SessionLength.SHORT_MAX
        v["category_standard"] = SessionLength.SHORT_MAX < total <= SessionLength.STANDARD_MAX
        v["category_extended"] = SessionLength.STANDARD_MAX < total <= SessionLength.EXTENDED_MAX
        v["category_long"] = total > SessionLength.EXTENDED_MAX

        if value.configuration is not None:
            v[CONFIGURATION_FLAGS[value.configuration]] = True

        working_pct = percentage(m.working, total)
        structure_pct = percentage(m.structure, total)
        v["working_percentage"] = working_pct
        v["structure_percentage"] = structure_pct
        v["efficiency_excellent"] = working_pct >= Efficiency.EXCELLENT_MIN
        v["efficiency_good"] = Efficiency.GOOD_MIN <= working_pct < Efficiency.EXCELLENT_MIN
        v["efficiency_moderate"] = Efficiency.MODERATE_MIN <= working_pct < Efficiency.GOOD_MIN
        v["efficiency_poor"] = working_pct < Efficiency.MODERATE_MIN

        # Excluded phases count as 0 minutes, whatever duration they carry
        w = warm.effective_minutes
        c = cool.effective_minutes
        v["balanced_structure"] = abs(w - c) <= Efficiency.BALANCED_PHASE_DIFF
        v["warmup_heavy"] = w > c + Efficiency.PHASE_HEAVY_MARGIN
        v["cooldown_heavy"] = c > w + Efficiency.PHASE_HEAVY_MARGIN
        v["minimal_prep"] = structure_pct < Efficiency.MINIMAL_PREP_BELOW
        v["heavy_prep"] = structure_pct > Efficiency.HEAVY_PREP_ABOVE

        if value.validation is not None:
            check = value.validation
            v["validation_valid"] = check.is_valid
            v["validation_has_warnings"] = bool(check.warnings)
            v["validation_has_errors"] = bool(check.errors)
            v["validation_warning_count"] = len(check.warnings)
            v["validation_error_count"] = len(check.errors)

        both_phases = warm.included and cool.included
        v["recommended_for_beginners"] = 20 <= total <= 45 and both_phases
        v["recommended_for_intermediate"] = 30 <= total <= 75
        v["recommended_for_advanced"] = total >= 30
        v["injury_prevention_optimized"] = both_phases and warm.duration >= 3 and cool.duration >= 3
        v["time_efficient"] = working_pct >= Efficiency.TIME_EFFICIENT_MIN

        v["suitable_strength"] = (
            total >= 30 and (warm.duration >= 3 or not warm.included) and m.working >= 20
        )
        v["suitable_cardio"] = total >= 20 and m.working >= 15
        v["suitable_hiit"] = 15 <= total <= 45 and m.working >= 10
        v["suitable_flexibility"] = (cool.included and cool.duration >= 5) or total >= 20
        v["suitable_recovery"] = cool.included and cool.duration >= 8

        v["optimal_for_location_home"] = 20 <= total <= 45
        v["optimal_for_location_gym"] = 45 <= total <= 75
        v["optimal_for_location_quick"] = total <= 20
        v["prep_to_work_ratio"] = round_to(m.structure / m.working, 2) if m.working > 0 else 0

        v["intensity_capacity"] = INTENSITY_CAPACITY.score(m)
        v["recovery_capacity"] = RECOVERY_CAPACITY.score(m)

    def summarize(self, record: FlattenedRecord) -> str:
        c = record.concept
        if record.data_json == "null":
            return "No duration configured"

        parts = [f"{c('total_minutes')} min total"]
        if c("warmup_included") or c("cooldown_included"):
            parts.append(f"{c('working_minutes')} min active")
            if c("warmup_included"):
                parts.append(f"{c('warmup_minutes')}min warm-up")
            if c("cooldown_included"):
                parts.append(f"{c('cooldown_minutes')}min cool-down")

        if c("efficiency_excellent"):
            parts.append("Excellent efficiency")
        elif c("efficiency_good"):
            parts.append("Good efficiency")
        elif c("efficiency_moderate"):
            parts.append("Moderate efficiency")

        if c("intensity_capacity") >= 80:
            parts.append("High intensity capable")
        if c("recovery_capacity") >= 80:
            parts.append("Strong recovery focus")

        return " • ".join(parts)
