"""Tests for the session duration flattener."""
import json

import pytest

from selection_engine.flattening.duration import DurationFlattener, SessionMetrics
from selection_engine.normalization.models import DurationConfiguration


@pytest.fixture
def flattener(fixed_clock, settings):
    return DurationFlattener(clock=fixed_clock, settings=settings)


def session(total, working=None, warmup=None, cooldown=None, **extra):
    """Wire-form duration configuration; phases given as minutes."""
    config = {"totalDuration": total, **extra}
    if working is not None:
        config["workingTime"] = working
    if warmup is not None:
        config["warmUp"] = {"included": True, "duration": warmup}
    if cooldown is not None:
        config["coolDown"] = {"included": True, "duration": cooldown}
    return config


class TestDurationFlatten:
    """Test structured configurations."""

    def test_full_structure(self, flattener):
        """Test a 45 minute session with 5 minute warm-up and cool-down."""
        record = flattener.flatten(session(45, working=35, warmup=5, cooldown=5))
        c = record.concept

        assert c("total_minutes") == 45
        assert c("working_minutes") == 35
        assert c("structure_minutes") == 10
        assert c("config_full_structure") is True
        assert c("config_duration_only") is False
        assert c("category_standard") is True
        assert c("warmup_standard") is True
        assert c("cooldown_standard") is True
        assert c("working_percentage") == 78
        assert c("structure_percentage") == 22
        assert c("efficiency_good") is True
        assert c("balanced_structure") is True
        assert c("minimal_prep") is False
        assert c("recommended_for_beginners") is True
        assert c("injury_prevention_optimized") is True
        assert c("time_efficient") is True
        assert c("suitable_hiit") is True
        assert c("suitable_recovery") is False
        assert c("optimal_for_location_home") is True
        assert c("optimal_for_location_gym") is True
        assert c("prep_to_work_ratio") == 0.29
        assert c("intensity_capacity") == 91
        assert c("recovery_capacity") == 80
        assert flattener.summarize(record) == (
            "45 min total • 35 min active • 5min warm-up • 5min cool-down • "
            "Good efficiency • High intensity capable • Strong recovery focus"
        )

    def test_excluded_phase_minutes_ignored(self, flattener):
        """Test a phase that is not included adds no structure time."""
        record = flattener.flatten(
            {"totalDuration": 30, "warmUp": {"included": False, "duration": 10}}
        )
        c = record.concept

        assert c("warmup_included") is False
        assert c("warmup_minutes") == 10
        assert c("warmup_extended") is False
        assert c("structure_minutes") == 0
        assert c("working_minutes") == 30
        assert c("config_duration_only") is True
        assert c("balanced_structure") is True

    def test_warmup_heavy(self, flattener):
        """Test a long warm-up with a brief cool-down."""
        record = flattener.flatten(session(30, warmup=10, cooldown=2))
        c = record.concept

        assert c("working_minutes") == 18
        assert c("warmup_extended") is True
        assert c("cooldown_brief") is True
        assert c("warmup_heavy") is True
        assert c("cooldown_heavy") is False
        assert c("structure_percentage") == 40
        assert c("heavy_prep") is False
        assert c("efficiency_moderate") is True

    def test_validation_block(self, flattener):
        """Test validation results are copied into flags and counts."""
        record = flattener.flatten(
            session(
                30,
                validation={"isValid": False, "warnings": ["short"], "errors": ["a", "b"]},
            )
        )
        c = record.concept
        assert c("validation_valid") is False
        assert c("validation_has_warnings") is True
        assert c("validation_has_errors") is True
        assert c("validation_warning_count") == 1
        assert c("validation_error_count") == 2

    def test_zero_total_has_no_ratios(self, flattener):
        """Test a zero-minute session avoids dividing by zero."""
        record = flattener.flatten(session(0))
        c = record.concept
        assert c("working_percentage") == 0
        assert c("prep_to_work_ratio") == 0
        assert c("category_micro") is True
        assert c("efficiency_poor") is True

    def test_empty(self, flattener):
        """Test absent input gives the default record."""
        record = flattener.flatten(None)
        assert record.data_json == "null"
        assert record.concept("total_minutes") == 0
        assert record.concept("category_micro") is False
        assert flattener.summarize(record) == "No duration configured"


class TestLegacyDuration:
    """Test bare minute totals."""

    def test_scalar_total(self, flattener):
        """Test a bare 45 is a 45 minute duration-only session."""
        record = flattener.flatten(45)
        c = record.concept

        assert c("config_duration_only") is True
        assert c("working_minutes") == 45
        assert c("structure_minutes") == 0
        assert c("working_percentage") == 100
        assert c("efficiency_excellent") is True
        assert c("minimal_prep") is True
        assert c("validation_valid") is True
        assert c("suitable_strength") is True
        assert c("recommended_for_beginners") is False
        assert c("intensity_capacity") == 60
        assert c("recovery_capacity") == 35
        assert flattener.summarize(record) == "45 min total • Excellent efficiency"

    @pytest.mark.parametrize("raw", [0, -5])
    def test_meaningless_totals(self, flattener, raw):
        """Test zero and negative totals flatten to the default record."""
        assert flattener.flatten(raw).data_json == "null"

    def test_backup_region(self, flattener):
        """Test the legacy scalar is stored in its normalized form."""
        record = flattener.flatten(20)
        assert '"totalDuration":20' in record.data_json
        assert '"configuration":"duration-only"' in record.data_json

    def test_total_too_large_for_float(self, flattener):
        """Test an integer total beyond float range flattens without error."""
        total = 10**400
        record = flattener.flatten(total)
        c = record.concept

        assert c("total_minutes") == total
        assert c("category_long") is True
        assert c("working_percentage") == 100
        assert json.loads(record.data_json)["totalDuration"] == total


class TestSessionMetrics:
    """Test the metrics the duration rubrics see."""

    def test_structure_counts_included_phases(self):
        """Test excluded phases do not count towards structure time."""
        config = DurationConfiguration.model_validate(
            {
                "totalDuration": 40,
                "warmUp": {"included": True, "duration": 5},
                "coolDown": {"included": False, "duration": 10},
            }
        )
        metrics = SessionMetrics.of(config)
        assert metrics.structure == 5
        assert metrics.working == 35
        assert metrics.structure_ratio == 12.5
