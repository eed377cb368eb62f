"""Tests for the soreness flattener."""
import json

import pytest

from selection_engine.flattening.constants import RatingScale
from selection_engine.flattening.ratings import RatingSummary
from selection_engine.flattening.soreness import BODY_PARTS, SorenessFlattener
from tests.helpers import rated


@pytest.fixture
def flattener(soreness_catalog, fixed_clock, settings):
    return SorenessFlattener(catalog=soreness_catalog, clock=fixed_clock, settings=settings)


class TestSorenessSchema:
    """Test the soreness record layout."""

    def test_presence_and_level_flags(self, flattener):
        """Test each body part has a presence flag and five level flags."""
        record = flattener.flatten(None)
        for part in BODY_PARTS:
            assert record.concept(f"has_{part}") is False
            for suffix in ("mild", "low_moderate", "moderate", "high", "severe"):
                assert record.concept(f"{part}_{suffix}") is False

    def test_empty(self, flattener):
        """Test no selection gives zero scores and no recommendations."""
        record = flattener.flatten({})
        assert record.data_json == "null"
        assert record.concept("severity_score") == 0
        assert record.concept("recommend_rest") is False
        assert flattener.summarize(record) == "No soreness reported"


class TestSorenessFlatten:
    """Test flags, analytics and recommendations."""

    def test_single_moderate_area(self, flattener):
        """Test a moderately sore neck calls for active recovery."""
        record = flattener.flatten(rated(neck=3))
        c = record.concept

        assert c("has_neck") is True
        assert c("neck_moderate") is True
        assert c("neck_high") is False
        assert c("has_upper_body") is True
        assert c("has_lower_body") is False
        assert c("has_moderate_levels") is True
        assert c("has_mild_only") is False
        assert c("mixed_severity") is False
        assert c("needs_upper_modification") is True
        assert c("needs_recovery_focus") is True
        assert c("affects_flexibility") is True
        assert c("needs_intensity_reduction") is False
        assert c("total_areas") == 1
        assert c("moderate_count") == 1
        assert c("average_level") == 3.0
        assert c("severity_score") == 60
        assert c("recommend_active_recovery") is True
        assert c("recommend_rest") is False
        assert c("recommend_massage") is True
        assert c("recommend_mobility_work") is False
        assert flattener.summarize(record) == (
            "1 sore areas • Moderate soreness • Upper Body • Active Recovery"
        )

    def test_severe_joint_and_back(self, flattener):
        """Test severe knee and high lower back soreness recommends rest."""
        record = flattener.flatten(rated(knees=5, lower_back=4))
        c = record.concept

        assert c("has_core") is True
        assert c("has_lower_body") is True
        assert c("has_back_issues") is True
        assert c("has_joint_issues") is True
        assert c("has_severe_levels") is True
        assert c("has_high_levels") is True
        assert c("mixed_severity") is True
        assert c("high_count") == 2
        assert c("average_level") == 4.5
        assert c("severity_score") == 90
        assert c("contraindicated_high_impact") is True
        assert c("affects_cardio") is True
        assert c("recommend_rest") is True
        assert c("recommend_active_recovery") is False
        assert c("recommend_ice_heat") is True
        assert flattener.summarize(record) == (
            "2 sore areas • Severe soreness • Core + Lower Body • "
            "Back Issues • Joint Issues • Needs Rest"
        )

    def test_unrated_area_counts_as_present(self, flattener):
        """Test a selected area without a rating sets presence only."""
        record = flattener.flatten(rated(neck=None, knees=1))
        c = record.concept

        assert c("has_neck") is True
        assert not any(c(f"neck_{s}") for s in ("mild", "low_moderate", "moderate", "high", "severe"))
        assert c("total_areas") == 2
        assert c("mild_count") == 1
        assert c("has_mild_only") is True
        assert c("average_level") == 1.0
        assert c("severity_score") == 20
        assert c("recommend_active_recovery") is False
        assert flattener.summarize(record) == (
            "2 sore areas • Mild soreness • Upper Body + Lower Body • Joint Issues"
        )

    def test_unmapped_keys_counted(self, flattener):
        """Test unknown body parts are dropped but counted."""
        record = flattener.flatten(rated(neck=2, tailbone=3))
        assert record.concept("unmapped_key_count") == 1
        assert record.concept("total_areas") == 1
        assert record.concept("neck_low_moderate") is True
        assert record.concept("severity_score") == 40

    def test_deselected_entries_ignored(self, flattener):
        """Test entries with selected=false do not contribute."""
        selection = rated(neck=4)
        selection["knees"] = selection["neck"].model_copy(update={"selected": False, "rating": 5})
        record = flattener.flatten(selection)
        assert record.concept("has_knees") is False
        assert record.concept("has_severe_levels") is False

    def test_wire_payload(self, flattener):
        """Test camelCase wire entries flatten like parsed ones."""
        record = flattener.flatten(
            {"shoulders": {"selected": True, "label": "Shoulders", "level": "category", "rating": 2}}
        )
        assert record.concept("shoulders_low_moderate") is True
        assert record.concept("moderate_count") == 1

    def test_backup_region_keeps_input(self, flattener):
        """Test data_json holds a hierarchical payload exactly as sent."""
        raw = {"neck": {"selected": True, "rating": 3}}
        record = flattener.flatten(raw)
        assert json.loads(record.data_json) == raw

    def test_fractional_rating(self, flattener):
        """Test a non-whole rating keeps the area and feeds the averages only."""
        record = flattener.flatten({"neck": {"selected": True, "label": "Neck", "rating": 2.5}})
        c = record.concept

        assert c("has_neck") is True
        assert c("total_areas") == 1
        assert not any(c(f"neck_{s}") for s in ("mild", "low_moderate", "moderate", "high", "severe"))
        assert c("moderate_count") == 1
        assert c("average_level") == 2.5
        assert c("severity_score") == 50

    def test_whole_float_rating_sets_level(self, flattener):
        """Test a rating of 4.0 sets the same level flag as 4."""
        record = flattener.flatten({"knees": {"selected": True, "rating": 4.0}})
        assert record.concept("knees_high") is True
        assert record.concept("high_count") == 1


class TestRatingSummary:
    """Test the rating aggregates shared by soreness and stress."""

    def test_counts(self):
        """Test mild, moderate, high and severe buckets."""
        summary = RatingSummary(("a", "b", "c", "d"), (1, 2, 4, 5), {})
        assert summary.mild_count == 1
        assert summary.moderate_count == 1
        assert summary.high_count == 2
        assert summary.severe_count == 1
        assert summary.count_at_least(4) == 2
        assert summary.mixed is True
        assert summary.average_level == 3.0

    def test_empty(self):
        """Test an empty summary has zero aggregates."""
        summary = RatingSummary()
        assert summary.mean == 0.0
        assert summary.maximum == 0
        assert summary.mild_only is False
        assert summary.mixed is False

    def test_level_suffix_needs_whole_rating(self):
        """Test only whole ratings on the 1-5 scale map to a level suffix."""
        assert RatingScale.suffix_for(2) == "low_moderate"
        assert RatingScale.suffix_for(2.0) == "low_moderate"
        assert RatingScale.suffix_for(2.5) is None
        assert RatingScale.suffix_for(6) is None
        assert RatingScale.suffix_for(True) is None
