"""Tests for the equipment flattener."""
import json

import pytest

from selection_engine.flattening.equipment import (
    CONTEXT_FLAGS,
    LOCATIONS,
    SPECIFIC_FLAGS,
    EquipmentFlattener,
)
from tests.helpers import FIXED_STAMP


@pytest.fixture
def flattener(fixed_clock, settings):
    return EquipmentFlattener(clock=fixed_clock, settings=settings)


@pytest.fixture
def home_gym():
    return {
        "location": "home_gym",
        "contexts": ["Free Weights", "Bodyweight", "Basic Cardio"],
        "specificEquipment": ["dumbbells", "kettlebells", "pull_up_bar", "treadmill"],
        "weights": {"dumbbells": [10, 25, 55], "kettlebells": [16, 24]},
        "lastUpdated": "2023-12-31T23:59:59Z",
    }


class TestEquipmentTables:
    """Test the location, context and equipment tables."""

    def test_table_sizes(self):
        """Test the record covers every known location, context and item."""
        assert len(LOCATIONS) == 7
        assert len(CONTEXT_FLAGS) == 32
        assert len(SPECIFIC_FLAGS) == 61

    def test_no_flag_collisions(self):
        """Test context and specific flags never share a name."""
        assert not set(CONTEXT_FLAGS.values()) & set(SPECIFIC_FLAGS.values())
        assert SPECIFIC_FLAGS["dumbbells"] == "has_dumbbells_specific"
        assert CONTEXT_FLAGS["Dumbbells"] == "has_dumbbells"

    def test_version(self, flattener):
        """Test equipment records carry the 2.0.0 schema version."""
        assert flattener.flatten(None).flattener_version == "2.0.0"


class TestEquipmentFlatten:
    """Test flags, weight analysis and capability scores."""

    def test_home_gym(self, flattener, home_gym):
        """Test a home gym with dumbbells, kettlebells and a treadmill."""
        record = flattener.flatten(home_gym)
        c = record.concept

        assert c("location") == "home_gym"
        assert c("location_home_gym") is True
        assert c("location_gym") is False
        assert c("has_free_weights") is True
        assert c("contexts_count") == 3
        assert c("has_dumbbells_specific") is True
        assert c("has_dumbbells") is False
        assert c("subtypes_count") == 4
        assert c("unmapped_key_count") == 0

        assert c("total_weight_types") == 2
        assert c("total_weight_count") == 5
        assert (c("overall_min_weight"), c("overall_max_weight")) == (10, 55)
        assert (c("dumbbells_min_weight"), c("dumbbells_max_weight")) == (10, 55)
        assert c("dumbbells_weight_count") == 3
        assert c("dumbbells_has_light") is True
        assert c("dumbbells_has_medium") is True
        assert c("dumbbells_has_heavy") is True
        assert c("kettlebells_has_light") is False
        assert c("kettlebells_has_medium") is True
        assert c("barbells_min_weight") is None

        assert c("versatility_score") == 37
        assert c("strength_capability") == 55
        assert c("cardio_capability") == 20
        assert c("functional_capability") == 20
        assert flattener.summarize(record) == (
            "Location: home gym • Weights: 10-55 lbs • Free Weights • Cardio • "
            "Bodyweight • Versatility: 37%"
        )

    def test_clock_stamps_record(self, flattener, home_gym):
        """Test last_updated comes from the clock, not the payload."""
        record = flattener.flatten(home_gym)
        assert record.last_updated == FIXED_STAMP
        assert json.loads(record.data_json)["lastUpdated"].startswith("2023-12-31")

    def test_barbell_bands(self, flattener):
        """Test standard, loaded and heavy barbell bands."""
        record = flattener.flatten({"weights": {"barbells": [45, 185, 315]}})
        c = record.concept
        assert c("barbells_has_standard") is True
        assert c("barbells_has_loaded") is True
        assert c("barbells_has_heavy") is True
        assert c("strength_capability") == 5

    def test_other_weight_types_counted(self, flattener):
        """Test weights for unlisted implements count towards the totals."""
        record = flattener.flatten({"weights": {"sandbag": [20, 40]}})
        assert record.concept("total_weight_types") == 1
        assert record.concept("total_weight_count") == 2
        assert record.concept("overall_max_weight") == 40
        assert record.concept("versatility_score") == 2

    def test_unknown_keys(self, flattener):
        """Test unknown location is kept while unknown items are counted."""
        record = flattener.flatten(
            {
                "location": "beach",
                "contexts": ["Space Station"],
                "specificEquipment": ["hoverboard", "dumbbells", "dumbbells"],
            }
        )
        c = record.concept
        assert c("location") == "beach"
        assert not any(c(f"location_{loc}") for loc in LOCATIONS)
        assert c("unmapped_key_count") == 2
        assert c("subtypes_count") == 1
        assert c("versatility_score") == 12

    def test_legacy_list(self, flattener):
        """Test a legacy string list flattens through keyword matching."""
        record = flattener.flatten(["Adjustable Dumbbell Set", "Yoga Mat"])
        c = record.concept
        assert c("has_dumbbells_specific") is True
        assert c("has_yoga_mat") is True
        assert c("has_free_weights") is True
        assert c("has_bodyweight") is True
        assert c("location") is None
        assert c("versatility_score") == 14
        assert flattener.summarize(record) == "Free Weights • Bodyweight • Versatility: 14%"

    @pytest.mark.parametrize("raw", [None, {}, {"location": None}, ["sofa"], 12])
    def test_empty(self, flattener, raw):
        """Test inputs with no equipment give the default record."""
        record = flattener.flatten(raw)
        assert record.data_json == "null"
        assert record.concept("versatility_score") == 0
        assert flattener.summarize(record) == "No equipment selected"
