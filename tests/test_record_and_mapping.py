"""Tests for record schemas, flattened records and flag mapping tables."""
from datetime import datetime, timedelta, timezone

import pytest

from selection_engine.core.exceptions import FlagMappingError, UnmappedTaxonomyNodeError
from selection_engine.flattening.base import format_timestamp
from selection_engine.flattening.mapping import FlagMapping
from selection_engine.flattening.record import RecordSchema, counts, flags, nullable


@pytest.fixture
def schema():
    return RecordSchema("demo", {**flags("has_a", "has_b"), **counts("total"), **nullable("where")})


class TestRecordSchema:
    """Test schema declaration and record building."""

    def test_field_names_prefixed(self, schema):
        """Test every field carries the prefix and backup fields come last."""
        assert schema.field_names == (
            "demo_has_a",
            "demo_has_b",
            "demo_total",
            "demo_where",
            "demo_data_json",
            "demo_last_updated",
            "demo_flattener_version",
        )
        assert len(schema) == 7

    def test_build_fills_defaults(self, schema):
        """Test unset concepts keep their defaults."""
        record = schema.build(
            {"has_a": True},
            data_json="null",
            last_updated="2024-01-01T00:00:00.000Z",
            flattener_version="1.0.0",
        )
        assert record["demo_has_a"] is True
        assert record["demo_has_b"] is False
        assert record["demo_total"] == 0
        assert record["demo_where"] is None
        assert record.concept("has_a") is True
        assert record.data_json == "null"
        assert record.flattener_version == "1.0.0"

    def test_build_rejects_undeclared(self, schema):
        """Test values for unknown concepts are a programming error."""
        with pytest.raises(KeyError):
            schema.build({"bogus": True}, data_json="null", last_updated="", flattener_version="")

    def test_reserved_concepts(self):
        """Test concepts may not shadow backup fields."""
        with pytest.raises(ValueError):
            RecordSchema("demo", {"data_json": ""})

    def test_record_is_read_only(self, schema):
        """Test records cannot be modified in place."""
        record = schema.build({}, data_json="null", last_updated="x", flattener_version="1")
        with pytest.raises(TypeError):
            record["demo_total"] = 5  # type: ignore[index]
        assert "demo_last_updated" not in record.without_timestamp()
        assert record.to_dict() == dict(record)


class TestFormatTimestamp:
    """Test ISO-8601 timestamp formatting."""

    def test_millisecond_precision_z_suffix(self):
        """Test UTC datetimes format with milliseconds and Z."""
        moment = datetime(2024, 3, 15, 9, 30, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2024-03-15T09:30:00.123Z"

    def test_converts_other_zones(self):
        """Test offsets are converted to UTC."""
        moment = datetime(2024, 3, 15, 11, 30, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == "2024-03-15T09:30:00.000Z"

    def test_naive_treated_as_utc(self):
        """Test naive datetimes are assumed to be UTC."""
        assert format_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"


class TestFlagMapping:
    """Test key -> concept tables."""

    def test_split(self):
        """Test keys partition into mapped and unmapped, order preserved."""
        mapping = FlagMapping("demo", {"a": "has_a", "b": "has_b"})
        assert mapping.split(["b", "x", "a", "y"]) == (["b", "a"], ["x", "y"])

    def test_validate_targets(self, schema):
        """Test targets missing from the schema are reported."""
        FlagMapping("demo", {"a": "has_a"}).validate_targets(schema)
        with pytest.raises(FlagMappingError, match="has_c"):
            FlagMapping("demo", {"c": "has_c"}).validate_targets(schema)

    def test_validate_tuple_targets(self, schema):
        """Test multi-concept targets are checked element by element."""
        mapping = FlagMapping("demo", {"a": ("has_a", "has_z")})
        with pytest.raises(FlagMappingError) as exc_info:
            mapping.validate_targets(schema, targets_of=lambda row: row)
        assert exc_info.value.details["undeclared"] == ["has_z"]

    def test_validate_covers(self, synthetic_catalog):
        """Test every catalog node needs a mapping entry."""
        mapping = FlagMapping("synthetic", {"P": "p", "S1": "s1"})
        assert mapping.missing_from(synthetic_catalog) == ["T1", "T2", "S2", "Q"]
        with pytest.raises(UnmappedTaxonomyNodeError) as exc_info:
            mapping.validate_covers(synthetic_catalog)
        assert exc_info.value.details["missing"] == ["T1", "T2", "S2", "Q"]
