"""Input shape detection.

Raw customization data arrives in one of a few wire shapes depending on which
client version produced it. The shape is resolved once here so the rest of the
pipeline dispatches on a tag instead of re-inspecting types.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from selection_engine.normalization.models import DurationConfiguration, EquipmentSelection

# Keys that mark a mapping as a structured (duration / equipment) object rather
# than a selection map keyed by node id.
STRUCTURED_KEYS = frozenset(
    {
        "totalDuration",
        "total_duration",
        "workingTime",
        "working_time",
        "warmUp",
        "coolDown",
        "configuration",
        "location",
        "contexts",
        "specificEquipment",
        "specific_equipment",
        "weights",
    }
)


class InputShape(str, Enum):
    """Wire shape of raw customization data."""

    ABSENT = "absent"
    HIERARCHICAL = "hierarchical"  # {node_id: {selected, label, level, ...}}
    LEGACY_LIST = "legacy_list"  # ["upper_body", "chest"]
    LEGACY_SCALAR = "legacy_scalar"  # 45
    STRUCTURED = "structured"  # {totalDuration: 45, ...} / {location: "gym", ...}
    UNRECOGNIZED = "unrecognized"


def detect_shape(raw: Any) -> InputShape:
    """Classify raw input without validating its contents."""
    if raw is None:
        return InputShape.ABSENT
    # bool is an int subclass but never a legal duration
    if isinstance(raw, bool):
        return InputShape.UNRECOGNIZED
    if isinstance(raw, (int, float)):
        return InputShape.LEGACY_SCALAR
    if isinstance(raw, (list, tuple)):
        if all(isinstance(item, str) for item in raw):
            return InputShape.LEGACY_LIST
        return InputShape.UNRECOGNIZED
    if isinstance(raw, Mapping):
        if STRUCTURED_KEYS.intersection(raw.keys()):
            return InputShape.STRUCTURED
        return InputShape.HIERARCHICAL
    if isinstance(raw, (DurationConfiguration, EquipmentSelection)):
        return InputShape.STRUCTURED
    return InputShape.UNRECOGNIZED
