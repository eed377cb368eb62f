"""Input shape detection and normalization."""
from selection_engine.normalization.models import (
    DurationConfiguration,
    DurationValidation,
    EquipmentSelection,
    PhaseConfig,
)
from selection_engine.normalization.normalizer import (
    FormatNormalizer,
    NormalizedInput,
)
from selection_engine.normalization.shapes import InputShape, detect_shape

__all__ = [
    "InputShape",
    "detect_shape",
    "FormatNormalizer",
    "NormalizedInput",
    "DurationConfiguration",
    "DurationValidation",
    "PhaseConfig",
    "EquipmentSelection",
]
