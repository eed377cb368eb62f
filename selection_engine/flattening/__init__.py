"""Flattening compiler: normalized selections -> fixed-shape analytics records.

One flattener per domain, all built on ``BaseFlattener``:

- **focus_area.py**: 3-tier focus taxonomy flags, aggregates and capacity scores
- **soreness.py** / **stress.py**: category + rating domains (shared ``ratings.py``)
- **duration.py**: session length, warm-up/cool-down structure and efficiency
- **equipment.py**: location, contexts, specific equipment and weights

Scores are additive rubrics (``rubric.py``); thresholds live in ``constants.py``.
"""
from selection_engine.flattening.base import BaseFlattener, format_timestamp
from selection_engine.flattening.duration import DurationFlattener
from selection_engine.flattening.equipment import EquipmentFlattener
from selection_engine.flattening.focus_area import FocusAreaFlattener
from selection_engine.flattening.mapping import FlagMapping
from selection_engine.flattening.record import FlattenedRecord, RecordSchema
from selection_engine.flattening.registry import (
    FLATTENER_CLASSES,
    clear_flattener_cache,
    flatten,
    flatten_customizations,
    get_flattener,
    normalize,
    summarize,
)
from selection_engine.flattening.rubric import RubricResult, ScoringRubric, ScoringRule
from selection_engine.flattening.soreness import SorenessFlattener
from selection_engine.flattening.stress import StressFlattener

__all__ = [
    "BaseFlattener",
    "FocusAreaFlattener",
    "SorenessFlattener",
    "StressFlattener",
    "DurationFlattener",
    "EquipmentFlattener",
    "FlattenedRecord",
    "RecordSchema",
    "FlagMapping",
    "ScoringRule",
    "ScoringRubric",
    "RubricResult",
    "FLATTENER_CLASSES",
    "get_flattener",
    "clear_flattener_cache",
    "normalize",
    "flatten",
    "summarize",
    "flatten_customizations",
    "format_timestamp",
]
