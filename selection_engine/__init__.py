"""Hierarchical selection and flattening engine for workout customizations."""
from selection_engine.domains import Domain
from selection_engine.flattening import (
    FlattenedRecord,
    flatten,
    flatten_customizations,
    get_flattener,
    normalize,
    summarize,
)
from selection_engine.selection import CategoryRatingManager, SelectionStateManager
from selection_engine.taxonomy import get_catalog

__version__ = "1.0.0"

__all__ = [
    "Domain",
    "FlattenedRecord",
    "flatten",
    "flatten_customizations",
    "get_flattener",
    "normalize",
    "summarize",
    "SelectionStateManager",
    "CategoryRatingManager",
    "get_catalog",
]
