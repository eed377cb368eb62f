"""Cross-cutting infrastructure: structured logging and the exception hierarchy."""
from selection_engine.core.exceptions import (
    FlagMappingError,
    ScoringRuleError,
    SelectionEngineError,
    TaxonomyError,
    TaxonomyLoadError,
    TaxonomyValidationError,
    UnmappedTaxonomyNodeError,
    is_taxonomy_error,
)
from selection_engine.core.logging import configure_logging, get_logger, log_context

__all__ = [
    "SelectionEngineError",
    "TaxonomyError",
    "TaxonomyLoadError",
    "TaxonomyValidationError",
    "FlagMappingError",
    "UnmappedTaxonomyNodeError",
    "ScoringRuleError",
    "is_taxonomy_error",
    "configure_logging",
    "get_logger",
    "log_context",
]
