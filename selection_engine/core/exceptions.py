"""Exception hierarchy for the selection flattening engine.

Selection mutation, format normalization and flattening are total: they
resolve malformed input to an empty/default result instead of raising. The
exceptions below are therefore confined to load-time problems (taxonomy data
files and the taxonomy-to-flag mapping tables) and to broken scoring
predicates.

Exception Hierarchy:
- SelectionEngineError (base)
  - TaxonomyError (taxonomy data failures)
    - TaxonomyLoadError (file missing, unreadable or not valid YAML)
    - TaxonomyValidationError (duplicate ids, dangling parents, cycles)
  - FlagMappingError (key -> flag table failures)
    - UnmappedTaxonomyNodeError (taxonomy node without a flag mapping)
  - ScoringRuleError (a rubric predicate raised)

Example:
    try:
        catalog = load_taxonomy(path)
    except TaxonomyValidationError as e:
        logger.error("taxonomy_invalid", error=str(e), **e.details)
    except TaxonomyError as e:
        logger.error("taxonomy_unavailable", error=str(e))
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================

class SelectionEngineError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error message
        details: Optional dictionary with additional error context
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Taxonomy Exceptions
# =============================================================================

class TaxonomyError(SelectionEngineError):
    """Base exception for taxonomy data errors."""

    pass


class TaxonomyLoadError(TaxonomyError):
    """Raised when a taxonomy data file cannot be read or parsed.

    Example:
        ```python
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as e:
            raise TaxonomyLoadError(
                f"Invalid YAML in {path}: {e}",
                details={"path": str(path)},
            ) from e
        ```
    """

    pass


class TaxonomyValidationError(TaxonomyError):
    """Raised when taxonomy nodes do not form a well-shaped forest.

    Covers duplicate node ids, parents that do not exist, cycles and nodes
    whose declared level does not match their depth.
    """

    pass


# =============================================================================
# Flag Mapping Exceptions
# =============================================================================

class FlagMappingError(SelectionEngineError):
    """Base exception for key -> flag mapping table errors."""

    pass


class UnmappedTaxonomyNodeError(FlagMappingError):
    """Raised when a taxonomy node has no entry in a flattener's flag table.

    Adding a node to a taxonomy data file without extending the flattener's
    mapping would otherwise make every selection of that node disappear from
    the flattened record.

    Example:
        ```python
        missing = sorted(set(catalog) - set(mapping))
        if missing:
            raise UnmappedTaxonomyNodeError(
                f"{len(missing)} taxonomy node(s) have no flag mapping",
                details={"domain": domain, "missing": missing},
            )
        ```
    """

    pass


# =============================================================================
# Scoring Exceptions
# =============================================================================

class ScoringRuleError(SelectionEngineError):
    """Raised when a rubric rule's predicate or multiplier fails to evaluate."""

    pass


def is_taxonomy_error(exception: Exception) -> bool:
    """Check if exception is a taxonomy data error.

    Args:
        exception: The exception to check

    Returns:
        True if exception is a TaxonomyError or subclass
    """
    return isinstance(exception, TaxonomyError)
