"""Static taxonomies (focus areas, soreness and stress categories)."""
from selection_engine.taxonomy.catalog import (
    CATEGORY_LEVELS,
    HIERARCHY_LEVELS,
    NodeLevel,
    TaxonomyCatalog,
    TaxonomyNode,
    coerce_level,
)
from selection_engine.taxonomy.loader import (
    clear_catalog_cache,
    get_catalog,
    load_taxonomy,
    parse_taxonomy,
    taxonomy_path,
)

__all__ = [
    "NodeLevel",
    "TaxonomyNode",
    "TaxonomyCatalog",
    "HIERARCHY_LEVELS",
    "CATEGORY_LEVELS",
    "coerce_level",
    "parse_taxonomy",
    "load_taxonomy",
    "taxonomy_path",
    "get_catalog",
    "clear_catalog_cache",
]
