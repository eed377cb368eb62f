"""YAML taxonomy loader.

Taxonomy data files live in ``selection_engine/taxonomy/data`` (or in the
directory named by ``TAXONOMY_DIR``) and look like::

    domain: focus_area
    levels: [primary, secondary, tertiary]
    nodes:
      - id: upper_body
        label: Upper Body
        children:
          - id: chest
            label: Chest
            children:
              - {id: upper_chest, label: Upper Chest}

A node's level comes from its nesting depth. Parsing is split from file I/O so
tests can build catalogs from plain dicts.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Final

import yaml

from selection_engine.config import get_settings
from selection_engine.core.exceptions import TaxonomyLoadError, TaxonomyValidationError
from selection_engine.core.logging import get_logger
from selection_engine.domains import TAXONOMY_DOMAINS, Domain, coerce_domain
from selection_engine.taxonomy.catalog import (
    NodeLevel,
    TaxonomyCatalog,
    TaxonomyNode,
    coerce_level,
)

DEFAULT_DATA_DIR: Final[Path] = Path(__file__).parent / "data"

logger = get_logger(__name__)


def parse_taxonomy(data: Any, source: str = "<data>") -> TaxonomyCatalog:
    """Build a catalog from a parsed taxonomy document.

    Args:
        data: Mapping with ``domain``, ``levels`` and nested ``nodes``
        source: Where the data came from, used in error messages

    Returns:
        Validated TaxonomyCatalog

    Raises:
        TaxonomyValidationError: If the document is malformed or the nodes do
            not form a valid forest
    """
    if not isinstance(data, dict):
        raise TaxonomyValidationError(
            f"Taxonomy document in {source} must be a mapping",
            details={"source": source},
        )

    domain = data.get("domain")
    if not isinstance(domain, str) or not domain:
        raise TaxonomyValidationError(
            f"Taxonomy document in {source} is missing 'domain'",
            details={"source": source},
        )

    raw_levels = data.get("levels")
    if not isinstance(raw_levels, list) or not raw_levels:
        raise TaxonomyValidationError(
            f"Taxonomy '{domain}' must declare a non-empty 'levels' list",
            details={"source": source, "domain": domain},
        )
    levels: list[NodeLevel] = []
    for raw_level in raw_levels:
        level = coerce_level(raw_level)
        if level is None:
            raise TaxonomyValidationError(
                f"Taxonomy '{domain}' declares unknown level '{raw_level}'",
                details={"source": source, "domain": domain},
            )
        levels.append(level)

    raw_nodes = data.get("nodes")
    if not isinstance(raw_nodes, list):
        raise TaxonomyValidationError(
            f"Taxonomy '{domain}' must declare a 'nodes' list",
            details={"source": source, "domain": domain},
        )

    nodes: list[TaxonomyNode] = []
    _collect_nodes(raw_nodes, levels, depth=0, parent_id=None, out=nodes, domain=domain)
    return TaxonomyCatalog(domain, nodes, levels)


def _collect_nodes(
    raw_nodes: list[Any],
    levels: list[NodeLevel],
    depth: int,
    parent_id: str | None,
    out: list[TaxonomyNode],
    domain: str,
) -> list[str]:
    if depth >= len(levels):
        raise TaxonomyValidationError(
            f"Taxonomy '{domain}' nests deeper than its {len(levels)} declared level(s)",
            details={"domain": domain, "parent_id": parent_id},
        )

    ids: list[str] = []
    for raw in raw_nodes:
        if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
            raise TaxonomyValidationError(
                f"Taxonomy '{domain}' has a node without a string 'id'",
                details={"domain": domain, "parent_id": parent_id, "node": raw},
            )
        node_id = raw["id"]
        # Reserve the slot so nodes stay in document order (parent before children)
        slot = len(out)
        out.append(None)  # type: ignore[arg-type]

        child_ids: list[str] = []
        children = raw.get("children")
        if children:
            if not isinstance(children, list):
                raise TaxonomyValidationError(
                    f"Node '{node_id}' in taxonomy '{domain}' has non-list 'children'",
                    details={"domain": domain, "node_id": node_id},
                )
            child_ids = _collect_nodes(children, levels, depth + 1, node_id, out, domain)

        out[slot] = TaxonomyNode(
            id=node_id,
            label=str(raw.get("label") or node_id),
            level=levels[depth],
            parent_id=parent_id,
            child_ids=tuple(child_ids),
            description=raw.get("description"),
        )
        ids.append(node_id)
    return ids


def load_taxonomy(path: Path | str) -> TaxonomyCatalog:
    """Load and validate a taxonomy YAML file.

    Raises:
        TaxonomyLoadError: If the file cannot be read or is not valid YAML
        TaxonomyValidationError: If the taxonomy is malformed
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise TaxonomyLoadError(
            f"Taxonomy file not found: {path}", details={"path": str(path)}
        ) from e
    except yaml.YAMLError as e:
        raise TaxonomyLoadError(
            f"Failed to parse taxonomy YAML: {e}", details={"path": str(path)}
        ) from e
    except OSError as e:
        raise TaxonomyLoadError(
            f"Failed to read taxonomy file: {e}", details={"path": str(path)}
        ) from e

    catalog = parse_taxonomy(data, source=str(path))
    logger.info(
        "taxonomy_loaded",
        domain=catalog.domain,
        path=str(path),
        nodes=len(catalog),
        levels=[level.value for level in catalog.levels],
    )
    return catalog


def taxonomy_path(domain: Domain | str) -> Path:
    """Path of the data file for a domain, honoring ``TAXONOMY_DIR``."""
    resolved = coerce_domain(domain)
    settings = get_settings()
    data_dir = Path(settings.taxonomy_dir) if settings.taxonomy_dir else DEFAULT_DATA_DIR
    return data_dir / f"{resolved.value}.yaml"


def get_catalog(domain: Domain | str) -> TaxonomyCatalog:
    """Get the process-wide catalog for a taxonomy domain.

    Raises:
        ValueError: If the domain has no taxonomy (duration, equipment)
    """
    resolved = coerce_domain(domain)
    if resolved not in TAXONOMY_DOMAINS:
        raise ValueError(f"Domain '{resolved.value}' has no taxonomy")
    return _cached_catalog(resolved)


@lru_cache(maxsize=None)
def _cached_catalog(resolved: Domain) -> TaxonomyCatalog:
    catalog = load_taxonomy(taxonomy_path(resolved))
    if catalog.domain != resolved.value:
        raise TaxonomyValidationError(
            f"Taxonomy file for '{resolved.value}' declares domain '{catalog.domain}'",
            details={"domain": resolved.value},
        )
    return catalog


def clear_catalog_cache() -> None:
    """Drop cached catalogs so the next lookup re-reads the data files."""
    _cached_catalog.cache_clear()
