"""Explicit key -> concept lookup tables.

Flatteners never build flag names from input keys. Each one owns a table from
every legal input key to the concept(s) it sets, and the table is checked
against the taxonomy and the record schema when the flattener is built.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Generic, TypeVar

from selection_engine.core.exceptions import FlagMappingError, UnmappedTaxonomyNodeError
from selection_engine.flattening.record import RecordSchema
from selection_engine.taxonomy.catalog import TaxonomyCatalog

T = TypeVar("T")


class FlagMapping(Mapping[str, T], Generic[T]):
    """Read-only table from input key to flag target.

    Args:
        domain: Domain name, for error messages
        table: Input key -> target (a concept name, or a tuple of them)
    """

    def __init__(self, domain: str, table: Mapping[str, T]) -> None:
        self.domain = domain
        self._table: dict[str, T] = dict(table)

    def __getitem__(self, key: str) -> T:
        return self._table[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def split(self, keys: Iterable[str]) -> tuple[list[str], list[str]]:
        """Partition keys into (mapped, unmapped), preserving order."""
        mapped: list[str] = []
        unmapped: list[str] = []
        for key in keys:
            (mapped if key in self._table else unmapped).append(key)
        return mapped, unmapped

    def missing_from(self, catalog: TaxonomyCatalog) -> list[str]:
        """Catalog node ids with no entry in this table."""
        return [node_id for node_id in catalog if node_id not in self._table]

    def validate_covers(self, catalog: TaxonomyCatalog) -> None:
        """Require a table entry for every node of the catalog.

        Raises:
            UnmappedTaxonomyNodeError: If any catalog node is missing
        """
        missing = self.missing_from(catalog)
        if missing:
            raise UnmappedTaxonomyNodeError(
                f"{len(missing)} {catalog.domain} taxonomy node(s) have no flag mapping: "
                f"{', '.join(missing)}",
                details={"domain": self.domain, "missing": missing},
            )

    def validate_targets(
        self,
        schema: RecordSchema,
        targets_of: Callable[[T], Iterable[str]] | None = None,
    ) -> None:
        """Require every mapped concept to be declared by the schema.

        Raises:
            FlagMappingError: If a target concept is not in the schema
        """
        undeclared: list[str] = []
        for target in self._table.values():
            concepts = targets_of(target) if targets_of else (target,)
            undeclared.extend(c for c in concepts if c not in schema)
        if undeclared:
            raise FlagMappingError(
                f"{self.domain} flag mapping targets undeclared concepts: "
                f"{', '.join(sorted(set(undeclared)))}",
                details={"domain": self.domain, "undeclared": sorted(set(undeclared))},
            )
