"""Base flattener.

A flattener compiles one domain's normalized input into a ``FlattenedRecord``:

1. Start from the schema's all-default values.
2. Let the domain populate flags, counts, ratios and rubric scores.
3. Add the backup region (input JSON, timestamp, schema version).

Subclasses declare their schema concepts in ``build_fields`` and fill values
in ``_populate``. Flattening never mutates its input and never raises for
well-typed input; empty input yields the all-default record.

Example:
    ```python
    class MyFlattener(BaseFlattener):
        domain = Domain.STRESS

        def build_fields(self) -> dict[str, Any]:
            return {**flags("has_physical"), **counts("total_categories")}

        def _populate(self, values, value) -> None:
            ...

        def summarize(self, record) -> str:
            return "..."
    ```
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any, ClassVar

from selection_engine.config import Settings, get_settings
from selection_engine.core.logging import get_logger
from selection_engine.domains import (
    FLATTENER_VERSIONS,
    RECORD_PREFIXES,
    TAXONOMY_DOMAINS,
    Domain,
)
from selection_engine.flattening.mapping import FlagMapping
from selection_engine.flattening.record import (
    UNMAPPED_KEY_COUNT,
    FlattenedRecord,
    RecordSchema,
)
from selection_engine.normalization.normalizer import FormatNormalizer, NormalizedInput
from selection_engine.normalization.shapes import InputShape
from selection_engine.selection.models import Selection, SelectionEntry
from selection_engine.taxonomy.catalog import TaxonomyCatalog
from selection_engine.taxonomy.loader import get_catalog

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def selected_entries(selection: Selection) -> dict[str, SelectionEntry]:
    return {key: entry for key, entry in selection.items() if entry.selected}


class BaseFlattener(ABC):
    """Abstract base class for domain flatteners.

    Args:
        catalog: Taxonomy for taxonomy-backed domains (defaults to the
            packaged catalog)
        clock: Source of the ``last_updated`` timestamp
        settings: Engine settings (defaults to ``get_settings()``)
    """

    domain: ClassVar[Domain]

    def __init__(
        self,
        catalog: TaxonomyCatalog | None = None,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if catalog is None and self.domain in TAXONOMY_DOMAINS:
            catalog = get_catalog(self.domain)
        self.catalog = catalog
        self.clock = clock or utc_now
        self.version = FLATTENER_VERSIONS[self.domain]
        self.normalizer = FormatNormalizer(self.domain, catalog)
        self.schema = RecordSchema(RECORD_PREFIXES[self.domain], self.build_fields())
        self._check_mappings()

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def build_fields(self) -> dict[str, Any]:
        """Concept name -> default value for every field of the record."""

    @abstractmethod
    def _populate(self, values: dict[str, Any], value: Any) -> None:
        """Fill ``values`` (concept-keyed, pre-set to defaults) from a non-empty value."""

    @abstractmethod
    def summarize(self, record: FlattenedRecord) -> str:
        """Short human-readable summary of a record."""

    def _check_mappings(self) -> None:
        """Validate flag tables against the schema and catalog."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _check_mapping(self, mapping: FlagMapping, targets_of=None) -> None:
        mapping.validate_targets(self.schema, targets_of)
        if self.catalog is not None and self.settings.strict_flag_mappings:
            mapping.validate_covers(self.catalog)

    def _record_unmapped(self, values: dict[str, Any], unmapped: Sequence[str]) -> None:
        values[UNMAPPED_KEY_COUNT] = len(unmapped)
        if unmapped and self.settings.log_unmapped_keys:
            logger.debug(
                "unmapped_keys_dropped",
                domain=self.domain.value,
                keys=list(unmapped),
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def normalize(self, raw: Any) -> NormalizedInput:
        return self.normalizer.normalize(raw)

    def flatten(self, raw: Any) -> FlattenedRecord:
        """Normalize raw input of any accepted shape, then compile it."""
        return self.compile(self.normalize(raw))

    def compile(self, normalized: NormalizedInput) -> FlattenedRecord:
        """Compile already-normalized input into a record.

        Raises:
            ValueError: If the input was normalized for another domain
        """
        if normalized.domain != self.domain:
            raise ValueError(
                f"{type(self).__name__} cannot compile {normalized.domain.value} input"
            )

        values = self.schema.defaults()
        if not normalized.is_empty:
            self._populate(values, normalized.value)

        record = self.schema.build(
            values,
            data_json=json.dumps(normalized.to_jsonable(), separators=(",", ":")),
            last_updated=format_timestamp(self.clock()),
            flattener_version=self.version,
        )

        logger.debug(
            "flatten_completed",
            domain=self.domain.value,
            shape=normalized.shape.value,
            selection_count=_value_size(normalized),
        )
        return record

    def empty_record(self) -> FlattenedRecord:
        """The all-default record (what absent input flattens to)."""
        return self.compile(NormalizedInput(self.domain, InputShape.ABSENT, None))


def _value_size(normalized: NormalizedInput) -> int:
    if normalized.is_empty:
        return 0
    if isinstance(normalized.value, dict):
        return len(normalized.value)
    return 1
