"""Format normalizer: every accepted wire shape -> one canonical value per domain.

Dispatch goes through an explicit ``(domain kind, input shape) -> handler``
table. Anything not in the table (a string for focus areas, a number for
soreness, ...) normalizes to empty instead of raising, so the flattener always
receives a well-typed value.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from selection_engine.core.logging import get_logger
from selection_engine.domains import (
    DOMAIN_KINDS,
    TAXONOMY_DOMAINS,
    Domain,
    DomainKind,
    coerce_domain,
)
from selection_engine.normalization.models import DurationConfiguration, EquipmentSelection
from selection_engine.normalization.shapes import InputShape, detect_shape
from selection_engine.selection.models import Selection, SelectionEntry, selection_to_wire
from selection_engine.taxonomy.catalog import TaxonomyCatalog
from selection_engine.taxonomy.loader import get_catalog

logger = get_logger(__name__)

UNKNOWN_LEVEL = "unknown"

# Legacy equipment strings are free text; the first matching keyword wins per
# canonical id. Matching is by substring on the lowercased item.
LEGACY_EQUIPMENT_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("dumbbell",), "dumbbells"),
    (("barbell",), "barbells"),
    (("kettlebell",), "kettlebells"),
    (("treadmill",), "treadmill"),
    (("elliptical",), "elliptical"),
    (("bike",), "stationary_bike"),
    (("mat",), "yoga_mat"),
    (("pull_up", "pullup"), "pull_up_bar"),
)

LEGACY_EQUIPMENT_CONTEXTS: tuple[tuple[str, frozenset[str]], ...] = (
    ("Free Weights", frozenset({"dumbbells", "barbells", "kettlebells"})),
    ("Basic Cardio", frozenset({"treadmill", "elliptical", "stationary_bike"})),
    ("Bodyweight", frozenset({"yoga_mat", "pull_up_bar"})),
)

NormalizedValue = Selection | DurationConfiguration | EquipmentSelection | None


@dataclass(frozen=True)
class NormalizedInput:
    """Canonical input for one domain's flattener.

    Attributes:
        domain: Domain the value belongs to
        shape: Wire shape the value was normalized from
        value: Selection map, structured model, or None when empty
        source: Accepted hierarchical entries exactly as received, kept for
            the backup region
    """

    domain: Domain
    shape: InputShape
    value: NormalizedValue
    source: dict[str, Any] | None = field(default=None, compare=False)

    @property
    def is_empty(self) -> bool:
        if self.value is None:
            return True
        if isinstance(self.value, dict):
            return not self.value
        return False

    def to_jsonable(self) -> Any:
        """JSON-compatible form, as embedded in the record's backup region."""
        if self.is_empty:
            return None
        if self.source is not None:
            return self.source
        if isinstance(self.value, dict):
            return selection_to_wire(self.value)
        return self.value.model_dump(mode="json", by_alias=True, exclude_none=True)


Handler = Callable[[Any], NormalizedValue]


def _wire_entry(entry: Any) -> dict[str, Any]:
    if isinstance(entry, SelectionEntry):
        return entry.to_wire()
    return dict(entry)


class FormatNormalizer:
    """Normalize raw customization data for one domain.

    Args:
        domain: Domain to normalize for
        catalog: Taxonomy used to enrich legacy focus-area lists. Defaults to
            the packaged catalog for taxonomy domains.
    """

    def __init__(self, domain: Domain | str, catalog: TaxonomyCatalog | None = None) -> None:
        self.domain = coerce_domain(domain)
        self.kind = DOMAIN_KINDS[self.domain]
        if catalog is None and self.domain in TAXONOMY_DOMAINS:
            catalog = get_catalog(self.domain)
        self.catalog = catalog

        handlers: dict[tuple[DomainKind, InputShape], Handler] = {
            (DomainKind.HIERARCHY, InputShape.HIERARCHICAL): self._selection_map,
            (DomainKind.HIERARCHY, InputShape.LEGACY_LIST): self._legacy_node_list,
            (DomainKind.CATEGORY_RATING, InputShape.HIERARCHICAL): self._selection_map,
            (DomainKind.DURATION, InputShape.STRUCTURED): self._duration,
            (DomainKind.DURATION, InputShape.LEGACY_SCALAR): self._legacy_duration,
            (DomainKind.EQUIPMENT, InputShape.STRUCTURED): self._equipment,
            (DomainKind.EQUIPMENT, InputShape.LEGACY_LIST): self._legacy_equipment,
        }
        self._handlers = {
            shape: handler for (kind, shape), handler in handlers.items() if kind == self.kind
        }

    @property
    def accepted_shapes(self) -> frozenset[InputShape]:
        return frozenset({InputShape.ABSENT, *self._handlers})

    def normalize(self, raw: Any) -> NormalizedInput:
        if isinstance(raw, NormalizedInput):
            return raw

        shape = detect_shape(raw)
        handler = self._handlers.get(shape)
        if handler is None:
            if shape is not InputShape.ABSENT:
                logger.debug(
                    "input_shape_rejected",
                    domain=self.domain.value,
                    shape=shape.value,
                    type=type(raw).__name__,
                )
            return NormalizedInput(self.domain, shape, self._empty())

        value = handler(raw)
        source = None
        if shape is InputShape.HIERARCHICAL and value:
            source = {key: _wire_entry(raw[key]) for key in value}
        return NormalizedInput(self.domain, shape, value, source)

    def _empty(self) -> NormalizedValue:
        if self.kind in (DomainKind.HIERARCHY, DomainKind.CATEGORY_RATING):
            return {}
        return None

    # ------------------------------------------------------------------
    # Selection maps
    # ------------------------------------------------------------------

    def _selection_map(self, raw: Mapping[Any, Any]) -> Selection:
        selection: Selection = {}
        skipped: list[str] = []
        for key, value in raw.items():
            if not isinstance(key, str):
                skipped.append(repr(key))
                continue
            if isinstance(value, SelectionEntry):
                selection[key] = value
                continue
            if not isinstance(value, Mapping):
                skipped.append(key)
                continue
            try:
                selection[key] = SelectionEntry.model_validate(dict(value))
            except ValidationError:
                skipped.append(key)

        if skipped:
            logger.warning(
                "malformed_entries_skipped",
                domain=self.domain.value,
                keys=skipped,
            )
        return selection

    def _legacy_node_list(self, raw: list[str]) -> Selection:
        selection: Selection = {}
        for node_id in raw:
            if node_id in selection:
                continue
            node = self.catalog.get_node(node_id) if self.catalog else None
            if node is None:
                selection[node_id] = SelectionEntry(label=node_id, level=UNKNOWN_LEVEL)
                continue
            selection[node_id] = SelectionEntry(
                label=node.label,
                level=node.level.value,
                parent_key=node.parent_id,
                children=node.child_ids or None,
            )
        return selection

    # ------------------------------------------------------------------
    # Duration
    # ------------------------------------------------------------------

    def _duration(self, raw: Any) -> DurationConfiguration | None:
        if isinstance(raw, DurationConfiguration):
            return raw
        try:
            return DurationConfiguration.model_validate(dict(raw))
        except ValidationError as e:
            logger.warning(
                "malformed_input_dropped",
                domain=self.domain.value,
                errors=e.error_count(),
            )
            return None

    def _legacy_duration(self, raw: int | float) -> DurationConfiguration | None:
        # 0 carries no information; negatives and NaN/inf are not durations
        if isinstance(raw, float) and not math.isfinite(raw):
            return None
        if raw <= 0:
            return None
        return DurationConfiguration.from_total(raw)

    # ------------------------------------------------------------------
    # Equipment
    # ------------------------------------------------------------------

    def _equipment(self, raw: Any) -> EquipmentSelection | None:
        if isinstance(raw, EquipmentSelection):
            selection = raw
        else:
            try:
                selection = EquipmentSelection.model_validate(dict(raw))
            except ValidationError as e:
                logger.warning(
                    "malformed_input_dropped",
                    domain=self.domain.value,
                    errors=e.error_count(),
                )
                return None
        return None if selection.is_empty else selection

    def _legacy_equipment(self, raw: list[str]) -> EquipmentSelection | None:
        matched: list[str] = []
        for item in raw:
            lowered = item.lower()
            for keywords, equipment_id in LEGACY_EQUIPMENT_KEYWORDS:
                if equipment_id not in matched and any(k in lowered for k in keywords):
                    matched.append(equipment_id)
        if not matched:
            return None

        contexts = tuple(
            context
            for context, members in LEGACY_EQUIPMENT_CONTEXTS
            if members.intersection(matched)
        )
        return EquipmentSelection(contexts=contexts, specific_equipment=tuple(matched))
