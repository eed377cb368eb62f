"""Domain -> flattener lookup and module-level convenience functions."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from selection_engine.core.logging import log_context
from selection_engine.domains import CUSTOMIZATION_KEYS, Domain, coerce_domain
from selection_engine.flattening.base import BaseFlattener
from selection_engine.flattening.duration import DurationFlattener
from selection_engine.flattening.equipment import EquipmentFlattener
from selection_engine.flattening.focus_area import FocusAreaFlattener
from selection_engine.flattening.record import FlattenedRecord
from selection_engine.flattening.soreness import SorenessFlattener
from selection_engine.flattening.stress import StressFlattener
from selection_engine.normalization.normalizer import NormalizedInput

FLATTENER_CLASSES: dict[Domain, type[BaseFlattener]] = {
    Domain.FOCUS_AREA: FocusAreaFlattener,
    Domain.SORENESS: SorenessFlattener,
    Domain.STRESS: StressFlattener,
    Domain.DURATION: DurationFlattener,
    Domain.EQUIPMENT: EquipmentFlattener,
}


def get_flattener(domain: Domain | str) -> BaseFlattener:
    """Shared flattener for a domain, built with the packaged catalog and settings.

    Raises:
        ValueError: If the domain is unknown
    """
    return _cached_flattener(coerce_domain(domain))


@lru_cache
def _cached_flattener(domain: Domain) -> BaseFlattener:
    return FLATTENER_CLASSES[domain]()


def clear_flattener_cache() -> None:
    _cached_flattener.cache_clear()


def normalize(domain: Domain | str, raw: Any) -> NormalizedInput:
    return get_flattener(domain).normalize(raw)


def flatten(domain: Domain | str, raw: Any) -> FlattenedRecord:
    """Normalize and flatten one domain's raw customization data."""
    return get_flattener(domain).flatten(raw)


def summarize(domain: Domain | str, record: FlattenedRecord) -> str:
    return get_flattener(domain).summarize(record)


def flatten_customizations(options: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten every domain of a workout options payload into one flat dict.

    Each domain reads its raw data from its customization key (e.g.
    ``customization_soreness``); a missing key flattens to the all-default
    record, so the result always carries every field of every domain.
    """
    flat: dict[str, Any] = {}
    for domain, key in CUSTOMIZATION_KEYS.items():
        with log_context(customization_key=key):
            flat.update(flatten(domain, options.get(key)).to_dict())
    return flat
