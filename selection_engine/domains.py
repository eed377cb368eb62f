"""Customization domains known to the engine.

Each domain is one workout customization (focus areas, soreness, ...). A domain
has a kind that decides which input shapes the normalizer accepts, a record
prefix used for every flattened field name, and a fixed schema version that
consumers compare against cached records.
"""

from __future__ import annotations

from enum import Enum


class Domain(str, Enum):
    """Customization domains with a flattener."""

    FOCUS_AREA = "focus_area"
    SORENESS = "soreness"
    STRESS = "stress"
    DURATION = "duration"
    EQUIPMENT = "equipment"


class DomainKind(str, Enum):
    """Structural kind of a domain's selection data."""

    HIERARCHY = "hierarchy"  # 3-tier taxonomy, sparse map keyed by node id
    CATEGORY_RATING = "category_rating"  # 1-tier taxonomy with 1-5 ratings
    DURATION = "duration"  # structured session duration object
    EQUIPMENT = "equipment"  # structured location/context/equipment/weights object


DOMAIN_KINDS: dict[Domain, DomainKind] = {
    Domain.FOCUS_AREA: DomainKind.HIERARCHY,
    Domain.SORENESS: DomainKind.CATEGORY_RATING,
    Domain.STRESS: DomainKind.CATEGORY_RATING,
    Domain.DURATION: DomainKind.DURATION,
    Domain.EQUIPMENT: DomainKind.EQUIPMENT,
}

RECORD_PREFIXES: dict[Domain, str] = {
    Domain.FOCUS_AREA: "focus",
    Domain.SORENESS: "soreness",
    Domain.STRESS: "stress",
    Domain.DURATION: "duration",
    Domain.EQUIPMENT: "equipment",
}

FLATTENER_VERSIONS: dict[Domain, str] = {
    Domain.FOCUS_AREA: "1.0.0",
    Domain.SORENESS: "1.0.0",
    Domain.STRESS: "1.0.0",
    Domain.DURATION: "1.0.0",
    Domain.EQUIPMENT: "2.0.0",
}

# Per-workout option keys that carry each domain's raw selection data
CUSTOMIZATION_KEYS: dict[Domain, str] = {
    Domain.FOCUS_AREA: "customization_areas",
    Domain.SORENESS: "customization_soreness",
    Domain.STRESS: "customization_stress",
    Domain.DURATION: "customization_duration",
    Domain.EQUIPMENT: "customization_equipment",
}

TAXONOMY_DOMAINS = frozenset({Domain.FOCUS_AREA, Domain.SORENESS, Domain.STRESS})


def coerce_domain(domain: Domain | str) -> Domain:
    """Resolve a domain name or enum member to a Domain.

    Raises:
        ValueError: If the name is not a known domain
    """
    if isinstance(domain, Domain):
        return domain
    return Domain(str(domain))
