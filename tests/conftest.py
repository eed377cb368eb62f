"""Shared fixtures for the selection engine test suite.

Provides:
- A fixed clock so ``last_updated`` is deterministic
- The packaged focus area, soreness and stress catalogs
- A small synthetic 3-tier catalog for cascade tests
"""
import pytest

from selection_engine.config import Settings, get_settings
from selection_engine.domains import Domain
from selection_engine.flattening.registry import clear_flattener_cache
from selection_engine.taxonomy import NodeLevel, TaxonomyCatalog, TaxonomyNode, get_catalog
from tests.helpers import FIXED_NOW


@pytest.fixture(autouse=True)
def _fresh_caches():
    """Drop cached settings and flatteners between tests."""
    get_settings.cache_clear()
    clear_flattener_cache()
    yield
    get_settings.cache_clear()
    clear_flattener_cache()


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def focus_catalog():
    return get_catalog(Domain.FOCUS_AREA)


@pytest.fixture
def soreness_catalog():
    return get_catalog(Domain.SORENESS)


@pytest.fixture
def stress_catalog():
    return get_catalog(Domain.STRESS)


@pytest.fixture
def synthetic_catalog():
    """P -> (S1 -> (T1, T2), S2) and a second root Q."""
    nodes = [
        TaxonomyNode("P", "Primary", NodeLevel.PRIMARY, child_ids=("S1", "S2")),
        TaxonomyNode("S1", "Secondary 1", NodeLevel.SECONDARY, parent_id="P", child_ids=("T1", "T2")),
        TaxonomyNode("T1", "Tertiary 1", NodeLevel.TERTIARY, parent_id="S1"),
        TaxonomyNode("T2", "Tertiary 2", NodeLevel.TERTIARY, parent_id="S1"),
        TaxonomyNode("S2", "Secondary 2", NodeLevel.SECONDARY, parent_id="P"),
        TaxonomyNode("Q", "Other Primary", NodeLevel.PRIMARY),
    ]
    return TaxonomyCatalog.from_nodes("synthetic", nodes)
