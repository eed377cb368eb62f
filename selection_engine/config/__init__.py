"""Engine configuration module.

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - Logging level and renderer, taxonomy data directory
  - Strictness of the taxonomy-to-flag mapping check
  - Loaded from .env file via pydantic-settings

Taxonomy tables themselves are YAML data files under
``selection_engine/taxonomy/data`` and are loaded by the taxonomy loader.
"""
from selection_engine.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
