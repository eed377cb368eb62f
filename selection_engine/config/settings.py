"""Engine configuration settings."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Application
    app_name: str = "Selection Flattening Engine"
    debug: bool = False

    # Logging
    log_json: bool = True  # JSONRenderer when true, ConsoleRenderer otherwise

    # Taxonomy data (empty = YAML files shipped inside the package)
    taxonomy_dir: str = ""

    # Flattening
    strict_flag_mappings: bool = True  # Fail at construction if a taxonomy node has no flag mapping
    log_unmapped_keys: bool = True  # Emit a debug event listing keys dropped during flattening

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
