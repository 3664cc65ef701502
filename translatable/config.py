"""
Translatable configuration.

Loads settings from environment variables (prefixed ``TRANSLATABLE_``)
with sensible defaults for local development.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"

    # ==========================================================================
    # Bundle Store (files)
    # ==========================================================================

    bundle_path: str = "./lang"
    bundle_extension: str = "yaml"

    # What to do when a rename would land on an existing bundle
    rename_conflict: Literal["reject", "overwrite"] = "reject"

    # ==========================================================================
    # Translation Index (database)
    # ==========================================================================

    # Empty means the in-memory index (development only)
    database_url: str = ""
    sql_echo: bool = False

    search_case_sensitive: bool = False

    # ==========================================================================
    # Locales
    # ==========================================================================

    default_locale: str = "en"
    fallback_locale: str = "en"
    max_locale_length: int = 5  # width of the index locale column

    # ==========================================================================
    # Reconciliation
    # ==========================================================================

    reconcile_attempts: int = 3

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def use_database(self) -> bool:
        """Whether the SQL translation index should be used."""
        return bool(self.database_url)

    class Config:
        env_prefix = "TRANSLATABLE_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
