"""
Storage for translations.

- BundleStore → YAML documents on the local filesystem
- TranslationIndex → SQL table (SQLAlchemy) or in-memory for development
"""

from __future__ import annotations

from translatable.config import Settings, get_settings
from translatable.storage.base import (
    BundleStore,
    TranslationIndex,
    StorageProvider,
)
from translatable.storage.local import LocalBundleStore, InMemoryTranslationIndex
from translatable.storage.session import create_index_engine
from translatable.storage.sql import SqlTranslationIndex
from translatable.storage.tables import TranslationTable, create_schema


def create_local_storage(bundle_path: str | None = None) -> StorageProvider:
    """Create a StorageProvider with file bundles and an in-memory index."""
    return StorageProvider(
        bundles=LocalBundleStore(bundle_path),
        index=InMemoryTranslationIndex(),
    )


def create_storage(settings: Settings | None = None) -> StorageProvider:
    """
    Create a StorageProvider from settings.

    Uses the SQL index when ``database_url`` is set, creating its table if
    needed; otherwise falls back to the in-memory index.
    """
    settings = settings or get_settings()

    bundles = LocalBundleStore(
        settings.bundle_path,
        extension=settings.bundle_extension,
        rename_conflict=settings.rename_conflict,
    )
    if not settings.use_database:
        return StorageProvider(
            bundles=bundles,
            index=InMemoryTranslationIndex(settings.search_case_sensitive),
        )

    engine = create_index_engine(settings.database_url, echo=settings.sql_echo)
    create_schema(engine)
    return StorageProvider(
        bundles=bundles,
        index=SqlTranslationIndex(engine, settings.search_case_sensitive),
    )


__all__ = [
    "BundleStore",
    "TranslationIndex",
    "StorageProvider",
    "LocalBundleStore",
    "InMemoryTranslationIndex",
    "SqlTranslationIndex",
    "TranslationTable",
    "create_index_engine",
    "create_schema",
    "create_local_storage",
    "create_storage",
]
