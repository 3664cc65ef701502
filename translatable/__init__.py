"""
Translatable - per-locale translations for entity attributes.

Translations are written to YAML bundles (one per entity, locale) and to a
searchable SQL index, and read back bundle-first with the index as backup.

Usage:
    from translatable import TranslationEngine, create_storage

    engine = TranslationEngine(create_storage())

    post.title = {"en": "Hello", "tr": "Merhaba"}
    engine.before_persist(post)          # post.title is now a reference
    save(post)                           # host assigns post.id
    engine.after_persist(post, was_newly_created=True)

    engine.get_attribute(post, "title", locale="tr")   # -> "Merhaba"
    engine.search.contains("Post", "title", "merh")    # -> {"42"}
"""

from translatable.core import (
    LocaleContext,
    TranslatableError,
    StorageError,
    PartialWriteError,
    ReconciliationError,
    WriteReport,
    ReconcileReport,
    decode_attribute,
)
from translatable.engine import (
    Translatable,
    TranslationEngine,
    get_engine,
    set_engine,
)
from translatable.storage import create_local_storage, create_storage

__all__ = [
    "Translatable",
    "TranslationEngine",
    "get_engine",
    "set_engine",
    "LocaleContext",
    "decode_attribute",
    "WriteReport",
    "ReconcileReport",
    "TranslatableError",
    "StorageError",
    "PartialWriteError",
    "ReconciliationError",
    "create_local_storage",
    "create_storage",
]
