"""
Search over the translation index.

All queries are scoped to one entity type and attribute key and return a
set of entity identifiers. Substring matching ignores case unless asked not
to (or configured with ``TRANSLATABLE_SEARCH_CASE_SENSITIVE``).
"""

from __future__ import annotations

from collections.abc import Iterable

from translatable.core.locale import normalize_locale
from translatable.storage.base import TranslationIndex


def _locales(locales: Iterable[str] | None) -> list[str] | None:
    return None if locales is None else [normalize_locale(code) for code in locales]


class TranslationSearch:
    """Read-only lookups of entities by translated value."""

    def __init__(self, index: TranslationIndex):
        self.index = index

    def exact(
        self,
        entity_type: str,
        key: str,
        value: str,
        locales: Iterable[str] | None = None,
    ) -> set[str]:
        """Entities whose ``key`` equals ``value``."""
        return self.index.find_by(entity_type, key, value=value, locales=_locales(locales))

    def any_of(
        self,
        entity_type: str,
        key: str,
        values: Iterable[str],
        locales: Iterable[str] | None = None,
    ) -> set[str]:
        """Entities whose ``key`` is one of ``values``."""
        return self.index.find_by(entity_type, key, values=list(values), locales=_locales(locales))

    def contains(
        self,
        entity_type: str,
        key: str,
        needle: str,
        locales: Iterable[str] | None = None,
        case_sensitive: bool | None = None,
    ) -> set[str]:
        """Entities whose ``key`` contains ``needle``."""
        return self.index.find_by(
            entity_type,
            key,
            contains=needle,
            locales=_locales(locales),
            case_sensitive=case_sensitive,
        )
