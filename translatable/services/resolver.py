"""
Translation resolver: the read path.

Lookup order for one locale:
1. Bundle store (primary, the fast path)
2. Translation index (durable backup when the bundle is missing or unreadable)
3. Nothing: None, and the caller decides what to show

``resolve_with_fallback`` repeats that for the context's fallback locale.
"""

from __future__ import annotations

import logging

from translatable.core.errors import StorageError
from translatable.core.locale import LocaleContext, normalize_locale
from translatable.storage.base import StorageProvider

logger = logging.getLogger(__name__)


class TranslationResolver:
    """Resolves attribute values for an entity."""

    def __init__(self, storage: StorageProvider, context: LocaleContext | None = None):
        self.storage = storage
        self.context = context or LocaleContext.from_settings()

    def _locale(self, locale: str | None, context: LocaleContext | None) -> str:
        if locale:
            return normalize_locale(locale)
        return (context or self.context).active

    def resolve(
        self,
        entity_type: str,
        identifier: str,
        key: str,
        locale: str | None = None,
        context: LocaleContext | None = None,
    ) -> str | None:
        """Value of ``key`` in one locale, or None."""
        locale = self._locale(locale, context)
        identifier = str(identifier)

        try:
            value = self.storage.bundles.read(entity_type, identifier, locale, key)
        except StorageError as e:
            logger.warning(f"Bundle read failed for {entity_type}:{identifier} {locale}, using index: {e}")
            value = None
        if value is not None:
            return value

        value = self.storage.index.get(entity_type, identifier, locale, key)
        if value is not None:
            logger.debug(f"Resolved {entity_type}:{identifier} {locale}.{key} from index")
        return value

    def resolve_with_fallback(
        self,
        entity_type: str,
        identifier: str,
        key: str,
        locale: str | None = None,
        context: LocaleContext | None = None,
    ) -> str | None:
        """Like ``resolve``, then the fallback locale if that found nothing."""
        context = context or self.context
        for candidate in context.candidates(locale):
            value = self.resolve(entity_type, identifier, key, candidate, context)
            if value is not None:
                return value
        return None

    def translations(
        self,
        entity_type: str,
        identifier: str,
        key: str,
        locales: list[str],
    ) -> dict[str, str]:
        """Values of ``key`` in each of ``locales`` that has one."""
        found: dict[str, str] = {}
        for locale in locales:
            value = self.resolve(entity_type, identifier, key, locale)
            if value is not None:
                found[normalize_locale(locale)] = value
        return found
