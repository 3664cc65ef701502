"""
Translation writer: the dual-write half of the write flow.

Each locale is written to the bundle store and then upserted into the
index. Locales are independent of each other: one failing does not stop
the rest, and the failure is reported against that locale and store.
"""

from __future__ import annotations

import logging

from translatable.core.errors import StorageError
from translatable.core.models import AttributeWriteResult, LocaleFailure
from translatable.storage.base import StorageProvider

logger = logging.getLogger(__name__)


class TranslationWriter:
    """Writes decoded translations to both stores."""

    def __init__(self, storage: StorageProvider):
        self.storage = storage

    def write_locale(
        self,
        entity_type: str,
        identifier: str,
        attribute: str,
        locale: str,
        text: str,
    ) -> list[LocaleFailure]:
        """Write one locale to both stores. Returns the stores that failed."""
        failures: list[LocaleFailure] = []

        try:
            self.storage.bundles.write(entity_type, identifier, locale, attribute, text)
        except StorageError as e:
            logger.error(f"Bundle write failed for {entity_type}:{identifier} {locale}.{attribute}: {e}")
            failures.append(LocaleFailure(attribute=attribute, locale=locale, store="bundle", error=str(e)))

        # The index is still written when the bundle failed so the value stays readable
        try:
            self.storage.index.upsert(entity_type, identifier, locale, attribute, text)
        except StorageError as e:
            logger.error(f"Index upsert failed for {entity_type}:{identifier} {locale}.{attribute}: {e}")
            failures.append(LocaleFailure(attribute=attribute, locale=locale, store="index", error=str(e)))

        return failures

    def write_attribute(
        self,
        entity_type: str,
        identifier: str,
        attribute: str,
        translations: dict[str, str],
    ) -> AttributeWriteResult:
        """Write every locale of one attribute."""
        result = AttributeWriteResult(attribute=attribute, identifier=identifier)

        for locale, text in translations.items():
            failures = self.write_locale(entity_type, identifier, attribute, locale, text)
            if failures:
                result.failures.extend(failures)
            else:
                result.written.append(locale)

        logger.debug(
            f"Wrote {entity_type}:{identifier}.{attribute} "
            f"({len(result.written)} ok, {len(result.failed_locales)} failed)"
        )
        return result
