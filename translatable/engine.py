"""
Translation engine - the host integration surface.

The host framework calls three things:

    engine = TranslationEngine(create_storage())

    report = engine.before_persist(post)     # before the entity's row is written
    ...host stores post, assigns post.id...
    engine.after_persist(post, was_newly_created=True)

    engine.get_attribute(post, "title", locale="tr")

Entities are plain objects. Their translatable attributes are listed in a
``translatable`` class attribute; the entity type is the class name unless
the entity sets ``translatable_type``.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from translatable.config import Settings, get_settings
from translatable.core.decoder import NOT_TRANSLATABLE, decode_attribute
from translatable.core.errors import PartialWriteError, ReconciliationError
from translatable.core.locale import LocaleContext
from translatable.core.models import ReconcileReport, WriteReport
from translatable.integrations.sentry import capture_exception
from translatable.services.identity import IdentityResolver
from translatable.services.resolver import TranslationResolver
from translatable.services.search import TranslationSearch
from translatable.services.writer import TranslationWriter
from translatable.storage import create_storage
from translatable.storage.base import StorageProvider

logger = logging.getLogger(__name__)


def _is_retriable(error: BaseException) -> bool:
    return isinstance(error, ReconciliationError) and error.retriable


def entity_type_of(entity: Any) -> str:
    return getattr(entity, "translatable_type", None) or type(entity).__name__


def translatable_attributes(entity: Any) -> list[str]:
    return list(getattr(entity, "translatable", None) or [])


class TranslationEngine:
    """Wires decoder, stores and services behind the host hooks."""

    def __init__(
        self,
        storage: StorageProvider | None = None,
        context: LocaleContext | None = None,
        settings: Settings | None = None,
        id_attribute: str = "id",
    ):
        self.settings = settings or get_settings()
        self.storage = storage or create_storage(self.settings)
        self.context = context or LocaleContext(
            active=self.settings.default_locale,
            fallback=self.settings.fallback_locale,
        )

        self.identity = IdentityResolver(self.storage, id_attribute=id_attribute)
        self.writer = TranslationWriter(self.storage)
        self.resolver = TranslationResolver(self.storage, self.context)
        self.search = TranslationSearch(self.storage.index)

    # =========================================================================
    # Host hooks
    # =========================================================================

    def before_persist(self, entity: Any) -> WriteReport:
        """
        Write the entity's translatable attributes to both stores.

        Each attribute that decodes to a locale map is written locale by
        locale; once all its locales are stored, the attribute is replaced
        with the entity's reference identifier.

        Raises:
            ValueError: the entity's translations cannot be stored under its
                identifier or attribute names. Raised before anything is written.
            PartialWriteError: some locales failed. Attributes with failures
                keep their raw value; the rest were written and replaced.
        """
        entity_type = entity_type_of(entity)
        identifier = self.identity.resolve_write_identifier(entity)
        report = WriteReport(
            entity_type=entity_type,
            identifier=identifier,
            provisional=self.identity.final_identifier(entity) is None,
        )

        pending: list[tuple[str, dict[str, str]]] = []
        for attribute in translatable_attributes(entity):
            translations = decode_attribute(
                getattr(entity, attribute, None),
                self.settings.max_locale_length,
            )
            if translations is NOT_TRANSLATABLE:
                report.skipped.append(attribute)
                continue
            self.storage.bundles.check_address(entity_type, identifier, attribute)
            pending.append((attribute, translations))

        for attribute, translations in pending:
            result = self.writer.write_attribute(entity_type, identifier, attribute, translations)
            report.attributes.append(result)
            if result.ok:
                setattr(entity, attribute, identifier)

        if not report.ok:
            raise PartialWriteError(report)
        return report

    def after_persist(self, entity: Any, was_newly_created: bool = True) -> ReconcileReport | None:
        """
        Move translations from the provisional to the final identifier.

        Does nothing unless the entity was newly created and was written
        under a provisional identifier that differs from its final key.

        Raises:
            ReconciliationError: after retries; the provisional identifier
                stays on the entity so the call can be repeated.
        """
        provisional = self.identity.provisional_identifier(entity)
        final = self.identity.final_identifier(entity)
        if not was_newly_created or provisional is None or final is None:
            return None

        if provisional == final:
            self.identity.release(entity)
            return None

        report = self.reconcile(entity_type_of(entity), provisional, final)

        for attribute in translatable_attributes(entity):
            if getattr(entity, attribute, None) == provisional:
                setattr(entity, attribute, final)
        self.identity.release(entity)
        return report

    def get_attribute(self, entity: Any, key: str, locale: str | None = None) -> Any:
        """
        Read an attribute, translated when possible.

        Falls back to the fallback locale, then to the raw stored value.
        """
        raw = getattr(entity, key, None)
        if key not in translatable_attributes(entity):
            return raw

        identifier = self.identity.final_identifier(entity) or self.identity.provisional_identifier(entity)
        if identifier is None:
            return raw

        value = self.resolver.resolve_with_fallback(entity_type_of(entity), identifier, key, locale)
        return raw if value is None else value

    # =========================================================================
    # Direct operations
    # =========================================================================

    def reconcile(self, entity_type: str, old_identifier: str, new_identifier: str) -> ReconcileReport:
        """
        Reconcile, retrying failures that are not conflicts.

        The returned (or raised) report covers all attempts.
        """
        previous: ReconcileReport | None = None
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(max(1, self.settings.reconcile_attempts)),
                wait=wait_exponential(multiplier=0.1, max=2),
                retry=retry_if_exception(_is_retriable),
                reraise=True,
            ):
                with attempt:
                    try:
                        return self.identity.reconcile(
                            entity_type, old_identifier, new_identifier, previous=previous
                        )
                    except ReconciliationError as e:
                        previous = e.report
                        raise
        except ReconciliationError as e:
            capture_exception(e, **e.report.model_dump())
            raise

    def resolve(
        self,
        entity_type: str,
        identifier: str,
        key: str,
        locale: str | None = None,
    ) -> str | None:
        return self.resolver.resolve(entity_type, identifier, key, locale)


# =============================================================================
# Module-level engine
# =============================================================================


_engine: TranslationEngine | None = None


def get_engine() -> TranslationEngine:
    """Get or create the global engine instance."""
    global _engine
    if _engine is None:
        _engine = TranslationEngine()
    return _engine


def set_engine(engine: TranslationEngine | None) -> None:
    """Install (or with None, drop) the global engine."""
    global _engine
    _engine = engine


class Translatable:
    """
    Mixin for host entities.

    Declares the translatable attributes and gives entities a
    ``get_translation`` accessor backed by the global engine.

        class Post(Translatable):
            translatable = ["title", "body"]
    """

    translatable: ClassVar[list[str]] = []

    def get_translation(self, key: str, locale: str | None = None) -> Any:
        return get_engine().get_attribute(self, key, locale)
