"""
Identity resolver.

New entities have no key when their translations are written, so they get
a provisional identifier. Once the host has stored the entity and knows its
final key, ``reconcile`` moves bundles and index rows over.

The two stores cannot be updated in one transaction. Instead every step is
skip-if-done: a bundle that is already renamed has no source left, and index
rows already moved no longer match the old identifier. Re-running a failed
reconciliation with the same arguments therefore finishes the job without
duplicating anything.
"""

from __future__ import annotations

import logging
from typing import Any

from translatable.core.errors import (
    BundleConflictError,
    IndexConflictError,
    ReconciliationError,
    StorageError,
)
from translatable.core.models import ReconcileReport
from translatable.core.utils import generate_provisional_id
from translatable.storage.base import StorageProvider

logger = logging.getLogger(__name__)

# Where the provisional identifier is kept on the entity between hooks
PROVISIONAL_ATTR = "__translatable_provisional_id__"


class IdentityResolver:
    """Assigns write identifiers and reconciles provisional ones."""

    def __init__(self, storage: StorageProvider, id_attribute: str = "id"):
        self.storage = storage
        self.id_attribute = id_attribute

    # =========================================================================
    # Write identifiers
    # =========================================================================

    def final_identifier(self, entity: Any) -> str | None:
        """The host's key for the entity, or None if it has none yet."""
        value = getattr(entity, self.id_attribute, None)
        return None if value is None else str(value)

    def provisional_identifier(self, entity: Any) -> str | None:
        return getattr(entity, PROVISIONAL_ATTR, None)

    def resolve_write_identifier(self, entity: Any) -> str:
        """
        Identifier to write an entity's translations under.

        Persisted entities use their final key. Others get a provisional
        identifier, generated once and reused for every write until the
        entity is reconciled.
        """
        final = self.final_identifier(entity)
        if final is not None:
            return final

        provisional = self.provisional_identifier(entity)
        if provisional is None:
            provisional = generate_provisional_id()
            setattr(entity, PROVISIONAL_ATTR, provisional)
            logger.debug(f"Assigned provisional id {provisional} to {type(entity).__name__}")
        return provisional

    def release(self, entity: Any) -> None:
        """Forget the entity's provisional identifier."""
        if hasattr(entity, PROVISIONAL_ATTR):
            delattr(entity, PROVISIONAL_ATTR)

    # =========================================================================
    # Reconciliation
    # =========================================================================

    def reconcile(
        self,
        entity_type: str,
        old_identifier: str,
        new_identifier: str,
        previous: ReconcileReport | None = None,
    ) -> ReconcileReport:
        """
        Move every bundle and index row of an entity to a new identifier.

        Each locale and the index are attempted independently. Anything that
        fails is recorded in the report and raised as ``ReconciliationError``
        once everything else has been tried.

        When re-running after a failed attempt, pass that attempt's report
        as ``previous`` so the result also counts what it already moved.
        """
        old_identifier, new_identifier = str(old_identifier), str(new_identifier)
        report = ReconcileReport(
            entity_type=entity_type,
            old_identifier=old_identifier,
            new_identifier=new_identifier,
        )
        if old_identifier == new_identifier:
            return report

        bundles = self.storage.bundles
        try:
            locales = bundles.locales(entity_type)
        except StorageError as e:
            report.failed["bundles"] = str(e)
            locales = []

        for locale in locales:
            try:
                if bundles.rename(entity_type, old_identifier, new_identifier, locale):
                    report.renamed.append(locale)
                else:
                    report.missing.append(locale)
            except BundleConflictError as e:
                report.failed[locale] = str(e)
                report.conflicts.append(locale)
            except StorageError as e:
                report.failed[locale] = str(e)

        try:
            report.rows_updated = self.storage.index.update_identifier(
                entity_type, old_identifier, new_identifier
            )
        except IndexConflictError as e:
            report.failed["index"] = str(e)
            report.conflicts.append("index")
        except StorageError as e:
            report.failed["index"] = str(e)

        if previous is not None:
            report = report.merged_with(previous)

        if not report.ok:
            logger.error(
                f"Reconciliation {entity_type} {old_identifier} -> {new_identifier} "
                f"incomplete: {report.failed}"
            )
            raise ReconciliationError(report)

        if report.is_noop:
            logger.debug(f"Reconciliation {entity_type} {old_identifier} -> {new_identifier}: nothing to move")
        else:
            logger.info(
                f"Reconciled {entity_type} {old_identifier} -> {new_identifier}: "
                f"{len(report.renamed)} bundle(s), {report.rows_updated} row(s)"
            )
        return report
