"""
Exceptions raised by the translation engine.

Decode failures and missing translations are not errors and never raise.
Storage problems are surfaced; multi-locale operations report failures per
locale through the report they carry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from translatable.core.models import ReconcileReport, WriteReport


class TranslatableError(Exception):
    """Base class for all engine errors."""
    pass


# =============================================================================
# Storage
# =============================================================================


class StorageError(TranslatableError):
    """A bundle directory or the index table could not be used."""
    pass


class BundleCorruptError(StorageError):
    """An existing bundle document could not be parsed."""
    pass


class BundleConflictError(StorageError):
    """A rename would replace an existing bundle document."""
    pass


class IndexConflictError(StorageError):
    """An identifier update would collide with existing index rows."""
    pass


# =============================================================================
# Operations
# =============================================================================


class PartialWriteError(TranslatableError):
    """Some locales of a write failed; ``report`` says which."""

    def __init__(self, report: WriteReport):
        self.report = report
        failed = ", ".join(f"{f.attribute}[{f.locale}]" for f in report.failures)
        super().__init__(
            f"Failed to persist translations for {report.entity_type} "
            f"{report.identifier}: {failed}"
        )


class ReconciliationError(TranslatableError):
    """Reconciliation left at least one store on the old identifier."""

    def __init__(self, report: ReconcileReport):
        self.report = report
        super().__init__(
            f"Reconciliation of {report.entity_type} {report.old_identifier} -> "
            f"{report.new_identifier} incomplete: {report.failed}"
        )

    @property
    def retriable(self) -> bool:
        """Conflicts need a decision; anything else can just be re-run."""
        return not self.report.conflicts
