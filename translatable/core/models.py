"""
Data models for the translation engine.

These are the values that cross component boundaries: index rows handed
back to callers, and the reports produced by writes and reconciliation.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from translatable.core.utils import utc_now


# =============================================================================
# Index Records
# =============================================================================


class TranslationRecord(BaseModel):
    """One translation index row: the current value of a key in a locale."""

    translatable_type: str
    translatable_id: str
    locale: str
    key: str
    value: str | None = None

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def unique_key(self) -> tuple[str, str, str, str]:
        return (self.translatable_type, self.translatable_id, self.locale, self.key)


# =============================================================================
# Write Reports
# =============================================================================


class LocaleFailure(BaseModel):
    """A single locale that could not be persisted."""

    attribute: str
    locale: str
    store: str  # "bundle" or "index"
    error: str


class AttributeWriteResult(BaseModel):
    """Outcome of writing all locales of one attribute."""

    attribute: str
    identifier: str
    written: list[str] = Field(default_factory=list)
    failures: list[LocaleFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_locales(self) -> list[str]:
        return sorted({f.locale for f in self.failures})


class WriteReport(BaseModel):
    """
    Outcome of a ``before_persist`` call.

    Attributes that were not translatable are listed in ``skipped``; they
    were left untouched on the entity.
    """

    entity_type: str
    identifier: str
    provisional: bool = False
    attributes: list[AttributeWriteResult] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(a.ok for a in self.attributes)

    @property
    def failures(self) -> list[LocaleFailure]:
        return [f for a in self.attributes for f in a.failures]

    def get(self, attribute: str) -> AttributeWriteResult | None:
        for result in self.attributes:
            if result.attribute == attribute:
                return result
        return None


# =============================================================================
# Reconciliation Reports
# =============================================================================


class ReconcileReport(BaseModel):
    """
    Outcome of moving an entity's translations to a new identifier.

    ``renamed`` and ``missing`` list bundle locales; ``failed`` maps a
    locale (or ``"index"``) to the error that stopped it.
    """

    entity_type: str
    old_identifier: str
    new_identifier: str
    renamed: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    rows_updated: int = 0
    failed: dict[str, str] = Field(default_factory=dict)
    conflicts: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def is_noop(self) -> bool:
        return self.ok and not self.renamed and self.rows_updated == 0

    def merged_with(self, earlier: ReconcileReport) -> ReconcileReport:
        """
        Combine with the report of an earlier attempt of the same move.

        Work done by either attempt counts as done; failures and conflicts
        are the ones of this (later) attempt.
        """
        renamed = earlier.renamed + [loc for loc in self.renamed if loc not in earlier.renamed]
        return self.model_copy(
            update={
                "renamed": renamed,
                "missing": [loc for loc in self.missing if loc not in renamed],
                "rows_updated": earlier.rows_updated + self.rows_updated,
            }
        )
