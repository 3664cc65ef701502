"""
Core module - data models and pure helpers.

This module contains:
- models: index records and write/reconcile reports
- errors: the exception hierarchy
- decoder: raw attribute value -> locale map
- locale: locale codes and LocaleContext
- utils: shared utility functions
"""

from translatable.core.models import (
    TranslationRecord,
    LocaleFailure,
    AttributeWriteResult,
    WriteReport,
    ReconcileReport,
)

from translatable.core.errors import (
    TranslatableError,
    StorageError,
    BundleCorruptError,
    BundleConflictError,
    IndexConflictError,
    PartialWriteError,
    ReconciliationError,
)

from translatable.core.decoder import (
    NOT_TRANSLATABLE,
    decode_attribute,
    is_translatable,
)

from translatable.core.locale import (
    LocaleContext,
    normalize_locale,
    is_valid_locale,
)

from translatable.core.utils import (
    generate_provisional_id,
    utc_now,
)

__all__ = [
    # Models
    "TranslationRecord",
    "LocaleFailure",
    "AttributeWriteResult",
    "WriteReport",
    "ReconcileReport",
    # Errors
    "TranslatableError",
    "StorageError",
    "BundleCorruptError",
    "BundleConflictError",
    "IndexConflictError",
    "PartialWriteError",
    "ReconciliationError",
    # Decoder
    "NOT_TRANSLATABLE",
    "decode_attribute",
    "is_translatable",
    # Locale
    "LocaleContext",
    "normalize_locale",
    "is_valid_locale",
    # Utils
    "generate_provisional_id",
    "utc_now",
]
