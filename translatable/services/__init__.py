"""
Translation services.

- IdentityResolver: provisional identifiers and reconciliation
- TranslationWriter: dual-write of decoded attributes
- TranslationResolver: two-tier read path with locale fallback
- TranslationSearch: exact, membership and substring lookups
"""

from translatable.services.identity import IdentityResolver, PROVISIONAL_ATTR
from translatable.services.writer import TranslationWriter
from translatable.services.resolver import TranslationResolver
from translatable.services.search import TranslationSearch

__all__ = [
    "IdentityResolver",
    "PROVISIONAL_ATTR",
    "TranslationWriter",
    "TranslationResolver",
    "TranslationSearch",
]
