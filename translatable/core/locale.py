"""
Locale codes and the locale context.

Locale codes are used as directory names in the bundle store and as a
fixed-width column in the translation index, so they are normalized and
validated in one place.

The active and fallback locales are never read from global state by the
engine: callers pass a ``LocaleContext`` (or let the engine build one from
settings).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from translatable.config import get_settings


# Language part is 2-3 letters, region part 2-4 alphanumerics ("pt_br", "zh-tw", "es-419")
_LOCALE_RE = re.compile(r"^[a-z]{2,3}(?:[-_][a-z0-9]{2,4})?$")


# Common spelled-out variants seen in hand-written payloads
LOCALE_VARIANTS: dict[str, str] = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "turkish": "tr",
    "italian": "it",
    "portuguese": "pt",
    "russian": "ru",
    "arabic": "ar",
    "chinese": "zh",
    "japanese": "ja",
    "korean": "ko",
    "dutch": "nl",
    "polish": "pl",
}


# =============================================================================
# Utilities
# =============================================================================


def normalize_locale(code: str) -> str:
    """Normalize a locale code to its stored form (lower-case, trimmed)."""
    code = code.strip().lower()
    return LOCALE_VARIANTS.get(code, code)


def is_valid_locale(code: str, max_length: int | None = None) -> bool:
    """Check that an already-normalized code is a usable locale."""
    if max_length is None:
        max_length = get_settings().max_locale_length
    return len(code) <= max_length and bool(_LOCALE_RE.match(code))


# =============================================================================
# Locale Context
# =============================================================================


@dataclass(frozen=True)
class LocaleContext:
    """
    The locales a read or write runs under.

    ``active`` is the locale used when a caller does not ask for one;
    ``fallback`` is tried by fallback-aware lookups when ``active`` (or the
    requested locale) has no translation.
    """

    active: str
    fallback: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "active", normalize_locale(self.active))
        if self.fallback is not None:
            object.__setattr__(self, "fallback", normalize_locale(self.fallback))

    @classmethod
    def from_settings(cls) -> LocaleContext:
        settings = get_settings()
        return cls(active=settings.default_locale, fallback=settings.fallback_locale)

    def with_active(self, locale: str) -> LocaleContext:
        """Return a copy with a different active locale."""
        return replace(self, active=locale)

    def candidates(self, locale: str | None = None) -> list[str]:
        """Locales to try, in order, for a fallback-aware lookup."""
        first = normalize_locale(locale) if locale else self.active
        order = [first]
        if self.fallback and self.fallback != first:
            order.append(self.fallback)
        return order
