"""
Attribute decoder.

Turns a raw attribute value into a ``locale -> text`` mapping, or decides
the attribute is plain data that should be left alone. Nothing here raises:
an attribute that does not decode is simply not translatable.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from translatable.core.locale import is_valid_locale, normalize_locale


# Sentinel returned for values that are not locale maps
NOT_TRANSLATABLE = None


def decode_attribute(value: Any, max_locale_length: int | None = None) -> dict[str, str] | None:
    """
    Decode a raw attribute value.

    Accepts an already-structured mapping or JSON text (str/bytes). The
    result must be a non-empty mapping of valid locale codes to strings.

    Returns:
        The normalized locale map, or ``NOT_TRANSLATABLE``
    """
    if isinstance(value, (str, bytes, bytearray)):
        try:
            value = json.loads(value)
        except ValueError:
            return NOT_TRANSLATABLE

    if not isinstance(value, Mapping) or not value:
        return NOT_TRANSLATABLE

    translations: dict[str, str] = {}
    for locale, text in value.items():
        if not isinstance(locale, str) or not isinstance(text, str):
            return NOT_TRANSLATABLE
        code = normalize_locale(locale)
        if not is_valid_locale(code, max_locale_length):
            return NOT_TRANSLATABLE
        translations[code] = text

    return translations


def is_translatable(value: Any) -> bool:
    """Check whether a raw value would be processed as translations."""
    return decode_attribute(value) is not NOT_TRANSLATABLE
