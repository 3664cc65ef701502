"""
Tests for attribute decoding and locale handling.
"""

import pytest

from translatable.core.decoder import NOT_TRANSLATABLE, decode_attribute, is_translatable
from translatable.core.locale import LocaleContext, is_valid_locale, normalize_locale


class TestDecodeAttribute:
    def test_mapping_is_used_as_is(self):
        assert decode_attribute({"en": "Hello", "tr": "Merhaba"}) == {"en": "Hello", "tr": "Merhaba"}

    def test_json_text(self):
        assert decode_attribute('{"en": "Hello", "tr": "Merhaba"}') == {"en": "Hello", "tr": "Merhaba"}

    def test_json_bytes(self):
        assert decode_attribute(b'{"de": "Hallo"}') == {"de": "Hallo"}

    @pytest.mark.parametrize("raw", [
        "just a title",
        "42",
        "[1, 2]",
        '["en", "tr"]',
        "{not json",
        "",
        42,
        None,
        ["en"],
        {},
    ])
    def test_plain_values_are_not_translatable(self, raw):
        assert decode_attribute(raw) is NOT_TRANSLATABLE
        assert not is_translatable(raw)

    def test_non_string_text_is_not_translatable(self):
        assert decode_attribute({"en": "Hello", "tr": 5}) is NOT_TRANSLATABLE
        assert decode_attribute({"en": {"nested": "x"}}) is NOT_TRANSLATABLE

    def test_invalid_locale_is_not_translatable(self):
        assert decode_attribute({"en": "Hello", "not a locale": "x"}) is NOT_TRANSLATABLE
        # Longer than the index column
        assert decode_attribute({"zh-hant": "x"}) is NOT_TRANSLATABLE

    def test_locales_are_normalized(self):
        assert decode_attribute({"EN": "Hello", " pt_BR ": "Olá", "Turkish": "Merhaba"}) == {
            "en": "Hello",
            "pt_br": "Olá",
            "tr": "Merhaba",
        }

    def test_provisional_reference_is_skipped(self):
        # A value that was already replaced by its reference must not be re-decoded
        assert decode_attribute("0f8fad5bd9cb469fa16570867728950e") is NOT_TRANSLATABLE


class TestLocale:
    def test_normalize(self):
        assert normalize_locale(" TR ") == "tr"
        assert normalize_locale("zh-TW") == "zh-tw"
        assert normalize_locale("english") == "en"

    def test_valid(self):
        assert is_valid_locale("en")
        assert is_valid_locale("pt_br")
        assert is_valid_locale("zh-tw")
        assert not is_valid_locale("e")
        assert not is_valid_locale("../en")
        assert not is_valid_locale("es-419", max_length=5)
        assert is_valid_locale("es-419", max_length=6)

    def test_context_candidates(self):
        context = LocaleContext(active="TR", fallback="en")
        assert context.active == "tr"
        assert context.candidates() == ["tr", "en"]
        assert context.candidates("de") == ["de", "en"]
        assert context.candidates("en") == ["en"]

    def test_context_without_fallback(self):
        context = LocaleContext(active="en")
        assert context.candidates("fr") == ["fr"]
        assert context.with_active("fr").active == "fr"
