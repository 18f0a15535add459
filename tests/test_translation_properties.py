"""
Property-based tests for multi-locale values and their stored form.
"""

import json
import string

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_localization import context
from domain_localization.cache import SnapshotCache
from domain_localization.exceptions import (
    LocalizationError,
    ResolverNotInitialized,
    TranslationDecodeError,
)
from domain_localization.repository import InMemoryRepository
from domain_localization.resolver import LocaleResolver
from domain_localization.translation import (
    NO_DATA,
    TAG,
    TranslatedField,
    TranslatedValue,
    decode,
    from_database_value,
    to_database_value,
)


locale_strategy = st.text(alphabet=string.ascii_lowercase, min_size=2, max_size=2)

translations_strategy = st.dictionaries(
    keys=locale_strategy,
    values=st.text(max_size=50),
    min_size=1,
    max_size=6,
)


def build_value(translations: dict) -> TranslatedValue:
    value = TranslatedValue()
    for locale, text in translations.items():
        value.add_translate(text, locale)
    return value


class Article:
    title = TranslatedField()
    perex = TranslatedField()


class TestStoredFormProperty:
    """
    *For any* mapping of locales to text, serializing and decoding SHALL
    give back the same mapping in the same order.
    """

    @given(translations=translations_strategy)
    @settings(max_examples=100)
    def test_round_trip(self, translations: dict) -> None:
        value = build_value(translations)

        restored = TranslatedValue(value.serialize())

        assert restored.storage == translations
        assert list(restored.storage) == list(translations)
        assert restored == value
        assert not restored.is_dirty()

    @given(translations=translations_strategy)
    @settings(max_examples=50)
    def test_serialized_form(self, translations: dict) -> None:
        stored = build_value(translations).serialize()

        assert stored.startswith(TAG + "{")
        assert json.loads(stored[len(TAG):]) == translations

    def test_compact_unicode(self) -> None:
        value = TranslatedValue()
        value.add_translate("Příliš žluťoučký", "cs")
        value.add_translate("Hi", "en")

        assert value.serialize() == 'T:{"cs":"Příliš žluťoučký","en":"Hi"}'

    def test_numbers_keep_literal_text(self) -> None:
        value = TranslatedValue('T:{"en":7.50,"cs":42}')

        assert value.storage == {"en": "7.50", "cs": "42"}

    def test_line_breaks_are_normalized(self) -> None:
        value = TranslatedValue('T:{"en":"a\r\nb","cs":"c\rd"}')

        assert value.storage == {"en": "a\nb", "cs": "c\nd"}

    def test_null_entry(self) -> None:
        value = TranslatedValue('T:{"en":null,"cs":"Ahoj"}')

        assert value.get_translation("en") == "Ahoj"
        assert value.get_translation("en", fallback=False) == NO_DATA

    def test_malformed_payload(self) -> None:
        raw = 'T:{"en":"Hi"'

        with pytest.raises(TranslationDecodeError) as exc_info:
            TranslatedValue(raw)

        assert exc_info.value.code == "translation_decode_error"
        assert exc_info.value.details["payload"] == raw
        assert raw in exc_info.value.message

    def test_non_object_payload(self) -> None:
        with pytest.raises(TranslationDecodeError):
            decode('T:["en"]')

    def test_empty_object(self) -> None:
        assert TranslatedValue("T:{}").is_empty()


class TestLegacyValues:
    """An untagged string SHALL become the text of exactly one locale."""

    def test_explicit_locale(self) -> None:
        assert TranslatedValue("Hello", locale="en").storage == {"en": "Hello"}

    def test_tag_without_object_is_legacy(self) -> None:
        assert TranslatedValue("T:[1]", locale="en").storage == {"en": "T:[1]"}

    def test_locale_from_resolver(self, resolver: LocaleResolver) -> None:
        resolver.process_request("https://b.cz/")

        assert TranslatedValue("Ahoj", resolver=resolver).storage == {"cs": "Ahoj"}

    def test_locale_from_ambient_resolver(self, resolver: LocaleResolver) -> None:
        resolver.process_request("https://a.com/")

        with context.use_resolver(resolver):
            assert TranslatedValue("Hello").storage == {"en": "Hello"}

    def test_without_any_resolver(self) -> None:
        with pytest.raises(ResolverNotInitialized):
            TranslatedValue("Hello")

    def test_none_is_empty(self) -> None:
        value = TranslatedValue(None)

        assert value.is_empty()
        assert value.get_translation("en") == NO_DATA

    def test_empty_value_needs_no_resolver(self) -> None:
        assert TranslatedValue(None).get_translation() == NO_DATA
        assert str(TranslatedValue()) == ""

    def test_empty_value_on_unknown_host(self, resolver: LocaleResolver) -> None:
        resolver.process_request("https://unknown.org/")

        with context.use_resolver(resolver):
            assert TranslatedValue().get_translation() == NO_DATA


class TestLookupProperty:
    """
    Lookup SHALL prefer the exact locale, then its fallback chain, then the
    first stored locale.
    """

    @given(translations=translations_strategy)
    @settings(max_examples=100)
    def test_exact_match(self, translations: dict) -> None:
        value = build_value(translations)

        for locale, text in translations.items():
            assert value.get_translation(locale) == text
            assert value.get_translation(locale, fallback=False) == text

    @given(translations=translations_strategy, missing=locale_strategy)
    @settings(max_examples=100)
    def test_missing_locale(self, translations: dict, missing: str) -> None:
        value = build_value({k: v for k, v in translations.items() if k != missing} or {"zz": "x"})
        if missing in value.storage:
            return

        assert value.get_translation(missing, fallback=False) == NO_DATA
        assert value.get_translation(missing) == next(iter(value.storage.values()))

    def test_fallback_chain(self, repository: InMemoryRepository) -> None:
        resolver = LocaleResolver(
            repository,
            SnapshotCache(),
            fallback_policy=lambda available: {"sk": ["cs", "en"]},
        )
        value = TranslatedValue('T:{"en":"Hello","cs":"Ahoj"}')

        assert value.get_translation("sk", resolver=resolver) == "Ahoj"
        assert value.get_translation("sk", fallback=False, resolver=resolver) == NO_DATA
        assert value.get_translation("de", resolver=resolver) == "Hello"

    def test_current_locale(self, resolver: LocaleResolver) -> None:
        resolver.process_request("https://b.cz/")
        value = TranslatedValue('T:{"en":"Hello","cs":"Ahoj"}')

        assert value.get_translation(resolver=resolver) == "Ahoj"
        with context.use_resolver(resolver):
            assert str(value) == "Ahoj"


class TestMutation:
    """add_translate reports whether the mapping changed."""

    def test_same_value_twice(self) -> None:
        value = TranslatedValue()

        assert value.add_translate("Hi", "en")
        assert not value.add_translate("Hi", "en")
        assert value.add_translate("Hello", "en")

    def test_none_removes(self) -> None:
        value = TranslatedValue('T:{"en":"Hi","cs":"Ahoj"}')

        assert value.add_translate(None, "cs")
        assert value.storage == {"en": "Hi"}
        assert not value.add_translate(None, "cs")

    def test_locale_is_normalized_by_resolver(self, resolver: LocaleResolver) -> None:
        resolver.set_locale("CS")

        value = TranslatedValue()
        value.add_translate("Ahoj", resolver=resolver)

        assert value.storage == {"cs": "Ahoj"}

    def test_dirty_tracking(self) -> None:
        value = TranslatedValue('T:{"en":"Hi"}')
        assert not value.is_dirty()

        value.add_translate("Ahoj", "cs")
        assert value.is_dirty()
        assert value.startup_state == {"en": "Hi"}

        regenerated = value.regenerate()
        assert not regenerated.is_dirty()
        assert regenerated == value


class TestDatabaseConversion:
    """Conversion between attribute values and column values."""

    def test_to_database_value(self, resolver: LocaleResolver) -> None:
        resolver.process_request("https://a.com/")

        assert to_database_value(None) is None
        assert to_database_value(TranslatedValue('T:{"en":"Hi"}')) == 'T:{"en":"Hi"}'
        assert to_database_value("Hi", resolver=resolver) == 'T:{"en":"Hi"}'

    @pytest.mark.parametrize("value", [42, 1.5, ["Hi"], {"en": "Hi"}])
    def test_invalid_type(self, value) -> None:
        with pytest.raises(LocalizationError) as exc_info:
            to_database_value(value)

        assert exc_info.value.code == "invalid_translation_type"
        assert type(value).__name__ in exc_info.value.message

    def test_from_database_value(self) -> None:
        assert from_database_value(None).is_empty()
        assert from_database_value('T:{"cs":"Ahoj"}').storage == {"cs": "Ahoj"}


class TestTranslatedField:
    """Entity attributes holding TranslatedValue objects."""

    def test_class_access_returns_descriptor(self) -> None:
        assert isinstance(Article.title, TranslatedField)

    def test_unset_attribute(self) -> None:
        article = Article()

        assert article.title is None
        assert Article.title.get(article, "en") is None

    def test_set_per_locale(self) -> None:
        article = Article()

        Article.title.set(article, "Hello", locale="en")
        Article.title.set(article, "Ahoj", locale="cs")

        assert isinstance(article.title, TranslatedValue)
        assert article.title.storage == {"en": "Hello", "cs": "Ahoj"}
        assert not article.title.is_dirty()
        assert Article.title.get(article, "cs") == "Ahoj"
        assert Article.title.get(article, "de", fallback=False) == NO_DATA
        assert article.perex is None

    def test_assign_string_uses_current_locale(self, resolver: LocaleResolver) -> None:
        resolver.process_request("https://b.cz/")
        article = Article()

        with context.use_resolver(resolver):
            article.title = "Ahoj"

        assert article.title.storage == {"cs": "Ahoj"}

    def test_assign_value_and_none(self) -> None:
        article = Article()
        value = TranslatedValue('T:{"en":"Hi"}')

        article.title = value
        assert article.title is value

        article.title = None
        assert article.title is None
