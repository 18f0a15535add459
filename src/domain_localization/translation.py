"""
Multi-locale string values.

A TranslatedValue maps locale codes to strings and is stored in a single
text column as "T:" followed by a JSON object, e.g. 'T:{"en":"Hi","cs":"Ahoj"}'.
Columns written before values were translated hold a bare string; such a
value is read as the text of exactly one locale.

Where no locale is given explicitly, the locale comes from the resolver
passed in, or else from the ambient resolver (see context.py).
"""

import json
from typing import Any, Optional

from . import context
from .exceptions import LocalizationError, TranslationDecodeError
from .resolver import LocaleResolver


TAG = "T:"
NO_DATA = "#NO_DATA#"


def _resolve_locale(locale: Optional[str], resolver: Optional[LocaleResolver]) -> str:
    if locale is not None:
        return locale
    if resolver is not None:
        return resolver.resolve_effective_locale(use_context_fallback=True)
    return context.current_locale(use_context_fallback=True)


def _fallback_chain(locale: str, resolver: Optional[LocaleResolver]) -> tuple[str, ...]:
    chains = resolver.fallback_locales() if resolver is not None else context.current_fallback_locales()
    return tuple(chains.get(locale, ()))


def decode(raw: str) -> dict[str, Optional[str]]:
    """
    Decode a tagged payload into its locale mapping.

    Numbers keep their literal text, so "007" style values survive.

    Raises:
        TranslationDecodeError: If the payload is not a JSON object
    """
    payload = raw.replace("\r\n", "\n").replace("\r", "\n")[len(TAG):]
    try:
        data = json.loads(payload, parse_int=str, parse_float=str, strict=False)
    except json.JSONDecodeError as e:
        raise TranslationDecodeError(
            code="translation_decode_error",
            message=f"{e.msg}\nJson: {payload}\n\nOriginal data:\n{raw}",
            details={"payload": raw, "position": e.pos},
        )
    if not isinstance(data, dict):
        raise TranslationDecodeError(
            code="translation_decode_error",
            message=f"Translation payload must be a JSON object.\n\nOriginal data:\n{raw}",
            details={"payload": raw},
        )
    return data


class TranslatedValue:
    """
    Locale to string container with best-match lookup.

    The mapping keeps insertion order, which is also the order the
    last-resort lookup picks from.
    """

    def __init__(
        self,
        raw: Optional[str] = None,
        locale: Optional[str] = None,
        resolver: Optional[LocaleResolver] = None,
    ) -> None:
        """
        Build a value from its stored form.

        Args:
            raw: Tagged payload, legacy bare string, or None for an empty value
            locale: Locale of a legacy bare string (resolved when omitted)
            resolver: Resolver for locale lookups instead of the ambient one

        Raises:
            TranslationDecodeError: If a tagged payload is malformed
        """
        self._storage: dict[str, Optional[str]] = {}
        self._startup_state: dict[str, Optional[str]] = {}

        if raw is None:
            return
        if raw.startswith(TAG + "{"):
            self._storage = decode(raw)
            self._startup_state = dict(self._storage)
        else:
            self._storage[_resolve_locale(locale, resolver)] = raw

    def __str__(self) -> str:
        if not self._storage:
            return ""
        return self.get_translation() or ""

    def __repr__(self) -> str:
        return f"TranslatedValue({self._storage!r})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TranslatedValue):
            return NotImplemented
        return self._storage == other._storage

    @property
    def storage(self) -> dict[str, Optional[str]]:
        return dict(self._storage)

    @property
    def startup_state(self) -> dict[str, Optional[str]]:
        """Mapping as it was right after decoding."""
        return dict(self._startup_state)

    def is_empty(self) -> bool:
        return not self._storage

    def is_dirty(self) -> bool:
        """True when the mapping differs from its decoded state."""
        return self._storage != self._startup_state

    def get_translation(
        self,
        locale: Optional[str] = None,
        fallback: bool = True,
        resolver: Optional[LocaleResolver] = None,
    ) -> Optional[str]:
        """
        Return the best text for a locale.

        Lookup order: exact match, the locale's fallback chain, then the
        first stored locale with text. With fallback disabled a missing
        locale gives NO_DATA. An empty value always gives NO_DATA.
        """
        if not self._storage:
            return NO_DATA
        if locale is None:
            locale = _resolve_locale(None, resolver)
        if self._storage.get(locale) is not None:
            return self._storage[locale]
        if not fallback:
            return NO_DATA

        for fallback_locale in _fallback_chain(locale, resolver):
            if self._storage.get(fallback_locale) is not None:
                return self._storage[fallback_locale]

        return next((text for text in self._storage.values() if text is not None), NO_DATA)

    def add_translate(
        self,
        value: Optional[str],
        locale: Optional[str] = None,
        resolver: Optional[LocaleResolver] = None,
    ) -> bool:
        """
        Set the text of one locale; None removes it.

        Returns:
            True if the stored mapping changed
        """
        locale = _resolve_locale(locale, resolver)

        if value is None:
            if locale not in self._storage:
                return False
            del self._storage[locale]
            return True

        if self._storage.get(locale) == value:
            return False

        self._storage[locale] = value
        return True

    def serialize(self) -> str:
        """Stored form: "T:" followed by compact JSON with unescaped unicode."""
        return TAG + json.dumps(self._storage, ensure_ascii=False, separators=(",", ":"))

    def regenerate(self) -> "TranslatedValue":
        """Round-trip through the stored form, resetting the startup state."""
        return TranslatedValue(self.serialize())


class TranslatedField:
    """
    Descriptor for an entity attribute holding a TranslatedValue.

    Assigning a string sets the text of the current locale; use set() to
    target a specific locale:

        class Article:
            title = TranslatedField()

        article.title = "Hello"
        Article.title.set(article, "Ahoj", locale="cs")
        article.title.get_translation("cs")
    """

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name
        self._attr = f"_translated_{name}"

    def __get__(self, obj: Any, objtype: Optional[type] = None) -> Any:
        if obj is None:
            return self
        return obj.__dict__.get(self._attr)

    def __set__(self, obj: Any, value: Any) -> None:
        if value is None or isinstance(value, TranslatedValue):
            obj.__dict__[self._attr] = value
        else:
            self.set(obj, value)

    def set(
        self,
        obj: Any,
        value: Optional[str],
        locale: Optional[str] = None,
        resolver: Optional[LocaleResolver] = None,
    ) -> TranslatedValue:
        """Set the text of one locale, creating the value if needed."""
        current: TranslatedValue = obj.__dict__.get(self._attr) or TranslatedValue()
        if current.add_translate(value, locale, resolver):
            current = current.regenerate()
        obj.__dict__[self._attr] = current
        return current

    def get(
        self,
        obj: Any,
        locale: Optional[str] = None,
        fallback: bool = True,
        resolver: Optional[LocaleResolver] = None,
    ) -> Optional[str]:
        """Best text of the attribute, or None when it was never set."""
        current: Optional[TranslatedValue] = obj.__dict__.get(self._attr)
        if current is None:
            return None
        return current.get_translation(locale, fallback, resolver)


def to_database_value(value: Any, resolver: Optional[LocaleResolver] = None) -> Optional[str]:
    """
    Convert an attribute value to its column form.

    Raises:
        LocalizationError: If the value is neither None, a string nor a TranslatedValue
    """
    if value is None:
        return None
    if isinstance(value, TranslatedValue):
        return value.serialize()
    if isinstance(value, str):
        return TranslatedValue(value, resolver=resolver).serialize()
    raise LocalizationError(
        code="invalid_translation_type",
        message=f"Language data must be TranslatedValue. [{type(value).__name__}] given.",
        details={"type": type(value).__name__},
    )


def from_database_value(raw: Optional[str], resolver: Optional[LocaleResolver] = None) -> TranslatedValue:
    """Convert a column value to a TranslatedValue."""
    return TranslatedValue(raw, resolver=resolver)
