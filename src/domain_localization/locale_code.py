"""
Locale code normalization.

A locale is a two letter lowercase language identifier ("en", "cs").
Region tagged input such as "en-US" or "pt_BR" is accepted and reduced to
its language part; regions are not tracked separately.
"""

import re

from .exceptions import InvalidLocaleFormat


LOCALE_PATTERN = re.compile(r"^[a-z]{2}$")

# Separators accepted between language and region ("en-US", "en_US")
_REGION_SEPARATORS = ("-", "_")


def normalize_locale(raw: object) -> str:
    """
    Normalize raw input to a two letter locale code.

    Args:
        raw: Locale input such as "EN", " cs ", or "en-US"

    Returns:
        The lowercase two letter code

    Raises:
        InvalidLocaleFormat: If the input does not reduce to [a-z]{2}
    """
    if not isinstance(raw, str):
        raise InvalidLocaleFormat(raw)

    locale = raw.strip().lower()
    for separator in _REGION_SEPARATORS:
        if separator in locale:
            language, _, region = locale.partition(separator)
            if not region.isalpha():
                raise InvalidLocaleFormat(raw)
            locale = language
            break

    if not LOCALE_PATTERN.match(locale):
        raise InvalidLocaleFormat(raw)

    return locale


def is_valid_locale(raw: object) -> bool:
    """Return True if raw normalizes to a locale code."""
    try:
        normalize_locale(raw)
    except InvalidLocaleFormat:
        return False
    return True


class LocaleCode(str):
    """
    String subtype holding an already normalized locale code.

    Construction normalizes, so LocaleCode("EN-gb") == "en".
    """

    def __new__(cls, raw: object) -> "LocaleCode":
        return super().__new__(cls, normalize_locale(raw))

    def __repr__(self) -> str:
        return f"LocaleCode({str(self)!r})"
