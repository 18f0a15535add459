"""
Internationalization (i18n) of operator-facing messages.

Provides English (en) and Czech (cs) texts for the CLI and the health check.
These are the tool's own messages; translated content of the application
lives in TranslatedValue objects instead.
"""

from typing import Optional


SUPPORTED_LANGUAGES = frozenset({"en", "cs"})
DEFAULT_LANGUAGE = "en"


# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Resolution output
    "resolve.locale": {
        "en": "Locale: {locale}",
        "cs": "Jazyk: {locale}",
    },
    "resolve.environment": {
        "en": "Environment: {environment}",
        "cs": "Prostředí: {environment}",
    },
    "resolve.redirect": {
        "en": "Invalid locale parameter, redirect to: {url}",
        "cs": "Neplatný parametr jazyka, přesměrování na: {url}",
    },
    "resolve.protected": {
        "en": "Domain is password protected",
        "cs": "Doména je chráněna heslem",
    },
    "resolve.failed": {
        "en": "Locale could not be resolved",
        "cs": "Jazyk se nepodařilo určit",
    },

    # Tables
    "table.locales": {
        "en": "CURRENT LOCALE TABLE:",
        "cs": "AKTUÁLNÍ TABULKA JAZYKŮ:",
    },
    "table.domains": {
        "en": "CURRENT DOMAIN TABLE:",
        "cs": "AKTUÁLNÍ TABULKA DOMÉN:",
    },
    "table.empty": {
        "en": "Table is empty.",
        "cs": "Tabulka je prázdná.",
    },

    # Storage
    "storage.created": {
        "en": "Storage created at: {path}",
        "cs": "Úložiště vytvořeno v: {path}",
    },
    "storage.exists": {
        "en": "Storage already exists at: {path}",
        "cs": "Úložiště již existuje v: {path}",
    },

    # Passwords
    "password.valid": {
        "en": "Password is valid",
        "cs": "Heslo je platné",
    },
    "password.invalid": {
        "en": "Password is not valid",
        "cs": "Heslo není platné",
    },
    "password.rehashed": {
        "en": "Stored password hash was upgraded",
        "cs": "Uložený otisk hesla byl aktualizován",
    },
    "domain.unknown": {
        "en": "Domain \"{domain}\" does not exist",
        "cs": "Doména \"{domain}\" neexistuje",
    },

    # Health check
    "check.passed": {
        "en": "Localization configuration is healthy",
        "cs": "Konfigurace lokalizace je v pořádku",
    },
    "check.failed": {
        "en": "Localization configuration has errors",
        "cs": "Konfigurace lokalizace obsahuje chyby",
    },
    "check.error": {
        "en": "Error: {message}",
        "cs": "Chyba: {message}",
    },
    "check.warning": {
        "en": "Warning: {message}",
        "cs": "Varování: {message}",
    },
}


def get_message(key: str, language: Optional[str] = None, **kwargs) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'resolve.locale')
        language: Language code ('en' or 'cs'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.

    Examples:
        >>> get_message('resolve.locale', 'en', locale='cs')
        'Locale: cs'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language) or translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # Leave placeholders in place rather than fail on output
            pass

    return message


def get_all_message_keys() -> set[str]:
    return set(TRANSLATIONS.keys())


def has_translation(key: str, language: str) -> bool:
    translations = TRANSLATIONS.get(key)
    if translations is None:
        return False
    return language in translations


def get_missing_translations(language: str) -> set[str]:
    """Message keys that have no text for language."""
    return {key for key, translations in TRANSLATIONS.items() if language not in translations}


def validate_translations() -> dict[str, set[str]]:
    """Map each supported language to its missing message keys."""
    return {language: get_missing_translations(language) for language in SUPPORTED_LANGUAGES}
