"""
Exception classes for the domain localization system.

All exceptions inherit from LocalizationError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class LocalizationError(Exception):
    """Base exception for all domain localization errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(LocalizationError):
    """Raised when a domain or locale record receives an invalid value."""

    pass


class InvalidLocaleFormat(ValidationError):
    """Raised when a locale code is not two [a-z] characters."""

    def __init__(self, raw: object) -> None:
        super().__init__(
            code="invalid_locale_format",
            message=(
                f'Locale "{raw}" is invalid, because it must be 2 [a-z] characters.\n'
                'To solve this issue: Use alphabet locale like "en", "de", "cs".'
            ),
            details={"raw_input": raw},
        )


class ConfigurationMissing(LocalizationError):
    """Raised when the domain or locale storage has not been provisioned."""

    def __init__(self, details: Optional[dict] = None) -> None:
        super().__init__(
            code="configuration_missing",
            message=(
                "Localization storage does not exist. "
                "Please create storage and insert default configuration first.\n"
                'To solve this issue: Please create the "domains" and "locales" '
                "stores and seed them with default data."
            ),
            details=details,
        )


class EmptyDomainSet(LocalizationError):
    """Raised when storage exists but holds no domain records."""

    def __init__(self, details: Optional[dict] = None) -> None:
        super().__init__(
            code="empty_domain_set",
            message='Domain list is empty. Please define project domains in the "domains" store.',
            details=details,
        )


class LocaleResolutionFailed(LocalizationError):
    """Raised when no locale can be determined for the current request."""

    def __init__(
        self,
        defined: Optional[str],
        parameter: Optional[str],
        domain: Optional[str],
    ) -> None:
        super().__init__(
            code="locale_resolution_failed",
            message=(
                "Can not resolve current locale. Explored inputs:\n"
                f'Defined: "{defined or "null"}", '
                f'URL parameter: "{parameter or "null"}", '
                f'domain: "{domain or "null"}".\n'
                "Did you define a default locale for all domains or use router rewriting?"
            ),
            details={
                "defined": defined,
                "parameter": parameter,
                "domain": domain,
            },
        )


class ContextLocaleMissing(LocaleResolutionFailed):
    """Raised when context fallback is requested but no context locale is set."""

    def __init__(
        self,
        defined: Optional[str],
        parameter: Optional[str],
        domain: Optional[str],
        suggestion: Optional[str] = None,
    ) -> None:
        super().__init__(defined, parameter, domain)
        hint = f' Did you mean default locale "{suggestion}"?' if suggestion else ""
        self.code = "context_locale_missing"
        self.message = f"Context locale is empty.{hint}\n{self.message}"
        self.details["suggestion"] = suggestion
        self.args = (self.message,)


class TranslationDecodeError(LocalizationError):
    """Raised when a stored multi-locale value cannot be decoded."""

    pass


class ResolverNotInitialized(LocalizationError):
    """Raised when the ambient resolver is read before one was installed."""

    pass


class PersistenceError(LocalizationError):
    """Raised when persistence operations fail (file I/O, HMAC validation)."""

    pass


class TamperingError(PersistenceError):
    """Raised when HMAC validation fails, indicating data tampering."""

    pass
