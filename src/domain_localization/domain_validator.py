"""
Hostname validation and normalization module.

Provides validation of registered domain hostnames: "www." prefix stripping,
lowercase canonical form, IDNA encoding for international hostnames, and
the label/TLD format check used before a domain record is stored.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from .enums import DomainValidationErrorCode
from .exceptions import ValidationError


LOCALHOST = "localhost"
WWW_PREFIX = "www."
MAX_DOMAIN_LENGTH = 255

# One or more "label." segments followed by a 2-6 letter TLD.
# Hyphens are allowed inside a label but not at its edges.
HOSTNAME_PATTERN = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z]{2,6}$",
    re.IGNORECASE,
)


@dataclass
class DomainValidationError:
    """Structured error information for hostname validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of hostname validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


def strip_www(host: str) -> str:
    """Remove a leading "www." from a hostname."""
    if host.lower().startswith(WWW_PREFIX):
        return host[len(WWW_PREFIX):]
    return host


class DomainValidator:
    """
    Validates and normalizes domain hostnames.

    Handles:
    - Stripping of the "www." prefix before storage
    - Conversion to lowercase canonical form
    - IDNA encoding for international characters
    - "localhost" accepted verbatim
    - Maximum length of 255 characters
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a hostname.

        Args:
            raw_domain: The raw hostname to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        if not raw_domain or not raw_domain.strip():
            return self._failure(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": raw_domain},
            )

        domain = strip_www(raw_domain.strip())

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return self._failure(
                DomainValidationErrorCode.IDNA_ERROR,
                e.message,
                e.details,
            )

        if canonical == LOCALHOST:
            return DomainValidationResult(valid=True, canonical_domain=canonical, error=None)

        if not HOSTNAME_PATTERN.match(canonical):
            return self._failure(
                DomainValidationErrorCode.INVALID_FORMAT,
                f'Domain "{domain}" is not in valid format.',
                {"raw_input": raw_domain, "canonical": canonical},
            )

        if len(canonical) > MAX_DOMAIN_LENGTH:
            return self._failure(
                DomainValidationErrorCode.TOO_LONG,
                f"The maximum length of the domain is {MAX_DOMAIN_LENGTH} characters, "
                f"but {len(canonical)} given.",
                {"raw_input": raw_domain, "length": len(canonical)},
            )

        return DomainValidationResult(valid=True, canonical_domain=canonical, error=None)

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert hostname to canonical form (lowercase, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()

        if not domain_lower.isascii():
            try:
                return idna.encode(domain_lower, uts46=True).decode("ascii")
            except idna.IDNAError as e:
                raise ValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR.value,
                    message=f"IDNA encoding failed: {e}",
                    details={"domain": domain, "idna_error": str(e)},
                )

        return domain_lower

    def require_valid(self, raw_domain: str) -> str:
        """
        Validate a hostname and return its canonical form.

        Raises:
            ValidationError: If the hostname is invalid
        """
        result = self.validate(raw_domain)
        if not result.valid:
            raise ValidationError(
                code=result.error.code.value,
                message=result.error.message,
                details=result.error.details,
            )
        return result.canonical_domain

    @staticmethod
    def _failure(
        code: DomainValidationErrorCode,
        message: str,
        details: dict,
    ) -> DomainValidationResult:
        return DomainValidationResult(
            valid=False,
            canonical_domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )
