"""
Data models for the domain localization system.

This module defines the registered locale and domain records as read from
storage. Records validate their fields on construction and through their
setter methods; the setters are the only supported way to mutate them.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from .domain_validator import DomainValidator
from .enums import Environment, Scheme
from .exceptions import LocalizationError, ValidationError
from .locale_code import normalize_locale
from .passwords import PasswordHasher, PasswordVerification


MIN_POSITION = 0
MAX_POSITION = 32_767

# Maximum lengths of locale display metadata
TITLE_SUFFIX_MAX = 64
TITLE_SEPARATOR_MAX = 8
TITLE_FORMAT_MAX = 64
SITE_NAME_MAX = 64

_validator = DomainValidator()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def clamp_position(position: int) -> int:
    """Clamp a locale position into the smallint range [0, 32767]."""
    return max(MIN_POSITION, min(MAX_POSITION, int(position)))


def clean_display_text(value: Optional[str], name: str, max_length: int) -> Optional[str]:
    """
    Validate and trim a display metadata value.

    Empty strings are normalized to None.

    Raises:
        ValidationError: If the value is longer than max_length
    """
    if value is None:
        return None
    if len(value) > max_length:
        raise ValidationError(
            code="value_too_long",
            message=(
                f"The maximum length of the {name.replace('_', ' ')} is {max_length} "
                f'characters, but "{value}" given.'
            ),
            details={"field": name, "max_length": max_length, "length": len(value)},
        )
    return value.strip() or None


def coerce_environment(value: Union[Environment, str]) -> Environment:
    """
    Convert a stored or user supplied environment into an Environment.

    Raises:
        ValidationError: If the value is not a known environment
    """
    if isinstance(value, Environment):
        return value
    try:
        return Environment(value)
    except ValueError:
        allowed = '", "'.join(env.value for env in Environment)
        raise ValidationError(
            code="invalid_environment",
            message=f'Environment "{value}" must be in "{allowed}".',
            details={"environment": value},
        )


@dataclass
class LocaleRecord:
    """A registered locale with ordering and display metadata."""

    code: str
    active: bool = True
    is_default: bool = False
    position: int = 1
    title_suffix: Optional[str] = None
    title_separator: Optional[str] = None
    title_format: Optional[str] = None
    site_name: Optional[str] = None
    id: str = field(default_factory=_new_id)
    inserted_date: datetime = field(default_factory=_utcnow)
    # Inverse side of DomainRecord.locale, filled by the repository
    domains: list["DomainRecord"] = field(default_factory=list, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.code = normalize_locale(self.code)
        self.position = clamp_position(self.position)
        self.title_suffix = clean_display_text(self.title_suffix, "title_suffix", TITLE_SUFFIX_MAX)
        self.title_separator = clean_display_text(
            self.title_separator, "title_separator", TITLE_SEPARATOR_MAX
        )
        self.title_format = clean_display_text(self.title_format, "title_format", TITLE_FORMAT_MAX)
        self.site_name = clean_display_text(self.site_name, "site_name", SITE_NAME_MAX)

    def __str__(self) -> str:
        return self.code

    def set_active(self, active: bool = True) -> None:
        self.active = active

    def set_default(self, is_default: bool) -> None:
        self.is_default = is_default

    def set_position(self, position: int) -> None:
        self.position = clamp_position(position)

    def set_title_suffix(self, value: Optional[str]) -> None:
        self.title_suffix = clean_display_text(value, "title_suffix", TITLE_SUFFIX_MAX)

    def set_title_separator(self, value: Optional[str]) -> None:
        self.title_separator = clean_display_text(value, "title_separator", TITLE_SEPARATOR_MAX)

    def set_title_format(self, value: Optional[str]) -> None:
        self.title_format = clean_display_text(value, "title_format", TITLE_FORMAT_MAX)

    def set_site_name(self, value: Optional[str]) -> None:
        self.site_name = clean_display_text(value, "site_name", SITE_NAME_MAX)

    def to_row(self) -> dict:
        """Serialize to a plain dictionary in storage layout."""
        return {
            "id": self.id,
            "code": self.code,
            "active": self.active,
            "default": self.is_default,
            "position": self.position,
            "inserted_date": self.inserted_date.isoformat(),
            "title_suffix": self.title_suffix,
            "title_separator": self.title_separator,
            "title_format": self.title_format,
            "site_name": self.site_name,
        }

    @classmethod
    def from_row(cls, row: dict) -> "LocaleRecord":
        """Build a record from a storage row."""
        record = cls(
            code=row["code"],
            active=bool(row.get("active", True)),
            is_default=bool(row.get("default", False)),
            position=row.get("position", 1),
            title_suffix=row.get("title_suffix"),
            title_separator=row.get("title_separator"),
            title_format=row.get("title_format"),
            site_name=row.get("site_name"),
        )
        if row.get("id"):
            record.id = row["id"]
        if row.get("inserted_date"):
            record.inserted_date = datetime.fromisoformat(row["inserted_date"])
        return record


@dataclass
class DomainRecord:
    """
    A registered hostname with its locale, environment and protection flags.

    The hostname is stored without "www."; use_www only controls how links
    to the domain are rendered.
    """

    domain: str
    locale: Optional[LocaleRecord]
    environment: Environment = Environment.BETA
    https: bool = False
    use_www: bool = False
    is_default: bool = False
    protected: bool = False
    protected_password_hash: Optional[str] = None
    id: str = field(default_factory=_new_id)
    inserted_date: datetime = field(default_factory=_utcnow)
    updated_date: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        self.domain = _validator.require_valid(self.domain)
        self.environment = coerce_environment(self.environment)

    @property
    def locale_code(self) -> str:
        """
        Code of the linked locale.

        Raises:
            LocalizationError: If the record has no locale
        """
        if self.locale is None:
            raise LocalizationError(
                code="domain_locale_missing",
                message=f'Domain "{self.domain}" locale is empty. Did you select all values?',
                details={"domain": self.domain},
            )
        return self.locale.code

    @property
    def scheme(self) -> str:
        return (Scheme.HTTPS if self.https else Scheme.HTTP).value

    def is_localhost(self) -> bool:
        return self.environment is Environment.LOCALHOST

    def is_beta(self) -> bool:
        return self.environment is Environment.BETA

    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION

    def set_domain(self, domain: str) -> None:
        self.domain = _validator.require_valid(domain)
        self._touch()

    def set_locale(self, locale: LocaleRecord) -> None:
        self.locale = locale
        self._touch()

    def set_environment(self, environment: Union[Environment, str]) -> None:
        self.environment = coerce_environment(environment)
        self._touch()

    def set_https(self, https: bool) -> None:
        self.https = https
        self._touch()

    def set_use_www(self, use_www: bool) -> None:
        self.use_www = use_www
        self._touch()

    def set_default(self, is_default: bool) -> None:
        self.is_default = is_default
        self._touch()

    def set_protected(self, protected: bool) -> None:
        self.protected = protected
        self._touch()

    def set_password(self, password: Optional[str], hasher: PasswordHasher) -> None:
        """Hash and store a plaintext password, or clear it with None."""
        self.protected_password_hash = hasher.hash(password) if password is not None else None
        self._touch()

    def verify_password(self, password: str, hasher: PasswordHasher) -> PasswordVerification:
        """
        Check a password without modifying the record.

        When the result has needs_rehash set, call apply_rehash() and
        persist the record.
        """
        return hasher.verify(password, self.protected_password_hash)

    def apply_rehash(self, password: str, hasher: PasswordHasher) -> bool:
        """
        Replace an outdated hash with one using current parameters.

        Returns:
            True if the stored hash changed
        """
        new_hash = hasher.rehash(password, self.protected_password_hash)
        if new_hash is None:
            return False
        self.protected_password_hash = new_hash
        self._touch()
        return True

    def to_row(self) -> dict:
        """Serialize to a plain dictionary with the locale joined in."""
        return {
            "id": self.id,
            "domain": self.domain,
            "environment": self.environment.value,
            "https": self.https,
            "www": self.use_www,
            "default": self.is_default,
            "protected": self.protected,
            "protected_password_hash": self.protected_password_hash,
            "inserted_date": self.inserted_date.isoformat(),
            "updated_date": self.updated_date.isoformat(),
            "locale": (
                {"id": self.locale.id, "code": self.locale.code}
                if self.locale is not None
                else None
            ),
        }

    @classmethod
    def from_row(cls, row: dict, locales_by_id: dict[str, LocaleRecord]) -> "DomainRecord":
        """
        Build a record from a storage row.

        The row's "locale_id" is resolved through locales_by_id; an unknown id
        leaves the record without a locale.
        """
        record = cls(
            domain=row["domain"],
            locale=locales_by_id.get(row.get("locale_id") or ""),
            environment=row.get("environment", Environment.BETA.value),
            https=bool(row.get("https", False)),
            use_www=bool(row.get("www", False)),
            is_default=bool(row.get("default", False)),
            protected=bool(row.get("protected", False)),
            protected_password_hash=row.get("protected_password_hash"),
        )
        if row.get("id"):
            record.id = row["id"]
        if row.get("inserted_date"):
            record.inserted_date = datetime.fromisoformat(row["inserted_date"])
        if row.get("updated_date"):
            record.updated_date = datetime.fromisoformat(row["updated_date"])
        return record

    def _touch(self) -> None:
        self.updated_date = _utcnow()
