"""
Resolution snapshot: the aggregated view of all domain and locale configuration.

A snapshot is built once from storage, cached, and shared by every request
until it expires or is invalidated. It is immutable; every map is keyed by
hostname or locale code.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence, Union

from .audit_logger import AuditLogger
from .enums import Environment
from .exceptions import EmptyDomainSet
from .repository import LocalizationRepository


COMPONENT = "snapshot"

FallbackPolicy = Callable[[Sequence[str]], Mapping[str, Sequence[str]]]


def no_fallback_policy(available_locales: Sequence[str]) -> Mapping[str, Sequence[str]]:
    """Default fallback policy: no locale falls back to another."""
    return {}


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class LocaleDisplay:
    """Display metadata of one locale, used to build page titles."""

    title_suffix: Optional[str] = None
    title_separator: Optional[str] = None
    title_format: Optional[str] = None
    site_name: Optional[str] = None


@dataclass(frozen=True)
class ResolutionSnapshot:
    """Point-in-time, read-only view of domain and locale configuration."""

    available_locales: tuple[str, ...]
    default_locale: Optional[str]
    fallback_locales: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    locale_to_title_suffix: Mapping[str, Optional[str]] = field(default_factory=dict)
    locale_to_title_separator: Mapping[str, Optional[str]] = field(default_factory=dict)
    locale_to_title_format: Mapping[str, Optional[str]] = field(default_factory=dict)
    locale_to_site_name: Mapping[str, Optional[str]] = field(default_factory=dict)
    domain_to_locale: Mapping[str, str] = field(default_factory=dict)
    domain_to_environment: Mapping[str, Environment] = field(default_factory=dict)
    domain_to_protected: Mapping[str, bool] = field(default_factory=dict)
    domain_to_scheme: Mapping[str, str] = field(default_factory=dict)
    domain_to_use_www: Mapping[str, bool] = field(default_factory=dict)
    domain_by_environment: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    domains: tuple[dict, ...] = ()
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Freeze every map so shared snapshots cannot be modified by callers
        for name in (
            "locale_to_title_suffix",
            "locale_to_title_separator",
            "locale_to_title_format",
            "locale_to_site_name",
            "domain_to_locale",
            "domain_to_environment",
            "domain_to_protected",
            "domain_to_scheme",
            "domain_to_use_www",
        ):
            object.__setattr__(self, name, _frozen(getattr(self, name)))
        object.__setattr__(
            self,
            "fallback_locales",
            _frozen({code: tuple(chain) for code, chain in self.fallback_locales.items()}),
        )
        object.__setattr__(
            self,
            "domain_by_environment",
            _frozen({env: _frozen(m) for env, m in self.domain_by_environment.items()}),
        )
        object.__setattr__(self, "available_locales", tuple(self.available_locales))
        object.__setattr__(
            self, "domains", tuple(MappingProxyType(dict(row)) for row in self.domains)
        )
        object.__setattr__(self, "warnings", tuple(self.warnings))

    def fallback_chain(self, locale: str) -> tuple[str, ...]:
        """Locales to try, in order, when a value for locale is missing."""
        return self.fallback_locales.get(locale, ())

    def preferred_domain(
        self,
        environment: Union[Environment, str],
        locale: str,
    ) -> Optional[str]:
        """Representative domain for an (environment, locale) pair."""
        env = environment.value if isinstance(environment, Environment) else environment
        return self.domain_by_environment.get(env, {}).get(locale)

    def base_url(self, domain: str) -> Optional[str]:
        """Absolute base URL of a known domain, honoring its scheme and www flag."""
        scheme = self.domain_to_scheme.get(domain)
        if scheme is None:
            return None
        prefix = "www." if self.domain_to_use_www.get(domain, False) else ""
        return f"{scheme}://{prefix}{domain}"

    def locale_display(self, locale: str) -> LocaleDisplay:
        return LocaleDisplay(
            title_suffix=self.locale_to_title_suffix.get(locale),
            title_separator=self.locale_to_title_separator.get(locale),
            title_format=self.locale_to_title_format.get(locale),
            site_name=self.locale_to_site_name.get(locale),
        )

    def to_dict(self) -> dict:
        """Plain, JSON-serializable representation."""
        return {
            "available_locales": list(self.available_locales),
            "default_locale": self.default_locale,
            "fallback_locales": {k: list(v) for k, v in self.fallback_locales.items()},
            "locale_to_title_suffix": dict(self.locale_to_title_suffix),
            "locale_to_title_separator": dict(self.locale_to_title_separator),
            "locale_to_title_format": dict(self.locale_to_title_format),
            "locale_to_site_name": dict(self.locale_to_site_name),
            "domain_to_locale": dict(self.domain_to_locale),
            "domain_to_environment": {
                domain: env.value for domain, env in self.domain_to_environment.items()
            },
            "domain_to_protected": dict(self.domain_to_protected),
            "domain_to_scheme": dict(self.domain_to_scheme),
            "domain_to_use_www": dict(self.domain_to_use_www),
            "domain_by_environment": {
                env: dict(m) for env, m in self.domain_by_environment.items()
            },
            "domains": [dict(row) for row in self.domains],
            "warnings": list(self.warnings),
        }


def build_snapshot(
    repository: LocalizationRepository,
    logger: Optional[AuditLogger] = None,
    fallback_policy: FallbackPolicy = no_fallback_policy,
) -> ResolutionSnapshot:
    """
    Build a snapshot from storage.

    Domains are read first; a default-flagged domain always wins the
    (environment, locale) slot, otherwise the first one seen keeps it.
    Active locales are then read in position order. If several locales are
    flagged default the first one wins and the conflict is recorded as a
    warning instead of failing.

    Raises:
        ConfigurationMissing: If storage has not been provisioned
        EmptyDomainSet: If storage holds no domains
    """
    warnings: list[str] = []

    def warn(message: str, data: dict) -> None:
        warnings.append(message)
        if logger:
            logger.warn(COMPONENT, message, data)

    domains = repository.list_domains()
    if not domains:
        raise EmptyDomainSet()

    if logger:
        logger.info(COMPONENT, "Building localization snapshot", {"domains": len(domains)})

    domain_to_locale: dict[str, str] = {}
    domain_to_environment: dict[str, Environment] = {}
    domain_to_protected: dict[str, bool] = {}
    domain_to_scheme: dict[str, str] = {}
    domain_to_use_www: dict[str, bool] = {}
    domain_by_environment: dict[str, dict[str, str]] = {}
    rows: list[dict] = []

    for record in domains:
        host = record.domain
        domain_to_environment[host] = record.environment
        domain_to_protected[host] = record.protected
        domain_to_scheme[host] = record.scheme
        domain_to_use_www[host] = record.use_www

        row = record.to_row()
        row.pop("protected_password_hash", None)
        rows.append(row)

        if record.locale is None:
            warn(
                f'Domain "{host}" has no locale and will not resolve one.',
                {"domain": host},
            )
            continue

        locale = record.locale.code
        domain_to_locale[host] = locale
        if not record.locale.active:
            warn(
                f'Domain "{host}" points to inactive locale "{locale}".',
                {"domain": host, "locale": locale},
            )

        by_locale = domain_by_environment.setdefault(record.environment.value, {})
        if locale not in by_locale or record.is_default:
            by_locale[locale] = host

    available_locales: list[str] = []
    default_locale: Optional[str] = None
    locale_to_title_suffix: dict[str, Optional[str]] = {}
    locale_to_title_separator: dict[str, Optional[str]] = {}
    locale_to_title_format: dict[str, Optional[str]] = {}
    locale_to_site_name: dict[str, Optional[str]] = {}

    for locale in repository.list_active_locales():
        available_locales.append(locale.code)
        if locale.is_default:
            if default_locale is not None:
                warn(
                    f'Multiple default locales: Locale "{default_locale}" and '
                    f'"{locale.code}" is marked as default.',
                    {"kept": default_locale, "ignored": locale.code},
                )
            else:
                default_locale = locale.code
        locale_to_title_suffix[locale.code] = locale.title_suffix
        locale_to_title_separator[locale.code] = locale.title_separator
        locale_to_title_format[locale.code] = locale.title_format
        locale_to_site_name[locale.code] = locale.site_name

    if default_locale is None:
        if available_locales:
            default_locale = available_locales[0]
            warn(
                f'No active locale is marked as default, using "{default_locale}".',
                {"default_locale": default_locale},
            )
        else:
            warn("No active locale is defined.", {})

    snapshot = ResolutionSnapshot(
        available_locales=tuple(available_locales),
        default_locale=default_locale,
        fallback_locales=fallback_policy(tuple(available_locales)),
        locale_to_title_suffix=locale_to_title_suffix,
        locale_to_title_separator=locale_to_title_separator,
        locale_to_title_format=locale_to_title_format,
        locale_to_site_name=locale_to_site_name,
        domain_to_locale=domain_to_locale,
        domain_to_environment=domain_to_environment,
        domain_to_protected=domain_to_protected,
        domain_to_scheme=domain_to_scheme,
        domain_to_use_www=domain_to_use_www,
        domain_by_environment=domain_by_environment,
        domains=tuple(rows),
        warnings=tuple(warnings),
    )

    if logger:
        logger.info(
            COMPONENT,
            "Localization snapshot built",
            {
                "domains": len(domain_to_environment),
                "locales": len(available_locales),
                "default_locale": default_locale,
            },
        )

    return snapshot
