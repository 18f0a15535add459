"""
Per-request locale and environment resolution.

A LocaleResolver lives for one request. It combines, in priority order, an
explicit override set by routing, the "locale" query parameter, and the
locale linked to the request's domain in the cached snapshot. Background
resolvers (jobs, CLI) have no request and always resolve to the snapshot's
default locale and the production environment.

Request URLs are handled with httpx.URL, which also builds the redirect
used to drop an invalid "locale" parameter.
"""

from dataclasses import dataclass
from typing import Mapping, Optional, Union

import httpx

from .audit_logger import AuditLogger
from .cache import SnapshotCache
from .domain_validator import strip_www
from .enums import Environment
from .exceptions import (
    ContextLocaleMissing,
    InvalidLocaleFormat,
    LocaleResolutionFailed,
    LocalizationError,
)
from .locale_code import LocaleCode, normalize_locale
from .models import LocaleRecord
from .repository import LocalizationRepository
from .snapshot import (
    FallbackPolicy,
    LocaleDisplay,
    ResolutionSnapshot,
    build_snapshot,
    no_fallback_policy,
)


COMPONENT = "resolver"
LOCALE_PARAMETER = "locale"


@dataclass
class RequestSignals:
    """The parts of an incoming request that take part in resolution."""

    host: str
    locale_parameter: Optional[str]
    url: Optional[httpx.URL] = None


def normalize_host(host: str) -> str:
    """Lowercase a host, drop any port and a leading "www."."""
    host = host.strip().lower()
    if not host.startswith("["):
        host = host.partition(":")[0]
    return strip_www(host)


def extract_request_signals(request: Union[str, httpx.URL, httpx.Request]) -> RequestSignals:
    """
    Read the host and the "locale" query parameter of a request.

    Args:
        request: Absolute request URL, httpx.URL or httpx.Request
    """
    url = request.url if isinstance(request, httpx.Request) else httpx.URL(request)
    host = url.raw_host.decode("ascii")
    return RequestSignals(
        host=normalize_host(host),
        locale_parameter=url.params.get(LOCALE_PARAMETER),
        url=url,
    )


class LocaleResolver:
    """
    Resolves the effective locale and environment for one request.

    Instances are not shared between requests, so they hold no locks; the
    snapshot they read comes from a SnapshotCache shared by the process.
    """

    def __init__(
        self,
        repository: LocalizationRepository,
        cache: SnapshotCache,
        logger: Optional[AuditLogger] = None,
        fallback_policy: FallbackPolicy = no_fallback_policy,
        background: bool = False,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            repository: Storage the snapshot is built from
            cache: Process-wide snapshot cache
            logger: Optional audit logger
            fallback_policy: Derives locale fallback chains for new snapshots
            background: True when there is no request (jobs, CLI)
        """
        self._repository = repository
        self._cache = cache
        self._logger = logger
        self._fallback_policy = fallback_policy
        self._background = background

        self._snapshot: Optional[ResolutionSnapshot] = None
        self._explicit_locale: Optional[str] = None
        self._query_locale: Optional[str] = None
        self._context_locale: Optional[str] = None
        self._domain_locale: Optional[str] = None
        self._current_host: Optional[str] = None

    @classmethod
    def for_background(
        cls,
        repository: LocalizationRepository,
        cache: SnapshotCache,
        logger: Optional[AuditLogger] = None,
        fallback_policy: FallbackPolicy = no_fallback_policy,
    ) -> "LocaleResolver":
        """Create a resolver for code running outside any request."""
        return cls(repository, cache, logger, fallback_policy, background=True)

    @property
    def background(self) -> bool:
        return self._background

    @property
    def current_host(self) -> Optional[str]:
        return self._current_host

    @property
    def explicit_locale(self) -> Optional[str]:
        return self._explicit_locale

    @property
    def query_locale(self) -> Optional[str]:
        return self._query_locale

    @property
    def context_locale(self) -> Optional[str]:
        return self._context_locale

    def snapshot(self) -> ResolutionSnapshot:
        """
        Return the snapshot, loading it from cache or building it from storage.

        Raises:
            ConfigurationMissing: If storage has not been provisioned
            EmptyDomainSet: If storage holds no domains
        """
        if self._snapshot is None:
            self._snapshot = self._cache.get_or_build(
                lambda: build_snapshot(self._repository, self._logger, self._fallback_policy)
            )
        return self._snapshot

    def set_locale(self, locale: str) -> "LocaleResolver":
        """Explicit override, typically set by routing."""
        self._explicit_locale = normalize_locale(locale)
        return self

    def set_context_locale(self, locale: Optional[str]) -> "LocaleResolver":
        """Narrow override used only as a last resort, e.g. by an admin panel."""
        self._context_locale = normalize_locale(locale) if locale is not None else None
        return self

    def ingest_request_signals(
        self,
        host: str,
        query_locale: Optional[str],
        request_url: Optional[httpx.URL] = None,
        response_started: bool = False,
    ) -> Optional[str]:
        """
        Record the request host and the "locale" query parameter.

        An invalid parameter is ignored rather than raised. When the request
        URL is known and no response has been sent yet, the URL without the
        parameter is returned so the caller can redirect to it.

        Returns:
            Redirect target, or None when no redirect is needed
        """
        if self._background:
            raise LocalizationError(
                code="background_request",
                message="Processing an HTTP request is not available in background mode.",
            )

        self._current_host = normalize_host(host)
        self._domain_locale = None

        if query_locale is None:
            return None

        try:
            self._query_locale = normalize_locale(query_locale)
        except InvalidLocaleFormat as e:
            self._query_locale = None
            redirect = None
            if request_url is not None and not response_started:
                redirect = str(request_url.copy_remove_param(LOCALE_PARAMETER))
            if self._logger:
                self._logger.warn(
                    COMPONENT,
                    "Ignoring invalid locale query parameter",
                    {
                        "host": self._current_host,
                        "parameter": query_locale,
                        "error_code": e.code,
                        "redirect": redirect,
                    },
                )
            return redirect

        return None

    def process_request(
        self,
        request: Union[str, httpx.URL, httpx.Request],
        response_started: bool = False,
    ) -> Optional[str]:
        """Extract signals from a request URL and ingest them."""
        signals = extract_request_signals(request)
        return self.ingest_request_signals(
            signals.host,
            signals.locale_parameter,
            request_url=signals.url,
            response_started=response_started,
        )

    def resolve_effective_locale(self, use_context_fallback: bool = False) -> LocaleCode:
        """
        Return the locale of the current request.

        Priority: explicit override, query parameter, domain locale and,
        only when use_context_fallback is set and nothing else matched,
        the context locale. Background resolvers return the default locale.

        Raises:
            LocaleResolutionFailed: If no input yields a locale
            ContextLocaleMissing: If context fallback was needed but unset
        """
        if self._background:
            default_locale = self.snapshot().default_locale
            if default_locale is None:
                raise LocaleResolutionFailed(None, None, None)
            return LocaleCode(default_locale)

        if self._domain_locale is None and self._current_host is not None:
            self._domain_locale = self.snapshot().domain_to_locale.get(self._current_host)

        locale = self._explicit_locale or self._query_locale or self._domain_locale

        if locale is None and use_context_fallback:
            if self._context_locale is None:
                error: LocaleResolutionFailed = ContextLocaleMissing(
                    self._explicit_locale,
                    self._query_locale,
                    self._domain_locale,
                    suggestion=self._snapshot.default_locale if self._snapshot else None,
                )
                self._log_failure(error)
                raise error
            locale = self._context_locale

        if locale is None:
            error = LocaleResolutionFailed(
                self._explicit_locale, self._query_locale, self._domain_locale
            )
            self._log_failure(error)
            raise error

        return LocaleCode(locale)

    def resolve_environment(self) -> Environment:
        """Environment of the current domain; production when unknown or in background."""
        if self._background or self._current_host is None:
            return Environment.PRODUCTION
        return self.snapshot().domain_to_environment.get(
            self._current_host, Environment.PRODUCTION
        )

    def available_locales(self) -> tuple[str, ...]:
        return self.snapshot().available_locales

    def default_locale(self) -> Optional[str]:
        return self.snapshot().default_locale

    def fallback_locales(self) -> Mapping[str, tuple[str, ...]]:
        """
        Rewriting table of locales, for example {"sk": ("cs", "en")}.

        Empty unless a fallback policy populated it.
        """
        return self.snapshot().fallback_locales

    def locale_display(self, locale: Optional[str] = None) -> LocaleDisplay:
        """Title and site name metadata of a locale (current locale by default)."""
        if locale is None:
            locale = self.resolve_effective_locale(use_context_fallback=True)
        return self.snapshot().locale_display(locale)

    def domain_by_environment(self) -> Mapping[str, Mapping[str, str]]:
        return self.snapshot().domain_by_environment

    def is_protected(self) -> bool:
        """True when the current domain requires a password."""
        if self._current_host is None:
            return False
        return self.snapshot().domain_to_protected.get(self._current_host, False)

    def get_locale_record(self, locale: str) -> Optional[LocaleRecord]:
        """Look up a locale record in storage, bypassing the snapshot."""
        return self._repository.find_locale(locale)

    def invalidate(self) -> None:
        """Drop the snapshot held here and in the shared cache."""
        self._snapshot = None
        self._domain_locale = None
        self._cache.remove()
        if self._logger:
            self._logger.info(COMPONENT, "Localization cache invalidated")

    def _log_failure(self, error: LocaleResolutionFailed) -> None:
        if self._logger:
            self._logger.log_error(
                COMPONENT,
                "Locale resolution failed",
                error=error,
                additional_data={"host": self._current_host},
            )
