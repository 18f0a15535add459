"""
Health check for the localization configuration.

Verifies that storage is provisioned and internally consistent before the
resolver relies on it:
- storage exists and holds at least one domain
- exactly one active locale is marked default
- every domain links to an existing, active locale
- each (environment, locale) pair has at most one default domain
- the configured HMAC secret is not the shipped default
"""

import time
from dataclasses import dataclass, field
from typing import Optional

from .audit_logger import AuditLogger
from .config import DEFAULT_HMAC_SECRET, SystemConfig
from .exceptions import LocalizationError
from .i18n import get_message
from .repository import LocalizationRepository
from .snapshot import build_snapshot


COMPONENT = "self_test"


@dataclass
class SelfTestResult:
    """Complete health check result."""

    success: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    total_duration_ms: float = 0.0


class SelfTest:
    """Inspects storage contents for problems that break resolution."""

    def __init__(
        self,
        config: SystemConfig,
        repository: LocalizationRepository,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._config = config
        self._repository = repository
        self._logger = logger

    def run(self) -> SelfTestResult:
        start_time = time.perf_counter()
        errors: list[str] = []
        warnings: list[str] = []

        if self._config.storage.hmac_secret == DEFAULT_HMAC_SECRET:
            warnings.append("HMAC secret is using default value - please change for production")

        try:
            domains = self._repository.list_domains()
            locales = self._repository.list_active_locales()
            build_snapshot(self._repository)
        except LocalizationError as e:
            errors.append(e.message)
            return self._finish(errors, warnings, start_time)

        defaults = [locale.code for locale in locales if locale.is_default]
        if not defaults:
            errors.append("No active locale is marked as default.")
        elif len(defaults) > 1:
            errors.append(
                f'Multiple default locales: {", ".join(defaults)}. '
                f'Resolution keeps "{defaults[0]}".'
            )

        active_codes = {locale.code for locale in locales}
        default_domains: dict[tuple[str, str], list[str]] = {}
        for domain in domains:
            if domain.locale is None:
                errors.append(f'Domain "{domain.domain}" has no locale.')
                continue
            if domain.locale.code not in active_codes:
                warnings.append(
                    f'Domain "{domain.domain}" points to inactive locale "{domain.locale.code}".'
                )
            if domain.is_default:
                pair = (domain.environment.value, domain.locale.code)
                default_domains.setdefault(pair, []).append(domain.domain)
            if domain.protected and not domain.protected_password_hash:
                warnings.append(f'Domain "{domain.domain}" is protected but has no password.')

        for (environment, locale), hosts in default_domains.items():
            if len(hosts) > 1:
                warnings.append(
                    f'Multiple default domains for "{environment}" and "{locale}": '
                    f'{", ".join(hosts)}.'
                )

        return self._finish(errors, warnings, start_time)

    def _finish(self, errors: list[str], warnings: list[str], start_time: float) -> SelfTestResult:
        result = SelfTestResult(
            success=not errors,
            errors=errors,
            warnings=warnings,
            total_duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        if self._logger:
            self._logger.info(
                COMPONENT,
                "Health check finished",
                {"success": result.success, "errors": len(errors), "warnings": len(warnings)},
            )
        return result


def run_self_test(
    config: SystemConfig,
    repository: LocalizationRepository,
    print_output: bool = True,
    logger: Optional[AuditLogger] = None,
) -> SelfTestResult:
    """Run the health check and optionally print a report."""
    result = SelfTest(config, repository, logger).run()

    if print_output:
        language = config.language
        for error in result.errors:
            print(get_message("check.error", language, message=error))
        for warning in result.warnings:
            print(get_message("check.warning", language, message=warning))
        key = "check.passed" if result.success else "check.failed"
        print(get_message(key, language))

    return result
