"""
Domain Localization - locale and environment resolution for multi-domain sites.

This package maps incoming request hostnames to locales and deployment
environments using a cached snapshot of the domain and locale configuration,
and stores multi-locale text values in a single serialized column.
"""

__version__ = "0.1.0"
__author__ = "Domain Localization Team"

from domain_localization.exceptions import (
    LocalizationError,
    ValidationError,
    InvalidLocaleFormat,
    ConfigurationMissing,
    EmptyDomainSet,
    LocaleResolutionFailed,
    ContextLocaleMissing,
    TranslationDecodeError,
    ResolverNotInitialized,
    PersistenceError,
    TamperingError,
)
from domain_localization.enums import (
    Environment,
    Scheme,
    LogLevel,
    DomainValidationErrorCode,
)
from domain_localization.locale_code import (
    LocaleCode,
    normalize_locale,
    is_valid_locale,
)
from domain_localization.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from domain_localization.config import (
    CacheConfig,
    StorageConfig,
    PasswordConfig,
    LoggingConfig,
    SystemConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from domain_localization.passwords import (
    PasswordHasher,
    PasswordVerification,
)
from domain_localization.models import (
    LocaleRecord,
    DomainRecord,
)
from domain_localization.repository import (
    LocalizationRepository,
    InMemoryRepository,
    JsonFileRepository,
)
from domain_localization.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_localization.snapshot import (
    ResolutionSnapshot,
    LocaleDisplay,
    FallbackPolicy,
    build_snapshot,
    no_fallback_policy,
)
from domain_localization.cache import (
    SnapshotCache,
)
from domain_localization.resolver import (
    LocaleResolver,
    RequestSignals,
    extract_request_signals,
)
from domain_localization.context import (
    set_default_resolver,
    use_resolver,
    get_resolver,
    current_locale,
)
from domain_localization.translation import (
    TranslatedValue,
    TranslatedField,
    NO_DATA,
    to_database_value,
    from_database_value,
)
from domain_localization.i18n import (
    get_message,
    get_all_message_keys,
    has_translation,
    get_missing_translations,
    validate_translations,
    TRANSLATIONS,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from domain_localization.cli import (
    main as cli_main,
    create_parser,
)
from domain_localization.self_test import (
    SelfTest,
    SelfTestResult,
    run_self_test,
)

__all__ = [
    # Exceptions
    "LocalizationError",
    "ValidationError",
    "InvalidLocaleFormat",
    "ConfigurationMissing",
    "EmptyDomainSet",
    "LocaleResolutionFailed",
    "ContextLocaleMissing",
    "TranslationDecodeError",
    "ResolverNotInitialized",
    "PersistenceError",
    "TamperingError",
    # Enums
    "Environment",
    "Scheme",
    "LogLevel",
    "DomainValidationErrorCode",
    # Locale codes
    "LocaleCode",
    "normalize_locale",
    "is_valid_locale",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Configuration
    "CacheConfig",
    "StorageConfig",
    "PasswordConfig",
    "LoggingConfig",
    "SystemConfig",
    "load_config_from_env",
    "load_config_from_file",
    "save_config_to_file",
    # Passwords
    "PasswordHasher",
    "PasswordVerification",
    # Models
    "LocaleRecord",
    "DomainRecord",
    # Repository
    "LocalizationRepository",
    "InMemoryRepository",
    "JsonFileRepository",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # Snapshot
    "ResolutionSnapshot",
    "LocaleDisplay",
    "FallbackPolicy",
    "build_snapshot",
    "no_fallback_policy",
    # Cache
    "SnapshotCache",
    # Resolver
    "LocaleResolver",
    "RequestSignals",
    "extract_request_signals",
    # Context
    "set_default_resolver",
    "use_resolver",
    "get_resolver",
    "current_locale",
    # Translation
    "TranslatedValue",
    "TranslatedField",
    "NO_DATA",
    "to_database_value",
    "from_database_value",
    # I18n
    "get_message",
    "get_all_message_keys",
    "has_translation",
    "get_missing_translations",
    "validate_translations",
    "TRANSLATIONS",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # CLI
    "cli_main",
    "create_parser",
    # Self-Test
    "SelfTest",
    "SelfTestResult",
    "run_self_test",
]
