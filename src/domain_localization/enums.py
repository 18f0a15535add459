"""
Enumeration types for the domain localization system.

These enums provide type-safe constants for environments, URL schemes,
error codes, and logging levels throughout the system.
"""

from enum import Enum


class Environment(Enum):
    """Deployment stage of a registered domain."""

    LOCALHOST = "localhost"
    BETA = "beta"
    PRODUCTION = "production"


class Scheme(Enum):
    """URL scheme a domain is served with."""

    HTTP = "http"
    HTTPS = "https"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for hostname validation failures."""

    EMPTY_INPUT = "empty_input"
    INVALID_FORMAT = "invalid_format"
    TOO_LONG = "too_long"
    IDNA_ERROR = "idna_error"
