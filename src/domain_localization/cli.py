"""
Command-line interface for the domain localization system.

This module provides the CLI entry point with commands for:
- resolve: Resolve locale and environment for a request URL
- snapshot: Print the resolution snapshot as JSON
- locales / domains: Render the stored locale and domain tables
- check: Run the configuration health check
- init / add-locale / add-domain: Create and fill JSON storage
- verify-password: Check a protected domain password
- config: Configuration file management
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .cache import SnapshotCache
from .config import (
    SystemConfig,
    load_config_from_env,
    load_config_from_file,
    save_config_to_file,
)
from .enums import Environment
from .exceptions import LocalizationError
from .i18n import get_message
from .models import DomainRecord, LocaleRecord
from .passwords import PasswordHasher
from .repository import JsonFileRepository
from .resolver import LocaleResolver
from .self_test import run_self_test


DEFAULT_CONFIG_PATH = Path.home() / ".domain_localization" / "config.json"


def load_config(args: argparse.Namespace) -> Optional[SystemConfig]:
    """Load configuration from --config, falling back to the environment."""
    if getattr(args, "config", None):
        config = load_config_from_file(Path(args.config))
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
        return config
    return load_config_from_env()


def create_logger(config: SystemConfig, verbose: bool = False) -> Optional[AuditLogger]:
    if not verbose:
        return None
    return AuditLogger.from_config(config.logging.level, config.logging.output_format)


def create_repository(config: SystemConfig) -> JsonFileRepository:
    return JsonFileRepository(
        file_path=config.storage.path,
        hmac_secret=config.storage.hmac_secret,
    )


def create_hasher(config: SystemConfig) -> PasswordHasher:
    return PasswordHasher(
        iterations=config.passwords.iterations,
        salt_bytes=config.passwords.salt_bytes,
    )


def render_locale_table(locales: list[LocaleRecord], language: str) -> str:
    lines = [
        get_message("table.locales", language),
        "",
        "| Locale | Default | Active | Position |  Inserted date   |",
        "|--------|---------|--------|----------|------------------|",
    ]
    for locale in locales:
        lines.append(
            "|" + locale.code.center(8)
            + "|" + ("y" if locale.is_default else "n").center(9)
            + "|" + ("y" if locale.active else "n").center(8)
            + "|" + str(locale.position).center(10)
            + "|" + locale.inserted_date.strftime("%Y-%m-%d %H:%M").center(18)
            + "|"
        )
    if not locales:
        lines.append(get_message("table.empty", language))
    return "\n".join(lines)


def render_domain_table(domains: list[DomainRecord], language: str) -> str:
    width = max([len(domain.domain) for domain in domains] + [6]) + 2
    lines = [
        get_message("table.domains", language),
        "",
        "|" + "Domain".center(width) + "| Locale | Environment | Https | Www | Default | Protected |",
        "|" + "-" * width + "|--------|-------------|-------|-----|---------|-----------|",
    ]
    for domain in domains:
        lines.append(
            "|" + domain.domain.center(width)
            + "|" + (domain.locale.code if domain.locale else "-").center(8)
            + "|" + domain.environment.value.center(13)
            + "|" + ("y" if domain.https else "n").center(7)
            + "|" + ("y" if domain.use_www else "n").center(5)
            + "|" + ("y" if domain.is_default else "n").center(9)
            + "|" + ("y" if domain.protected else "n").center(11)
            + "|"
        )
    if not domains:
        lines.append(get_message("table.empty", language))
    return "\n".join(lines)


def cmd_resolve(args: argparse.Namespace) -> int:
    """Handle the 'resolve' command."""
    config = load_config(args)
    if config is None:
        return 1
    language = config.language
    logger = create_logger(config, args.verbose)

    resolver = LocaleResolver(
        repository=create_repository(config),
        cache=SnapshotCache(config.cache, logger),
        logger=logger,
    )
    if args.locale:
        resolver.set_locale(args.locale)
    if args.context_locale:
        resolver.set_context_locale(args.context_locale)

    redirect = resolver.process_request(args.url, response_started=args.response_started)
    if redirect is not None:
        print(get_message("resolve.redirect", language, url=redirect))

    try:
        locale = resolver.resolve_effective_locale(use_context_fallback=args.context_fallback)
    except LocalizationError as e:
        print(get_message("resolve.failed", language), file=sys.stderr)
        print(e.message, file=sys.stderr)
        return 1

    print(get_message("resolve.locale", language, locale=locale))
    print(get_message("resolve.environment", language, environment=resolver.resolve_environment().value))
    if resolver.is_protected():
        print(get_message("resolve.protected", language))
    return 0


def cmd_snapshot(args: argparse.Namespace) -> int:
    """Handle the 'snapshot' command."""
    config = load_config(args)
    if config is None:
        return 1
    logger = create_logger(config, args.verbose)
    resolver = LocaleResolver.for_background(
        repository=create_repository(config),
        cache=SnapshotCache(config.cache, logger),
        logger=logger,
    )
    print(json.dumps(resolver.snapshot().to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_locales(args: argparse.Namespace) -> int:
    """Handle the 'locales' command."""
    config = load_config(args)
    if config is None:
        return 1
    repository = create_repository(config)
    print(render_locale_table(repository.list_all_locales(), config.language))
    return 0


def cmd_domains(args: argparse.Namespace) -> int:
    """Handle the 'domains' command."""
    config = load_config(args)
    if config is None:
        return 1
    repository = create_repository(config)
    print(render_domain_table(repository.list_domains(), config.language))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    config = load_config(args)
    if config is None:
        return 1
    result = run_self_test(
        config=config,
        repository=create_repository(config),
        print_output=True,
        logger=create_logger(config, args.verbose),
    )
    return 0 if result.success else 1


def cmd_init(args: argparse.Namespace) -> int:
    """Handle the 'init' command."""
    config = load_config(args)
    if config is None:
        return 1
    repository = create_repository(config)
    path = repository.file_path
    if repository.exists() and not args.force:
        print(get_message("storage.exists", config.language, path=path))
        return 1
    repository.initialize()
    print(get_message("storage.created", config.language, path=path))
    return 0


def cmd_add_locale(args: argparse.Namespace) -> int:
    """Handle the 'add-locale' command."""
    config = load_config(args)
    if config is None:
        return 1
    repository = create_repository(config)

    locale = LocaleRecord(
        code=args.code,
        active=not args.inactive,
        position=args.position,
        site_name=args.site_name,
        title_suffix=args.title_suffix,
    )
    if repository.find_locale(locale.code) is not None:
        print(f'Error: Locale "{locale.code}" already exists', file=sys.stderr)
        return 1

    existing = repository.list_all_locales()
    if args.default or not existing:
        for other in existing:
            other.set_default(False)
        locale.set_default(True)

    repository.add_locale(locale)
    repository.save()
    print(render_locale_table(repository.list_all_locales(), config.language))
    return 0


def cmd_add_domain(args: argparse.Namespace) -> int:
    """Handle the 'add-domain' command."""
    config = load_config(args)
    if config is None:
        return 1
    repository = create_repository(config)

    locale = repository.find_locale(args.locale)
    if locale is None:
        print(f'Error: Locale "{args.locale}" does not exist', file=sys.stderr)
        return 1

    domain = DomainRecord(
        domain=args.domain,
        locale=locale,
        environment=args.environment,
        https=args.https,
        use_www=args.www,
    )
    if repository.find_domain(domain.domain) is not None:
        print(f'Error: Domain "{domain.domain}" already exists', file=sys.stderr)
        return 1
    if args.password is not None:
        domain.set_protected(True)
        domain.set_password(args.password, create_hasher(config))

    if args.default:
        for other in repository.list_domains():
            if other.environment is domain.environment and other.locale is locale:
                other.set_default(False)
        domain.set_default(True)

    repository.add_domain(domain)
    repository.save()
    print(render_domain_table(repository.list_domains(), config.language))
    return 0


def cmd_verify_password(args: argparse.Namespace) -> int:
    """Handle the 'verify-password' command."""
    config = load_config(args)
    if config is None:
        return 1
    language = config.language
    repository = create_repository(config)

    domain = repository.find_domain(args.domain)
    if domain is None:
        print(get_message("domain.unknown", language, domain=args.domain), file=sys.stderr)
        return 1

    hasher = create_hasher(config)
    verification = domain.verify_password(args.password, hasher)
    if not verification.valid:
        print(get_message("password.invalid", language))
        return 1

    print(get_message("password.valid", language))
    if verification.needs_rehash and domain.apply_rehash(args.password, hasher):
        repository.save()
        print(get_message("password.rehashed", language))
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"No configuration found at: {config_path}")
            print("Use 'config init' to create a default configuration.")
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Language: {config.language}")
        print(f"  Storage: {config.storage.path}")
        print(f"  Cache: {config.cache.namespace}/{config.cache.key} ttl={config.cache.ttl_seconds}s")
        print(f"  Password iterations: {config.passwords.iterations}")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        config = SystemConfig(language=args.language)
        if save_config_to_file(config, config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    elif args.action == "validate":
        config = load_config_from_file(config_path)
        if config is None:
            print(f"Error: Could not load config from {config_path}", file=sys.stderr)
            return 1

        print(f"Configuration at {config_path} is valid.")
        return 0

    return 1


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", "-c",
        help="Path to configuration file (defaults to environment/.env)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable log output",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="domain-localization",
        description="Locale and domain resolution for multi-domain sites",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Resolve locale and environment for a request URL",
    )
    resolve_parser.add_argument("url", help="Absolute request URL (e.g., https://example.com/?locale=cs)")
    resolve_parser.add_argument("--locale", help="Explicit locale override (as set by routing)")
    resolve_parser.add_argument("--context-locale", help="Context locale used as last resort")
    resolve_parser.add_argument(
        "--context-fallback",
        action="store_true",
        help="Fall back to the context locale when nothing else matches",
    )
    resolve_parser.add_argument(
        "--response-started",
        action="store_true",
        help="Pretend the response was already sent (suppresses redirects)",
    )
    _add_common_arguments(resolve_parser)
    resolve_parser.set_defaults(func=cmd_resolve)

    snapshot_parser = subparsers.add_parser("snapshot", help="Print the resolution snapshot as JSON")
    _add_common_arguments(snapshot_parser)
    snapshot_parser.set_defaults(func=cmd_snapshot)

    locales_parser = subparsers.add_parser("locales", help="Render the locale table")
    _add_common_arguments(locales_parser)
    locales_parser.set_defaults(func=cmd_locales)

    domains_parser = subparsers.add_parser("domains", help="Render the domain table")
    _add_common_arguments(domains_parser)
    domains_parser.set_defaults(func=cmd_domains)

    check_parser = subparsers.add_parser("check", help="Run the configuration health check")
    _add_common_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    init_parser = subparsers.add_parser("init", help="Create empty storage")
    init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing storage")
    _add_common_arguments(init_parser)
    init_parser.set_defaults(func=cmd_init)

    add_locale_parser = subparsers.add_parser("add-locale", help="Register a locale")
    add_locale_parser.add_argument("code", help="Two letter locale code (e.g., en)")
    add_locale_parser.add_argument("--default", action="store_true", help="Mark as default locale")
    add_locale_parser.add_argument("--inactive", action="store_true", help="Register as inactive")
    add_locale_parser.add_argument("--position", type=int, default=1, help="Ordering position")
    add_locale_parser.add_argument("--site-name", help="Site name shown for this locale")
    add_locale_parser.add_argument("--title-suffix", help="Page title suffix")
    _add_common_arguments(add_locale_parser)
    add_locale_parser.set_defaults(func=cmd_add_locale)

    add_domain_parser = subparsers.add_parser("add-domain", help="Register a domain")
    add_domain_parser.add_argument("domain", help="Hostname (e.g., example.com or localhost)")
    add_domain_parser.add_argument("--locale", "-l", required=True, help="Locale code of the domain")
    add_domain_parser.add_argument(
        "--environment", "-e",
        choices=[env.value for env in Environment],
        default=Environment.BETA.value,
        help="Deployment environment (default: beta)",
    )
    add_domain_parser.add_argument("--https", action="store_true", help="Serve over https")
    add_domain_parser.add_argument("--www", action="store_true", help="Render links with www. prefix")
    add_domain_parser.add_argument(
        "--default",
        action="store_true",
        help="Default domain for its environment and locale",
    )
    add_domain_parser.add_argument("--password", help="Protect the domain with this password")
    _add_common_arguments(add_domain_parser)
    add_domain_parser.set_defaults(func=cmd_add_domain)

    verify_parser = subparsers.add_parser(
        "verify-password",
        help="Check the password of a protected domain",
    )
    verify_parser.add_argument("domain", help="Hostname of the protected domain")
    verify_parser.add_argument("password", help="Password to verify")
    _add_common_arguments(verify_parser)
    verify_parser.set_defaults(func=cmd_verify_password)

    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument("--path", "-p", help="Path to configuration file")
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.add_argument(
        "--language", "-l",
        choices=["en", "cs"],
        default="en",
        help="Output language for new configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except LocalizationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
