"""
Configuration dataclasses for the domain localization system.

This module defines the configuration structures for storage, the snapshot
cache, password hashing and logging, and loads them from the environment
(with .env support) or from a JSON file.
"""

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_STORAGE_PATH = Path.home() / ".domain_localization" / "storage.json"
DEFAULT_HMAC_SECRET = "default-secret-change-me"


@dataclass
class CacheConfig:
    """Snapshot cache configuration."""

    namespace: str = "domain-localization"
    key: str = "configuration"
    ttl_seconds: float = 30 * 60
    maxsize: int = 16


@dataclass
class StorageConfig:
    """Location and integrity secret of the JSON storage file."""

    path: Path = DEFAULT_STORAGE_PATH
    hmac_secret: str = DEFAULT_HMAC_SECRET


@dataclass
class PasswordConfig:
    """Protected domain password hashing parameters."""

    iterations: int = 600_000
    salt_bytes: int = 16


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    passwords: PasswordConfig = field(default_factory=PasswordConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    language: str = "en"  # 'en' or 'cs'


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config_from_env(env_file: Optional[Path] = None) -> SystemConfig:
    """
    Build configuration from environment variables.

    A .env file is loaded first (the given one, or the nearest found);
    variables already set in the process environment take precedence.
    """
    load_dotenv(dotenv_path=env_file)

    storage_path = os.getenv("LOCALIZATION_STORAGE", "").strip()

    return SystemConfig(
        storage=StorageConfig(
            path=Path(storage_path) if storage_path else DEFAULT_STORAGE_PATH,
            hmac_secret=os.getenv("LOCALIZATION_HMAC_SECRET", DEFAULT_HMAC_SECRET),
        ),
        cache=CacheConfig(
            ttl_seconds=_float_env("LOCALIZATION_CACHE_TTL", CacheConfig.ttl_seconds),
        ),
        passwords=PasswordConfig(
            iterations=_int_env("LOCALIZATION_PASSWORD_ITERATIONS", PasswordConfig.iterations),
        ),
        logging=LoggingConfig(
            level=(os.getenv("LOCALIZATION_LOG_LEVEL", "info") or "info").lower(),
            output_format=(os.getenv("LOCALIZATION_LOG_FORMAT", "text") or "text").lower(),
        ),
        language=(os.getenv("LOCALIZATION_LANGUAGE", "en") or "en").lower(),
    )


def load_config_from_file(config_path: Path) -> Optional[SystemConfig]:
    """
    Load configuration from a JSON file.

    Returns:
        SystemConfig if successful, None otherwise
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        storage_data = data.get("storage", {})
        cache_data = data.get("cache", {})
        passwords_data = data.get("passwords", {})
        logging_data = data.get("logging", {})

        storage_path = storage_data.get("path")

        return SystemConfig(
            storage=StorageConfig(
                path=Path(storage_path) if storage_path else DEFAULT_STORAGE_PATH,
                hmac_secret=storage_data.get("hmac_secret", DEFAULT_HMAC_SECRET),
            ),
            cache=CacheConfig(
                namespace=cache_data.get("namespace", CacheConfig.namespace),
                key=cache_data.get("key", CacheConfig.key),
                ttl_seconds=cache_data.get("ttl_seconds", CacheConfig.ttl_seconds),
                maxsize=cache_data.get("maxsize", CacheConfig.maxsize),
            ),
            passwords=PasswordConfig(
                iterations=passwords_data.get("iterations", PasswordConfig.iterations),
                salt_bytes=passwords_data.get("salt_bytes", PasswordConfig.salt_bytes),
            ),
            logging=LoggingConfig(
                level=logging_data.get("level", "info"),
                output_format=logging_data.get("output_format", "text"),
            ),
            language=data.get("language", "en"),
        )

    except (json.JSONDecodeError, KeyError, TypeError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return None
    except FileNotFoundError:
        return None


def save_config_to_file(config: SystemConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "storage": {
                "path": str(config.storage.path),
                "hmac_secret": config.storage.hmac_secret,
            },
            "cache": {
                "namespace": config.cache.namespace,
                "key": config.cache.key,
                "ttl_seconds": config.cache.ttl_seconds,
                "maxsize": config.cache.maxsize,
            },
            "passwords": {
                "iterations": config.passwords.iterations,
                "salt_bytes": config.passwords.salt_bytes,
            },
            "logging": {
                "level": config.logging.level,
                "output_format": config.logging.output_format,
            },
            "language": config.language,
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False
