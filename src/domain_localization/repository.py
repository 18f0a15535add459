"""
Storage access for domain and locale records.

The snapshot builder only needs two reads: all domains with their locale
joined, and active locales ordered by position. Both raise
ConfigurationMissing when the backing storage does not exist, which is
distinct from an empty result.

Two implementations are provided: an in-memory repository for embedding and
tests, and an HMAC-protected JSON file repository used by the CLI.
"""

import hashlib
import hmac
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, Protocol, runtime_checkable

from .exceptions import ConfigurationMissing, PersistenceError, TamperingError
from .locale_code import normalize_locale
from .models import DomainRecord, LocaleRecord


@runtime_checkable
class LocalizationRepository(Protocol):
    """Read contract consumed by the snapshot builder and resolver."""

    def list_domains(self) -> list[DomainRecord]:
        """Return every domain record with its locale joined."""
        ...

    def list_active_locales(self) -> list[LocaleRecord]:
        """Return active locale records ordered by position ascending."""
        ...

    def find_locale(self, code: str) -> Optional[LocaleRecord]:
        """Return the locale record for a code, active or not."""
        ...


def sort_by_position(locales: Iterable[LocaleRecord]) -> list[LocaleRecord]:
    """Order locales by position; ties keep storage order."""
    return sorted(locales, key=lambda locale: locale.position)


class InMemoryRepository:
    """
    Repository holding records in process memory.

    Passing provisioned=False simulates storage that was never created, so
    every read raises ConfigurationMissing.
    """

    def __init__(
        self,
        locales: Optional[Iterable[LocaleRecord]] = None,
        domains: Optional[Iterable[DomainRecord]] = None,
        provisioned: bool = True,
    ) -> None:
        self._provisioned = provisioned
        self._locales: list[LocaleRecord] = []
        self._domains: list[DomainRecord] = []
        self.read_count = 0

        for locale in locales or []:
            self.add_locale(locale)
        for domain in domains or []:
            self.add_domain(domain)

    def add_locale(self, locale: LocaleRecord) -> LocaleRecord:
        self._locales.append(locale)
        return locale

    def add_domain(self, domain: DomainRecord) -> DomainRecord:
        self._domains.append(domain)
        if domain.locale is not None and domain not in domain.locale.domains:
            domain.locale.domains.append(domain)
        return domain

    def list_domains(self) -> list[DomainRecord]:
        self._require_provisioned()
        self.read_count += 1
        return list(self._domains)

    def list_active_locales(self) -> list[LocaleRecord]:
        self._require_provisioned()
        return sort_by_position(locale for locale in self._locales if locale.active)

    def find_locale(self, code: str) -> Optional[LocaleRecord]:
        self._require_provisioned()
        code = normalize_locale(code)
        for locale in self._locales:
            if locale.code == code:
                return locale
        return None

    def _require_provisioned(self) -> None:
        if not self._provisioned:
            raise ConfigurationMissing(details={"repository": "memory"})


class JsonFileRepository:
    """
    Repository persisted to a JSON file with HMAC protection.

    A missing file means the storage was never provisioned. A file whose
    HMAC does not match is rejected as tampered.
    """

    VERSION = 1

    def __init__(self, file_path: Path, hmac_secret: str) -> None:
        """
        Initialize the file repository.

        Args:
            file_path: Path to the storage file (JSON format)
            hmac_secret: Secret key for HMAC computation
        """
        self._file_path = file_path
        self._hmac_secret = hmac_secret.encode("utf-8")
        self._locales: Optional[list[LocaleRecord]] = None
        self._domains: Optional[list[DomainRecord]] = None

    @property
    def file_path(self) -> Path:
        return self._file_path

    def exists(self) -> bool:
        return self._file_path.exists()

    def load(self) -> None:
        """
        Load records from file and validate HMAC.

        Raises:
            ConfigurationMissing: If the file does not exist
            TamperingError: If HMAC validation fails
            PersistenceError: If the file cannot be read or parsed
        """
        if not self._file_path.exists():
            raise ConfigurationMissing(details={"file_path": str(self._file_path)})

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Failed to parse storage file: {e}",
                details={"file_path": str(self._file_path)},
            )
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read storage file: {e}",
                details={"file_path": str(self._file_path)},
            )

        stored_hmac = raw_data.get("hmac", "")
        computed_hmac = self.compute_hmac(self._signed_part(raw_data))
        if not hmac.compare_digest(stored_hmac, computed_hmac):
            raise TamperingError(
                code="hmac_mismatch",
                message="HMAC validation failed - storage may have been tampered with",
                details={"file_path": str(self._file_path)},
            )

        locales = [LocaleRecord.from_row(row) for row in raw_data.get("locales", [])]
        locales_by_id = {locale.id: locale for locale in locales}
        domains = []
        for row in raw_data.get("domains", []):
            domain = DomainRecord.from_row(row, locales_by_id)
            if domain.locale is not None:
                domain.locale.domains.append(domain)
            domains.append(domain)

        self._locales = locales
        self._domains = domains

    def initialize(self) -> None:
        """Create empty storage, equivalent to creating the tables."""
        self._locales = []
        self._domains = []
        self.save()

    def save(self) -> None:
        """
        Write records to file with HMAC protection.

        Raises:
            PersistenceError: If nothing is loaded or the file cannot be written
        """
        if self._locales is None or self._domains is None:
            raise PersistenceError(
                code="no_state",
                message="No storage loaded to save",
                details={"file_path": str(self._file_path)},
            )

        data = {
            "version": self.VERSION,
            "locales": [locale.to_row() for locale in self._locales],
            "domains": [self._domain_row(domain) for domain in self._domains],
            "last_updated": datetime.now(timezone.utc).isoformat(),
        }
        data["hmac"] = self.compute_hmac(self._signed_part(data))

        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self._file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write storage file: {e}",
                details={"file_path": str(self._file_path)},
            )

    def add_locale(self, locale: LocaleRecord) -> LocaleRecord:
        self._ensure_loaded()
        self._locales.append(locale)
        return locale

    def add_domain(self, domain: DomainRecord) -> DomainRecord:
        self._ensure_loaded()
        self._domains.append(domain)
        if domain.locale is not None:
            domain.locale.domains.append(domain)
        return domain

    def find_domain(self, hostname: str) -> Optional[DomainRecord]:
        self._ensure_loaded()
        for domain in self._domains:
            if domain.domain == hostname:
                return domain
        return None

    def list_all_locales(self) -> list[LocaleRecord]:
        self._ensure_loaded()
        return list(self._locales)

    def list_domains(self) -> list[DomainRecord]:
        self._ensure_loaded()
        return list(self._domains)

    def list_active_locales(self) -> list[LocaleRecord]:
        self._ensure_loaded()
        return sort_by_position(locale for locale in self._locales if locale.active)

    def find_locale(self, code: str) -> Optional[LocaleRecord]:
        self._ensure_loaded()
        code = normalize_locale(code)
        for locale in self._locales:
            if locale.code == code:
                return locale
        return None

    def compute_hmac(self, data: dict) -> str:
        """Compute HMAC-SHA256 over the canonical JSON form of data."""
        serialized = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hmac.new(
            self._hmac_secret,
            serialized.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def _ensure_loaded(self) -> None:
        if self._locales is None or self._domains is None:
            self.load()

    @staticmethod
    def _signed_part(data: dict) -> dict:
        return {
            "version": data.get("version"),
            "locales": data.get("locales", []),
            "domains": data.get("domains", []),
            "last_updated": data.get("last_updated"),
        }

    @staticmethod
    def _domain_row(domain: DomainRecord) -> dict:
        row = domain.to_row()
        locale = row.pop("locale")
        row["locale_id"] = locale["id"] if locale else None
        return row
