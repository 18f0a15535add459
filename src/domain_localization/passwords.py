"""
Password hashing for protected (beta) domains.

Passwords are stored as salted PBKDF2-SHA256 hashes in the form
"pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>". Verification never
writes anything: it returns a verdict together with a flag telling the
caller whether the stored hash uses outdated parameters, and rehashing is a
separate explicit call whose result the caller persists.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Optional

from .exceptions import ValidationError


ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 600_000
DEFAULT_SALT_BYTES = 16
MIN_PASSWORD_LENGTH = 5


@dataclass
class PasswordVerification:
    """Outcome of checking a password against a stored hash."""

    valid: bool
    needs_rehash: bool = False


class PasswordHasher:
    """Hashes and verifies domain protection passwords."""

    def __init__(
        self,
        iterations: int = DEFAULT_ITERATIONS,
        salt_bytes: int = DEFAULT_SALT_BYTES,
    ) -> None:
        if iterations < 1:
            raise ValueError(f"Invalid iterations: {iterations}")
        self._iterations = iterations
        self._salt_bytes = salt_bytes

    @property
    def iterations(self) -> int:
        return self._iterations

    def hash(self, password: str) -> str:
        """
        Hash a plaintext password.

        Raises:
            ValidationError: If the password is shorter than MIN_PASSWORD_LENGTH
        """
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                code="password_too_short",
                message=(
                    f"Password must have at least {MIN_PASSWORD_LENGTH} characters, "
                    f"but {len(password)} given."
                ),
                details={"length": len(password)},
            )
        salt = secrets.token_bytes(self._salt_bytes)
        digest = self._derive(password, salt, self._iterations)
        return f"{ALGORITHM}${self._iterations}${salt.hex()}${digest.hex()}"

    def verify(self, password: str, stored_hash: Optional[str]) -> PasswordVerification:
        """
        Check a password against a stored hash.

        Unparsable or missing hashes never verify.
        """
        parsed = self._parse(stored_hash)
        if parsed is None:
            return PasswordVerification(valid=False)

        iterations, salt, expected = parsed
        digest = self._derive(password, salt, iterations)
        if not hmac.compare_digest(digest, expected):
            return PasswordVerification(valid=False)

        return PasswordVerification(
            valid=True,
            needs_rehash=self.needs_rehash(stored_hash),
        )

    def needs_rehash(self, stored_hash: Optional[str]) -> bool:
        """Return True if the hash was produced with other parameters than the current ones."""
        parsed = self._parse(stored_hash)
        if parsed is None:
            return True
        iterations, salt, _ = parsed
        return iterations != self._iterations or len(salt) != self._salt_bytes

    def rehash(self, password: str, stored_hash: Optional[str]) -> Optional[str]:
        """
        Produce a fresh hash for a verified password.

        Returns None when the password does not match the stored hash.
        """
        if not self.verify(password, stored_hash).valid:
            return None
        return self.hash(password)

    @staticmethod
    def _derive(password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt,
            iterations,
        )

    @staticmethod
    def _parse(stored_hash: Optional[str]) -> Optional[tuple[int, bytes, bytes]]:
        if not stored_hash:
            return None
        parts = stored_hash.split("$")
        if len(parts) != 4 or parts[0] != ALGORITHM:
            return None
        try:
            return int(parts[1]), bytes.fromhex(parts[2]), bytes.fromhex(parts[3])
        except ValueError:
            return None
