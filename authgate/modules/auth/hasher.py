"""
Password hashing for self-issued credentials.

PBKDF2-HMAC with a random per-credential salt. The algorithm, iteration count
and output length are returned with every hash so that they can be stored
next to it and old records keep verifying after the defaults change.
"""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from typing import Optional

DEFAULT_ALGORITHM = "sha512"
DEFAULT_ITERATIONS = 100_000
DEFAULT_LENGTH = 64
MIN_SALT_BYTES = 16


@dataclass(frozen=True)
class PasswordHash:
    """Result of hashing a password: hex salt, hex hash and the parameters used."""

    salt: str
    hash: str
    algorithm: str = DEFAULT_ALGORITHM
    iterations: int = DEFAULT_ITERATIONS
    length: int = DEFAULT_LENGTH


class PasswordHasher:
    """
    Deterministic, salted, iterated password hasher.

    The hex-encoded salt string itself is the PBKDF2 salt input, so a stored
    ``(salt, hash)`` pair can be re-derived from the password alone.
    """

    def __init__(
        self,
        algorithm: str = DEFAULT_ALGORITHM,
        iterations: int = DEFAULT_ITERATIONS,
        length: int = DEFAULT_LENGTH,
        salt_bytes: int = MIN_SALT_BYTES,
    ):
        """
        Initialize the hasher.

        Args:
            algorithm: hashlib digest name used as the PBKDF2 PRF
            iterations: PBKDF2 work factor
            length: Derived key length in bytes
            salt_bytes: Random bytes per generated salt (at least 16)

        Raises:
            ValueError: If a parameter is out of range or the digest is unknown
        """
        if salt_bytes < MIN_SALT_BYTES:
            raise ValueError(f"salt_bytes must be at least {MIN_SALT_BYTES}")
        if iterations < 1 or length < 1:
            raise ValueError("iterations and length must be positive")
        if algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")

        self.algorithm = algorithm
        self.iterations = iterations
        self.length = length
        self.salt_bytes = salt_bytes

    @staticmethod
    def _derive(password: str, salt: str, algorithm: str, iterations: int, length: int) -> str:
        return hashlib.pbkdf2_hmac(
            algorithm,
            password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations,
            length,
        ).hex()

    def hash(self, password: str, salt: Optional[str] = None) -> PasswordHash:
        """
        Hash a password.

        Args:
            password: Plain-text password
            salt: Hex salt to reuse; a fresh random salt is generated if omitted

        Returns:
            PasswordHash carrying the salt, the hash and the parameters
        """
        if salt is None:
            salt = secrets.token_hex(self.salt_bytes)

        derived = self._derive(password, salt, self.algorithm, self.iterations, self.length)
        return PasswordHash(
            salt=salt,
            hash=derived,
            algorithm=self.algorithm,
            iterations=self.iterations,
            length=self.length,
        )

    def verify(
        self,
        password: str,
        salt: str,
        expected_hash: str,
        algorithm: Optional[str] = None,
        iterations: Optional[int] = None,
        length: Optional[int] = None,
    ) -> bool:
        """
        Check a password against a stored hash.

        Parameters that are not given fall back to this hasher's own, so
        records created with older parameters must pass theirs explicitly.
        """
        derived = self._derive(
            password,
            salt,
            algorithm or self.algorithm,
            iterations or self.iterations,
            length or self.length,
        )
        # Constant-time comparison for security
        return hmac.compare_digest(derived, expected_hash)

    def needs_rehash(self, record) -> bool:
        """True if ``record`` was hashed with parameters other than the current ones."""
        return (
            record.algorithm != self.algorithm
            or record.iterations != self.iterations
            or record.length != self.length
        )
