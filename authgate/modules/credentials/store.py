import json
import logging
import threading
from dataclasses import asdict, dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Identity key for an email: lower-cased, nothing else."""
    return email.lower()


@dataclass(frozen=True)
class Credential:
    """Stored proof of a password for one identity, with its hash parameters."""

    email: str
    salt: str
    password_hash: str
    algorithm: str
    iterations: int
    length: int

    def normalized(self) -> "Credential":
        key = normalize_email(self.email)
        if key == self.email:
            return self
        return Credential(**{**asdict(self), "email": key})

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: str) -> "Credential":
        return cls(**json.loads(data))


class InMemoryCredentialStore:
    """
    Process-local credential store.

    Empty at start, lives as long as the process. Check-and-insert runs under
    one lock so two signups for the same email cannot both succeed.
    """

    def __init__(self):
        self._credentials: Dict[str, Credential] = {}
        self._lock = threading.Lock()

    async def create(self, credential: Credential) -> bool:
        """
        Insert a credential unless one exists for the same email.

        Args:
            credential: Credential to store

        Returns:
            True if inserted, False if the email already has a credential
        """
        credential = credential.normalized()

        with self._lock:
            if credential.email in self._credentials:
                return False
            self._credentials[credential.email] = credential
        return True

    async def get(self, email: str) -> Optional[Credential]:
        """Get the credential for an email, or None."""
        with self._lock:
            return self._credentials.get(normalize_email(email))

    def __len__(self) -> int:
        with self._lock:
            return len(self._credentials)


class RedisCredentialStore:
    """
    Redis-backed credential store.

    Each credential is one JSON value under ``credential:<email>``, written
    with SET NX so the insert is atomic across API processes.
    """

    KEY_PREFIX = "credential:"

    def __init__(self, redis_client):
        """
        Initialize credential store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
        """
        self.redis = redis_client

    def _key(self, email: str) -> str:
        return f"{self.KEY_PREFIX}{normalize_email(email)}"

    async def create(self, credential: Credential) -> bool:
        credential = credential.normalized()
        created = await self.redis.set(self._key(credential.email), credential.to_json(), nx=True)
        return bool(created)

    async def get(self, email: str) -> Optional[Credential]:
        data = await self.redis.get(self._key(email))
        if not data:
            return None

        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            return Credential.from_json(data)
        except (ValueError, TypeError) as e:
            logger.error(f"Corrupt credential record for {normalize_email(email)}: {e}")
            return None
