import logging
import secrets
import threading
from typing import Dict, Optional

from ..credentials import normalize_email

logger = logging.getLogger(__name__)

# 24 random bytes = 192 bits; collisions are not checked at this size.
MIN_TOKEN_BYTES = 24


def _check_token_bytes(token_bytes: int) -> int:
    if token_bytes < MIN_TOKEN_BYTES:
        raise ValueError(f"token_bytes must be at least {MIN_TOKEN_BYTES}")
    return token_bytes


class InMemorySessionRegistry:
    """
    Maps opaque bearer tokens to the email that logged in.

    Issuance only appends; there is no expiry or revocation.
    """

    def __init__(self, token_bytes: int = MIN_TOKEN_BYTES):
        """
        Initialize session registry.

        Args:
            token_bytes: Random bytes per token (hex-encoded, at least 24)
        """
        self.token_bytes = _check_token_bytes(token_bytes)
        self._sessions: Dict[str, str] = {}
        self._lock = threading.Lock()

    async def issue(self, email: str) -> str:
        """
        Issue a new session token for an identity.

        Args:
            email: Identity the session belongs to

        Returns:
            Hex-encoded session token
        """
        token = secrets.token_hex(self.token_bytes)
        with self._lock:
            self._sessions[token] = normalize_email(email)
        return token

    async def resolve(self, token: str) -> Optional[str]:
        """
        Resolve a session token.

        Args:
            token: Session token

        Returns:
            Normalized email or None if the token is unknown
        """
        if not token:
            return None
        with self._lock:
            return self._sessions.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class RedisSessionRegistry:
    """Session registry stored under ``session:token:<token>`` in Redis, without TTL."""

    KEY_PREFIX = "session:token:"

    def __init__(self, redis_client, token_bytes: int = MIN_TOKEN_BYTES):
        """
        Initialize session registry.

        Args:
            redis_client: Async Redis client
            token_bytes: Random bytes per token (hex-encoded, at least 24)
        """
        self.redis = redis_client
        self.token_bytes = _check_token_bytes(token_bytes)

    async def issue(self, email: str) -> str:
        token = secrets.token_hex(self.token_bytes)
        await self.redis.set(f"{self.KEY_PREFIX}{token}", normalize_email(email))
        return token

    async def resolve(self, token: str) -> Optional[str]:
        if not token:
            return None

        email = await self.redis.get(f"{self.KEY_PREFIX}{token}")
        if email is None:
            return None
        return email.decode("utf-8") if isinstance(email, bytes) else email
