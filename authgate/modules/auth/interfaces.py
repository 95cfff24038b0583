"""Authentication interfaces following Black Box Design principles."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from ..credentials import Credential


@dataclass(frozen=True)
class Claims:
    """Attributes taken from a verified external identity token."""
    subject: str
    email: Optional[str]
    issuer: Optional[str] = None
    audience: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> str:
        """Email when the token carries one, the subject id otherwise."""
        return self.email or self.subject


@dataclass(frozen=True)
class AuditEntry:
    """One structured audit record."""
    timestamp: str
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class CredentialStore(Protocol):
    """Protocol for credential storage - allows swappable implementations."""

    async def create(self, credential: Credential) -> bool:
        """
        Insert a credential if its normalized email is free.

        Returns:
            True if inserted, False if a credential already exists
        """
        ...

    async def get(self, email: str) -> Optional[Credential]:
        """Get a credential by email, None if absent."""
        ...


class SessionRegistry(Protocol):
    """Protocol for self-issued session storage."""

    async def issue(self, email: str) -> str:
        """Issue a new opaque token bound to email."""
        ...

    async def resolve(self, token: str) -> Optional[str]:
        """Return the email bound to token, None if unknown."""
        ...


class TokenVerifier(Protocol):
    """Protocol for external identity token verification."""

    @property
    def available(self) -> bool:
        """Whether the provider is configured and usable."""
        ...

    async def verify(self, raw_token: Optional[str]) -> Claims:
        """
        Verify a raw bearer token.

        Raises:
            UnauthorizedError: Token missing, invalid, expired or unverifiable
            ServiceUnavailableError: Provider not initialized
        """
        ...

    def status(self) -> Dict[str, Any]:
        """Provider status for introspection endpoints."""
        ...


class AuditSink(Protocol):
    """Protocol for append-only audit sinks."""

    async def record(self, entry: AuditEntry) -> None:
        """Append an entry."""
        ...
