"""
Self-issued authentication service.

Orchestrates signup (store a salted password hash) and login (verify it and
issue an opaque session token). Login failures are deliberately generic: an
unknown email and a wrong password raise the same error.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from ...exceptions import ConflictError, UnauthorizedError, ValidationError
from ..credentials import Credential, normalize_email
from .audit import make_entry
from .hasher import PasswordHasher
from .interfaces import AuditSink, CredentialStore, SessionRegistry

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "invalid credentials"


class SelfIssuedAuthService:
    """
    Username/password authentication backed by injected stores.

    This is a black box that:
    - Hashes passwords off the event loop
    - Relies on the credential store's atomic insert for uniqueness
    - Emits audit entries without waiting for the sink
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        session_registry: SessionRegistry,
        hasher: Optional[PasswordHasher] = None,
        audit_sink: Optional[AuditSink] = None,
    ):
        """
        Initialize with injected dependencies.

        Args:
            credential_store: Store for per-identity credentials
            session_registry: Registry for issued session tokens
            hasher: Password hasher (defaults to PBKDF2-SHA512, 100k iterations)
            audit_sink: Optional audit sink for signup/login events
        """
        self.credentials = credential_store
        self.sessions = session_registry
        self.hasher = hasher or PasswordHasher()
        self.audit_sink = audit_sink

        # Decoy so that unknown emails cost one verification, like known ones
        self._decoy = self.hasher.hash(INVALID_CREDENTIALS)
        self._audit_tasks: Set[asyncio.Task] = set()

    async def signup(self, email: Optional[str], password: Optional[str]) -> None:
        """
        Create a credential for a new identity.

        Args:
            email: Email address (case-insensitive identity key)
            password: Plain-text password

        Raises:
            ValidationError: email or password missing
            ConflictError: a credential already exists for the email
        """
        if not email or not password:
            raise ValidationError("email and password required")

        key = normalize_email(email)
        if await self.credentials.get(key) is not None:
            raise ConflictError("user exists")

        hashed = await asyncio.to_thread(self.hasher.hash, password)
        credential = Credential(
            email=key,
            salt=hashed.salt,
            password_hash=hashed.hash,
            algorithm=hashed.algorithm,
            iterations=hashed.iterations,
            length=hashed.length,
        )

        # The pre-check above can race; the atomic insert decides.
        if not await self.credentials.create(credential):
            logger.info(f"Concurrent signup lost for {key}")
            raise ConflictError("user exists")

        self._audit("user_signup", {"email": key})

    async def login(self, email: Optional[str], password: Optional[str]) -> str:
        """
        Verify a password and issue a session token.

        Args:
            email: Email address
            password: Plain-text password

        Returns:
            Hex session token

        Raises:
            UnauthorizedError: unknown email, wrong password or missing fields
        """
        if not email or not password:
            logger.debug("Login rejected: missing email or password")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        key = normalize_email(email)
        credential = await self.credentials.get(key)

        if credential is None:
            await asyncio.to_thread(
                self.hasher.verify, password, self._decoy.salt, self._decoy.hash
            )
            logger.debug(f"Login rejected for {key}: no credential")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        valid = await asyncio.to_thread(
            self.hasher.verify,
            password,
            credential.salt,
            credential.password_hash,
            credential.algorithm,
            credential.iterations,
            credential.length,
        )
        if not valid:
            logger.debug(f"Login rejected for {key}: password mismatch")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if self.hasher.needs_rehash(credential):
            # Credentials are never rewritten; keep verifying with stored parameters.
            logger.info(f"Credential for {key} uses outdated hash parameters")

        token = await self.sessions.issue(key)
        self._audit("user_login", {"email": key})
        return token

    async def resolve_session(self, token: Optional[str]) -> str:
        """
        Resolve a session token to its email.

        Raises:
            UnauthorizedError: token missing or unknown
        """
        email = await self.sessions.resolve(token) if token else None
        if email is None:
            raise UnauthorizedError()
        return email

    def _audit(self, message: str, metadata: Dict[str, Any]) -> None:
        """Schedule an audit entry; never blocks or fails the caller."""
        if not self.audit_sink:
            return

        task = asyncio.create_task(self._record(make_entry(message, metadata)))
        self._audit_tasks.add(task)
        task.add_done_callback(self._audit_tasks.discard)

    async def _record(self, entry) -> None:
        try:
            await self.audit_sink.record(entry)
        except Exception as e:
            logger.warning(f"Audit sink failed for {entry.message}: {e}")

    async def flush_audit(self) -> None:
        """Wait for scheduled audit entries (shutdown, tests)."""
        if self._audit_tasks:
            await asyncio.gather(*list(self._audit_tasks))
