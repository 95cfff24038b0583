"""
Authentication Module - Black Box Interface

Purpose: Self-issued password sessions and external ID token verification
Interface: SelfIssuedAuthService.signup()/login(), IdTokenVerifier.verify()
Hidden: Hash parameters, token storage, JWKS handling

Either half can be replaced without affecting the other; AuthFactory wires
both from configuration.
"""

from .hasher import PasswordHash, PasswordHasher
from .interfaces import AuditEntry, Claims
from .service import SelfIssuedAuthService
from .verifier import IdTokenVerifier, ProviderInitResult, initialize_provider

__all__ = [
    "AuditEntry",
    "Claims",
    "IdTokenVerifier",
    "PasswordHash",
    "PasswordHasher",
    "ProviderInitResult",
    "SelfIssuedAuthService",
    "initialize_provider",
]
