"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the authentication stack based on configuration
- Wires dependencies together
- Returns the assembled components as one AuthStack
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ...config.provider import ConfigProvider
from ..credentials import InMemoryCredentialStore, RedisCredentialStore
from ..session import InMemorySessionRegistry, RedisSessionRegistry
from .audit import LoggingAuditSink, RedisAuditSink
from .hasher import PasswordHasher
from .interfaces import AuditSink, TokenVerifier
from .service import SelfIssuedAuthService
from .verifier import IdTokenVerifier, initialize_provider

logger = logging.getLogger(__name__)


@dataclass
class AuthStack:
    """The two independent authentication modes plus their audit sink."""
    auth_service: SelfIssuedAuthService
    verifier: TokenVerifier
    audit_sink: Optional[AuditSink] = None


class AuthFactory:
    """
    Factory for building the authentication stack.

    This is the composition root that:
    - Creates all auth components
    - Wires them together via dependency injection
    - Keeps self-issued sessions and provider tokens separate
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        redis_client: Optional[Any] = None,
        jwks_client: Optional[Any] = None,
    ) -> AuthStack:
        """
        Build the complete authentication stack.

        Args:
            config_provider: Configuration provider
            redis_client: Redis client, required when the redis backend is selected
            jwks_client: Optional JWKS client override for the token verifier

        Returns:
            AuthStack with the self-issued service and the token verifier
        """
        auth_config = config_provider.get_auth_config()
        idp_config = config_provider.get_identity_provider_config()

        hasher = PasswordHasher(
            algorithm=auth_config.hash_algorithm,
            iterations=auth_config.hash_iterations,
            length=auth_config.hash_length,
            salt_bytes=auth_config.salt_bytes,
        )

        if auth_config.store_backend == "redis":
            if redis_client is None:
                raise ValueError("Redis store backend selected but no Redis client given")
            logger.info("Building authentication stack with Redis-backed stores")
            credential_store = RedisCredentialStore(redis_client)
            session_registry = RedisSessionRegistry(redis_client, auth_config.token_bytes)
            audit_sink = RedisAuditSink(redis_client)
        else:
            logger.info("Building authentication stack with in-memory stores")
            credential_store = InMemoryCredentialStore()
            session_registry = InMemorySessionRegistry(auth_config.token_bytes)
            audit_sink = LoggingAuditSink()

        auth_service = SelfIssuedAuthService(
            credential_store=credential_store,
            session_registry=session_registry,
            hasher=hasher,
            audit_sink=audit_sink,
        )

        init_result = initialize_provider(idp_config)
        if not init_result.ok:
            logger.warning(f"External token verification unavailable: {init_result.error}")
        verifier = IdTokenVerifier(idp_config, init_result, jwks_client=jwks_client)

        return AuthStack(auth_service=auth_service, verifier=verifier, audit_sink=audit_sink)
