"""
External identity token verifier.

Verifies ID tokens issued by the external identity provider (Firebase
Authentication by default) against the provider's published JWKS. The
provider is initialized once from a service-account credential bundle; the
outcome is kept as a ProviderInitResult so a broken setup turns into a typed
"unavailable" answer on every call instead of an exception.
"""

import asyncio
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import jwt
from jwt import PyJWKClient

from ...config.provider import IdentityProviderConfig
from ...exceptions import ServiceUnavailableError, UnauthorizedError
from .interfaces import Claims

logger = logging.getLogger(__name__)

ALGORITHMS = ["RS256"]
JWKS_KEY_LIFESPAN = 3600
CACHE_MAX_ENTRIES = 10000


@dataclass(frozen=True)
class ProviderInitResult:
    """Outcome of loading the identity provider credential bundle."""
    ok: bool
    project_id: Optional[str] = None
    error: Optional[str] = None
    credentials_file: Optional[str] = None

    @classmethod
    def failed(cls, error: str, credentials_file: Optional[str] = None) -> "ProviderInitResult":
        return cls(ok=False, error=error, credentials_file=credentials_file)


def initialize_provider(config: IdentityProviderConfig) -> ProviderInitResult:
    """
    Load the provider credential bundle.

    Args:
        config: Identity provider configuration

    Returns:
        ProviderInitResult; never raises
    """
    if not config.enabled:
        return ProviderInitResult.failed("Identity provider disabled")

    path = config.credentials_file
    if not path:
        return ProviderInitResult.failed("No credential bundle configured")

    if not os.path.exists(path):
        msg = f"Credential file not found: {path}"
        logger.error(msg)
        return ProviderInitResult.failed(msg, path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            bundle = json.load(f)
    except (OSError, ValueError) as e:
        msg = f"Cannot read credential file {path}: {e}"
        logger.error(msg)
        return ProviderInitResult.failed(msg, path)

    project_id = bundle.get("project_id") if isinstance(bundle, dict) else None
    if not project_id:
        msg = f"Credential file {path} has no project_id"
        logger.error(msg)
        return ProviderInitResult.failed(msg, path)

    logger.info(f"Identity provider initialized for project {project_id} from {path}")
    return ProviderInitResult(ok=True, project_id=project_id, credentials_file=path)


class IdTokenVerifier:
    """
    Validates provider ID tokens.

    This class is a black box that:
    - Validates JWT signatures via the provider JWKS
    - Verifies audience, issuer and expiry claims
    - Caches validation results until shortly before expiry
    """

    def __init__(
        self,
        config: IdentityProviderConfig,
        init_result: ProviderInitResult,
        jwks_client: Optional[Any] = None,
    ):
        """
        Initialize verifier with injected config.

        Args:
            config: Identity provider configuration
            init_result: Result of initialize_provider()
            jwks_client: Optional pre-built JWKS client (tests)
        """
        self.config = config
        self.init_result = init_result
        self.project_id = init_result.project_id
        self.audience = init_result.project_id
        self.issuer = f"{config.issuer_prefix}{init_result.project_id}" if init_result.ok else None
        self.timeout = config.verify_timeout
        self.cache_ttl = config.cache_ttl

        self.jwks_client = jwks_client
        if self.jwks_client is None and init_result.ok:
            try:
                self.jwks_client = PyJWKClient(
                    config.jwks_uri,
                    cache_keys=True,
                    lifespan=JWKS_KEY_LIFESPAN,
                    timeout=config.verify_timeout,
                )
            except Exception as e:
                logger.warning(f"Failed to initialize JWKS client: {e}")
                self.init_result = ProviderInitResult.failed(
                    f"JWKS client initialization failed: {e}", init_result.credentials_file
                )

        # token -> (claims, expires_at), in insertion order
        self.cache: Dict[str, Tuple[Claims, float]] = {}
        self.cache_max_entries = CACHE_MAX_ENTRIES

    @property
    def available(self) -> bool:
        return self.init_result.ok and self.jwks_client is not None

    def status(self) -> Dict[str, Any]:
        """Provider status for the introspection endpoint."""
        return {
            "initialized": self.available,
            "error": self.init_result.error,
            "projectId": self.project_id,
        }

    async def verify(self, raw_token: Optional[str]) -> Claims:
        """
        Verify a provider ID token.

        Args:
            raw_token: Token string (with or without Bearer prefix)

        Returns:
            Claims of the verified token

        Raises:
            UnauthorizedError: Token missing, malformed, expired, unverifiable or timed out
            ServiceUnavailableError: Provider not initialized
        """
        token = (raw_token or "").strip()
        scheme, _, rest = token.partition(" ")
        if scheme.lower() == "bearer":
            token = rest.strip()

        if not token:
            logger.debug("Empty token rejected")
            raise UnauthorizedError()

        if not self.available:
            logger.warning(f"Token verification refused: {self.init_result.error}")
            raise ServiceUnavailableError()

        cached = self._cached(token)
        if cached is not None:
            return cached

        try:
            payload = await asyncio.wait_for(
                asyncio.to_thread(self._decode, token), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Token verification timed out after {self.timeout}s")
            raise UnauthorizedError()
        except jwt.PyJWKClientError as e:
            logger.warning(f"Could not obtain signing key: {e}")
            raise UnauthorizedError()
        except jwt.ExpiredSignatureError:
            logger.debug("ID token expired")
            raise UnauthorizedError()
        except jwt.InvalidAudienceError:
            logger.debug(f"Invalid audience in ID token (expected {self.audience})")
            raise UnauthorizedError()
        except jwt.InvalidIssuerError:
            logger.debug(f"Invalid issuer in ID token (expected {self.issuer})")
            raise UnauthorizedError()
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid ID token: {e}")
            raise UnauthorizedError()
        except Exception as e:
            logger.error(f"Unexpected error validating ID token: {e}")
            raise UnauthorizedError()

        claims = self.extract_claims(payload)
        if not claims.subject:
            logger.debug("ID token has an empty subject")
            raise UnauthorizedError()

        self._store(token, claims, payload.get("exp"))
        return claims

    def _decode(self, token: str) -> Dict[str, Any]:
        """Fetch the signing key and decode; runs in a worker thread."""
        signing_key = self.jwks_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=ALGORITHMS,
            audience=self.audience,
            issuer=self.issuer,
            options={
                "verify_signature": True,
                "verify_aud": True,
                "verify_iss": True,
                "verify_exp": True,
                "require": ["exp", "iat", "sub"],
            },
        )

    def _cached(self, token: str) -> Optional[Claims]:
        entry = self.cache.get(token)
        if entry is None:
            return None
        claims, expires_at = entry
        if time.time() < expires_at:
            return claims
        self.cache.pop(token, None)
        return None

    def _store(self, token: str, claims: Claims, exp: Any) -> None:
        if self.cache_ttl <= 0:
            return
        now = time.time()
        expires_at = now + self.cache_ttl
        if isinstance(exp, (int, float)):
            expires_at = min(expires_at, float(exp))
        if len(self.cache) >= self.cache_max_entries:
            self._prune(now)
        self.cache[token] = (claims, expires_at)

    def _prune(self, now: float) -> None:
        """Drop expired entries, then the oldest ones if the cache is still full."""
        for token in [t for t, (_, expires_at) in self.cache.items() if expires_at <= now]:
            del self.cache[token]
        overflow = len(self.cache) - self.cache_max_entries + 1
        for token in list(self.cache)[:max(overflow, 0)]:
            del self.cache[token]

    @staticmethod
    def extract_claims(payload: Dict[str, Any]) -> Claims:
        """Build standardized claims from a decoded token payload."""
        return Claims(
            subject=payload.get("sub") or payload.get("user_id") or "",
            email=payload.get("email"),
            issuer=payload.get("iss"),
            audience=payload.get("aud"),
            raw=dict(payload),
        )
