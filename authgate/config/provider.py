"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

GOOGLE_SECURETOKEN_JWKS_URI = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)
GOOGLE_SECURETOKEN_ISSUER_PREFIX = "https://securetoken.google.com/"

STORE_BACKENDS = ("memory", "redis")


@dataclass
class IdentityProviderConfig:
    """External identity provider configuration."""
    enabled: bool
    credentials_file: Optional[str]
    jwks_uri: str = GOOGLE_SECURETOKEN_JWKS_URI
    issuer_prefix: str = GOOGLE_SECURETOKEN_ISSUER_PREFIX
    verify_timeout: float = 5.0
    cache_ttl: int = 300

    @property
    def is_configured(self) -> bool:
        """Check if a credential bundle has been named."""
        return self.enabled and bool(self.credentials_file)


@dataclass
class APIConfig:
    """API configuration."""
    port: int = 3000
    host: str = "0.0.0.0"
    debug: bool = False
    log_level: str = "INFO"


@dataclass
class AuthConfig:
    """Self-issued authentication configuration."""
    store_backend: str = "memory"
    hash_algorithm: str = "sha512"
    hash_iterations: int = 100_000
    hash_length: int = 64
    salt_bytes: int = 16
    token_bytes: int = 24

    def __post_init__(self):
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store backend {self.store_backend!r}; "
                f"expected one of {', '.join(STORE_BACKENDS)}"
            )


@dataclass
class StorageConfig:
    """Redis storage configuration (only used by the redis backend)."""
    redis_url: str = "redis://localhost:6379/0"


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_identity_provider_config(self) -> IdentityProviderConfig:
        """Get external identity provider configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_auth_config(self) -> AuthConfig:
        """Get self-issued authentication configuration."""
        ...

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration."""
        ...


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_identity_provider_config(self) -> IdentityProviderConfig:
        """Get identity provider configuration from environment variables."""
        return IdentityProviderConfig(
            enabled=_env_flag("IDP_ENABLED", "true"),
            credentials_file=os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None,
            jwks_uri=os.getenv("IDP_JWKS_URI", GOOGLE_SECURETOKEN_JWKS_URI),
            issuer_prefix=os.getenv("IDP_ISSUER_PREFIX", GOOGLE_SECURETOKEN_ISSUER_PREFIX),
            verify_timeout=float(os.getenv("IDP_VERIFY_TIMEOUT", "5.0")),
            cache_ttl=int(os.getenv("IDP_CACHE_TTL", "300")),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=int(os.getenv("API_PORT", os.getenv("PORT", "3000"))),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_env_flag("API_DEBUG", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def get_auth_config(self) -> AuthConfig:
        """Get self-issued authentication configuration from environment variables."""
        return AuthConfig(
            store_backend=os.getenv("AUTH_STORE_BACKEND", "memory").lower(),
            hash_algorithm=os.getenv("HASH_ALGORITHM", "sha512"),
            hash_iterations=int(os.getenv("HASH_ITERATIONS", "100000")),
            hash_length=int(os.getenv("HASH_LENGTH", "64")),
            salt_bytes=int(os.getenv("SALT_BYTES", "16")),
            token_bytes=int(os.getenv("SESSION_TOKEN_BYTES", "24")),
        )

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration from environment variables."""
        return StorageConfig(redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"))


@dataclass
class StaticConfigProvider:
    """Configuration provider holding fixed config objects (tests, embedding)."""
    identity_provider: IdentityProviderConfig
    api: APIConfig
    auth: AuthConfig
    storage: StorageConfig

    def get_identity_provider_config(self) -> IdentityProviderConfig:
        return self.identity_provider

    def get_api_config(self) -> APIConfig:
        return self.api

    def get_auth_config(self) -> AuthConfig:
        return self.auth

    def get_storage_config(self) -> StorageConfig:
        return self.storage
