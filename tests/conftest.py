"""
Shared pytest fixtures for authgate tests.

This module provides common fixtures including:
- An RSA signing key and a factory for provider-shaped ID tokens
- A mock JWKS client that serves the matching public key
- Configuration objects and a FastAPI test client over the full app
"""

import json
import time
from typing import Any, Callable, Dict, Optional
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

from authgate.config.provider import (
    APIConfig,
    AuthConfig,
    IdentityProviderConfig,
    StaticConfigProvider,
    StorageConfig,
)
from authgate.main import create_app
from authgate.modules.auth.factory import AuthFactory

PROJECT_ID = "dispatch-test"
ISSUER = f"https://securetoken.google.com/{PROJECT_ID}"
KEY_ID = "test-key-1"


@pytest.fixture(scope="session")
def signing_key():
    """RSA key pair standing in for the provider's signing key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def foreign_key():
    """RSA key the provider does not publish."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def make_token(signing_key) -> Callable[..., str]:
    """
    Factory for ID tokens shaped like the provider's.

    Keyword overrides replace claims; an override of None removes the claim.
    Pass ``key=`` to sign with another private key.
    """
    def _make(key=None, **overrides: Any) -> str:
        now = int(time.time())
        claims: Dict[str, Any] = {
            "iss": ISSUER,
            "aud": PROJECT_ID,
            "sub": "uid-123",
            "user_id": "uid-123",
            "email": "pat@example.com",
            "auth_time": now,
            "iat": now,
            "exp": now + 3600,
        }
        claims.update(overrides)
        claims = {k: v for k, v in claims.items() if v is not None}
        return jwt.encode(
            claims, key or signing_key, algorithm="RS256", headers={"kid": KEY_ID}
        )

    return _make


@pytest.fixture
def jwks_client(signing_key):
    """Mock PyJWKClient always returning the provider public key."""
    client = MagicMock()
    published = MagicMock()
    published.key = signing_key.public_key()
    client.get_signing_key_from_jwt.return_value = published
    return client


@pytest.fixture
def credentials_file(tmp_path):
    """Service-account style credential bundle on disk."""
    path = tmp_path / "service-account.json"
    path.write_text(json.dumps({
        "type": "service_account",
        "project_id": PROJECT_ID,
        "client_email": f"firebase-adminsdk@{PROJECT_ID}.iam.gserviceaccount.com",
    }))
    return str(path)


@pytest.fixture
def idp_config(credentials_file):
    """Identity provider configuration pointing at the test bundle."""
    return IdentityProviderConfig(
        enabled=True,
        credentials_file=credentials_file,
        jwks_uri="https://keys.example.com/jwks",
        verify_timeout=2.0,
        cache_ttl=300,
    )


def build_config_provider(idp_config: IdentityProviderConfig) -> StaticConfigProvider:
    """Config provider with cheap hashing for HTTP tests."""
    return StaticConfigProvider(
        identity_provider=idp_config,
        api=APIConfig(),
        auth=AuthConfig(hash_iterations=1000),
        storage=StorageConfig(),
    )


def build_client(idp_config: IdentityProviderConfig, jwks_client: Optional[Any]) -> TestClient:
    config_provider = build_config_provider(idp_config)
    stack = AuthFactory.build(config_provider, jwks_client=jwks_client)
    return TestClient(create_app(config_provider, stack))


@pytest.fixture
def client(idp_config, jwks_client):
    """Test client for the full application with a working provider."""
    with build_client(idp_config, jwks_client) as test_client:
        yield test_client


@pytest.fixture
def unconfigured_client(tmp_path):
    """Test client whose provider credential bundle is missing."""
    idp_config = IdentityProviderConfig(
        enabled=True,
        credentials_file=str(tmp_path / "missing.json"),
    )
    with build_client(idp_config, None) as test_client:
        yield test_client
