"""
Tests for the request gate middleware.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from authgate.exceptions import AuthError, ServiceUnavailableError, UnauthorizedError
from authgate.modules.api.errors import error_response
from authgate.modules.auth.interfaces import Claims
from authgate.modules.middleware import RequestGate, create_request_gate, get_claims

UNAUTHORIZED_BODY = {"error": "Unauthorized", "status": 401}


@pytest.fixture
def verifier_mock():
    """Create a mock token verifier."""
    verifier = MagicMock()
    verifier.verify = AsyncMock(
        return_value=Claims(subject="uid-1", email="pat@example.com")
    )
    return verifier


@pytest.fixture
def handler_calls():
    return []


@pytest.fixture
def gated_client(verifier_mock, handler_calls):
    """Small app with one protected and one open route."""
    app = FastAPI()
    gate = RequestGate(verifier_mock, protected_paths={"/protected": ["GET"]})

    @app.middleware("http")
    async def gate_middleware(request: Request, call_next):
        return await gate(request, call_next)

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return error_response(exc)

    @app.get("/protected")
    async def protected(claims: Claims = Depends(get_claims)):
        handler_calls.append(claims)
        return {"identity": claims.identity}

    @app.post("/protected")
    async def protected_post():
        return {"posted": True}

    @app.get("/open")
    async def open_route():
        return {"open": True}

    @app.get("/open-with-claims")
    async def open_with_claims(claims: Claims = Depends(get_claims)):
        return {"identity": claims.identity}

    return TestClient(app)


def test_valid_token_reaches_handler(gated_client, verifier_mock, handler_calls):
    """Test verified claims are attached and the handler runs."""
    response = gated_client.get("/protected", headers={"Authorization": "Bearer good-token"})

    assert response.status_code == 200
    assert response.json() == {"identity": "pat@example.com"}
    verifier_mock.verify.assert_awaited_once_with("good-token")
    assert handler_calls[0].subject == "uid-1"


def test_bearer_scheme_is_case_insensitive(gated_client, verifier_mock):
    """Test a lower-case scheme is accepted."""
    response = gated_client.get("/protected", headers={"Authorization": "bearer good-token"})

    assert response.status_code == 200
    verifier_mock.verify.assert_awaited_once_with("good-token")


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": ""},
        {"Authorization": "Bearer"},
        {"Authorization": "Basic dXNlcjpwYXNz"},
        {"Authorization": "good-token"},
    ],
)
def test_missing_or_malformed_header_rejected(gated_client, verifier_mock, handler_calls, headers):
    """Test requests without a bearer token never reach the verifier or handler."""
    response = gated_client.get("/protected", headers=headers)

    assert response.status_code == 401
    assert response.json() == UNAUTHORIZED_BODY
    verifier_mock.verify.assert_not_awaited()
    assert handler_calls == []


@pytest.mark.parametrize(
    "error",
    [
        UnauthorizedError(),
        UnauthorizedError("Invalid ID token: signature mismatch"),
        AuthError("unexpected"),
    ],
)
def test_unverifiable_token_rejected_uniformly(gated_client, verifier_mock, handler_calls, error):
    """Test every verification failure produces the same 401 body."""
    verifier_mock.verify.side_effect = error

    response = gated_client.get("/protected", headers={"Authorization": "Bearer bad-token"})

    assert response.status_code == 401
    assert response.json() == UNAUTHORIZED_BODY
    assert handler_calls == []


def test_unavailable_provider_is_503(gated_client, verifier_mock, handler_calls):
    """Test a provider that failed to initialize answers 503."""
    verifier_mock.verify.side_effect = ServiceUnavailableError()

    response = gated_client.get("/protected", headers={"Authorization": "Bearer any-token"})

    assert response.status_code == 503
    assert response.json() == {"error": "Identity provider unavailable", "status": 503}
    assert handler_calls == []


def test_open_routes_pass_through(gated_client, verifier_mock):
    """Test routes outside the gate need no token."""
    response = gated_client.get("/open")

    assert response.status_code == 200
    verifier_mock.verify.assert_not_awaited()


def test_unprotected_method_passes_through(gated_client, verifier_mock):
    """Test only configured methods are gated."""
    response = gated_client.post("/protected")

    assert response.status_code == 200
    assert response.json() == {"posted": True}
    verifier_mock.verify.assert_not_awaited()


def test_get_claims_without_gate_is_unauthorized(gated_client):
    """Test handlers reading claims on an ungated route fail closed."""
    response = gated_client.get("/open-with-claims", headers={"Authorization": "Bearer good-token"})

    assert response.status_code == 401
    assert response.json() == UNAUTHORIZED_BODY


def test_create_request_gate_defaults(verifier_mock):
    """Test the factory protects /secure and merges extra paths."""
    gate = create_request_gate(verifier_mock, protected_paths={"/dispatch": ["*"]})

    assert gate.protected_paths == {"/secure": ["GET"], "/dispatch": ["*"]}
    assert gate.verifier is verifier_mock
