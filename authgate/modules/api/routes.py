"""
Routers for the authgate API.

Each router is created with the component it serves injected, so the routes
hold no module-level state. Errors are raised as AuthError subclasses and
rendered by the application's exception handlers.
"""

from fastapi import APIRouter, Depends

from ..auth.interfaces import Claims, TokenVerifier
from ..auth.service import SelfIssuedAuthService
from ..middleware import get_claims
from .models import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    ProviderStatus,
    SecureResponse,
    SignupRequest,
    SignupResponse,
)


def create_auth_router(auth_service: SelfIssuedAuthService) -> APIRouter:
    """
    Create the self-issued signup/login router.

    Args:
        auth_service: Self-issued authentication service

    Returns:
        FastAPI router mounted under /auth
    """
    router = APIRouter(prefix="/auth", tags=["auth"])

    @router.post(
        "/signup",
        response_model=SignupResponse,
        status_code=201,
        responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    )
    async def signup(request: SignupRequest) -> SignupResponse:
        """
        Create a credential for a new email.

        Returns:
            201: Credential created (log in separately for a token)
            400: email or password missing
            409: email already registered
        """
        await auth_service.signup(request.email, request.password)
        return SignupResponse(ok=True)

    @router.post(
        "/login",
        response_model=LoginResponse,
        responses={401: {"model": ErrorResponse}},
    )
    async def login(request: LoginRequest) -> LoginResponse:
        """
        Exchange email and password for a session token.

        Returns:
            200: Session token
            401: Invalid credentials (same answer for unknown email and wrong password)
        """
        token = await auth_service.login(request.email, request.password)
        return LoginResponse(token=token)

    return router


def create_secure_router() -> APIRouter:
    """
    Create the example route protected by the request gate.

    Self-issued session tokens are not accepted on these routes.
    """
    router = APIRouter(tags=["secure"])

    @router.get(
        "/secure",
        response_model=SecureResponse,
        responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    )
    async def secure(claims: Claims = Depends(get_claims)) -> SecureResponse:
        return SecureResponse(message=f"Welcome {claims.identity}")

    return router


def create_status_router(verifier: TokenVerifier) -> APIRouter:
    """
    Create the identity provider introspection router.

    Args:
        verifier: External token verifier

    Returns:
        FastAPI router exposing GET /firebase
    """
    router = APIRouter(tags=["status"])

    @router.get("/firebase", response_model=ProviderStatus)
    async def provider_status() -> ProviderStatus:
        """Report whether external token verification is usable."""
        return ProviderStatus(**verifier.status())

    return router
