"""
Request Gate Module - Black Box Interface

Purpose: Guard FastAPI routes with external identity token verification
Interface: RequestGate middleware, create_request_gate(), get_claims()
Hidden: Header parsing, verifier outcomes, error formatting

Self-issued session tokens are never accepted here; only tokens the
external identity provider can verify open a protected route.
"""

import logging
from typing import Dict, List, Optional

from fastapi import Request

from ...exceptions import AuthError, ServiceUnavailableError, UnauthorizedError
from ..api.errors import error_response
from ..auth.interfaces import Claims, TokenVerifier

logger = logging.getLogger(__name__)


class RequestGate:
    """
    Authentication middleware for routes protected by the external provider.

    Configure which paths (and methods) are protected; every other request
    passes through untouched.
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        protected_paths: Optional[Dict[str, List[str]]] = None,
        log_attempts: bool = True,
    ):
        """
        Initialize the request gate.

        Args:
            verifier: External token verifier
            protected_paths: Dict of {path: [methods]} requiring a verified token
            log_attempts: Whether to log authentication attempts
        """
        self.verifier = verifier
        self.protected_paths = protected_paths or {}
        self.log_attempts = log_attempts

    def is_protected(self, request: Request) -> bool:
        """Check if this request must carry a verified token."""
        path = str(request.url.path)
        method = request.method.upper()

        if path in self.protected_paths:
            methods = self.protected_paths[path]
            return "*" in methods or method in methods

        return False

    @staticmethod
    def extract_bearer_token(request: Request) -> Optional[str]:
        """Return the token of an ``Authorization: Bearer <token>`` header, or None."""
        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        scheme, _, token = auth_header.strip().partition(" ")
        if scheme.lower() != "bearer":
            return None

        return token.strip() or None

    async def __call__(self, request: Request, call_next):
        """Process the request through the gate."""
        if not self.is_protected(request):
            return await call_next(request)

        token = self.extract_bearer_token(request)
        if not token:
            if self.log_attempts:
                logger.warning(f"Request to {request.url.path} without bearer token")
            return error_response(UnauthorizedError())

        try:
            claims = await self.verifier.verify(token)
        except ServiceUnavailableError as e:
            logger.error(f"Rejecting {request.url.path}: identity provider unavailable")
            return error_response(e)
        except AuthError:
            if self.log_attempts:
                logger.warning(f"Unverifiable token presented to {request.url.path}")
            return error_response(UnauthorizedError())

        if self.log_attempts:
            logger.info(f"Request authenticated for identity: {claims.identity}")

        # Store claims for downstream use
        request.state.claims = claims
        request.state.identity = claims.identity

        return await call_next(request)


def create_request_gate(
    verifier: TokenVerifier,
    protected_paths: Optional[Dict[str, List[str]]] = None,
) -> RequestGate:
    """
    Factory function to create the request gate.

    Args:
        verifier: External token verifier
        protected_paths: Extra paths to protect {"/path": ["GET", "POST"]}

    Returns:
        Configured RequestGate instance
    """
    default_protected_paths = {
        "/secure": ["GET"],
    }

    if protected_paths:
        default_protected_paths.update(protected_paths)

    return RequestGate(verifier=verifier, protected_paths=default_protected_paths)


def get_claims(request: Request) -> Claims:
    """FastAPI dependency returning the claims attached by the gate."""
    claims = getattr(request.state, "claims", None)
    if claims is None:
        # Route not covered by the gate
        logger.error(f"No verified claims on {request.url.path}; is the route protected?")
        raise UnauthorizedError()
    return claims


__all__ = [
    "RequestGate",
    "create_request_gate",
    "get_claims",
]
