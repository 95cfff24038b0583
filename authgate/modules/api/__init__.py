"""
API Module - Black Box Interface

Purpose: HTTP routing and module orchestration
Interface: REST API endpoints
Hidden: Request parsing, error responses

The API module only orchestrates - it contains no business logic.
All logic is delegated to the auth modules.
"""

from .models import (
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    ProviderStatus,
    SecureResponse,
    SignupRequest,
    SignupResponse,
)

__all__ = [
    "ErrorResponse",
    "LoginRequest",
    "LoginResponse",
    "ProviderStatus",
    "SecureResponse",
    "SignupRequest",
    "SignupResponse",
]
