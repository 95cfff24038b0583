"""
authgate API data models.

Request bodies accept missing fields so that the service, not the schema,
decides between a 400 on signup and a generic 401 on login.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


# Request Models (API Input)


class CredentialsRequest(BaseModel):
    """Email and password as sent by the signup and login forms."""

    email: Optional[str] = Field(None, description="Email address (case-insensitive)")
    password: Optional[str] = Field(None, description="Plain-text password")

    @field_validator("email", "password")
    @classmethod
    def must_encode_as_utf8(cls, value: Optional[str]) -> Optional[str]:
        # JSON escapes can carry lone surrogates that have no UTF-8 form
        if value is not None:
            try:
                value.encode("utf-8")
            except UnicodeEncodeError:
                raise ValueError("must be valid unicode text")
        return value


class SignupRequest(CredentialsRequest):
    """Request to create a self-issued credential."""


class LoginRequest(CredentialsRequest):
    """Request to log in and obtain a session token."""


# Response Models (API Output)


class SignupResponse(BaseModel):
    """Signup succeeded; the client must log in separately."""

    ok: bool = True


class LoginResponse(BaseModel):
    """Session token issued on login."""

    token: str = Field(..., description="Opaque bearer token for self-issued sessions")


class SecureResponse(BaseModel):
    """Greeting returned by the example protected route."""

    message: str


class ProviderStatus(BaseModel):
    """Whether the external identity provider can verify tokens."""

    initialized: bool
    error: Optional[str] = None
    projectId: Optional[str] = None


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str
    status: int
