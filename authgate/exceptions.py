"""Authentication exceptions.

These exceptions are raised by the authgate modules and rendered into HTTP
responses by the API layer. The message is what the client sees; internal
causes are logged where the error is raised and never attached here.
"""


class AuthError(Exception):
    """Base exception for all authentication errors."""

    status_code: int = 500

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Raised when a request is missing required fields or is malformed."""

    status_code = 400

    def __init__(self, message: str = "email and password required"):
        super().__init__(message)


class ConflictError(AuthError):
    """Raised when signing up an identity that already has a credential."""

    status_code = 409

    def __init__(self, message: str = "user exists"):
        super().__init__(message)


class UnauthorizedError(AuthError):
    """Raised for bad credentials and for missing or unverifiable tokens."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ServiceUnavailableError(AuthError):
    """Raised when the external identity provider is not usable."""

    status_code = 503

    def __init__(self, message: str = "Identity provider unavailable"):
        super().__init__(message)
