"""Error response formatting shared by the routers, handlers and middleware."""

from typing import Any, Dict

from fastapi.responses import JSONResponse

from ...exceptions import AuthError


def format_error(status_code: int, message: str) -> Dict[str, Any]:
    """Format an error body."""
    return {
        "error": message,
        "status": status_code,
    }


def error_response(exc: AuthError) -> JSONResponse:
    """Render an AuthError as a JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error(exc.status_code, exc.message),
    )
