"""
Centralized error handlers for FastAPI.

Maps permission domain errors to HTTP responses.
No stack traces, driver messages or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.permissions.errors import (
    AuthenticationError,
    InvalidPermissionModeError,
    InvalidUserIdError,
    PermissionDomainError,
    PermissionForbiddenError,
    PermissionStoreError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_403 = 403
HTTP_500 = 500


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(AuthenticationError)
    async def handle_authentication(
        _request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle missing or invalid credentials."""
        logger.info("Authentication failed: %s", exc.reason)
        return _error_response(HTTP_401, "Unauthorized")

    @app.exception_handler(PermissionForbiddenError)
    async def handle_forbidden(
        _request: Request, exc: PermissionForbiddenError
    ) -> JSONResponse:
        """Handle admins acting outside their scope."""
        logger.warning("Forbidden: admin=%s user=%s", exc.admin_id, exc.user_id)
        return _error_response(HTTP_403, "Forbidden")

    @app.exception_handler(InvalidPermissionModeError)
    async def handle_invalid_mode(
        _request: Request, exc: InvalidPermissionModeError
    ) -> JSONResponse:
        """Handle unknown permission modes."""
        logger.warning("Invalid permission mode: %r", exc.value)
        return _error_response(HTTP_400, "Invalid payload")

    @app.exception_handler(InvalidUserIdError)
    async def handle_invalid_user_id(
        _request: Request, exc: InvalidUserIdError
    ) -> JSONResponse:
        """Handle empty user identifiers."""
        logger.warning("Invalid user id")
        return _error_response(HTTP_400, "Invalid payload")

    @app.exception_handler(PermissionStoreError)
    async def handle_store_failure(
        _request: Request, exc: PermissionStoreError
    ) -> JSONResponse:
        """Handle storage failures the resolver could not recover from."""
        logger.error("Permission store error: %s", exc.message)
        return _error_response(HTTP_500, "Permission lookup failed")

    @app.exception_handler(PermissionDomainError)
    async def handle_permission_domain(
        _request: Request, exc: PermissionDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled permission domain errors."""
        logger.error("Unhandled permission domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
