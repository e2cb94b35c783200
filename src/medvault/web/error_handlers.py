import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from medvault.errors import (
    AuthenticationError,
    InvalidOrExpiredCodeError,
    IssuanceFailedError,
    NotFoundError,
    RateLimitedError,
    StorageError,
    UserError,
    ValidationError,
    VaultLockedError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: dict[type[UserError], int] = {
    AuthenticationError: 401,
    NotFoundError: 404,
    ValidationError: 400,
    InvalidOrExpiredCodeError: 400,
    VaultLockedError: 423,
    RateLimitedError: 429,
    IssuanceFailedError: 502,
    StorageError: 503,
}


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with their stable kind and a matching status code."""
    if not isinstance(exc, UserError):
        return await general_exception_handler(_, exc)

    status_code = next((code for cls, code in ERROR_STATUS_CODES.items() if isinstance(exc, cls)), 400)
    return create_json_error_response(status_code=status_code, message=str(exc), error_type=exc.kind)


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("Unexpected error: %s", exc)
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
