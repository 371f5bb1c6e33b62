"""Translate bridge errors into JSON error responses.

Every error body has the same shape::

    {"detail": "<message>", "code": "<ErrorCode>"}

401 responses also carry ``WWW-Authenticate: Bearer``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from bridge.domain.shared.exceptions import DomainException, ErrorCode
from bridge_auth import AuthError, InvalidSignatureError

logger = logging.getLogger(__name__)

ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    # 400 Bad Request - validation errors
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_DATA: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_EVENT: status.HTTP_400_BAD_REQUEST,
    # 401 Unauthorized - authentication errors
    ErrorCode.INVALID_SIGNATURE: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.SESSION_INVALID: status.HTTP_401_UNAUTHORIZED,
    # 404 Not Found
    ErrorCode.ENTITY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # 409 Conflict
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_LINKED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_LINKED: status.HTTP_409_CONFLICT,
    # 422 Unprocessable Entity - business rule violations
    ErrorCode.BUSINESS_RULE_VIOLATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.LOCKED_ROLE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    # 502/503 - auth provider errors
    ErrorCode.SYNC_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.CONNECTION_ERROR: status.HTTP_503_SERVICE_UNAVAILABLE,
    # 500 Internal Server Error
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: DomainException) -> int:
    return ERROR_CODE_TO_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def _error_response(status_code: int, message: str, code: ErrorCode) -> JSONResponse:
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code.value},
        headers=headers,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the bridge error handlers on ``app``."""

    @app.exception_handler(DomainException)
    async def domain_exception_handler(
        request: Request,
        exc: DomainException,
    ) -> JSONResponse:
        # details go to the log only
        logger.warning(
            "%s %s failed: %s (code=%s, details=%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.code.value,
            exc.details,
        )
        return _error_response(status_for(exc), exc.message, exc.code)

    @app.exception_handler(AuthError)
    async def auth_exception_handler(
        request: Request,
        exc: AuthError,
    ) -> JSONResponse:
        code = (
            ErrorCode.INVALID_SIGNATURE
            if isinstance(exc, InvalidSignatureError)
            else ErrorCode.INVALID_TOKEN
        )
        logger.warning(
            "Rejected request to %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
        )
        return _error_response(status.HTTP_401_UNAUTHORIZED, exc.message, code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception(
            "Unhandled error on %s %s: %s",
            request.method,
            request.url.path,
            exc,
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An internal error occurred",
            ErrorCode.INTERNAL_ERROR,
        )
