"""Application error taxonomy and the handlers that turn it into JSON responses."""

import logging
from enum import Enum
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("industry_hub")


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "validation_error"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    UNAUTHENTICATED = "unauthenticated"
    INVALID_TOKEN = "invalid_token"
    TOKEN_EXPIRED = "token_expired"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    ACCOUNT_DEACTIVATED = "account_deactivated"
    INCORRECT_PASSWORD = "incorrect_password"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    UNSUPPORTED_INDUSTRY = "unsupported_industry"
    INVALID_INDUSTRY_TYPE = "invalid_industry_type"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL_ERROR = "internal_error"


STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE_EMAIL: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.ACCOUNT_LOCKED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.TOKEN_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_REFRESH_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.ACCOUNT_DEACTIVATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INCORRECT_PASSWORD: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.UNSUPPORTED_INDUSTRY: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INDUSTRY_TYPE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.SERVICE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Invalid credentials and a locked account share one message so callers cannot probe lock state.
DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_ERROR: "Validation failed",
    ErrorCode.DUPLICATE_EMAIL: "User already exists with this email",
    ErrorCode.INVALID_CREDENTIALS: "Invalid credentials",
    ErrorCode.ACCOUNT_LOCKED: "Invalid credentials",
    ErrorCode.UNAUTHENTICATED: "Access denied. No token provided.",
    ErrorCode.INVALID_TOKEN: "Invalid token.",
    ErrorCode.TOKEN_EXPIRED: "Token expired.",
    ErrorCode.INVALID_REFRESH_TOKEN: "Invalid refresh token",
    ErrorCode.ACCOUNT_DEACTIVATED: "Account is deactivated.",
    ErrorCode.INCORRECT_PASSWORD: "Current password is incorrect",
    ErrorCode.FORBIDDEN: "Access denied.",
    ErrorCode.NOT_FOUND: "Resource not found",
    ErrorCode.UNSUPPORTED_INDUSTRY: "Unsupported industry type",
    ErrorCode.INVALID_INDUSTRY_TYPE: "Invalid industry type",
    ErrorCode.SERVICE_UNAVAILABLE: "Database service unavailable. Please try again later.",
    ErrorCode.INTERNAL_ERROR: "Internal server error",
}


class AppError(Exception):
    """Base class for all application errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.code = code
        self.message = message or DEFAULT_MESSAGES[code]
        self.errors = errors or []
        self.headers = headers
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.code]


class TokenError(AppError):
    """A token failed verification. Never retryable with the same token."""


class InvalidTokenError(TokenError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(ErrorCode.INVALID_TOKEN, message)


class TokenExpiredError(TokenError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(ErrorCode.TOKEN_EXPIRED, message)


def error_body(message: str, errors: list[dict[str, str]] | None = None) -> dict[str, Any]:
    """Build the standard failure envelope."""
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as the standard envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.errors),
        headers=exc.headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 400 with field-level errors."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(DEFAULT_MESSAGES[ErrorCode.VALIDATION_ERROR], errors),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (404 route, 405 method) in the standard envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Route {request.url.path} not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for anything unexpected. Internal details stay in the log."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(DEFAULT_MESSAGES[ErrorCode.INTERNAL_ERROR]),
    )
