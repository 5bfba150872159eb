"""Authentication dependencies for FastAPI routes."""

import logging
from collections.abc import Callable

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.errors import AppError, ErrorCode
from app.models.user import IndustryType, User, UserRole
from app.services.auth import get_auth_service

logger = logging.getLogger("industry_hub")

AUTH_COOKIE_NAME = "access_token"


def extract_token(request: Request) -> str | None:
    """Bearer token from the Authorization header, falling back to the auth cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(AUTH_COOKIE_NAME) or None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """Resolve the authenticated user and bind it to the request. Raises 401 if missing or invalid."""
    token = extract_token(request)
    if not token:
        raise AppError(ErrorCode.UNAUTHENTICATED)

    try:
        user = get_auth_service().resolve_user(db, token)
    except AppError as exc:
        logger.info("Authentication rejected on %s: %s", request.url.path, exc.code.value)
        raise

    request.state.user = user
    request.state.access_token = token
    return user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User | None:
    """Like get_current_user, but any failure means an anonymous caller."""
    token = extract_token(request)
    if not token:
        return None

    try:
        user = get_auth_service().resolve_user(db, token)
    except AppError:
        return None

    request.state.user = user
    request.state.access_token = token
    return user


def require_roles(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory: the current user must hold one of the given roles."""
    allowed = {role.value for role in roles}

    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise AppError(ErrorCode.FORBIDDEN, f"Access denied. Required role: {' or '.join(sorted(allowed))}")
        return user

    return dependency


def require_industry(*industries: IndustryType) -> Callable[..., User]:
    """Dependency factory: the current user's industry type must be one of the given ones."""
    allowed = {industry.value for industry in industries}

    def dependency(user: User = Depends(get_current_user)) -> User:
        if user.industry_type not in allowed:
            raise AppError(
                ErrorCode.FORBIDDEN, "Access denied. This feature is not available for your industry type."
            )
        return user

    return dependency


def set_auth_cookie(response: Response, token: str) -> None:
    """Set the access token cookie. Lifetime matches the access token's own expiry."""
    settings = get_settings()
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
        max_age=settings.access_cookie_max_age,
    )


def clear_auth_cookie(response: Response) -> None:
    """Clear the access token cookie."""
    settings = get_settings()
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        httponly=True,
        samesite="strict",
        secure=settings.is_production,
    )
