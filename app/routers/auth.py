"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import clear_auth_cookie, get_current_user, get_optional_user, set_auth_cookie
from app.errors import AppError, ErrorCode
from app.models.user import User
from app.rate_limit import limiter
from app.schemas.auth import (
    AuthPayload,
    ChangePasswordRequest,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPairResponse,
    UserPayload,
    UserResponse,
)
from app.schemas.common import ApiResponse, MessageResponse
from app.services.auth import AuthResult, get_auth_service

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _auth_payload(result: AuthResult) -> AuthPayload:
    return AuthPayload(
        user=UserResponse.model_validate(result.user),
        access_token=result.tokens.access_token,  # type: ignore[union-attr]
        refresh_token=result.tokens.refresh_token,  # type: ignore[union-attr]
    )


@router.post("/register", response_model=ApiResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[AuthPayload]:
    """Register a new user account and start a session."""
    auth_service = get_auth_service()
    result = auth_service.register(
        db,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
        phone=body.phone,
        industry_type=body.industry_type,
    )
    result.raise_for_error()

    set_auth_cookie(response, result.tokens.access_token)  # type: ignore[union-attr]
    return ApiResponse(message="User registered successfully", data=_auth_payload(result))


@router.post("/login", response_model=ApiResponse[AuthPayload])
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[AuthPayload]:
    """Authenticate and receive a token pair."""
    auth_service = get_auth_service()
    result = auth_service.login(db, body.email, body.password)
    result.raise_for_error()

    set_auth_cookie(response, result.tokens.access_token)  # type: ignore[union-attr]
    return ApiResponse(message="Login successful", data=_auth_payload(result))


@router.post("/refresh", response_model=ApiResponse[TokenPairResponse])
@limiter.limit("30/minute")
def refresh(
    request: Request,
    response: Response,
    body: RefreshRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[TokenPairResponse]:
    """Exchange a refresh token for a new pair and rotate the access cookie."""
    if not body.refresh_token:
        raise AppError(ErrorCode.INVALID_REFRESH_TOKEN, "Refresh token is required")

    auth_service = get_auth_service()
    result = auth_service.refresh(db, body.refresh_token)
    result.raise_for_error()

    tokens = result.tokens
    set_auth_cookie(response, tokens.access_token)  # type: ignore[union-attr]
    return ApiResponse(
        message="Tokens refreshed successfully",
        data=TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token),  # type: ignore[union-attr]
    )


@router.get("/me", response_model=ApiResponse[UserPayload])
def me(user: User | None = Depends(get_optional_user)) -> ApiResponse[UserPayload]:
    """Return the current user if the caller is authenticated."""
    if user is None:
        raise AppError(ErrorCode.UNAUTHENTICATED, "Not authenticated")
    return ApiResponse(data=UserPayload(user=UserResponse.model_validate(user)))


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Change the current user's password."""
    auth_service = get_auth_service()
    result = auth_service.change_password(db, user, body.current_password, body.new_password)
    result.raise_for_error()
    return MessageResponse(message="Password changed successfully")


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    body: LogoutRequest | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Revoke the current tokens and clear the access cookie."""
    auth_service = get_auth_service()
    auth_service.logout(
        db,
        user,
        access_token=request.state.access_token,
        refresh_token=body.refresh_token if body else None,
    )
    clear_auth_cookie(response)
    return MessageResponse(message="Logout successful")
