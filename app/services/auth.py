"""Authentication service: registration, login lockout, token rotation, logout."""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

import bcrypt
from sqlalchemy import and_, case, null, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.errors import DEFAULT_MESSAGES, AppError, ErrorCode, TokenError
from app.models.revoked_token import RevokedToken
from app.models.user import IndustryType, User
from app.services.jwt import TokenPair, TokenService, VerifiedToken, get_token_service

logger = logging.getLogger("industry_hub")


def hash_password(plain_password: str, rounds: int = 12) -> str:
    """Hash a plain-text password for storage."""
    # bcrypt only looks at the first 72 bytes
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@dataclass
class AuthResult:
    """Result of an authentication operation."""

    success: bool
    error_code: ErrorCode | None = None
    error: str | None = None
    user: User | None = None
    tokens: TokenPair | None = None
    locked_until: datetime | None = None

    @classmethod
    def fail(cls, code: ErrorCode, message: str | None = None, **kwargs) -> "AuthResult":
        return cls(success=False, error_code=code, error=message or DEFAULT_MESSAGES[code], **kwargs)

    def raise_for_error(self) -> None:
        """Raise the matching AppError if this result is a failure."""
        if self.success:
            return
        headers = None
        if self.error_code == ErrorCode.ACCOUNT_LOCKED and self.locked_until is not None:
            remaining = (self.locked_until - datetime.utcnow()).total_seconds()
            headers = {"Retry-After": str(max(1, math.ceil(remaining)))}
        raise AppError(self.error_code or ErrorCode.INTERNAL_ERROR, self.error, headers=headers)


class AuthService:
    """Handles user registration, login, token refresh and logout."""

    def __init__(self, settings: Settings | None = None, token_service: TokenService | None = None) -> None:
        self.settings = settings or get_settings()
        self.token_service = token_service or (TokenService(settings) if settings else get_token_service())
        self.bcrypt_rounds = self.settings.BCRYPT_ROUNDS
        self.max_attempts = self.settings.MAX_LOGIN_ATTEMPTS
        self.lockout = timedelta(minutes=self.settings.LOCKOUT_MINUTES)
        self._dummy_hash: str | None = None

    def register(
        self,
        db: Session,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone: str | None = None,
        industry_type: IndustryType | str = IndustryType.OTHER,
    ) -> AuthResult:
        """Register a new user and issue a token pair."""
        email = email.strip()
        try:
            existing = db.query(User).filter(User.email == email).first()
        except OperationalError:
            logger.exception("Registration lookup failed: database unavailable")
            db.rollback()
            return AuthResult.fail(ErrorCode.SERVICE_UNAVAILABLE)
        if existing:
            return AuthResult.fail(ErrorCode.DUPLICATE_EMAIL)

        user = User(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            password_hash=hash_password(password, self.bcrypt_rounds),
            phone=phone,
            industry_type=IndustryType(industry_type).value,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Another request registered the same email between lookup and insert
            db.rollback()
            return AuthResult.fail(ErrorCode.DUPLICATE_EMAIL)
        except OperationalError:
            logger.exception("Registration insert failed: database unavailable")
            db.rollback()
            return AuthResult.fail(ErrorCode.SERVICE_UNAVAILABLE)
        db.refresh(user)

        logger.info("User registered user_id=%s industry=%s", user.id, user.industry_type)
        return AuthResult(success=True, user=user, tokens=self.token_service.issue_pair(user))

    def login(self, db: Session, email: str, password: str) -> AuthResult:
        """Authenticate by email and password, applying the lockout policy."""
        user = db.query(User).filter(User.email == email.strip()).first()
        if not user:
            # Spend the same bcrypt time as a real check
            verify_password(password, self._get_dummy_hash())
            logger.info("Login failed: unknown email")
            return AuthResult.fail(ErrorCode.INVALID_CREDENTIALS)

        now = datetime.utcnow()
        if user.is_locked(now):
            logger.warning("Login rejected: account locked user_id=%s until=%s", user.id, user.lock_until)
            return AuthResult.fail(ErrorCode.ACCOUNT_LOCKED, locked_until=user.lock_until)

        if not verify_password(password, user.password_hash):
            self._record_failed_login(db, user, now)
            return AuthResult.fail(ErrorCode.INVALID_CREDENTIALS)

        if not user.is_active:
            logger.info("Login rejected: account deactivated user_id=%s", user.id)
            return AuthResult.fail(ErrorCode.ACCOUNT_DEACTIVATED)

        user.login_attempts = 0
        user.lock_until = None
        user.last_login_at = now
        db.commit()
        db.refresh(user)

        logger.info("User logged in user_id=%s", user.id)
        return AuthResult(success=True, user=user, tokens=self.token_service.issue_pair(user))

    def refresh(self, db: Session, refresh_token: str) -> AuthResult:
        """Exchange a refresh token for a brand-new pair built from the current user row."""
        try:
            verified = self.token_service.verify_refresh(refresh_token)
        except TokenError as exc:
            logger.info("Token refresh rejected: %s", exc.code.value)
            return AuthResult.fail(ErrorCode.INVALID_REFRESH_TOKEN)

        if self.is_revoked(db, verified.jti):
            logger.info("Token refresh rejected: revoked user_id=%s", verified.claims.user_id)
            return AuthResult.fail(ErrorCode.INVALID_REFRESH_TOKEN)

        user = db.get(User, verified.claims.user_id)
        if user is None or not user.is_active:
            logger.info("Token refresh rejected: user missing or inactive user_id=%s", verified.claims.user_id)
            return AuthResult.fail(ErrorCode.INVALID_REFRESH_TOKEN)

        logger.info("Tokens refreshed user_id=%s", user.id)
        return AuthResult(success=True, user=user, tokens=self.token_service.issue_pair(user))

    def resolve_user(self, db: Session, token: str) -> User:
        """Resolve an access token to an active user. Raises AppError on any failure."""
        verified = self.token_service.verify_access(token)
        if self.is_revoked(db, verified.jti):
            raise AppError(ErrorCode.INVALID_TOKEN)

        user = db.get(User, verified.claims.user_id)
        if user is None:
            raise AppError(ErrorCode.INVALID_TOKEN, "Token is not valid. User not found.")
        if not user.is_active:
            raise AppError(ErrorCode.ACCOUNT_DEACTIVATED)
        return user

    def change_password(self, db: Session, user: User, current_password: str, new_password: str) -> AuthResult:
        """Replace the user's password after checking the current one."""
        if not verify_password(current_password, user.password_hash):
            logger.info("Password change rejected: incorrect current password user_id=%s", user.id)
            return AuthResult.fail(ErrorCode.INCORRECT_PASSWORD)
        if current_password == new_password:
            return AuthResult.fail(
                ErrorCode.VALIDATION_ERROR, "New password must be different from current password"
            )

        user.password_hash = hash_password(new_password, self.bcrypt_rounds)
        user.updated_at = datetime.utcnow()
        db.commit()

        logger.info("Password changed user_id=%s", user.id)
        return AuthResult(success=True, user=user)

    def logout(self, db: Session, user: User, access_token: str, refresh_token: str | None = None) -> AuthResult:
        """Revoke the presented tokens until they expire on their own."""
        now = datetime.utcnow()
        self._revoke(db, self.token_service.verify_access(access_token), user.id)

        if refresh_token:
            try:
                verified = self.token_service.verify_refresh(refresh_token)
            except TokenError:
                verified = None
                logger.info("Logout ignored unusable refresh token user_id=%s", user.id)
            if verified is not None and verified.claims.user_id == str(user.id):
                self._revoke(db, verified, user.id)

        db.query(RevokedToken).filter(RevokedToken.expires_at < now).delete(synchronize_session=False)
        db.commit()

        logger.info("User logged out user_id=%s", user.id)
        return AuthResult(success=True, user=user)

    def is_revoked(self, db: Session, jti: str) -> bool:
        return db.get(RevokedToken, jti) is not None

    def _revoke(self, db: Session, verified: VerifiedToken, user_id: str) -> None:
        if self.is_revoked(db, verified.jti):
            return
        db.add(
            RevokedToken(
                jti=verified.jti,
                user_id=str(user_id),
                token_type=verified.token_type,
                expires_at=verified.expires_at,
            )
        )

    def _record_failed_login(self, db: Session, user: User, now: datetime) -> None:
        """Count a failed attempt and lock at the threshold, in a single UPDATE.

        The increment happens in the database so concurrent failures cannot
        overwrite each other. A lock that has already run out restarts the count.
        """
        lock_expired = and_(User.lock_until.is_not(None), User.lock_until <= now)
        attempts = case((lock_expired, 1), else_=User.login_attempts + 1)
        db.execute(
            update(User)
            .where(User.id == user.id)
            .values(
                login_attempts=attempts,
                lock_until=case(
                    (attempts >= self.max_attempts, now + self.lockout),
                    (lock_expired, null()),
                    else_=User.lock_until,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(user)

        if user.is_locked(now):
            logger.warning(
                "Account locked after %d failed attempts user_id=%s until=%s",
                user.login_attempts,
                user.id,
                user.lock_until,
            )
        else:
            logger.info("Login failed: wrong password user_id=%s attempts=%d", user.id, user.login_attempts)

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("dummy-password-for-timing", self.bcrypt_rounds)
        return self._dummy_hash


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
