"""JWT Token Service."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from app.config import Settings, get_settings
from app.errors import InvalidTokenError, TokenExpiredError

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims carried by both tokens of a pair."""

    user_id: str
    email: str
    role: str
    industry_type: str

    @classmethod
    def from_user(cls, user) -> "TokenClaims":
        return cls(user_id=str(user.id), email=user.email, role=user.role, industry_type=user.industry_type)


@dataclass(frozen=True)
class VerifiedToken:
    """A token that passed signature and expiry checks."""

    claims: TokenClaims
    jti: str
    token_type: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Handles JWT token creation and validation.

    Access and refresh tokens are signed with different secrets, so neither can
    be verified as the other. Every token gets a fresh ``jti``; two tokens issued
    from identical claims in the same second still differ.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.access_secret = settings.JWT_SECRET_KEY
        self.refresh_secret = settings.JWT_REFRESH_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.access_ttl = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        self.refresh_ttl = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    def issue_access_token(self, claims: TokenClaims, expires_delta: timedelta | None = None) -> str:
        """Sign an access token for the given claims."""
        return self._encode(claims, self.access_secret, expires_delta or self.access_ttl, ACCESS)

    def issue_refresh_token(self, claims: TokenClaims, expires_delta: timedelta | None = None) -> str:
        """Sign a refresh token for the given claims."""
        return self._encode(claims, self.refresh_secret, expires_delta or self.refresh_ttl, REFRESH)

    def issue_pair(self, user) -> TokenPair:
        """Issue an access/refresh pair from one snapshot of the user's claims."""
        claims = TokenClaims.from_user(user)
        return TokenPair(
            access_token=self.issue_access_token(claims),
            refresh_token=self.issue_refresh_token(claims),
        )

    def verify_access(self, token: str) -> VerifiedToken:
        """Verify an access token. Raises InvalidTokenError or TokenExpiredError."""
        return self._decode(token, self.access_secret, ACCESS)

    def verify_refresh(self, token: str) -> VerifiedToken:
        """Verify a refresh token. Raises InvalidTokenError or TokenExpiredError."""
        return self._decode(token, self.refresh_secret, REFRESH)

    def _encode(self, claims: TokenClaims, secret: str, ttl: timedelta, token_type: str) -> str:
        now = datetime.utcnow()
        payload: dict[str, Any] = {
            "sub": claims.user_id,
            "email": claims.email,
            "role": claims.role,
            "industryType": claims.industry_type,
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _decode(self, token: str, secret: str, token_type: str) -> VerifiedToken:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredError() from None
        except JWTError:
            raise InvalidTokenError() from None

        if payload.get("type") != token_type:
            raise InvalidTokenError()
        try:
            claims = TokenClaims(
                user_id=str(payload["sub"]),
                email=payload["email"],
                role=payload["role"],
                industry_type=payload["industryType"],
            )
            jti = str(payload["jti"])
            expires_at = datetime.utcfromtimestamp(int(payload["exp"]))
        except (KeyError, TypeError, ValueError):
            raise InvalidTokenError() from None

        return VerifiedToken(claims=claims, jti=jti, token_type=token_type, expires_at=expires_at)


_token_service: TokenService | None = None


def get_token_service() -> TokenService:
    """Get singleton token service instance."""
    global _token_service
    if _token_service is None:
        _token_service = TokenService()
    return _token_service
