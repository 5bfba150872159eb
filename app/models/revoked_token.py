"""Denylist of tokens revoked before their natural expiry."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String

from app.database import Base


class RevokedToken(Base):
    """A logged-out token, kept until it would have expired anyway."""

    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    token_type = Column(String(16), nullable=False)  # access, refresh
    expires_at = Column(DateTime, nullable=False, index=True)
    revoked_at = Column(DateTime, nullable=False, default=datetime.utcnow)
