"""User model and the role/industry enumerations it carries."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.database import Base


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    MODERATOR = "moderator"


class IndustryType(str, Enum):
    """Industry discriminator. Decides which profile table, dashboard and menu apply."""

    TOUR = "tour"
    TRAVEL = "travel"
    LOGISTICS = "logistics"
    OTHER = "other"


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Application user."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default=UserRole.USER.value)
    industry_type = Column(String(16), nullable=False, default=IndustryType.OTHER.value)
    phone = Column(String(20), nullable=True)
    avatar = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def is_locked(self, now: datetime | None = None) -> bool:
        """True while a lockout window is open."""
        now = now or datetime.utcnow()
        return self.lock_until is not None and self.lock_until > now
