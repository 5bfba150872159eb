"""Configuration settings for Industry Hub."""

import os
import secrets
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded once from environment variables."""

    # Database
    DATABASE_URL: str = "sqlite:///./industry_hub.db"

    # JWT
    JWT_SECRET_KEY: str = ""
    JWT_REFRESH_SECRET_KEY: str = ""
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # Credentials and lockout
    BCRYPT_ROUNDS: int = 12
    MAX_LOGIN_ATTEMPTS: int = 5
    LOCKOUT_MINUTES: int = 120

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Set when a secret was missing from the environment and generated for this process
    GENERATED_SECRETS: tuple[str, ...] = ()

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the current environment."""
        generated = []
        access_secret = os.getenv("JWT_SECRET_KEY", "")
        if not access_secret:
            access_secret = secrets.token_urlsafe(32)
            generated.append("JWT_SECRET_KEY")
        refresh_secret = os.getenv("JWT_REFRESH_SECRET_KEY", "")
        if not refresh_secret:
            refresh_secret = secrets.token_urlsafe(32)
            generated.append("JWT_REFRESH_SECRET_KEY")

        return cls(
            DATABASE_URL=os.getenv("DATABASE_URL", cls.DATABASE_URL),
            JWT_SECRET_KEY=access_secret,
            JWT_REFRESH_SECRET_KEY=refresh_secret,
            JWT_ALGORITHM=os.getenv("JWT_ALGORITHM", cls.JWT_ALGORITHM),
            ACCESS_TOKEN_EXPIRE_MINUTES=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")),
            REFRESH_TOKEN_EXPIRE_DAYS=int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "30")),
            BCRYPT_ROUNDS=int(os.getenv("BCRYPT_ROUNDS", "12")),
            MAX_LOGIN_ATTEMPTS=int(os.getenv("MAX_LOGIN_ATTEMPTS", "5")),
            LOCKOUT_MINUTES=int(os.getenv("LOCKOUT_MINUTES", "120")),
            APP_ENV=os.getenv("APP_ENV", cls.APP_ENV),
            DEBUG=os.getenv("DEBUG", "false").lower() == "true",
            LOG_LEVEL=os.getenv("LOG_LEVEL", cls.LOG_LEVEL).upper(),
            GENERATED_SECRETS=tuple(generated),
        )

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def access_cookie_max_age(self) -> int:
        """Cookie lifetime in seconds, always equal to the access token lifetime."""
        return self.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def validate(self) -> list[str]:
        """Validate settings and return list of problems."""
        errors = []
        for name in self.GENERATED_SECRETS:
            errors.append(f"{name} is not set - using auto-generated key (not persistent across restarts)")
        if self.JWT_SECRET_KEY == self.JWT_REFRESH_SECRET_KEY:
            errors.append("JWT_SECRET_KEY and JWT_REFRESH_SECRET_KEY must differ")
        if self.ACCESS_TOKEN_EXPIRE_MINUTES < 1:
            errors.append("ACCESS_TOKEN_EXPIRE_MINUTES must be at least 1")
        if self.REFRESH_TOKEN_EXPIRE_DAYS < 1:
            errors.append("REFRESH_TOKEN_EXPIRE_DAYS must be at least 1")
        if self.BCRYPT_ROUNDS < 4 or self.BCRYPT_ROUNDS > 31:
            errors.append("BCRYPT_ROUNDS must be between 4 and 31")
        if self.MAX_LOGIN_ATTEMPTS < 1:
            errors.append("MAX_LOGIN_ATTEMPTS must be at least 1")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
