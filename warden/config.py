"""Configuration settings for Warden."""

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Storage
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./warden.db")
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "sql")  # sql, memory

    # JWT (RS256 key pair, PEM)
    JWT_PRIVATE_KEY_PATH: str = os.getenv("JWT_PRIVATE_KEY_PATH", "keys/private.pem")
    JWT_PUBLIC_KEY_PATH: str = os.getenv("JWT_PUBLIC_KEY_PATH", "keys/public.pem")

    # Accounts
    ADMIN_ID: int = int(os.getenv("ADMIN_ID", "1"))
    PRIVATE_SIGNUP: bool = os.getenv("PRIVATE_SIGNUP", "false").lower() == "true"
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Mail
    MAIL_BACKEND: str = os.getenv("MAIL_BACKEND", "console")  # smtp, console
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_FROM: str = os.getenv("SMTP_FROM", "")
    SITE_NAME: str = os.getenv("SITE_NAME", "Warden")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        errors = []
        for name in ("JWT_PRIVATE_KEY_PATH", "JWT_PUBLIC_KEY_PATH"):
            path = getattr(self, name)
            if not Path(path).is_file():
                errors.append(f"{name} points to a missing file ({path}) - tokens cannot be issued or verified")
        if self.MAIL_BACKEND == "smtp" and not self.SMTP_HOST:
            errors.append("MAIL_BACKEND is 'smtp' but SMTP_HOST is not set")
        if self.STORE_BACKEND not in ("sql", "memory"):
            errors.append(f"Unknown STORE_BACKEND '{self.STORE_BACKEND}' - falling back to 'sql'")
        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
