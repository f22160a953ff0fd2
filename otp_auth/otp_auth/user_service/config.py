"""
Configuration management for the user service
"""
from functools import lru_cache
from typing import List, Optional
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Known value, only acceptable for local development
DEFAULT_JWT_SECRET = "dev-secret"


class Settings(BaseSettings):
    """User service configuration loaded from environment variables"""

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None
    DEV_MODE: bool = False

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./app.db"

    # Session Tokens
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    TOKEN_TTL_DAYS: int = 7
    COOKIE_SECURE: bool = False

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Build the settings object once per process."""
    return Settings()


def warn_on_insecure_defaults(settings: Settings) -> bool:
    """
    Log a warning when the signing secret is the built-in default.

    Returns:
        bool: True if the insecure default is in use
    """
    if settings.JWT_SECRET == DEFAULT_JWT_SECRET:
        logger.warning(
            "JWT_SECRET is not set; session tokens are signed with the insecure default secret. "
            "Set JWT_SECRET before deploying."
        )
        return True
    return False
