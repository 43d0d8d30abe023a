# ==================================================================================
# core/config.py: Budget Tracker Configuration (Pydantic v2 settings)
# ==================================================================================
from typing import List
import logging
import sys

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # ------------------------
    # DATABASE CONFIG
    # ------------------------
    DATABASE_URL: str = "sqlite:///./budget_tracker.db"

    # ------------------------
    # IDENTITY (token verification only)
    # ------------------------
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # ------------------------
    # BUDGET DEFAULTS
    # ------------------------
    DEFAULT_CURRENCY: str = Field(default="JPY", min_length=3, max_length=3)

    # ------------------------
    # HTTP
    # ------------------------
    API_PREFIX: str = "/api/v1"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # ------------------------
    # ENVIRONMENT SETTINGS
    # ------------------------
    ENVIRONMENT: str = "development"  # 'development' | 'production'
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    @field_validator("DEFAULT_CURRENCY")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()

    @property
    def IS_SQLITE(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# ------------------------
# Global Settings Loader
# ------------------------
try:
    settings = Settings()
except ValidationError as e:
    logger.critical("Environment configuration error, missing or invalid settings:\n%s", e)
    sys.exit(1)
