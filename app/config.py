"""
Parenting Anxiety Assessment - Configuration
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Paths
    CONTENT_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent / "content")

    # Environment
    APP_ENV: str = Field(default="production", description="production or development")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: Optional[Path] = Field(default=None)

    # Storage
    STORAGE_BACKEND: str = Field(default="firestore", description="firestore or memory")
    FIREBASE_CREDENTIALS: str = Field(default="", description="Service account JSON")
    FIREBASE_KEY_PATH: Path = Field(default=Path("firebase-key.json"))

    # SMS gateway (SOLAPI)
    SOLAPI_API_KEY: str = Field(default="")
    SOLAPI_API_SECRET: str = Field(default="")
    SOLAPI_SENDER_NUMBER: str = Field(default="")
    SOLAPI_BASE_URL: str = Field(default="https://api.solapi.com")
    SMS_BRAND: str = Field(default="[더나일]")

    # Verification
    OTP_TTL_SECONDS: int = Field(default=180)
    OTP_MAX_ATTEMPTS: int = Field(default=5)
    DEV_VERIFICATION_CODE: str = Field(default="0000")

    # Sharing
    SHARE_TTL_DAYS: int = Field(default=30)

    # Admin
    ADMIN_API_KEY: str = Field(default="", description="Empty disables admin endpoints")

    # API
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
