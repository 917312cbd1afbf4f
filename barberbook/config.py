# barberbook/config.py

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from the environment (and .env when present)."""

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./barberbook.db")

    # Auth
    SECRET_KEY: str = Field(default="change-me-later")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30, ge=1)
    VERIFICATION_TOKEN_EXPIRE_MINUTES: int = Field(default=1440, ge=1)
    GOOGLE_CLIENT_ID: Optional[str] = None
    PUBLIC_BASE_URL: Optional[str] = None

    # Booking
    SLOT_MINUTES: int = Field(default=15, ge=5, le=60)
    DEFAULT_SERVICE_MINUTES: int = Field(default=30, ge=5)
    TIMEZONE: str = Field(default="America/Sao_Paulo")

    # AI flows
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = Field(default="gpt-4o-mini")
    OPENAI_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)

    # Google Maps / outbound HTTP
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    HTTP_TIMEOUT_SECONDS: float = Field(default=8.0, gt=0)

    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
