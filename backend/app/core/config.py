# backend/app/core/config.py
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: str = Field(default="development", alias="ENVIRONMENT")
    api_prefix: str = Field(default="/api/v1", alias="API_PREFIX")

    database_url: str = Field(
        default="sqlite:///./salon.db",
        alias="DATABASE_URL",
        description="SQLAlchemy URL for the primary database",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        alias="REDIS_URL",
        description="Redis instance used for per-professional scheduling locks",
    )

    booking_lock_enabled: bool = Field(default=True, alias="BOOKING_LOCK_ENABLED")
    booking_lock_ttl_seconds: int = Field(default=30, alias="BOOKING_LOCK_TTL_SECONDS")
    booking_lock_namespace: str = Field(default="salon", alias="BOOKING_LOCK_NAMESPACE")

    # Shown in place of a stored zone that no longer resolves.
    default_time_zone: str = Field(
        default="America/Los_Angeles",
        alias="DEFAULT_TIME_ZONE",
        description="Fallback IANA zone for display when a stored zone is invalid",
    )

    notifications_enabled: bool = Field(default=True, alias="NOTIFICATIONS_ENABLED")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("default_time_zone")
    @classmethod
    def _validate_default_time_zone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown time zone: {value}")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return (value or "INFO").strip().upper()

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}


settings = Settings()
