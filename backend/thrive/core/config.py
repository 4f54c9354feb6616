# backend/thrive/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Deployment environment name",
    )
    is_testing: bool = False  # Set to True when running tests
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    database_url: str = Field(
        default="sqlite+pysqlite:///./thrive.db",
        alias="DATABASE_URL",
        description="SQLAlchemy URL for the primary database",
    )
    database_statement_timeout_ms: int = Field(
        default=15000,
        alias="DATABASE_STATEMENT_TIMEOUT_MS",
        description="Statement timeout applied to PostgreSQL connections",
    )

    # Booking admission limits. Both the validation engine and the limits
    # query read these through BookingPolicy.from_settings().
    booking_standard_monthly_limit: int = Field(default=4, ge=0)
    booking_standard_active_limit: int = Field(default=4, ge=0)
    booking_premium_active_limit: int = Field(default=2, ge=0)
    booking_trial_lifetime_limit: int = Field(default=1, ge=0)
    booking_minimum_hours_notice: int = Field(default=24, ge=0)

    slow_operation_threshold_seconds: float = Field(default=1.0, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()

if is_running_tests():
    settings.is_testing = True
