# ABOUTME: Centralized configuration and logging setup using Pydantic Settings.
# ABOUTME: Loads all settings from environment variables and .env file.

import logging
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Email / SMTP (credentials optional - only required for sending)
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: SecretStr | None = None
    smtp_password: SecretStr | None = None
    smtp_timeout: int = 30
    sender_email: str = "weather@example.com"
    sender_name: str = "Weather Notify"
    confirmation_email_subject: str = "Confirm your weather subscription"
    weather_update_subject: str = "Your weather update"
    templates_dir: Path = PACKAGE_DIR / "email" / "templates"

    # Weather provider
    weather_api_url: str = "https://api.weatherapi.com/v1/current.json"
    weather_api_key: SecretStr | None = None
    weather_api_timeout: float = 10.0

    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "weather"
    db_user: str = "weather"
    db_password: SecretStr | None = None
    db_pool_size: int = 5
    db_pool_max_overflow: int = 10

    @property
    def database_url(self) -> str:
        """Build async PostgreSQL connection URL."""
        password = self.db_password.get_secret_value() if self.db_password else ""
        return f"postgresql+asyncpg://{self.db_user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def database_url_sync(self) -> str:
        """Build sync PostgreSQL connection URL (for Alembic)."""
        password = self.db_password.get_secret_value() if self.db_password else ""
        return (
            f"postgresql://{self.db_user}:{password}@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # Weather update job
    scheduler_enabled: bool = True
    weather_job_cron: str = "0 * * * *"  # hourly, on the hour (UTC)
    job_step_timeout: float = 30.0  # per subscriber weather fetch / send

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"

    # Web / API
    app_base_url: str = "http://localhost:8000"  # Base URL for email links
    host: str = "0.0.0.0"
    port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    SMTP and weather API credentials are optional until something needs them.
    """
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for console or JSON output."""
    settings = settings or get_settings()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.processors.add_log_level,
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
        )
