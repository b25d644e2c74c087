"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="Database connection URL used by SQLAlchemy",
        min_length=1,
    )
    app_env: str = Field(
        default="development",
        description="Deployment environment; the paid gateway only goes live in production",
    )
    app_timezone: str = Field(
        default="Asia/Seoul",
        description="IANA timezone name (or UTC offset) used for quiet hours and dates",
    )
    app_base_url: str = Field(
        default="http://localhost:3000",
        description="Origin used to build action links inside messages",
    )
    log_level: str = Field(default="INFO")
    dispatch_max_workers: int = Field(
        default=8,
        gt=0,
        description="Upper bound of concurrent channel deliveries",
    )
    background_max_workers: int = Field(
        default=2,
        gt=0,
        description="Workers running fire-and-forget event dispatches",
    )
    dispatch_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Deadline for a whole fan-out; attempts still pending are failed",
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to every external gateway request",
    )
    telegram_bot_token: str | None = Field(default=None)
    telegram_chat_id: str | None = Field(default=None)
    telegram_api_base: str = Field(default="https://api.telegram.org")
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )
    kakao_gateway_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the paid messaging gateway",
    )
    simulation_delay_scale: float = Field(
        default=1.0,
        ge=0,
        description="Multiplier applied to the artificial latency of simulated channels",
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
