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
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone name (or UTC+hh:mm offset) used for timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    public_base_url: str | None = Field(
        default=None,
        description="Base URL used to turn relative links into absolute ones in emails",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending transactional emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of transactional messages",
        min_length=3,
    )
    sendgrid_sandbox_mode: bool = Field(
        default=False,
        description="Ask SendGrid to validate messages without delivering them",
    )
    mail_sandbox_dir: str = Field(
        default="var/mail-sandbox",
        description="Directory receiving rendered messages when SendGrid is not configured",
    )
    email_send_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for a single recipient's mail transport call",
        gt=0,
    )
    notification_email_workers: int = Field(
        default=4,
        description="Number of concurrent email sends per delivery batch",
        ge=1,
    )
    notification_fanout_workers: int = Field(
        default=4,
        description="Number of concurrent record insertions during audience fan-out",
        ge=1,
    )
    uploads_root: str = Field(
        default="uploads",
        description="Local directory holding uploaded assets",
    )
    azure_storage_connection_string: str | None = Field(
        default=None,
        description="Azure Blob Storage connection string for uploaded assets",
    )
    azure_storage_container_name: str | None = Field(
        default=None,
        description="Azure Blob Storage container holding uploaded assets",
    )
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma separated list of origins allowed to call the API",
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
    def sendgrid_enabled(self) -> bool:
        return bool(self.sendgrid_api_key and self.sendgrid_sender)

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def azure_storage_enabled(self) -> bool:
        return bool(
            self.azure_storage_connection_string and self.azure_storage_container_name
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
