"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
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
        description="Secret key used to verify JWT bearer tokens", min_length=1
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to compute reminder windows and timestamps",
    )
    app_base_url: str = Field(
        default="http://localhost:5173",
        description="Public URL of the web client, used to build absolute links",
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
    twilio_account_sid: str | None = Field(
        default=None, description="Twilio account SID used for SMS delivery"
    )
    twilio_auth_token: str | None = Field(
        default=None, description="Twilio auth token paired with the account SID"
    )
    twilio_from_number: str | None = Field(
        default=None, description="Sender phone number in E.164 format"
    )
    twilio_api_url: str = Field(
        default="https://api.twilio.com",
        description="Base URL of the Twilio REST API",
    )
    channel_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound for a single email or SMS delivery attempt",
    )
    scheduler_enabled: bool = Field(
        default=True, description="Start the reminder scheduler with the API process"
    )
    daily_reminder_time: str = Field(
        default="00:00",
        pattern=r"^\d{2}:\d{2}$",
        description="Wall-clock time (HH:MM) at which next-day reminders are sent",
    )
    scheduled_sweep_minutes: int = Field(
        default=1,
        gt=0,
        description="Interval between sweeps for due scheduled notifications",
    )

    @field_validator("app_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        name = value.strip() or "UTC"
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"APP_TIMEZONE '{value}' is not a known IANA timezone") from exc
        return name

    @model_validator(mode="after")
    def _validate_provider_credentials(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")

        twilio_values = (
            self.twilio_account_sid,
            self.twilio_auth_token,
            self.twilio_from_number,
        )
        if any(twilio_values) and not all(twilio_values):
            raise ValueError(
                "TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_FROM_NUMBER "
                "must all be provided to enable SMS"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
