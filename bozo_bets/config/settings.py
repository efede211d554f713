"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env file.
"""
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    """Settings for authentication, sessions and admin access."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    jwt_secret: str = Field(
        default="change-me-in-production",
        description="Secret used to sign session JWTs",
    )
    jwt_algorithm: str = Field(default="HS256")
    session_days: int = Field(
        default=7,
        description="Days before a login session expires",
    )
    bcrypt_rounds: int = Field(
        default=12,
        description="bcrypt cost factor for password hashing",
    )
    reset_token_hours: int = Field(
        default=1,
        description="Hours a password reset link stays valid",
    )
    invite_days: int = Field(
        default=7,
        description="Days a team invitation stays valid",
    )
    admin_passcode: str = Field(
        default="1111",
        description="Passcode unlocking the admin panel",
    )
    cron_secret: str = Field(
        default="",
        description="Bearer secret required by cron endpoints",
    )

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v


class BettingSettings(BaseSettings):
    """Settings for weekly bet submission and payments."""

    model_config = SettingsConfigDict(env_prefix="BETTING_")

    enforce_week_window: bool = Field(
        default=True,
        description="Reject bets outside the active NFL week window",
    )
    default_payment_amount: float = Field(default=10.0)
    default_payment_method: str = Field(default="Cash")
    default_season: int = Field(default=2025)


class OddsAPISettings(BaseSettings):
    """Settings for The Odds API."""

    model_config = SettingsConfigDict(env_prefix="ODDS_")

    api_key: str = Field(
        default="",
        description="API key from the-odds-api.com",
    )
    base_url: str = Field(
        default="https://api.the-odds-api.com/v4",
        description="Base URL for the API",
    )
    regions: list[str] = Field(
        default=["us"],
        description="Regions to fetch odds from",
    )
    markets: list[str] = Field(
        default=["h2h", "spreads", "totals"],
        description="Markets requested per fetch",
    )
    monthly_limit: int = Field(
        default=500,
        description="Requests allowed per calendar month",
    )
    warning_threshold: int = Field(
        default=400,
        description="Monthly request count that triggers an admin warning",
    )
    cache_ttl_seconds: int = Field(
        default=7 * 24 * 3600,
        description="How long fetched weekly props stay cached",
    )


class SchedulerSettings(BaseSettings):
    """Settings for job scheduler."""

    model_config = SettingsConfigDict(env_prefix="SCHEDULER_")

    enabled: bool = Field(default=True)
    timezone: str = Field(default="America/New_York")
    daily_results_hour: int = Field(
        default=1,
        description="Hour to settle pending bets (24-hour format)",
    )
    bozo_annotation_weekday: str = Field(default="tue")
    bozo_annotation_hour: int = Field(
        default=2,
        description="Hour to crown the Biggest Bozo (24-hour format)",
    )
    odds_job_hour: int = Field(
        default=9,
        description="Hour to refresh the week's props (24-hour format)",
    )


class TransportSettings(BaseSettings):
    """Settings for the TCP/UDP live update transport."""

    model_config = SettingsConfigDict(env_prefix="TRANSPORT_")

    enabled: bool = Field(default=False)
    tcp_host: str = Field(default="localhost")
    tcp_port: int = Field(default=8080)
    tcp_timeout_seconds: float = Field(default=30.0)
    udp_host: str = Field(default="localhost")
    udp_port: int = Field(default=8081)
    max_reconnect_attempts: int = Field(default=5)
    reconnect_backoff_seconds: float = Field(default=2.0)


class EmailSettings(BaseSettings):
    """Settings for outgoing email."""

    model_config = SettingsConfigDict(env_prefix="EMAIL_")

    app_url: str = Field(
        default="http://localhost:3000",
        description="Base URL used in links sent by email",
    )
    from_address: str = Field(default="noreply@nflbozobets.com")
    admin_address: str = Field(default="admin@nflbozobets.com")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///bozo_bets.db",
        description="Database connection URL",
    )

    # Redis (optional)
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for caching",
    )

    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default="logs/bozo_bets.log")
    debug: bool = Field(default=False)

    # Sub-settings
    auth: AuthSettings = Field(default_factory=AuthSettings)
    betting: BettingSettings = Field(default_factory=BettingSettings)
    odds_api: OddsAPISettings = Field(default_factory=OddsAPISettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    transport: TransportSettings = Field(default_factory=TransportSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @property
    def project_root(self) -> Path:
        """Get project root directory."""
        return Path(__file__).parent.parent.parent


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
