"""Configuration management for SettleUp."""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SETTLE_UP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Currency used when an event doesn't specify one
    default_currency: str = "JPY"

    # Upper bound for a single expense, in major units
    max_amount: Decimal = Decimal("10000000")

    # How far percentage splits may drift from 100 before being rejected
    percentage_tolerance: Decimal = Decimal("0.01")

    # Heading for exported reports
    report_title: str = "Walican Settlement Report"


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the SETTLE_UP_* variables in your "
            f"environment or .env file.\n"
            f"Error: {e}"
        ) from e
