"""
Configuration Management for Subscription Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable (store retries, validation thresholds)
is visible in one place and validated at startup.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Subscription store (cache + backend) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        extra="ignore"
    )

    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a backend call that fails to connect"
    )
    retry_min_wait: float = Field(
        default=0.5,
        ge=0.0,
        description="Minimum wait between retries (seconds)"
    )
    retry_max_wait: float = Field(
        default=5.0,
        ge=0.0,
        description="Maximum wait between retries (seconds)"
    )
    default_currency: str = Field(
        default="₹",
        min_length=1,
        max_length=5,
        description="Currency symbol for new subscriptions"
    )

    @field_validator('retry_max_wait')
    @classmethod
    def validate_max_wait(cls, v: float) -> float:
        """Wait ceiling must be usable by tenacity."""
        if v <= 0:
            raise ValueError("retry_max_wait must be positive")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Validation thresholds
    max_reasonable_price: Decimal = Field(
        default=Decimal("100000"),
        gt=0,
        description="Prices above this are flagged for review"
    )
    stale_payment_tolerance_days: int = Field(
        default=365,
        ge=0,
        description="How far in the past a next payment date may be before it is flagged"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("store", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
