"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only external resource is the durable key-value storage, so most of
this module describes where that storage lives and how big it may grow.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Durable key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_STORAGE_",
        extra="ignore"
    )

    backend: Literal["file", "memory"] = Field(
        default="file",
        description="Storage backend: JSON file on disk or process memory"
    )
    data_path: str = Field(
        default="data/local_storage.json",
        description="Path to the JSON file holding all storage slots"
    )
    slot_name: str = Field(
        default="expenses",
        min_length=1,
        description="Name of the slot that holds the expense list"
    )
    quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Maximum size of the storage file in bytes"
    )

    @field_validator('data_path')
    @classmethod
    def validate_data_path(cls, v: str) -> str:
        """Warn if the parent directory is missing (it is created on first write)."""
        parent = Path(v).expanduser().parent
        if not parent.exists():
            import warnings
            warnings.warn(
                f"Storage directory {parent} does not exist yet. "
                "It will be created on the first save."
            )
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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level for the stdlib logging backend"
    )

    # Display
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO currency code used when formatting amounts"
    )

    # Form limits
    description_max_length: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Maximum length of an expense description"
    )

    # Validation thresholds (warnings only)
    max_expense_amount: Decimal = Field(
        default=Decimal("100000"),
        gt=0,
        description="Amount above which an expense is flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=0,
        ge=0,
        description="How many days in the future an expense date can be"
    )

    # Audit
    audit_history_size: int = Field(
        default=200,
        ge=1,
        description="How many recent audit events are kept in memory"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> str:
        """Debug mode forces DEBUG regardless of LOG_LEVEL."""
        return "DEBUG" if self.debug_mode else self.log_level

    @property
    def is_production(self) -> bool:
        return self.app_environment.strip().lower() == "production"


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    Returns a dict of {setting_name: is_valid}, plus "<name>_error"
    entries describing any failure. Useful for the settings page.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
