"""
Configuration Management for PocketLedger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage keys, the data directory and logging behaviour are the only
knobs; everything else in the ledger is deterministic.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETLEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: str = Field(
        default="data",
        description="Directory holding one JSON file per collection"
    )

    # One key per collection
    income_key: str = Field(
        default="pocketledger-income",
        description="Storage key for income entries"
    )
    expense_key: str = Field(
        default="pocketledger-expenses",
        description="Storage key for expense entries"
    )
    transfer_key: str = Field(
        default="pocketledger-transfers",
        description="Storage key for transfer entries"
    )

    @field_validator('income_key', 'expense_key', 'transfer_key')
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        v = v.strip()
        if not v:
            raise ValueError("Storage key cannot be empty")
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key must not contain path separators: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="POCKETLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Standard library log level name"
    )
    log_json: bool = Field(
        default=True,
        description="Render log lines as JSON (False = console renderer)"
    )

    # Display
    currency_symbol: str = Field(
        default="₹",
        max_length=5,
        description="Symbol used when formatting amounts"
    )

    # Backups
    backup_filename_prefix: str = Field(
        default="pocketledger_backup",
        description="Prefix for exported backup file names"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept level names the logging module knows about."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def log_level_number(self) -> int:
        """Get the numeric log level."""
        return logging.getLevelNamesMapping()[self.log_level]


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
