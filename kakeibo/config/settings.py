"""
Configuration Management for Kakeibo

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable (where records live, which payer fills an empty import cell,
how logs are rendered) is visible in one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kakeibo.models.record import Payer


class KakeiboSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from KAKEIBO_* environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="KAKEIBO_",
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

    # Persistence
    data_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding the JSON blob files. Unset keeps data in memory."
    )
    storage_key: str = Field(
        default="kakeibo-entries",
        min_length=1,
        description="Name of the blob holding the record collection"
    )

    # Import policy
    default_payer: Payer = Field(
        default=Payer.HUSBAND,
        description="Payer assigned when an imported row leaves the payer cell empty"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum log level for the stdlib root logger"
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON (False renders for the console)"
    )

    @field_validator('storage_key')
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """Blob keys double as file names, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"storage_key must not contain path separators: {v!r}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache()
def get_settings() -> KakeiboSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return KakeiboSettings()
