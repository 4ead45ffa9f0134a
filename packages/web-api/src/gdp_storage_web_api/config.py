"""
App config from environment with defaults.
Single place for env-derived values used across the web API.
Bucket configuration itself is read by gdp_storage_aws_adapters.env_config.StorageSettings.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class WebApiSettings(BaseSettings):
    """
    Environment variables used by the web API (not bucket configuration).
    Env vars are read from os.environ (UPPER_SNAKE_CASE by default).
    """

    model_config = SettingsConfigDict(
        env_file=None,  # We load .env via bootstrap_env() in main so env is ready
        extra="ignore",
    )

    log_level: str = "INFO"


def get_settings() -> WebApiSettings:
    """Return validated settings from current environment."""
    return WebApiSettings()


def bootstrap_env() -> None:
    """
    Load .env from path in GDP_STORAGE_ENV_FILE if set (e.g. for local development).
    Call once at app startup before reading settings so vars from the file are in os.environ.
    """
    import os

    import dotenv

    path = os.environ.get("GDP_STORAGE_ENV_FILE")
    if path:
        dotenv.load_dotenv(Path(path).resolve())
