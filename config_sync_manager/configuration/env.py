"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from config_sync_manager.configuration.models import PushPolicy
from config_sync_manager.utils.constants import DEFAULT_CONFIG_FILE, DEFAULT_GITHUB_URL, DEFAULT_SOURCE_REPO


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Generic application-wide settings
    DEBUG: bool = False

    # Repository settings
    GITHUB_URL: str = DEFAULT_GITHUB_URL
    SOURCE_REPO: str = DEFAULT_SOURCE_REPO
    CONFIG_FILE: str = DEFAULT_CONFIG_FILE

    # Working directory settings
    WORKING_DIR: Path | None = None
    KEEP_TEMP: bool = False

    PUSH_POLICY: PushPolicy = PushPolicy.PROMPT


settings = Settings()
