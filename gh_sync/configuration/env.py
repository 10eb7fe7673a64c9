"""Pydantic Settings model for application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from gh_sync.utils.constants import (
    DEFAULT_ADO_ACTIVE_STATE,
    DEFAULT_ADO_CLOSED_STATE,
    DEFAULT_ADO_LINK_FIELD,
    DEFAULT_ADO_WORK_ITEM_TYPE,
    DEFAULT_GITHUB_API_URL,
    DEFAULT_TRACKING_LABEL,
)


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
    TRACKING_LABEL: str = DEFAULT_TRACKING_LABEL

    # GitHub API settings
    GITHUB_API_URL: str = DEFAULT_GITHUB_API_URL

    # GitHub PAT settings
    GITHUB_PAT_TOKEN: str | None = None

    # GitHub App settings
    GITHUB_APP_ID: int | None = None
    GITHUB_APP_PRIVATE_KEY_PATH: Path | None = None
    GITHUB_APP_INSTALLATION_ID: int | None = None

    # Azure DevOps settings
    ADO_ORGANIZATION_URL: str | None = None
    ADO_PROJECT: str | None = None
    ADO_PAT_TOKEN: str | None = None
    ADO_WORK_ITEM_TYPE: str = DEFAULT_ADO_WORK_ITEM_TYPE
    ADO_LINK_FIELD: str = DEFAULT_ADO_LINK_FIELD
    ADO_ACTIVE_STATE: str = DEFAULT_ADO_ACTIVE_STATE
    ADO_CLOSED_STATE: str = DEFAULT_ADO_CLOSED_STATE
