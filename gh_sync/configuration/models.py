"""Models for configuration between CLI arguments and environment variables."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from gh_sync.synchronize.models import StateMapping


class GitHubAuthenticationType(str, Enum):
    """Enum for GitHub authentication types."""

    PAT = "pat"
    APP = "app"


@dataclass(frozen=True)
class GitHubConfig:
    """Connection settings for GitHub."""

    github_api_url: str
    github_authentication_type: GitHubAuthenticationType
    github_pat_token: str | None = None
    github_app_id: int | None = None
    github_app_private_key_path: Path | None = None
    github_app_installation_id: int | None = None


@dataclass(frozen=True)
class AzureDevOpsConfig:
    """Connection settings for Azure DevOps."""

    organization_url: str
    project: str
    ado_pat_token: str
    work_item_type: str
    link_field: str


@dataclass(frozen=True)
class SyncConfig:
    """Configuration for a single gh-sync invocation."""

    debug: bool
    github: GitHubConfig
    ado: AzureDevOpsConfig
    tracking_label: str
    state_mapping: StateMapping = field(default_factory=StateMapping)
