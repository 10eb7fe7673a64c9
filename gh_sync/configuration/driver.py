"""Synchronous driver for configuration reconciliation for the CLI entry point."""

import asyncio
from pathlib import Path

from gh_sync.configuration import reconcile
from gh_sync.configuration.models import SyncConfig


def get_sync_config(
    debug: bool | None = None,
    github_api_url: str | None = None,
    github_pat_token: str | None = None,
    github_app_id: int | None = None,
    github_app_private_key_path: Path | None = None,
    github_app_installation_id: int | None = None,
    ado_organization_url: str | None = None,
    ado_project: str | None = None,
    ado_pat_token: str | None = None,
    tracking_label: str | None = None,
) -> SyncConfig:
    """Synchronously get the reconciled sync configuration."""
    return asyncio.run(
        reconcile.reconcile_sync_configuration(
            cli_debug=debug,
            cli_github_api_url=github_api_url,
            cli_github_pat_token=github_pat_token,
            cli_github_app_id=github_app_id,
            cli_github_app_private_key_path=github_app_private_key_path,
            cli_github_app_installation_id=github_app_installation_id,
            cli_ado_organization_url=ado_organization_url,
            cli_ado_project=ado_project,
            cli_ado_pat_token=ado_pat_token,
            cli_tracking_label=tracking_label,
        )
    )
