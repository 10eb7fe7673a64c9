"""Reconciles configuration between CLI arguments and environment variables."""

from pathlib import Path

from gh_sync.configuration.env import Settings
from gh_sync.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError, RequiredConfigurationElementError
from gh_sync.configuration.models import AzureDevOpsConfig, GitHubAuthenticationType, GitHubConfig, SyncConfig
from gh_sync.synchronize.models import StateMapping


async def validate_github_authentication_configuration(
    github_pat_token: str | None,
    github_app_id: int | None,
    github_app_private_key_path: Path | None,
    github_app_installation_id: int | None,
) -> GitHubAuthenticationType:
    """Validates the GitHub authentication configuration.

    Args:
        github_pat_token (str | None): The GitHub PAT token.
        github_app_id (int | None): The GitHub App ID.
        github_app_private_key_path (Path | None): The path to the GitHub App private key.
        github_app_installation_id (int | None): The GitHub App installation ID.

    Raises:
        GitHubAuthenticationConfigurationUndefinedError: If both or neither of the PAT and App configurations are defined,
            or if the App configuration is incomplete.

    Returns:
        GitHubAuthenticationType: The type of GitHub authentication used.
    """
    app_settings = {
        "GitHub App ID": (github_app_id, "--github-app-id", "GITHUB_APP_ID"),
        "GitHub App private key path": (github_app_private_key_path, "--github-app-private-key-path", "GITHUB_APP_PRIVATE_KEY_PATH"),
        "GitHub App installation ID": (github_app_installation_id, "--github-app-installation-id", "GITHUB_APP_INSTALLATION_ID"),
    }
    any_app_setting = any(value for value, _, _ in app_settings.values())

    if github_pat_token and any_app_setting:
        raise GitHubAuthenticationConfigurationUndefinedError("Both PAT and GitHub App configurations are defined. Please use one or the other.")

    if github_pat_token:
        return GitHubAuthenticationType.PAT

    if not any_app_setting:
        raise GitHubAuthenticationConfigurationUndefinedError(
            "No GitHub authentication configuration provided. Please provide either a PAT or a GitHub App configuration."
        )

    missing = [f"{name} (command line option {cli_name}, environment variable {env_name})" for name, (value, cli_name, env_name) in app_settings.items() if not value]
    if missing:
        raise GitHubAuthenticationConfigurationUndefinedError("Incomplete GitHub App configuration - missing settings include " + ", ".join(missing))
    return GitHubAuthenticationType.APP


def _require(value: str | None, name: str, cli_name: str, env_name: str) -> str:
    """Return a configuration value or raise if it is missing."""
    if not value:
        raise RequiredConfigurationElementError(name=name, cli_name=cli_name, env_name=env_name)
    return value


async def reconcile_sync_configuration(
    cli_debug: bool | None = None,
    cli_github_api_url: str | None = None,
    cli_github_pat_token: str | None = None,
    cli_github_app_id: int | None = None,
    cli_github_app_private_key_path: Path | None = None,
    cli_github_app_installation_id: int | None = None,
    cli_ado_organization_url: str | None = None,
    cli_ado_project: str | None = None,
    cli_ado_pat_token: str | None = None,
    cli_tracking_label: str | None = None,
    settings: Settings | None = None,
) -> SyncConfig:
    """Reconcile CLI arguments with environment settings into a sync configuration.

    CLI arguments take precedence over environment variables and the .env file.
    """
    if settings is None:
        settings = Settings()

    github_pat_token = cli_github_pat_token or settings.GITHUB_PAT_TOKEN
    github_app_id = cli_github_app_id or settings.GITHUB_APP_ID
    github_app_private_key_path = cli_github_app_private_key_path or settings.GITHUB_APP_PRIVATE_KEY_PATH
    github_app_installation_id = cli_github_app_installation_id or settings.GITHUB_APP_INSTALLATION_ID
    github_auth_type = await validate_github_authentication_configuration(
        github_pat_token=github_pat_token,
        github_app_id=github_app_id,
        github_app_private_key_path=github_app_private_key_path,
        github_app_installation_id=github_app_installation_id,
    )
    github = GitHubConfig(
        github_api_url=cli_github_api_url or settings.GITHUB_API_URL,
        github_authentication_type=github_auth_type,
        github_pat_token=github_pat_token if github_auth_type == GitHubAuthenticationType.PAT else None,
        github_app_id=github_app_id,
        github_app_private_key_path=github_app_private_key_path,
        github_app_installation_id=github_app_installation_id,
    )

    ado = AzureDevOpsConfig(
        organization_url=_require(
            cli_ado_organization_url or settings.ADO_ORGANIZATION_URL, "Azure DevOps organization URL", "--ado-organization-url", "ADO_ORGANIZATION_URL"
        ),
        project=_require(cli_ado_project or settings.ADO_PROJECT, "Azure DevOps project", "--ado-project", "ADO_PROJECT"),
        ado_pat_token=_require(cli_ado_pat_token or settings.ADO_PAT_TOKEN, "Azure DevOps PAT", "--ado-pat-token", "ADO_PAT_TOKEN"),
        work_item_type=settings.ADO_WORK_ITEM_TYPE,
        link_field=settings.ADO_LINK_FIELD,
    )

    state_mapping = StateMapping(active_state=settings.ADO_ACTIVE_STATE, closed_state=settings.ADO_CLOSED_STATE)
    return SyncConfig(
        debug=settings.DEBUG if cli_debug is None else cli_debug,
        github=github,
        ado=ado,
        tracking_label=cli_tracking_label or settings.TRACKING_LABEL,
        state_mapping=state_mapping,
    )
