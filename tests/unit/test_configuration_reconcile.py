"""Unit tests for the configuration.reconcile module."""

from pathlib import Path
from typing import Any

import pytest

from gh_sync.configuration.env import Settings
from gh_sync.configuration.exceptions import GitHubAuthenticationConfigurationUndefinedError, RequiredConfigurationElementError
from gh_sync.configuration.models import GitHubAuthenticationType
from gh_sync.configuration.reconcile import reconcile_sync_configuration


def make_settings(**overrides: Any) -> Settings:
    """Build settings isolated from the process environment and any .env file."""
    values: dict[str, Any] = {
        "DEBUG": False,
        "TRACKING_LABEL": "tracking",
        "GITHUB_API_URL": "https://api.github.com",
        "GITHUB_PAT_TOKEN": "gh-token",
        "GITHUB_APP_ID": None,
        "GITHUB_APP_PRIVATE_KEY_PATH": None,
        "GITHUB_APP_INSTALLATION_ID": None,
        "ADO_ORGANIZATION_URL": "https://dev.azure.com/org",
        "ADO_PROJECT": "Quantum",
        "ADO_PAT_TOKEN": "ado-token",
        "ADO_WORK_ITEM_TYPE": "Bug",
        "ADO_LINK_FIELD": "Custom.GitHubURL",
        "ADO_ACTIVE_STATE": "Active",
        "ADO_CLOSED_STATE": "Closed",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.mark.asyncio
async def test_reconcile_uses_environment_settings() -> None:
    """Test that settings fill every value when no CLI arguments are given."""
    config = await reconcile_sync_configuration(settings=make_settings())

    assert config.debug is False
    assert config.tracking_label == "tracking"
    assert config.github.github_authentication_type == GitHubAuthenticationType.PAT
    assert config.github.github_pat_token == "gh-token"
    assert config.github.github_api_url == "https://api.github.com"
    assert config.ado.organization_url == "https://dev.azure.com/org"
    assert config.ado.project == "Quantum"
    assert config.ado.ado_pat_token == "ado-token"
    assert config.ado.work_item_type == "Bug"
    assert config.ado.link_field == "Custom.GitHubURL"
    assert config.state_mapping.active_state == "Active"
    assert config.state_mapping.closed_state == "Closed"


@pytest.mark.asyncio
async def test_cli_arguments_take_precedence() -> None:
    """Test that CLI arguments override environment settings."""
    config = await reconcile_sync_configuration(
        cli_debug=True,
        cli_github_pat_token="cli-gh-token",
        cli_ado_organization_url="https://dev.azure.com/other",
        cli_ado_project="Katas",
        cli_ado_pat_token="cli-ado-token",
        cli_tracking_label="triage",
        settings=make_settings(),
    )

    assert config.debug is True
    assert config.github.github_pat_token == "cli-gh-token"
    assert config.ado.organization_url == "https://dev.azure.com/other"
    assert config.ado.project == "Katas"
    assert config.ado.ado_pat_token == "cli-ado-token"
    assert config.tracking_label == "triage"


@pytest.mark.asyncio
async def test_custom_state_vocabulary_is_carried_into_mapping() -> None:
    """Test that configured tracker states end up in the state mapping."""
    config = await reconcile_sync_configuration(settings=make_settings(ADO_ACTIVE_STATE="Committed", ADO_CLOSED_STATE="Done"))

    assert config.state_mapping.active_state == "Committed"
    assert config.state_mapping.closed_state == "Done"


@pytest.mark.asyncio
async def test_github_app_configuration() -> None:
    """Test that a complete GitHub App configuration selects App authentication."""
    settings = make_settings(
        GITHUB_PAT_TOKEN=None,
        GITHUB_APP_ID=1234,
        GITHUB_APP_PRIVATE_KEY_PATH=Path("/keys/app.pem"),
        GITHUB_APP_INSTALLATION_ID=5678,
    )

    config = await reconcile_sync_configuration(settings=settings)

    assert config.github.github_authentication_type == GitHubAuthenticationType.APP
    assert config.github.github_pat_token is None
    assert config.github.github_app_id == 1234
    assert config.github.github_app_installation_id == 5678


@pytest.mark.asyncio
async def test_missing_github_authentication_raises() -> None:
    """Test that reconciliation fails without GitHub credentials."""
    with pytest.raises(GitHubAuthenticationConfigurationUndefinedError):
        await reconcile_sync_configuration(settings=make_settings(GITHUB_PAT_TOKEN=None))


@pytest.mark.parametrize(
    "missing, env_name",
    [
        pytest.param("ADO_ORGANIZATION_URL", "ADO_ORGANIZATION_URL", id="organization url"),
        pytest.param("ADO_PROJECT", "ADO_PROJECT", id="project"),
        pytest.param("ADO_PAT_TOKEN", "ADO_PAT_TOKEN", id="pat token"),
    ],
)
@pytest.mark.asyncio
async def test_missing_azure_devops_setting_raises(missing: str, env_name: str) -> None:
    """Test that each required Azure DevOps setting is enforced and named."""
    with pytest.raises(RequiredConfigurationElementError) as exc_info:
        await reconcile_sync_configuration(settings=make_settings(**{missing: None}))

    assert exc_info.value.env_name == env_name
    assert f"environment variable {env_name}" in str(exc_info.value)
