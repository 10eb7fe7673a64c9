"""Sets up the authenticated httpx client for the Azure DevOps REST API."""

import httpx

from gh_sync.utils.constants import ADO_REQUEST_TIMEOUT


def get_ado_client(organization_url: str, ado_pat_token: str, timeout: float = ADO_REQUEST_TIMEOUT) -> httpx.AsyncClient:
    """Returns an httpx client authenticated against an Azure DevOps organization.

    Azure DevOps accepts a personal access token as the password of HTTP basic
    authentication with an empty user name.
    """
    if not ado_pat_token:
        raise RuntimeError("Azure DevOps authentication requires ado_pat_token in config.")
    return httpx.AsyncClient(
        base_url=organization_url.rstrip("/"),
        auth=httpx.BasicAuth("", ado_pat_token),
        headers={"Accept": "application/json"},
        timeout=timeout,
        follow_redirects=False,
    )
