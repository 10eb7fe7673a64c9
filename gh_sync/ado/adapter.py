"""Azure DevOps work item adapter built on httpx."""

from typing import Any, Self
from urllib.parse import quote

import httpx
import structlog

from gh_sync.synchronize.exceptions import (
    AuthenticationError,
    PayloadValidationError,
    TransientError,
    WorkItemNotFoundError,
)
from gh_sync.synchronize.models import RecordPayload, StatusTransition, TrackedComment, TrackedRecord
from gh_sync.utils.constants import (
    ADO_API_VERSION,
    ADO_COMMENTS_API_VERSION,
    DEFAULT_ADO_LINK_FIELD,
    DEFAULT_ADO_WORK_ITEM_TYPE,
)
from gh_sync.utils.templates import render_mirrored_comment

from .abc import TrackerClientBase
from .client import get_ado_client

logger = structlog.get_logger(__name__)

JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"

# 203 is returned with an HTML sign-in page when a PAT is not accepted.
AUTHENTICATION_STATUS_CODES = (203, 302, 401, 403)


class AzureDevOpsAdapter(TrackerClientBase):
    """Work item client adapter for the Azure DevOps REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        organization_url: str,
        project: str,
        work_item_type: str = DEFAULT_ADO_WORK_ITEM_TYPE,
        link_field: str = DEFAULT_ADO_LINK_FIELD,
    ) -> None:
        """Initialize the adapter with an already-initialized httpx client."""
        self.client = client
        self.organization_url = organization_url.rstrip("/")
        self.project = project
        self.work_item_type = work_item_type
        self.link_field = link_field

    @classmethod
    def create_adapter(
        cls,
        organization_url: str,
        project: str,
        ado_pat_token: str,
        work_item_type: str = DEFAULT_ADO_WORK_ITEM_TYPE,
        link_field: str = DEFAULT_ADO_LINK_FIELD,
    ) -> Self:
        """Create a new Azure DevOps adapter with its own authenticated client."""
        logger.info("Creating client for Azure DevOps organization and project", organization_url=organization_url, project=project)
        client = get_ado_client(organization_url, ado_pat_token)
        return cls(client, organization_url, project, work_item_type=work_item_type, link_field=link_field)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _project_path(self, path: str) -> str:
        return f"/{quote(self.project)}/_apis/wit/{path}"

    def work_item_link(self, work_item_id: int) -> str:
        """Return the browser URL of a work item."""
        return f"{self.organization_url}/{quote(self.project)}/_workitems/edit/{work_item_id}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        api_version: str = ADO_API_VERSION,
        params: dict[str, Any] | None = None,
        json: Any = None,
        content_type: str | None = None,
        work_item_id: int | None = None,
    ) -> dict[str, Any]:
        """Send a request to the Azure DevOps REST API and translate failures into sync errors."""
        query = {"api-version": api_version, **(params or {})}
        headers = {"Content-Type": content_type} if content_type else None
        try:
            response = await self.client.request(method, self._project_path(path), params=query, json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Azure DevOps request could not be completed", method=method, path=path, error=str(exc))
            raise TransientError(f"Azure DevOps request {method} {path} could not be completed: {exc}") from exc

        status_code = response.status_code
        if status_code in AUTHENTICATION_STATUS_CODES:
            logger.error("Azure DevOps rejected the credentials", method=method, path=path, status_code=status_code)
            raise AuthenticationError(f"Azure DevOps rejected the credentials (HTTP {status_code})")
        if status_code == 404 and work_item_id is not None:
            raise WorkItemNotFoundError(work_item_id)
        if status_code >= 400:
            message = self._error_message(response)
            logger.error("Azure DevOps request failed", method=method, path=path, status_code=status_code, message=message)
            if status_code == 400:
                raise PayloadValidationError(f"Azure DevOps rejected {method} {path}: {message}")
            raise TransientError(f"Azure DevOps request {method} {path} failed with HTTP {status_code}: {message}")
        if not response.content:
            return {}
        return response.json()  # type: ignore[no-any-return]

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return str(response.json().get("message", response.reason_phrase))
        except ValueError:
            return response.reason_phrase

    def _to_tracked_record(self, data: dict[str, Any], comments: list[TrackedComment] | None = None) -> TrackedRecord:
        fields: dict[str, Any] = data.get("fields", {})
        work_item_id = int(data["id"])
        return TrackedRecord(
            id=work_item_id,
            title=fields.get("System.Title", ""),
            description=fields.get("System.Description") or "",
            state=fields.get("System.State", ""),
            linked_url=fields.get(self.link_field),
            comments=comments or [],
            url=self.work_item_link(work_item_id),
        )

    async def list_comments(self, work_item_id: int) -> list[TrackedComment]:
        """List the comments of a work item oldest first, following continuation tokens."""
        comments: list[TrackedComment] = []
        continuation_token: str | None = None
        while True:
            params: dict[str, Any] = {"order": "asc", "$top": 200}
            if continuation_token:
                params["continuationToken"] = continuation_token
            data = await self._request(
                "GET",
                f"workItems/{work_item_id}/comments",
                api_version=ADO_COMMENTS_API_VERSION,
                params=params,
                work_item_id=work_item_id,
            )
            for comment in data.get("comments", []):
                author = (comment.get("createdBy") or {}).get("displayName")
                comments.append(TrackedComment(text=comment.get("text") or "", author=author))
            continuation_token = data.get("continuationToken")
            if not continuation_token:
                return comments

    async def get_by_id(self, record_id: int) -> TrackedRecord:
        """Get a work item and its comments."""
        data = await self._request("GET", f"workitems/{record_id}", work_item_id=record_id)
        comments = await self.list_comments(record_id)
        return self._to_tracked_record(data, comments)

    async def find_by_linked_url(self, url: str) -> list[TrackedRecord]:
        """Find work items linked to a GitHub issue URL, most recently created first."""
        escaped_url = url.replace("'", "''")
        query = (
            "SELECT [System.Id] FROM WorkItems "
            f"WHERE [System.TeamProject] = @project AND [{self.link_field}] = '{escaped_url}' "
            "ORDER BY [System.Id] DESC"
        )
        data = await self._request("POST", "wiql", json={"query": query})
        ids = [int(item["id"]) for item in data.get("workItems", [])]
        logger.debug("Queried work items by linked URL", url=url, work_item_ids=ids)
        return [await self.get_by_id(work_item_id) for work_item_id in ids]

    async def create(self, payload: RecordPayload) -> TrackedRecord:
        """Create a work item from a payload."""
        operations = [
            {"op": "add", "path": "/fields/System.Title", "value": payload.title},
            {"op": "add", "path": "/fields/System.Description", "value": payload.description},
            {"op": "add", "path": "/multilineFieldsFormat/System.Description", "value": "Markdown"},
            {"op": "add", "path": "/fields/System.State", "value": payload.state},
            {"op": "add", "path": f"/fields/{self.link_field}", "value": payload.linked_url},
        ]
        data = await self._request(
            "POST",
            f"workitems/${quote(self.work_item_type)}",
            json=operations,
            content_type=JSON_PATCH_CONTENT_TYPE,
        )
        record = self._to_tracked_record(data)
        logger.info("Created work item", work_item_id=record.id, linked_url=payload.linked_url, state=record.state)
        return record

    async def apply_update(self, record_id: int, transition: StatusTransition) -> TrackedRecord:
        """Move a work item to a new state."""
        operations = [{"op": "add", "path": "/fields/System.State", "value": transition.to_state}]
        data = await self._request(
            "PATCH",
            f"workitems/{record_id}",
            json=operations,
            content_type=JSON_PATCH_CONTENT_TYPE,
            work_item_id=record_id,
        )
        logger.info(
            "Updated work item state",
            work_item_id=record_id,
            from_state=transition.from_state,
            to_state=transition.to_state,
            reactivation=transition.reactivation,
        )
        return self._to_tracked_record(data)

    async def append_comment(self, record_id: int, author: str, body: str) -> None:
        """Append a mirrored GitHub comment to a work item."""
        await self._request(
            "POST",
            f"workItems/{record_id}/comments",
            api_version=ADO_COMMENTS_API_VERSION,
            json={"text": render_mirrored_comment(author, body)},
            work_item_id=record_id,
        )
        logger.info("Appended comment to work item", work_item_id=record_id, author=author)
