"""GitHub client adapter for the githubkit library."""

import inspect
from functools import wraps
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Self, TypeVar

import structlog
from githubkit import Response
from githubkit.exception import RequestError, RequestFailed, RequestTimeout
from githubkit.utils import UNSET
from githubkit.versions.latest.models import Issue, IssueComment

from gh_sync.configuration.models import GitHubAuthenticationType
from gh_sync.synchronize.exceptions import (
    AuthenticationError,
    IssueNotFoundError,
    PayloadValidationError,
    RepositoryNotFoundError,
    TransientError,
)
from gh_sync.synchronize.models import IssueState, SourceComment, SourceIssue
from gh_sync.utils.constants import DEFAULT_GITHUB_API_URL, GITHUB_PAGE_SIZE
from gh_sync.utils.github import split_repository
from gh_sync.utils.retry import retry_on_rate_limit

from .abc import ForgeClientBase
from .client import GitHubClient, get_github_client

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def _is_set(value: Any) -> bool:
    """Whether a githubkit model attribute holds a real value."""
    return value is not None and value is not UNSET


def handle_github_errors(func: F) -> F:
    """Decorator translating githubkit exceptions into the synchronization error taxonomy.

    The decorated coroutine must accept ``repo`` and may accept ``issue_number``.
    """
    signature = inspect.signature(func)

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except RequestFailed as exc:
            bound = signature.bind_partial(*args, **kwargs).arguments
            repo = bound.get("repo", "")
            issue_number = bound.get("issue_number")
            status_code = exc.response.status_code
            logger.error("GitHub request failed", function=func.__name__, repo=repo, issue_number=issue_number, status_code=status_code)
            if status_code in (404, 410):
                if issue_number is None:
                    raise RepositoryNotFoundError(repo) from exc
                raise IssueNotFoundError(repo, issue_number) from exc
            if status_code == 401 or (status_code == 403 and "rate limit" not in str(exc).lower()):
                raise AuthenticationError(f"GitHub rejected the credentials while accessing {repo} (HTTP {status_code})") from exc
            if status_code == 422:
                raise PayloadValidationError(f"GitHub 422 error in {func.__name__} for {repo}") from exc
            raise TransientError(f"GitHub request in {func.__name__} failed with HTTP {status_code}") from exc
        except (RequestError, RequestTimeout) as exc:
            logger.error("GitHub request could not be completed", function=func.__name__, error=str(exc))
            raise TransientError(f"GitHub request in {func.__name__} could not be completed: {exc}") from exc

    return wrapper  # type: ignore


class GitHubKitAdapter(ForgeClientBase):
    """GitHub client adapter for the githubkit library."""

    def __init__(self, client: GitHubClient) -> None:
        """Initialize the GitHub client adapter with an already-initialized client."""
        self.client = client

    @classmethod
    def create(
        cls,
        github_auth_type: GitHubAuthenticationType,
        github_pat_token: str | None = None,
        github_app_id: int | None = None,
        github_app_private_key_path: Path | None = None,
        github_app_installation_id: int | None = None,
        github_api_url: str = DEFAULT_GITHUB_API_URL,
    ) -> Self:
        """Create a new GitHub client adapter.

        Args:
            github_auth_type: Type of authentication (PAT or APP)
            github_pat_token: Personal access token (required for PAT auth)
            github_app_id: GitHub App ID (required for APP auth)
            github_app_private_key_path: Path to private key file (required for APP auth)
            github_app_installation_id: Installation ID (required for APP auth)
            github_api_url: GitHub API URL (defaults to https://api.github.com)

        Returns:
            Configured GitHubKitAdapter instance
        """
        logger.info("Creating client for GitHub instance", github_api_url=github_api_url, github_auth_type=github_auth_type.value)
        client = get_github_client(
            github_auth_type=github_auth_type,
            github_pat_token=github_pat_token,
            github_app_id=github_app_id,
            github_app_private_key_path=github_app_private_key_path,
            github_app_installation_id=github_app_installation_id,
            github_api_url=github_api_url,
        )
        return cls(client)

    @staticmethod
    def _to_source_comment(comment: IssueComment) -> SourceComment:
        user = comment.user if _is_set(comment.user) else None
        body = comment.body if _is_set(comment.body) else ""
        return SourceComment(author=user.login if user is not None else "ghost", body=body or "")

    @staticmethod
    def _to_source_issue(repo: str, issue: Issue, comments: list[SourceComment]) -> SourceIssue:
        labels: list[str] = []
        for label in issue.labels:
            if isinstance(label, str):
                labels.append(label)
            elif _is_set(getattr(label, "name", None)):
                labels.append(label.name)  # type: ignore[arg-type]
        return SourceIssue(
            repository=repo,
            number=issue.number,
            title=issue.title,
            body=issue.body if _is_set(issue.body) else "",
            state=IssueState.CLOSED if issue.state == "closed" else IssueState.OPEN,
            labels=labels,
            comment_count=issue.comments,
            comments=comments,
            url=issue.html_url,
            updated_at=issue.updated_at,
        )

    @handle_github_errors
    @retry_on_rate_limit()
    async def _get_raw_issue(self, repo: str, issue_number: int) -> Issue:
        owner, repo_name = split_repository(repo)
        response: Response[Issue] = await self.client.rest.issues.async_get(owner=owner, repo=repo_name, issue_number=issue_number)
        return response.parsed_data

    @handle_github_errors
    @retry_on_rate_limit()
    async def _list_comment_page(self, repo: str, issue_number: int, page: int) -> list[IssueComment]:
        owner, repo_name = split_repository(repo)
        response: Response[list[IssueComment]] = await self.client.rest.issues.async_list_comments(
            owner=owner,
            repo=repo_name,
            issue_number=issue_number,
            per_page=GITHUB_PAGE_SIZE,
            page=page,
        )
        return response.parsed_data

    @handle_github_errors
    @retry_on_rate_limit()
    async def _list_issue_page(self, repo: str, label: str, page: int) -> list[Issue]:
        owner, repo_name = split_repository(repo)
        response: Response[list[Issue]] = await self.client.rest.issues.async_list_for_repo(
            owner=owner,
            repo=repo_name,
            labels=label,
            state="all",
            per_page=GITHUB_PAGE_SIZE,
            page=page,
        )
        return response.parsed_data

    async def list_issue_comments(self, repo: str, issue_number: int) -> list[SourceComment]:
        """List all comments of an issue, handling pagination."""
        comments: list[SourceComment] = []
        page = 1
        while True:
            raw_comments = await self._list_comment_page(repo, issue_number, page)
            comments.extend(self._to_source_comment(comment) for comment in raw_comments)
            if len(raw_comments) < GITHUB_PAGE_SIZE:
                break
            page += 1
        return comments

    async def get_issue(self, repo: str, issue_number: int) -> SourceIssue:
        """Get a single issue and its comments."""
        issue = await self._get_raw_issue(repo, issue_number)
        comments = await self.list_issue_comments(repo, issue_number) if issue.comments else []
        logger.debug("Fetched GitHub issue", repo=repo, issue_number=issue_number, comment_count=len(comments))
        return self._to_source_issue(repo, issue, comments)

    async def list_labeled_issues(self, repo: str, label: str) -> AsyncIterator[SourceIssue]:
        """Lazily iterate over every issue carrying a label, one page at a time.

        Pull requests share the issues endpoint and are skipped. Comments are
        not fetched here; `comment_count` tells callers whether to list them.
        """
        page = 1
        while True:
            issues = await self._list_issue_page(repo, label, page)
            logger.debug("Fetched page of labeled GitHub issues", repo=repo, label=label, page=page, issue_count=len(issues))
            for issue in issues:
                if _is_set(getattr(issue, "pull_request", None)):
                    continue
                yield self._to_source_issue(repo, issue, [])
            if len(issues) < GITHUB_PAGE_SIZE:
                break
            page += 1
