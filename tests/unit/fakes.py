"""In-memory forge and tracker clients used by the unit tests."""

from typing import AsyncIterator

from gh_sync.ado.abc import TrackerClientBase
from gh_sync.configuration.models import AzureDevOpsConfig, GitHubAuthenticationType, GitHubConfig, SyncConfig
from gh_sync.github.abc import ForgeClientBase
from gh_sync.synchronize.exceptions import IssueNotFoundError, WorkItemNotFoundError
from gh_sync.synchronize.models import (
    IssueState,
    RecordPayload,
    SourceComment,
    SourceIssue,
    StatusTransition,
    TrackedComment,
    TrackedRecord,
)
from gh_sync.utils.templates import render_mirrored_comment


def make_issue(
    number: int = 42,
    repository: str = "org/x",
    state: IssueState = IssueState.OPEN,
    comments: list[SourceComment] | None = None,
    title: str | None = None,
    body: str = "Something is broken.",
    labels: list[str] | None = None,
) -> SourceIssue:
    """Build a GitHub issue with sensible defaults."""
    comments = comments or []
    return SourceIssue(
        repository=repository,
        number=number,
        title=title or f"Issue {number}",
        body=body,
        state=state,
        labels=labels if labels is not None else ["tracking"],
        comment_count=len(comments),
        comments=comments,
        url=f"https://forge/{repository}/issues/{number}",
    )


class FakeForge(ForgeClientBase):
    """Serves issues from memory in insertion order."""

    def __init__(self, issues: list[SourceIssue] | None = None) -> None:
        self.issues: dict[tuple[str, int], SourceIssue] = {}
        self.listed: list[int] = []
        self.comment_failures: dict[int, Exception] = {}
        for issue in issues or []:
            self.put(issue)

    def put(self, issue: SourceIssue) -> None:
        self.issues[(issue.repository, issue.number)] = issue

    async def get_issue(self, repo: str, issue_number: int) -> SourceIssue:
        try:
            return self.issues[(repo, issue_number)]
        except KeyError:
            raise IssueNotFoundError(repo, issue_number) from None

    async def list_labeled_issues(self, repo: str, label: str) -> AsyncIterator[SourceIssue]:
        for (issue_repo, _), issue in list(self.issues.items()):
            if issue_repo == repo and label in issue.labels:
                self.listed.append(issue.number)
                yield issue.model_copy(update={"comments": []})

    async def list_issue_comments(self, repo: str, issue_number: int) -> list[SourceComment]:
        if issue_number in self.comment_failures:
            raise self.comment_failures[issue_number]
        return list((await self.get_issue(repo, issue_number)).comments)


class FakeTracker(TrackerClientBase):
    """Stores work items in memory and records every mutating call."""

    def __init__(self) -> None:
        self.records: dict[int, TrackedRecord] = {}
        self.next_id = 1000
        self.calls: list[tuple[str, int | None]] = []
        self.lookups = 0
        self.fail_on: dict[str, Exception] = {}

    @property
    def mutating_calls(self) -> list[tuple[str, int | None]]:
        return [call for call in self.calls if call[0] in ("create", "apply_update", "append_comment")]

    def add_record(self, linked_url: str, state: str = "Active", comments: list[str] | None = None) -> TrackedRecord:
        record = TrackedRecord(
            id=self.next_id,
            title="Existing",
            state=state,
            linked_url=linked_url,
            comments=[TrackedComment(text=text) for text in comments or []],
        )
        self.records[record.id] = record
        self.next_id += 1
        return record

    def linked(self, url: str) -> list[TrackedRecord]:
        return [record for record in self.records.values() if record.linked_url == url]

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise self.fail_on[operation]

    async def get_by_id(self, record_id: int) -> TrackedRecord:
        self.calls.append(("get_by_id", record_id))
        if record_id not in self.records:
            raise WorkItemNotFoundError(record_id)
        return self.records[record_id].model_copy(deep=True)

    async def find_by_linked_url(self, url: str) -> list[TrackedRecord]:
        self.lookups += 1
        self._maybe_fail("find_by_linked_url")
        return [record.model_copy(deep=True) for record in self.linked(url)]

    async def create(self, payload: RecordPayload) -> TrackedRecord:
        self.calls.append(("create", None))
        self._maybe_fail("create")
        record = TrackedRecord(
            id=self.next_id,
            title=payload.title,
            description=payload.description,
            state=payload.state,
            linked_url=payload.linked_url,
        )
        self.records[record.id] = record
        self.next_id += 1
        return record.model_copy(deep=True)

    async def apply_update(self, record_id: int, transition: StatusTransition) -> TrackedRecord:
        self.calls.append(("apply_update", record_id))
        self._maybe_fail("apply_update")
        self.records[record_id].state = transition.to_state
        return self.records[record_id].model_copy(deep=True)

    async def append_comment(self, record_id: int, author: str, body: str) -> None:
        self.calls.append(("append_comment", record_id))
        self._maybe_fail("append_comment")
        self.records[record_id].comments.append(TrackedComment(text=render_mirrored_comment(author, body), author="gh-sync"))


def make_sync_config(tracking_label: str = "tracking") -> SyncConfig:
    """Build a complete configuration using a GitHub PAT."""
    return SyncConfig(
        debug=False,
        github=GitHubConfig(
            github_api_url="https://api.github.com",
            github_authentication_type=GitHubAuthenticationType.PAT,
            github_pat_token="gh-token",
        ),
        ado=AzureDevOpsConfig(
            organization_url="https://dev.azure.com/org",
            project="Quantum",
            ado_pat_token="ado-token",
            work_item_type="Bug",
            link_field="Custom.GitHubURL",
        ),
        tracking_label=tracking_label,
    )
