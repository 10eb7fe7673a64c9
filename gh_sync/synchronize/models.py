"""Pydantic models shared by the forge client, the tracker client and the synchronization engine."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from gh_sync.utils.constants import (
    DEFAULT_ADO_ACTIVE_STATE,
    DEFAULT_ADO_CLOSED_STATE,
    DEFAULT_ADO_TERMINAL_STATES,
)


class SyncDecision(str, Enum):
    """Decision computed by the reconciler for a single GitHub issue."""

    CREATE = "create"
    UPDATE = "update"


class SyncAction(str, Enum):
    """Action the synchronization engine reports for a single GitHub issue."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class IssueState(str, Enum):
    """State of a GitHub issue."""

    OPEN = "open"
    CLOSED = "closed"


class SourceComment(BaseModel):
    """A comment on a GitHub issue."""

    model_config = ConfigDict(frozen=True)

    author: str
    body: str


class SourceIssue(BaseModel):
    """A GitHub issue, read-only from the point of view of the engine."""

    model_config = ConfigDict(frozen=True)

    repository: str
    number: int
    title: str
    body: str = ""
    state: IssueState
    labels: list[str] = Field(default_factory=list)
    comment_count: int = 0
    comments: list[SourceComment] = Field(default_factory=list)
    url: str
    updated_at: datetime | None = None

    @property
    def is_closed(self) -> bool:
        """Whether the issue is closed on GitHub."""
        return self.state == IssueState.CLOSED

    @property
    def reference(self) -> str:
        """Short human-readable reference such as owner/repo#42."""
        return f"{self.repository}#{self.number}"


class TrackedComment(BaseModel):
    """A comment on a work item."""

    model_config = ConfigDict(frozen=True)

    text: str
    author: str | None = None


class TrackedRecord(BaseModel):
    """An Azure DevOps work item linked (or linkable) to a GitHub issue."""

    id: int
    title: str
    description: str = ""
    state: str
    linked_url: str | None = None
    comments: list[TrackedComment] = Field(default_factory=list)
    url: str | None = None


class StateMapping(BaseModel):
    """Maps GitHub issue states onto the tracker's state vocabulary."""

    model_config = ConfigDict(frozen=True)

    active_state: str = DEFAULT_ADO_ACTIVE_STATE
    closed_state: str = DEFAULT_ADO_CLOSED_STATE
    terminal_states: frozenset[str] = frozenset(DEFAULT_ADO_TERMINAL_STATES)

    def is_terminal(self, state: str) -> bool:
        """Whether a tracker state is equivalent to a closed GitHub issue."""
        return state == self.closed_state or state in self.terminal_states


class RecordPayload(BaseModel):
    """Field values for a new work item."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    state: str
    linked_url: str


class StatusTransition(BaseModel):
    """A state change to apply to a work item."""

    model_config = ConfigDict(frozen=True)

    from_state: str | None
    to_state: str
    reactivation: bool = False


class CommentAction(BaseModel):
    """A GitHub comment that must be appended to a work item."""

    model_config = ConfigDict(frozen=True)

    ordinal: int
    author: str
    body: str


class ReconciliationPlan(BaseModel):
    """Create-or-update decision plus the field delta for one GitHub issue."""

    model_config = ConfigDict(frozen=True)

    decision: SyncDecision
    issue_url: str
    record_id: int | None = None
    payload: RecordPayload | None = None
    status_transition: StatusTransition | None = None
    comment_actions: list[CommentAction] = Field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        """Whether this is an update with nothing to apply."""
        return self.decision == SyncDecision.UPDATE and self.status_transition is None and not self.comment_actions


class ErrorDescriptor(BaseModel):
    """Describes why synchronizing an issue failed."""

    model_config = ConfigDict(frozen=True)

    kind: str
    message: str


class SyncOutcome(BaseModel):
    """Result of synchronizing a single GitHub issue."""

    model_config = ConfigDict(frozen=True)

    repository: str
    issue_number: int
    action: SyncAction
    plan: ReconciliationPlan | None = None
    record_id: int | None = None
    error: ErrorDescriptor | None = None

    @property
    def reference(self) -> str:
        """Short human-readable reference such as owner/repo#42."""
        return f"{self.repository}#{self.issue_number}"
