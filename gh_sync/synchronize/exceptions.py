"""Contains exceptions raised while synchronizing GitHub issues with work items."""


class SyncError(Exception):
    """Base class for errors raised by the forge and tracker clients."""

    kind = "SyncError"


class NotFoundError(SyncError):
    """Raised when a requested issue or work item does not exist."""

    kind = "NotFound"


class IssueNotFoundError(NotFoundError):
    """Raised when a GitHub issue does not exist."""

    def __init__(self, repo: str, issue_number: int) -> None:
        """Initializes the exception with the repository and issue number that were requested."""
        super().__init__(f"GitHub issue {repo}#{issue_number} was not found")
        self.repo = repo
        self.issue_number = issue_number


class RepositoryNotFoundError(NotFoundError):
    """Raised when a GitHub repository does not exist or is not visible to the credentials."""

    def __init__(self, repo: str) -> None:
        """Initializes the exception with the repository that was requested."""
        super().__init__(f"GitHub repository {repo} was not found")
        self.repo = repo


class WorkItemNotFoundError(NotFoundError):
    """Raised when an Azure DevOps work item does not exist."""

    def __init__(self, work_item_id: int) -> None:
        """Initializes the exception with the id of the missing work item."""
        super().__init__(f"Work item {work_item_id} was not found")
        self.work_item_id = work_item_id


class AuthenticationError(SyncError):
    """Raised when a credential is invalid, expired or unauthorized.

    This is fatal for an entire invocation and is never converted into a
    per-issue failure.
    """

    kind = "AuthError"


class TransientError(SyncError):
    """Raised on network or service faults."""

    kind = "TransientError"


class PayloadValidationError(SyncError):
    """Raised when the tracker rejects a payload as malformed."""

    kind = "ValidationError"
