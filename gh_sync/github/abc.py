"""Base ABC for GitHub (forge) clients."""

from abc import ABC, abstractmethod
from typing import AsyncIterator

from gh_sync.synchronize.models import SourceComment, SourceIssue


class ForgeClientBase(ABC):
    """Base ABC for clients that read issues from a forge."""

    @abstractmethod
    async def get_issue(self, repo: str, issue_number: int) -> SourceIssue:
        """Get a single issue, including its comments."""
        pass

    @abstractmethod
    def list_labeled_issues(self, repo: str, label: str) -> AsyncIterator[SourceIssue]:
        """Lazily iterate over all issues carrying a label, in the order the forge returns them.

        Issues are yielded without their comments; use list_issue_comments.
        """
        pass

    @abstractmethod
    async def list_issue_comments(self, repo: str, issue_number: int) -> list[SourceComment]:
        """List the comments of an issue in creation order."""
        pass
