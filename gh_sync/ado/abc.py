"""Base ABC for Azure DevOps (tracker) clients."""

from abc import ABC, abstractmethod

from gh_sync.synchronize.models import RecordPayload, StatusTransition, TrackedRecord


class TrackerClientBase(ABC):
    """Base ABC for clients that read and write work items."""

    @abstractmethod
    async def get_by_id(self, record_id: int) -> TrackedRecord:
        """Get a work item, including its comments."""
        pass

    @abstractmethod
    async def find_by_linked_url(self, url: str) -> list[TrackedRecord]:
        """Find every work item whose link field holds the given GitHub issue URL."""
        pass

    @abstractmethod
    async def create(self, payload: RecordPayload) -> TrackedRecord:
        """Create a work item."""
        pass

    @abstractmethod
    async def apply_update(self, record_id: int, transition: StatusTransition) -> TrackedRecord:
        """Apply a state transition to a work item."""
        pass

    @abstractmethod
    async def append_comment(self, record_id: int, author: str, body: str) -> None:
        """Append a comment mirrored from GitHub to a work item."""
        pass
