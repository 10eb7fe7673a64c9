"""Contains unit tests for the utils.github module."""

import pytest

from gh_sync.utils.github import split_repository


def test_split_repository_valid() -> None:
    """Test splitting a valid owner/repo string."""
    assert split_repository("microsoft/iqsharp") == ("microsoft", "iqsharp")


def test_split_repository_strips_surrounding_slashes() -> None:
    """Test that leading and trailing slashes are ignored."""
    assert split_repository("/microsoft/qsharp-runtime/") == ("microsoft", "qsharp-runtime")


def test_split_repository_missing() -> None:
    """Test that ValueError is raised if repo is None."""
    with pytest.raises(ValueError, match="A GitHub repository in the format 'owner/repo' is required."):
        split_repository(None)


@pytest.mark.parametrize("repo", ["microsoft-iqsharp", "microsoft/iqsharp/extra", "microsoft//iqsharp", ""])
def test_split_repository_malformed(repo: str) -> None:
    """Test that ValueError is raised if repo is malformed."""
    with pytest.raises(ValueError):
        split_repository(repo)
