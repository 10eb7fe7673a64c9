"""Shared constants used across the application."""

# GitHub Constants
# ----------------

DEFAULT_GITHUB_API_URL = "https://api.github.com"
"""Default GitHub REST API URL. Override for GitHub Enterprise Server."""

DEFAULT_TRACKING_LABEL = "tracking"
"""Issues carrying this label are pulled by the pull-all-gh command."""

GITHUB_PAGE_SIZE = 100
"""Number of issues or comments requested per page from the GitHub API."""

# Azure DevOps Constants
# ----------------------

ADO_API_VERSION = "7.1"
"""Azure DevOps REST API version for work item and WIQL endpoints."""

ADO_COMMENTS_API_VERSION = "7.1-preview.4"
"""Azure DevOps REST API version for the work item comments endpoints."""

DEFAULT_ADO_WORK_ITEM_TYPE = "Bug"
"""Work item type created for GitHub issues."""

DEFAULT_ADO_LINK_FIELD = "Custom.GitHubURL"
"""Work item field holding the canonical URL of the linked GitHub issue."""

DEFAULT_ADO_ACTIVE_STATE = "Active"
"""Work item state used for open GitHub issues."""

DEFAULT_ADO_CLOSED_STATE = "Closed"
"""Work item state used for closed GitHub issues."""

DEFAULT_ADO_TERMINAL_STATES = ("Closed", "Done", "Resolved", "Removed")
"""Work item states considered equivalent to a closed GitHub issue."""

ADO_REQUEST_TIMEOUT = 30.0
"""Timeout in seconds for a single Azure DevOps request."""

# Comment Mirroring Constants
# ---------------------------

MIRRORED_COMMENT_MARKER = "[gh-sync]"
"""Marker identifying work item comments that were mirrored from GitHub."""

MIRRORED_COMMENT_TEMPLATE = "{{ marker }} Comment by @{{ author }} on GitHub:\n\n{{ body }}"
"""Jinja2 template used to render a mirrored GitHub comment."""
