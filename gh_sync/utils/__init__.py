"""Utility modules for shared functionality."""

from .constants import DEFAULT_TRACKING_LABEL, MIRRORED_COMMENT_MARKER
from .retry import retry_on_rate_limit

__all__ = [
    "DEFAULT_TRACKING_LABEL",
    "MIRRORED_COMMENT_MARKER",
    "retry_on_rate_limit",
]
