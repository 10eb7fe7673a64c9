"""Contains utilities for rendering Jinja2 templates."""

from functools import lru_cache
from typing import Any

import jinja2
import structlog

from gh_sync.utils.constants import MIRRORED_COMMENT_MARKER, MIRRORED_COMMENT_TEMPLATE

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def construct_jinja2_environment() -> jinja2.Environment:
    """Construct a Jinja2 environment."""
    return jinja2.Environment(undefined=jinja2.StrictUndefined, keep_trailing_newline=True)


def construct_jinja2_template_from_string(template_string: str, environment: jinja2.Environment | None = None) -> jinja2.Template:
    """Construct a Jinja2 template from a string."""
    if environment is None:
        environment = construct_jinja2_environment()
    return environment.from_string(template_string)


def render_template(template: jinja2.Template, **context: Any) -> str:
    """Render a Jinja2 template, logging any undefined variables."""
    try:
        return template.render(**context)
    except jinja2.UndefinedError as exc:
        logger.error("Failed to render template", context_keys=sorted(context), error=str(exc))
        raise


@lru_cache(maxsize=1)
def mirrored_comment_template() -> jinja2.Template:
    """Return the template used to mirror GitHub comments onto work items."""
    return construct_jinja2_template_from_string(MIRRORED_COMMENT_TEMPLATE)


def render_mirrored_comment(author: str, body: str) -> str:
    """Render the text of a work item comment mirrored from a GitHub comment."""
    return render_template(mirrored_comment_template(), marker=MIRRORED_COMMENT_MARKER, author=author, body=body)


def is_mirrored_comment(text: str) -> bool:
    """Whether a work item comment was mirrored from GitHub."""
    return MIRRORED_COMMENT_MARKER in text
