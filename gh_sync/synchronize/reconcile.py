"""Contains the reconciliation logic deciding how a GitHub issue maps onto a work item.

Everything in this module is free of I/O. The synchronization engine performs
all lookups, passes their results in, and applies the returned plan.
"""

import structlog

from gh_sync.synchronize.models import (
    CommentAction,
    ReconciliationPlan,
    RecordPayload,
    SourceComment,
    SourceIssue,
    StateMapping,
    StatusTransition,
    SyncDecision,
    TrackedComment,
    TrackedRecord,
)
from gh_sync.utils.templates import is_mirrored_comment

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def derive_state(issue: SourceIssue, state_mapping: StateMapping) -> str:
    """Return the work item state corresponding to the state of a GitHub issue."""
    if issue.is_closed:
        return state_mapping.closed_state
    return state_mapping.active_state


def decide_status_transition(issue: SourceIssue, current_state: str, state_mapping: StateMapping) -> StatusTransition | None:
    """Compare the state of a GitHub issue with a work item state and return the transition to apply, if any.

    Any terminal state counts as closed and any other state counts as open, so
    a work item that an editor moved from "New" to "Active" is left alone, and
    a closed issue is never re-closed on a work item that is already "Done".
    """
    record_is_closed = state_mapping.is_terminal(current_state)
    if issue.is_closed and not record_is_closed:
        return StatusTransition(from_state=current_state, to_state=state_mapping.closed_state)
    if not issue.is_closed and record_is_closed:
        logger.info(
            "GitHub issue was reopened, work item needs reactivation",
            issue=issue.reference,
            current_state=current_state,
            new_state=state_mapping.active_state,
        )
        return StatusTransition(from_state=current_state, to_state=state_mapping.active_state, reactivation=True)
    return None


def mirrored_comments(record_comments: list[TrackedComment]) -> list[TrackedComment]:
    """Return the work item comments that were mirrored from GitHub, in order."""
    return [comment for comment in record_comments if is_mirrored_comment(comment.text)]


def decide_comment_actions(issue_comments: list[SourceComment], record_comments: list[TrackedComment]) -> list[CommentAction]:
    """Return the GitHub comments that have not yet been mirrored onto the work item.

    Comments are append-only, so the n-th mirrored comment on the work item
    corresponds to the n-th comment on the issue. GitHub comment ids are not
    stored on the work item, which leaves position as the only reliable key.
    """
    already_mirrored = mirrored_comments(record_comments)
    for ordinal, mirrored in enumerate(already_mirrored[: len(issue_comments)]):
        source = issue_comments[ordinal]
        if source.body.strip() and source.body.strip() not in mirrored.text:
            logger.debug(
                "Mirrored comment text differs from GitHub comment at the same position",
                ordinal=ordinal,
                author=source.author,
            )
    if len(already_mirrored) > len(issue_comments):
        logger.warning(
            "Work item has more mirrored comments than the GitHub issue",
            mirrored_count=len(already_mirrored),
            issue_comment_count=len(issue_comments),
        )
    return [
        CommentAction(ordinal=ordinal, author=comment.author, body=comment.body)
        for ordinal, comment in enumerate(issue_comments)
        if ordinal >= len(already_mirrored)
    ]


def build_record_payload(issue: SourceIssue, state_mapping: StateMapping) -> RecordPayload:
    """Build the field values of a new work item for a GitHub issue.

    Work items are always created in the active state. Closed issues get an
    additional transition to the closed state once the work item exists.
    """
    return RecordPayload(
        title=issue.title,
        description=issue.body,
        state=state_mapping.active_state,
        linked_url=issue.url,
    )


def plan_reconciliation(
    issue: SourceIssue,
    existing: TrackedRecord | None,
    allow_existing: bool = False,
    state_mapping: StateMapping | None = None,
) -> ReconciliationPlan:
    """Compare a GitHub issue with its linked work item, and decide whether to create or update.

    Key is the issue URL stored in the work item link field. Title and
    description are only ever written on creation; afterwards they belong to
    the editors of the work item.
    """
    if state_mapping is None:
        state_mapping = StateMapping()

    if existing is None or allow_existing:
        if existing is not None:
            logger.warning(
                "Creating a duplicate work item because existing work items are allowed",
                issue=issue.reference,
                existing_work_item_id=existing.id,
            )
        else:
            logger.info("Work item not found for GitHub issue", issue=issue.reference)
        payload = build_record_payload(issue, state_mapping)
        transition = None
        if derive_state(issue, state_mapping) != payload.state:
            transition = StatusTransition(from_state=payload.state, to_state=derive_state(issue, state_mapping))
        return ReconciliationPlan(
            decision=SyncDecision.CREATE,
            issue_url=issue.url,
            payload=payload,
            status_transition=transition,
            comment_actions=decide_comment_actions(issue.comments, []),
        )

    transition = decide_status_transition(issue, existing.state, state_mapping)
    comment_actions = decide_comment_actions(issue.comments, existing.comments)
    plan = ReconciliationPlan(
        decision=SyncDecision.UPDATE,
        issue_url=issue.url,
        record_id=existing.id,
        status_transition=transition,
        comment_actions=comment_actions,
    )
    if plan.is_noop:
        logger.info("Work item is up to date", issue=issue.reference, work_item_id=existing.id)
    else:
        logger.info(
            "Work item needs to be updated",
            issue=issue.reference,
            work_item_id=existing.id,
            current_state=existing.state,
            new_state=transition.to_state if transition else existing.state,
            pending_comments=len(comment_actions),
        )
    return plan
