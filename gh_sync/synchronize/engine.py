"""Contains the synchronization engine that pulls GitHub issues into work items."""

import asyncio
import time
from typing import AsyncIterator

import structlog

from gh_sync.ado.abc import TrackerClientBase
from gh_sync.github.abc import ForgeClientBase
from gh_sync.synchronize.exceptions import AuthenticationError, SyncError
from gh_sync.synchronize.models import (
    ErrorDescriptor,
    ReconciliationPlan,
    SourceIssue,
    StateMapping,
    SyncAction,
    SyncDecision,
    SyncOutcome,
    TrackedRecord,
)
from gh_sync.synchronize.reconcile import plan_reconciliation
from gh_sync.utils.constants import DEFAULT_TRACKING_LABEL

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def describe_error(exc: Exception) -> ErrorDescriptor:
    """Build the error descriptor reported for a failed issue."""
    kind = exc.kind if isinstance(exc, SyncError) else type(exc).__name__
    return ErrorDescriptor(kind=kind, message=str(exc))


class Synchronizer:
    """Pulls GitHub issues into work items, one issue at a time.

    The tracker is re-queried by linked URL before every decision. Nothing
    learned about one issue is reused for another, so a work item created by
    somebody else between two calls is still found.
    """

    def __init__(
        self,
        forge: ForgeClientBase,
        tracker: TrackerClientBase,
        state_mapping: StateMapping | None = None,
        tracking_label: str = DEFAULT_TRACKING_LABEL,
    ) -> None:
        """Initialize the synchronizer with its forge and tracker clients."""
        self.forge = forge
        self.tracker = tracker
        self.state_mapping = state_mapping or StateMapping()
        self.tracking_label = tracking_label

    async def find_tracked(self, issue: SourceIssue) -> TrackedRecord | None:
        """Return the work item linked to a GitHub issue, or None.

        If several work items carry the same link (possible after pulls with
        existing work items allowed), the most recently created one wins.
        """
        records = await self.tracker.find_by_linked_url(issue.url)
        if not records:
            logger.debug("No work item linked to GitHub issue", issue=issue.reference)
            return None
        chosen = max(records, key=lambda record: record.id)
        if len(records) > 1:
            logger.warning(
                "Multiple work items linked to GitHub issue, using the most recently created",
                issue=issue.reference,
                work_item_ids=sorted(record.id for record in records),
                chosen_work_item_id=chosen.id,
            )
        return chosen

    async def find_linked(self, repo: str, issue_number: int) -> TrackedRecord | None:
        """Return the work item linked to a GitHub issue without changing anything."""
        issue = await self.forge.get_issue(repo, issue_number)
        return await self.find_tracked(issue)

    async def plan(self, issue: SourceIssue, allow_existing: bool = False) -> ReconciliationPlan:
        """Look up the linked work item and compute the reconciliation plan for an issue."""
        existing = None if allow_existing else await self.find_tracked(issue)
        return plan_reconciliation(issue, existing, allow_existing=allow_existing, state_mapping=self.state_mapping)

    async def execute(self, plan: ReconciliationPlan) -> int:
        """Apply a plan to the tracker and return the id of the work item it touched.

        State changes are applied before comments so that a closed issue never
        shows up as an active work item with closing comments already attached.
        """
        if plan.decision == SyncDecision.CREATE:
            if plan.payload is None:
                raise ValueError("A create plan must carry a payload")
            record = await self.tracker.create(plan.payload)
            record_id = record.id
        else:
            if plan.record_id is None:
                raise ValueError("An update plan must carry a work item id")
            record_id = plan.record_id

        if plan.status_transition is not None:
            await self.tracker.apply_update(record_id, plan.status_transition)
        for action in plan.comment_actions:
            await self.tracker.append_comment(record_id, action.author, action.body)
        return record_id

    async def execute_to_completion(self, plan: ReconciliationPlan, issue: SourceIssue) -> int:
        """Apply a plan, finishing it even if the calling task is cancelled part way through.

        The cancellation is re-raised once the plan has been fully applied.
        """
        task = asyncio.ensure_future(self.execute(plan))
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.warning("Cancelled while applying plan, finishing it before stopping", issue=issue.reference)
            while not task.done():
                try:
                    await asyncio.wait({task})
                except asyncio.CancelledError:
                    continue
            if not task.cancelled() and task.exception() is not None:
                logger.error("Failed to finish plan after cancellation", issue=issue.reference, error=str(task.exception()))
            raise

    async def with_comments(self, issue: SourceIssue) -> SourceIssue:
        """Return the issue with its comments, listing them from the forge if they were not fetched yet."""
        if issue.comment_count == 0 or issue.comments:
            return issue
        comments = await self.forge.list_issue_comments(issue.repository, issue.number)
        return issue.model_copy(update={"comments": comments})

    async def sync_issue(self, issue: SourceIssue, dry_run: bool = False, allow_existing: bool = False) -> SyncOutcome:
        """Synchronize an already-fetched issue, converting per-issue failures into a failed outcome."""
        plan: ReconciliationPlan | None = None
        try:
            issue = await self.with_comments(issue)
            plan = await self.plan(issue, allow_existing=allow_existing)
            if dry_run:
                logger.info(
                    "Dry run, not applying plan",
                    issue=issue.reference,
                    decision=plan.decision.value,
                    status_transition=plan.status_transition.to_state if plan.status_transition else None,
                    pending_comments=len(plan.comment_actions),
                )
                return SyncOutcome(
                    repository=issue.repository,
                    issue_number=issue.number,
                    action=SyncAction.SKIPPED,
                    plan=plan,
                    record_id=plan.record_id,
                )
            record_id = await self.execute_to_completion(plan, issue)
        except AuthenticationError:
            raise
        except Exception as exc:
            logger.error("Failed to synchronize GitHub issue", issue=issue.reference, error=str(exc), error_type=type(exc).__name__)
            return SyncOutcome(
                repository=issue.repository,
                issue_number=issue.number,
                action=SyncAction.FAILED,
                plan=plan,
                error=describe_error(exc),
            )

        action = SyncAction.CREATED if plan.decision == SyncDecision.CREATE else SyncAction.UPDATED
        logger.info("Synchronized GitHub issue", issue=issue.reference, action=action.value, work_item_id=record_id)
        return SyncOutcome(
            repository=issue.repository,
            issue_number=issue.number,
            action=action,
            plan=plan,
            record_id=record_id,
        )

    async def pull_one(self, repo: str, issue_number: int, dry_run: bool = False, allow_existing: bool = False) -> SyncOutcome:
        """Pull a single GitHub issue into tracking.

        A missing issue or invalid credentials raise; everything after the
        issue was fetched is reported through the returned outcome.
        """
        issue = await self.forge.get_issue(repo, issue_number)
        return await self.sync_issue(issue, dry_run=dry_run, allow_existing=allow_existing)

    async def pull_all(self, repo: str, dry_run: bool = False, allow_existing: bool = False) -> AsyncIterator[SyncOutcome]:
        """Pull every GitHub issue carrying the tracking label, yielding one outcome per issue.

        Issues are processed sequentially in the order GitHub lists them. An
        outcome is only yielded once its plan has been fully applied, so a
        consumer that stops iterating never leaves a work item half-updated.
        """
        start_time = time.time()
        logger.info("Pulling labeled GitHub issues", repo=repo, label=self.tracking_label, dry_run=dry_run, allow_existing=allow_existing)
        processed = 0
        async for issue in self.forge.list_labeled_issues(repo, self.tracking_label):
            outcome = await self.sync_issue(issue, dry_run=dry_run, allow_existing=allow_existing)
            processed += 1
            yield outcome
        logger.info("Pulled labeled GitHub issues", repo=repo, issue_count=processed, duration=round(time.time() - start_time, 2))
