"""Contains aggregate results of a synchronization run."""

from collections import Counter
from typing import Any

from gh_sync.synchronize.models import SyncAction, SyncOutcome


class PullAllIssuesResult:
    """Collects the outcomes of a pull-all run as they are produced."""

    def __init__(self, repo: str, dry_run: bool, allow_existing: bool) -> None:
        """Initialize an empty result for a repository."""
        self.repo = repo
        self.dry_run = dry_run
        self.allow_existing = allow_existing
        self.outcomes: list[SyncOutcome] = []

    def add(self, outcome: SyncOutcome) -> None:
        """Record the outcome for one issue."""
        self.outcomes.append(outcome)

    @property
    def counts(self) -> dict[str, int]:
        """Number of outcomes per action, including actions that did not occur."""
        counter = Counter(outcome.action for outcome in self.outcomes)
        return {action.value: counter.get(action, 0) for action in SyncAction}

    @property
    def failures(self) -> list[SyncOutcome]:
        """Outcomes of issues that could not be synchronized."""
        return [outcome for outcome in self.outcomes if outcome.action == SyncAction.FAILED]

    @property
    def has_failures(self) -> bool:
        """Whether any issue failed."""
        return bool(self.failures)

    def to_report(self) -> dict[str, Any]:
        """Build a plain report suitable for dumping to YAML."""
        issues: list[dict[str, Any]] = []
        for outcome in self.outcomes:
            entry: dict[str, Any] = {"issue": outcome.reference, "action": outcome.action.value}
            if outcome.record_id is not None:
                entry["work_item_id"] = outcome.record_id
            if outcome.plan is not None:
                entry["decision"] = outcome.plan.decision.value
                if outcome.plan.status_transition is not None:
                    entry["new_state"] = outcome.plan.status_transition.to_state
                entry["pending_comments"] = len(outcome.plan.comment_actions)
            if outcome.error is not None:
                entry["error"] = {"kind": outcome.error.kind, "message": outcome.error.message}
            issues.append(entry)
        return {
            "repo": self.repo,
            "dry_run": self.dry_run,
            "allow_existing": self.allow_existing,
            "counts": self.counts,
            "issues": issues,
        }
