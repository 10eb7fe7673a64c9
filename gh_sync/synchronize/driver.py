"""Orchestrates synchronization workflows from a reconciled configuration."""

import time
from collections.abc import Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import structlog

from gh_sync.ado.adapter import AzureDevOpsAdapter
from gh_sync.configuration.models import SyncConfig
from gh_sync.github.adapter import GitHubKitAdapter
from gh_sync.synchronize.engine import Synchronizer
from gh_sync.synchronize.models import SyncOutcome, TrackedRecord
from gh_sync.synchronize.results import PullAllIssuesResult
from gh_sync.utils.yaml import dump_yaml_to_file

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def create_tracker_adapter(config: SyncConfig) -> AzureDevOpsAdapter:
    """Create the Azure DevOps adapter described by a configuration."""
    return AzureDevOpsAdapter.create_adapter(
        organization_url=config.ado.organization_url,
        project=config.ado.project,
        ado_pat_token=config.ado.ado_pat_token,
        work_item_type=config.ado.work_item_type,
        link_field=config.ado.link_field,
    )


def create_forge_adapter(config: SyncConfig) -> GitHubKitAdapter:
    """Create the GitHub adapter described by a configuration."""
    return GitHubKitAdapter.create(
        github_auth_type=config.github.github_authentication_type,
        github_pat_token=config.github.github_pat_token,
        github_app_id=config.github.github_app_id,
        github_app_private_key_path=config.github.github_app_private_key_path,
        github_app_installation_id=config.github.github_app_installation_id,
        github_api_url=config.github.github_api_url,
    )


@asynccontextmanager
async def open_synchronizer(config: SyncConfig) -> AsyncIterator[Synchronizer]:
    """Yield a synchronizer wired to GitHub and Azure DevOps, closing its clients afterwards."""
    forge = create_forge_adapter(config)
    async with create_tracker_adapter(config) as tracker:
        yield Synchronizer(forge, tracker, state_mapping=config.state_mapping, tracking_label=config.tracking_label)


async def run_pull_one_workflow(config: SyncConfig, repo: str, issue_number: int, dry_run: bool, allow_existing: bool) -> SyncOutcome:
    """Run the pull-gh workflow for a single GitHub issue."""
    async with open_synchronizer(config) as synchronizer:
        return await synchronizer.pull_one(repo, issue_number, dry_run=dry_run, allow_existing=allow_existing)


async def run_pull_all_workflow(
    config: SyncConfig,
    repo: str,
    dry_run: bool,
    allow_existing: bool,
    on_outcome: Callable[[SyncOutcome], None] | None = None,
    report_file: Path | None = None,
) -> PullAllIssuesResult:
    """Run the pull-all-gh workflow, reporting each outcome as soon as it is available."""
    result = PullAllIssuesResult(repo=repo, dry_run=dry_run, allow_existing=allow_existing)
    start_time = time.time()
    try:
        async with open_synchronizer(config) as synchronizer:
            async for outcome in synchronizer.pull_all(repo, dry_run=dry_run, allow_existing=allow_existing):
                result.add(outcome)
                if on_outcome is not None:
                    on_outcome(outcome)
    finally:
        # Partial reports are still written when the run is aborted.
        if report_file is not None:
            dump_yaml_to_file(result.to_report(), report_file)
            logger.info("Wrote synchronization report", report_file=str(report_file), issue_count=len(result.outcomes))
    logger.info("Processed labeled issues", repo=repo, duration=round(time.time() - start_time, 2), **result.counts)
    return result


async def run_find_workflow(config: SyncConfig, repo: str, issue_number: int) -> TrackedRecord | None:
    """Run the find-ado workflow, returning the work item linked to a GitHub issue."""
    async with open_synchronizer(config) as synchronizer:
        return await synchronizer.find_linked(repo, issue_number)


async def run_get_work_item_workflow(config: SyncConfig, work_item_id: int) -> TrackedRecord:
    """Run the get-ado workflow, returning a single work item."""
    async with create_tracker_adapter(config) as tracker:
        return await tracker.get_by_id(work_item_id)
