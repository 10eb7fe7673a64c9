"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from gh_sync.configuration.driver import get_sync_config
from gh_sync.configuration.exceptions import ConfigurationError
from gh_sync.configuration.models import SyncConfig
from gh_sync.synchronize.driver import run_find_workflow, run_get_work_item_workflow, run_pull_all_workflow, run_pull_one_workflow
from gh_sync.synchronize.exceptions import SyncError
from gh_sync.synchronize.models import SyncAction, SyncOutcome, TrackedRecord
from gh_sync.utils.github import split_repository
from gh_sync.utils.logging import configure_logging

load_dotenv()

typer_app = typer.Typer(help="Pull GitHub issues into Azure DevOps work items.", pretty_exceptions_show_locals=False)

def validate_repository(value: str) -> str:
    """Reject repositories that are not in owner/repo form before any configuration is loaded."""
    try:
        split_repository(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return value


RepoArgument = Annotated[
    str, Argument(help="GitHub repository to pull issues from, e.g. microsoft/iqsharp.", callback=validate_repository)
]
IssueArgument = Annotated[int, Argument(help="Number of the GitHub issue.")]
DryRunOption = Annotated[bool, Option("--dry-run", help="Compute what would change without creating or updating any work item.")]
AllowExistingOption = Annotated[
    bool,
    Option("--allow-existing", help="Create a new work item even when one is already linked to the issue."),
]


@typer_app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug logging.")] = False,
    github_api_url: Annotated[str | None, Option(envvar="GITHUB_API_URL", help="GitHub API URL.")] = None,
    github_pat_token: Annotated[str | None, Option(envvar="GITHUB_PAT_TOKEN", help="GitHub Personal Access Token.")] = None,
    github_app_id: Annotated[int | None, Option(envvar="GITHUB_APP_ID", help="GitHub App ID.")] = None,
    github_app_private_key_path: Annotated[Path | None, Option(envvar="GITHUB_APP_PRIVATE_KEY_PATH", help="Path to GitHub App private key.")] = None,
    github_app_installation_id: Annotated[int | None, Option(envvar="GITHUB_APP_INSTALLATION_ID", help="GitHub App Installation ID.")] = None,
    ado_organization_url: Annotated[
        str | None, Option(envvar="ADO_ORGANIZATION_URL", help="Azure DevOps organization URL, e.g. https://dev.azure.com/org.")
    ] = None,
    ado_project: Annotated[str | None, Option(envvar="ADO_PROJECT", help="Azure DevOps project holding the work items.")] = None,
    ado_pat_token: Annotated[str | None, Option(envvar="ADO_PAT_TOKEN", help="Azure DevOps Personal Access Token.")] = None,
    tracking_label: Annotated[str | None, Option(envvar="TRACKING_LABEL", help="Label selecting the issues pulled by pull-all-gh.")] = None,
) -> None:
    """Store connection options for the selected command."""
    configure_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["config_options"] = {
        "debug": debug,
        "github_api_url": github_api_url,
        "github_pat_token": github_pat_token,
        "github_app_id": github_app_id,
        "github_app_private_key_path": github_app_private_key_path,
        "github_app_installation_id": github_app_installation_id,
        "ado_organization_url": ado_organization_url,
        "ado_project": ado_project,
        "ado_pat_token": ado_pat_token,
        "tracking_label": tracking_label,
    }


def load_config(ctx: typer.Context) -> SyncConfig:
    """Reconcile the stored options with the environment, exiting on invalid configuration."""
    try:
        return get_sync_config(**ctx.obj["config_options"])
    except ConfigurationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(1) from exc


def format_outcome(outcome: SyncOutcome) -> str:
    """Render a one-line description of an outcome."""
    line = f"{outcome.reference}: {outcome.action.value}"
    if outcome.record_id is not None:
        line += f" (work item {outcome.record_id})"
    plan = outcome.plan
    if plan is not None and outcome.action == SyncAction.SKIPPED:
        line += f" - would {plan.decision.value}"
        if plan.status_transition is not None:
            line += f", set state to {plan.status_transition.to_state}"
        line += f", append {len(plan.comment_actions)} comment(s)"
    if outcome.error is not None:
        line += f" - {outcome.error.kind}: {outcome.error.message}"
    return line


def format_work_item(record: TrackedRecord) -> str:
    """Render a text view of a work item."""
    lines = [
        f"Work item {record.id}: {record.title}",
        f"  State: {record.state}",
        f"  GitHub issue: {record.linked_url or '(none)'}",
        f"  Link: {record.url or '(unknown)'}",
        f"  Comments: {len(record.comments)}",
    ]
    for comment in record.comments:
        lines.append(f"    - {comment.author or 'unknown'}: {comment.text.splitlines()[0] if comment.text else ''}")
    return "\n".join(lines)


@typer_app.command(name="pull-gh")
def pull_issue_cli(
    ctx: typer.Context,
    repo: RepoArgument,
    issue: IssueArgument,
    dry_run: DryRunOption = False,
    allow_existing: AllowExistingOption = False,
) -> None:
    """Pull a single GitHub issue into Azure DevOps tracking."""
    config = load_config(ctx)
    try:
        outcome = asyncio.run(run_pull_one_workflow(config, repo, issue, dry_run=dry_run, allow_existing=allow_existing))
    except SyncError as exc:
        typer.echo(f"Failed to pull {repo}#{issue}: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(format_outcome(outcome))
    if outcome.action == SyncAction.FAILED:
        raise typer.Exit(1)


@typer_app.command(name="pull-all-gh")
def pull_all_issues_cli(
    ctx: typer.Context,
    repo: RepoArgument,
    dry_run: DryRunOption = False,
    allow_existing: AllowExistingOption = False,
    report_file: Annotated[Path | None, Option(envvar="REPORT_FILE", help="Write a YAML report of every outcome to this path.")] = None,
) -> None:
    """Pull every GitHub issue carrying the tracking label into Azure DevOps tracking."""
    config = load_config(ctx)
    typer.echo(f"Pulling issues labeled '{config.tracking_label}' from {repo}")
    try:
        result = asyncio.run(
            run_pull_all_workflow(
                config,
                repo,
                dry_run=dry_run,
                allow_existing=allow_existing,
                on_outcome=lambda outcome: typer.echo(format_outcome(outcome)),
                report_file=report_file,
            )
        )
    except SyncError as exc:
        typer.echo(f"Failed to pull issues from {repo}: {exc}", err=True)
        raise typer.Exit(1) from exc

    typer.echo("")
    typer.echo("Summary: " + ", ".join(f"{action} {count}" for action, count in result.counts.items()))
    if result.has_failures:
        typer.echo(f"{len(result.failures)} issue(s) failed to synchronize", err=True)
        raise typer.Exit(1)


@typer_app.command(name="find-ado")
def find_work_item_cli(ctx: typer.Context, repo: RepoArgument, issue: IssueArgument) -> None:
    """Show the Azure DevOps work item linked to a GitHub issue, if any."""
    config = load_config(ctx)
    try:
        record = asyncio.run(run_find_workflow(config, repo, issue))
    except SyncError as exc:
        typer.echo(f"Failed to look up {repo}#{issue}: {exc}", err=True)
        raise typer.Exit(1) from exc
    if record is None:
        typer.echo(f"No work item found for {repo}#{issue}.")
    else:
        typer.echo(f"Found existing work item: {record.url or record.id}")


@typer_app.command(name="get-ado")
def get_work_item_cli(ctx: typer.Context, work_item_id: Annotated[int, Argument(metavar="ID", help="Id of the work item.")]) -> None:
    """Show a text representation of an Azure DevOps work item."""
    config = load_config(ctx)
    try:
        record = asyncio.run(run_get_work_item_workflow(config, work_item_id))
    except SyncError as exc:
        typer.echo(f"Failed to get work item {work_item_id}: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(format_work_item(record))


if __name__ == "__main__":
    typer_app()
