"""repo command: open PRs across the whole repository."""

from __future__ import annotations

import click

from prtriage_cli.render import console, render_groups, render_warnings
from prtriage_cli.runner import triage_repo
from prtriage_core.pipeline import select_repo
from prtriage_core.triage import TriageBucket, group_by_bucket


@click.command("repo")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Overrides config file.")
@click.option(
    "--include-general",
    is_flag=True,
    help="Also list the general Needs Review bucket, which is hidden by default.",
)
@click.pass_context
def repo_cmd(ctx, repo: str | None, include_general: bool):
    """Show every open org-member PR grouped by triage bucket.

    Approved community PRs still owned by a `community_review_teams` team are
    listed too. PRs with no single fast-track owner land in Needs Review,
    which is usually too long to be useful and is hidden unless asked for.
    """
    run, config = triage_repo(ctx, repo)
    selected = select_repo(run, config)
    render_warnings(run.warnings)

    if not selected:
        console.print("[yellow]No open pull requests.[/yellow]")
        return

    groups = group_by_bucket(selected, TriageBucket, key=lambda item: item.bucket)
    if not include_general:
        groups.pop(TriageBucket.NEEDS_REVIEW)

    render_groups(f"Open Pull Requests in {config['repo']}", groups, config["bot_login"], show_owners=include_general)
