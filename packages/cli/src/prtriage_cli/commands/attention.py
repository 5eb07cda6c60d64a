"""attention command: stalled community PRs."""

from __future__ import annotations

from collections import Counter

import click
from rich.table import Table

from prtriage_cli.render import console, render_groups, render_warnings
from prtriage_cli.runner import triage_repo
from prtriage_core.pipeline import select_attention
from prtriage_core.triage import AttentionBucket, group_by_bucket


@click.command("attention")
@click.option("--repo", default=None, help="GitHub repository (owner/name). Overrides config file.")
@click.option("--limit", type=int, default=None, help="How many of the oldest stalled PRs to list.")
@click.pass_context
def attention_cmd(ctx, repo: str | None, limit: int | None):
    """Show community PRs that have stalled, oldest first.

    A PR is listed when it is a draft idle for a week or more, has changes
    requested with no follow-up, is approved but unmerged, or has simply had
    no activity for `attention_days` business days.
    """
    if limit is not None:
        ctx.obj["config"]["attention_limit"] = limit

    run, config = triage_repo(ctx, repo)
    render_warnings(run.warnings)

    community = [item for item in run.classified if item.pr.is_community]
    stalled = [item for item in community if item.attention is not None]
    shown = select_attention(run, config)

    if not shown:
        console.print("[green]No community PRs need attention at this time.[/green]")
        return

    groups = group_by_bucket(shown, AttentionBucket, key=lambda item: item.attention)
    render_groups("Community PRs Needing Attention", groups, config["bot_login"])

    counts = Counter(item.attention for item in stalled)
    summary = Table(title="Summary", show_header=False)
    summary.add_column("What")
    summary.add_column("Count", justify="right")
    summary.add_row("Community PRs analyzed", str(len(community)))
    summary.add_row("PRs needing attention", str(len(stalled)))
    for bucket in AttentionBucket.ordered():
        summary.add_row(bucket.label, str(counts.get(bucket, 0)))
    summary.add_row("Showing oldest", str(len(shown)))
    console.print(summary)
